from settle import _o, launch, SettlableFuture

gate = SettlableFuture()

def die():
  raise Exception("boom")

@_o
def fifth():
  yield gate
  die()

def fourth():
  return fifth()

@_o
def third():
  yield fourth()

def second():
  return third()

@_o
def first():
  yield second()

launch(first)
gate.resolve(None)
