import settle
from settle import Return, InvalidYieldException, SettlableFuture

@settle.o
def square(x):
    yield Return(x*x)
    print("not reached")

@settle.o
def fail():
    raise Exception("boo")
    print((yield square(2)))

@settle.o
def invalid_yield():
    yield "this should fail"

@settle.o
def main():
    value = yield square(5)
    print(value)
    try:
        yield fail()
    except Exception as e:
        print("Caught exception:", type(e), str(e))

    try:
        yield invalid_yield()
    except InvalidYieldException as e:
        print("Caught exception:", type(e), str(e))
    else:
        assert False

    # settled later, by hand
    later = SettlableFuture()
    pending = square_of(later)
    later.resolve(7)
    print((yield pending))

@settle.o
def square_of(f):
    v = yield f
    yield Return(v * v)

settle.launch(main)
