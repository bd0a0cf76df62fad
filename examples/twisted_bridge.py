from twisted.internet import reactor, task

from settle import _o, launch
from settle.twisted_stack.utils import future_to_df


@_o
def slow_add(a, b):
    yield task.deferLater(reactor, 0.5, lambda: None)
    return a + b


@_o
def main():
    try:
        total = yield slow_add(2, 3)
        print("2 + 3 =", total)
    finally:
        reactor.stop()


reactor.callWhenRunning(lambda: future_to_df(launch(main)))
reactor.run()
