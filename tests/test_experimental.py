import threading

import pytest

from settle import SettlableFuture, resolved, rejected
from settle.experimental import all_of, first_of


def test_all_of_collects_in_argument_order():
    a = SettlableFuture()
    b = SettlableFuture()
    f = all_of(a, b, resolved("c"))
    b.resolve("b")
    assert f.pending
    a.resolve("a")
    assert f.value == ["a", "b", "c"]


def test_all_of_rejects_with_first_reason():
    a = SettlableFuture()
    b = SettlableFuture()
    f = all_of(a, b)
    b.reject("first")
    a.reject("second")
    assert f.reason == "first"


def test_all_of_nothing():
    assert all_of().value == []


def test_first_of_takes_first_fulfillment():
    a = SettlableFuture()
    b = SettlableFuture()
    f = first_of(a, b)
    a.reject("ignored")
    assert f.pending
    b.resolve("b")
    a.resolve("late")
    assert f.value == (1, "b")


def test_first_of_rejects_when_all_reject():
    f = first_of(rejected("x"), rejected("y"))
    assert f.reason == "y"


def test_first_of_needs_arguments():
    with pytest.raises(ValueError):
        first_of()


def _settle_on_threads(futures, settle):
    barrier = threading.Barrier(len(futures))

    def run(i, f):
        barrier.wait()
        settle(i, f)

    threads = [threading.Thread(target=run, args=(i, f))
               for i, f in enumerate(futures)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)


def test_all_of_inputs_settled_on_different_threads():
    for _ in range(200):
        inputs = [SettlableFuture() for _ in range(8)]
        f = all_of(*inputs)
        _settle_on_threads(inputs, lambda i, x: x.resolve(i))
        assert f.value == list(range(8))


def test_first_of_inputs_rejected_on_different_threads():
    for _ in range(200):
        inputs = [SettlableFuture() for _ in range(8)]
        f = first_of(*inputs)
        _settle_on_threads(inputs, lambda i, x: x.reject(i))
        assert f.rejected
