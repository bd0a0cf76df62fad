# A write-once holder for a value or a failure reason, with handlers
# that can be attached before or after it settles.  Nothing here runs
# asynchronously; whoever holds resolve/reject drives it.

import threading


class State(object):
    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'


class Rejection(Exception):
    """
    Raised in place of a rejection reason that isn't itself an
    exception, so it can be thrown into a generator or re-raised.
    """
    def __init__(self, reason):
        Exception.__init__(self, reason)
        self.reason = reason


def _check_callable(handler):
    if not callable(handler):
        raise TypeError("'%s' object is not callable" % type(handler).__name__)


class _Plain(object):
    def __init__(self, value):
        self.value = value


class _Nested(object):
    def __init__(self, future):
        self.future = future


def _classify(result):
    if isinstance(result, SettlableFuture):
        return _Nested(result)
    return _Plain(result)


class SettlableFuture(object):
    """
    Settled exactly once, by the first call to either resolve() or
    reject().  The executor, if given, is called right away with those
    two functions::

        f = SettlableFuture(lambda resolve, reject: resolve(5))
        f.then(lambda v: v * 2)   # a new future, fulfilled with 10

    Without an executor the future stays pending until somebody calls
    f.resolve() or f.reject() directly.

    Handlers attached while pending run in the order they were added,
    at the moment of settlement; handlers attached afterwards run
    immediately.  Exceptions raised by catch() and finally_() handlers
    are not caught here.

    Handlers run while the future holds its own lock.  Two futures
    settled on different threads whose handlers register on each other
    can deadlock on lock order.
    """

    def __init__(self, executor=None):
        self._lock = threading.RLock()
        self.state = State.PENDING
        self.value = None
        self.reason = None
        self._on_fulfilled = []
        self._on_rejected = []
        self._on_settled = None

        if executor is not None:
            try:
                executor(self.resolve, self.reject)
            except Exception as e:
                self.reject(e)

    def __repr__(self):
        if self.state == State.FULFILLED:
            detail = "value: %r" % (self.value,)
        elif self.state == State.REJECTED:
            detail = "reason: %r" % (self.reason,)
        else:
            detail = "pending"
        return "<%s.%s object at 0x%x; %s>" % (self.__class__.__module__,
                                              self.__class__.__name__,
                                              id(self),
                                              detail)

    @property
    def pending(self):
        return self.state == State.PENDING

    @property
    def fulfilled(self):
        return self.state == State.FULFILLED

    @property
    def rejected(self):
        return self.state == State.REJECTED

    @property
    def settled(self):
        return self.state != State.PENDING

    def resolve(self, value):
        self._settle(State.FULFILLED, value)

    def reject(self, reason):
        self._settle(State.REJECTED, reason)

    def _settle(self, state, result):
        with self._lock:
            if self.state != State.PENDING:
                return
            # value/reason first, so an unlocked reader never sees a
            # settled state without its result
            if state == State.FULFILLED:
                self.value = result
                handlers = self._on_fulfilled
            else:
                self.reason = result
                handlers = self._on_rejected
            self.state = state
            self._on_fulfilled = []
            self._on_rejected = []
            on_settled, self._on_settled = self._on_settled, None

            for handler in handlers:
                handler(result)
            if on_settled is not None:
                on_settled()

    def add_callbacks(self, on_fulfilled, on_rejected):
        # one handler per outcome, registered under a single state check
        _check_callable(on_fulfilled)
        _check_callable(on_rejected)
        with self._lock:
            if self.state == State.PENDING:
                self._on_fulfilled.append(on_fulfilled)
                self._on_rejected.append(on_rejected)
                return self
        if self.state == State.FULFILLED:
            on_fulfilled(self.value)
        else:
            on_rejected(self.reason)
        return self

    def then(self, on_fulfilled):
        _check_callable(on_fulfilled)
        derived = SettlableFuture()

        def transform(value):
            try:
                result = _classify(on_fulfilled(value))
            except Exception as e:
                derived.reject(e)
                return
            if isinstance(result, _Nested):
                result.future.add_callbacks(derived.resolve, derived.reject)
            else:
                derived.resolve(result.value)

        self.add_callbacks(transform, derived.reject)
        return derived

    def add_callback(self, on_fulfilled):
        _check_callable(on_fulfilled)
        with self._lock:
            if self.state == State.PENDING:
                self._on_fulfilled.append(on_fulfilled)
                return self
        if self.state == State.FULFILLED:
            on_fulfilled(self.value)
        return self

    def catch(self, on_rejected):
        _check_callable(on_rejected)
        with self._lock:
            if self.state == State.PENDING:
                self._on_rejected.append(on_rejected)
                return self
        if self.state == State.REJECTED:
            on_rejected(self.reason)
        return self

    def finally_(self, on_settled):
        _check_callable(on_settled)
        with self._lock:
            if self.state == State.PENDING:
                self._on_settled = on_settled
                return
        on_settled()


def resolved(value):
    f = SettlableFuture()
    f.resolve(value)
    return f


def rejected(reason):
    f = SettlableFuture()
    f.reject(reason)
    return f
