# The oroutine driver is based heavily on inlineCallbacks from Twisted.

import sys
import types
import logging
import traceback
import time
import inspect
import functools

from twisted.python.failure import Failure as TwistedFailure
from twisted.internet.defer import Deferred as TwistedDeferred

from settle.future import SettlableFuture, Rejection, resolved, rejected

logging.basicConfig(stream=sys.stderr,
                    format="%(message)s")
log = logging.getLogger("settle")

blocking_warn_threshold = 500 # ms
tracebacks_elide_internals = True

_internal_files = (__file__,
                   sys.modules[SettlableFuture.__module__].__file__)


class Return(object):
    def __init__(self, *args):
        # mimic the semantics of the return statement
        if len(args) == 0:
            self.value = None
        elif len(args) == 1:
            self.value = args[0]
        else:
            self.value = args

    def __repr__(self):
        return "<%s.%s object at 0x%x; value: %s>" % (self.__class__.__module__,
                                                      self.__class__.__name__,
                                                      id(self),
                                                      repr(self.value))


class InvalidYieldException(Exception):
    pass


def _as_exception(reason):
    if isinstance(reason, TwistedFailure):
        return _add_twisted_tb(reason)
    if isinstance(reason, BaseException):
        return reason
    return Rejection(reason)


def format_stack_lines(stack, elide_internals=None):
    if elide_internals is None:
        elide_internals = tracebacks_elide_internals
    eliding = False
    lines = []
    for file, line, context, code in stack:
        if file not in _internal_files or not elide_internals:
            eliding = False
            lines.append("  File %s, line %s, in %s\n    %s" %
                         (file, line, context, code))
        elif not eliding:
            eliding = True
            lines.append("  -- eliding settle internals --")
    return lines


def _elide_tb_lines(lines):
    eliding = False
    kept = []
    for line in lines:
        if line.startswith('  File "'):
            file = line.split('"')[1]
            if file in _internal_files:
                if not eliding:
                    eliding = True
                    kept.append("  -- eliding settle internals --")
                continue
            eliding = False
        elif eliding:
            continue
        kept.append(line)
    return kept


def format_tb(e, elide_internals=None):
    if elide_internals is None:
        elide_internals = tracebacks_elide_internals

    hops = e._settle['tracebacks']
    s = ""
    for i, (tb, stack) in enumerate(reversed(hops)):
        lines = tb.rstrip('\n').split('\n')

        first = lines[0] # "Traceback (most recent call last):"
        last = lines[-1] # Line describing the exception

        body = lines[1:-1]
        if elide_internals:
            body = _elide_tb_lines(body)

        # only the earliest hop shows how it was called in the first place
        if i + 1 == len(hops):
            body = format_stack_lines(stack, elide_internals) + body
        elif body:
            body = ["  -- resumed by a settled future --"] + body

        s += "\n" + '\n'.join(body)
    return first + s + "\n" + last


def _append_traceback(e, tb, stack):
    if not hasattr(e, "_settle"):
        e._settle = {'tracebacks': []}
    e._settle['tracebacks'].append((tb, stack))
    return e


def _add_settle_tb(e):
    tb = traceback.format_exc()
    stack = traceback.extract_stack()
    try:
        return _append_traceback(e, tb, stack)
    except AttributeError:
        # exceptions with __slots__ can't carry the extra attribute
        return e


def _add_twisted_tb(f):
    tb = f.getTraceback(elideFrameworkCode=tracebacks_elide_internals)
    try:
        return _append_traceback(f.value, tb, [])
    except AttributeError:
        return f.value


def _deferred_to_future(df):
    future = SettlableFuture()

    def failed(f):
        future.reject(_add_twisted_tb(f))

    df.addCallbacks(future.resolve, failed)
    return future


def _settle_chain(g, future, ok=True, result=None):
    # Already-settled futures yielded back to back would otherwise recurse
    # once per yield; this loop unfolds that recursion.

    while True:
        try:
            # Send the last result back as the result of the yield expression.
            start = time.time()
            try:
                if ok:
                    from_gen = g.send(result)
                else:
                    from_gen = g.throw(_as_exception(result))
            finally:
                duration = (time.time() - start) * 1000
                if duration > blocking_warn_threshold:
                    if inspect.isframe(g.gi_frame):
                        fi = inspect.getframeinfo(g.gi_frame)
                        log.warning("oroutine '%s' blocked for %dms before %s:%s",
                                    g.__name__, duration, fi.filename, fi.lineno)
                    else:
                        log.warning("oroutine '%s' blocked for %dms",
                                    g.__name__, duration)
        except StopIteration as e:
            # "return" statement (or fell off the end of the generator)
            from_gen = Return(e.value)
        except Exception as e:
            future.reject(_add_settle_tb(e))
            return future

        if isinstance(from_gen, Return):
            try:
                g.close()
            except Exception as e:
                future.reject(_add_settle_tb(e))
            else:
                future.resolve(from_gen.value)
            return future
        elif isinstance(from_gen, TwistedDeferred):
            from_gen = _deferred_to_future(from_gen)
        elif not isinstance(from_gen, SettlableFuture):
            ok = False
            result = InvalidYieldException("Unexpected value '%s' of type '%s' yielded from o-routine '%s'.  O-routines can only yield SettlableFuture, Deferred and Return types." % (from_gen, type(from_gen), g))
            continue

        with from_gen._lock:
            if from_gen.pending:
                def got_value(v):
                    _settle_chain(g, future, True, v)

                def got_reason(r):
                    _settle_chain(g, future, False, r)

                from_gen.add_callbacks(got_value, got_reason)
                return future

            ok = from_gen.fulfilled
            result = from_gen.value if ok else from_gen.reason


def maybe_future(f, *args, **kw):
    try:
        result = f(*args, **kw)
    except Exception as e:
        return rejected(_add_settle_tb(e))

    if isinstance(result, types.GeneratorType):
        return _settle_chain(result, SettlableFuture())
    elif isinstance(result, SettlableFuture):
        return result
    elif isinstance(result, TwistedDeferred):
        return _deferred_to_future(result)
    return resolved(result)


# @_o
def _o(f):
    """
    settle helps you write code that waits on SettlableFutures as if it
    were a regular sequential function.  For example::

        @_o
        def foo():
            result = yield make_some_request_returning_a_future()
            print(result)

    When you call anything that returns a SettlableFuture (or a Twisted
    Deferred), you can simply yield it; your generator is resumed when
    it settles.  A fulfilled value is sent in with 'send', a rejection
    reason is raised at the yield with 'throw'.  Reasons that aren't
    exceptions arrive wrapped in a Rejection.

    Calling the decorated function returns a SettlableFuture that
    fulfills with the generator's return value, given either by
    "yield Return(result)" or a plain "return result", and rejects
    with any exception the generator lets escape::

        @_o
        def foo():
            result = yield make_some_request_returning_a_future()
            if result == 'foo':
                # this will become the value of the future
                yield Return('success')
            else:
                # this will become its reason
                raise Exception('fail')

    Yielding anything other than a SettlableFuture, a Deferred or a
    Return raises InvalidYieldException inside the generator.
    """
    @functools.wraps(f)
    def unwind_generator(*args, **kwargs):
        return maybe_future(f, *args, **kwargs)
    return unwind_generator
o = _o


def log_exception(e=None, elide_internals=None):
    if e is None:
        e = sys.exc_info()[1]
        if e is None:
            return

    if hasattr(e, '_settle'):
        log.error("%s\n%s", str(e), format_tb(e, elide_internals=elide_internals))
    else:
        log.error("%s", str(e), exc_info=(type(e), e, e.__traceback__))


@_o
def launch(oroutine, *args, **kwargs):
    try:
        f = oroutine(*args, **kwargs)
        if not isinstance(f, (SettlableFuture, TwistedDeferred)):
            yield Return(f)

        r = yield f
        yield Return(r)
    except GeneratorExit:
        raise
    except Exception:
        log_exception()
