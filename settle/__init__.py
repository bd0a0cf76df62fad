from settle.version import VERSION
from settle.future import SettlableFuture, State, Rejection, resolved, rejected
from settle.core import _o, o, Return, InvalidYieldException, launch, log_exception, maybe_future
