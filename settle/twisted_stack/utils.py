from twisted.python.failure import Failure
from twisted.internet.defer import Deferred

from settle.core import _as_exception, _deferred_to_future


def future_to_df(future):
    df = Deferred()
    def call_deferred_back(v, df=df):
        df.callback(v)
    def call_deferred_err(r, df=df):
        e = _as_exception(r)
        df.errback(Failure(e, type(e), e.__traceback__))
    future.add_callbacks(call_deferred_back, call_deferred_err)
    return df


def df_to_future(df):
    return _deferred_to_future(df)
