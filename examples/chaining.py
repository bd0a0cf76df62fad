from settle import SettlableFuture


def doubled(v):
    return v * 2

def plus_one_later(v):
    return SettlableFuture(lambda resolve, reject: resolve(v + 1))

def report(label):
    def handler(v):
        print(label, v)
    return handler


f = SettlableFuture(lambda resolve, reject: resolve(5))
f.then(doubled).add_callback(report("doubled:"))

source = SettlableFuture()
flat = source.then(plus_one_later)
flat.add_callback(report("flattened:"))
flat.finally_(lambda: print("flattened future settled"))
source.resolve(1)

def boom(resolve, reject):
    raise ValueError("bad")

SettlableFuture(boom).catch(report("executor failed:"))

failing = SettlableFuture()
failing.then(doubled).then(doubled).catch(report("rejection forwarded:"))
failing.reject("boom")
