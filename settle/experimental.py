# -*- coding: utf-8 -*-
#
# Combinators over several futures at once.

import threading

from settle.future import SettlableFuture


def all_of(*futures):
    """
    Fulfills with the list of every future's value, in argument order,
    once all of them have fulfilled.  Rejects with the first reason.
    """
    def executor(resolve, reject):
        if not futures:
            resolve([])
            return
        results = [None] * len(futures)
        remaining = [len(futures)]
        lock = threading.Lock()
        for i, f in enumerate(futures):
            def got(value, i=i):
                with lock:
                    results[i] = value
                    remaining[0] -= 1
                    done = not remaining[0]
                if done:
                    resolve(results)
            f.add_callbacks(got, reject)
    return SettlableFuture(executor)


def first_of(*futures):
    """
    Fulfills with (index, value) of the first future to fulfill.  If
    every one of them rejects, rejects with the last reason.
    """
    if not futures:
        raise ValueError("first_of() needs at least one future")

    def executor(resolve, reject):
        remaining = [len(futures)]
        lock = threading.Lock()
        for i, f in enumerate(futures):
            def got(value, i=i):
                resolve((i, value))
            def failed(reason):
                with lock:
                    remaining[0] -= 1
                    done = not remaining[0]
                if done:
                    reject(reason)
            f.add_callbacks(got, failed)
    return SettlableFuture(executor)
