#!/usr/bin/env python3
"""
ScanRecon - Execution contexts for blocking scan work

The nmap invoker never waits on a process in the caller's own frame; it
submits the wait to an Executor. Production code uses a bounded thread pool,
tests use InlineExecutor to keep everything deterministic.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

from scanrecon.utils.constants import DEFAULT_THREADS, MAX_THREADS, MIN_THREADS


class InlineExecutor(Executor):
    """Runs submitted callables immediately in the calling thread."""

    def __init__(self) -> None:
        self._shutdown = False
        self._lock = threading.Lock()

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot schedule new futures after shutdown")
        future: Future = Future()
        if not future.set_running_or_notify_cancel():
            return future
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        with self._lock:
            self._shutdown = True


def clamp_threads(threads: Any) -> int:
    try:
        value = int(threads)
    except (TypeError, ValueError):
        return DEFAULT_THREADS
    return max(MIN_THREADS, min(MAX_THREADS, value))


def make_scan_pool(threads: Any = DEFAULT_THREADS) -> ThreadPoolExecutor:
    """Bounded worker pool shared by concurrent scan invocations."""
    return ThreadPoolExecutor(
        max_workers=clamp_threads(threads),
        thread_name_prefix="scanrecon-scan",
    )
