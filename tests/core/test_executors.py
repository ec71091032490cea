#!/usr/bin/env python3
"""
ScanRecon - Tests for execution contexts.
"""

import pytest

from scanrecon.core.executors import InlineExecutor, clamp_threads, make_scan_pool
from scanrecon.utils.constants import DEFAULT_THREADS, MAX_THREADS, MIN_THREADS


def test_inline_executor_runs_immediately():
    executor = InlineExecutor()
    calls = []
    future = executor.submit(lambda x: calls.append(x) or x * 2, 21)
    assert calls == [21]
    assert future.done()
    assert future.result() == 42


def test_inline_executor_captures_exceptions():
    def boom():
        raise RuntimeError("nmap died")

    future = InlineExecutor().submit(boom)
    with pytest.raises(RuntimeError):
        future.result()


def test_inline_executor_refuses_after_shutdown():
    executor = InlineExecutor()
    executor.shutdown()
    with pytest.raises(RuntimeError):
        executor.submit(print)


@pytest.mark.parametrize(
    "value,expected",
    [(0, MIN_THREADS), (3, 3), (1000, MAX_THREADS), ("8", 8), (None, DEFAULT_THREADS), ("x", DEFAULT_THREADS)],
)
def test_clamp_threads(value, expected):
    assert clamp_threads(value) == expected


def test_make_scan_pool_is_bounded():
    with make_scan_pool(1000) as pool:
        assert pool._max_workers == MAX_THREADS
        assert pool.submit(sum, [1, 2]).result() == 3
