from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Optional, TypeVar

_T = TypeVar("_T")

DEFAULT_POOL_THREADS = 8

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


class DeadlineExceeded(Exception):
    pass


def make_executor(max_workers: int = DEFAULT_POOL_THREADS, name: str = "assessment-io") -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix=name)


def _default_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = make_executor()
    return _executor


def call_with_deadline(
    fn: Callable[..., _T],
    *args: Any,
    timeout: Optional[float] = None,
    executor: Optional[ThreadPoolExecutor] = None,
) -> _T:
    """Run ``fn`` and give up waiting after ``timeout`` seconds.

    Without a positive timeout the call runs inline. Calls with a deadline run
    on ``executor``, or on a shared module pool when none is given. A timed-out
    call cannot be interrupted once started; it keeps its worker until it
    returns and its result is discarded.
    """
    if not timeout or timeout <= 0:
        return fn(*args)

    fut = (executor or _default_executor()).submit(fn, *args)
    try:
        return fut.result(timeout=timeout)
    except FutureTimeout as e:
        fut.cancel()
        raise DeadlineExceeded(f"{getattr(fn, '__qualname__', 'call')} exceeded {timeout}s") from e
