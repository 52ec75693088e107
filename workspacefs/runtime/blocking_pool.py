"""Dedicated worker pool for blocking file-system calls."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 8


class BlockingWorkPool:
    """Run blocking callables off the caller's thread.

    The executor is created on first use so constructing a pool is cheap.
    ``run`` waits for the result and re-raises the worker's exception
    unchanged; ``submit`` hands back the ``Future`` for callers that must not
    block (``asyncio.wrap_future`` accepts it).
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, thread_name_prefix: str = "workspacefs-io") -> None:
        self._max_workers = max_workers
        self._thread_name_prefix = thread_name_prefix
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._closed = False

    def _ensure_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._closed:
                raise RuntimeError("BlockingWorkPool is shut down")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix=self._thread_name_prefix,
                )
            return self._executor

    def submit(self, fn: Callable[..., T], /, *args: object, **kwargs: object) -> Future[T]:
        return self._ensure_executor().submit(fn, *args, **kwargs)

    def run(self, fn: Callable[..., T], /, *args: object, **kwargs: object) -> T:
        return self.submit(fn, *args, **kwargs).result()

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> "BlockingWorkPool":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.shutdown()


__all__ = [
    "DEFAULT_MAX_WORKERS",
    "BlockingWorkPool",
]
