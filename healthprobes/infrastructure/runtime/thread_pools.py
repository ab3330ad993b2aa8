"""Process thread pools with runtime-style sizing and usage counters.

The pools are owned by the application. ``set_min_threads`` and
``set_max_threads`` are the knobs an operator (or a test) turns; the thread
pool probe only ever reads them.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from healthprobes.config import settings
from healthprobes.domain.entities import ThreadPoolSnapshot
from healthprobes.domain.interfaces import ThreadPoolMetricsSource

logger = logging.getLogger(__name__)


class ManagedThreadPool(ThreadPoolExecutor):
    """``ThreadPoolExecutor`` that tracks how many of its threads are busy.

    The ceiling is owned here (``_ceiling``) and mirrored into the
    executor's ``_max_workers``, which CPython's ``ThreadPoolExecutor``
    reads each time it decides whether a submit starts a new thread. That
    attribute is private to ``concurrent.futures``; resizing relies on it.
    """

    def __init__(self, name: str, min_threads: int, max_threads: int) -> None:
        if max_threads < 1 or min_threads < 0 or min_threads > max_threads:
            raise ValueError(f"invalid sizing for {name}: min={min_threads}, max={max_threads}")
        super().__init__(max_workers=max_threads, thread_name_prefix=name)
        self.name = name
        self._min_threads = min_threads
        self._ceiling = max_threads
        self._busy = 0
        self._counter_lock = threading.Lock()

    @property
    def min_threads(self) -> int:
        return self._min_threads

    @property
    def max_threads(self) -> int:
        return self._ceiling

    @property
    def busy_threads(self) -> int:
        with self._counter_lock:
            return self._busy

    @property
    def available_threads(self) -> int:
        return max(0, self.max_threads - self.busy_threads)

    def set_min_threads(self, value: int) -> bool:
        """Change the reserve. Returns False and leaves sizing alone if invalid."""
        if value < 0 or value > self.max_threads:
            return False
        self._min_threads = value
        return True

    def set_max_threads(self, value: int) -> bool:
        """Change the ceiling. Existing threads are not stopped when it shrinks."""
        if value < 1 or value < self._min_threads:
            return False
        self._ceiling = value
        self._max_workers = value
        return True

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        return super().submit(self._tracked, fn, args, kwargs)

    def _tracked(self, fn: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
        with self._counter_lock:
            self._busy += 1
        try:
            return fn(*args, **kwargs)
        finally:
            with self._counter_lock:
                self._busy -= 1


class RuntimeThreadPools:
    """The worker pool (general work) and the completion pool (blocking I/O)."""

    def __init__(self, worker: ManagedThreadPool, completion: ManagedThreadPool) -> None:
        self.worker = worker
        self.completion = completion

    @classmethod
    def from_settings(cls) -> "RuntimeThreadPools":
        settings.validate()
        return cls(
            worker=ManagedThreadPool("worker", settings.WORKER_MIN_THREADS, settings.WORKER_MAX_THREADS),
            completion=ManagedThreadPool(
                "completion", settings.COMPLETION_MIN_THREADS, settings.COMPLETION_MAX_THREADS
            ),
        )

    def set_min_threads(self, worker: int, completion: int) -> bool:
        if worker < 0 or completion < 0 or worker > self.worker.max_threads or completion > self.completion.max_threads:
            return False
        self.worker.set_min_threads(worker)
        self.completion.set_min_threads(completion)
        return True

    def set_max_threads(self, worker: int, completion: int) -> bool:
        if worker < 1 or completion < 1 or worker < self.worker.min_threads or completion < self.completion.min_threads:
            return False
        self.worker.set_max_threads(worker)
        self.completion.set_max_threads(completion)
        return True

    def install_default_executor(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route ``run_in_executor(None, ...)`` and ``asyncio.to_thread`` through the completion pool."""
        loop = loop or asyncio.get_running_loop()
        loop.set_default_executor(self.completion)

    def shutdown(self, wait: bool = True) -> None:
        self.worker.shutdown(wait=wait)
        self.completion.shutdown(wait=wait)


_pools: Optional[RuntimeThreadPools] = None
_pools_lock = threading.Lock()


def runtime_thread_pools() -> RuntimeThreadPools:
    """Process-wide pools, created from settings on first use."""
    global _pools
    with _pools_lock:
        if _pools is None:
            _pools = RuntimeThreadPools.from_settings()
            logger.debug(
                "runtime thread pools created",
                extra={
                    "worker_min": _pools.worker.min_threads,
                    "worker_max": _pools.worker.max_threads,
                    "completion_min": _pools.completion.min_threads,
                    "completion_max": _pools.completion.max_threads,
                },
            )
        return _pools


class RuntimeThreadPoolSource(ThreadPoolMetricsSource):
    """Reads counters from a ``RuntimeThreadPools`` without changing it."""

    def __init__(self, pools: Optional[RuntimeThreadPools] = None) -> None:
        self._pools = pools

    @property
    def pools(self) -> RuntimeThreadPools:
        return self._pools or runtime_thread_pools()

    def snapshot(self) -> ThreadPoolSnapshot:
        pools = self.pools
        return ThreadPoolSnapshot(
            available_worker_threads=pools.worker.available_threads,
            min_worker_threads=pools.worker.min_threads,
            max_worker_threads=pools.worker.max_threads,
            available_completion_threads=pools.completion.available_threads,
            min_completion_threads=pools.completion.min_threads,
            max_completion_threads=pools.completion.max_threads,
        )
