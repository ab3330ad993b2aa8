from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

MIN_WORKER_THREADS_KEY = "min-worker-threads"
MAX_WORKER_THREADS_KEY = "max-worker-threads"
AVAILABLE_WORKER_THREADS_KEY = "available-worker-threads"
ACTIVE_WORKER_THREADS_KEY = "active-worker-threads"
MIN_COMPLETION_THREADS_KEY = "min-completion-threads"
MAX_COMPLETION_THREADS_KEY = "max-completion-threads"
AVAILABLE_COMPLETION_THREADS_KEY = "available-completion-threads"
ACTIVE_COMPLETION_THREADS_KEY = "active-completion-threads"


@dataclass(frozen=True, slots=True)
class ThreadPoolSnapshot:
    """Counters for the worker and completion thread pools."""
    available_worker_threads: int
    min_worker_threads: int
    max_worker_threads: int
    available_completion_threads: int
    min_completion_threads: int
    max_completion_threads: int

    @property
    def active_worker_threads(self) -> int:
        return self.max_worker_threads - self.available_worker_threads

    @property
    def active_completion_threads(self) -> int:
        return self.max_completion_threads - self.available_completion_threads

    @property
    def worker_starved(self) -> bool:
        return self.active_worker_threads > self.min_worker_threads

    @property
    def completion_starved(self) -> bool:
        return self.active_completion_threads > self.min_completion_threads

    def to_data(self) -> Dict[str, Any]:
        return {
            AVAILABLE_WORKER_THREADS_KEY: self.available_worker_threads,
            AVAILABLE_COMPLETION_THREADS_KEY: self.available_completion_threads,
            MIN_WORKER_THREADS_KEY: self.min_worker_threads,
            MIN_COMPLETION_THREADS_KEY: self.min_completion_threads,
            MAX_WORKER_THREADS_KEY: self.max_worker_threads,
            MAX_COMPLETION_THREADS_KEY: self.max_completion_threads,
            ACTIVE_WORKER_THREADS_KEY: self.active_worker_threads,
            ACTIVE_COMPLETION_THREADS_KEY: self.active_completion_threads,
        }

    def describe(self) -> str:
        return (
            f"Min Worker Threads: {self.min_worker_threads}, Min Completion Threads: {self.min_completion_threads}, "
            f"Max Worker Threads: {self.max_worker_threads}, Max Completion Threads: {self.max_completion_threads}, "
            f"Available Worker Threads: {self.available_worker_threads}, Available Completion Threads: {self.available_completion_threads}, "
            f"Active Worker Threads: {self.active_worker_threads}, Active Completion Threads: {self.active_completion_threads}"
        )
