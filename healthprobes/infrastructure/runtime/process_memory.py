"""Memory counters for the current process (psutil + gc + tracemalloc)."""
from __future__ import annotations

import gc
import tracemalloc
from typing import Optional

import psutil

from healthprobes.domain.entities import MemoryMetrics
from healthprobes.domain.interfaces import MemoryMetricsSource


def _collections(stats: list, generation: int) -> int:
    if generation < len(stats):
        return int(stats[generation].get("collections", 0))
    return 0


class ProcessMemorySource(MemoryMetricsSource):
    """Production memory source.

    allocated  -> bytes traced by tracemalloc while tracing, else unique set size
    working set -> resident set size
    private     -> unique set size (RSS where USS cannot be read)
    heap        -> resident set size; committed -> virtual memory size
    """

    def __init__(self, process: Optional[psutil.Process] = None) -> None:
        self._process = process

    @property
    def process(self) -> psutil.Process:
        if self._process is None:
            self._process = psutil.Process()
        return self._process

    def _unique_set_size(self, rss: int) -> int:
        try:
            return int(self.process.memory_full_info().uss)
        except (psutil.AccessDenied, AttributeError):
            return rss

    def collect(self) -> MemoryMetrics:
        info = self.process.memory_info()
        rss = int(info.rss)
        uss = self._unique_set_size(rss)
        if tracemalloc.is_tracing():
            allocated = int(tracemalloc.get_traced_memory()[0])
        else:
            allocated = uss
        stats = gc.get_stats()
        return MemoryMetrics(
            allocated_bytes=allocated,
            working_set_bytes=rss,
            private_bytes=uss,
            gen0_collections=_collections(stats, 0),
            gen1_collections=_collections(stats, 1),
            gen2_collections=_collections(stats, 2),
            heap_size_bytes=rss,
            committed_bytes=int(info.vms),
            fragmented_bytes=max(rss - allocated, 0),
            total_available_bytes=int(psutil.virtual_memory().total),
        )
