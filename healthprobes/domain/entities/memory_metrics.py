from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

ALLOCATED_BYTES_KEY = "allocated-bytes"
WORKING_SET_BYTES_KEY = "working-set-bytes"
PRIVATE_MEMORY_BYTES_KEY = "private-memory-bytes"
GEN0_COLLECTIONS_KEY = "gen0-collections"
GEN1_COLLECTIONS_KEY = "gen1-collections"
GEN2_COLLECTIONS_KEY = "gen2-collections"
HEAP_SIZE_BYTES_KEY = "heap-size-bytes"
COMMITTED_MEMORY_KEY = "committed-memory"
FRAGMENTED_MEMORY_KEY = "fragmented-memory"
MEMORY_LOAD_PERCENTAGE_KEY = "memory-load-percentage"
LARGE_OBJECT_HEAP_SIZE_KEY = "large-object-heap-size"


@dataclass(frozen=True, slots=True)
class MemoryMetrics:
    """Point-in-time memory counters for the current process."""
    allocated_bytes: int
    working_set_bytes: int
    private_bytes: int = 0
    gen0_collections: int = 0
    gen1_collections: int = 0
    gen2_collections: int = 0
    heap_size_bytes: int = 0
    committed_bytes: int = 0
    fragmented_bytes: int = 0
    total_available_bytes: int = 0

    @property
    def memory_load_percentage(self) -> float:
        if self.total_available_bytes <= 0:
            return 0.0
        return self.heap_size_bytes / self.total_available_bytes * 100

    @property
    def large_object_heap_bytes(self) -> int:
        return self.heap_size_bytes - self.fragmented_bytes

    def to_data(self) -> Dict[str, Any]:
        return {
            ALLOCATED_BYTES_KEY: self.allocated_bytes,
            WORKING_SET_BYTES_KEY: self.working_set_bytes,
            PRIVATE_MEMORY_BYTES_KEY: self.private_bytes,
            GEN0_COLLECTIONS_KEY: self.gen0_collections,
            GEN1_COLLECTIONS_KEY: self.gen1_collections,
            GEN2_COLLECTIONS_KEY: self.gen2_collections,
            HEAP_SIZE_BYTES_KEY: self.heap_size_bytes,
            COMMITTED_MEMORY_KEY: self.committed_bytes,
            FRAGMENTED_MEMORY_KEY: self.fragmented_bytes,
            MEMORY_LOAD_PERCENTAGE_KEY: self.memory_load_percentage,
            LARGE_OBJECT_HEAP_SIZE_KEY: self.large_object_heap_bytes,
        }
