import psutil
import pytest

from healthprobes.domain.entities.memory_metrics import (
    ALLOCATED_BYTES_KEY,
    COMMITTED_MEMORY_KEY,
    FRAGMENTED_MEMORY_KEY,
    GEN0_COLLECTIONS_KEY,
    GEN1_COLLECTIONS_KEY,
    GEN2_COLLECTIONS_KEY,
    HEAP_SIZE_BYTES_KEY,
    LARGE_OBJECT_HEAP_SIZE_KEY,
    MEMORY_LOAD_PERCENTAGE_KEY,
    PRIVATE_MEMORY_BYTES_KEY,
    WORKING_SET_BYTES_KEY,
)
from healthprobes.domain.entities import MemoryMetrics
from healthprobes.infrastructure.runtime import ProcessMemorySource


def test_collects_current_process():
    metrics = ProcessMemorySource().collect()
    assert metrics.working_set_bytes == metrics.heap_size_bytes > 0
    assert metrics.allocated_bytes > 0
    assert metrics.total_available_bytes == psutil.virtual_memory().total
    assert 0 < metrics.memory_load_percentage < 100
    assert metrics.fragmented_bytes >= 0


def test_data_carries_every_key():
    data = ProcessMemorySource().collect().to_data()
    assert set(data) == {
        ALLOCATED_BYTES_KEY,
        WORKING_SET_BYTES_KEY,
        PRIVATE_MEMORY_BYTES_KEY,
        GEN0_COLLECTIONS_KEY,
        GEN1_COLLECTIONS_KEY,
        GEN2_COLLECTIONS_KEY,
        HEAP_SIZE_BYTES_KEY,
        COMMITTED_MEMORY_KEY,
        FRAGMENTED_MEMORY_KEY,
        MEMORY_LOAD_PERCENTAGE_KEY,
        LARGE_OBJECT_HEAP_SIZE_KEY,
    }


def test_memory_load_without_total_is_zero():
    metrics = MemoryMetrics(allocated_bytes=1, working_set_bytes=1, heap_size_bytes=10)
    assert metrics.memory_load_percentage == 0
    assert metrics.large_object_heap_bytes == 10


def test_memory_load_percentage():
    metrics = MemoryMetrics(
        allocated_bytes=1, working_set_bytes=1, heap_size_bytes=25, fragmented_bytes=5, total_available_bytes=100
    )
    assert metrics.memory_load_percentage == pytest.approx(25.0)
    assert metrics.large_object_heap_bytes == 20
