from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pytest

from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.logger import StructuredLogger, get_logger
from healthprobes.domain.entities import (
    CertificateInfo,
    HealthCheckContext,
    MemoryMetrics,
    ThreadPoolSnapshot,
)
from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.interfaces import CertificateSource, MemoryMetricsSource, ThreadPoolMetricsSource

MB = 1024 * 1024
NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def logger() -> StructuredLogger:
    return get_logger("tests.healthprobes", service="test")


@pytest.fixture
def context() -> HealthCheckContext:
    return HealthCheckContext.for_probe("probe", HealthStatus.UNHEALTHY)


class StubMemorySource(MemoryMetricsSource):
    def __init__(self, allocated_mb: float = 100, working_set_mb: float = 200, error: Optional[Exception] = None):
        self.allocated_bytes = int(allocated_mb * MB)
        self.working_set_bytes = int(working_set_mb * MB)
        self.error = error
        self.calls = 0

    def collect(self) -> MemoryMetrics:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return MemoryMetrics(
            allocated_bytes=self.allocated_bytes,
            working_set_bytes=self.working_set_bytes,
            private_bytes=self.working_set_bytes,
            heap_size_bytes=self.working_set_bytes,
            total_available_bytes=16 * 1024 * MB,
        )


class StubThreadPoolSource(ThreadPoolMetricsSource):
    def __init__(self, snapshot: Optional[ThreadPoolSnapshot] = None, error: Optional[Exception] = None):
        self._snapshot = snapshot
        self.error = error

    def snapshot(self) -> ThreadPoolSnapshot:
        if self.error is not None:
            raise self.error
        return self._snapshot


class StubCertificateSource(CertificateSource):
    """Returns a certificate expiring ``days`` after ``NOW``, or runs ``behaviour``."""

    def __init__(
        self,
        days: Optional[float] = 90,
        error: Optional[Exception] = None,
        behaviour: Optional[Callable] = None,
    ):
        self.days = days
        self.error = error
        self.behaviour = behaviour
        self.calls: List[tuple] = []

    async def fetch(self, hostname: str, port: int, timeout_ms: int, token: CancellationToken):
        self.calls.append((hostname, port, timeout_ms))
        if self.behaviour is not None:
            return await self.behaviour(token)
        if self.error is not None:
            raise self.error
        if self.days is None:
            return None
        return CertificateInfo(
            hostname=hostname,
            port=port,
            not_after=NOW + timedelta(days=self.days),
            not_before=NOW - timedelta(days=365),
        )


@pytest.fixture
def clock():
    return lambda: NOW
