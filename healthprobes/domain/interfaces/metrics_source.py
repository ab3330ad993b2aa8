"""Metric source interfaces injected into probes."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from ..entities import CertificateInfo, MemoryMetrics, ThreadPoolSnapshot

if TYPE_CHECKING:
    from ...core.cancellation import CancellationToken


class MemoryMetricsSource(ABC):
    """Reads memory counters for the current process."""

    @abstractmethod
    def collect(self) -> MemoryMetrics:
        pass


class ThreadPoolMetricsSource(ABC):
    """Reads thread pool counters. Implementations must not mutate the pools."""

    @abstractmethod
    def snapshot(self) -> ThreadPoolSnapshot:
        pass


class CertificateSource(ABC):
    """Retrieves the certificate a TLS endpoint presents."""

    @abstractmethod
    async def fetch(
        self,
        hostname: str,
        port: int,
        timeout_ms: int,
        token: CancellationToken,
    ) -> Optional[CertificateInfo]:
        """Return the peer certificate, or None when the peer sent none.

        Raises ``OperationCancelledError`` when the timeout or the token fires,
        and ``OSError`` for network faults.
        """
        pass
