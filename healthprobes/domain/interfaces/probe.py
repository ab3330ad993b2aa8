"""Probe contract called by the host."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from ..entities import HealthCheckContext, HealthResult

if TYPE_CHECKING:
    from ...core.cancellation import CancellationToken


class HealthProbe(ABC):
    """A self-contained health evaluation unit."""

    @abstractmethod
    async def check_health(
        self,
        context: HealthCheckContext,
        token: Optional[CancellationToken] = None,
    ) -> HealthResult:
        """Evaluate health now. Never raises for operational failures."""
        pass

    def close(self) -> None:
        """Release resources held by the probe."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
