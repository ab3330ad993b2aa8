from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from ..enums import HealthStatus

if TYPE_CHECKING:
    from ..interfaces import HealthProbe


@dataclass(slots=True)
class HealthResult:
    """Outcome of a single probe invocation."""
    status: HealthStatus
    description: str
    error: Optional[BaseException] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def healthy(cls, description: str, data: Optional[Dict[str, Any]] = None) -> "HealthResult":
        return cls(HealthStatus.HEALTHY, description, None, dict(data or {}))

    @classmethod
    def degraded(cls, description: str, data: Optional[Dict[str, Any]] = None, error: Optional[BaseException] = None) -> "HealthResult":
        return cls(HealthStatus.DEGRADED, description, error, dict(data or {}))

    @classmethod
    def unhealthy(cls, description: str, data: Optional[Dict[str, Any]] = None, error: Optional[BaseException] = None) -> "HealthResult":
        return cls(HealthStatus.UNHEALTHY, description, error, dict(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "description": self.description,
            "error": None if self.error is None else f"{type(self.error).__name__}: {self.error}",
            "data": {k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in self.data.items()},
        }


@dataclass(slots=True)
class HealthCheckRegistration:
    """How the host registered a probe.

    ``failure_status`` is reported whenever the probe fails operationally
    (network fault, unexpected exception, cancellation) rather than because
    a metric crossed a threshold.
    """
    name: str
    factory: Callable[[], "HealthProbe"]
    failure_status: HealthStatus = HealthStatus.UNHEALTHY
    tags: Tuple[str, ...] = ()
    timeout_s: Optional[float] = None


@dataclass(slots=True)
class HealthCheckContext:
    registration: HealthCheckRegistration

    @property
    def failure_status(self) -> HealthStatus:
        return self.registration.failure_status

    @classmethod
    def for_probe(cls, name: str, failure_status: HealthStatus = HealthStatus.UNHEALTHY) -> "HealthCheckContext":
        """Context for a probe invoked outside a ``HealthManager``."""
        def _unbound() -> "HealthProbe":
            raise LookupError(f"No factory registered for {name}")

        return cls(HealthCheckRegistration(name=name, factory=_unbound, failure_status=failure_status))
