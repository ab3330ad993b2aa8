"""Health status enumeration shared by every probe."""
from enum import Enum


class HealthStatus(Enum):
    """Tri-state probe outcome.

    Ordering follows severity:
    - healthy: metrics are below every warning threshold
    - degraded: at least one warning threshold crossed
    - unhealthy: a critical threshold crossed, or an operational failure
    """

    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"
    HEALTHY = "healthy"

    @property
    def severity(self) -> int:
        """Numeric severity (higher is worse)."""
        mapping = {
            "healthy": 0,
            "degraded": 1,
            "unhealthy": 2,
        }
        return mapping[self.value]

    @property
    def label(self) -> str:
        """Capitalised label for console output."""
        return self.value.capitalize()

    @classmethod
    def worst(cls, *statuses: "HealthStatus") -> "HealthStatus":
        """Return the most severe status, or HEALTHY when none are given."""
        if not statuses:
            return cls.HEALTHY
        return max(statuses, key=lambda s: s.severity)

    @classmethod
    def parse(cls, value: str) -> "HealthStatus":
        """Parse a case-insensitive status name."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown health status: {value!r}") from None
