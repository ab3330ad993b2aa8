"""Two-tier threshold evaluation and unit conversion shared by the probes."""
from __future__ import annotations

import math
from dataclasses import dataclass

from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.errors import ConfigurationError

BYTES_PER_MB = 1024 * 1024


def bytes_to_megabytes(value_in_bytes: int) -> int:
    """Convert bytes to whole megabytes, rounding up.

    Rounding up means a reading just over a boundary is never shown below
    it: 838_860_801 bytes is 801MB, not 800MB.
    """
    return int(math.ceil(value_in_bytes / BYTES_PER_MB))


def megabytes_to_bytes(value_in_megabytes: int) -> int:
    return value_in_megabytes * BYTES_PER_MB


def evaluate_ascending(value: float, warning: float, critical: float) -> HealthStatus:
    """Higher is worse. Critical is checked first."""
    if value >= critical:
        return HealthStatus.UNHEALTHY
    if value >= warning:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


def evaluate_descending(value: float, warning: float, critical: float) -> HealthStatus:
    """Lower is worse (e.g. days until expiry). Critical is checked first."""
    if value <= critical:
        return HealthStatus.UNHEALTHY
    if value <= warning:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


def worst_of(*statuses: HealthStatus) -> HealthStatus:
    return HealthStatus.worst(*statuses)


@dataclass(frozen=True, slots=True)
class ThresholdPair:
    warning: int
    critical: int

    def require_ascending(self, options_name: str, label: str) -> None:
        if self.warning >= self.critical:
            raise ConfigurationError(
                options_name,
                f"{label} warning threshold ({self.warning}) must be less than critical threshold ({self.critical})",
            )

    def require_descending(self, options_name: str, label: str) -> None:
        if self.warning <= self.critical:
            raise ConfigurationError(
                options_name,
                f"{label} warning threshold ({self.warning}) must be greater than critical threshold ({self.critical})",
            )

    def evaluate_ascending(self, value: float) -> HealthStatus:
        return evaluate_ascending(value, self.warning, self.critical)

    def evaluate_descending(self, value: float) -> HealthStatus:
        return evaluate_descending(value, self.warning, self.critical)
