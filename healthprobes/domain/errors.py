"""Error taxonomy for the health probes.

Configuration and programmer errors are raised; operational failures are
caught at the probe boundary and reported through a ``HealthResult``.
"""
from __future__ import annotations


class HealthProbeError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(HealthProbeError):
    """Probe options failed validation at construction time."""

    def __init__(self, options_name: str, reason: str) -> None:
        super().__init__(f"{options_name} is invalid: {reason}")
        self.options_name = options_name
        self.reason = reason


class ArgumentError(HealthProbeError, ValueError):
    """A required argument was missing."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Argument '{name}' must not be None")
        self.name = name


class ProbeDisposedError(HealthProbeError):
    """The probe was used after ``close()``."""

    def __init__(self, probe_name: str) -> None:
        super().__init__(f"Cannot access a closed probe: {probe_name}")
        self.probe_name = probe_name


class OperationCancelledError(HealthProbeError):
    """Cooperative cancellation was requested."""

    def __init__(self, message: str = "The operation was cancelled") -> None:
        super().__init__(message)
