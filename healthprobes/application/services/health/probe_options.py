from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

import httpx

from healthprobes.domain.errors import ConfigurationError
from .threshold_policy import ThresholdPair

DEFAULT_TLS_PORT = 443
SERVER_URLS_ENV = "HEALTH_SERVER_URLS"


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(name, f"expected an integer, got {raw!r}") from None


def default_port_from_env(env_var: str = SERVER_URLS_ENV) -> int:
    """Port of the first https URL in a semicolon-separated list, else 443.

    The list mirrors what a web host is told to listen on, e.g.
    ``http://localhost:5000;https://localhost:5001``.
    """
    urls = os.getenv(env_var, "")
    for raw in urls.split(";"):
        raw = raw.strip()
        if not raw:
            continue
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL:
            continue
        if url.scheme != "https":
            continue
        port = url.port or DEFAULT_TLS_PORT
        if port > 0:
            return port
    return DEFAULT_TLS_PORT


@dataclass(slots=True)
class MemoryProbeOptions:
    """Memory thresholds in megabytes."""
    warning_threshold_mb: int = 800
    critical_threshold_mb: int = 1024
    working_set_warning_mb: int = 1536
    working_set_critical_mb: int = 2048

    @property
    def allocated(self) -> ThresholdPair:
        return ThresholdPair(self.warning_threshold_mb, self.critical_threshold_mb)

    @property
    def working_set(self) -> ThresholdPair:
        return ThresholdPair(self.working_set_warning_mb, self.working_set_critical_mb)

    def validate(self) -> None:
        self.allocated.require_ascending(type(self).__name__, "Allocated memory")
        self.working_set.require_ascending(type(self).__name__, "Working set")

    @classmethod
    def from_env(cls) -> "MemoryProbeOptions":
        """Build options from HEALTH_MEMORY_* / HEALTH_WORKING_SET_* variables."""
        defaults = cls()
        return cls(
            warning_threshold_mb=_int("HEALTH_MEMORY_WARNING_MB", defaults.warning_threshold_mb),
            critical_threshold_mb=_int("HEALTH_MEMORY_CRITICAL_MB", defaults.critical_threshold_mb),
            working_set_warning_mb=_int("HEALTH_WORKING_SET_WARNING_MB", defaults.working_set_warning_mb),
            working_set_critical_mb=_int("HEALTH_WORKING_SET_CRITICAL_MB", defaults.working_set_critical_mb),
        )


@dataclass(slots=True)
class CertificateProbeOptions:
    """Target endpoint and expiry thresholds in days."""
    hostname: str
    port: int = field(default_factory=default_port_from_env)
    warning_threshold_days: int = 30
    critical_threshold_days: int = 10
    timeout_ms: int = 5000

    @property
    def thresholds(self) -> ThresholdPair:
        return ThresholdPair(self.warning_threshold_days, self.critical_threshold_days)

    def validate(self) -> None:
        name = type(self).__name__
        try:
            if not self.hostname or not str(self.hostname).strip():
                raise ConfigurationError(name, "Hostname must be specified")
            if self.port <= 0 or self.port > 65535:
                raise ConfigurationError(name, f"Port must be between 1 and 65535, got {self.port}")
            if self.warning_threshold_days <= self.critical_threshold_days:
                raise ConfigurationError(
                    name,
                    f"Warning threshold ({self.warning_threshold_days}) must be greater than "
                    f"critical threshold ({self.critical_threshold_days})",
                )
            if self.timeout_ms <= 0:
                raise ConfigurationError(name, f"Timeout must be greater than 0, got {self.timeout_ms}")
        except TypeError as e:
            raise ConfigurationError(name, f"Validation failed: {e}") from e

    @classmethod
    def from_env(cls, hostname: Optional[str] = None) -> "CertificateProbeOptions":
        """Build options from HEALTH_CERT_* variables."""
        return cls(
            hostname=hostname if hostname is not None else os.getenv("HEALTH_CERT_HOSTNAME", ""),
            port=_int("HEALTH_CERT_PORT", default_port_from_env()),
            warning_threshold_days=_int("HEALTH_CERT_WARNING_DAYS", 30),
            critical_threshold_days=_int("HEALTH_CERT_CRITICAL_DAYS", 10),
            timeout_ms=_int("HEALTH_CERT_TIMEOUT_MS", 5000),
        )
