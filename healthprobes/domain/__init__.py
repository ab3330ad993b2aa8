"""Domain layer - Probe results, metric snapshots, interfaces and errors."""
from .enums import HealthStatus
from .entities import (
    HealthResult,
    HealthCheckRegistration,
    HealthCheckContext,
    MemoryMetrics,
    ThreadPoolSnapshot,
    CertificateInfo,
)
from .interfaces import HealthProbe, MemoryMetricsSource, ThreadPoolMetricsSource, CertificateSource
from .errors import (
    HealthProbeError,
    ConfigurationError,
    ArgumentError,
    ProbeDisposedError,
    OperationCancelledError,
)

__all__ = [
    # Enums
    'HealthStatus',
    # Entities
    'HealthResult',
    'HealthCheckRegistration',
    'HealthCheckContext',
    'MemoryMetrics',
    'ThreadPoolSnapshot',
    'CertificateInfo',
    # Interfaces
    'HealthProbe',
    'MemoryMetricsSource',
    'ThreadPoolMetricsSource',
    'CertificateSource',
    # Errors
    'HealthProbeError',
    'ConfigurationError',
    'ArgumentError',
    'ProbeDisposedError',
    'OperationCancelledError',
]
