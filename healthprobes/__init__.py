"""
Health probes for a host application's diagnostics framework
=============================================================

Three probes share one contract and one result shape:

- MemoryProbe: allocated and working-set memory against MB thresholds
- ThreadPoolProbe: starvation when active threads exceed the pool minimum
- CertificateProbe: days until a TLS endpoint's certificate expires

Each returns a ``HealthResult`` (status, description, error, data) from
``await probe.check_health(context, token)``.
"""

__version__ = "1.0.0"

from .domain import (
    HealthStatus,
    HealthResult,
    HealthCheckRegistration,
    HealthCheckContext,
    ConfigurationError,
    ProbeDisposedError,
)

from .application.services.health import (
    MemoryProbe,
    MemoryProbeOptions,
    ThreadPoolProbe,
    CertificateProbe,
    CertificateProbeOptions,
    HealthManager,
)

from .core.cancellation import CancellationToken

__all__ = [
    # Version info
    '__version__',

    # Domain
    'HealthStatus',
    'HealthResult',
    'HealthCheckRegistration',
    'HealthCheckContext',
    'ConfigurationError',
    'ProbeDisposedError',

    # Probes
    'MemoryProbe',
    'MemoryProbeOptions',
    'ThreadPoolProbe',
    'CertificateProbe',
    'CertificateProbeOptions',
    'HealthManager',

    # Cancellation
    'CancellationToken',
]
