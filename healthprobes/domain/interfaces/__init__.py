"""Domain interfaces."""
from .probe import HealthProbe
from .metrics_source import MemoryMetricsSource, ThreadPoolMetricsSource, CertificateSource

__all__ = [
    'HealthProbe',
    'MemoryMetricsSource',
    'ThreadPoolMetricsSource',
    'CertificateSource',
]
