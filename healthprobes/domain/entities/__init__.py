"""Domain entities: probe results and metric snapshots."""
from .health_result import HealthResult, HealthCheckRegistration, HealthCheckContext
from .memory_metrics import MemoryMetrics
from .thread_pool_snapshot import ThreadPoolSnapshot
from .certificate_info import CertificateInfo

__all__ = [
    'HealthResult',
    'HealthCheckRegistration',
    'HealthCheckContext',
    'MemoryMetrics',
    'ThreadPoolSnapshot',
    'CertificateInfo',
]
