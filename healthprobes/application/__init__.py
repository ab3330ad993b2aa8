"""Application layer - Probes and the health manager."""
from .services import HealthManager, MemoryProbe, ThreadPoolProbe, CertificateProbe

__all__ = [
    'HealthManager',
    'MemoryProbe',
    'ThreadPoolProbe',
    'CertificateProbe',
]
