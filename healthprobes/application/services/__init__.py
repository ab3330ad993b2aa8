"""Application services root exports."""
from .health import HealthManager, MemoryProbe, ThreadPoolProbe, CertificateProbe

__all__ = [
    "HealthManager",
    "MemoryProbe",
    "ThreadPoolProbe",
    "CertificateProbe",
]
