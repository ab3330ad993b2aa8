from .threshold_policy import (
    BYTES_PER_MB,
    ThresholdPair,
    bytes_to_megabytes,
    megabytes_to_bytes,
    evaluate_ascending,
    evaluate_descending,
    worst_of,
)
from .probe_options import MemoryProbeOptions, CertificateProbeOptions, default_port_from_env
from .memory_probe import MemoryProbe
from .thread_pool_probe import ThreadPoolProbe
from .certificate_probe import CertificateProbe
from .health_manager import (
    HealthManager,
    HealthReport,
    HealthReportEntry,
    build_default_registrations,
    certificate_check_timeout_s,
)

__all__ = [
    "BYTES_PER_MB",
    "ThresholdPair",
    "bytes_to_megabytes",
    "megabytes_to_bytes",
    "evaluate_ascending",
    "evaluate_descending",
    "worst_of",
    "MemoryProbeOptions",
    "CertificateProbeOptions",
    "default_port_from_env",
    "MemoryProbe",
    "ThreadPoolProbe",
    "CertificateProbe",
    "HealthManager",
    "HealthReport",
    "HealthReportEntry",
    "build_default_registrations",
    "certificate_check_timeout_s",
]
