"""Infrastructure layer - Runtime metric sources and TLS certificate retrieval."""
from .runtime import ProcessMemorySource, ManagedThreadPool, RuntimeThreadPools, RuntimeThreadPoolSource
from .tls import TlsCertificateSource

__all__ = [
    'ProcessMemorySource',
    'ManagedThreadPool',
    'RuntimeThreadPools',
    'RuntimeThreadPoolSource',
    'TlsCertificateSource',
]
