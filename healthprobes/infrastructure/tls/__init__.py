"""TLS certificate retrieval."""
from .certificate_source import TlsCertificateSource, X509CertificateInfo, inspection_context

__all__ = [
    'TlsCertificateSource',
    'X509CertificateInfo',
    'inspection_context',
]
