"""Retrieve a peer certificate over a raw TLS handshake."""
from __future__ import annotations

import asyncio
import ssl
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from cryptography import x509
from cryptography.exceptions import InvalidSignature

from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.logger import StructuredLogger, get_logger
from healthprobes.domain.entities import CertificateInfo
from healthprobes.domain.interfaces import CertificateSource


def inspection_context() -> ssl.SSLContext:
    """Client context that accepts any certificate.

    The probe reports on the certificate; trust is not enforced during the
    handshake so expired or self-signed certificates can still be read.
    """
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


@dataclass(frozen=True)
class X509CertificateInfo(CertificateInfo):
    certificate: Optional[x509.Certificate] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_der(cls, hostname: str, port: int, der: bytes) -> "X509CertificateInfo":
        cert = x509.load_der_x509_certificate(der)
        return cls(
            hostname=hostname,
            port=port,
            not_after=cert.not_valid_after_utc,
            not_before=cert.not_valid_before_utc,
            subject=cert.subject.rfc4514_string(),
            issuer=cert.issuer.rfc4514_string(),
            certificate=cert,
        )

    @property
    def self_issued(self) -> bool:
        return self.certificate is not None and self.certificate.issuer == self.certificate.subject

    def verify(self, now: Optional[datetime] = None) -> Optional[str]:
        """Validity window, then the signature of a self-issued certificate.

        Only the leaf is available after the handshake, so a CA-issued
        certificate is checked for its validity window alone.
        """
        problem = super().verify(now)
        if problem is not None or not self.self_issued:
            return problem
        try:
            self.certificate.verify_directly_issued_by(self.certificate)
        except (InvalidSignature, ValueError, TypeError) as e:
            return f"self-issued certificate has an invalid signature: {e}"
        return "certificate is self-signed and not anchored in a trusted root"


class TlsCertificateSource(CertificateSource):
    """Opens ``hostname:port``, completes a TLS handshake and reads the leaf certificate."""

    def __init__(
        self,
        context_factory: Callable[[], ssl.SSLContext] = inspection_context,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._context_factory = context_factory
        self.logger = logger or get_logger(__name__)

    async def fetch(
        self,
        hostname: str,
        port: int,
        timeout_ms: int,
        token: CancellationToken,
    ) -> Optional[CertificateInfo]:
        with token.linked(timeout_ms / 1000.0) as linked:
            return await linked.guard(self._handshake(hostname, port))

    async def _handshake(self, hostname: str, port: int) -> Optional[CertificateInfo]:
        self.logger.debug(lambda: "tls-handshake-start", extra={"hostname": hostname, "port": port})
        reader, writer = await asyncio.open_connection(
            hostname, port, ssl=self._context_factory(), server_hostname=hostname
        )
        try:
            ssl_object = writer.get_extra_info("ssl_object")
            der = ssl_object.getpeercert(binary_form=True) if ssl_object is not None else None
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                # the certificate is already in hand; an unclean TLS shutdown is not a probe failure
                self.logger.debug(lambda: f"tls-close-error {e}", extra={"hostname": hostname, "port": port})

        if not der:
            return None
        info = X509CertificateInfo.from_der(hostname, port, der)
        self.logger.debug(
            lambda: "tls-handshake-ok",
            extra={"hostname": hostname, "port": port, "subject": info.subject, "not_after": info.not_after},
        )
        return info
