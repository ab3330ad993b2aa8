from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.logger import StructuredLogger
from healthprobes.domain.entities import CertificateInfo, HealthCheckContext, HealthResult
from healthprobes.domain.entities.certificate_info import (
    DAYS_REMAINING_KEY,
    EXPIRY_DATE_KEY,
    HOSTNAME_KEY,
    PORT_KEY,
)
from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.errors import ArgumentError, OperationCancelledError, ProbeDisposedError
from healthprobes.domain.interfaces import CertificateSource, HealthProbe
from .probe_options import CertificateProbeOptions

LOCK_WAIT_S = 5.0

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CertificateProbe(HealthProbe):
    """Reports how many days remain before a TLS endpoint's certificate expires.

    At most one certificate fetch runs per probe. A caller that cannot get
    the lock within ``lock_wait_s`` gets a degraded result: the probe is
    busy, not broken.
    """

    def __init__(
        self,
        options: CertificateProbeOptions,
        logger: StructuredLogger,
        source: Optional[CertificateSource] = None,
        *,
        clock: Optional[Clock] = None,
        lock_wait_s: float = LOCK_WAIT_S,
    ) -> None:
        if options is None:
            raise ArgumentError("options")
        options.validate()
        self.options = options
        self.logger = logger
        if source is None:
            from healthprobes.infrastructure.tls import TlsCertificateSource

            source = TlsCertificateSource()
        self._source = source
        self._clock = clock or _utcnow
        self._lock_wait_s = lock_wait_s
        self._lock = asyncio.Lock()
        self._base_data: Mapping[str, Any] = MappingProxyType(
            {HOSTNAME_KEY: options.hostname, PORT_KEY: options.port}
        )
        self._closed = False

    @property
    def base_data(self) -> Mapping[str, Any]:
        return self._base_data

    async def check_health(
        self,
        context: HealthCheckContext,
        token: Optional[CancellationToken] = None,
    ) -> HealthResult:
        if self._closed:
            raise ProbeDisposedError(type(self).__name__)
        if context is None:
            raise ArgumentError("context")
        token = token or CancellationToken.none()
        hostname = self.options.hostname

        try:
            acquired = await token.guard(self._acquire_lock())
        except OperationCancelledError as e:
            self.logger.warning(
                lambda: "Certificate health check cancelled while waiting for the lock",
                extra={"probe": "certificate", "hostname": hostname},
            )
            return HealthResult(context.failure_status, "Certificate retrieval timed out", e, dict(self._base_data))
        if not acquired:
            self.logger.warning(
                lambda: "Health check timed out waiting for the certificate lock",
                extra={"probe": "certificate", "hostname": hostname, "lock_wait_s": self._lock_wait_s},
            )
            return HealthResult.degraded("Health check is already in progress")

        try:
            data: Dict[str, Any] = dict(self._base_data)
            try:
                certificate = await self._source.fetch(
                    hostname, self.options.port, self.options.timeout_ms, token
                )
                if certificate is None:
                    self.logger.error(
                        lambda: "Failed to retrieve SSL/TLS certificate",
                        extra={"probe": "certificate", "hostname": hostname, "port": self.options.port},
                    )
                    return HealthResult.unhealthy(f"Could not retrieve SSL/TLS certificate for {hostname}.", data)
                return self._evaluate(certificate, data)
            except (OperationCancelledError, asyncio.TimeoutError) as e:
                self.logger.error(
                    lambda: "Certificate retrieval timed out",
                    exc_info=True,
                    extra={"probe": "certificate", "hostname": hostname, "timeout_ms": self.options.timeout_ms},
                )
                return HealthResult(context.failure_status, "Certificate retrieval timed out", e, data)
            except OSError as e:
                self.logger.error(
                    lambda: "Network error occurred while retrieving certificate",
                    exc_info=True,
                    extra={"probe": "certificate", "hostname": hostname, "port": self.options.port},
                )
                return HealthResult(
                    context.failure_status, "Network error occurred while retrieving certificate", e, data
                )
            except Exception as e:
                self.logger.error(
                    lambda: "Unexpected error occurred during certificate health check",
                    exc_info=True,
                    extra={"probe": "certificate", "hostname": hostname},
                )
                return HealthResult(context.failure_status, "Unexpected error during certificate check", e, data)
        finally:
            self._lock.release()

    async def _acquire_lock(self) -> bool:
        """Wait up to ``lock_wait_s`` for the lock. False means another check holds it.

        ``Lock.acquire`` only marks the lock held when it returns, so a
        cancellation landing as the lock is handed over leaves it free.
        """
        try:
            async with asyncio.timeout(self._lock_wait_s):
                await self._lock.acquire()
        except TimeoutError:
            return False
        return True

    def _evaluate(self, certificate: CertificateInfo, data: Dict[str, Any]) -> HealthResult:
        opts = self.options
        now = self._clock()
        expiry = certificate.expiry_utc
        days_remaining = certificate.days_remaining(now)

        data[EXPIRY_DATE_KEY] = expiry
        data[DAYS_REMAINING_KEY] = days_remaining

        # Verification problems are logged only; status depends on expiry alone.
        problem = certificate.verify(now)
        if problem is not None:
            self.logger.warning(
                lambda: "SSL/TLS certificate failed verification",
                extra={"probe": "certificate", "hostname": opts.hostname, "reason": problem},
            )

        status = opts.thresholds.evaluate_descending(days_remaining)
        if status is HealthStatus.UNHEALTHY:
            self.logger.error(
                lambda: f"SSL/TLS certificate for {opts.hostname} expires in {days_remaining:,} days",
                extra={"probe": "certificate", "critical_threshold_days": opts.critical_threshold_days},
            )
        elif status is HealthStatus.DEGRADED:
            self.logger.warning(
                lambda: f"SSL/TLS certificate for {opts.hostname} expires in {days_remaining:,} days",
                extra={"probe": "certificate", "warning_threshold_days": opts.warning_threshold_days},
            )

        description = f"SSL/TLS certificate for {opts.hostname} expires in {days_remaining:,} days."
        return HealthResult(status, description, None, data)

    def close(self) -> None:
        self._closed = True
