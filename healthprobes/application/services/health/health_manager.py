from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from healthprobes.config import settings
from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.context import scoped as log_context
from healthprobes.core.logging.logger import StructuredLogger
from healthprobes.domain.entities import HealthCheckContext, HealthCheckRegistration, HealthResult
from healthprobes.domain.enums import HealthStatus
from .certificate_probe import LOCK_WAIT_S, CertificateProbe
from .memory_probe import MemoryProbe
from .probe_options import CertificateProbeOptions, MemoryProbeOptions
from .thread_pool_probe import ThreadPoolProbe

ResultHook = Callable[[str, HealthResult], None]

# extra time a probe gets to turn a fired token into its own result
_TIMEOUT_GRACE_S = 0.25


def certificate_check_timeout_s(options: CertificateProbeOptions, lock_wait_s: float = LOCK_WAIT_S) -> float:
    """Host timeout for a certificate check.

    Covers the lock wait plus the fetch timeout, so a caller queued behind
    another check gets the probe's own 'in progress' result instead of
    being cut off by the host.
    """
    return max(settings.CERT_CHECK_TIMEOUT_S, lock_wait_s + options.timeout_ms / 1000.0 + 1.0)


@dataclass(slots=True)
class HealthReportEntry:
    result: HealthResult
    duration_ms: int
    tags: tuple = ()


@dataclass(slots=True)
class HealthReport:
    """Results of one pass over the registered probes."""
    entries: Dict[str, HealthReportEntry] = field(default_factory=dict)
    total_duration_ms: int = 0

    @property
    def status(self) -> HealthStatus:
        return HealthStatus.worst(*(e.result.status for e in self.entries.values()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "total_duration_ms": self.total_duration_ms,
            "entries": {
                name: {**e.result.to_dict(), "duration_ms": e.duration_ms, "tags": list(e.tags)}
                for name, e in self.entries.items()
            },
        }


class HealthManager:
    """Runs registered probes concurrently, each under its own timeout."""

    def __init__(
        self,
        registrations: Iterable[HealthCheckRegistration],
        logger: StructuredLogger,
        *,
        result_hook: Optional[ResultHook] = None,
    ) -> None:
        self.registrations: List[HealthCheckRegistration] = list(registrations)
        names = [r.name for r in self.registrations]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate health check names: {names}")
        self.logger = logger
        self.result_hook = result_hook

    def select(self, tags: Optional[Iterable[str]] = None) -> List[HealthCheckRegistration]:
        if not tags:
            return list(self.registrations)
        wanted = set(tags)
        return [r for r in self.registrations if wanted.intersection(r.tags)]

    async def check_one(
        self,
        registration: HealthCheckRegistration,
        token: Optional[CancellationToken] = None,
    ) -> HealthReportEntry:
        """Run one probe. Always returns an entry, whatever the probe does."""
        token = token or CancellationToken.none()
        ctx = HealthCheckContext(registration)
        start = time.perf_counter()
        with log_context(check=registration.name), token.linked(registration.timeout_s) as linked:
            try:
                probe = registration.factory()
                call = probe.check_health(ctx, linked)
                if registration.timeout_s is not None:
                    result = await asyncio.wait_for(call, timeout=registration.timeout_s + _TIMEOUT_GRACE_S)
                else:
                    result = await call
            except asyncio.TimeoutError as e:
                self.logger.error(
                    lambda: "health-check-timeout",
                    extra={"check": registration.name, "timeout_s": registration.timeout_s},
                )
                result = HealthResult(registration.failure_status, "A timeout occurred while running check", e)
            except Exception as e:
                self.logger.error(lambda: "health-check-exception", exc_info=True, extra={"check": registration.name})
                result = HealthResult(registration.failure_status, str(e) or type(e).__name__, e)
        duration_ms = int((time.perf_counter() - start) * 1000.0)
        self.logger.debug(
            lambda: "health-check-done",
            extra={"check": registration.name, "status": result.status.value, "execution_time_ms": duration_ms},
        )
        self._emit(registration.name, result)
        return HealthReportEntry(result=result, duration_ms=duration_ms, tags=tuple(registration.tags))

    async def check_all(
        self,
        *,
        tags: Optional[Iterable[str]] = None,
        token: Optional[CancellationToken] = None,
    ) -> HealthReport:
        selected = self.select(tags)
        start = time.perf_counter()
        entries = await asyncio.gather(*(self.check_one(r, token) for r in selected))
        report = HealthReport(
            entries={r.name: e for r, e in zip(selected, entries)},
            total_duration_ms=int((time.perf_counter() - start) * 1000.0),
        )
        return report

    def _emit(self, name: str, result: HealthResult) -> None:
        if not self.result_hook:
            return
        try:
            self.result_hook(name, result)
        except Exception:
            self.logger.warning(lambda: "result-hook-failed", exc_info=True, extra={"check": name})


def build_default_registrations(
    logger: StructuredLogger,
    *,
    memory_options: Optional[MemoryProbeOptions] = None,
    certificate_options: Optional[CertificateProbeOptions] = None,
) -> List[HealthCheckRegistration]:
    """Memory, certificate (when a hostname is configured) and thread pool checks.

    Probe instances are created once here; the certificate probe's lock only
    serialises calls made against the same instance.
    """
    memory = MemoryProbe(memory_options or MemoryProbeOptions.from_env(), logger.child("memory"))
    registrations = [
        HealthCheckRegistration(
            name="memory",
            factory=lambda: memory,
            failure_status=HealthStatus.UNHEALTHY,
            tags=("system",),
            timeout_s=settings.MEMORY_CHECK_TIMEOUT_S,
        ),
    ]

    cert_options = certificate_options
    if cert_options is None and settings.CERT_HOSTNAME:
        cert_options = CertificateProbeOptions.from_env(settings.CERT_HOSTNAME)
    if cert_options is not None:
        certificate = CertificateProbe(cert_options, logger.child("certificate"))
        registrations.append(
            HealthCheckRegistration(
                name="certificate",
                factory=lambda: certificate,
                failure_status=HealthStatus.UNHEALTHY,
                tags=("security",),
                timeout_s=certificate_check_timeout_s(cert_options),
            )
        )

    thread_pool = ThreadPoolProbe(logger.child("thread_pool"))
    registrations.append(
        HealthCheckRegistration(
            name="thread_pool",
            factory=lambda: thread_pool,
            failure_status=HealthStatus.UNHEALTHY,
            tags=("system",),
            timeout_s=settings.THREAD_POOL_CHECK_TIMEOUT_S,
        )
    )
    return registrations
