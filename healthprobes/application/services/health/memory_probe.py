from __future__ import annotations

import asyncio
from typing import Optional

from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.logger import StructuredLogger
from healthprobes.domain.entities import HealthCheckContext, HealthResult, MemoryMetrics
from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.errors import ArgumentError, OperationCancelledError, ProbeDisposedError
from healthprobes.domain.interfaces import HealthProbe, MemoryMetricsSource
from .probe_options import MemoryProbeOptions
from .threshold_policy import bytes_to_megabytes, megabytes_to_bytes, evaluate_ascending, worst_of

_PHRASES = {
    HealthStatus.UNHEALTHY: "Memory usage exceeds critical threshold!",
    HealthStatus.DEGRADED: "Memory usage is approaching critical levels!",
    HealthStatus.HEALTHY: "Memory usage is within normal range.",
}


class MemoryProbe(HealthProbe):
    """Compares allocated and working-set memory against MB thresholds."""

    def __init__(
        self,
        options: MemoryProbeOptions,
        logger: StructuredLogger,
        source: Optional[MemoryMetricsSource] = None,
    ) -> None:
        """Validate options up front; an invalid probe is never constructed."""
        if options is None:
            raise ArgumentError("options")
        options.validate()
        self.options = options
        self.logger = logger
        if source is None:
            from healthprobes.infrastructure.runtime import ProcessMemorySource

            source = ProcessMemorySource()
        self._source = source
        self._closed = False

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

        try:
            if token.is_cancellation_requested:
                return HealthResult(context.failure_status, "Health check was cancelled")
            metrics = await self._collect()
            token.raise_if_cancelled()
            status, description = self._evaluate(metrics)
            return HealthResult(status, description, None, metrics.to_data())
        except OperationCancelledError:
            return HealthResult(context.failure_status, "Health check was cancelled")
        except Exception as e:
            self.logger.error(lambda: "memory-check-failed", exc_info=True, extra={"probe": "memory"})
            return HealthResult(context.failure_status, "Memory health check failed", e)

    async def _collect(self) -> MemoryMetrics:
        # yield once so a synchronous caller never runs the collection inline
        await asyncio.sleep(0)
        return self._source.collect()

    def _evaluate(self, metrics: MemoryMetrics) -> tuple[HealthStatus, str]:
        opts = self.options
        allocated_status = evaluate_ascending(
            metrics.allocated_bytes,
            megabytes_to_bytes(opts.warning_threshold_mb),
            megabytes_to_bytes(opts.critical_threshold_mb),
        )
        working_set_status = evaluate_ascending(
            metrics.working_set_bytes,
            megabytes_to_bytes(opts.working_set_warning_mb),
            megabytes_to_bytes(opts.working_set_critical_mb),
        )
        status = worst_of(allocated_status, working_set_status)

        allocated_mb = bytes_to_megabytes(metrics.allocated_bytes)
        working_set_mb = bytes_to_megabytes(metrics.working_set_bytes)
        description = f"{_PHRASES[status]} Allocated: {allocated_mb}MB, Working Set: {working_set_mb}MB"

        if status is not HealthStatus.HEALTHY:
            log = self.logger.error if status is HealthStatus.UNHEALTHY else self.logger.warning
            log(
                lambda: _PHRASES[status],
                extra={
                    "probe": "memory",
                    "allocated_bytes": metrics.allocated_bytes,
                    "allocated_mb": allocated_mb,
                    "allocated_warning_mb": opts.warning_threshold_mb,
                    "allocated_critical_mb": opts.critical_threshold_mb,
                    "working_set_bytes": metrics.working_set_bytes,
                    "working_set_mb": working_set_mb,
                    "working_set_warning_mb": opts.working_set_warning_mb,
                    "working_set_critical_mb": opts.working_set_critical_mb,
                },
            )
        return status, description

    def close(self) -> None:
        self._closed = True
