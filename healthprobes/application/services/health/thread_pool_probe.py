from __future__ import annotations

from typing import Optional

from healthprobes.core.cancellation import CancellationToken
from healthprobes.core.logging.logger import StructuredLogger
from healthprobes.domain.entities import HealthCheckContext, HealthResult
from healthprobes.domain.errors import ArgumentError
from healthprobes.domain.interfaces import HealthProbe, ThreadPoolMetricsSource


class ThreadPoolProbe(HealthProbe):
    """Flags starvation as soon as active threads exceed a pool's minimum.

    The thresholds are the pools' own minimum thread counts, read on every
    call, so resizing the pools is reflected by the next check.
    """

    def __init__(self, logger: StructuredLogger, source: Optional[ThreadPoolMetricsSource] = None) -> None:
        self.logger = logger
        if source is None:
            from healthprobes.infrastructure.runtime import RuntimeThreadPoolSource

            source = RuntimeThreadPoolSource()
        self._source = source

    async def check_health(
        self,
        context: HealthCheckContext,
        token: Optional[CancellationToken] = None,
    ) -> HealthResult:
        if context is None:
            raise ArgumentError("context")
        try:
            snapshot = self._source.snapshot()
            data = snapshot.to_data()
            metrics = snapshot.describe()

            if snapshot.worker_starved:
                self.logger.critical(
                    lambda: "Thread pool worker thread starvation detected",
                    extra={
                        "probe": "thread_pool",
                        "active_worker_threads": snapshot.active_worker_threads,
                        "min_worker_threads": snapshot.min_worker_threads,
                        "excess_worker_threads": snapshot.active_worker_threads - snapshot.min_worker_threads,
                    },
                )
            if snapshot.completion_starved:
                self.logger.critical(
                    lambda: "Thread pool completion thread starvation detected",
                    extra={
                        "probe": "thread_pool",
                        "active_completion_threads": snapshot.active_completion_threads,
                        "min_completion_threads": snapshot.min_completion_threads,
                        "excess_completion_threads": snapshot.active_completion_threads - snapshot.min_completion_threads,
                    },
                )

            if snapshot.worker_starved or snapshot.completion_starved:
                return HealthResult.unhealthy(f"Thread Pool Starvation Detected: {metrics}", data)
            return HealthResult.healthy(f"Thread Pool is healthy: {metrics}", data)
        except Exception as e:
            self.logger.error(
                lambda: "An error occurred while checking the thread pool status.",
                exc_info=True,
                extra={"probe": "thread_pool"},
            )
            return HealthResult(context.failure_status, "Thread pool health check failed.", e)
