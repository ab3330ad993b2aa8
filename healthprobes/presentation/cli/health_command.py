from __future__ import annotations

import argparse
import json
from typing import Iterable, List, Optional

from healthprobes.application.services.health import (
    CertificateProbeOptions,
    HealthManager,
    HealthReport,
    MemoryProbeOptions,
    build_default_registrations,
)
from healthprobes.core.logging.logger import StructuredLogger, get_logger
from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.errors import ConfigurationError
from healthprobes.infrastructure.runtime import runtime_thread_pools

EXIT_CODES = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}
EXIT_CONFIG_ERROR = 3

_STATUS_COLORS = {
    HealthStatus.HEALTHY: "\033[92m",
    HealthStatus.DEGRADED: "\033[93m",
    HealthStatus.UNHEALTHY: "\033[91m",
}
_RESET = "\033[0m"


def _parse_tags(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip().lower() for v in value.split(",") if v.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="healthprobes", description="Run memory, thread pool and certificate health checks.")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--tags", default="", help="comma-separated tags to select checks (system,security)")
    parser.add_argument("--host", default=None, help="hostname whose TLS certificate is checked")
    parser.add_argument("--port", type=int, default=None, help="TLS port (default from HEALTH_SERVER_URLS, else 443)")
    parser.add_argument("--no-color", action="store_true", help="plain text output")
    return parser


class HealthCommand:
    """One-shot health command: build probes, run them, print a report."""

    def __init__(self, logger: Optional[StructuredLogger] = None) -> None:
        self.logger: StructuredLogger = logger or get_logger(__name__, service="health")

    def _certificate_options(self, args: argparse.Namespace) -> Optional[CertificateProbeOptions]:
        if not args.host:
            return None
        options = CertificateProbeOptions.from_env(args.host)
        if args.port is not None:
            options.port = args.port
        return options

    async def execute(self, argv: List[str]) -> int:
        args = build_parser().parse_args(argv)
        try:
            runtime_thread_pools().install_default_executor()
            registrations = build_default_registrations(
                self.logger,
                memory_options=MemoryProbeOptions.from_env(),
                certificate_options=self._certificate_options(args),
            )
        except ConfigurationError as e:
            self.logger.error(lambda: f"configuration-error {e}")
            print(f"Configuration error: {e}")
            return EXIT_CONFIG_ERROR

        manager = HealthManager(registrations, self.logger)
        report = await manager.check_all(tags=_parse_tags(args.tags))
        if args.json:
            print(json.dumps(report.to_dict(), separators=(",", ":"), ensure_ascii=False, default=str))
        else:
            self._print_report(report, color=not args.no_color)
        return EXIT_CODES[report.status]

    def _print_report(self, report: HealthReport, *, color: bool) -> None:
        def paint(status: HealthStatus) -> str:
            if not color:
                return status.label
            return f"{_STATUS_COLORS[status]}{status.label}{_RESET}"

        print(f"Overall: {paint(report.status)} ({report.total_duration_ms}ms)")
        for name, entry in report.entries.items():
            r = entry.result
            print(f"- {name}: {paint(r.status)} ({entry.duration_ms}ms) {r.description}")
            if r.error is not None:
                print(f"    error: {type(r.error).__name__}: {r.error}")


async def run(argv: Optional[Iterable[str]] = None) -> int:
    return await HealthCommand().execute(list(argv or []))
