import importlib
import json
from types import SimpleNamespace

import pytest

from conftest import StubMemorySource, StubThreadPoolSource
from healthprobes.application.services.health import MemoryProbe, MemoryProbeOptions, ThreadPoolProbe
from healthprobes.config import Settings
from healthprobes.domain.entities import HealthCheckRegistration, ThreadPoolSnapshot
from healthprobes.infrastructure.runtime import thread_pools
from healthprobes.presentation.cli import health_command
from healthprobes.presentation.cli.health_command import EXIT_CONFIG_ERROR, HealthCommand, build_parser


@pytest.fixture
def stub_runtime(monkeypatch, logger):
    """Replace real process probes with stubs; returns the memory source to tune."""
    memory_source = StubMemorySource(100, 200)
    snapshot = ThreadPoolSnapshot(8, 2, 8, 8, 2, 8)

    def registrations(log, *, memory_options=None, certificate_options=None):
        memory = MemoryProbe(memory_options, log, memory_source)
        return [
            HealthCheckRegistration("memory", lambda: memory, tags=("system",), timeout_s=1.0),
            HealthCheckRegistration(
                "thread_pool",
                lambda: ThreadPoolProbe(log, StubThreadPoolSource(snapshot)),
                tags=("system",),
                timeout_s=1.0,
            ),
        ]

    monkeypatch.setattr(health_command, "build_default_registrations", registrations)
    monkeypatch.setattr(
        health_command, "runtime_thread_pools", lambda: SimpleNamespace(install_default_executor=lambda: None)
    )
    return memory_source


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert not args.json
    assert args.host is None
    assert args.port is None


@pytest.mark.anyio
async def test_healthy_json_report(stub_runtime, logger, capsys):
    code = await HealthCommand(logger).execute(["--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "healthy"
    assert set(payload["entries"]) == {"memory", "thread_pool"}
    assert payload["entries"]["memory"]["tags"] == ["system"]


@pytest.mark.anyio
async def test_degraded_exit_code_and_text_output(stub_runtime, logger, capsys):
    stub_runtime.allocated_bytes = 900 * 1024 * 1024
    code = await HealthCommand(logger).execute(["--no-color"])
    assert code == 1
    out = capsys.readouterr().out
    assert out.startswith("Overall: Degraded")
    assert "- memory: Degraded" in out


@pytest.mark.anyio
async def test_unhealthy_exit_code(stub_runtime, logger, capsys):
    stub_runtime.working_set_bytes = 4096 * 1024 * 1024
    assert await HealthCommand(logger).execute(["--json", "--tags", "system"]) == 2


@pytest.mark.anyio
async def test_invalid_configuration_exit_code(stub_runtime, logger, monkeypatch, capsys):
    monkeypatch.setenv("HEALTH_MEMORY_WARNING_MB", "5000")
    code = await HealthCommand(logger).execute([])
    assert code == EXIT_CONFIG_ERROR
    assert "Configuration error" in capsys.readouterr().out


def test_certificate_options_from_arguments(logger, monkeypatch):
    monkeypatch.delenv("HEALTH_CERT_PORT", raising=False)
    command = HealthCommand(logger)
    assert command._certificate_options(build_parser().parse_args([])) is None
    options = command._certificate_options(build_parser().parse_args(["--host", "example.com", "--port", "8443"]))
    assert (options.hostname, options.port) == ("example.com", 8443)


def test_memory_options_default_when_unset(monkeypatch):
    for name in ("HEALTH_MEMORY_WARNING_MB", "HEALTH_MEMORY_CRITICAL_MB"):
        monkeypatch.delenv(name, raising=False)
    assert MemoryProbeOptions.from_env().warning_threshold_mb == 800


@pytest.mark.anyio
async def test_bad_pool_sizing_is_a_configuration_error(logger, monkeypatch, capsys):
    monkeypatch.setattr(Settings, "WORKER_MIN_THREADS", 10)
    monkeypatch.setattr(Settings, "WORKER_MAX_THREADS", 2)
    monkeypatch.setattr(thread_pools, "_pools", None)
    code = await HealthCommand(logger).execute(["--json"])
    assert code == EXIT_CONFIG_ERROR
    assert "worker thread pool sizing is invalid: min=10, max=2" in capsys.readouterr().out
    assert thread_pools._pools is None


@pytest.mark.anyio
async def test_non_integer_pool_setting_is_a_configuration_error(logger, monkeypatch, capsys):
    settings_module = importlib.import_module("healthprobes.config.settings")
    monkeypatch.setattr(settings_module, "_invalid", {})
    monkeypatch.setenv("HEALTH_WORKER_MIN_THREADS", "lots")
    assert settings_module._int("HEALTH_WORKER_MIN_THREADS", 4) == 4

    monkeypatch.setattr(thread_pools, "_pools", None)
    code = await HealthCommand(logger).execute([])
    assert code == EXIT_CONFIG_ERROR
    assert "HEALTH_WORKER_MIN_THREADS='lots'" in capsys.readouterr().out
