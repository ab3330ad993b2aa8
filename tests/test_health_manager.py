import asyncio
import logging

import pytest

from conftest import NOW, StubCertificateSource, StubMemorySource, StubThreadPoolSource
from healthprobes.application.services.health import (
    CertificateProbe,
    CertificateProbeOptions,
    HealthManager,
    MemoryProbe,
    MemoryProbeOptions,
    ThreadPoolProbe,
    build_default_registrations,
    certificate_check_timeout_s,
)
from healthprobes.application.services.health.certificate_probe import LOCK_WAIT_S
from healthprobes.config import Settings
from healthprobes.domain.entities import HealthCheckRegistration, HealthResult, ThreadPoolSnapshot
from healthprobes.domain.enums import HealthStatus
from healthprobes.domain.interfaces import HealthProbe


class FixedProbe(HealthProbe):
    def __init__(self, result=None, delay=0.0, error=None):
        self.result = result or HealthResult.healthy("ok")
        self.delay = delay
        self.error = error

    async def check_health(self, context, token=None):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def _registration(name, probe, tags=(), timeout_s=None, failure_status=HealthStatus.UNHEALTHY):
    return HealthCheckRegistration(
        name=name, factory=lambda: probe, failure_status=failure_status, tags=tags, timeout_s=timeout_s
    )


@pytest.mark.anyio
async def test_report_status_is_worst_entry(logger):
    manager = HealthManager(
        [
            _registration("a", FixedProbe()),
            _registration("b", FixedProbe(HealthResult.degraded("slow"))),
        ],
        logger,
    )
    report = await manager.check_all()
    assert set(report.entries) == {"a", "b"}
    assert report.status is HealthStatus.DEGRADED
    payload = report.to_dict()
    assert payload["status"] == "degraded"
    assert payload["entries"]["b"]["description"] == "slow"


@pytest.mark.anyio
async def test_empty_report_is_healthy(logger):
    report = await HealthManager([], logger).check_all()
    assert report.status is HealthStatus.HEALTHY


@pytest.mark.anyio
async def test_tag_selection(logger):
    manager = HealthManager(
        [
            _registration("memory", FixedProbe(), tags=("system",)),
            _registration("certificate", FixedProbe(), tags=("security",)),
        ],
        logger,
    )
    report = await manager.check_all(tags=["security"])
    assert list(report.entries) == ["certificate"]
    assert report.entries["certificate"].tags == ("security",)


@pytest.mark.anyio
async def test_timeout_uses_failure_status(logger):
    manager = HealthManager(
        [_registration("slow", FixedProbe(delay=5), timeout_s=0.05, failure_status=HealthStatus.DEGRADED)],
        logger,
    )
    entry = await manager.check_one(manager.registrations[0])
    assert entry.result.status is HealthStatus.DEGRADED
    assert entry.result.description == "A timeout occurred while running check"


@pytest.mark.anyio
async def test_probe_exception_is_contained(logger):
    manager = HealthManager([_registration("broken", FixedProbe(error=KeyError("gone")))], logger)
    report = await manager.check_all()
    entry = report.entries["broken"]
    assert entry.result.status is HealthStatus.UNHEALTHY
    assert isinstance(entry.result.error, KeyError)


@pytest.mark.anyio
async def test_result_hook_failures_do_not_break_checks(logger):
    seen = []

    def hook(name, result):
        seen.append(name)
        raise RuntimeError("publisher down")

    manager = HealthManager([_registration("a", FixedProbe())], logger, result_hook=hook)
    report = await manager.check_all()
    assert seen == ["a"]
    assert report.status is HealthStatus.HEALTHY


def test_duplicate_names_rejected(logger):
    with pytest.raises(ValueError):
        HealthManager([_registration("a", FixedProbe()), _registration("a", FixedProbe())], logger)


@pytest.mark.anyio
async def test_memory_probe_under_manager(logger):
    probe = MemoryProbe(MemoryProbeOptions(), logger, StubMemorySource(900, 100))
    manager = HealthManager([_registration("memory", probe, timeout_s=1.0)], logger)
    report = await manager.check_all()
    assert report.entries["memory"].result.status is HealthStatus.DEGRADED


def test_default_registrations(logger, monkeypatch):
    monkeypatch.setattr(Settings, "CERT_HOSTNAME", "")
    registrations = build_default_registrations(logger, memory_options=MemoryProbeOptions())
    assert [r.name for r in registrations] == ["memory", "thread_pool"]
    assert all(r.failure_status is HealthStatus.UNHEALTHY for r in registrations)
    assert registrations[0].tags == ("system",)

    registrations = build_default_registrations(
        logger,
        memory_options=MemoryProbeOptions(),
        certificate_options=CertificateProbeOptions(hostname="example.com", port=443),
    )
    by_name = {r.name: r for r in registrations}
    assert list(by_name) == ["memory", "certificate", "thread_pool"]
    assert by_name["certificate"].tags == ("security",)
    # the host must outlast the lock wait plus the fetch, or a queued check is cut off
    assert by_name["certificate"].timeout_s > LOCK_WAIT_S + 5.0
    # one instance per registration, so the certificate lock is shared between calls
    assert by_name["certificate"].factory() is by_name["certificate"].factory()


@pytest.mark.anyio
async def test_stubbed_default_set_runs(logger):
    snapshot = ThreadPoolSnapshot(8, 2, 8, 8, 2, 8)
    manager = HealthManager(
        [
            _registration("memory", MemoryProbe(MemoryProbeOptions(), logger, StubMemorySource()), ("system",), 1.0),
            _registration(
                "certificate",
                CertificateProbe(
                    CertificateProbeOptions(hostname="example.com", port=443),
                    logger,
                    StubCertificateSource(days=90),
                    clock=lambda: NOW,
                ),
                ("security",),
                5.0,
            ),
            _registration("thread_pool", ThreadPoolProbe(logger, StubThreadPoolSource(snapshot)), ("system",), 1.0),
        ],
        logger,
    )
    report = await manager.check_all()
    assert report.status is HealthStatus.HEALTHY
    assert all(e.duration_ms >= 0 for e in report.entries.values())


@pytest.mark.anyio
async def test_queued_certificate_check_is_degraded_not_timed_out(logger, monkeypatch):
    monkeypatch.setattr(Settings, "CERT_CHECK_TIMEOUT_S", 0.05)
    release = asyncio.Event()

    async def slow(token):
        await release.wait()
        return None

    options = CertificateProbeOptions(hostname="example.com", port=443, timeout_ms=100)
    certificate = CertificateProbe(
        options, logger, StubCertificateSource(behaviour=slow), clock=lambda: NOW, lock_wait_s=0.2
    )
    registration = _registration(
        "certificate", certificate, ("security",), certificate_check_timeout_s(options, lock_wait_s=0.2)
    )
    manager = HealthManager([registration], logger)

    first = asyncio.ensure_future(manager.check_one(registration))
    await asyncio.sleep(0.01)
    second = await manager.check_one(registration)
    release.set()
    await first

    assert second.result.status is HealthStatus.DEGRADED
    assert second.result.description == "Health check is already in progress"


@pytest.mark.anyio
async def test_check_latency_is_logged_as_execution_time(logger, caplog):
    manager = HealthManager([_registration("a", FixedProbe())], logger)
    with caplog.at_level(logging.DEBUG, logger="tests.healthprobes"):
        await manager.check_all()
    done = [r for r in caplog.records if r.getMessage() == "health-check-done"]
    assert len(done) == 1
    assert done[0].execution_time_ms >= 0
    assert done[0].check == "a"
