"""Tests for the health monitor."""

import asyncio

import pytest

from annotations_mapper.monitoring.health_monitor import HealthCheck, HealthMonitor
from annotations_mapper.shared_lib.exceptions import ServiceUnavailableError


def make_check(check_id, checker, severity=2):
    return HealthCheck(
        id=check_id,
        name=f"{check_id} name",
        severity=severity,
        business_impact="impact",
        technical_summary="summary",
        panic_guide="https://example.com/panic",
        checker=checker,
    )


async def healthy():
    return "all good"


async def unhealthy():
    raise ServiceUnavailableError("Error connecting with Kafka")


async def crashing():
    raise RuntimeError("unexpected")


async def hanging():
    await asyncio.sleep(10)
    return "too late"


@pytest.fixture
def monitor():
    return HealthMonitor("test-system", "Test Service", "A test service", timeout=0.1)


class TestRegistration:
    def test_checks_keep_registration_order(self, monitor):
        monitor.register_health_check(make_check("b", healthy))
        monitor.register_health_check(make_check("a", healthy))

        assert [check.id for check in monitor.health_checks] == ["b", "a"]

    def test_register_replaces_same_id(self, monitor):
        monitor.register_health_check(make_check("a", healthy, severity=1))
        monitor.register_health_check(make_check("a", healthy, severity=3))

        assert len(monitor.health_checks) == 1
        assert monitor.health_checks[0].severity == 3


class TestCheckHealth:
    @pytest.mark.asyncio
    async def test_all_healthy(self, monitor):
        monitor.register_health_check(make_check("a", healthy))

        report = await monitor.check_health()

        assert report.ok
        assert report.system_code == "test-system"
        assert report.checks[0].ok
        assert report.checks[0].check_output == "all good"

    @pytest.mark.asyncio
    async def test_failures_are_reported_per_check(self, monitor):
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("b", unhealthy))
        monitor.register_health_check(make_check("c", crashing))

        report = await monitor.check_health()

        assert not report.ok
        outputs = {check.id: (check.ok, check.check_output) for check in report.checks}
        assert outputs == {
            "a": (True, "all good"),
            "b": (False, "Error connecting with Kafka"),
            "c": (False, "unexpected"),
        }

    @pytest.mark.asyncio
    async def test_slow_check_times_out(self, monitor):
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("slow", hanging))

        report = await monitor.check_health()

        slow = next(check for check in report.checks if check.id == "slow")
        assert not slow.ok
        assert slow.check_output == "Health check timed out"
        assert not report.ok

    @pytest.mark.asyncio
    async def test_no_checks(self, monitor):
        report = await monitor.check_health()

        assert report.ok
        assert report.checks == []

    @pytest.mark.asyncio
    async def test_wire_shape_uses_camel_case(self, monitor):
        monitor.register_health_check(make_check("a", healthy))

        payload = (await monitor.check_health()).model_dump(mode="json", by_alias=True)

        assert payload["schemaVersion"] == 1
        assert payload["systemCode"] == "test-system"
        check = payload["checks"][0]
        assert set(check) == {
            "id",
            "name",
            "ok",
            "severity",
            "businessImpact",
            "technicalSummary",
            "panicGuide",
            "checkOutput",
            "lastUpdated",
        }


class TestGoodToGo:
    @pytest.mark.asyncio
    async def test_all_pass(self, monitor):
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("b", healthy))

        status = await monitor.good_to_go(["a", "b"])

        assert status.good_to_go

    @pytest.mark.asyncio
    async def test_first_failure_is_returned(self, monitor):
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("b", unhealthy))

        status = await monitor.good_to_go(["a", "b"])

        assert not status.good_to_go
        assert status.message == "Error connecting with Kafka"

    @pytest.mark.asyncio
    async def test_unexpected_error_fails(self, monitor):
        monitor.register_health_check(make_check("c", crashing))

        status = await monitor.good_to_go(["c"])

        assert not status.good_to_go
        assert status.message == "unexpected"

    @pytest.mark.asyncio
    async def test_only_named_checks_run(self, monitor):
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("b", unhealthy))

        status = await monitor.good_to_go(["a"])

        assert status.good_to_go

    @pytest.mark.asyncio
    async def test_timeout(self, monitor):
        monitor.register_health_check(make_check("slow", hanging))

        status = await monitor.good_to_go(["slow"])

        assert not status.good_to_go
        assert status.message == "Health check timed out"

    @pytest.mark.asyncio
    async def test_timeout_after_passing_check(self, monitor):
        """A hanging check fails readiness even when the others already passed."""
        monitor.register_health_check(make_check("a", healthy))
        monitor.register_health_check(make_check("slow", hanging))

        status = await monitor.good_to_go(["a", "slow"])

        assert not status.good_to_go
        assert status.message == "Health check timed out"
