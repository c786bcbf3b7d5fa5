"""Tests for health check system."""

import asyncio

import pytest

from intent_router.core.health.health_check import (
    HealthChecker,
    HealthResult,
    HealthState,
)


class TestHealthChecker:

    @pytest.mark.asyncio
    async def test_all_healthy(self):
        checker = HealthChecker()

        async def check_ok():
            return HealthResult(HealthState.HEALTHY, 1.0, "ok")

        checker.register("catalog", check_ok)
        checker.register("model", check_ok)

        results = await checker.check_all()
        assert checker.overall_state(results) == HealthState.HEALTHY
        assert checker.component_names == ["catalog", "model"]

    @pytest.mark.asyncio
    async def test_degraded_wins_over_healthy(self):
        checker = HealthChecker()

        async def check_ok():
            return HealthResult(HealthState.HEALTHY, 1.0)

        async def check_slow():
            return HealthResult(HealthState.DEGRADED, 1.0, "local embeddings")

        checker.register("catalog", check_ok)
        checker.register("semantic", check_slow)

        status = await checker.status()
        assert status.overall == HealthState.DEGRADED

    @pytest.mark.asyncio
    async def test_check_exception_caught(self):
        checker = HealthChecker()

        async def check_crash():
            raise RuntimeError("boom")

        checker.register("bad", check_crash)

        results = await checker.check_all()
        assert results["bad"].state == HealthState.UNHEALTHY
        assert "boom" in results["bad"].message

    @pytest.mark.asyncio
    async def test_check_timeout(self):
        checker = HealthChecker(timeout_sec=0.05)

        async def check_hang():
            await asyncio.sleep(5)
            return HealthResult(HealthState.HEALTHY, 0)

        checker.register("hang", check_hang)

        results = await checker.check_all()
        assert results["hang"].state == HealthState.UNHEALTHY
        assert results["hang"].message == "timeout"

    @pytest.mark.asyncio
    async def test_empty_checks(self):
        checker = HealthChecker()
        results = await checker.check_all()
        assert checker.overall_state(results) == HealthState.HEALTHY

    @pytest.mark.asyncio
    async def test_status_to_dict(self):
        checker = HealthChecker()

        async def check_ok():
            return HealthResult(HealthState.HEALTHY, 2.5, "ok", {"patterns": 3})

        checker.register("catalog", check_ok)

        data = (await checker.status()).to_dict()
        assert data["overall"] == "healthy"
        assert data["components"][0]["name"] == "catalog"
        assert data["components"][0]["details"] == {"patterns": 3}
