"""Component health check system."""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Callable, Awaitable, Any

from intent_router.core.logging import get_logger

_log = get_logger("core.health")

_START_TIME = time.time()

DEFAULT_CHECK_TIMEOUT_SECONDS = 5.0


class HealthState(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthResult:
    state: HealthState
    latency_ms: float
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ComponentHealth:
    """Per-component health status with latency tracking."""

    name: str
    state: HealthState
    latency_ms: float
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    last_check: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message,
            "details": self.details,
            "last_check": self.last_check,
        }


def _worst(states: list[HealthState]) -> HealthState:
    if HealthState.UNHEALTHY in states:
        return HealthState.UNHEALTHY
    if HealthState.DEGRADED in states:
        return HealthState.DEGRADED
    return HealthState.HEALTHY


@dataclass
class HealthStatus:
    """Aggregated system health status."""

    components: list[ComponentHealth]

    @property
    def overall(self) -> HealthState:
        return _worst([c.state for c in self.components])

    @property
    def uptime_seconds(self) -> float:
        return time.time() - _START_TIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall.value,
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": [c.to_dict() for c in self.components],
        }


CheckFn = Callable[[], Awaitable[HealthResult]]


class HealthChecker:
    """Runs registered component checks concurrently.

    A check that raises or exceeds ``timeout_sec`` is reported as UNHEALTHY
    instead of propagating.
    """

    def __init__(self, timeout_sec: float = DEFAULT_CHECK_TIMEOUT_SECONDS):
        self._checks: Dict[str, CheckFn] = {}
        self._timeout_sec = timeout_sec

    def register(self, name: str, check_fn: CheckFn) -> None:
        self._checks[name] = check_fn

    @property
    def component_names(self) -> list[str]:
        return list(self._checks)

    async def check_all(self) -> Dict[str, HealthResult]:

        async def _run_check(name: str, fn: CheckFn) -> tuple[str, HealthResult]:
            t0 = time.monotonic()
            try:
                return name, await asyncio.wait_for(fn(), timeout=self._timeout_sec)
            except asyncio.TimeoutError:
                latency = (time.monotonic() - t0) * 1000
                _log.warning("Health check timed out", component=name)
                return name, HealthResult(HealthState.UNHEALTHY, latency, "timeout")
            except Exception as e:
                latency = (time.monotonic() - t0) * 1000
                _log.warning("Health check failed", component=name, error=str(e))
                return name, HealthResult(
                    HealthState.UNHEALTHY, latency, str(e)[:200]
                )

        if not self._checks:
            return {}

        pairs = await asyncio.gather(
            *(_run_check(name, fn) for name, fn in self._checks.items())
        )
        return dict(pairs)

    async def status(self) -> HealthStatus:
        results = await self.check_all()
        return HealthStatus(components=[
            ComponentHealth(
                name=name,
                state=r.state,
                latency_ms=r.latency_ms,
                message=r.message,
                details=r.details,
            )
            for name, r in results.items()
        ])

    def overall_state(self, results: Dict[str, HealthResult]) -> HealthState:
        return _worst([r.state for r in results.values()])
