"""Circuit breaker for the embedding provider."""

import time
from enum import Enum
from typing import Any, Callable

from intent_router.core.logging import get_logger

_log = get_logger("core.circuit_breaker")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Tracks consecutive provider failures.

    CLOSED lets calls through. After ``failure_threshold`` consecutive failures
    it turns OPEN and rejects calls until ``cooldown_sec`` has passed, then
    HALF_OPEN admits ``half_open_max_probes`` probe calls. A successful probe
    closes the circuit again; a failed one reopens it.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        cooldown_sec: float = 60.0,
        half_open_max_probes: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._failure_threshold = failure_threshold
        self._cooldown_sec = cooldown_sec
        self._half_open_max = half_open_max_probes
        self._last_failure_time = 0.0
        self._half_open_probes = 0
        self._rejected = 0

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN:
            if self._clock() - self._last_failure_time >= self._cooldown_sec:
                self._state = CircuitState.HALF_OPEN
                self._half_open_probes = 0
                _log.info("Circuit half-open", name=self.name)
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.CLOSED
            _log.info("Circuit closed", name=self.name)
        self._failure_count = 0

    def record_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = self._clock()
        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self._failure_threshold:
            if self._state != CircuitState.OPEN:
                _log.warning(
                    "Circuit opened",
                    name=self.name,
                    failures=self._failure_count,
                )
            self._state = CircuitState.OPEN

    def allow_request(self) -> bool:
        state = self.state
        if state == CircuitState.CLOSED:
            return True
        if state == CircuitState.HALF_OPEN:
            if self._half_open_probes < self._half_open_max:
                self._half_open_probes += 1
                return True
        self._rejected += 1
        return False

    def snapshot(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "failures": self._failure_count,
            "threshold": self._failure_threshold,
            "cooldown_sec": self._cooldown_sec,
            "rejected": self._rejected,
        }
