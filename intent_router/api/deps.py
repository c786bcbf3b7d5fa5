from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from fastapi import HTTPException, status

from intent_router.core.logging import get_logger

if TYPE_CHECKING:
    from intent_router.core.health.health_check import HealthChecker
    from intent_router.core.intent.router import IntentRouter
    from intent_router.core.telemetry.metrics import MetricsRegistry

_logger = get_logger("api.deps")


@dataclass
class AppState:
    """Shared application state populated by the app lifespan."""

    router: Optional['IntentRouter'] = None
    metrics: Optional['MetricsRegistry'] = None
    health_checker: Optional['HealthChecker'] = None
    shutdown_event: Any = None

    def reset(self) -> None:
        """Reset all fields to their defaults (in-place, preserves identity)."""
        self.router = None
        self.metrics = None
        self.health_checker = None
        self.shutdown_event = None


state = AppState()


def get_state() -> AppState:
    return state


def init_state(**kwargs):
    """Set known state attributes; unknown keys are ignored with a warning."""
    for key, value in kwargs.items():
        if hasattr(state, key):
            setattr(state, key, value)
        else:
            _logger.warning("Unknown state attribute", key=key)


def require_router() -> 'IntentRouter':
    """FastAPI dependency: the live router or 503 while starting up."""
    router = get_state().router
    if router is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="intent router not initialized",
        )
    return router
