"""Root conftest: resets all global state after every test."""

import pytest

from intent_router.api.deps import get_state
from intent_router.core.utils import http_pool
from intent_router.core.utils.lazy import Lazy


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all Lazy singletons, AppState and pooled HTTP clients after each test."""
    yield
    Lazy.reset_all()
    get_state().reset()
    http_pool._clients.clear()
