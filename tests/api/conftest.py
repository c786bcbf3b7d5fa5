"""Shared fixtures for API layer tests.

Builds a small offline router, installs it into the application state and
wires a Starlette TestClient (entering the lifespan) to the app.
"""

import pytest
from fastapi.testclient import TestClient

from intent_router import config
from intent_router.api.deps import get_state, init_state
from intent_router.core.intent.router import build_router


@pytest.fixture
def small_router(monkeypatch):
    monkeypatch.setattr(config, "EMBEDDING_API_KEY", None)
    monkeypatch.setattr(config, "MODEL_HIDDEN_SIZE", 16)
    monkeypatch.setattr(config, "MODEL_TRAIN_EPOCHS", 30)
    monkeypatch.setattr(config, "MODEL_RETRAIN_EPOCHS", 2)
    monkeypatch.setattr(config, "MODEL_SNAPSHOT_PATH", None)
    monkeypatch.setattr(config, "FEEDBACK_RETRAIN_THRESHOLD", 3)
    return build_router()


@pytest.fixture
def client(small_router):
    from intent_router.app import app

    init_state(router=small_router)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def bare_client():
    """Client without lifespan: no router is installed."""
    from intent_router.app import app

    get_state().reset()
    return TestClient(app, raise_server_exceptions=False)
