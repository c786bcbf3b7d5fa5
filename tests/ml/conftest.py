"""Pytest fixtures for classifier tests."""

import pytest

from intent_router.ml.intent_classifier import IntentClassifier

SAMPLES = [
    ("alpha apple", "fruit"),
    ("apple alpha please", "fruit"),
    ("banana apple", "fruit"),
    ("bravo boat", "vehicle"),
    ("boat bravo please", "vehicle"),
    ("car boat", "vehicle"),
    ("charlie cello", "music"),
    ("cello charlie please", "music"),
    ("drum cello", "music"),
]

INTENTS = ("fruit", "vehicle", "music")


@pytest.fixture
def samples():
    return list(SAMPLES)


@pytest.fixture
def intents():
    return INTENTS


@pytest.fixture
def classifier():
    """Small classifier trained on three well separated intents."""
    return IntentClassifier.build(
        SAMPLES,
        intents=INTENTS,
        hidden_size=16,
        epochs=400,
        learning_rate=0.5,
        retrain_epochs=10,
        seed=7,
    )
