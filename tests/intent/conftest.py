"""Pytest fixtures for intent routing tests."""

import asyncio

import pytest

from intent_router.core.intent.catalog import parse_catalog
from intent_router.core.intent.types import ClassificationResult
from intent_router.embeddings.embedding_service import EmbeddingService

CATALOG_DOC = {
    "intents": [
        {
            "intent": "export_pipeline",
            "canonical": "generate pipeline report",
            "patterns": ["generate pipeline report", "export {details} to excel"],
            "examples": ["excel export", "download report"],
        },
        {
            "intent": "late_stage_pipeline",
            "canonical": "show me late stage pipeline",
            "patterns": ["late stage pipeline", "late stage deals"],
            "examples": ["proposal and pilot stage"],
        },
        {
            "intent": "account_ownership",
            "canonical": "who owns this company",
            "patterns": ["who owns {company}", "owner of {company}"],
            "examples": ["who owns intel", "account owner"],
        },
    ],
}


@pytest.fixture
def catalog():
    return parse_catalog(CATALOG_DOC, source="test")


@pytest.fixture
def embeddings():
    return EmbeddingService(None, dimension=1536)


class StubMatcher:
    """Matcher returning a fixed result, optionally slow or failing."""

    def __init__(self, method, intent="unknown", confidence=0.0, delay=0.0, error=None, **extra):
        self.method = method
        self.intent = intent
        self.confidence = confidence
        self.delay = delay
        self.error = error
        self.extra = extra
        self.calls = 0

    async def classify(self, query):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ClassificationResult(
            intent=self.intent,
            confidence=self.confidence,
            method=self.method,
            **self.extra,
        )


@pytest.fixture
def stub():
    return StubMatcher
