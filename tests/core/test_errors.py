"""Tests for the typed error hierarchy."""

import pytest

from intent_router.core.errors import (
    CatalogError,
    ClassifierDimensionError,
    IntentRouterError,
    MethodTimeoutError,
    PermanentError,
    ProviderError,
    TransientError,
    ValidationError,
)


class TestErrorHierarchy:

    @pytest.mark.parametrize("cls,status,retryable", [
        (TransientError, 503, True),
        (PermanentError, 500, False),
    ])
    def test_status_and_retry_hint(self, cls, status, retryable):
        err = cls("boom")
        assert isinstance(err, IntentRouterError)
        assert err.http_status == status
        assert err.is_retryable is retryable
        assert err.message == "boom"

    def test_validation_error_keeps_field(self):
        err = ValidationError("bad query", field="query")
        assert err.field == "query"
        assert err.http_status == 400
        assert err.code == "VALIDATION"

    def test_provider_error(self):
        err = ProviderError("401", provider="openai", code="PROVIDER_UNAUTHENTICATED")
        assert err.provider == "openai"
        assert err.code == "PROVIDER_UNAUTHENTICATED"
        assert err.is_retryable is True
        assert err.http_status == 502

    def test_method_timeout(self):
        err = MethodTimeoutError("slow", timeout_ms=8000)
        assert err.timeout_ms == 8000
        assert err.http_status == 504

    def test_dimension_error_is_permanent(self):
        err = ClassifierDimensionError("w2 shape", expected=(128, 13), actual=(128, 12))
        assert isinstance(err, PermanentError)
        assert err.code == "CLASSIFIER_DIMENSION"
        data = err.to_dict()
        assert data["expected"] == (128, 13)
        assert data["actual"] == (128, 12)
        assert data["is_retryable"] is False

    def test_catalog_error_is_validation(self):
        err = CatalogError("missing", path="/tmp/catalog.json")
        assert isinstance(err, ValidationError)
        assert err.code == "CATALOG"
        assert err.path == "/tmp/catalog.json"

    def test_to_dict_shape(self):
        data = TransientError("later", request_id="abc").to_dict()
        assert set(data) == {"code", "message", "is_retryable", "http_status", "timestamp", "request_id"}
        assert data["request_id"] == "abc"
