"""
Application-wide error hierarchy.

Every typed error carries a stable ``code``, a retry hint and the HTTP status
the API layer maps it to.
"""

import time
from abc import ABC, abstractmethod
from typing import Any


class IntentRouterError(Exception, ABC):
    """Abstract base for all typed application errors."""

    @abstractmethod
    def _abstract_guard(self) -> None: ...

    @property
    @abstractmethod
    def is_retryable(self) -> bool: ...

    @property
    @abstractmethod
    def http_status(self) -> int: ...

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper().replace("ERROR", "").strip("_") or type(self).__name__
        self.timestamp = time.time()
        self.request_id = request_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "is_retryable": self.is_retryable,
            "http_status": self.http_status,
            "timestamp": self.timestamp,
            "request_id": self.request_id,
        }


class TransientError(IntentRouterError):
    is_retryable: bool = True
    http_status: int = 503

    def _abstract_guard(self) -> None: ...

    def __init__(self, message: str, *, code: str = "TRANSIENT", **kw: Any) -> None:
        super().__init__(message, code=code, **kw)


class PermanentError(IntentRouterError):
    is_retryable: bool = False
    http_status: int = 500

    def _abstract_guard(self) -> None: ...

    def __init__(self, message: str, *, code: str = "PERMANENT", **kw: Any) -> None:
        super().__init__(message, code=code, **kw)


class ValidationError(IntentRouterError):
    is_retryable: bool = False
    http_status: int = 400

    def _abstract_guard(self) -> None: ...

    def __init__(
        self, message: str, *, code: str = "VALIDATION", field: str | None = None, **kw: Any
    ) -> None:
        super().__init__(message, code=code, **kw)
        self.field = field


class ProviderError(IntentRouterError):
    """An external provider (embeddings) failed or is not configured."""

    is_retryable: bool = True
    http_status: int = 502

    def _abstract_guard(self) -> None: ...

    def __init__(
        self, message: str, *, provider: str, code: str = "PROVIDER", **kw: Any
    ) -> None:
        super().__init__(message, code=code, **kw)
        self.provider = provider


class MethodTimeoutError(IntentRouterError):
    is_retryable: bool = True
    http_status: int = 504

    def _abstract_guard(self) -> None: ...

    def __init__(
        self, message: str, *, timeout_ms: int, code: str = "TIMEOUT_ERR", **kw: Any
    ) -> None:
        super().__init__(message, code=code, **kw)
        self.timeout_ms = timeout_ms


class ClassifierDimensionError(PermanentError):
    """Weights, vocabulary and intent mapping disagree in size."""

    def __init__(self, message: str, *, expected: Any = None, actual: Any = None, **kw: Any) -> None:
        super().__init__(message, code="CLASSIFIER_DIMENSION", **kw)
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["expected"] = self.expected
        data["actual"] = self.actual
        return data


class CatalogError(ValidationError):
    """The intent template catalog is missing or malformed."""

    def __init__(self, message: str, *, path: str | None = None, **kw: Any) -> None:
        super().__init__(message, code="CATALOG", **kw)
        self.path = path
