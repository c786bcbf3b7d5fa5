"""Pluggable interfaces used by the ensemble router."""

from typing import Any, Mapping, Protocol, runtime_checkable

from .types import ClassificationResult


@runtime_checkable
class IntentMatcher(Protocol):
    """One voting method of the ensemble.

    ``method`` is the name used for vote weights and attribution.
    """

    method: str

    async def classify(self, query: str) -> ClassificationResult: ...


@runtime_checkable
class TelemetrySink(Protocol):
    """Receives one record per routed query. Must not block for long."""

    def record(self, event: Mapping[str, Any]) -> None: ...
