"""Value types passed between the matchers, the ensemble and its consumers."""

import time
from dataclasses import dataclass, field
from typing import Any, Optional

UNKNOWN_INTENT = "unknown"


def clamp_confidence(value: float) -> float:
    """Clamp to [0, 1]; NaN becomes 0."""
    if value != value:
        return 0.0
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class IntentAlternative:
    intent: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"intent": self.intent, "confidence": round(self.confidence, 4)}


@dataclass
class ClassificationResult:
    """Outcome of one classifier or of the whole ensemble.

    ``method`` names the producer (``pattern``, ``semantic``,
    ``trained_model`` or ``ensemble``). Ensemble results also carry the
    winning method, the raw vote mass per intent and every sub-result.
    """

    intent: str
    confidence: float
    method: str
    alternatives: list[IntentAlternative] = field(default_factory=list)
    winning_method: Optional[str] = None
    model_version: Optional[int] = None
    matched_pattern: Optional[str] = None
    votes: dict[str, float] = field(default_factory=dict)
    latency_ms: float = 0.0
    method_results: dict[str, "ClassificationResult"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)

    @property
    def is_unknown(self) -> bool:
        return self.intent == UNKNOWN_INTENT

    @classmethod
    def unknown(cls, method: str, **kwargs: Any) -> "ClassificationResult":
        return cls(intent=UNKNOWN_INTENT, confidence=0.0, method=method, **kwargs)

    def to_dict(self, include_methods: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "intent": self.intent,
            "confidence": round(self.confidence, 4),
            "method": self.method,
            "alternatives": [a.to_dict() for a in self.alternatives],
        }
        if self.winning_method is not None:
            data["winning_method"] = self.winning_method
        if self.model_version is not None:
            data["model_version"] = self.model_version
        if self.matched_pattern is not None:
            data["matched_pattern"] = self.matched_pattern
        if self.votes:
            data["votes"] = {k: round(v, 4) for k, v in self.votes.items()}
        if self.latency_ms:
            data["latency_ms"] = round(self.latency_ms, 2)
        if include_methods and self.method_results:
            data["method_results"] = {
                name: r.to_dict(include_methods=False) for name, r in self.method_results.items()
            }
        return data


@dataclass(frozen=True)
class IntentTemplate:
    """One catalog entry: the intent, its phrase templates and seed phrases."""

    intent: str
    patterns: tuple[str, ...]
    canonical: str
    examples: tuple[str, ...] = ()

    @property
    def seed_phrases(self) -> tuple[str, ...]:
        return (self.canonical, *self.examples)


@dataclass(frozen=True)
class FeedbackRecord:
    query: str
    predicted_intent: str
    actual_intent: str
    was_correct: bool
    timestamp: float = field(default_factory=time.time)
