"""Confidence-weighted voting across the intent matchers."""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from intent_router.core.errors import MethodTimeoutError, ValidationError
from intent_router.core.logging import get_logger

from .protocols import IntentMatcher, TelemetrySink
from .types import UNKNOWN_INTENT, ClassificationResult, IntentAlternative

_log = get_logger("intent.ensemble")

ENSEMBLE_METHOD = "ensemble"
NO_WINNER = "none"


@dataclass(frozen=True)
class VotingPolicy:
    """Static parameters of the vote.

    ``weights`` maps method name to vote weight and must sum to 1.0.
    Sub-results below ``min_vote_confidence`` abstain.
    """

    weights: Mapping[str, float]
    threshold: float = 0.6
    min_vote_confidence: float = 0.35
    max_alternatives: int = 3

    def __post_init__(self) -> None:
        if any(w < 0 for w in self.weights.values()):
            raise ValidationError("ensemble weights must be non-negative", field="weights")
        total = sum(self.weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValidationError(f"ensemble weights must sum to 1.0, got {total:.4f}", field="weights")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValidationError("threshold must be within [0, 1]", field="threshold")
        if not 0.0 <= self.min_vote_confidence <= 1.0:
            raise ValidationError("min_vote_confidence must be within [0, 1]", field="min_vote_confidence")


def aggregate_votes(
    sub_results: Sequence[tuple[str, Optional[ClassificationResult]]],
    policy: VotingPolicy,
) -> ClassificationResult:
    """Combine per-method results, given in evaluation order.

    A ``None`` result means the method failed and casts no vote. The outcome
    depends only on the results and their order, never on timing.
    """
    votes: dict[str, float] = {}
    voters: dict[str, list[tuple[str, float]]] = {}

    for method, result in sub_results:
        if result is None or result.is_unknown:
            continue
        if result.confidence < policy.min_vote_confidence:
            continue
        weight = policy.weights.get(method, 0.0)
        if weight <= 0.0:
            continue
        votes[result.intent] = votes.get(result.intent, 0.0) + weight * result.confidence
        voters.setdefault(result.intent, []).append((method, result.confidence))

    total = sum(votes.values())
    if not votes or total <= 0.0:
        return ClassificationResult.unknown(ENSEMBLE_METHOD, winning_method=NO_WINNER)

    leader, leader_mass = None, -1.0
    for intent, mass in votes.items():
        if mass > leader_mass:
            leader, leader_mass = intent, mass
    confidence = leader_mass / total

    # Highest individual confidence; the later-evaluated method wins ties.
    winning_method, best_conf = NO_WINNER, -1.0
    for method, conf in voters[leader]:
        if conf >= best_conf:
            winning_method, best_conf = method, conf

    others = sorted(
        ((intent, mass) for intent, mass in votes.items() if intent != leader),
        key=lambda kv: kv[1],
        reverse=True,
    )
    alternatives = [IntentAlternative(intent, mass / total) for intent, mass in others]

    intent = leader
    if confidence < policy.threshold:
        intent = UNKNOWN_INTENT
        alternatives.insert(0, IntentAlternative(leader, confidence))

    return ClassificationResult(
        intent=intent,
        confidence=confidence,
        method=ENSEMBLE_METHOD,
        alternatives=alternatives[:policy.max_alternatives],
        winning_method=winning_method,
        votes=dict(votes),
    )


class EnsembleRouter:
    """Runs every matcher concurrently and votes on the outcome.

    A matcher that raises or exceeds ``method_timeout`` simply does not vote.
    Each decision is reported to the telemetry sinks; a failing sink is logged
    and ignored.
    """

    def __init__(
        self,
        matchers: Sequence[IntentMatcher],
        policy: VotingPolicy,
        method_timeout: float = 8.0,
        sinks: Sequence[TelemetrySink] = (),
    ):
        names = [m.method for m in matchers]
        if len(set(names)) != len(names):
            raise ValidationError(f"duplicate matcher methods: {names}", field="matchers")
        missing = [n for n in names if n not in policy.weights]
        if missing:
            raise ValidationError(f"no ensemble weight for methods: {missing}", field="weights")
        self.matchers = list(matchers)
        self.policy = policy
        self.method_timeout = method_timeout
        self.sinks: list[TelemetrySink] = list(sinks)
        # Most recent failure per method, cleared on its next answer.
        self.last_errors: dict[str, Exception] = {}

    def add_sink(self, sink: TelemetrySink) -> None:
        self.sinks.append(sink)

    async def _run(self, matcher: IntentMatcher, query: str) -> Optional[ClassificationResult]:
        try:
            result = await asyncio.wait_for(matcher.classify(query), timeout=self.method_timeout)
        except asyncio.TimeoutError:
            err = MethodTimeoutError(
                f"{matcher.method} gave no answer within {self.method_timeout}s",
                timeout_ms=round(self.method_timeout * 1000),
            )
            self.last_errors[matcher.method] = err
            _log.warning("method_timeout", method=matcher.method, code=err.code, timeout_ms=err.timeout_ms)
        except Exception as e:
            self.last_errors[matcher.method] = e
            _log.warning(
                "classifier_error",
                method=matcher.method,
                error=str(e),
                error_type=type(e).__name__,
            )
        else:
            self.last_errors.pop(matcher.method, None)
            return result
        return None

    async def route(self, query: str) -> ClassificationResult:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query must be a non-empty string", field="query")

        t0 = time.monotonic()
        results = await asyncio.gather(*(self._run(m, query) for m in self.matchers))
        sub_results = [(m.method, r) for m, r in zip(self.matchers, results)]

        decision = aggregate_votes(sub_results, self.policy)
        decision.method_results = {method: r for method, r in sub_results if r is not None}
        trained = decision.method_results.get("trained_model")
        if trained is not None:
            decision.model_version = trained.model_version
        pattern = decision.method_results.get("pattern")
        if pattern is not None and pattern.intent == decision.intent:
            decision.matched_pattern = pattern.matched_pattern
        decision.latency_ms = (time.monotonic() - t0) * 1000

        _log.info(
            "Query routed",
            intent=decision.intent,
            confidence=decision.confidence,
            winner=decision.winning_method,
            latency_ms=decision.latency_ms,
        )
        self._emit(query, decision)
        return decision

    async def classify(self, query: str) -> ClassificationResult:
        return await self.route(query)

    def _emit(self, query: str, decision: ClassificationResult) -> None:
        if not self.sinks:
            return
        event: dict[str, Any] = {
            "query": query,
            "intent": decision.intent,
            "confidence": decision.confidence,
            "winning_method": decision.winning_method,
            "latency_ms": decision.latency_ms,
            "method_confidences": {
                m: r.confidence for m, r in decision.method_results.items()
            },
            "timestamp": time.time(),
        }
        for sink in self.sinks:
            try:
                sink.record(event)
            except Exception as e:
                _log.warning("telemetry_sink_error", sink=type(sink).__name__, error=str(e))

    def describe(self) -> dict[str, Any]:
        return {
            "methods": [m.method for m in self.matchers],
            "weights": dict(self.policy.weights),
            "confidence_threshold": self.policy.threshold,
            "min_vote_confidence": self.policy.min_vote_confidence,
            "method_timeout": self.method_timeout,
            "sinks": [type(s).__name__ for s in self.sinks],
        }
