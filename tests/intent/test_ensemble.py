"""Tests for confidence-weighted ensemble voting."""

import pytest

from intent_router.core.errors import MethodTimeoutError, ValidationError
from intent_router.core.intent.ensemble import (
    NO_WINNER,
    EnsembleRouter,
    VotingPolicy,
    aggregate_votes,
)
from intent_router.core.intent.types import ClassificationResult

WEIGHTS = {"pattern": 0.30, "semantic": 0.35, "trained_model": 0.35}


@pytest.fixture
def policy():
    return VotingPolicy(weights=WEIGHTS)


def _r(method, intent, confidence, **kw):
    return ClassificationResult(intent=intent, confidence=confidence, method=method, **kw)


def _router(stub, votes, policy, **kw):
    matchers = [stub(method, intent, conf) for method, (intent, conf) in votes.items()]
    return EnsembleRouter(matchers, policy, **kw)


class TestVotingPolicy:

    def test_defaults(self, policy):
        assert policy.threshold == 0.6
        assert policy.min_vote_confidence == 0.35

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            VotingPolicy(weights={"pattern": 0.5, "semantic": 0.4})

    def test_negative_weight(self):
        with pytest.raises(ValidationError):
            VotingPolicy(weights={"pattern": 1.2, "semantic": -0.2})

    def test_threshold_range(self):
        with pytest.raises(ValidationError):
            VotingPolicy(weights=WEIGHTS, threshold=1.5)


class TestAggregateVotes:

    def test_unanimous(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "contacts", 0.95)),
            ("semantic", _r("semantic", "contacts", 0.80)),
            ("trained_model", _r("trained_model", "contacts", 0.75)),
        ], policy)
        assert result.intent == "contacts"
        assert result.confidence == pytest.approx(1.0)
        assert result.winning_method == "pattern"
        assert result.method == "ensemble"
        assert result.alternatives == []

    def test_majority_beats_single_confident_vote(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "account_ownership", 0.50)),
            ("semantic", _r("semantic", "contacts", 0.90)),
            ("trained_model", _r("trained_model", "contacts", 0.85)),
        ], policy)
        assert result.intent == "contacts"
        assert result.confidence == pytest.approx(0.6125 / 0.7625)
        assert result.winning_method == "semantic"
        assert result.alternatives[0].intent == "account_ownership"
        assert result.alternatives[0].confidence == pytest.approx(0.15 / 0.7625)
        assert result.votes == {"account_ownership": pytest.approx(0.15), "contacts": pytest.approx(0.6125)}

    def test_all_below_vote_floor(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "contacts", 0.30)),
            ("semantic", _r("semantic", "loi_date", 0.20)),
            ("trained_model", _r("trained_model", "contacts", 0.34)),
        ], policy)
        assert result.is_unknown
        assert result.confidence == 0.0
        assert result.winning_method == NO_WINNER
        assert result.votes == {}

    def test_everyone_abstains(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "unknown", 0.0)),
            ("semantic", None),
            ("trained_model", None),
        ], policy)
        assert result.is_unknown
        assert result.winning_method == NO_WINNER

    def test_split_vote_below_threshold(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "account_ownership", 0.95)),
            ("semantic", _r("semantic", "contacts", 0.90)),
        ], policy)
        assert result.is_unknown
        assert result.confidence == pytest.approx(0.315 / 0.6)
        assert result.confidence < policy.threshold
        assert result.alternatives[0].intent == "contacts"
        assert result.alternatives[0].confidence == pytest.approx(0.315 / 0.6)
        assert result.alternatives[1].intent == "account_ownership"
        assert result.winning_method == "semantic"

    def test_later_method_wins_confidence_tie(self, policy):
        result = aggregate_votes([
            ("pattern", _r("pattern", "unknown", 0.0)),
            ("semantic", _r("semantic", "contacts", 0.80)),
            ("trained_model", _r("trained_model", "contacts", 0.80)),
        ], policy)
        assert result.intent == "contacts"
        assert result.winning_method == "trained_model"

    def test_unweighted_method_cannot_vote(self):
        policy = VotingPolicy(weights={"pattern": 1.0})
        result = aggregate_votes([("other", _r("other", "contacts", 0.99))], policy)
        assert result.is_unknown

    def test_alternatives_capped(self):
        policy = VotingPolicy(weights={"a": 0.25, "b": 0.25, "c": 0.25, "d": 0.25}, max_alternatives=2)
        result = aggregate_votes([
            ("a", _r("a", "w", 0.9)),
            ("b", _r("b", "x", 0.8)),
            ("c", _r("c", "y", 0.7)),
            ("d", _r("d", "z", 0.6)),
        ], policy)
        assert result.is_unknown
        assert [a.intent for a in result.alternatives] == ["w", "x"]

    def test_deterministic(self, policy):
        subs = [
            ("pattern", _r("pattern", "a", 0.6)),
            ("semantic", _r("semantic", "b", 0.6)),
            ("trained_model", _r("trained_model", "a", 0.5)),
        ]
        first = aggregate_votes(subs, policy)
        second = aggregate_votes(subs, policy)
        assert first.to_dict() == second.to_dict()


class TestEnsembleRouter:

    @pytest.mark.asyncio
    async def test_route_collects_sub_results(self, stub, policy):
        router = EnsembleRouter([
            stub("pattern", "contacts", 0.95, matched_pattern="contacts at {company}"),
            stub("semantic", "contacts", 0.8),
            stub("trained_model", "contacts", 0.7, model_version=4),
        ], policy)
        result = await router.route("contacts at acme")
        assert result.intent == "contacts"
        assert set(result.method_results) == {"pattern", "semantic", "trained_model"}
        assert result.model_version == 4
        assert result.matched_pattern == "contacts at {company}"
        assert result.latency_ms >= 0.0

    @pytest.mark.asyncio
    async def test_matched_pattern_only_when_agreeing(self, stub, policy):
        router = EnsembleRouter([
            stub("pattern", "loi_date", 0.95, matched_pattern="when is {company} loi"),
            stub("semantic", "contacts", 0.9),
            stub("trained_model", "contacts", 0.9),
        ], policy)
        result = await router.route("who did we meet about the loi")
        assert result.intent == "contacts"
        assert result.matched_pattern is None

    @pytest.mark.asyncio
    async def test_timeout_casts_no_vote(self, stub, policy):
        slow = stub("pattern", "loi_date", 0.95, delay=1.0)
        router = EnsembleRouter([
            slow,
            stub("semantic", "contacts", 0.9),
            stub("trained_model", "contacts", 0.9),
        ], policy, method_timeout=0.05)
        result = await router.route("query")
        assert result.intent == "contacts"
        assert result.confidence == pytest.approx(1.0)
        assert "pattern" not in result.method_results
        err = router.last_errors["pattern"]
        assert isinstance(err, MethodTimeoutError)
        assert err.timeout_ms == 50
        assert err.is_retryable

    @pytest.mark.asyncio
    async def test_exception_casts_no_vote(self, stub, policy):
        router = EnsembleRouter([
            stub("pattern", "contacts", 0.95),
            stub("semantic", error=RuntimeError("provider exploded")),
            stub("trained_model", "contacts", 0.6),
        ], policy)
        result = await router.route("query")
        assert result.intent == "contacts"
        assert set(result.method_results) == {"pattern", "trained_model"}
        assert isinstance(router.last_errors["semantic"], RuntimeError)
        assert "pattern" not in router.last_errors

    @pytest.mark.asyncio
    async def test_all_fail_is_unknown(self, stub, policy):
        router = EnsembleRouter([
            stub("pattern", error=ValueError("x")),
            stub("semantic", error=RuntimeError("y")),
        ], policy)
        result = await router.route("query")
        assert result.is_unknown
        assert result.method_results == {}

    @pytest.mark.asyncio
    async def test_empty_query_rejected(self, stub, policy):
        matcher = stub("pattern", "contacts", 0.9)
        router = EnsembleRouter([matcher], policy)
        with pytest.raises(ValidationError):
            await router.route("   ")
        assert matcher.calls == 0

    @pytest.mark.asyncio
    async def test_sinks_receive_events(self, stub, policy):
        events = []

        class ListSink:
            def record(self, event):
                events.append(event)

        class BrokenSink:
            def record(self, event):
                raise RuntimeError("sink down")

        router = EnsembleRouter([stub("pattern", "contacts", 0.95)], policy, sinks=[BrokenSink()])
        router.add_sink(ListSink())
        result = await router.route("contacts at acme")

        assert result.intent == "contacts"
        assert len(events) == 1
        assert events[0]["intent"] == "contacts"
        assert events[0]["query"] == "contacts at acme"
        assert events[0]["method_confidences"] == {"pattern": pytest.approx(0.95)}

    def test_duplicate_methods_rejected(self, stub, policy):
        with pytest.raises(ValidationError):
            EnsembleRouter([stub("pattern"), stub("pattern")], policy)

    def test_missing_weight_rejected(self, stub, policy):
        with pytest.raises(ValidationError):
            EnsembleRouter([stub("keyword")], policy)

    @pytest.mark.asyncio
    async def test_classify_alias_and_describe(self, stub, policy):
        router = _router(stub, {"pattern": ("contacts", 0.95)}, policy)
        assert (await router.classify("x")).intent == "contacts"
        info = router.describe()
        assert info["methods"] == ["pattern"]
        assert info["confidence_threshold"] == 0.6
