"""Tests for the embedding-similarity matcher."""

import pytest

from intent_router.core.errors import ProviderError
from intent_router.core.intent.semantic_matcher import SemanticMatcher
from intent_router.core.resilience.circuit_breaker import CircuitBreaker
from intent_router.embeddings.embedding_service import EmbeddingService
from intent_router.embeddings.local_embedding import local_embedding


class TestSemanticMatcher:

    @pytest.mark.asyncio
    async def test_exact_seed_phrase(self, catalog, embeddings):
        result = await SemanticMatcher(catalog, embeddings).match_semantic("who owns intel")
        assert result.intent == "account_ownership"
        assert result.confidence == pytest.approx(1.0)
        assert result.method == "semantic"
        assert len(result.alternatives) == 2

    @pytest.mark.asyncio
    async def test_paraphrase_above_threshold(self, catalog, embeddings):
        result = await SemanticMatcher(catalog, embeddings).match_semantic("who owns acme")
        assert result.intent == "account_ownership"
        assert 0.75 <= result.confidence < 1.0

    @pytest.mark.asyncio
    async def test_below_threshold_is_unknown(self, catalog, embeddings):
        matcher = SemanticMatcher(catalog, embeddings, threshold=0.99)
        result = await matcher.match_semantic("who owns acme")
        assert result.is_unknown
        assert result.confidence == 0.0
        assert result.alternatives[0].intent == "account_ownership"
        assert result.alternatives[0].confidence > 0.75

    @pytest.mark.asyncio
    async def test_empty_query(self, catalog, embeddings):
        result = await SemanticMatcher(catalog, embeddings).match_semantic("  ")
        assert result.is_unknown
        assert embeddings.cache_size == 0

    @pytest.mark.asyncio
    async def test_scores_use_max_per_intent(self, catalog, embeddings):
        ranked = await SemanticMatcher(catalog, embeddings).score_intents("download report")
        assert ranked[0] == ("export_pipeline", pytest.approx(1.0))
        assert [i for i, _ in ranked].count("export_pipeline") == 1
        assert len(ranked) == 3

    @pytest.mark.asyncio
    async def test_max_alternatives(self, catalog, embeddings):
        matcher = SemanticMatcher(catalog, embeddings, max_alternatives=1)
        result = await matcher.match_semantic("late stage pipeline")
        assert len(result.alternatives) == 1

    @pytest.mark.asyncio
    async def test_warm_up_embeds_seeds(self, catalog, embeddings):
        matcher = SemanticMatcher(catalog, embeddings)
        assert await matcher.warm_up() == matcher.seed_count == 8
        assert embeddings.cache_size == 8

        await matcher.match_semantic("who owns intel")
        assert embeddings.cache_hits >= 8

    @pytest.mark.asyncio
    async def test_classify_and_metrics(self, catalog, embeddings):
        matcher = SemanticMatcher(catalog, embeddings)
        result = await matcher.classify("excel export")
        assert result.intent == "export_pipeline"
        metrics = matcher.get_metrics()
        assert metrics["backend"] == "local"
        assert metrics["seed_count"] == 8
        assert metrics["threshold"] == 0.75


class ReversingProvider:
    """Provider whose vector space differs from the local fallback's."""

    name = "reversing"

    def __init__(self, dimension):
        self.dimension = dimension
        self.down = False

    async def embed(self, text):
        if self.down:
            raise ProviderError("unavailable", provider=self.name)
        return local_embedding(" ".join(w[::-1] for w in text.split()), self.dimension)


class TestProviderRecovery:

    @pytest.mark.asyncio
    async def test_matches_after_outage_during_warm_up(self, catalog):
        provider = ReversingProvider(1536)
        breaker = CircuitBreaker("semantic_recovery", failure_threshold=100)
        embeddings = EmbeddingService(provider, dimension=1536, breaker=breaker)
        matcher = SemanticMatcher(catalog, embeddings)

        provider.down = True
        await matcher.warm_up()
        assert embeddings.fallback_count == matcher.seed_count

        provider.down = False
        result = await matcher.match_semantic("who owns intel please")
        assert result.intent == "account_ownership"
        assert result.confidence >= 0.75
        assert embeddings.last_backend == "reversing"

    @pytest.mark.asyncio
    async def test_score_intents_during_outage_uses_one_space(self, catalog):
        provider = ReversingProvider(1536)
        provider.down = True
        matcher = SemanticMatcher(catalog, EmbeddingService(provider, dimension=1536))
        ranked = await matcher.score_intents("download report")
        assert ranked[0] == ("export_pipeline", pytest.approx(1.0))
