"""Embedding-similarity matcher over per-intent seed phrases."""

import asyncio
from typing import Any

from intent_router.core.logging import get_logger
from intent_router.embeddings.embedding_service import EmbeddingService
from intent_router.embeddings.vector_ops import cosine_similarity

from .catalog import IntentCatalog
from .types import ClassificationResult, IntentAlternative, clamp_confidence

_log = get_logger("intent.semantic")


class SemanticMatcher:
    """Scores a query against every seed phrase of every intent.

    Each intent keeps its *maximum* similarity over its canonical phrase and
    examples, so one close paraphrase is enough. The best intent is reported
    as ``unknown`` when it falls below ``threshold``.
    """

    method = "semantic"

    def __init__(
        self,
        catalog: IntentCatalog,
        embeddings: EmbeddingService,
        threshold: float = 0.75,
        max_alternatives: int = 3,
    ):
        self.catalog = catalog
        self.embeddings = embeddings
        self.threshold = threshold
        self.max_alternatives = max_alternatives
        self._seeds: list[tuple[str, str]] = [
            (t.intent, phrase) for t in catalog.templates for phrase in t.seed_phrases
        ]

    @property
    def seed_count(self) -> int:
        return len(self._seeds)

    async def _embed_seeds(self) -> dict[str, list[float]]:
        phrases = list(dict.fromkeys(phrase for _, phrase in self._seeds))
        vectors = await asyncio.gather(*(self.embeddings.embed(p) for p in phrases))
        return dict(zip(phrases, vectors))

    async def warm_up(self) -> int:
        """Embed every seed phrase once so the first query does not pay for it."""
        await self._embed_seeds()
        return len(self._seeds)

    async def score_intents(self, query: str) -> list[tuple[str, float]]:
        """Max similarity per intent, best first. Ties keep catalog order."""
        query_vec, seed_vecs = await asyncio.gather(
            self.embeddings.embed(query),
            self._embed_seeds(),
        )

        best: dict[str, float] = {}
        for intent, phrase in self._seeds:
            sim = cosine_similarity(query_vec, seed_vecs[phrase])
            if intent not in best or sim > best[intent]:
                best[intent] = sim

        return sorted(best.items(), key=lambda kv: kv[1], reverse=True)

    async def match_semantic(self, query: str) -> ClassificationResult:
        if not query.strip():
            return ClassificationResult.unknown(self.method)

        ranked = await self.score_intents(query)
        if not ranked:
            return ClassificationResult.unknown(self.method)

        top_intent, top_sim = ranked[0]
        alternatives = [
            IntentAlternative(name, clamp_confidence(sim))
            for name, sim in ranked[1:1 + self.max_alternatives]
        ]
        accepted = top_sim >= self.threshold

        _log.debug(
            "Semantic scored",
            top=top_intent,
            similarity=top_sim,
            accepted=accepted,
        )
        if not accepted:
            # Below threshold: the candidate stays visible as the first alternative.
            return ClassificationResult.unknown(
                self.method,
                alternatives=[IntentAlternative(top_intent, clamp_confidence(top_sim)), *alternatives],
            )
        return ClassificationResult(
            intent=top_intent,
            confidence=top_sim,
            method=self.method,
            alternatives=alternatives,
        )

    async def classify(self, query: str) -> ClassificationResult:
        return await self.match_semantic(query)

    def get_metrics(self) -> dict[str, Any]:
        return {
            "seed_count": self.seed_count,
            "intent_count": len(self.catalog),
            "threshold": self.threshold,
            **self.embeddings.get_metrics(),
        }
