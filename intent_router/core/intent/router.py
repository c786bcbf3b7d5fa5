"""Public entry points of the intent router.

``IntentRouter`` wires the catalog, the three matchers, the ensemble, the
feedback loop and the analytics together. The module-level functions operate
on a lazily built singleton configured from ``intent_router.config``.
"""

import time
from pathlib import Path
from typing import Any, Optional

from intent_router import config
from intent_router.core.errors import PermanentError, ValidationError
from intent_router.core.health.health_check import HealthChecker, HealthResult, HealthState
from intent_router.core.logging import get_logger
from intent_router.core.resilience.circuit_breaker import CircuitBreaker
from intent_router.core.telemetry.usage_tracker import UsageTracker
from intent_router.core.utils.lazy import Lazy
from intent_router.embeddings.embedding_service import EmbeddingService
from intent_router.embeddings.provider import OpenAIEmbeddingProvider
from intent_router.ml.intent_classifier import IntentClassifier
from intent_router.ml.persistence import load_model, save_model
from intent_router.ml.training_data import TRAINING_SAMPLES

from .catalog import IntentCatalog, load_catalog
from .ensemble import EnsembleRouter, VotingPolicy
from .feedback import FeedbackLoop
from .pattern_matcher import PatternMatcher
from .semantic_matcher import SemanticMatcher
from .types import ClassificationResult

_log = get_logger("intent.router")

HEALTH_PROBE_QUERY = "who owns this company"


class IntentRouter:
    """Facade over the routing components."""

    def __init__(
        self,
        catalog: IntentCatalog,
        pattern: PatternMatcher,
        semantic: SemanticMatcher,
        classifier: IntentClassifier,
        ensemble: EnsembleRouter,
        feedback: FeedbackLoop,
        usage: UsageTracker,
        snapshot_path: Optional[Path] = None,
    ):
        self.catalog = catalog
        self.pattern = pattern
        self.semantic = semantic
        self.classifier = classifier
        self.ensemble = ensemble
        self.feedback = feedback
        self.usage = usage
        self.snapshot_path = snapshot_path
        self.started_at = time.time()
        self.seeds_warmed = False
        self.health_checker = self._build_health_checker()

    async def warm_up(self) -> int:
        """Embed the semantic seed phrases outside any per-method timeout."""
        seeds = await self.semantic.warm_up()
        self.seeds_warmed = True
        _log.info(
            "Semantic seeds embedded",
            seeds=seeds,
            backend=self.semantic.embeddings.last_backend,
        )
        return seeds

    async def classify(self, query: str) -> ClassificationResult:
        if not self.seeds_warmed:
            await self.warm_up()
        return await self.ensemble.route(query)

    def record_feedback(
        self,
        query: str,
        predicted_intent: str,
        actual_intent: str,
        was_correct: bool,
    ) -> bool:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("feedback query must be a non-empty string", field="query")
        return self.feedback.record(query, predicted_intent, actual_intent, was_correct)

    def save_snapshot(self) -> Optional[Path]:
        """Persist the current classifier when a snapshot path is configured."""
        if self.snapshot_path is None:
            return None
        try:
            return save_model(self.classifier.model, self.snapshot_path)
        except OSError as e:
            _log.error("Model snapshot save failed", path=str(self.snapshot_path), error=str(e))
            return None

    def get_stats(self) -> dict[str, Any]:
        return {
            "analytics": self.usage.get_stats(),
            "model": self.classifier.get_model_info(),
            "semantic": self.semantic.get_metrics(),
            "router": {
                **self.ensemble.describe(),
                "feedback": self.feedback.get_stats(),
                "feedback_buffer_size": self.feedback.buffer_size,
                "retrain_threshold": self.feedback.threshold,
                "retrain_count": self.feedback.retrain_count,
                "catalog": {
                    "source": self.catalog.source,
                    "intents": len(self.catalog),
                    "patterns": self.pattern.pattern_count,
                },
                "uptime_seconds": round(time.time() - self.started_at, 1),
            },
        }

    def _build_health_checker(self) -> HealthChecker:
        checker = HealthChecker()

        async def _check_patterns() -> HealthResult:
            t0 = time.monotonic()
            count = self.pattern.pattern_count
            state = HealthState.HEALTHY if count else HealthState.UNHEALTHY
            return HealthResult(state, (time.monotonic() - t0) * 1000, f"{count} patterns", {"intents": len(self.catalog)})

        async def _check_semantic() -> HealthResult:
            t0 = time.monotonic()
            await self.semantic.match_semantic(HEALTH_PROBE_QUERY)
            metrics = self.semantic.get_metrics()
            latency = (time.monotonic() - t0) * 1000
            if metrics["circuit"]["state"] != "closed":
                return HealthResult(HealthState.DEGRADED, latency, "provider circuit not closed, local embeddings", metrics)
            if metrics["backend"] == "local":
                return HealthResult(HealthState.DEGRADED, latency, "no embedding provider configured, local embeddings", metrics)
            return HealthResult(HealthState.HEALTHY, latency, f"backend {metrics['backend']}", metrics)

        async def _check_model() -> HealthResult:
            t0 = time.monotonic()
            model = self.classifier.model
            model.validate()
            result = self.classifier.predict(HEALTH_PROBE_QUERY)
            return HealthResult(
                HealthState.HEALTHY,
                (time.monotonic() - t0) * 1000,
                f"version {model.version}",
                {"version": model.version, "probe_intent": result.intent},
            )

        async def _check_analytics() -> HealthResult:
            score = self.usage.health_score()
            state = HealthState.HEALTHY if score >= 50 else HealthState.DEGRADED
            return HealthResult(state, 0.0, f"health score {score}", {"queries": self.usage.query_count})

        checker.register("pattern_catalog", _check_patterns)
        checker.register("semantic", _check_semantic)
        checker.register("trained_model", _check_model)
        checker.register("analytics", _check_analytics)
        return checker

    async def health_check(self) -> dict[str, Any]:
        status = await self.health_checker.status()
        return {
            "status": status.overall.value,
            **status.to_dict(),
        }


def _training_samples(catalog: IntentCatalog) -> list[tuple[str, str]]:
    """Built-in labeled queries for catalog intents plus every seed phrase."""
    known = set(catalog.intents)
    samples = [(q, i) for q, i in TRAINING_SAMPLES if i in known]
    seen = set(samples)
    for template in catalog.templates:
        for phrase in template.seed_phrases:
            pair = (phrase, template.intent)
            if pair not in seen:
                samples.append(pair)
                seen.add(pair)
    return samples


def build_router(catalog: Optional[IntentCatalog] = None) -> IntentRouter:
    """Assemble a router from configuration."""
    catalog = catalog or load_catalog(config.INTENT_CATALOG_PATH)

    provider = None
    if config.EMBEDDING_API_KEY:
        provider = OpenAIEmbeddingProvider(
            api_key=config.EMBEDDING_API_KEY,
            model=config.EMBEDDING_MODEL,
            base_url=config.EMBEDDING_BASE_URL,
            timeout=config.EMBEDDING_TIMEOUT_SECONDS,
            dimension=config.EMBEDDING_DIMENSION,
        )
    else:
        _log.info("No embedding API key, using local embeddings")

    embeddings = EmbeddingService(
        provider,
        dimension=config.EMBEDDING_DIMENSION,
        cache_size=config.EMBEDDING_CACHE_SIZE,
        breaker=CircuitBreaker(
            "embeddings",
            failure_threshold=config.EMBEDDING_CB_FAILURE_THRESHOLD,
            cooldown_sec=config.EMBEDDING_CB_COOLDOWN_SECONDS,
        ),
    )

    pattern = PatternMatcher(catalog, confidence=config.PATTERN_MATCH_CONFIDENCE)
    semantic = SemanticMatcher(
        catalog,
        embeddings,
        threshold=config.SEMANTIC_SIMILARITY_THRESHOLD,
        max_alternatives=config.SEMANTIC_MAX_ALTERNATIVES,
    )

    classifier = IntentClassifier.build(
        _training_samples(catalog),
        intents=catalog.intents,
        hidden_size=config.MODEL_HIDDEN_SIZE,
        epochs=config.MODEL_TRAIN_EPOCHS,
        learning_rate=config.MODEL_LEARNING_RATE,
        retrain_epochs=config.MODEL_RETRAIN_EPOCHS,
        seed=config.MODEL_SEED,
    )

    snapshot_path = config.MODEL_SNAPSHOT_PATH
    if snapshot_path is not None and Path(snapshot_path).exists():
        try:
            classifier.publish(load_model(snapshot_path))
        except PermanentError as e:
            _log.warning("Ignoring model snapshot", path=str(snapshot_path), error=e.message, code=e.code)

    usage = UsageTracker(max_entries=config.USAGE_LOG_MAX_ENTRIES)
    ensemble = EnsembleRouter(
        [pattern, semantic, classifier],
        VotingPolicy(
            weights=config.ENSEMBLE_WEIGHTS,
            threshold=config.ENSEMBLE_CONFIDENCE_THRESHOLD,
            min_vote_confidence=config.ENSEMBLE_MIN_VOTE_CONFIDENCE,
            max_alternatives=config.ENSEMBLE_MAX_ALTERNATIVES,
        ),
        method_timeout=config.METHOD_TIMEOUT_SECONDS,
        sinks=[usage],
    )

    router: IntentRouter
    feedback = FeedbackLoop(
        classifier,
        threshold=config.FEEDBACK_RETRAIN_THRESHOLD,
        on_retrained=lambda: router.save_snapshot(),
    )
    router = IntentRouter(
        catalog=catalog,
        pattern=pattern,
        semantic=semantic,
        classifier=classifier,
        ensemble=ensemble,
        feedback=feedback,
        usage=usage,
        snapshot_path=snapshot_path,
    )
    _log.info(
        "Router ready",
        intents=len(catalog),
        model=classifier.version,
        embeddings=embeddings.backend,
    )
    return router


_router: Lazy[IntentRouter] = Lazy(build_router, name="intent_router")


def get_router() -> IntentRouter:
    return _router.get()


def set_router(router: IntentRouter) -> None:
    _router.set(router)


async def classify(query: str) -> ClassificationResult:
    return await get_router().classify(query)


def record_feedback(query: str, predicted_intent: str, actual_intent: str, was_correct: bool) -> bool:
    return get_router().record_feedback(query, predicted_intent, actual_intent, was_correct)


def get_stats() -> dict[str, Any]:
    return get_router().get_stats()


async def health_check() -> dict[str, Any]:
    return await get_router().health_check()
