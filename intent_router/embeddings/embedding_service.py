"""Embedding generation with caching and local fallback."""

from typing import Any, Dict, List, Optional, Tuple

from intent_router.core.errors import ProviderError
from intent_router.core.logging import get_logger
from intent_router.core.resilience.circuit_breaker import CircuitBreaker
from intent_router.core.utils.text import normalize_text

from .local_embedding import local_embedding
from .provider import EmbeddingProvider

_log = get_logger("embeddings.service")


class EmbeddingService:
    """Text to vector with an LRU cache.

    Handles:
    - Cache lookup by normalized text (lowercased, trimmed)
    - Provider call guarded by a circuit breaker
    - Synchronous fallback to the local hashed embedding on any provider
      failure. Fallback vectors are not cached while a provider is
      configured, so a recovered provider never compares against them
    """

    def __init__(
        self,
        provider: Optional[EmbeddingProvider],
        dimension: int,
        cache_size: int = 2048,
        breaker: Optional[CircuitBreaker] = None,
    ):
        """Initialize embedding service.

        Args:
            provider: Network provider, or None for local-only operation
            dimension: Length of fallback vectors (the provider's native size)
            cache_size: Maximum cache entries before LRU eviction
            breaker: Circuit breaker for the provider
        """
        if cache_size < 1:
            raise ValueError("cache_size must be >= 1")
        self.provider = provider
        self.dimension = dimension
        self._cache_size = cache_size
        self._cache: Dict[str, List[float]] = {}
        self._breaker = breaker or CircuitBreaker("embeddings")
        self.provider_calls = 0
        self.fallback_count = 0
        self.cache_hits = 0
        self.last_backend = "local" if provider is None else getattr(provider, "name", "provider")

    @property
    def backend(self) -> str:
        if self.provider is None:
            return "local"
        return getattr(self.provider, "name", "provider")

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    async def embed(self, text: str) -> List[float]:
        key = normalize_text(text)

        cached = self._cache.get(key)
        if cached is not None:
            self._cache[key] = self._cache.pop(key)
            self.cache_hits += 1
            return cached

        vector, cacheable = await self._compute(key)
        if cacheable:
            self._cache_with_eviction(key, vector)
        return vector

    async def _compute(self, key: str) -> Tuple[List[float], bool]:
        """Returns the vector and whether it belongs in the cache."""
        if self.provider is None:
            self.fallback_count += 1
            self.last_backend = "local"
            return local_embedding(key, self.dimension), True

        if not self._breaker.allow_request():
            self.fallback_count += 1
            self.last_backend = "local"
            _log.debug("Embedding circuit open, using local", text_len=len(key))
            return local_embedding(key, self.dimension), False

        self.provider_calls += 1
        try:
            vector = await self.provider.embed(key)
        except ProviderError as e:
            self._breaker.record_failure()
            self.fallback_count += 1
            self.last_backend = "local"
            _log.warning(
                "Embedding provider failed, using local",
                provider=e.provider,
                error=e.message,
                code=e.code,
            )
            return local_embedding(key, self.dimension), False

        self._breaker.record_success()
        self.last_backend = self.backend
        return vector, True

    def _cache_with_eviction(self, key: str, value: List[float]) -> None:
        if key in self._cache:
            self._cache.pop(key)
        elif len(self._cache) >= self._cache_size:
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]
        self._cache[key] = value

    def clear_cache(self) -> int:
        """Clear embedding cache.

        Returns:
            Number of cached entries cleared
        """
        count = len(self._cache)
        self._cache.clear()
        return count

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "last_backend": self.last_backend,
            "dimension": self.dimension,
            "cache_size": len(self._cache),
            "cache_capacity": self._cache_size,
            "cache_hits": self.cache_hits,
            "provider_calls": self.provider_calls,
            "fallback_count": self.fallback_count,
            "circuit": self._breaker.snapshot(),
        }
