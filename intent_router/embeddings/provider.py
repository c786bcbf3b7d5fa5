"""Network embedding providers."""

from typing import Optional, Protocol, runtime_checkable

import httpx

from intent_router.core.errors import ProviderError
from intent_router.core.logging import get_logger
from intent_router.core.utils.http_pool import get_client

_log = get_logger("embeddings.provider")


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that turns text into a vector over the network."""

    name: str

    async def embed(self, text: str) -> list[float]: ...


class OpenAIEmbeddingProvider:
    """OpenAI-compatible ``/v1/embeddings`` client.

    Single attempt per call with a bounded timeout. Every failure mode
    (missing key, HTTP status, transport error, timeout, bad payload) is
    raised as ``ProviderError`` so the caller can fall back.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str = "https://api.openai.com",
        timeout: float = 5.0,
        dimension: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.dimension = dimension
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _client(self) -> httpx.AsyncClient:
        return await get_client(
            service=f"embeddings:{self.base_url}",
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def embed(self, text: str) -> list[float]:
        if not self.is_configured:
            raise ProviderError("embedding API key not configured", provider=self.name, code="PROVIDER_UNAUTHENTICATED")

        payload: dict = {"model": self.model, "input": text}
        if self.dimension:
            payload["dimensions"] = self.dimension

        client = await self._client()
        try:
            response = await client.post(
                "/v1/embeddings",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"embedding request timed out after {self.timeout}s", provider=self.name, code="PROVIDER_TIMEOUT") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"embedding request failed with HTTP {e.response.status_code}", provider=self.name) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"embedding transport error: {e}", provider=self.name) from e
        except ValueError as e:
            raise ProviderError("embedding response is not JSON", provider=self.name) from e

        try:
            vector = [float(v) for v in data["data"][0]["embedding"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError("malformed embedding payload", provider=self.name) from e

        if not vector:
            raise ProviderError("empty embedding returned", provider=self.name)
        return vector
