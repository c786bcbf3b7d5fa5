"""Tests for the OpenAI-compatible embedding provider."""

import json

import httpx
import pytest

from intent_router.core.errors import ProviderError
from intent_router.embeddings.provider import EmbeddingProvider, OpenAIEmbeddingProvider


def _provider(handler, api_key="sk-test", **kw):
    return OpenAIEmbeddingProvider(
        api_key=api_key,
        model="text-embedding-3-small",
        base_url="http://embeddings.test",
        transport=httpx.MockTransport(handler),
        **kw,
    )


class TestOpenAIEmbeddingProvider:

    def test_satisfies_protocol(self):
        assert isinstance(_provider(lambda r: httpx.Response(200)), EmbeddingProvider)

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

        vector = await _provider(handler, dimension=3).embed("who owns acme")
        assert vector == [0.1, 0.2, 0.3]
        assert seen["path"] == "/v1/embeddings"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == {"model": "text-embedding-3-small", "input": "who owns acme", "dimensions": 3}

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = _provider(lambda r: httpx.Response(200), api_key=None)
        assert provider.is_configured is False
        with pytest.raises(ProviderError) as exc:
            await provider.embed("x")
        assert exc.value.code == "PROVIDER_UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_http_error(self):
        with pytest.raises(ProviderError) as exc:
            await _provider(lambda r: httpx.Response(500, json={"error": "down"})).embed("x")
        assert "500" in exc.value.message
        assert exc.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderError) as exc:
            await _provider(handler).embed("x")
        assert exc.value.code == "PROVIDER_TIMEOUT"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError):
            await _provider(handler).embed("x")

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        with pytest.raises(ProviderError) as exc:
            await _provider(lambda r: httpx.Response(200, json={"data": []})).embed("x")
        assert "malformed" in exc.value.message

    @pytest.mark.asyncio
    async def test_not_json(self):
        with pytest.raises(ProviderError):
            await _provider(lambda r: httpx.Response(200, content=b"<html>")).embed("x")

    @pytest.mark.asyncio
    async def test_empty_vector(self):
        with pytest.raises(ProviderError):
            await _provider(lambda r: httpx.Response(200, json={"data": [{"embedding": []}]})).embed("x")
