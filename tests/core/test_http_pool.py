"""Tests for the pooled httpx clients."""

import httpx
import pytest

from intent_router.core.utils import http_pool


class TestHttpPool:

    @pytest.mark.asyncio
    async def test_same_service_reuses_client(self):
        a = await http_pool.get_client("svc", base_url="http://example.test")
        b = await http_pool.get_client("svc", base_url="http://other.test")
        assert a is b
        assert str(a.base_url).startswith("http://example.test")
        await http_pool.close_all()

    @pytest.mark.asyncio
    async def test_services_are_isolated(self):
        a = await http_pool.get_client("one")
        b = await http_pool.get_client("two")
        assert a is not b
        assert http_pool.pool_size() == 2
        await http_pool.close_all()

    @pytest.mark.asyncio
    async def test_close_all_empties_pool(self):
        await http_pool.get_client("svc")
        closed = await http_pool.close_all()
        assert closed == 1
        assert http_pool.pool_size() == 0

    @pytest.mark.asyncio
    async def test_transport_is_used(self):
        def handler(request):
            return httpx.Response(200, json={"ok": True})

        client = await http_pool.get_client("mocked", base_url="http://api.test", transport=httpx.MockTransport(handler))
        resp = await client.get("/ping")
        assert resp.json() == {"ok": True}
        await http_pool.close_all()
