import asyncio
from typing import Optional, Dict

import httpx

from intent_router.core.logging import get_logger

_log = get_logger("core.http_pool")

DEFAULT_TIMEOUT_SECONDS = 10.0

POOL_LIMITS = httpx.Limits(
    max_connections=50,
    max_keepalive_connections=10,
)

_clients: Dict[str, httpx.AsyncClient] = {}
_lock = asyncio.Lock()


async def get_client(
    service: str = "default",
    base_url: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return the pooled client for ``service``, creating it once.

    Settings passed on later calls are ignored; the first caller wins.
    """

    async with _lock:
        if service not in _clients:
            service_timeout = timeout or DEFAULT_TIMEOUT_SECONDS
            _clients[service] = httpx.AsyncClient(
                base_url=base_url or "",
                headers=headers,
                limits=POOL_LIMITS,
                timeout=httpx.Timeout(service_timeout, connect=min(service_timeout, 5.0)),
                transport=transport,
            )
            _log.debug("Client created", service=service, timeout=service_timeout)
        return _clients[service]


def pool_size() -> int:
    return len(_clients)


async def close_all() -> int:

    async with _lock:
        cnt = len(_clients)
        for service, client in _clients.items():
            try:
                await client.aclose()
                _log.debug("Client closed", service=service)
            except (httpx.HTTPError, RuntimeError) as e:
                _log.warning("Client close error", service=service, error=str(e))
        _clients.clear()
        _log.debug("Pool cleanup done", closed_cnt=cnt)
        return cnt
