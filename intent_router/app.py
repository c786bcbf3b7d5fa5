import asyncio
import time
import traceback
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from intent_router.api import (
    classify_router,
    get_state,
    status_router,
)
from intent_router.config import APP_VERSION, HOST, PORT
from intent_router.core.errors import IntentRouterError
from intent_router.core.intent.router import get_router
from intent_router.core.logging import get_logger, get_request_id, reset_request_id, set_request_id
from intent_router.core.telemetry.metrics import MetricsRegistry
from intent_router.core.telemetry.sink import MetricsSink
from intent_router.core.utils.http_pool import close_all

_log = get_logger("app")

SHUTDOWN_HTTP_POOL_TIMEOUT = 5.0


def _build_metrics() -> MetricsRegistry:
    registry = MetricsRegistry()
    registry.counter("http_requests_total", "Total HTTP requests")
    registry.histogram(
        "http_request_duration_seconds",
        "HTTP request duration",
        buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10],
    )
    registry.counter("http_errors_total", "Total HTTP errors")
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the router (training the classifier) and wire telemetry."""
    state = get_state()
    state.shutdown_event = asyncio.Event()

    if state.router is None:
        state.router = await asyncio.to_thread(get_router)

    if state.metrics is None:
        state.metrics = _build_metrics()
    if not any(isinstance(s, MetricsSink) for s in state.router.ensemble.sinks):
        state.router.ensemble.add_sink(MetricsSink(state.metrics))
    state.health_checker = state.router.health_checker

    await state.router.warm_up()

    _log.info(
        "APP ready",
        version=APP_VERSION,
        host=HOST,
        port=PORT,
        model=state.router.classifier.version,
    )

    yield

    _log.info("APP shutdown", reason="lifespan_end")
    state.shutdown_event.set()
    state.router.save_snapshot()

    try:
        await asyncio.wait_for(close_all(), timeout=SHUTDOWN_HTTP_POOL_TIMEOUT)
    except asyncio.TimeoutError:
        _log.warning("APP HTTP pool close timed out")

    _log.info("APP shutdown complete")


app = FastAPI(title="intent-router API", version=APP_VERSION, lifespan=lifespan)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Request-Id")
        or uuid4().hex[:12]
    )
    request.state.request_id = req_id
    token = set_request_id(req_id)
    t0 = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
        elapsed = time.perf_counter() - t0
        _state = get_state()
        if _state.metrics:
            _state.metrics.counter("http_requests_total", "Total HTTP requests").inc()
            _state.metrics.histogram("http_request_duration_seconds", "HTTP request duration").observe(elapsed)
    response.headers["X-Request-ID"] = req_id
    return response


app.include_router(status_router)
app.include_router(classify_router)
_log.debug("APP routers mounted", routers=["status", "classify"])


def _error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None) or get_request_id()
    _state = get_state()
    if _state.metrics:
        _state.metrics.counter("http_errors_total", "Total HTTP errors").inc()
    headers = {"X-Request-ID": req_id} if req_id else None
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={**content, "path": str(request.url.path), "request_id": req_id},
    )


@app.exception_handler(IntentRouterError)
async def router_error_handler(request: Request, exc: IntentRouterError):
    """Map the typed error hierarchy onto JSON + HTTP status."""
    _log.warning(
        "APP request failed",
        path=str(request.url.path),
        error_type=type(exc).__name__,
        code=exc.code,
        error=exc.message,
    )
    return _error_response(request, exc.http_status, {
        "error": type(exc).__name__,
        "code": exc.code,
        "message": exc.message,
        "is_retryable": exc.is_retryable,
    })


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    _log.error(
        "APP unhandled exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
        error=str(exc),
        traceback=traceback.format_exc(),
    )
    return _error_response(request, 500, {
        "error": "Internal Server Error",
        "message": str(exc) if str(exc) else "Unknown error",
        "type": type(exc).__name__,
    })


app.state.intent_router_state = get_state()

if __name__ == "__main__":
    import logging

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    uvicorn.run(
        "intent_router.app:app",
        host=HOST,
        port=PORT,
        log_level="warning",
        reload=False,
    )
