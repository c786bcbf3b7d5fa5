import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from intent_router.api.deps import get_state
from intent_router.config import APP_VERSION
from intent_router.core.health.health_check import _START_TIME, HealthState
from intent_router.core.logging import get_logger

_log = get_logger("api.status")

router = APIRouter(tags=["Status"])


@router.get("/health")
async def health_check():
    state = get_state()
    now = datetime.now(timezone.utc)

    if state.router is None:
        return JSONResponse(
            status_code=503,
            content={
                "status": HealthState.UNHEALTHY.value,
                "version": APP_VERSION,
                "timestamp": now.isoformat(),
                "issues": ["intent router not initialized"],
            },
        )

    report = await state.router.health_check()
    issues = [
        f"{c['name']}: {c['message']}"
        for c in report["components"]
        if c["state"] != HealthState.HEALTHY.value
    ]

    _log.info("Health check", status=report["status"], issues=len(issues))

    return {
        "status": report["status"],
        "version": APP_VERSION,
        "timestamp": now.isoformat(),
        "uptime_seconds": round(time.time() - _START_TIME, 1),
        "components": report["components"],
        "issues": issues or None,
    }


@router.get("/health/quick")
async def health_quick():
    state = get_state()
    router_ok = state.router is not None

    return {
        "status": "ok" if router_ok else "degraded",
        "version": APP_VERSION,
        "router": "ok" if router_ok else "off",
        "model_version": state.router.classifier.version if router_ok else None,
    }


@router.get("/metrics")
async def metrics_endpoint():
    state = get_state()
    if state.metrics:
        return PlainTextResponse(
            content=state.metrics.format_all(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )
    return PlainTextResponse(content="", media_type="text/plain")
