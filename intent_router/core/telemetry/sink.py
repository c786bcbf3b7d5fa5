"""Telemetry sink that feeds the Prometheus metrics registry."""

from typing import Any, Mapping

from intent_router.core.intent.types import UNKNOWN_INTENT

from .metrics import MetricsRegistry


class MetricsSink:
    """Turns routing events into counters and a latency histogram."""

    def __init__(self, registry: MetricsRegistry):
        self.registry = registry
        self.queries = registry.counter(
            "intent_router_queries_total", "Routed queries"
        )
        self.unknown = registry.counter(
            "intent_router_unknown_total", "Queries resolved to unknown"
        )
        self.by_intent = registry.labeled_counter(
            "intent_router_intent_total", "Routed queries per intent", "intent"
        )
        self.by_method = registry.labeled_counter(
            "intent_router_winning_method_total", "Decisions per winning method", "method"
        )
        self.latency = registry.histogram(
            "intent_router_route_latency_ms", "End-to-end routing latency in milliseconds"
        )

    def record(self, event: Mapping[str, Any]) -> None:
        intent = str(event.get("intent", UNKNOWN_INTENT))
        self.queries.inc()
        if intent == UNKNOWN_INTENT:
            self.unknown.inc()
        self.by_intent.inc(intent)
        self.by_method.inc(str(event.get("winning_method") or "none"))
        self.latency.observe(float(event.get("latency_ms", 0.0)))
