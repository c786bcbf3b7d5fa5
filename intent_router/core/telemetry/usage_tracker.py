"""In-memory query analytics fed by the ensemble's telemetry events."""

import threading
import time
from collections import Counter, deque
from datetime import datetime, timezone
from typing import Any, Mapping

from intent_router.core.intent.types import UNKNOWN_INTENT

MAX_QUERY_CHARS = 200


class UsageTracker:
    """Counts routed queries, intents and winning methods.

    Keeps the last ``max_entries`` queries (truncated to 200 chars) plus
    per-hour totals. A query counts as successful when it resolved to a real
    intent.
    """

    def __init__(self, max_entries: int = 10_000):
        self._lock = threading.Lock()
        self._recent: deque[dict[str, Any]] = deque(maxlen=max_entries)
        self._intents: Counter[str] = Counter()
        self._methods: Counter[str] = Counter()
        self._hours: dict[str, dict[str, float]] = {}
        self.query_count = 0
        self.successes = 0
        self.total_latency_ms = 0.0
        self.started_at = time.time()

    def record(self, event: Mapping[str, Any]) -> None:
        intent = str(event.get("intent", UNKNOWN_INTENT))
        latency = float(event.get("latency_ms", 0.0))
        success = intent != UNKNOWN_INTENT
        ts = float(event.get("timestamp", time.time()))
        hour = datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%dT%H")

        entry = {
            "timestamp": ts,
            "query": str(event.get("query", ""))[:MAX_QUERY_CHARS],
            "intent": intent,
            "confidence": float(event.get("confidence", 0.0)),
            "winning_method": event.get("winning_method"),
            "latency_ms": latency,
            "success": success,
        }

        with self._lock:
            self._recent.append(entry)
            self.query_count += 1
            self.total_latency_ms += latency
            if success:
                self.successes += 1
            self._intents[intent] += 1
            self._methods[str(event.get("winning_method") or "none")] += 1

            bucket = self._hours.setdefault(hour, {"queries": 0, "successes": 0, "latency_ms": 0.0})
            bucket["queries"] += 1
            bucket["successes"] += int(success)
            bucket["latency_ms"] += latency

    def recent(self, limit: int = 20) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._recent)[-limit:]

    @property
    def success_rate(self) -> float:
        return self.successes / self.query_count if self.query_count else 0.0

    def health_score(self) -> int:
        """0-100: 70% success rate, 30% latency (full marks under 1s)."""
        if not self.query_count:
            return 100
        avg_latency = self.total_latency_ms / self.query_count
        latency_score = max(0.0, 1.0 - max(0.0, avg_latency - 1000.0) / 4000.0)
        return round(100 * (0.7 * self.success_rate + 0.3 * latency_score))

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            count = self.query_count
            top_intents = [
                {"intent": i, "count": c, "share": round(c / count, 4)}
                for i, c in self._intents.most_common(10)
            ]
            methods = dict(self._methods)
            peak_hours = sorted(self._hours.items(), key=lambda kv: kv[1]["queries"], reverse=True)[:5]

        return {
            "total_queries": count,
            "successful_queries": self.successes,
            "failed_queries": count - self.successes,
            "success_rate": round(self.success_rate, 4),
            "avg_latency_ms": round(self.total_latency_ms / count, 2) if count else 0.0,
            "top_intents": top_intents,
            "winning_methods": methods,
            "peak_hours": [
                {
                    "hour": hour,
                    "queries": int(b["queries"]),
                    "success_rate": round(b["successes"] / b["queries"], 4),
                }
                for hour, b in peak_hours
            ],
            "health_score": self.health_score(),
            "uptime_seconds": round(time.time() - self.started_at, 1),
        }
