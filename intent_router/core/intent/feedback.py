"""Correction buffer that periodically retrains the classifier."""

import threading
import time
from typing import Any, Callable, Optional, Protocol, Sequence

from intent_router.core.errors import ClassifierDimensionError
from intent_router.core.logging import get_logger

from .types import FeedbackRecord

_log = get_logger("intent.feedback")


class Retrainable(Protocol):
    def retrain(self, samples: Sequence[tuple[str, str]]) -> bool: ...


class FeedbackLoop:
    """Buffers feedback and retrains once ``threshold`` records are held.

    Only records marked correct are used, as ``(query, actual_intent)``
    pairs. Confirmed mistakes are dropped, not used as corrections. The buffer
    is emptied on every retrain pass, whatever the outcome.
    """

    def __init__(
        self,
        classifier: Retrainable,
        threshold: int = 50,
        on_retrained: Optional[Callable[[], None]] = None,
    ):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.classifier = classifier
        self.threshold = threshold
        self._on_retrained = on_retrained
        self._buffer: list[FeedbackRecord] = []
        self._lock = threading.Lock()
        self.retrain_count = 0
        self.records_total = 0
        self.last_retrain_at: Optional[float] = None
        self.last_error: Optional[str] = None

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    def record(
        self,
        query: str,
        predicted_intent: str,
        actual_intent: str,
        was_correct: bool,
    ) -> bool:
        """Append one record; returns True when this call ran a retrain pass."""
        entry = FeedbackRecord(
            query=query,
            predicted_intent=predicted_intent,
            actual_intent=actual_intent,
            was_correct=bool(was_correct),
        )
        with self._lock:
            self._buffer.append(entry)
            self.records_total += 1
            if len(self._buffer) < self.threshold:
                return False
            batch, self._buffer = self._buffer, []

        self._retrain(batch)
        return True

    def _retrain(self, batch: list[FeedbackRecord]) -> None:
        samples = [(r.query, r.actual_intent) for r in batch if r.was_correct]
        _log.info("Feedback retrain pass", buffered=len(batch), usable=len(samples))

        self.retrain_count += 1
        self.last_retrain_at = time.time()
        if not samples:
            return

        try:
            updated = self.classifier.retrain(samples)
        except ClassifierDimensionError as e:
            self.last_error = e.message
            _log.error("Retrain aborted, keeping previous model", error=e.message, code=e.code)
            return

        self.last_error = None
        if updated and self._on_retrained is not None:
            self._on_retrained()

    def get_stats(self) -> dict[str, Any]:
        return {
            "buffer_size": len(self._buffer),
            "threshold": self.threshold,
            "records_total": self.records_total,
            "retrain_count": self.retrain_count,
            "last_retrain_at": self.last_retrain_at,
            "last_error": self.last_error,
        }
