"""Immutable weight snapshot of the feed-forward intent classifier."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

import numpy as np

from intent_router.core.errors import ClassifierDimensionError


@dataclass(frozen=True)
class TrainingEpoch:
    epoch: int
    loss: float
    accuracy: float
    phase: str = "train"
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "epoch": self.epoch,
            "loss": round(self.loss, 6),
            "accuracy": round(self.accuracy, 4),
            "phase": self.phase,
            "version": self.version,
        }


@dataclass(frozen=True)
class RetrainEvent:
    version: int
    samples: int
    skipped: int
    epochs: int
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "samples": self.samples,
            "skipped": self.skipped,
            "epochs": self.epochs,
            "timestamp": self.timestamp,
        }


def _frozen(array: np.ndarray) -> np.ndarray:
    out = np.array(array, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def sigmoid(z: np.ndarray) -> np.ndarray:
    # Clipped to keep exp() finite.
    return 1.0 / (1.0 + np.exp(-np.clip(z, -500.0, 500.0)))


def softmax(logits: np.ndarray) -> np.ndarray:
    shifted = logits - np.max(logits)
    exp = np.exp(shifted)
    return exp / np.sum(exp)


@dataclass(frozen=True, eq=False)
class ClassifierModel:
    """One published version of the network.

    Shapes: ``w1`` (H, V), ``b1`` (H,), ``w2`` (K, H), ``b2`` (K,), where V is
    the vocabulary size and K the number of intents. Arrays are read-only;
    training always builds a new snapshot.
    """

    vocabulary: Mapping[str, int]
    intents: tuple[str, ...]
    w1: np.ndarray
    b1: np.ndarray
    w2: np.ndarray
    b2: np.ndarray
    version: int = 1
    training_history: tuple[TrainingEpoch, ...] = ()
    retrain_events: tuple[RetrainEvent, ...] = ()
    training_samples: int = 0
    hyperparameters: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        vocabulary: Mapping[str, int],
        intents: tuple[str, ...],
        w1: np.ndarray,
        b1: np.ndarray,
        w2: np.ndarray,
        b2: np.ndarray,
        **kwargs: Any,
    ) -> "ClassifierModel":
        model = cls(
            vocabulary=MappingProxyType(dict(vocabulary)),
            intents=tuple(intents),
            w1=_frozen(w1),
            b1=_frozen(b1),
            w2=_frozen(w2),
            b2=_frozen(b2),
            **kwargs,
        )
        model.validate()
        return model

    @classmethod
    def initialize(
        cls,
        vocabulary: Mapping[str, int],
        intents: tuple[str, ...],
        hidden_size: int,
        rng: np.random.Generator,
        **kwargs: Any,
    ) -> "ClassifierModel":
        """Random weights scaled by 1/sqrt(fan_in), zero biases."""
        v, k = len(vocabulary), len(intents)
        w1 = rng.standard_normal((hidden_size, v)) / np.sqrt(max(v, 1))
        w2 = rng.standard_normal((k, hidden_size)) / np.sqrt(hidden_size)
        return cls.create(
            vocabulary, intents, w1, np.zeros(hidden_size), w2, np.zeros(k), **kwargs
        )

    @property
    def vocab_size(self) -> int:
        return len(self.vocabulary)

    @property
    def hidden_size(self) -> int:
        return int(self.b1.shape[0])

    @property
    def num_intents(self) -> int:
        return len(self.intents)

    def validate(self) -> None:
        v, h, k = self.vocab_size, self.hidden_size, self.num_intents
        expected = {"w1": (h, v), "b1": (h,), "w2": (k, h), "b2": (k,)}
        actual = {
            "w1": self.w1.shape,
            "b1": self.b1.shape,
            "w2": self.w2.shape,
            "b2": self.b2.shape,
        }
        if expected != actual:
            raise ClassifierDimensionError(
                "classifier weights do not match vocabulary/intent sizes",
                expected={k_: list(s) for k_, s in expected.items()},
                actual={k_: list(s) for k_, s in actual.items()},
            )
        if sorted(self.vocabulary.values()) != list(range(v)):
            raise ClassifierDimensionError("vocabulary indices are not 0..V-1", expected=v, actual=v)
        if k == 0:
            raise ClassifierDimensionError("classifier has no intents", expected=">0", actual=0)
        for name in ("w1", "b1", "w2", "b2"):
            if not np.all(np.isfinite(getattr(self, name))):
                raise ClassifierDimensionError(f"non-finite values in {name}")

    def forward(self, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Return (hidden activations, output probabilities)."""
        hidden = sigmoid(self.w1 @ x + self.b1)
        probs = softmax(self.w2 @ hidden + self.b2)
        return hidden, probs

    def evolve(
        self,
        w1: np.ndarray,
        b1: np.ndarray,
        w2: np.ndarray,
        b2: np.ndarray,
        history: tuple[TrainingEpoch, ...] = (),
        event: Optional[RetrainEvent] = None,
        version: Optional[int] = None,
    ) -> "ClassifierModel":
        """New validated snapshot with the same vocabulary and intents."""
        model = replace(
            self,
            w1=_frozen(w1),
            b1=_frozen(b1),
            w2=_frozen(w2),
            b2=_frozen(b2),
            version=self.version if version is None else version,
            training_history=self.training_history + tuple(history),
            retrain_events=self.retrain_events + ((event,) if event else ()),
        )
        model.validate()
        return model
