"""Bag-of-words feed-forward intent classifier.

query -> normalized term frequencies over a fixed vocabulary (V)
      -> sigmoid hidden layer (H)
      -> softmax over the known intents (K)

The current weights live in an immutable ``ClassifierModel``. Training builds
a new snapshot and publishes it with a single reference assignment, so a
prediction that already grabbed ``self.model`` finishes on that snapshot.
"""

import threading
import time
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from intent_router.core.errors import ClassifierDimensionError, ValidationError
from intent_router.core.intent.types import ClassificationResult, IntentAlternative
from intent_router.core.logging import get_logger
from intent_router.core.utils.text import tokenize

from .model import ClassifierModel, RetrainEvent, TrainingEpoch, sigmoid, softmax
from .training_data import TrainingSample

_log = get_logger("ml.classifier")

_EPS = 1e-12


def build_vocabulary(queries: Iterable[str]) -> dict[str, int]:
    """Word -> index in order of first appearance."""
    vocabulary: dict[str, int] = {}
    for query in queries:
        for word in tokenize(query):
            if word not in vocabulary:
                vocabulary[word] = len(vocabulary)
    return vocabulary


def vectorize(query: str, vocabulary: dict[str, int] | Any) -> np.ndarray:
    vector = np.zeros(len(vocabulary), dtype=np.float64)
    for word in tokenize(query):
        idx = vocabulary.get(word)
        if idx is not None:
            vector[idx] += 1.0
    total = vector.sum()
    if total > 0:
        vector /= total
    return vector


class IntentClassifier:
    """Trainable classifier voting as ``trained_model`` in the ensemble."""

    method = "trained_model"

    def __init__(
        self,
        model: ClassifierModel,
        learning_rate: float = 0.5,
        retrain_epochs: int = 20,
        seed: int = 42,
        max_alternatives: int = 3,
    ):
        model.validate()
        self._model = model
        self.learning_rate = learning_rate
        self.retrain_epochs = retrain_epochs
        self.max_alternatives = max_alternatives
        self._rng = np.random.default_rng(seed)
        self._train_lock = threading.Lock()
        self.last_retrain_at: Optional[float] = None

    @classmethod
    def build(
        cls,
        samples: Sequence[TrainingSample],
        intents: Optional[Sequence[str]] = None,
        hidden_size: int = 128,
        epochs: int = 300,
        learning_rate: float = 0.5,
        retrain_epochs: int = 20,
        seed: int = 42,
    ) -> "IntentClassifier":
        """Build vocabulary and intent index from ``samples`` and train offline.

        ``intents`` fixes the output order (e.g. catalog order); otherwise
        labels are taken in order of first appearance.
        """
        if not samples:
            raise ValidationError("cannot build a classifier from zero samples", field="samples")

        labels = list(intents) if intents is not None else list(dict.fromkeys(i for _, i in samples))
        unknown = {i for _, i in samples} - set(labels)
        if unknown:
            raise ValidationError(f"samples use intents outside the intent set: {sorted(unknown)}", field="intents")

        vocabulary = build_vocabulary(q for q, _ in samples)
        rng = np.random.default_rng(seed)
        hyper = {
            "hidden_size": hidden_size,
            "learning_rate": learning_rate,
            "epochs": epochs,
            "retrain_epochs": retrain_epochs,
            "seed": seed,
            "activation": "sigmoid",
        }
        initial = ClassifierModel.initialize(
            vocabulary, tuple(labels), hidden_size, rng,
            version=0, training_samples=len(samples), hyperparameters=hyper,
        )
        clf = cls(initial, learning_rate=learning_rate, retrain_epochs=retrain_epochs, seed=seed)
        clf.train(samples, epochs)
        return clf

    @property
    def model(self) -> ClassifierModel:
        return self._model

    @property
    def version(self) -> int:
        return self._model.version

    def query_to_vector(self, query: str) -> np.ndarray:
        return vectorize(query, self._model.vocabulary)

    def predict(self, query: str) -> ClassificationResult:
        model = self._model
        x = vectorize(query, model.vocabulary)
        _, probs = model.forward(x)

        order = np.argsort(-probs, kind="stable")
        best = int(order[0])
        alternatives = [
            IntentAlternative(model.intents[int(i)], float(probs[int(i)]))
            for i in order[1:1 + self.max_alternatives]
        ]
        return ClassificationResult(
            intent=model.intents[best],
            confidence=float(probs[best]),
            method=self.method,
            alternatives=alternatives,
            model_version=model.version,
        )

    async def classify(self, query: str) -> ClassificationResult:
        return self.predict(query)

    def _encode(
        self, model: ClassifierModel, samples: Sequence[TrainingSample]
    ) -> tuple[np.ndarray, np.ndarray]:
        index = {intent: i for i, intent in enumerate(model.intents)}
        X = np.stack([vectorize(q, model.vocabulary) for q, _ in samples])
        y = np.array([index[i] for _, i in samples], dtype=np.int64)
        return X, y

    def _run_epochs(
        self,
        model: ClassifierModel,
        X: np.ndarray,
        y: np.ndarray,
        epochs: int,
        phase: str,
        version: int,
    ) -> tuple[tuple[np.ndarray, ...], list[TrainingEpoch]]:
        """Per-sample SGD with cross-entropy loss on writable weight copies."""
        w1, b1 = model.w1.copy(), model.b1.copy()
        w2, b2 = model.w2.copy(), model.b2.copy()
        lr = self.learning_rate
        history: list[TrainingEpoch] = []
        n = len(y)

        for epoch in range(1, epochs + 1):
            total_loss = 0.0
            correct = 0
            for i in self._rng.permutation(n):
                x, target = X[i], y[i]

                hidden = sigmoid(w1 @ x + b1)
                probs = softmax(w2 @ hidden + b2)

                total_loss += -np.log(probs[target] + _EPS)
                if int(np.argmax(probs)) == target:
                    correct += 1

                d_out = probs.copy()
                d_out[target] -= 1.0
                d_hidden = (w2.T @ d_out) * hidden * (1.0 - hidden)

                w2 -= lr * np.outer(d_out, hidden)
                b2 -= lr * d_out
                w1 -= lr * np.outer(d_hidden, x)
                b1 -= lr * d_hidden

            history.append(TrainingEpoch(
                epoch=epoch,
                loss=float(total_loss / n),
                accuracy=correct / n,
                phase=phase,
                version=version,
            ))

        return (w1, b1, w2, b2), history

    def train(self, samples: Sequence[TrainingSample], epochs: Optional[int] = None) -> ClassifierModel:
        """Offline training from freshly initialized weights.

        Vocabulary and intent set stay those of the current snapshot.
        """
        epochs = epochs if epochs is not None else int(self._model.hyperparameters.get("epochs", 300))
        with self._train_lock:
            current = self._model
            fresh = ClassifierModel.initialize(
                current.vocabulary, current.intents, current.hidden_size, self._rng,
                version=current.version, training_samples=len(samples),
                hyperparameters=current.hyperparameters,
                training_history=current.training_history,
                retrain_events=current.retrain_events,
            )
            kept = self._filter_known(fresh, samples)
            if not kept:
                raise ValidationError("no training samples match the intent set", field="samples")

            X, y = self._encode(fresh, kept)
            version = current.version + 1
            t0 = time.monotonic()
            params, history = self._run_epochs(fresh, X, y, epochs, "train", version)
            new_model = fresh.evolve(*params, history=tuple(history), version=version)
            self._model = new_model

        _log.info(
            "Classifier trained",
            version=version,
            samples=len(kept),
            epochs=epochs,
            loss=history[-1].loss if history else None,
            accuracy=history[-1].accuracy if history else None,
            dur_ms=round((time.monotonic() - t0) * 1000, 1),
        )
        return new_model

    def _filter_known(
        self, model: ClassifierModel, samples: Iterable[TrainingSample]
    ) -> list[TrainingSample]:
        known = set(model.intents)
        kept: list[TrainingSample] = []
        skipped: list[str] = []
        for query, intent in samples:
            if intent in known:
                kept.append((query, intent))
            else:
                skipped.append(intent)
        if skipped:
            _log.warning("Skipped samples with unknown intents", skipped=len(skipped), intents=sorted(set(skipped)))
        return kept

    def retrain(self, samples: Sequence[TrainingSample]) -> bool:
        """Continue training the current weights on new samples.

        Returns False (and changes nothing) when no sample maps onto the
        existing intent set. Raises ``ClassifierDimensionError`` if the
        resulting weights fail validation; the previous snapshot stays live.
        """
        with self._train_lock:
            current = self._model
            kept = self._filter_known(current, samples)
            if not kept:
                _log.info("Retrain skipped, no usable samples", received=len(samples))
                return False

            X, y = self._encode(current, kept)
            if X.shape[1] != current.w1.shape[1]:
                raise ClassifierDimensionError(
                    "feature vector does not match hidden layer input",
                    expected=current.w1.shape[1],
                    actual=X.shape[1],
                )

            version = current.version + 1
            params, history = self._run_epochs(current, X, y, self.retrain_epochs, "retrain", version)
            event = RetrainEvent(
                version=version,
                samples=len(kept),
                skipped=len(samples) - len(kept),
                epochs=self.retrain_epochs,
                timestamp=time.time(),
            )
            new_model = current.evolve(*params, history=tuple(history), event=event, version=version)
            self._model = new_model
            self.last_retrain_at = event.timestamp

        _log.info(
            "Classifier retrained",
            version=version,
            samples=len(kept),
            loss=history[-1].loss,
            accuracy=history[-1].accuracy,
        )
        return True

    def publish(self, model: ClassifierModel) -> None:
        """Swap in an externally built snapshot (e.g. loaded from disk).

        The snapshot must keep the vocabulary and intent set of the current one.
        """
        model.validate()
        current = self._model
        if dict(model.vocabulary) != dict(current.vocabulary) or model.intents != current.intents:
            raise ClassifierDimensionError(
                "snapshot vocabulary or intent set differs from the running model",
                expected={"vocab": current.vocab_size, "intents": list(current.intents)},
                actual={"vocab": model.vocab_size, "intents": list(model.intents)},
            )
        with self._train_lock:
            self._model = model
        _log.info("Classifier snapshot published", version=model.version)

    def get_model_info(self) -> dict[str, Any]:
        model = self._model
        history = model.training_history
        last = history[-1] if history else None
        return {
            "version": model.version,
            "architecture": {
                "input_size": model.vocab_size,
                "hidden_size": model.hidden_size,
                "output_size": model.num_intents,
                "activation": model.hyperparameters.get("activation", "sigmoid"),
            },
            "intents": list(model.intents),
            "training_samples": model.training_samples,
            "hyperparameters": dict(model.hyperparameters),
            "epochs_trained": len(history),
            "final_loss": last.loss if last else None,
            "final_accuracy": last.accuracy if last else None,
            "retrain_count": len(model.retrain_events),
            "retrain_events": [e.to_dict() for e in model.retrain_events[-10:]],
            "training_history": [e.to_dict() for e in history[-20:]],
            "last_retrain_at": self.last_retrain_at,
        }
