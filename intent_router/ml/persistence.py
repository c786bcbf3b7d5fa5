"""Optional on-disk snapshots of the classifier.

One ``.npz`` archive holds the four weight arrays plus a JSON metadata string
(vocabulary, intents, version, history). Loading never unpickles.
"""

import json
import os
import zipfile
from pathlib import Path
from typing import Any

import numpy as np

from intent_router.core.errors import PermanentError
from intent_router.core.logging import get_logger

from .model import ClassifierModel, RetrainEvent, TrainingEpoch

_log = get_logger("ml.persistence")

FORMAT_VERSION = 1


def _metadata(model: ClassifierModel) -> dict[str, Any]:
    return {
        "format": FORMAT_VERSION,
        "version": model.version,
        "vocabulary": dict(model.vocabulary),
        "intents": list(model.intents),
        "training_samples": model.training_samples,
        "hyperparameters": dict(model.hyperparameters),
        "training_history": [e.to_dict() for e in model.training_history],
        "retrain_events": [e.to_dict() for e in model.retrain_events],
    }


def save_model(model: ClassifierModel, path: str | Path) -> Path:
    """Write ``model`` to ``path`` atomically (temp file + rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")

    meta = json.dumps(_metadata(model), ensure_ascii=False)
    with open(tmp, "wb") as fh:
        np.savez(fh, w1=model.w1, b1=model.b1, w2=model.w2, b2=model.b2, meta=np.array(meta))
    os.replace(tmp, path)

    _log.info("Model snapshot saved", path=str(path), version=model.version)
    return path


def load_model(path: str | Path) -> ClassifierModel:
    """Read a snapshot written by ``save_model``.

    Raises:
        PermanentError: file unreadable, truncated, or not a snapshot archive
        ClassifierDimensionError: arrays disagree with vocabulary/intents
    """
    path = Path(path)
    try:
        with np.load(path, allow_pickle=False) as archive:
            arrays = {k: archive[k] for k in ("w1", "b1", "w2", "b2")}
            meta = json.loads(str(archive["meta"]))
    except (OSError, KeyError, ValueError, zipfile.BadZipFile) as e:
        raise PermanentError(f"cannot load model snapshot {path}: {e}", code="SNAPSHOT_LOAD") from e

    if not isinstance(meta, dict) or meta.get("format") != FORMAT_VERSION:
        found = meta.get("format") if isinstance(meta, dict) else type(meta).__name__
        raise PermanentError(f"unsupported snapshot format {found!r}", code="SNAPSHOT_FORMAT")

    try:
        vocabulary = dict(meta["vocabulary"])
        intents = tuple(meta["intents"])
        version = int(meta["version"])
        training_samples = int(meta.get("training_samples", 0))
        hyperparameters = dict(meta.get("hyperparameters", {}))
        history = tuple(TrainingEpoch(**e) for e in meta.get("training_history", []))
        events = tuple(RetrainEvent(**e) for e in meta.get("retrain_events", []))
    except (KeyError, TypeError, ValueError) as e:
        raise PermanentError(f"corrupt snapshot metadata: {e!r}", code="SNAPSHOT_FORMAT") from e

    model = ClassifierModel.create(
        vocabulary,
        intents,
        arrays["w1"],
        arrays["b1"],
        arrays["w2"],
        arrays["b2"],
        version=version,
        training_history=history,
        retrain_events=events,
        training_samples=training_samples,
        hyperparameters=hyperparameters,
    )
    _log.info("Model snapshot loaded", path=str(path), version=model.version)
    return model
