"""Tests for classifier snapshots on disk."""

import json

import numpy as np
import pytest

from intent_router.core.errors import ClassifierDimensionError, PermanentError
from intent_router.ml.persistence import load_model, save_model


class TestPersistence:

    def test_save_and_load(self, classifier, tmp_path):
        classifier.retrain([("alpha apple", "fruit")])
        path = save_model(classifier.model, tmp_path / "model.npz")
        loaded = load_model(path)

        assert loaded.version == classifier.version
        assert loaded.intents == classifier.model.intents
        assert dict(loaded.vocabulary) == dict(classifier.model.vocabulary)
        assert np.array_equal(loaded.w1, classifier.model.w1)
        assert len(loaded.training_history) == len(classifier.model.training_history)
        assert loaded.retrain_events[0].samples == 1
        assert not (tmp_path / "model.npz.tmp").exists()

    def test_loaded_snapshot_publishes(self, classifier, tmp_path):
        path = save_model(classifier.model, tmp_path / "snap" / "model.npz")
        classifier.publish(load_model(path))
        assert classifier.predict("alpha apple").intent == "fruit"

    def test_missing_file(self, tmp_path):
        with pytest.raises(PermanentError) as exc:
            load_model(tmp_path / "missing.npz")
        assert exc.value.code == "SNAPSHOT_LOAD"

    def test_not_an_archive(self, tmp_path):
        path = tmp_path / "bad.npz"
        path.write_bytes(b"not numpy")
        with pytest.raises(PermanentError):
            load_model(path)

    def test_wrong_format_version(self, classifier, tmp_path):
        model = classifier.model
        meta = {"format": 99, "version": 1, "vocabulary": dict(model.vocabulary), "intents": list(model.intents)}
        path = tmp_path / "future.npz"
        np.savez(path, w1=model.w1, b1=model.b1, w2=model.w2, b2=model.b2, meta=np.array(json.dumps(meta)))
        with pytest.raises(PermanentError) as exc:
            load_model(path)
        assert exc.value.code == "SNAPSHOT_FORMAT"

    def test_mismatched_arrays(self, classifier, tmp_path):
        model = classifier.model
        meta = {"format": 1, "version": 1, "vocabulary": dict(model.vocabulary), "intents": list(model.intents)[:2]}
        path = tmp_path / "mismatch.npz"
        np.savez(path, w1=model.w1, b1=model.b1, w2=model.w2, b2=model.b2, meta=np.array(json.dumps(meta)))
        with pytest.raises(ClassifierDimensionError):
            load_model(path)

    def test_truncated_archive(self, classifier, tmp_path):
        path = save_model(classifier.model, tmp_path / "model.npz")
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with pytest.raises(PermanentError) as exc:
            load_model(path)
        assert exc.value.code == "SNAPSHOT_LOAD"

    @pytest.mark.parametrize("missing", ["vocabulary", "intents", "version"])
    def test_missing_metadata_field(self, classifier, tmp_path, missing):
        model = classifier.model
        meta = {"format": 1, "version": 1, "vocabulary": dict(model.vocabulary), "intents": list(model.intents)}
        del meta[missing]
        path = tmp_path / "partial.npz"
        np.savez(path, w1=model.w1, b1=model.b1, w2=model.w2, b2=model.b2, meta=np.array(json.dumps(meta)))
        with pytest.raises(PermanentError) as exc:
            load_model(path)
        assert exc.value.code == "SNAPSHOT_FORMAT"

    def test_metadata_not_an_object(self, classifier, tmp_path):
        model = classifier.model
        path = tmp_path / "list.npz"
        np.savez(path, w1=model.w1, b1=model.b1, w2=model.w2, b2=model.b2, meta=np.array("[1, 2]"))
        with pytest.raises(PermanentError) as exc:
            load_model(path)
        assert exc.value.code == "SNAPSHOT_FORMAT"
