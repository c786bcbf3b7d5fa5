from .intent_classifier import IntentClassifier, build_vocabulary, vectorize
from .model import ClassifierModel, RetrainEvent, TrainingEpoch
from .persistence import load_model, save_model
from .training_data import TRAINING_SAMPLES, TrainingSample

__all__ = [
    "IntentClassifier",
    "ClassifierModel",
    "RetrainEvent",
    "TrainingEpoch",
    "TRAINING_SAMPLES",
    "TrainingSample",
    "build_vocabulary",
    "vectorize",
    "load_model",
    "save_model",
]
