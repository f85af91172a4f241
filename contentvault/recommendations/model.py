"""
Trainable purchase-likelihood classifier.

An optional scoring strategy: a small feedforward network predicting whether
a user/content pair leads to a purchase. The network sees the element-wise
product of the user and content feature vectors, so its input stays as wide
as a single feature vector.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sklearn.neural_network import MLPClassifier

from ..content.models import ContentRecord, Interaction
from .features import extract_content_features, extract_user_features

logger = logging.getLogger(__name__)


class ModelTrainingError(ValueError):
    """Raised when the interaction data cannot train the classifier."""


class ModelNotTrainedError(RuntimeError):
    pass


@dataclass(frozen=True)
class ModelConfig:
    hidden_layers: tuple[int, ...] = (64, 32, 16)
    learning_rate: float = 0.001
    epochs: int = 10
    batch_size: int = 32
    random_state: int | None = 42


DEFAULT_MODEL_CONFIG = ModelConfig()


def pair_features(user_vec: np.ndarray, content_vec: np.ndarray) -> np.ndarray:
    return np.asarray(user_vec, dtype=float) * np.asarray(content_vec, dtype=float)


class PurchaseModel:
    def __init__(self, config: ModelConfig = DEFAULT_MODEL_CONFIG, version: int = 0) -> None:
        self.config = config
        self.classifier = MLPClassifier(
            hidden_layer_sizes=config.hidden_layers,
            activation="relu",
            solver="adam",
            learning_rate_init=config.learning_rate,
            batch_size=config.batch_size,
            max_iter=config.epochs,
            random_state=config.random_state,
        )
        self.is_trained = False
        self.samples_seen = 0
        self.version = version

    def train(
        self,
        interactions: Sequence[Interaction],
        content_by_id: dict[str, ContentRecord],
    ) -> dict[str, float | int]:
        """Fit on interactions whose content is known. Purchases are positives."""
        rows: list[np.ndarray] = []
        labels: list[int] = []
        for interaction in interactions:
            content = content_by_id.get(interaction.content_id)
            if content is None:
                continue
            rows.append(pair_features(
                extract_user_features([interaction]),
                extract_content_features(content),
            ))
            labels.append(1 if interaction.type == "purchase" else 0)

        if not rows:
            raise ModelTrainingError("No interactions reference known content")
        if len(set(labels)) < 2:
            raise ModelTrainingError("Training data needs both purchase and non-purchase interactions")

        X = np.vstack(rows)
        y = np.asarray(labels)
        self.classifier.fit(X, y)
        self.is_trained = True
        self.samples_seen = len(labels)
        self.version += 1

        accuracy = float(self.classifier.score(X, y))
        logger.info("Purchase model trained on %d samples (accuracy %.3f)", len(labels), accuracy)
        return {
            "samples": len(labels),
            "positives": int(y.sum()),
            "accuracy": round(accuracy, 4),
        }

    def predict(self, user_vec: np.ndarray, content_vec: np.ndarray) -> float:
        if not self.is_trained:
            raise ModelNotTrainedError("PurchaseModel.predict called before train")
        x = pair_features(user_vec, content_vec).reshape(1, -1)
        return float(self.classifier.predict_proba(x)[0, 1])
