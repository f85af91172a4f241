from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from ..content.models import ContentRecord
from .config import DEFAULT_RECOMMENDER_CONFIG
from .features import extract_content_features
from .model import PurchaseModel

logger = logging.getLogger(__name__)

Strategy = Literal["cosine", "model"]


@dataclass
class ScoringContext:
    """Per-request scoring state: strategy, optional model and fallback RNG."""

    strategy: Strategy = "cosine"
    model: PurchaseModel | None = None
    rng: random.Random = field(default_factory=random.Random)
    fallback_ceiling: float = DEFAULT_RECOMMENDER_CONFIG.fallback_ceiling
    fallbacks: int = 0

    @property
    def uses_model(self) -> bool:
        return self.strategy == "model" and self.model is not None and self.model.is_trained


def cosine_score(user_vec: np.ndarray, content_vec: np.ndarray) -> float:
    """Cosine similarity of two vectors. A zero-norm vector scores 0.0."""
    u = np.asarray(user_vec, dtype=float).reshape(1, -1)
    c = np.asarray(content_vec, dtype=float).reshape(1, -1)
    return float(cosine_similarity(u, c)[0, 0])


def score(user_vec: np.ndarray, content_vec: np.ndarray, context: ScoringContext) -> float:
    if context.uses_model:
        return context.model.predict(user_vec, content_vec)
    return cosine_score(user_vec, content_vec)


def score_content(
    user_vec: np.ndarray,
    content: ContentRecord,
    context: ScoringContext,
) -> float:
    """Score one item; any vector error degrades to a random score below the ceiling."""
    try:
        return score(user_vec, extract_content_features(content), context)
    except Exception:
        logger.warning(
            "Scoring failed for content %s, using random fallback score",
            getattr(content, "id", "?"),
            exc_info=True,
        )
        context.fallbacks += 1
        return context.rng.random() * context.fallback_ceiling
