"""
Feature extraction for content records and interaction histories.

Both encoders produce fixed-width vectors so that a user and a content item
can be compared directly by cosine similarity.

Content layout:
    0-3    one-hot content type (image, video, audio, document)
    4-7    one-hot price bucket (free, <0.01, <0.1, >=0.1)
    8-99   hashed bag of tags
    99     creator reputation, overwrites any tag that hashed there

User layout:
    0-4    interaction type counts / 100, capped at 1
    5-8    average interaction weight per content type (9-94 unused)
    95-98  average interaction weight per price bucket
    99     activity level
"""
from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from ..content.models import CONTENT_TYPES, ContentRecord, Interaction
from .config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig

INTERACTION_WEIGHTS: dict[str, float] = {
    "view": 1,
    "like": 3,
    "purchase": 10,
    "tip": 8,
    "share": 5,
    "bookmark": 4,
}

COUNTED_INTERACTIONS: list[str] = ["view", "like", "purchase", "tip", "share"]
PRICE_BUCKETS: list[str] = ["free", "low", "medium", "high"]

_TYPE_OFFSET = 5
_PRICE_OFFSET = 95


def interaction_weight(interaction_type: str) -> float:
    return INTERACTION_WEIGHTS.get(interaction_type, 1)


def price_bucket(price: float | None) -> str:
    value = price or 0
    if value == 0:
        return "free"
    if value < 0.01:
        return "low"
    if value < 0.1:
        return "medium"
    return "high"


def tag_hash(tag: str) -> int:
    """Signed 32-bit ``h * 31 + c`` over UTF-16 code units, made non-negative."""
    raw = tag.encode("utf-16-le")
    h = 0
    for i in range(0, len(raw), 2):
        h = (h * 31 + int.from_bytes(raw[i:i + 2], "little")) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def extract_content_features(
    content: ContentRecord,
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> np.ndarray:
    features = np.zeros(config.dimension)

    type_index = CONTENT_TYPES.index(content.type) if content.type in CONTENT_TYPES else 0
    features[type_index] = 1

    features[4 + PRICE_BUCKETS.index(price_bucket(content.price))] = 1

    for tag in content.tags:
        features[8 + tag_hash(tag) % config.tag_buckets] += 1

    features[99] = min(content.total_earnings / 10, 1)
    return features


def _average_weight_by(
    interactions: Iterable[Interaction],
    keys: Sequence[str],
    key_of,
) -> dict[str, float]:
    scores = dict.fromkeys(keys, 0.0)
    counts = dict.fromkeys(keys, 0)
    for interaction in interactions:
        key = key_of(interaction)
        if key not in scores:
            continue
        counts[key] += 1
        scores[key] += interaction_weight(interaction.type)
    return {k: scores[k] / counts[k] if counts[k] else 0.0 for k in keys}


def content_type_preferences(interactions: Sequence[Interaction]) -> dict[str, float]:
    return _average_weight_by(interactions, CONTENT_TYPES, lambda i: i.content_type)


def price_preferences(interactions: Sequence[Interaction]) -> dict[str, float]:
    return _average_weight_by(interactions, PRICE_BUCKETS, lambda i: price_bucket(i.content_price))


def extract_user_features(
    interactions: Sequence[Interaction],
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> np.ndarray:
    features = np.zeros(config.dimension)
    if not interactions:
        return features

    for interaction in interactions:
        if interaction.type in COUNTED_INTERACTIONS:
            features[COUNTED_INTERACTIONS.index(interaction.type)] += 1
    features[:5] = np.minimum(features[:5] / 100, 1)

    for offset, score in enumerate(content_type_preferences(interactions).values()):
        features[_TYPE_OFFSET + offset] = score

    for offset, score in enumerate(price_preferences(interactions).values()):
        features[_PRICE_OFFSET + offset] = score

    features[99] = min(len(interactions) / 1000, 1)
    return features
