from __future__ import annotations

import math
import time
from typing import Sequence

from ..content.models import ContentRecord, Interaction
from .config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig

SECONDS_PER_DAY = 60 * 60 * 24
REASON_SEPARATOR = " • "
DEFAULT_REASON = "Recommended for you"


def days_old(content: ContentRecord, now: float | None = None) -> float:
    now = time.time() if now is None else now
    return (now - content.upload_timestamp) / SECONDS_PER_DAY


def has_purchased(content: ContentRecord, interactions: Sequence[Interaction]) -> bool:
    return any(i.content_id == content.id and i.type == "purchase" for i in interactions)


def adjust_score(
    raw_score: float,
    content: ContentRecord,
    interactions: Sequence[Interaction],
    now: float | None = None,
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> float:
    """Apply recency, popularity and already-purchased multipliers, in that order."""
    s = raw_score
    if days_old(content, now) < config.new_content_days:
        s *= config.new_content_boost
    if content.access_count > config.popular_threshold:
        s *= config.popular_boost
    if has_purchased(content, interactions):
        s *= config.purchased_penalty
    return s


def generate_reason(
    content: ContentRecord,
    interactions: Sequence[Interaction],
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> str:
    reasons: list[str] = []

    creator_hits = sum(1 for i in interactions if i.creator_address == content.creator_address)
    if creator_hits > 2:
        reasons.append("From a creator you follow")

    type_hits = sum(1 for i in interactions if i.content_type == content.type)
    if type_hits > 5:
        reasons.append(f"Similar to your {content.type} preferences")

    if content.access_count > config.popular_threshold:
        reasons.append("Trending content")

    if not reasons:
        reasons.append(DEFAULT_REASON)

    return REASON_SEPARATOR.join(reasons[:config.max_reasons])


def trending_score(
    content: ContentRecord,
    now: float | None = None,
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> float:
    """Access count decayed by ``exp(-days_old / 7)``."""
    return content.access_count * math.exp(-days_old(content, now) / config.trending_decay_days)


def rank_trending(
    contents: Sequence[ContentRecord],
    limit: int,
    now: float | None = None,
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> list[tuple[ContentRecord, float]]:
    now = time.time() if now is None else now
    eligible = [
        (c, trending_score(c, now, config))
        for c in contents
        if c.access_count > config.trending_min_access
    ]
    eligible.sort(key=lambda pair: pair[1], reverse=True)
    return eligible[:limit]
