from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommenderConfig:
    dimension: int = 100
    tag_buckets: int = 92
    new_content_days: float = 7.0
    new_content_boost: float = 1.2
    popular_threshold: int = 100
    popular_boost: float = 1.1
    purchased_penalty: float = 0.5
    trending_min_access: int = 10
    trending_decay_days: float = 7.0
    fallback_ceiling: float = 0.5
    cache_ttl: float = float(os.getenv("RECOMMENDATION_CACHE_TTL", "300"))
    max_reasons: int = 2


DEFAULT_RECOMMENDER_CONFIG = RecommenderConfig()
