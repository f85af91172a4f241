from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..content.models import ContentOut


class LoginRequest(BaseModel):
    address: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RecommendationRequest(BaseModel):
    limit: int = Field(default=10, ge=1, le=50)
    strategy: Literal["cosine", "model"] = "cosine"


class ScoredContent(ContentOut):
    score: float
    reason: str


class RecommendationResponse(BaseModel):
    recommendations: list[ScoredContent]
    total_candidates: int
    strategy: str
    fallback_scores: int = 0


class TrendingItem(ContentOut):
    trending_score: float


class TrendingResponse(BaseModel):
    trending: list[TrendingItem]
    total_candidates: int


class TrainingResponse(BaseModel):
    status: str
    version: int
    samples: int
    positives: int
    accuracy: float
