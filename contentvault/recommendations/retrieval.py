from __future__ import annotations

import dataclasses
import time

from ..analytics.store import record_event
from ..content.catalog import catalog_version, get_available_content
from ..content.interactions import get_user_interactions, interactions_version
from ..content.models import ContentOut
from .cache import cache_get, cache_set
from .features import extract_user_features
from .model import ModelNotTrainedError
from .ranking import adjust_score, generate_reason, rank_trending
from .scoring import ScoringContext, score_content
from .models import (
    RecommendationResponse,
    ScoredContent,
    TrendingItem,
    TrendingResponse,
)


def _data_version() -> tuple[int, int]:
    return catalog_version(), interactions_version()


def get_recommendations(
    user_address: str,
    limit: int = 10,
    context: ScoringContext | None = None,
    now: float | None = None,
) -> RecommendationResponse:
    start_time = time.time()
    base = context or ScoringContext()
    if base.strategy == "model" and not base.uses_model:
        raise ModelNotTrainedError("Model strategy requested but no trained model is loaded")

    # --- Cache check ---
    request_dict = {"user": user_address.lower(), "limit": limit, "strategy": base.strategy}
    if base.uses_model:
        request_dict["model_version"] = base.model.version
    version = _data_version()
    use_cache = now is None
    if use_cache:
        cached = cache_get("recommendations", request_dict, version)
        if cached is not None:
            _record_recommendation_event(request_dict, cached, start_time, cache_hit=True)
            return cached

    # Fetch failures here fail the whole request
    interactions = get_user_interactions(user_address)
    available = get_available_content()

    # Fresh counters per request, shared model and RNG
    ctx = dataclasses.replace(base, fallbacks=0)
    now = time.time() if now is None else now
    user_vec = extract_user_features(interactions)

    # --- Scoring ---
    scored: list[ScoredContent] = []
    for content in available:
        raw = score_content(user_vec, content, ctx)
        scored.append(ScoredContent(
            **ContentOut.from_record(content).model_dump(),
            score=adjust_score(raw, content, interactions, now),
            reason=generate_reason(content, interactions),
        ))

    # Stable: ties keep catalog order
    scored.sort(key=lambda item: item.score, reverse=True)

    response = RecommendationResponse(
        recommendations=scored[:limit],
        total_candidates=len(available),
        strategy=ctx.strategy,
        fallback_scores=ctx.fallbacks,
    )
    if use_cache:
        cache_set("recommendations", request_dict, version, response)
    _record_recommendation_event(request_dict, response, start_time, cache_hit=False)
    return response


def _record_recommendation_event(
    request_dict: dict,
    response: RecommendationResponse,
    start_time: float,
    cache_hit: bool,
) -> None:
    record_event("recommendations", {
        "user_address": request_dict["user"],
        "limit": request_dict["limit"],
        "strategy": request_dict["strategy"],
        "total_candidates": response.total_candidates,
        "results_returned": len(response.recommendations),
        "content_types": [r.type for r in response.recommendations],
        "fallback_scores": response.fallback_scores,
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
        "cache_hit": cache_hit,
    })


def get_trending_content(limit: int = 10, now: float | None = None) -> TrendingResponse:
    start_time = time.time()

    request_dict = {"limit": limit}
    version = _data_version()
    cached = cache_get("trending", request_dict, version) if now is None else None
    cache_hit = cached is not None

    if cached is not None:
        response = cached
    else:
        available = get_available_content()
        ranked = rank_trending(available, limit, now)
        response = TrendingResponse(
            trending=[
                TrendingItem(**ContentOut.from_record(c).model_dump(), trending_score=round(s, 4))
                for c, s in ranked
            ],
            total_candidates=len(available),
        )
        if now is None:
            cache_set("trending", request_dict, version, response)

    record_event("trending", {
        "limit": limit,
        "total_candidates": response.total_candidates,
        "results_returned": len(response.trending),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
        "cache_hit": cache_hit,
    })
    return response
