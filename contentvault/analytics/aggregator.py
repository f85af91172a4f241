from __future__ import annotations

from collections import Counter
from typing import Any


def _avg_response_time(events: list[dict[str, Any]]) -> float:
    times = [e["response_time_ms"] for e in events if "response_time_ms" in e]
    return round(sum(times) / len(times), 1) if times else 0.0


def _cache_summary(events: list[dict[str, Any]]) -> dict[str, Any]:
    hits = sum(1 for e in events if e.get("cache_hit"))
    return {
        "hits": hits,
        "misses": len(events) - hits,
        "hit_rate": round(hits / len(events) * 100, 1) if events else 0.0,
    }


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    recs = [e for e in events if e["type"] == "recommendations"]
    trending = [e for e in events if e["type"] == "trending"]
    interactions = [e for e in events if e["type"] == "interaction"]

    # Distinct users served
    users = {e.get("user_address") for e in recs if e.get("user_address")}

    strategy_usage = dict(Counter(e.get("strategy", "cosine") for e in recs))

    type_counter: Counter[str] = Counter()
    for e in recs:
        for t in e.get("content_types", []) or []:
            type_counter[t] += 1
    top_content_types = [{"name": n, "count": c} for n, c in type_counter.most_common(4)]

    interaction_counter = Counter(e.get("interaction_type", "unknown") for e in interactions)

    fallback_total = sum(e.get("fallback_scores", 0) for e in recs)
    empty_results = sum(1 for e in recs if e.get("results_returned", 0) == 0)

    return {
        "total_recommendation_requests": len(recs),
        "total_trending_requests": len(trending),
        "unique_users": len(users),
        "avg_response_time_ms": _avg_response_time(recs + trending),
        "strategy_usage": strategy_usage,
        "top_recommended_types": top_content_types,
        "interaction_counts": dict(interaction_counter),
        "fallback_scores": fallback_total,
        "empty_result_rate": round(empty_results / len(recs) * 100, 1) if recs else 0.0,
        "cache_stats": {
            "recommendations": _cache_summary(recs),
            "trending": _cache_summary(trending),
        },
    }
