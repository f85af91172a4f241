"""
TTL cache for recommendation and trending responses.

Entries are stamped with the data version they were computed from (catalog
version plus interaction-log version). A lookup under a newer version drops
every entry stamped with an older one, so writes to the catalog or the log
invalidate cached rankings without explicit calls from the write paths.
"""
from __future__ import annotations

import hashlib
import json
import time
from collections import Counter
from typing import Any

from .config import DEFAULT_RECOMMENDER_CONFIG

_cache: dict[str, dict[str, Any]] = {}
_hits: Counter[str] = Counter()
_misses: Counter[str] = Counter()
_current_version: tuple[int, ...] = ()


def _make_key(namespace: str, request_dict: dict) -> str:
    normalized = json.dumps({"ns": namespace, **request_dict}, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def _sync_version(version: tuple[int, ...]) -> None:
    global _current_version
    if version != _current_version:
        stale = [k for k, e in _cache.items() if e["version"] != version]
        for k in stale:
            del _cache[k]
        _current_version = version


def cache_get(
    namespace: str,
    request_dict: dict,
    version: tuple[int, ...],
    ttl: float = DEFAULT_RECOMMENDER_CONFIG.cache_ttl,
) -> Any | None:
    _sync_version(version)
    key = _make_key(namespace, request_dict)
    entry = _cache.get(key)
    if entry and time.time() - entry["created_at"] < ttl:
        _hits[namespace] += 1
        return entry["value"]
    if entry:
        del _cache[key]
    _misses[namespace] += 1
    return None


def cache_set(namespace: str, request_dict: dict, version: tuple[int, ...], value: Any) -> None:
    _sync_version(version)
    _cache[_make_key(namespace, request_dict)] = {
        "value": value,
        "version": version,
        "created_at": time.time(),
    }


def get_cache_stats() -> dict:
    hits = sum(_hits.values())
    misses = sum(_misses.values())
    total = hits + misses
    return {
        "size": len(_cache),
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / total * 100, 1) if total > 0 else 0.0,
        "by_namespace": {
            ns: {"hits": _hits[ns], "misses": _misses[ns]}
            for ns in sorted(set(_hits) | set(_misses))
        },
    }


def clear_cache() -> None:
    global _current_version
    _cache.clear()
    _hits.clear()
    _misses.clear()
    _current_version = ()
