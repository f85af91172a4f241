from __future__ import annotations

import math
import time

import pytest

from contentvault.content.models import ContentRecord, Interaction
from contentvault.recommendations.ranking import (
    adjust_score,
    generate_reason,
    rank_trending,
    trending_score,
)

NOW = time.time()
DAY = 24 * 60 * 60


def _content(cid: str = "c1", days_old: float = 30, access_count: int = 0, **overrides) -> ContentRecord:
    fields = {
        "id": cid,
        "title": f"Content {cid}",
        "creator_address": "0x1234",
        "type": "video",
        "walrus_blob_id": f"blob-{cid}",
        "encryption_key": "k",
        "upload_timestamp": NOW - days_old * DAY,
        "access_count": access_count,
    }
    fields.update(overrides)
    return ContentRecord(**fields)


def _interaction(kind: str = "view", content_id: str = "other", **overrides) -> Interaction:
    fields = {
        "content_id": content_id,
        "content_type": "image",
        "creator_address": "0xffff",
        "type": kind,
    }
    fields.update(overrides)
    return Interaction(**fields)


# ── Ranking policy ───────────────────────────────────────────────────────


class TestAdjustScore:
    def test_new_and_popular_content(self):
        content = _content(days_old=3, access_count=150)
        assert adjust_score(0.5, content, [], NOW) == pytest.approx(0.66)

    def test_purchased_content_is_penalised(self):
        content = _content(days_old=3, access_count=150)
        history = [_interaction("purchase", content_id="c1")]
        assert adjust_score(0.5, content, history, NOW) == pytest.approx(0.33)

    def test_other_interactions_do_not_penalise(self):
        content = _content(days_old=3, access_count=150)
        history = [_interaction("view", content_id="c1"), _interaction("purchase", content_id="c2")]
        assert adjust_score(0.5, content, history, NOW) == pytest.approx(0.66)

    def test_old_unpopular_content_is_unchanged(self):
        assert adjust_score(0.5, _content(days_old=8, access_count=100), [], NOW) == 0.5

    def test_boundaries_are_strict(self):
        content = _content(days_old=7, access_count=100)
        assert adjust_score(1.0, content, [], NOW) == 1.0


# ── Reasons ──────────────────────────────────────────────────────────────


class TestReason:
    def test_first_two_reasons_kept(self):
        content = _content(access_count=50)
        history = [_interaction(content_type="video", creator_address="0x1234") for _ in range(3)]
        history += [_interaction(content_type="video") for _ in range(3)]
        assert generate_reason(content, history) == (
            "From a creator you follow • Similar to your video preferences"
        )

    def test_trending_dropped_when_two_reasons_match(self):
        content = _content(access_count=500)
        history = [_interaction(content_type="video", creator_address="0x1234") for _ in range(6)]
        assert "Trending" not in generate_reason(content, history)

    def test_trending_reason(self):
        assert generate_reason(_content(access_count=101), []) == "Trending content"

    def test_creator_and_trending(self):
        history = [_interaction(creator_address="0x1234") for _ in range(3)]
        assert generate_reason(_content(access_count=101), history) == (
            "From a creator you follow • Trending content"
        )

    def test_thresholds_are_strict(self):
        history = [_interaction(creator_address="0x1234") for _ in range(2)]
        history += [_interaction(content_type="video") for _ in range(3)]
        assert generate_reason(_content(access_count=100), history) == "Recommended for you"

    def test_default_reason(self):
        assert generate_reason(_content(), []) == "Recommended for you"


# ── Trending ─────────────────────────────────────────────────────────────


def test_trending_score_decay():
    content = _content(days_old=7, access_count=100)
    assert trending_score(content, NOW) == pytest.approx(100 * math.exp(-1))
    assert trending_score(content, NOW) == pytest.approx(36.79, abs=0.01)


def test_trending_score_fresh_content():
    assert trending_score(_content(days_old=0, access_count=40), NOW) == pytest.approx(40)


def test_rank_trending_filters_low_access():
    contents = [
        _content("a", days_old=1, access_count=10),
        _content("b", days_old=1, access_count=11),
        _content("c", days_old=1, access_count=5),
    ]
    ranked = rank_trending(contents, 10, NOW)
    assert [c.id for c, _ in ranked] == ["b"]


def test_rank_trending_orders_and_truncates():
    contents = [
        _content("old", days_old=30, access_count=1000),
        _content("fresh", days_old=1, access_count=200),
        _content("mid", days_old=5, access_count=150),
    ]
    ranked = rank_trending(contents, 2, NOW)
    assert [c.id for c, _ in ranked] == ["fresh", "mid"]
    scores = [s for _, s in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_trending_ties_keep_input_order():
    contents = [_content(cid, days_old=2, access_count=50) for cid in ("x", "y", "z")]
    assert [c.id for c, _ in rank_trending(contents, 3, NOW)] == ["x", "y", "z"]
