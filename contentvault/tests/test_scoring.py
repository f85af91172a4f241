from __future__ import annotations

import random
from unittest.mock import patch

import numpy as np
import pytest

from contentvault.content.models import ContentRecord
from contentvault.recommendations.features import extract_content_features
from contentvault.recommendations.scoring import (
    ScoringContext,
    cosine_score,
    score,
    score_content,
)


def _content(cid: str = "c1") -> ContentRecord:
    return ContentRecord(
        id=cid,
        title="Sample",
        creator_address="0x1234",
        type="audio",
        walrus_blob_id=f"blob-{cid}",
        encryption_key="k",
        price=0.2,
        tags=["music"],
    )


def test_self_similarity_is_one():
    vec = extract_content_features(_content())
    assert cosine_score(vec, vec) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero():
    a = np.zeros(100)
    b = np.zeros(100)
    a[0] = 1
    b[1] = 1
    assert cosine_score(a, b) == pytest.approx(0.0)


def test_zero_vector_scores_zero():
    assert cosine_score(np.zeros(100), extract_content_features(_content())) == 0.0


def test_cosine_is_default_strategy():
    vec = extract_content_features(_content())
    assert score(vec, vec, ScoringContext()) == pytest.approx(1.0)


def test_model_strategy_without_model_uses_cosine():
    vec = extract_content_features(_content())
    assert score(vec, vec, ScoringContext(strategy="model")) == pytest.approx(1.0)


@patch("contentvault.recommendations.scoring.extract_content_features", side_effect=ValueError("bad vector"))
def test_scoring_error_falls_back_to_bounded_random(mock_features):
    ctx = ScoringContext(rng=random.Random(7))
    for _ in range(20):
        s = score_content(np.ones(100), _content(), ctx)
        assert 0.0 <= s < 0.5
    assert ctx.fallbacks == 20


def test_fallback_respects_ceiling():
    ctx = ScoringContext(fallback_ceiling=0.1)
    with patch("contentvault.recommendations.scoring.cosine_score", side_effect=RuntimeError):
        s = score_content(np.ones(100), _content(), ctx)
    assert 0.0 <= s < 0.1
