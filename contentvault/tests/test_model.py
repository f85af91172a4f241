from __future__ import annotations

import pytest

from contentvault.content.models import ContentRecord, Interaction
from contentvault.recommendations.features import extract_content_features, extract_user_features
from contentvault.recommendations.model import (
    ModelNotTrainedError,
    ModelTrainingError,
    PurchaseModel,
    pair_features,
)
from contentvault.recommendations.scoring import ScoringContext, score

CATALOG = {
    cid: ContentRecord(
        id=cid,
        title=f"Item {cid}",
        creator_address="0x1234",
        type=kind,
        walrus_blob_id=f"blob-{cid}",
        encryption_key="k",
        price=price,
        tags=tags,
    )
    for cid, kind, price, tags in [
        ("v", "video", 0.05, ["tutorial"]),
        ("a", "audio", 0.0, ["music"]),
        ("d", "document", 0.2, ["guide"]),
    ]
}


def _history() -> list[Interaction]:
    rows: list[Interaction] = []
    for _ in range(20):
        rows.append(Interaction(content_id="v", content_type="video", content_price=0.05, type="purchase"))
        rows.append(Interaction(content_id="a", content_type="audio", content_price=0.0, type="view"))
        rows.append(Interaction(content_id="d", content_type="document", content_price=0.2, type="like"))
    return rows


def test_pair_features_keep_vector_width():
    user = extract_user_features(_history())
    content = extract_content_features(CATALOG["v"])
    assert pair_features(user, content).shape == (100,)


def test_train_reports_stats():
    model = PurchaseModel()
    stats = model.train(_history(), CATALOG)
    assert model.is_trained
    assert model.version == 1
    assert stats["samples"] == 60
    assert stats["positives"] == 20
    assert 0.0 <= stats["accuracy"] <= 1.0


def test_predict_is_a_probability():
    model = PurchaseModel()
    model.train(_history(), CATALOG)
    user = extract_user_features(_history())
    for content in CATALOG.values():
        p = model.predict(user, extract_content_features(content))
        assert 0.0 <= p <= 1.0


def test_model_strategy_uses_trained_model():
    model = PurchaseModel()
    model.train(_history(), CATALOG)
    ctx = ScoringContext(strategy="model", model=model)
    user = extract_user_features(_history())
    content_vec = extract_content_features(CATALOG["v"])
    assert score(user, content_vec, ctx) == pytest.approx(model.predict(user, content_vec))


def test_train_requires_both_labels():
    views = [Interaction(content_id="a", content_type="audio", type="view") for _ in range(5)]
    with pytest.raises(ModelTrainingError):
        PurchaseModel().train(views, CATALOG)


def test_train_skips_unknown_content():
    orphans = [Interaction(content_id="missing", type="purchase")]
    with pytest.raises(ModelTrainingError):
        PurchaseModel().train(orphans, CATALOG)


def test_predict_before_train_raises():
    with pytest.raises(ModelNotTrainedError):
        PurchaseModel().predict(extract_user_features([]), extract_content_features(CATALOG["v"]))
