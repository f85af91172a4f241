from __future__ import annotations

import logging
import os
import random
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .auth.dependencies import require_admin, require_creator, require_user
from .auth.users import authenticate
from .content.catalog import (
    ContentNotFoundError,
    ContentPermissionError,
    InvalidPurchaseError,
    content_by_creator,
    content_types_and_tags,
    create_content,
    delete_content,
    featured_content,
    get_available_content,
    get_content,
    is_accessible_by,
    list_content,
    page_count,
    record_purchase,
    record_tip,
    update_content,
)
from .content.interactions import (
    get_all_interactions,
    get_user_interactions,
    record_interaction,
)
from .content.models import (
    AccessResponse,
    ContentCreate,
    ContentOut,
    ContentPage,
    ContentRecord,
    ContentUpdate,
    InteractionRequest,
    PurchaseRequest,
    TipRequest,
)
from .recommendations.cache import get_cache_stats
from .recommendations.model import ModelNotTrainedError, ModelTrainingError, PurchaseModel
from .recommendations.models import (
    LoginRequest,
    RecommendationRequest,
    RecommendationResponse,
    TrainingResponse,
    TrendingResponse,
)
from .recommendations.retrieval import get_recommendations, get_trending_content
from .recommendations.scoring import ScoringContext

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ContentVault API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "contentvault-secret-change-in-production"),
)

app.state.purchase_model = None
app.state.rng = random.Random()


def _page(records: list[ContentRecord], total: int, page: int, limit: int) -> ContentPage:
    pages = page_count(total, limit)
    return ContentPage(
        data=[ContentOut.from_record(r) for r in records],
        total_pages=pages,
        current_page=page,
        total=total,
        has_more=page < pages,
    )


def _load_content(content_id: str) -> ContentRecord:
    try:
        return get_content(content_id)
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    types, tags = content_types_and_tags()
    return {"content_types": types, "tags": tags}


@app.get("/content", response_model=ContentPage)
def content_list(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: str | None = Query(None),
    search: str | None = Query(None, max_length=200),
    sort_by: Literal["newest", "popular", "earnings"] = Query("newest"),
) -> ContentPage:
    records, total = list_content(page, limit, category, search, sort_by)
    return _page(records, total, page, limit)


@app.get("/content/featured", response_model=list[ContentOut])
def content_featured() -> list[ContentOut]:
    return [ContentOut.from_record(r) for r in featured_content()]


@app.get("/content/user/{address}", response_model=ContentPage)
def content_for_creator(
    address: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
) -> ContentPage:
    records, total = content_by_creator(address, page, limit)
    return _page(records, total, page, limit)


@app.get("/trending", response_model=TrendingResponse)
def trending(limit: int = Query(10, ge=1, le=50)) -> TrendingResponse:
    return get_trending_content(limit)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.address, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    context = ScoringContext(
        strategy=body.strategy,
        model=request.app.state.purchase_model,
        rng=request.app.state.rng,
    )
    try:
        return get_recommendations(user["address"], body.limit, context)
    except ModelNotTrainedError:
        raise HTTPException(status_code=400, detail="Model not trained. Train it before using the model strategy.")


@app.post("/interactions")
def interactions(body: InteractionRequest, user: dict = Depends(require_user)) -> dict:
    content = _load_content(body.content_id)
    record_interaction(user["address"], content, body.type)
    record_event("interaction", {"interaction_type": body.type, "content_id": content.id})
    return {"status": "recorded"}


@app.get("/content/purchased/{address}", response_model=ContentPage)
def content_purchased(
    address: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    user: dict = Depends(require_user),
) -> ContentPage:
    if address.lower() != user["address"] and user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Not authorized to view these purchases")

    purchased_ids: list[str] = []
    for i in get_user_interactions(address):
        if i.type == "purchase" and i.content_id not in purchased_ids:
            purchased_ids.append(i.content_id)
    by_id = {c.id: c for c in get_available_content()}
    owned = [by_id[cid] for cid in purchased_ids if cid in by_id]

    start = (page - 1) * limit
    return _page(owned[start:start + limit], len(owned), page, limit)


@app.post("/content/{content_id}/purchase")
def purchase(content_id: str, body: PurchaseRequest, user: dict = Depends(require_user)) -> dict:
    try:
        content = record_purchase(content_id, user["address"], body.price)
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found")
    except InvalidPurchaseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    record_interaction(user["address"], content, "purchase", amount=body.price)
    record_event("interaction", {"interaction_type": "purchase", "content_id": content.id})
    return {
        "success": True,
        "message": "Content purchased successfully",
        "encryption_key": content.encryption_key,
    }


@app.post("/content/{content_id}/tip")
def tip(content_id: str, body: TipRequest, user: dict = Depends(require_user)) -> dict:
    try:
        content = record_tip(content_id, body.amount)
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found")

    record_interaction(user["address"], content, "tip", amount=body.amount)
    record_event("interaction", {"interaction_type": "tip", "content_id": content.id})
    return {"success": True, "message": "Tip sent successfully"}


@app.get("/content/{content_id}/access", response_model=AccessResponse)
def content_access(content_id: str, user: dict = Depends(require_user)) -> AccessResponse:
    content = _load_content(content_id)
    if not is_accessible_by(content, user["address"], get_user_interactions(user["address"])):
        raise HTTPException(status_code=403, detail="Purchase required")
    return AccessResponse(
        content_id=content.id,
        walrus_blob_id=content.walrus_blob_id,
        encryption_key=content.encryption_key,
    )


@app.get("/content/{content_id}", response_model=ContentOut)
def content_detail(content_id: str) -> ContentOut:
    return ContentOut.from_record(_load_content(content_id))


# ── Creator endpoints ────────────────────────────────────────────────────


@app.post("/content", response_model=ContentOut, status_code=201)
def content_create(body: ContentCreate, user: dict = Depends(require_creator)) -> ContentOut:
    return ContentOut.from_record(create_content(user["address"], body))


@app.put("/content/{content_id}", response_model=ContentOut)
def content_update(
    content_id: str,
    body: ContentUpdate,
    user: dict = Depends(require_creator),
) -> ContentOut:
    try:
        return ContentOut.from_record(update_content(content_id, user["address"], body))
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found")
    except ContentPermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))


@app.delete("/content/{content_id}")
def content_delete(content_id: str, user: dict = Depends(require_creator)) -> dict:
    try:
        delete_content(content_id, user["address"])
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found")
    except ContentPermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    return {"success": True, "message": "Content deleted successfully"}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.post("/recommendations/model/train", response_model=TrainingResponse)
def train_model(request: Request, user: dict = Depends(require_admin)) -> TrainingResponse:
    previous = request.app.state.purchase_model
    model = PurchaseModel(version=previous.version if previous is not None else 0)
    content_by_id = {c.id: c for c in get_available_content()}
    try:
        stats = model.train(get_all_interactions(), content_by_id)
    except ModelTrainingError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    request.app.state.purchase_model = model
    return TrainingResponse(status="trained", version=model.version, **stats)


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()
