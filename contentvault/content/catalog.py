from __future__ import annotations

import logging
import math
import secrets
import threading
import time
import uuid
from typing import Sequence

import pandas as pd

from .models import ContentCreate, ContentRecord, ContentUpdate, Interaction

logger = logging.getLogger(__name__)

CREATOR_SHARE = 0.95
FEATURED_LIMIT = 8

_SORT_COLUMNS = {
    "newest": "upload_timestamp",
    "popular": "access_count",
    "earnings": "total_earnings",
}

_df: pd.DataFrame | None = None
_version: int = 0
# held by every write to _df and across each write's read-back
_lock = threading.RLock()


class ContentNotFoundError(LookupError):
    pass


class ContentPermissionError(PermissionError):
    pass


class InvalidPurchaseError(ValueError):
    pass


def _seed_records() -> list[ContentRecord]:
    now = time.time()
    day = 24 * 60 * 60
    rows = [
        # id, title, type, price, public, featured, creator, days_ago, access, earnings, tags
        ("1", "Intro to Move smart contracts", "video", 0.01, False, True, "0x1234", 2, 50, 0.5,
         ["tutorial", "blockchain"]),
        ("2", "Walrus storage deep dive", "video", 0.05, False, True, "0x1234", 5, 180, 8.2,
         ["tutorial", "storage", "walrus"]),
        ("3", "Genesis collection cover art", "image", 0.0, True, False, "0x5678", 1, 12, 0.0,
         ["art", "nft"]),
        ("4", "Weekly market recap", "video", 0.0, True, True, "0x5678", 10, 320, 1.1,
         ["market", "news"]),
        ("5", "Validator operations handbook", "document", 0.15, False, False, "0x9abc", 30, 95, 12.4,
         ["guide", "validators"]),
        ("6", "Lo-fi beats for builders", "audio", 0.2, False, False, "0x9abc", 3, 140, 3.0,
         ["music", "lofi"]),
        ("7", "Sketchbook: decentralised cities", "image", 0.005, False, False, "0x5678", 14, 8, 0.04,
         ["art", "sketch"]),
        ("8", "Token economics whitepaper", "document", 0.08, False, True, "0x1234", 45, 260, 15.0,
         ["blockchain", "economics"]),
    ]
    return [
        ContentRecord(
            id=cid,
            title=title,
            description=f"{title}.",
            creator_address=creator,
            type=kind,
            walrus_blob_id=f"blob-{cid}",
            encryption_key=secrets.token_hex(32),
            price=price,
            is_public=public,
            is_featured=featured,
            upload_timestamp=now - days_ago * day,
            total_earnings=earnings,
            access_count=access,
            tags=tags,
        )
        for cid, title, kind, price, public, featured, creator, days_ago, access, earnings, tags in rows
    ]


def _frame(records: Sequence[ContentRecord]) -> pd.DataFrame:
    columns = list(ContentRecord.model_fields)
    return pd.DataFrame([r.model_dump() for r in records], columns=columns)


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory catalog DataFrame, seeding it on first call."""
    global _df, _version
    with _lock:
        if _df is None:
            _df = _frame(_seed_records())
            _version += 1
        return _df


def reset_catalog(records: Sequence[ContentRecord] | None = None) -> None:
    """Replace the catalog with ``records``, or reseed the demo catalog when None."""
    global _df, _version
    with _lock:
        _df = _frame(records) if records is not None else None
        _version += 1


def _snapshot() -> pd.DataFrame:
    with _lock:
        return get_dataframe().copy()


def catalog_version() -> int:
    get_dataframe()
    return _version


def _touch() -> None:
    global _version
    _version += 1


def _to_records(df: pd.DataFrame) -> list[ContentRecord]:
    return [ContentRecord(**row) for row in df.to_dict("records")]


def _row_index(content_id: str, include_inactive: bool = False) -> int:
    df = get_dataframe()
    mask = df["id"] == content_id
    if not include_inactive:
        mask = mask & df["is_active"]
    matches = df.index[mask]
    if len(matches) == 0:
        raise ContentNotFoundError(content_id)
    return matches[0]


def get_content(content_id: str) -> ContentRecord:
    with _lock:
        df = get_dataframe()
        return _to_records(df.loc[[_row_index(content_id)]])[0]


def get_available_content() -> list[ContentRecord]:
    df = _snapshot()
    return _to_records(df.loc[df["is_active"]])


def list_content(
    page: int = 1,
    limit: int = 12,
    category: str | None = None,
    search: str | None = None,
    sort_by: str = "newest",
) -> tuple[list[ContentRecord], int]:
    """Return one page of active content plus the total match count."""
    df = _snapshot()
    mask = df["is_active"].astype(bool)

    if category and category != "all":
        mask = mask & (df["type"] == category)

    if search:
        needle = search.strip().lower()
        mask = mask & (
            df["title"].str.lower().str.contains(needle, regex=False, na=False)
            | df["description"].str.lower().str.contains(needle, regex=False, na=False)
            | df["tags"].apply(lambda tags: any(needle in t for t in tags))
        )

    matches = df.loc[mask].sort_values(
        _SORT_COLUMNS.get(sort_by, "upload_timestamp"), ascending=False, kind="stable",
    )
    start = (page - 1) * limit
    return _to_records(matches.iloc[start:start + limit]), len(matches)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def featured_content(limit: int = FEATURED_LIMIT) -> list[ContentRecord]:
    df = _snapshot()
    featured = df.loc[df["is_active"] & df["is_featured"]]
    return _to_records(featured.sort_values("access_count", ascending=False, kind="stable").head(limit))


def content_by_creator(address: str, page: int = 1, limit: int = 12) -> tuple[list[ContentRecord], int]:
    df = _snapshot()
    mine = df.loc[df["is_active"] & (df["creator_address"] == address.lower())]
    mine = mine.sort_values("upload_timestamp", ascending=False, kind="stable")
    start = (page - 1) * limit
    return _to_records(mine.iloc[start:start + limit]), len(mine)


def content_types_and_tags() -> tuple[list[str], list[str]]:
    df = _snapshot()
    active = df.loc[df["is_active"]]
    tags = sorted({t for tags in active["tags"] for t in tags})
    return sorted(active["type"].unique().tolist()), tags


def create_content(creator_address: str, body: ContentCreate) -> ContentRecord:
    global _df
    record = ContentRecord(
        id=uuid.uuid4().hex[:12],
        creator_address=creator_address,
        encryption_key=secrets.token_hex(32),
        **body.model_dump(),
    )
    with _lock:
        _df = pd.concat([get_dataframe(), _frame([record])], ignore_index=True)
        _touch()
    logger.info("Registered content %s (blob %s) for %s", record.id, record.walrus_blob_id, record.creator_address)
    return record


def _require_owner(idx: int, address: str) -> None:
    if get_dataframe().at[idx, "creator_address"] != address.lower():
        raise ContentPermissionError("Not authorized to modify this content")


def update_content(content_id: str, address: str, update: ContentUpdate) -> ContentRecord:
    with _lock:
        idx = _row_index(content_id)
        _require_owner(idx, address)
        df = get_dataframe()
        for field, value in update.model_dump(exclude_none=True).items():
            df.at[idx, field] = value
        _touch()
        return get_content(content_id)


def delete_content(content_id: str, address: str) -> None:
    """Soft delete: the record stays but drops out of every listing."""
    with _lock:
        idx = _row_index(content_id)
        _require_owner(idx, address)
        get_dataframe().at[idx, "is_active"] = False
        _touch()


def record_purchase(content_id: str, buyer_address: str, price: float) -> ContentRecord:
    with _lock:
        idx = _row_index(content_id)
        df = get_dataframe()
        if df.at[idx, "is_public"]:
            raise InvalidPurchaseError("Content is free")
        if df.at[idx, "creator_address"] == buyer_address.lower():
            raise InvalidPurchaseError("Cannot purchase own content")
        if price < float(df.at[idx, "price"]):
            raise InvalidPurchaseError("Insufficient payment")
        df.at[idx, "access_count"] = int(df.at[idx, "access_count"]) + 1
        df.at[idx, "total_earnings"] = float(df.at[idx, "total_earnings"]) + price * CREATOR_SHARE
        _touch()
        return get_content(content_id)


def record_tip(content_id: str, amount: float) -> ContentRecord:
    with _lock:
        idx = _row_index(content_id)
        df = get_dataframe()
        df.at[idx, "total_earnings"] = float(df.at[idx, "total_earnings"]) + amount * CREATOR_SHARE
        _touch()
        return get_content(content_id)


def is_accessible_by(
    content: ContentRecord,
    address: str,
    interactions: Sequence[Interaction],
    now: float | None = None,
) -> bool:
    """Public content, the creator, or an unexpired purchase grants access."""
    if content.is_public:
        return True
    address = address.lower()
    if content.creator_address == address:
        return True
    now = time.time() if now is None else now
    for i in interactions:
        if i.content_id != content.id or i.type != "purchase" or i.user_address != address:
            continue
        if content.access_expiration == 0 or i.timestamp + content.access_expiration > now:
            return True
    return False
