from __future__ import annotations

import time

from .models import ContentRecord, Interaction

_interactions: list[Interaction] = []
_seeded: bool = False
_version: int = 0

DEMO_VIEWER = "0xa11ce"


def _seed_interactions() -> None:
    """Pre-seed a demo interaction history on first use."""
    now = time.time()
    day = 24 * 60 * 60
    history = [
        ("1", "video", 0.01, "0x1234", "purchase", 1),
        ("1", "video", 0.01, "0x1234", "view", 2),
        ("2", "video", 0.05, "0x1234", "like", 3),
        ("2", "video", 0.05, "0x1234", "view", 3),
        ("4", "video", 0.0, "0x5678", "view", 4),
        ("4", "video", 0.0, "0x5678", "share", 4),
        ("6", "audio", 0.2, "0x9abc", "tip", 6),
        ("7", "image", 0.0, "0x5678", "bookmark", 8),
    ]
    for content_id, content_type, price, creator, kind, days_ago in history:
        _interactions.append(Interaction(
            content_id=content_id,
            content_type=content_type,
            content_price=price,
            creator_address=creator,
            type=kind,
            timestamp=now - days_ago * day,
            user_address=DEMO_VIEWER,
        ))


def _ensure_seeded() -> None:
    global _seeded, _version
    if not _seeded:
        _seed_interactions()
        _seeded = True
        _version += 1


def record_interaction(
    user_address: str,
    content: ContentRecord,
    interaction_type: str,
    amount: float = 0.0,
) -> Interaction:
    global _version
    _ensure_seeded()
    interaction = Interaction(
        content_id=content.id,
        content_type=content.type,
        content_price=content.price,
        creator_address=content.creator_address,
        type=interaction_type,
        user_address=user_address.lower(),
        amount=amount,
    )
    _interactions.append(interaction)
    _version += 1
    return interaction


def get_user_interactions(user_address: str) -> list[Interaction]:
    _ensure_seeded()
    address = user_address.lower()
    return [i for i in _interactions if i.user_address == address]


def get_all_interactions() -> list[Interaction]:
    _ensure_seeded()
    return list(_interactions)


def interactions_version() -> int:
    _ensure_seeded()
    return _version


def clear_interactions(reseed: bool = True) -> None:
    """Drop every recorded interaction; the demo history comes back unless ``reseed`` is False."""
    global _seeded, _version
    _interactions.clear()
    _seeded = not reseed
    _version += 1
