from __future__ import annotations

from typing import Any

import bcrypt

ROLES = ("viewer", "creator", "admin")

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_user(address: str, password: str, username: str, role: str = "viewer") -> dict[str, Any]:
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    key = address.strip().lower()
    _users[key] = {
        "password_hash": _hash_password(password),
        "username": username.lower(),
        "role": role,
    }
    return {"address": key, "username": username.lower(), "role": role}


def _seed_users() -> None:
    """Pre-seed demo wallets on import."""
    register_user("0xa11ce", "viewer123", "alice", "viewer")
    register_user("0x1234", "creator123", "builder", "creator")
    register_user("0xad00", "admin123", "admin", "admin")


def authenticate(address: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{address, username, role}`` or ``None``."""
    key = address.strip().lower()
    record = _users.get(key)
    if record and _verify_password(password, record["password_hash"]):
        return {"address": key, "username": record["username"], "role": record["role"]}
    return None


_seed_users()
