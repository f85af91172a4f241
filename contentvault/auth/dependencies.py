from __future__ import annotations

from fastapi import HTTPException, Request


def require_user(request: Request) -> dict:
    """Raise 401 if no wallet is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_creator(request: Request) -> dict:
    """Raise 401 if not logged in, 403 unless creator or admin."""
    user = require_user(request)
    if user.get("role") not in ("creator", "admin"):
        raise HTTPException(status_code=403, detail="Creator access required")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
