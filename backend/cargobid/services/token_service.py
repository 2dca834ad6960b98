# Overview: Signed, time-limited bearer tokens (JWT, HS256).

from __future__ import annotations

from datetime import timedelta, timezone

import jwt
from flask import current_app

from ..models import User
from cargobid.time_utils import utcnow


def issue_token(user: User) -> str:
    """Token carrying id, username and role; expires after JWT_EXPIRES_DAYS."""
    now = utcnow().replace(tzinfo=timezone.utc)
    payload = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=current_app.config.get("JWT_EXPIRES_DAYS", 7)),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_token(token: str) -> dict | None:
    """Claims if the signature and expiry check out, else None."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError:
        return None
