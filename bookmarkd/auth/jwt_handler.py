"""JWT token issuance and verification for viewer identity."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from bookmarkd.config import get_settings


def create_access_token(user_id: int, username: str, email: str) -> str:
    """Sign a token carrying only the identity claims; roles are never embedded."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "email": email,
        "exp": now + timedelta(hours=settings.token_expire_hours),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[dict[str, Any]]:
    """Verify and decode a JWT token. Returns payload or None."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
