"""Identity context: turns request credentials into an optional viewer.

Credentials are looked up in the ``Authorization: Bearer`` header first, then a
``token`` query parameter, then a ``token`` field of a JSON body. Anything that
fails verification degrades to an anonymous viewer instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from bookmarkd.auth.jwt_handler import create_access_token, verify_token

logger = structlog.get_logger()


@dataclass(frozen=True)
class Viewer:
    id: int
    username: str
    email: str


def sign_token(user: Any) -> str:
    return create_access_token(user.id, user.username, user.email)


def extract_credential(
    authorization: Optional[str] = None,
    query_token: Optional[str] = None,
    body_token: Optional[str] = None,
) -> Optional[str]:
    if authorization:
        token = authorization.split(" ")[-1].strip()
        if token:
            return token
    if query_token:
        return query_token.strip() or None
    if body_token:
        return body_token.strip() or None
    return None


def viewer_from_token(token: Optional[str]) -> Optional[Viewer]:
    if not token:
        return None

    payload = verify_token(token)
    if payload is None:
        logger.debug("invalid_token")
        return None

    try:
        return Viewer(
            id=int(payload["sub"]),
            username=str(payload["username"]),
            email=str(payload["email"]),
        )
    except (KeyError, TypeError, ValueError):
        logger.debug("malformed_token_claims")
        return None
