"""FastAPI dependencies for resolving the request viewer."""

from __future__ import annotations

import json
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookmarkd.auth.context import Viewer, extract_credential, viewer_from_token

security = HTTPBearer(auto_error=False)


async def _body_token(request: Request) -> Optional[str]:
    if request.method != "POST":
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("token"), str):
        return body["token"]
    return None


async def get_viewer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Viewer]:
    """Resolve the viewer, or None for anonymous requests. Never raises."""
    token = extract_credential(
        authorization=credentials.credentials if credentials else None,
        query_token=request.query_params.get("token"),
        body_token=await _body_token(request),
    )
    return viewer_from_token(token)
