# moodify/deps.py
# FastAPI dependencies shared by the routers.
from __future__ import annotations

from typing import Any, Dict

import httpx
from fastapi import Depends, HTTPException, Request

from moodify import auth


def session_id(request: Request) -> str:
    """sid cookie, then X-Session-Id header, then ?sid= query parameter."""
    return (
        request.cookies.get("sid")
        or request.headers.get("X-Session-Id")
        or request.query_params.get("sid")
        or ""
    ).strip()


def require_user(request: Request) -> Dict[str, Any]:
    sid = session_id(request)
    if not sid:
        raise HTTPException(status_code=401, detail="Authentication required")
    user = auth.session_user(sid)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid session")
    return user


async def require_spotify_user(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Authenticated user whose Spotify access token is valid for the next call."""
    if not user.get("access_token"):
        raise HTTPException(status_code=401, detail="User not authenticated with Spotify")
    try:
        _, user = await auth.ensure_fresh_access_token(user)
    except httpx.HTTPStatusError as e:
        raise HTTPException(status_code=401, detail=f"Spotify token refresh failed: {e.response.text}")
    return user
