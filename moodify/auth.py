# moodify/auth.py
from __future__ import annotations

import secrets
import time
from typing import Any, Dict, Optional, Tuple

from moodify import datastore, spotify

STATE_TTL_SECONDS = 600
SESSION_TTL_SECONDS = 30 * 24 * 3600
REFRESH_MARGIN_SECONDS = 30


# ---- OAuth state ----
def _older_than(ttl: int):
    def check(rec: Dict[str, Any]) -> bool:
        return int(time.time()) - int(rec.get("created_at", 0)) > ttl
    return check


def new_state() -> str:
    # abandoned logins leave states behind
    datastore.prune_keyed(datastore.OAUTH_STATES, _older_than(STATE_TTL_SECONDS))
    s = secrets.token_urlsafe(24)
    datastore.put_keyed(datastore.OAUTH_STATES, s, {"created_at": int(time.time())})
    return s


def pop_state(state: str) -> bool:
    """Single use; valid for ten minutes."""
    rec = datastore.pop_keyed(datastore.OAUTH_STATES, state)
    if not rec:
        return False
    return not _older_than(STATE_TTL_SECONDS)(rec)


# ---- Login ----
def login_user(tokens: Dict[str, Any], profile: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Create or update the user behind `profile`, then open a session for them."""
    spotify_id = profile.get("id")
    user = datastore.find_user_by_spotify_id(spotify_id)
    if user:
        user = datastore.update_user_tokens(
            spotify_id,
            tokens.get("access_token"),
            tokens.get("refresh_token"),
            int(tokens.get("expires_at", 0)),
        )
    else:
        images = profile.get("images") or []
        user = datastore.create_user({
            "spotify_id": spotify_id,
            "display_name": profile.get("display_name"),
            "email": profile.get("email"),
            "profile_image": images[0].get("url") if images else None,
            "access_token": tokens.get("access_token"),
            "refresh_token": tokens.get("refresh_token"),
            "token_expires_at": int(tokens.get("expires_at", 0)),
        })
    if not user or not user.get("id"):
        raise RuntimeError("Failed to create or retrieve user")
    return create_session(user["id"]), user


# ---- Session helpers ----
def create_session(user_id: int) -> str:
    sid = secrets.token_urlsafe(24)
    datastore.put_keyed(datastore.SESSIONS, sid, {"user_id": user_id, "created_at": int(time.time())})
    return sid


def get_session(sid: str) -> Optional[Dict[str, Any]]:
    return datastore.get_keyed(datastore.SESSIONS, sid) if sid else None


def delete_session(sid: str) -> None:
    datastore.pop_keyed(datastore.SESSIONS, sid)


def session_user(sid: str) -> Optional[Dict[str, Any]]:
    """User behind `sid`; sessions expire with the cookie after 30 days."""
    rec = get_session(sid)
    if not rec:
        return None
    if _older_than(SESSION_TTL_SECONDS)(rec):
        delete_session(sid)
        return None
    return datastore.find_user_by_id(rec.get("user_id"))


def is_expired(user: Dict[str, Any]) -> bool:
    return int(user.get("token_expires_at", 0)) - int(time.time()) <= REFRESH_MARGIN_SECONDS


async def ensure_fresh_access_token(user: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    if not is_expired(user):
        return user["access_token"], user
    new_tok = await spotify.refresh_access_token(user["refresh_token"])
    user = datastore.update_user_tokens(
        user["spotify_id"],
        new_tok["access_token"],
        new_tok.get("refresh_token"),
        new_tok["expires_at"],
        touch_login=False,
    ) or user
    return user["access_token"], user
