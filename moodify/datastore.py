# moodify/datastore.py
# Local JSON store at <MOODIFY_DATA_DIR>/<collection>.json
# Users, preferences, playlists, recommendation audit records and listening
# history are lists of dicts; sessions and OAuth states are dicts keyed by id.
# Corrupted files are backed up to .bak and reset.

from __future__ import annotations

import json
import logging
import os
import threading
import datetime as dt
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from moodify import config

log = logging.getLogger("datastore")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)

_LOCK = threading.RLock()

USERS = "users"
SESSIONS = "sessions"
OAUTH_STATES = "oauth_states"
PREFERENCES = "preferences"
PLAYLISTS = "playlists"
RECOMMENDATIONS = "recommendations"
LISTENING_HISTORY = "listening_history"

_KEYED = {SESSIONS, OAUTH_STATES}

PREFERENCE_LIST_FIELDS = (
    "favorite_genres", "favorite_artists", "favorite_tracks", "mood_history", "hobby_tags",
)


# ----------------------------
# Low-level file access
# ----------------------------
def _path(collection: str) -> Path:
    data_dir = Path(config.DATA_DIR)
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / f"{collection}.json"


def _empty(collection: str) -> Any:
    return {} if collection in _KEYED else []


def _read(collection: str) -> Any:
    path = _path(collection)
    # writers hold the lock across read-modify-write; readers wait for them
    with _LOCK:
        if not path.exists():
            return _empty(collection)
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "null")
        except ValueError:
            log.warning("[datastore] %s is corrupted; moving it to .bak and starting empty.", path)
            path.replace(path.with_suffix(".bak"))
            return _empty(collection)

    expected = dict if collection in _KEYED else list
    if not isinstance(raw, expected):
        return _empty(collection)
    if expected is list:
        return [x for x in raw if isinstance(x, dict)]
    return raw


def _write(collection: str, data: Any) -> None:
    """Write to a sibling temp file, then swap it in with os.replace."""
    path = _path(collection)
    tmp = path.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    os.replace(str(tmp), str(path))


def _now_iso() -> str:
    return dt.datetime.now().isoformat(timespec="seconds")


def _next_id(items: List[Dict[str, Any]]) -> int:
    return max((int(x.get("id", 0)) for x in items), default=0) + 1


def _insert(collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
    with _LOCK:
        items = _read(collection)
        record = {"id": _next_id(items), **record}
        items.append(record)
        _write(collection, items)
    return record


def _find(collection: str, **match: Any) -> Optional[Dict[str, Any]]:
    for x in _read(collection):
        if all(x.get(k) == v for k, v in match.items()):
            return x
    return None


def _newest_first(items: List[Dict[str, Any]], stamp: str, limit: int) -> List[Dict[str, Any]]:
    # insertion order breaks ties between records created in the same second
    ordered = sorted(enumerate(items), key=lambda p: (p[1].get(stamp, ""), p[0]), reverse=True)
    return [x for _, x in ordered][:limit]


# ----------------------------
# Keyed collections (sessions, oauth states)
# ----------------------------
def get_keyed(collection: str, key: str) -> Optional[Dict[str, Any]]:
    return _read(collection).get(key)


def put_keyed(collection: str, key: str, value: Dict[str, Any]) -> None:
    with _LOCK:
        db = _read(collection)
        db[key] = value
        _write(collection, db)


def pop_keyed(collection: str, key: str) -> Optional[Dict[str, Any]]:
    with _LOCK:
        db = _read(collection)
        value = db.pop(key, None)
        if value is not None:
            _write(collection, db)
    return value


def prune_keyed(collection: str, is_stale: Callable[[Dict[str, Any]], bool]) -> int:
    """Drop entries for which `is_stale(value)` is true. Returns how many went."""
    with _LOCK:
        db = _read(collection)
        stale = [k for k, v in db.items() if not isinstance(v, dict) or is_stale(v)]
        for k in stale:
            del db[k]
        if stale:
            _write(collection, db)
    return len(stale)


# ----------------------------
# Users
# ----------------------------
def find_user_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    try:
        return _find(USERS, id=int(user_id))
    except (TypeError, ValueError):
        return None


def find_user_by_spotify_id(spotify_id: str) -> Optional[Dict[str, Any]]:
    return _find(USERS, spotify_id=spotify_id)


def create_user(user: Dict[str, Any]) -> Dict[str, Any]:
    now = _now_iso()
    return _insert(USERS, {
        "spotify_id": user.get("spotify_id"),
        "display_name": user.get("display_name"),
        "email": user.get("email"),
        "profile_image": user.get("profile_image"),
        "access_token": user.get("access_token"),
        "refresh_token": user.get("refresh_token"),
        "token_expires_at": int(user.get("token_expires_at") or 0),
        "created_at": now,
        "last_login": now,
    })


def update_user_tokens(
    spotify_id: str,
    access_token: str,
    refresh_token: Optional[str],
    expires_at: int,
    touch_login: bool = True,
) -> Optional[Dict[str, Any]]:
    with _LOCK:
        items = _read(USERS)
        for x in items:
            if x.get("spotify_id") == spotify_id:
                x["access_token"] = access_token
                if refresh_token:
                    x["refresh_token"] = refresh_token
                x["token_expires_at"] = int(expires_at)
                if touch_login:
                    x["last_login"] = _now_iso()
                _write(USERS, items)
                return x
    return None


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User record without OAuth tokens."""
    return {k: v for k, v in user.items() if k not in ("access_token", "refresh_token")}


# ----------------------------
# Preferences
# ----------------------------
def get_preferences(user_id: int) -> Optional[Dict[str, Any]]:
    return _find(PREFERENCES, user_id=user_id)


def update_preferences(user_id: int, prefs: Dict[str, Any]) -> Dict[str, Any]:
    """Create with defaults, or overwrite only the fields present in `prefs`."""
    prefs = {k: v for k, v in (prefs or {}).items() if v is not None}
    with _LOCK:
        items = _read(PREFERENCES)
        current = next((x for x in items if x.get("user_id") == user_id), None)
        now = _now_iso()
        if current is None:
            current = {
                "id": _next_id(items),
                "user_id": user_id,
                **{f: list(prefs.get(f) or []) for f in PREFERENCE_LIST_FIELDS},
                "listening_time_preference": prefs.get("listening_time_preference") or "any",
                "tempo_preference": prefs.get("tempo_preference") or "medium",
                "created_at": now,
                "updated_at": now,
            }
            items.append(current)
        else:
            for f in PREFERENCE_LIST_FIELDS:
                if f in prefs:
                    current[f] = list(prefs[f])
            for f in ("listening_time_preference", "tempo_preference"):
                if prefs.get(f):
                    current[f] = prefs[f]
            current["updated_at"] = now
        _write(PREFERENCES, items)
    return current


# ----------------------------
# Playlists
# ----------------------------
def create_playlist_record(playlist: Dict[str, Any]) -> Dict[str, Any]:
    return _insert(PLAYLISTS, {
        "user_id": playlist.get("user_id"),
        "spotify_playlist_id": playlist.get("spotify_playlist_id"),
        "name": playlist.get("name"),
        "description": playlist.get("description") or "",
        "mood": playlist.get("mood"),
        "energy": playlist.get("energy"),
        "valence": playlist.get("valence"),
        "danceability": playlist.get("danceability"),
        "tempo": playlist.get("tempo"),
        "track_count": int(playlist.get("track_count") or 0),
        "cover_image": playlist.get("cover_image"),
        "url": playlist.get("url"),
        "created_at": _now_iso(),
    })


def find_playlist(playlist_id: Any) -> Optional[Dict[str, Any]]:
    try:
        return _find(PLAYLISTS, id=int(playlist_id))
    except (TypeError, ValueError):
        return None


def list_playlists(user_id: int, limit: int = 20) -> List[Dict[str, Any]]:
    mine = [x for x in _read(PLAYLISTS) if x.get("user_id") == user_id]
    return _newest_first(mine, "created_at", limit)


# ----------------------------
# Recommendation audit trail (inputs -> analysis -> search params)
# ----------------------------
def save_recommendation(
    user_id: int,
    playlist_id: Optional[int],
    input_data: Dict[str, Any],
    ai_analysis: Dict[str, Any],
    spotify_params: Dict[str, Any],
) -> int:
    rec = _insert(RECOMMENDATIONS, {
        "user_id": user_id,
        "playlist_id": playlist_id,
        "input_data": input_data or {},
        "ai_analysis": ai_analysis or {},
        "spotify_params": spotify_params or {},
        "created_at": _now_iso(),
    })
    return rec["id"]


def list_recommendations(user_id: int) -> List[Dict[str, Any]]:
    return [x for x in _read(RECOMMENDATIONS) if x.get("user_id") == user_id]


# ----------------------------
# Listening history
# ----------------------------
def add_listening_history(user_id: int, track: Dict[str, Any]) -> Dict[str, Any]:
    return _insert(LISTENING_HISTORY, {
        "user_id": user_id,
        "track_id": track.get("track_id"),
        "track_name": track.get("track_name"),
        "artist_name": track.get("artist_name"),
        "mood_context": track.get("mood_context"),
        "hobby_context": track.get("hobby_context"),
        "listened_at": _now_iso(),
    })


def recent_listening_history(user_id: int, limit: int = 50) -> List[Dict[str, Any]]:
    mine = [x for x in _read(LISTENING_HISTORY) if x.get("user_id") == user_id]
    return _newest_first(mine, "listened_at", limit)
