# moodify/spotify.py
from __future__ import annotations

import base64
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from moodify import config
from moodify.schemas import ResolutionResult

log = logging.getLogger("spotify")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)

SPOTIFY_API_BASE = "https://api.spotify.com/v1"
SPOTIFY_ACCOUNTS_BASE = "https://accounts.spotify.com"

SCOPES = " ".join([
    "user-read-private",
    "user-read-email",
    "playlist-modify-public",
    "playlist-modify-private",
    "user-top-read",
    "user-read-recently-played",
])

MAX_GENRE_SEEDS = 5
MAX_TRACKS_PER_REQUEST = 100


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=15)


def _bearer(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def _basic_auth() -> Dict[str, str]:
    raw = f"{config.SPOTIFY_CLIENT_ID}:{config.SPOTIFY_CLIENT_SECRET}".encode()
    return {"Authorization": f"Basic {base64.b64encode(raw).decode()}"}


# ----------------------------
# OAuth
# ----------------------------
def create_login_redirect_url(state: str) -> str:
    params = {
        "client_id": config.SPOTIFY_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": config.SPOTIFY_REDIRECT_URI,
        "scope": SCOPES,
        "state": state,
        "show_dialog": "true",
    }
    return f"{SPOTIFY_ACCOUNTS_BASE}/authorize?{urlencode(params)}"


async def _token_request(data: Dict[str, str]) -> Dict[str, Any]:
    async with _client() as client:
        r = await client.post(f"{SPOTIFY_ACCOUNTS_BASE}/api/token", headers=_basic_auth(), data=data)
        r.raise_for_status()
        tokens = r.json()
    # normalize expires_at (epoch)
    tokens["expires_at"] = int(time.time()) + int(tokens.get("expires_in", 3600))
    return tokens


async def exchange_code_for_tokens(code: str) -> Dict[str, Any]:
    return await _token_request({
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": config.SPOTIFY_REDIRECT_URI,
    })


async def refresh_access_token(refresh_token: str) -> Dict[str, Any]:
    tokens = await _token_request({"grant_type": "refresh_token", "refresh_token": refresh_token})
    # carry forward refresh_token if not returned
    tokens.setdefault("refresh_token", refresh_token)
    return tokens


# ----------------------------
# Profile / top items
# ----------------------------
async def _get(access_token: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    async with _client() as client:
        r = await client.get(f"{SPOTIFY_API_BASE}{path}", headers=_bearer(access_token), params=params)
        r.raise_for_status()
        return r.json()


async def fetch_me(access_token: str) -> Dict[str, Any]:
    return await _get(access_token, "/me")


async def get_top_artists(access_token: str, limit: int = 5) -> List[Dict[str, Any]]:
    data = await _get(access_token, "/me/top/artists", {"limit": limit, "time_range": "medium_term"})
    return data.get("items", [])


async def get_top_tracks(access_token: str, limit: int = 5) -> List[Dict[str, Any]]:
    data = await _get(access_token, "/me/top/tracks", {"limit": limit, "time_range": "medium_term"})
    return data.get("items", [])


# ----------------------------
# Analysis -> catalog search
# ----------------------------
def build_search_params(analysis: ResolutionResult, limit: int = 50) -> Dict[str, Any]:
    """
    Map resolved attributes to search parameters. Only the first genre drives
    the catalog query; the targets are kept for the audit record and clients.
    """
    attrs = analysis.attributes
    seed_genres = list(analysis.genres[:MAX_GENRE_SEEDS])
    return {
        "seed_genres": seed_genres,
        "seed_artists": list(analysis.artists),
        "target_energy": attrs.energy,
        "target_valence": attrs.valence,
        "target_danceability": attrs.danceability,
        "min_tempo": attrs.tempo_range.min,
        "max_tempo": attrs.tempo_range.max,
        "query": f"genre:{seed_genres[0] if seed_genres else 'pop'}",
        "market": config.SPOTIFY_MARKET,
        "limit": limit,
    }


async def search_tracks(access_token: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    query = params.get("query") or "genre:pop"
    data = await _get(access_token, "/search", {
        "q": query,
        "type": "track",
        "limit": int(params.get("limit", 50)),
        "market": params.get("market") or config.SPOTIFY_MARKET,
    })
    items = (data.get("tracks") or {}).get("items") or []

    # drop repeats the search sometimes returns
    seen, tracks = set(), []
    for item in items:
        if not isinstance(item, dict) or item.get("id") in seen:
            continue
        seen.add(item.get("id"))
        tracks.append(item)
    log.info("[spotify] %s -> %d tracks", query, len(tracks))
    return tracks


def format_track(item: Dict[str, Any]) -> Dict[str, Any]:
    album = item.get("album") or {}
    images = album.get("images") or []
    return {
        "id": item.get("id"),
        "name": item.get("name"),
        "artists": ", ".join(a.get("name", "") for a in item.get("artists") or []),
        "album": album.get("name"),
        "album_art": images[0].get("url") if images else None,
        "duration_ms": item.get("duration_ms"),
        "uri": item.get("uri"),
        "preview_url": item.get("preview_url"),
    }


# ----------------------------
# Playlist creation
# ----------------------------
async def create_playlist(
    access_token: str,
    user_id: str,
    name: str,
    description: str,
    public: bool = False,
) -> Dict[str, Any]:
    async with _client() as client:
        r = await client.post(
            f"{SPOTIFY_API_BASE}/users/{user_id}/playlists",
            headers=_bearer(access_token),
            json={"name": name, "description": description, "public": public},
        )
        r.raise_for_status()
        return r.json()


async def add_tracks_to_playlist(access_token: str, playlist_id: str, uris: List[str]) -> int:
    """Add URIs in batches of 100 (API limit). Returns the number of requests sent."""
    chunks = [uris[i:i + MAX_TRACKS_PER_REQUEST] for i in range(0, len(uris), MAX_TRACKS_PER_REQUEST)]
    async with _client() as client:
        for chunk in chunks:
            r = await client.post(
                f"{SPOTIFY_API_BASE}/playlists/{playlist_id}/tracks",
                headers=_bearer(access_token),
                json={"uris": chunk},
            )
            r.raise_for_status()
    return len(chunks)
