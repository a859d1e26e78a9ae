# moodify/routes/playlist_routes.py
from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException

from moodify import datastore, spotify
from moodify.deps import require_spotify_user, require_user
from moodify.resolver import resolve_attributes
from moodify.schemas import CreatePlaylistRequest, GenerateRequest

log = logging.getLogger("api")

router = APIRouter(prefix="/playlist", tags=["playlist"])

DEFAULT_DESCRIPTION = "Created by Moodify 🎵"


def _upstream_error(e: httpx.HTTPStatusError) -> HTTPException:
    log.warning("[playlist] Spotify returned %s: %s", e.response.status_code, e.response.text[:200])
    return HTTPException(status_code=e.response.status_code, detail=e.response.text)


@router.post("/generate")
async def generate(body: GenerateRequest, user: Dict[str, Any] = Depends(require_spotify_user)):
    """Preview a playlist for the given inputs without saving anything."""
    if not (body.mood or "").strip():
        raise HTTPException(status_code=400, detail="Mood is required")

    analysis = await resolve_attributes(
        mood=body.mood,
        genres=body.genres,
        artists=body.artists,
        social_review=body.social_review,
        hobbies=body.hobbies,
        listening_time=body.listening_time,
        tempo_preference=body.tempo_preference,
    )
    params = spotify.build_search_params(analysis, limit=body.limit)

    try:
        items = await spotify.search_tracks(user["access_token"], params)
    except httpx.HTTPStatusError as e:
        raise _upstream_error(e)

    tracks = [spotify.format_track(t) for t in items]
    return {
        "success": True,
        "tracks": tracks,
        "analysis": analysis,
        "spotify_params": params,
        "total_tracks": len(tracks),
    }


@router.post("/create")
async def create(body: CreatePlaylistRequest, user: Dict[str, Any] = Depends(require_spotify_user)):
    """Create the playlist in the user's Spotify account and record it locally."""
    name = (body.name or "").strip()
    if not name or not body.tracks:
        raise HTTPException(status_code=400, detail="Name and tracks are required")
    if not user.get("spotify_id"):
        raise HTTPException(status_code=400, detail="User Spotify ID not found. Please log in again.")

    description = body.description or (body.analysis.description if body.analysis else DEFAULT_DESCRIPTION)
    token = user["access_token"]
    try:
        remote = await spotify.create_playlist(token, user["spotify_id"], name, description, body.is_public)
        await spotify.add_tracks_to_playlist(token, remote["id"], body.tracks)
    except httpx.HTTPStatusError as e:
        raise _upstream_error(e)

    url = (remote.get("external_urls") or {}).get("spotify")
    attrs = body.analysis.attributes if body.analysis else None
    record = datastore.create_playlist_record({
        "user_id": user["id"],
        "spotify_playlist_id": remote["id"],
        "name": remote.get("name", name),
        "description": description,
        "mood": body.analysis.mood if body.analysis else None,
        "energy": attrs.energy if attrs else None,
        "valence": attrs.valence if attrs else None,
        "danceability": attrs.danceability if attrs else None,
        "tempo": attrs.tempo_range.model_dump() if attrs else None,
        "track_count": len(body.tracks),
        "url": url,
    })
    datastore.save_recommendation(
        user_id=user["id"],
        playlist_id=record["id"],
        input_data=body.inputs or {},
        ai_analysis=body.analysis.model_dump() if body.analysis else {},
        spotify_params=body.spotify_params or {},
    )
    log.info("[playlist] created %s (%d tracks) for user %s", remote["id"], len(body.tracks), user["id"])

    return {
        "success": True,
        "playlist": {
            "id": record["id"],
            "spotify_id": remote["id"],
            "name": record["name"],
            "url": url,
            "track_count": len(body.tracks),
        },
    }


@router.get("/history")
def history(user: Dict[str, Any] = Depends(require_user)):
    return {"playlists": datastore.list_playlists(user["id"])}


@router.get("/{playlist_id}")
def get_playlist(playlist_id: int, user: Dict[str, Any] = Depends(require_user)):
    playlist = datastore.find_playlist(playlist_id)
    if not playlist or playlist.get("user_id") != user["id"]:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return {"playlist": playlist}
