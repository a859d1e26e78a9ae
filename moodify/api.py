# moodify/api.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from moodify import auth, config, datastore, spotify
from moodify.deps import require_spotify_user, require_user, session_id
from moodify.routes.mood_routes import router as mood_router
from moodify.routes.playlist_routes import router as playlist_router
from moodify.routes.preference_routes import router as preference_router

log = logging.getLogger("api")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)

# ----------------------------------
# App
# ----------------------------------
app = FastAPI(
    title="Moodify – Mood Playlist API",
    version="1.0.0",
    description="Mood + sentiment + hobbies → audio attributes → Spotify playlists.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    log.exception("[api] Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!", "message": str(exc)})


# ----------------------------------
# OAuth Login Flow
# ----------------------------------
router_auth = APIRouter(prefix="/spotify", tags=["spotify auth"])


@router_auth.get("/login")
def spotify_login():
    if not config.spotify_configured():
        raise HTTPException(status_code=500, detail="Missing SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET")
    state = auth.new_state()
    return RedirectResponse(spotify.create_login_redirect_url(state))


@router_auth.get("/callback")
async def spotify_callback(code: Optional[str] = None, state: Optional[str] = None, error: Optional[str] = None):
    if error:
        return RedirectResponse(url=f"{config.FRONTEND_URL}/?{urlencode({'error': error})}")
    if not code or not state or not auth.pop_state(state):
        raise HTTPException(status_code=400, detail="Invalid or expired state / code")

    try:
        tokens = await spotify.exchange_code_for_tokens(code)
        profile = await spotify.fetch_me(tokens["access_token"])
    except httpx.HTTPStatusError as e:
        log.warning("[auth] Spotify callback failed: %s", e)
        return RedirectResponse(url=f"{config.FRONTEND_URL}/?error=auth_failed")

    sid, user = auth.login_user(tokens, profile)
    log.info("[auth] user %s logged in", user["id"])

    # HTTP-only cookie for browser calls; the sid query param serves the Streamlit UI
    resp = RedirectResponse(url=f"{config.FRONTEND_URL}/?sid={sid}")
    resp.set_cookie(
        key="sid",
        value=sid,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=auth.SESSION_TTL_SECONDS,
    )
    return resp


@router_auth.get("/session/me")
def session_me(user: Dict[str, Any] = Depends(require_user)):
    return datastore.public_user(user)


@router_auth.post("/logout")
def logout(request: Request):
    sid = session_id(request)
    if sid:
        auth.delete_session(sid)
    resp = JSONResponse({"ok": True, "message": "Logged out successfully"})
    resp.delete_cookie("sid")
    return resp


@router_auth.get("/top")
async def top_items(limit: int = 5, user: Dict[str, Any] = Depends(require_spotify_user)):
    limit = max(1, min(limit, 50))
    try:
        artists = await spotify.get_top_artists(user["access_token"], limit=limit)
        tracks = await spotify.get_top_tracks(user["access_token"], limit=limit)
    except httpx.HTTPStatusError as e:
        raise HTTPException(status_code=e.response.status_code, detail=e.response.text)
    return {
        "artists": [{"id": a.get("id"), "name": a.get("name"), "genres": a.get("genres", [])} for a in artists],
        "tracks": [spotify.format_track(t) for t in tracks],
    }


# ----------------------------------
# Routers
# ----------------------------------
app.include_router(router_auth)
app.include_router(mood_router)
app.include_router(playlist_router)
app.include_router(preference_router)


# Utility routes
@app.get("/")
def root():
    return {"service": "moodify", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok", "message": "Moodify API is running"}
