# moodify/routes/preference_routes.py
from typing import Any, Dict
from fastapi import APIRouter, Depends

from moodify import datastore
from moodify.deps import require_user
from moodify.schemas import ListeningIn, PreferencesIn

router = APIRouter(tags=["preferences"])


@router.get("/preferences")
def get_preferences(user: Dict[str, Any] = Depends(require_user)):
    return {"preferences": datastore.get_preferences(user["id"])}


@router.post("/preferences")
def save_preferences(body: PreferencesIn, user: Dict[str, Any] = Depends(require_user)):
    prefs = datastore.update_preferences(user["id"], body.model_dump(exclude_none=True))
    return {"success": True, "preferences": prefs}


@router.put("/preferences")
def update_preferences(body: PreferencesIn, user: Dict[str, Any] = Depends(require_user)):
    datastore.update_preferences(user["id"], body.model_dump(exclude_none=True))
    return {"success": True, "message": "Preferences updated"}


# Listening history lives next to preferences: both describe the user's taste.
@router.post("/history/listening")
def add_listening(body: ListeningIn, user: Dict[str, Any] = Depends(require_user)):
    return {"success": True, "entry": datastore.add_listening_history(user["id"], body.model_dump())}


@router.get("/history/listening")
def recent_listening(limit: int = 50, user: Dict[str, Any] = Depends(require_user)):
    return {"items": datastore.recent_listening_history(user["id"], limit=max(1, min(limit, 200)))}


@router.get("/history/recommendations")
def recommendations(user: Dict[str, Any] = Depends(require_user)):
    """Audit trail of saved playlists: inputs -> analysis -> search params."""
    return {"items": datastore.list_recommendations(user["id"])}
