# moodify/routes/mood_routes.py
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException

from moodify.deps import require_user
from moodify.mood_profiles import HOBBIES, MOODS
from moodify.resolver import resolve_attributes
from moodify.schemas import MoodInputs, SentimentRequest, SentimentResponse
from moodify.sentiment import classify_sentiment, score_sentiment_local

router = APIRouter(prefix="/mood", tags=["mood"])


@router.post("/analyze")
async def analyze(body: MoodInputs, user: Dict[str, Any] = Depends(require_user)):
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
    return {"success": True, "analysis": analysis}


@router.post("/sentiment", response_model=SentimentResponse)
def sentiment(body: SentimentRequest):
    text = body.text or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    score = score_sentiment_local(text)
    return SentimentResponse(sentiment=classify_sentiment(score), score=score, text=text[:100])


@router.get("/moods")
def moods():
    return {"moods": list(MOODS)}


@router.get("/hobbies")
def hobbies():
    return {"hobbies": list(HOBBIES)}
