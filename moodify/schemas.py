from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# ----------------------------------
# Resolver output
# ----------------------------------
class TempoRange(BaseModel):
    min: int
    max: int


class AttributeVector(BaseModel):
    energy: float
    valence: float
    danceability: float
    tempo_range: TempoRange


class ResolutionResult(BaseModel):
    attributes: AttributeVector
    genres: List[str]
    artists: List[str]
    sentiment_score: float
    mood: str
    description: str


# ----------------------------------
# Request bodies
# ----------------------------------
class MoodInputs(BaseModel):
    # mood is validated by the route so a missing mood answers 400, not 422
    mood: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    artists: List[str] = Field(default_factory=list)
    social_review: Optional[str] = None
    hobbies: List[str] = Field(default_factory=list)
    listening_time: Optional[str] = "any"
    tempo_preference: Optional[str] = "medium"


class GenerateRequest(MoodInputs):
    limit: int = Field(default=50, ge=1, le=50)


class CreatePlaylistRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tracks: List[str] = Field(default_factory=list)  # track URIs
    is_public: bool = False
    inputs: Optional[Dict[str, Any]] = None
    analysis: Optional[ResolutionResult] = None
    spotify_params: Optional[Dict[str, Any]] = None


class SentimentRequest(BaseModel):
    text: Optional[str] = None


class SentimentResponse(BaseModel):
    sentiment: str
    score: float
    text: str


class PreferencesIn(BaseModel):
    favorite_genres: Optional[List[str]] = None
    favorite_artists: Optional[List[str]] = None
    favorite_tracks: Optional[List[str]] = None
    mood_history: Optional[List[str]] = None
    hobby_tags: Optional[List[str]] = None
    listening_time_preference: Optional[str] = None
    tempo_preference: Optional[str] = None


class ListeningIn(BaseModel):
    track_id: str = Field(min_length=1)
    track_name: Optional[str] = None
    artist_name: Optional[str] = None
    mood_context: Optional[str] = None
    hobby_context: Optional[str] = None
