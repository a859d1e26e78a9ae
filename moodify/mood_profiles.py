# moodify/mood_profiles.py
# Static lookup tables: mood -> target audio attributes, hobby -> genre seeds.
# Read-only for the lifetime of the process.

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Tuple

DEFAULT_MOOD = "happy"


def _profile(energy: float, valence: float, danceability: float,
             tempo: Tuple[int, int], genres: Tuple[str, ...]) -> Mapping[str, Any]:
    return MappingProxyType({
        "energy": energy,
        "valence": valence,
        "danceability": danceability,
        "tempo": MappingProxyType({"min": tempo[0], "max": tempo[1]}),
        "genres": genres,
    })


MOOD_PROFILES: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "happy":     _profile(0.75, 0.85, 0.7,  (120, 140), ("pop", "dance", "disco", "funk")),
    "sad":       _profile(0.3,  0.2,  0.3,  (60, 90),   ("acoustic", "indie", "piano", "singer-songwriter")),
    "energetic": _profile(0.9,  0.7,  0.85, (140, 180), ("electronic", "edm", "house", "techno")),
    "chill":     _profile(0.4,  0.6,  0.4,  (80, 110),  ("chill", "ambient", "lo-fi", "downtempo")),
    "focused":   _profile(0.5,  0.5,  0.3,  (90, 120),  ("instrumental", "classical", "study", "ambient")),
    "angry":     _profile(0.95, 0.3,  0.5,  (130, 180), ("metal", "rock", "hardcore", "punk")),
    "romantic":  _profile(0.4,  0.75, 0.5,  (70, 100),  ("soul", "r-n-b", "jazz", "acoustic")),
    "motivated": _profile(0.85, 0.8,  0.7,  (130, 160), ("rock", "hip-hop", "pop", "electronic")),
    "relaxed":   _profile(0.35, 0.65, 0.35, (70, 100),  ("jazz", "bossa-nova", "acoustic", "soft-rock")),
    "anxious":   _profile(0.6,  0.35, 0.4,  (100, 130), ("ambient", "minimal", "indie", "alternative")),
})

HOBBY_GENRES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "gym":       ("workout", "electronic", "hip-hop", "edm", "power-pop"),
    "gaming":    ("electronic", "edm", "dubstep", "drum-and-bass", "synthwave"),
    "studying":  ("classical", "instrumental", "lo-fi", "ambient", "study"),
    "yoga":      ("ambient", "chill", "world-music", "meditation", "new-age"),
    "running":   ("electronic", "edm", "hip-hop", "rock", "dance"),
    "cooking":   ("indie", "pop", "jazz", "world-music", "soul"),
    "reading":   ("classical", "jazz", "ambient", "acoustic", "instrumental"),
    "party":     ("dance", "pop", "edm", "latin", "disco"),
    "traveling": ("world-music", "indie", "alternative", "folk", "reggae"),
    "working":   ("lo-fi", "electronic", "instrumental", "jazz", "classical"),
    "cleaning":  ("pop", "dance", "indie", "rock", "funk"),
    "driving":   ("rock", "indie", "pop", "hip-hop", "alternative"),
})

MOODS: Tuple[str, ...] = tuple(MOOD_PROFILES.keys())
HOBBIES: Tuple[str, ...] = tuple(HOBBY_GENRES.keys())

LISTENING_TIMES: Tuple[str, ...] = ("any", "morning", "afternoon", "evening", "night")
TEMPO_PREFERENCES: Tuple[str, ...] = ("slow", "medium", "fast")


def mood_profile(mood: str | None) -> Mapping[str, Any]:
    """Case-insensitive lookup; unknown moods get the happy profile."""
    key = (mood or "").strip().lower()
    return MOOD_PROFILES.get(key, MOOD_PROFILES[DEFAULT_MOOD])
