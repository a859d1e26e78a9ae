# moodify/resolver.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from moodify import sentiment
from moodify.mood_profiles import HOBBY_GENRES, mood_profile
from moodify.schemas import AttributeVector, ResolutionResult, TempoRange

log = logging.getLogger("resolver")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)

MAX_GENRES = 5

SLOW_TEMPO = (60, 100)
FAST_TEMPO = (130, 180)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


# -------------------------------------------------------------------
# Sentiment score -> attribute targets
# -------------------------------------------------------------------
def sentiment_to_attributes(score: float) -> Dict[str, float]:
    return {
        "valence": score,
        "energy": 0.7 if score > 0.6 else (0.4 if score < 0.4 else 0.55),
        "danceability": 0.7 if score > 0.6 else 0.5,
    }


def hobby_genres(hobbies: Optional[Sequence[str]]) -> List[str]:
    """Genres for every known hobby, in input order. Unknown hobbies add nothing."""
    out: List[str] = []
    for hobby in hobbies or []:
        out.extend(HOBBY_GENRES.get(str(hobby).strip().lower(), ()))
    return out


def merge_genres(*groups: Optional[Sequence[str]], limit: int = MAX_GENRES) -> List[str]:
    """Concatenate groups, drop repeats (first occurrence wins), keep `limit`."""
    seen = set()
    merged: List[str] = []
    for group in groups:
        for g in group or []:
            if g in seen:
                continue
            seen.add(g)
            merged.append(g)
    return merged[:limit]


def describe(mood: str, score: float, hobbies: Optional[Sequence[str]]) -> str:
    vibe = "uplifting" if score > 0.6 else ("reflective" if score < 0.4 else "balanced")
    hobby_text = f" Perfect for {', '.join(hobbies)}." if hobbies else ""
    return f"AI-generated {mood} playlist with {vibe} vibes.{hobby_text} Created by Moodify 🎵"


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------
async def resolve_attributes(
    mood: Optional[str],
    genres: Optional[Sequence[str]] = None,
    artists: Optional[Sequence[str]] = None,
    social_review: Optional[str] = None,
    hobbies: Optional[Sequence[str]] = None,
    listening_time: Optional[str] = None,
    tempo_preference: Optional[str] = None,
) -> ResolutionResult:
    """
    Blend the mood table, the free-text sentiment and the hobby tags into
    target audio attributes plus up to five genre seeds.

    Unknown moods fall back to "happy", unknown hobbies are ignored and an
    unavailable sentiment service degrades to the lexicon heuristic, so this
    never fails for well-typed input.
    """
    mood = mood or ""
    hobbies = list(hobbies or [])
    profile = mood_profile(mood)

    # 1) free-text sentiment (neutral when absent)
    score = sentiment.NEUTRAL_SCORE
    if social_review and social_review.strip():
        score = await sentiment.score_sentiment(social_review)
    from_text = sentiment_to_attributes(score)

    # 2) genres: mood first, then explicit picks, then hobbies
    merged = merge_genres(profile["genres"], genres, hobby_genres(hobbies))

    # 3) weighted blend
    energy = profile["energy"] * 0.6 + from_text["energy"] * 0.4
    valence = profile["valence"] * 0.5 + from_text["valence"] * 0.5
    danceability = profile["danceability"] * 0.6 + from_text["danceability"] * 0.4
    tempo_min, tempo_max = profile["tempo"]["min"], profile["tempo"]["max"]

    # 4) tempo preference overrides the mood range
    if tempo_preference == "slow":
        tempo_min, tempo_max = SLOW_TEMPO
    elif tempo_preference == "fast":
        tempo_min, tempo_max = FAST_TEMPO

    # 5) listening time
    if listening_time == "morning":
        energy = min(1.0, energy + 0.1)
    elif listening_time == "night":
        energy = max(0.0, energy - 0.2)
        valence = max(0.0, valence - 0.1)

    result = ResolutionResult(
        attributes=AttributeVector(
            energy=_clamp(energy),
            valence=_clamp(valence),
            danceability=_clamp(danceability),
            tempo_range=TempoRange(min=min(tempo_min, tempo_max), max=max(tempo_min, tempo_max)),
        ),
        genres=merged,
        artists=list(artists or []),
        sentiment_score=score,
        mood=mood,
        description=describe(mood, score, hobbies),
    )
    log.info(
        "[resolver] mood=%s sentiment=%.2f energy=%.2f valence=%.2f genres=%s",
        mood, score, result.attributes.energy, result.attributes.valence, merged,
    )
    return result
