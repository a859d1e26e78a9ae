# moodify/sentiment.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from moodify import config

log = logging.getLogger("sentiment")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)

NEUTRAL_SCORE = 0.5

# -------------------------------------------------
# Lexicon fallback (word lists are part of the scoring contract)
# -------------------------------------------------
POSITIVE_WORDS: Tuple[str, ...] = (
    "happy", "love", "great", "awesome", "excellent", "good", "best",
    "wonderful", "fantastic", "amazing", "joy", "excited", "glad",
)
NEGATIVE_WORDS: Tuple[str, ...] = (
    "sad", "hate", "bad", "worst", "terrible", "awful", "horrible",
    "angry", "upset", "depressed", "hurt", "pain",
)
WORD_STEP = 0.05

# positive*1.0 + neutral*0.5 + negative*0.0
_LABEL_WEIGHTS: Dict[str, float] = {"positive": 1.0, "neutral": 0.5, "negative": 0.0}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _preview(text: str, n: int = 60) -> str:
    text = (text or "").strip()
    return text if len(text) <= n else text[:n] + "…"


def score_sentiment_local(text: str) -> float:
    """
    Deterministic heuristic: 0.5 baseline, +0.05 for every positive word that
    appears anywhere in the text, -0.05 for every negative word, clamped to 0..1.
    Matching is substring-based and case-insensitive; each word counts once.
    """
    lower = (text or "").lower()
    score = NEUTRAL_SCORE
    for word in POSITIVE_WORDS:
        if word in lower:
            score += WORD_STEP
    for word in NEGATIVE_WORDS:
        if word in lower:
            score -= WORD_STEP
    return _clamp(score)


def classify_sentiment(score: float) -> str:
    if score > 0.6:
        return "positive"
    if score < 0.4:
        return "negative"
    return "neutral"


# -------------------------------------------------
# Remote classifier (Hugging Face inference API)
# -------------------------------------------------
def _http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.SENTIMENT_TIMEOUT)


def _combine_labels(payload: Any) -> Optional[float]:
    """
    Accepts either [{"label","score"}, ...] or the inference API's batched
    form [[{"label","score"}, ...]]. Returns None when no known label is found.
    """
    items = payload
    if isinstance(items, list) and items and isinstance(items[0], list):
        items = items[0]
    if not isinstance(items, list):
        return None

    scores: Dict[str, float] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        label = str(item.get("label", "")).strip().lower()
        if label not in _LABEL_WEIGHTS:
            continue
        try:
            scores[label] = float(item.get("score", 0.0))
        except (TypeError, ValueError):
            return None

    if not scores:
        return None

    positive = scores.get("positive", 0.0)
    neutral = scores.get("neutral", 0.0)
    negative = scores.get("negative", 0.0)
    return _clamp(
        positive * _LABEL_WEIGHTS["positive"]
        + neutral * _LABEL_WEIGHTS["neutral"]
        + negative * _LABEL_WEIGHTS["negative"]
    )


async def score_sentiment_remote(text: str) -> Optional[float]:
    """One attempt against the remote classifier. None means unavailable."""
    api_key = config.HUGGINGFACE_API_KEY
    if not api_key:
        log.info("[sentiment] No HuggingFace API key; using lexicon fallback.")
        return None

    try:
        async with _http_client() as client:
            r = await client.post(
                config.SENTIMENT_MODEL_URL,
                headers={"Authorization": f"Bearer {api_key}"},
                json={"inputs": text},
            )
            r.raise_for_status()
            payload = r.json()
    except Exception as e:
        log.warning("[sentiment] Remote classifier failed (%s); using lexicon fallback.", e)
        return None

    score = _combine_labels(payload)
    if score is None:
        log.warning("[sentiment] Unexpected classifier response; using lexicon fallback.")
    return score


async def score_sentiment(text: str) -> float:
    """
    Positivity of `text` in 0..1 (0.5 neutral). Tries the remote classifier
    once and falls back to the lexicon heuristic on any failure.
    """
    score = await score_sentiment_remote(text)
    if score is None:
        score = score_sentiment_local(text)
        log.info("[sentiment] lexicon score=%.2f for %r", score, _preview(text))
    else:
        log.info("[sentiment] remote score=%.2f for %r", score, _preview(text))
    return score
