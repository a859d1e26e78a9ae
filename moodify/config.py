# moodify/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(), override=False)

# ---- Spotify ----
SPOTIFY_CLIENT_ID     = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REDIRECT_URI  = os.getenv("SPOTIFY_REDIRECT_URI", "http://127.0.0.1:8000/spotify/callback")
SPOTIFY_MARKET        = os.getenv("SPOTIFY_MARKET", "PH")

# ---- Frontend / HTTP ----
FRONTEND_URL  = os.getenv("FRONTEND_URL", "http://127.0.0.1:8501")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

_default_origins: List[str] = [
    "http://localhost:8501", "http://127.0.0.1:8501",
    "http://localhost", "http://127.0.0.1",
]
_env_origins = (os.getenv("MOODIFY_CORS_ORIGINS") or "").strip()
CORS_ORIGINS: List[str] = (
    [o.strip() for o in _env_origins.split(",") if o.strip()]
    if _env_origins else _default_origins
)

# ---- Remote sentiment (Hugging Face inference) ----
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")
SENTIMENT_MODEL_URL = os.getenv(
    "SENTIMENT_MODEL_URL",
    "https://api-inference.huggingface.co/models/cardiffnlp/twitter-roberta-base-sentiment-latest",
)
SENTIMENT_TIMEOUT = float(os.getenv("SENTIMENT_TIMEOUT", "8"))

# ---- Storage (file-backed) ----
DATA_DIR = Path(
    os.getenv("MOODIFY_DATA_DIR", str(Path(__file__).resolve().parent.parent / ".appdata"))
)


def spotify_configured() -> bool:
    return bool(SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET)
