"""Mood-driven Spotify playlist generation."""

__version__ = "1.0.0"
