"""Persistence for settings and high scores (JSON files)."""

from .records import AISettings, Controls, GameSettings, HighScore, Theme
from .store import HighScoreStore, SettingsStore, default_data_dir

__all__ = [
    "AISettings",
    "Controls",
    "GameSettings",
    "HighScore",
    "Theme",
    "HighScoreStore",
    "SettingsStore",
    "default_data_dir",
]
