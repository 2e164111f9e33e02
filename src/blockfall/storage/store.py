from __future__ import annotations

import json
import logging
import os
import pathlib
from typing import Any, Dict, List, Optional, Union

from .records import GameSettings, HighScore


logger = logging.getLogger(__name__)

MAX_HIGH_SCORES = 10
SETTINGS_FILE = "settings.json"
HIGH_SCORES_FILE = "high_scores.json"

PathLike = Union[str, os.PathLike]


def default_data_dir() -> pathlib.Path:
    env = os.environ.get("BLOCKFALL_HOME")
    if env:
        return pathlib.Path(env)
    return pathlib.Path.home() / ".blockfall"


def _read_json(path: pathlib.Path) -> Any:
    """Return the decoded file, or ``None`` when missing or unreadable."""
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None


def _write_json(path: pathlib.Path, payload: Any) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not write %s: %s", path, exc)
        return False
    return True


class SettingsStore:
    def __init__(self, data_dir: Optional[PathLike] = None) -> None:
        self.path = pathlib.Path(data_dir or default_data_dir()) / SETTINGS_FILE

    def load(self) -> GameSettings:
        return GameSettings.from_dict(_read_json(self.path))

    def save(self, updates: Union[GameSettings, Dict[str, Any]]) -> GameSettings:
        """Merge `updates` (stored key names, e.g. ``{"ai": {"moveDelay": 80}}``) over the stored settings and persist the result."""
        if isinstance(updates, GameSettings):
            merged = updates
        else:
            data = self.load().to_dict()
            for key, value in updates.items():
                if isinstance(value, dict) and isinstance(data.get(key), dict):
                    data[key] = {**data[key], **value}
                else:
                    data[key] = value
            merged = GameSettings.from_dict(data)
        _write_json(self.path, merged.to_dict())
        return merged

    def reset(self) -> GameSettings:
        defaults = GameSettings()
        _write_json(self.path, defaults.to_dict())
        return defaults


class HighScoreStore:
    def __init__(self, data_dir: Optional[PathLike] = None, limit: int = MAX_HIGH_SCORES) -> None:
        self.path = pathlib.Path(data_dir or default_data_dir()) / HIGH_SCORES_FILE
        self.limit = limit

    def load(self) -> List[HighScore]:
        raw = _read_json(self.path)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed high score file %s", self.path)
            return []
        scores = [s for s in (HighScore.from_dict(item) for item in raw) if s is not None]
        if len(scores) != len(raw):
            logger.warning("Dropped %d malformed high score entries", len(raw) - len(scores))
        return scores

    def save(self, score: int, level: int, lines_cleared: int) -> List[HighScore]:
        scores = self.load()
        scores.append(HighScore.create(score, level, lines_cleared))
        scores.sort(key=lambda s: s.score, reverse=True)
        top = scores[: self.limit]
        _write_json(self.path, [s.to_dict() for s in top])
        return top

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove %s: %s", self.path, exc)
