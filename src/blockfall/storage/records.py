"""Plain records persisted between sessions: settings and high scores.

Every ``from_dict`` starts from the defaults and takes a stored field only when
it has the expected type and range, so records written by older versions (or
hand-edited ones) still load.

Stored keys are camelCase (``startLevel``, ``linesCleared``, ``ai.moveDelay``)
while the dataclass fields stay snake_case; ``to_dict``/``from_dict`` translate.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional


class Theme(str, Enum):
    SPACE = "space"
    DESERT = "desert"
    NATURE = "nature"
    CITY = "city"
    SEA = "sea"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _wire(record: Any) -> Dict[str, Any]:
    return {_camel(f.name): getattr(record, f.name) for f in fields(record)}


def _merge(defaults: Any, data: Any, checks: Mapping[str, Callable[[Any], bool]]) -> Dict[str, Any]:
    values = {f.name: getattr(defaults, f.name) for f in fields(defaults)}
    if not isinstance(data, Mapping):
        return values
    for name, check in checks.items():
        key = _camel(name)
        if key in data and check(data[key]):
            values[name] = data[key]
    return values


@dataclass
class Controls:
    move_left: str = "ArrowLeft"
    move_right: str = "ArrowRight"
    rotate: str = "ArrowUp"
    soft_drop: str = "ArrowDown"
    hard_drop: str = "Space"
    pause: str = "Escape"

    @classmethod
    def from_dict(cls, data: Any) -> "Controls":
        checks = {f.name: (lambda v: isinstance(v, str) and bool(v)) for f in fields(cls)}
        return cls(**_merge(cls(), data, checks))


@dataclass
class AISettings:
    enabled: bool = False
    move_delay: float = 300  # ms between AI actions
    lines_cleared_weight: float = 0.8
    holes_weight: float = 0.7
    height_weight: float = 0.3
    bumpiness_weight: float = 0.2

    @classmethod
    def from_dict(cls, data: Any) -> "AISettings":
        checks: Dict[str, Callable[[Any], bool]] = {
            "enabled": lambda v: isinstance(v, bool),
            "move_delay": lambda v: _is_number(v) and v >= 0,
            "lines_cleared_weight": _is_number,
            "holes_weight": _is_number,
            "height_weight": _is_number,
            "bumpiness_weight": _is_number,
        }
        return cls(**_merge(cls(), data, checks))


@dataclass
class GameSettings:
    start_level: int = 1
    show_ghost_piece: bool = True
    drop_speed: float = 1.0
    enable_shadow: bool = True
    theme: Theme = Theme.SPACE
    volume: float = 0.5
    controls: Controls = field(default_factory=Controls)
    ai: AISettings = field(default_factory=AISettings)

    @classmethod
    def from_dict(cls, data: Any) -> "GameSettings":
        checks: Dict[str, Callable[[Any], bool]] = {
            "start_level": lambda v: _is_int(v) and 1 <= v <= 10,
            "show_ghost_piece": lambda v: isinstance(v, bool),
            "drop_speed": lambda v: _is_number(v) and v > 0,
            "enable_shadow": lambda v: isinstance(v, bool),
            "theme": lambda v: v in {t.value for t in Theme},
            "volume": lambda v: _is_number(v) and 0.0 <= v <= 1.0,
        }
        values = _merge(cls(), data, checks)
        values["theme"] = Theme(values["theme"])
        source = data if isinstance(data, Mapping) else {}
        values["controls"] = Controls.from_dict(source.get("controls"))
        values["ai"] = AISettings.from_dict(source.get("ai"))
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = _wire(self)
        data["theme"] = self.theme.value
        data["controls"] = _wire(self.controls)
        data["ai"] = _wire(self.ai)
        return data


@dataclass
class HighScore:
    score: int
    level: int
    lines_cleared: int
    date: str  # ISO-8601

    @classmethod
    def create(cls, score: int, level: int, lines_cleared: int, when: Optional[datetime] = None) -> "HighScore":
        when = when or datetime.now(timezone.utc)
        date = when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(score=int(score), level=int(level), lines_cleared=int(lines_cleared), date=date)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["HighScore"]:
        """Parse one stored entry; ``None`` when it is unusable."""
        if not isinstance(data, Mapping):
            return None
        score, level, lines, date = (data.get(k) for k in ("score", "level", "linesCleared", "date"))
        if not (_is_int(score) and _is_int(level) and _is_int(lines) and isinstance(date, str)):
            return None
        return cls(score=score, level=level, lines_cleared=lines, date=date)

    def to_dict(self) -> Dict[str, Any]:
        return _wire(self)
