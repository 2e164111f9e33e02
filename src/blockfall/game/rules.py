from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    soft_drop_points: int = 1
    hard_drop_points: int = 2
    lines_per_level: int = 10

    def score_for_lines(self, lines: int, level: int) -> int:
        if 1 <= lines <= 4:
            return self.line_clear_scores[lines - 1] * level
        return 0

    def level_for_lines(self, total_lines: int, start_level: int) -> int:
        return start_level + total_lines // self.lines_per_level


DEFAULT_RULES = ScoringRules()


def calculate_score(lines_cleared: int, level: int) -> int:
    return DEFAULT_RULES.score_for_lines(lines_cleared, level)


def calculate_level(total_lines: int, start_level: int) -> int:
    return DEFAULT_RULES.level_for_lines(total_lines, start_level)


def calculate_drop_speed(level: int, base_speed: float) -> float:
    return base_speed * (0.8 - (level - 1) * 0.007) ** (level - 1)


def drop_interval_ms(level: int, base_speed: float) -> float:
    """Gravity period for the external timer, floored at 100 ms."""
    speed = calculate_drop_speed(level, base_speed)
    return max(100.0, 1000.0 - (level - 1) * 100 * speed)
