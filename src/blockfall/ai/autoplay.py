from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from blockfall.game.core import GameAction
from blockfall.session import GameSession
from blockfall.storage.records import AISettings, GameSettings


logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    score: int
    level: int
    lines_cleared: int
    steps: int
    finished: bool


def play_game(settings: GameSettings, seed: Optional[int] = None, max_steps: int = 20000) -> GameResult:
    """Let the planner play one game headless.

    Each step advances simulated time by one AI move delay, so gravity keeps
    running exactly as it would under a real-time driver.
    """
    session = GameSession(settings, seed=seed)
    session.dispatch(GameAction.toggle_ai(True))
    delay = max(1.0, float(settings.ai.move_delay))
    steps = 0
    while not session.state.game_over and steps < max_steps:
        session.advance(delay)
        steps += 1
    state = session.state
    return GameResult(state.score, state.level, state.lines_cleared, steps, state.game_over)


def _print_progress(idx: int, total: int, result: GameResult) -> None:
    width = 30
    filled = int(width * (idx + 1) / max(1, total))
    bar = "=" * filled + "." * (width - filled)
    msg = f"\r[{bar}] {idx + 1}/{total}  score={result.score}  lines={result.lines_cleared}"
    print(msg, end="", file=sys.stdout, flush=True)


def run_games(games: int, settings: GameSettings, seed: int = 0, max_steps: int = 20000,
              progress: bool = True) -> List[GameResult]:
    results: List[GameResult] = []
    for i in range(games):
        result = play_game(settings, seed=seed + i, max_steps=max_steps)
        results.append(result)
        if progress:
            _print_progress(i, games, result)
        else:
            logger.info("Game %d/%d score=%d lines=%d", i + 1, games, result.score, result.lines_cleared)
    if progress:
        print()
    return results


def build_parser() -> argparse.ArgumentParser:
    defaults = AISettings()
    p = argparse.ArgumentParser(description="Run the heuristic AI headless")
    p.add_argument("--games", type=int, default=5)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--max-steps", type=int, default=20000)
    p.add_argument("--start-level", type=int, default=1)
    p.add_argument("--lines-weight", type=float, default=defaults.lines_cleared_weight)
    p.add_argument("--holes-weight", type=float, default=defaults.holes_weight)
    p.add_argument("--height-weight", type=float, default=defaults.height_weight)
    p.add_argument("--bumpiness-weight", type=float, default=defaults.bumpiness_weight)
    p.add_argument("--no-progress", action="store_true")
    p.add_argument("--log-level", default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    ai = AISettings(
        enabled=True,
        lines_cleared_weight=args.lines_weight,
        holes_weight=args.holes_weight,
        height_weight=args.height_weight,
        bumpiness_weight=args.bumpiness_weight,
    )
    settings = GameSettings(start_level=args.start_level, ai=ai)
    results = run_games(args.games, settings, args.seed, args.max_steps, progress=not args.no_progress)
    mean_score = sum(r.score for r in results) / max(1, len(results))
    mean_lines = sum(r.lines_cleared for r in results) / max(1, len(results))
    print(f"games={len(results)} mean_score={mean_score:.1f} mean_lines={mean_lines:.1f}")


if __name__ == "__main__":  # pragma: no cover
    main()
