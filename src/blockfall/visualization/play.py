from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from blockfall.game.core import ActionType, GameAction
from blockfall.session import GameSession
from blockfall.storage import HighScoreStore, SettingsStore
from .renderer import Renderer


logger = logging.getLogger(__name__)

# Stored bindings use browser-style key names.
_NAMED_KEYS: Dict[str, int] = {
    "ArrowLeft": pygame.K_LEFT,
    "ArrowRight": pygame.K_RIGHT,
    "ArrowUp": pygame.K_UP,
    "ArrowDown": pygame.K_DOWN,
    "Space": pygame.K_SPACE,
    "Escape": pygame.K_ESCAPE,
    "Enter": pygame.K_RETURN,
}


def key_for(name: str) -> Optional[int]:
    if name in _NAMED_KEYS:
        return _NAMED_KEYS[name]
    if name.startswith("Key") and len(name) == 4:
        name = name[3:]
    try:
        return pygame.key.key_code(name.lower())
    except ValueError:
        logger.warning("Unknown key binding %r", name)
        return None


def build_keymap(session: GameSession) -> Dict[int, ActionType]:
    controls = session.settings.controls
    bindings = {
        controls.move_left: ActionType.MOVE_LEFT,
        controls.move_right: ActionType.MOVE_RIGHT,
        controls.rotate: ActionType.ROTATE,
        controls.soft_drop: ActionType.SOFT_DROP,
        controls.hard_drop: ActionType.HARD_DROP,
    }
    keymap: Dict[int, ActionType] = {}
    for name, action in bindings.items():
        key = key_for(name)
        if key is not None:
            keymap[key] = action
    return keymap


def run(session: GameSession, fps: int = 60) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        renderer = Renderer(cell_size=28)
        screen = pygame.display.set_mode(renderer.window_size(session.state.board.shape))
        pygame.display.set_caption("Blockfall")

        keymap = build_keymap(session)
        pause_key = key_for(session.settings.controls.pause)

        running = True
        while running:
            elapsed = clock.tick(fps)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type != pygame.KEYDOWN:
                    continue
                elif event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_r:
                    session.new_game()
                elif event.key == pygame.K_F2:
                    session.dispatch(GameAction.toggle_ai(not session.state.ai_active))
                elif event.key == pause_key:
                    session.toggle_pause()
                elif event.key in keymap and not session.state.game_over:
                    session.dispatch(GameAction(keymap[event.key]))

            state = session.advance(elapsed)
            status = (
                f"Score {state.score}",
                f"Level {state.level}",
                f"Lines {state.lines_cleared}",
                "AI on (F2)" if state.ai_active else "AI off (F2)",
                "GAME OVER - R" if state.game_over else ("PAUSED" if state.paused else ""),
            )
            renderer.draw(screen, session.snapshot(), state.next, status, session.settings.enable_shadow)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Blockfall with pygame")
    p.add_argument("--ai", action="store_true", help="Let the heuristic AI play")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--start-level", type=int, default=None)
    p.add_argument("--data-dir", type=str, default=None, help="Where settings and high scores are kept")
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--log-level", default="INFO")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    settings_store = SettingsStore(args.data_dir)
    settings = settings_store.load()
    if args.start_level is not None:
        settings.start_level = max(1, min(10, args.start_level))
    if args.ai:
        settings.ai.enabled = True
    session = GameSession(settings, seed=args.seed, settings_store=settings_store, score_store=HighScoreStore(args.data_dir))
    run(session, fps=args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
