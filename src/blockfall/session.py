from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .ai.planner import AIMove, execute_move, get_best_move
from .storage.records import GameSettings
from .storage.store import HighScoreStore, SettingsStore
from .game.core import ActionType, GameAction, GameState, create_initial_state, reduce, render_grid
from .game.pieces import PieceBag
from .game.rules import drop_interval_ms


logger = logging.getLogger(__name__)


class GameSession:
    """Holds the live game and advances it for an external scheduler.

    The caller owns the clock: it calls ``advance(elapsed_ms)`` at whatever
    cadence it likes and ``dispatch`` for player input. Transitions run one at
    a time; nothing here starts timers or threads.
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        seed: Optional[int] = None,
        settings_store: Optional[SettingsStore] = None,
        score_store: Optional[HighScoreStore] = None,
    ) -> None:
        self.settings_store = settings_store
        self.score_store = score_store
        if settings is None:
            settings = settings_store.load() if settings_store is not None else GameSettings()
        self.settings = settings
        self.state: GameState = create_initial_state(settings, bag=PieceBag(seed))
        self._drop_elapsed = 0.0
        self._ai_elapsed = 0.0
        self._ai_move: Optional[AIMove] = None
        self._score_recorded = False

    # ---------- Input ----------
    def dispatch(self, action: GameAction) -> GameState:
        before = self.state
        after = reduce(before, action)
        self.state = after
        if action.type in (ActionType.RESTART, ActionType.NEW_GAME):
            if action.settings is not None:
                self.settings = action.settings
            self._reset_timers()
            self._score_recorded = False
            logger.info("New game at level %d", after.level)
        elif action.type == ActionType.TOGGLE_AI:
            self._ai_move = None
        if after.next is not before.next:
            # A piece locked (or the game restarted): the plan belongs to the old piece.
            self._ai_move = None
        if after.level != before.level and not after.game_over:
            logger.debug("Level %d -> %d", before.level, after.level)
        if after.game_over and not self._score_recorded:
            self._record_score()
        return after

    def new_game(self, settings: Optional[GameSettings] = None) -> GameState:
        return self.dispatch(GameAction.new_game(settings or self.settings))

    def toggle_pause(self) -> GameState:
        return self.dispatch(GameAction(ActionType.RESUME if self.state.paused else ActionType.PAUSE))

    def update_settings(self, settings: GameSettings) -> None:
        self.settings = settings
        if self.settings_store is not None:
            self.settings_store.save(settings)

    # ---------- Scheduling ----------
    @property
    def drop_interval(self) -> float:
        return drop_interval_ms(self.state.level, self.settings.drop_speed)

    def advance(self, elapsed_ms: float) -> GameState:
        """Account for `elapsed_ms` of wall time: gravity ticks and AI steps."""
        if self.state.game_over or self.state.paused:
            return self.state
        self._drop_elapsed += elapsed_ms
        while self._drop_elapsed >= self.drop_interval and self._running:
            self._drop_elapsed -= self.drop_interval
            self.dispatch(GameAction(ActionType.TICK))
        if self.state.ai_active:
            delay = max(1.0, float(self.settings.ai.move_delay))
            self._ai_elapsed += elapsed_ms
            while self._ai_elapsed >= delay and self._running and self.state.ai_active:
                self._ai_elapsed -= delay
                self.ai_step()
        return self.state

    def ai_step(self) -> GameState:
        """Plan if needed and apply one primitive action toward the planned move."""
        state = self.state
        if state.current is None or not self._running:
            return state
        if self._ai_move is None:
            self._ai_move = get_best_move(state, self.settings.ai)
        if self._ai_move is None:
            return state
        action = execute_move(state, self._ai_move)
        if action.type == ActionType.ROTATE:
            self._ai_move = self._ai_move.after_rotation()
        elif action.type in (ActionType.HARD_DROP, ActionType.SOFT_DROP):
            self._ai_move = None
        return self.dispatch(action)

    # ---------- Output ----------
    def snapshot(self) -> np.ndarray:
        return render_grid(self.state, show_ghost=self.settings.show_ghost_piece)

    # ---------- Internals ----------
    @property
    def _running(self) -> bool:
        return not (self.state.game_over or self.state.paused)

    def _reset_timers(self) -> None:
        self._drop_elapsed = 0.0
        self._ai_elapsed = 0.0
        self._ai_move = None

    def _record_score(self) -> None:
        self._score_recorded = True
        state = self.state
        logger.info("Game over: score=%d level=%d lines=%d", state.score, state.level, state.lines_cleared)
        if self.score_store is not None:
            self.score_store.save(state.score, state.level, state.lines_cleared)
