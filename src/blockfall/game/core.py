from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np

from ..storage.records import GameSettings
from .grid import (
    Board,
    clear_lines,
    empty_board,
    ghost_position,
    is_game_over,
    is_valid_position,
    merge_piece,
    project_piece,
)
from .pieces import Piece, PieceBag, create_piece
from .rules import DEFAULT_RULES, ScoringRules


class ActionType(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    TICK = 5
    PAUSE = 6
    RESUME = 7
    RESTART = 8
    NEW_GAME = 9
    TOGGLE_AI = 10
    GAME_OVER = 11


GAMEPLAY_ACTIONS = frozenset(
    {
        ActionType.MOVE_LEFT,
        ActionType.MOVE_RIGHT,
        ActionType.ROTATE,
        ActionType.SOFT_DROP,
        ActionType.HARD_DROP,
        ActionType.TICK,
    }
)

# Tried in order against the rotated shape when it does not fit in place.
WALL_KICKS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (-2, 0), (2, 0))


@dataclass(frozen=True)
class GameAction:
    type: ActionType
    settings: Optional[GameSettings] = None
    enabled: Optional[bool] = None

    @classmethod
    def restart(cls, settings: GameSettings) -> "GameAction":
        return cls(ActionType.RESTART, settings=settings)

    @classmethod
    def new_game(cls, settings: GameSettings) -> "GameAction":
        return cls(ActionType.NEW_GAME, settings=settings)

    @classmethod
    def toggle_ai(cls, enabled: bool) -> "GameAction":
        return cls(ActionType.TOGGLE_AI, enabled=enabled)


@dataclass(frozen=True, eq=False)
class GameState:
    """Immutable snapshot of one game. Transitions return new instances."""

    board: Board
    current: Optional[Piece]
    next: Optional[Piece]
    bag: PieceBag = field(repr=False)
    score: int = 0
    level: int = 1
    start_level: int = 1
    lines_cleared: int = 0
    game_over: bool = False
    paused: bool = False
    ai_active: bool = False


def create_initial_state(
    settings: Optional[GameSettings] = None,
    bag: Optional[PieceBag] = None,
    seed: Optional[int] = None,
) -> GameState:
    settings = settings or GameSettings()
    bag = bag if bag is not None else PieceBag(seed)
    current = create_piece(bag=bag)
    nxt = create_piece(bag=bag)
    return GameState(
        board=empty_board(),
        current=current,
        next=nxt,
        bag=bag,
        score=0,
        level=settings.start_level,
        start_level=settings.start_level,
        lines_cleared=0,
        game_over=False,
        paused=False,
        ai_active=settings.ai.enabled,
    )


def _shift(state: GameState, dx: int) -> GameState:
    if state.current is None:
        return state
    moved = state.current.moved(dx=dx)
    if is_valid_position(moved, state.board):
        return replace(state, current=moved)
    return state


def move_left(state: GameState) -> GameState:
    return _shift(state, -1)


def move_right(state: GameState) -> GameState:
    return _shift(state, 1)


def rotate(state: GameState, direction: int = 1) -> GameState:
    if state.current is None:
        return state
    rotated = state.current.rotated(direction)
    if is_valid_position(rotated, state.board):
        return replace(state, current=rotated)
    for dx, dy in WALL_KICKS:
        kicked = rotated.moved(dx, dy)
        if is_valid_position(kicked, state.board):
            return replace(state, current=kicked)
    return state


def lock_piece(state: GameState, rules: ScoringRules = DEFAULT_RULES) -> GameState:
    """Merge the current piece, clear full rows, score, and promote the next piece."""
    if state.current is None:
        return state
    merged = merge_piece(state.board, state.current)
    result = clear_lines(merged)
    total_lines = state.lines_cleared + result.lines_cleared
    bag = state.bag.copy()
    return replace(
        state,
        board=result.board,
        current=state.next,
        next=create_piece(bag=bag),
        bag=bag,
        score=state.score + rules.score_for_lines(result.lines_cleared, state.level),
        level=rules.level_for_lines(total_lines, state.start_level),
        lines_cleared=total_lines,
        game_over=is_game_over(result.board),
    )


def soft_drop(state: GameState, rules: ScoringRules = DEFAULT_RULES) -> GameState:
    if state.current is None:
        return state
    lowered = state.current.moved(dy=1)
    if is_valid_position(lowered, state.board):
        return replace(state, current=lowered, score=state.score + rules.soft_drop_points)
    return lock_piece(state, rules)


def tick(state: GameState, rules: ScoringRules = DEFAULT_RULES) -> GameState:
    return soft_drop(state, rules)


def hard_drop(state: GameState, rules: ScoringRules = DEFAULT_RULES) -> GameState:
    if state.current is None:
        return state
    x, y = ghost_position(state.current, state.board)
    distance = y - state.current.y
    dropped = replace(
        state,
        current=state.current.at(x, y),
        score=state.score + distance * rules.hard_drop_points,
    )
    return lock_piece(dropped, rules)


def pause(state: GameState) -> GameState:
    return replace(state, paused=True)


def resume(state: GameState) -> GameState:
    return replace(state, paused=False)


def set_ai_active(state: GameState, enabled: bool) -> GameState:
    return replace(state, ai_active=bool(enabled))


def reduce(state: GameState, action: GameAction) -> GameState:
    """Apply one action. Gameplay actions do nothing while paused or after game over."""
    kind = action.type
    if kind in GAMEPLAY_ACTIONS:
        if state.game_over or state.paused:
            return state
        if kind == ActionType.MOVE_LEFT:
            return move_left(state)
        if kind == ActionType.MOVE_RIGHT:
            return move_right(state)
        if kind == ActionType.ROTATE:
            return rotate(state)
        if kind == ActionType.HARD_DROP:
            return hard_drop(state)
        return soft_drop(state)
    if kind == ActionType.PAUSE:
        return pause(state)
    if kind == ActionType.RESUME:
        return resume(state)
    if kind == ActionType.GAME_OVER:
        return replace(state, game_over=True)
    if kind == ActionType.TOGGLE_AI:
        return set_ai_active(state, bool(action.enabled))
    if kind in (ActionType.RESTART, ActionType.NEW_GAME):
        return create_initial_state(action.settings, bag=state.bag.copy())
    raise ValueError(f"Unknown action type: {kind!r}")


def render_grid(state: GameState, show_ghost: bool = True) -> np.ndarray:
    """Board snapshot for display: locked blocks, ghost (negative kind), falling piece."""
    grid = state.board.copy()
    piece = state.current
    if piece is None:
        return grid
    if show_ghost and not state.game_over:
        x, y = ghost_position(piece, state.board)
        if y != piece.y:
            grid = project_piece(grid, piece.at(x, y), ghost=True)
    return project_piece(grid, piece)
