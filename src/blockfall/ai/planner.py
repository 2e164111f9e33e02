"""Greedy one-piece placement search.

For the falling piece, try every rotation and every column, drop it, lock it on
a scratch board and keep the placement whose resulting board scores highest.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..game.core import ActionType, GameAction, GameState
from ..game.grid import bumpiness, clear_lines, count_holes, ghost_position, is_valid_position, max_height, merge_piece
from ..storage.records import AISettings

# Score increment assumed per cleared line when valuing a hypothetical board.
SIMULATED_LINE_SCORE = 100


@dataclass(frozen=True)
class AIMove:
    rotation: int  # rotations still to apply
    target_x: int
    hard_drop: bool = True

    def after_rotation(self) -> "AIMove":
        return replace(self, rotation=max(0, self.rotation - 1))


def evaluate_state(state: GameState, weights: AISettings, lines_cleared: int = 0) -> float:
    board = state.board
    return (
        state.score
        + lines_cleared * weights.lines_cleared_weight
        - count_holes(board) * weights.holes_weight
        - max_height(board) * weights.height_weight
        - bumpiness(board) * weights.bumpiness_weight
    )


def get_best_move(state: GameState, weights: AISettings) -> Optional[AIMove]:
    """Best (rotation, column) for the current piece, or ``None`` without one.

    Ties keep the first candidate found: lower rotation count, then lower x.
    """
    piece = state.current
    if piece is None:
        return None

    board = state.board
    width = board.shape[1]
    best_value = float("-inf")
    best_move: Optional[AIMove] = None

    rotated = piece
    for rotation in range(4):
        if rotation:
            rotated = rotated.rotated(1)
        for x in range(-1, width - rotated.width + 2):
            candidate = rotated.at(x, piece.y)
            if not is_valid_position(candidate, board):
                continue
            landing = candidate.at(*ghost_position(candidate, board))
            result = clear_lines(merge_piece(board, landing))
            simulated = replace(
                state,
                board=result.board,
                score=state.score + result.lines_cleared * SIMULATED_LINE_SCORE * state.level,
                lines_cleared=state.lines_cleared + result.lines_cleared,
            )
            value = evaluate_state(simulated, weights, result.lines_cleared)
            if value > best_value:
                best_value = value
                best_move = AIMove(rotation=rotation, target_x=x, hard_drop=True)
    return best_move


def execute_move(state: GameState, move: AIMove) -> GameAction:
    """Next primitive action towards `move`: rotate, then shift, then drop.

    The target column was computed for the fully rotated shape; rotations are
    requested without re-checking that the column is still reachable.
    """
    if state.current is None:
        return GameAction(ActionType.TICK)
    if move.rotation > 0:
        return GameAction(ActionType.ROTATE)
    x = state.current.x
    if x < move.target_x:
        return GameAction(ActionType.MOVE_RIGHT)
    if x > move.target_x:
        return GameAction(ActionType.MOVE_LEFT)
    return GameAction(ActionType.HARD_DROP if move.hard_drop else ActionType.SOFT_DROP)
