"""Game module for Blockfall.

Exports the rules engine:
- Piece, PieceKind, PieceBag: tetromino catalog and 7-bag generator
- grid helpers: collision, landing position, merging and line clearing
- ScoringRules: line, drop and level scoring
- GameState, GameAction, reduce: the immutable state machine
"""

from .core import ActionType, GameAction, GameState, create_initial_state, reduce, render_grid
from .grid import BOARD_HEIGHT, BOARD_WIDTH, clear_lines, empty_board, ghost_position, is_game_over, is_valid_position
from .pieces import Piece, PieceBag, PieceKind, create_piece, rotate_piece
from .rules import ScoringRules, calculate_drop_speed, calculate_level, calculate_score, drop_interval_ms

__all__ = [
    "ActionType",
    "GameAction",
    "GameState",
    "create_initial_state",
    "reduce",
    "render_grid",
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "clear_lines",
    "empty_board",
    "ghost_position",
    "is_game_over",
    "is_valid_position",
    "Piece",
    "PieceBag",
    "PieceKind",
    "create_piece",
    "rotate_piece",
    "ScoringRules",
    "calculate_drop_speed",
    "calculate_level",
    "calculate_score",
    "drop_interval_ms",
]
