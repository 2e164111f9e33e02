from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .pieces import Piece


BOARD_WIDTH = 10
BOARD_HEIGHT = 20

# 0 is empty, a positive value is the PieceKind of a locked block.
# Snapshots for rendering use the negative kind for ghost cells.
Board = np.ndarray


@dataclass(frozen=True)
class ClearResult:
    board: Board
    lines_cleared: int


def freeze(board: Board) -> Board:
    board.setflags(write=False)
    return board


def empty_board(width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT) -> Board:
    return freeze(np.zeros((height, width), dtype=np.int8))


def is_valid_position(piece: Piece, board: Board) -> bool:
    """Check walls, floor and locked blocks for every filled cell of `piece`.

    Cells above the top edge (y < 0) skip the occupancy test; their column
    must still lie inside the board.
    """
    height, width = board.shape
    for x, y in piece.cells():
        if x < 0 or x >= width or y >= height:
            return False
        if y < 0:
            continue
        if board[y, x] != 0:
            return False
    return True


def ghost_position(piece: Piece, board: Board) -> Tuple[int, int]:
    """Anchor (x, y) where `piece` would come to rest if dropped straight down."""
    y = piece.y
    while is_valid_position(piece.at(piece.x, y + 1), board):
        y += 1
    return piece.x, y


def project_piece(board: Board, piece: Piece, ghost: bool = False) -> Board:
    """Copy of `board` with the piece's cells written in (negated when `ghost`)."""
    out = board.copy()
    height, width = out.shape
    value = -int(piece.kind) if ghost else int(piece.kind)
    for x, y in piece.cells():
        if 0 <= y < height and 0 <= x < width:
            out[y, x] = value
    return out


def merge_piece(board: Board, piece: Piece) -> Board:
    """Lock a real piece into a new board. Rows above the top edge are dropped."""
    return freeze(project_piece(board, piece, ghost=False))


def clear_lines(board: Board) -> ClearResult:
    full_rows = np.where(np.all(board > 0, axis=1))[0]
    if full_rows.size == 0:
        return ClearResult(board=board, lines_cleared=0)
    num = int(full_rows.size)
    kept = np.delete(board, full_rows, axis=0)
    new_rows = np.zeros((num, board.shape[1]), dtype=board.dtype)
    return ClearResult(board=freeze(np.vstack((new_rows, kept))), lines_cleared=num)


def is_game_over(board: Board) -> bool:
    return bool(np.any(board[0] > 0))


def column_heights(board: Board) -> List[int]:
    height, width = board.shape
    heights: List[int] = []
    for x in range(width):
        filled = np.flatnonzero(board[:, x] > 0)
        heights.append(height - int(filled[0]) if filled.size else 0)
    return heights


def max_height(board: Board) -> int:
    non_empty_rows = np.where(np.any(board > 0, axis=1))[0]
    if non_empty_rows.size == 0:
        return 0
    return board.shape[0] - int(non_empty_rows[0])


def count_holes(board: Board) -> int:
    holes = 0
    for x in range(board.shape[1]):
        seen_block = False
        for cell in board[:, x]:
            if cell > 0:
                seen_block = True
            elif seen_block:
                holes += 1
    return holes


def bumpiness(board: Board) -> int:
    heights = column_heights(board)
    return sum(abs(heights[i] - heights[i + 1]) for i in range(len(heights) - 1))


def count_complete_lines(board: Board) -> int:
    return int(np.sum(np.all(board > 0, axis=1)))
