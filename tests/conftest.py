from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from blockfall.game.core import GameState, create_initial_state
from blockfall.game.grid import freeze
from blockfall.game.pieces import PieceBag, PieceKind, create_piece


def make_board(rows=None) -> np.ndarray:
    """20x10 board; `rows` maps row index -> list of filled columns."""
    board = np.zeros((20, 10), dtype=np.int8)
    for y, cols in (rows or {}).items():
        for x in cols:
            board[y, x] = int(PieceKind.I)
    return freeze(board)


def all_but(*skip: int):
    return [x for x in range(10) if x not in skip]


@pytest.fixture
def state() -> GameState:
    return create_initial_state(bag=PieceBag(seed=7))


@pytest.fixture
def make_state(state):
    def _make(board=None, kind=PieceKind.T, **changes) -> GameState:
        return replace(
            state,
            board=board if board is not None else make_board(),
            current=create_piece(kind),
            **changes,
        )

    return _make
