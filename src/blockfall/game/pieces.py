from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class PieceKind(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray

SPAWN_X = 3


def _frozen(rows: List[List[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.setflags(write=False)
    return arr


# Fixed rotation tables, indexed by rotation state 0..3. Never derived by transform.
_O = [[1, 1], [1, 1]]

SHAPES: Dict[PieceKind, Tuple[Shape, Shape, Shape, Shape]] = {
    PieceKind.I: (
        _frozen([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]]),
        _frozen([[0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0]]),
        _frozen([[0, 0, 0, 0], [0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0]]),
        _frozen([[0, 1, 0, 0], [0, 1, 0, 0], [0, 1, 0, 0], [0, 1, 0, 0]]),
    ),
    PieceKind.O: (_frozen(_O), _frozen(_O), _frozen(_O), _frozen(_O)),
    PieceKind.T: (
        _frozen([[0, 1, 0], [1, 1, 1], [0, 0, 0]]),
        _frozen([[0, 1, 0], [0, 1, 1], [0, 1, 0]]),
        _frozen([[0, 0, 0], [1, 1, 1], [0, 1, 0]]),
        _frozen([[0, 1, 0], [1, 1, 0], [0, 1, 0]]),
    ),
    PieceKind.S: (
        _frozen([[0, 1, 1], [1, 1, 0], [0, 0, 0]]),
        _frozen([[0, 1, 0], [0, 1, 1], [0, 0, 1]]),
        _frozen([[0, 0, 0], [0, 1, 1], [1, 1, 0]]),
        _frozen([[1, 0, 0], [1, 1, 0], [0, 1, 0]]),
    ),
    PieceKind.Z: (
        _frozen([[1, 1, 0], [0, 1, 1], [0, 0, 0]]),
        _frozen([[0, 0, 1], [0, 1, 1], [0, 1, 0]]),
        _frozen([[0, 0, 0], [1, 1, 0], [0, 1, 1]]),
        _frozen([[0, 1, 0], [1, 1, 0], [1, 0, 0]]),
    ),
    PieceKind.J: (
        _frozen([[1, 0, 0], [1, 1, 1], [0, 0, 0]]),
        _frozen([[0, 1, 1], [0, 1, 0], [0, 1, 0]]),
        _frozen([[0, 0, 0], [1, 1, 1], [0, 0, 1]]),
        _frozen([[0, 1, 0], [0, 1, 0], [1, 1, 0]]),
    ),
    PieceKind.L: (
        _frozen([[0, 0, 1], [1, 1, 1], [0, 0, 0]]),
        _frozen([[0, 1, 0], [0, 1, 0], [0, 1, 1]]),
        _frozen([[0, 0, 0], [1, 1, 1], [1, 0, 0]]),
        _frozen([[1, 1, 0], [0, 1, 0], [0, 1, 0]]),
    ),
}


def spawn_y(kind: PieceKind) -> int:
    # The I matrix carries an empty first row, so it enters one row higher.
    return -1 if kind == PieceKind.I else 0


@dataclass(frozen=True)
class Piece:
    """An active tetromino: kind, rotation state and anchor in board coordinates."""

    kind: PieceKind
    rotation: int = 0  # 0..3
    x: int = SPAWN_X
    y: int = 0

    @property
    def shape(self) -> Shape:
        return SHAPES[self.kind][self.rotation]

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    def cells(self) -> List[Tuple[int, int]]:
        """Absolute (x, y) of every filled cell."""
        ys, xs = np.nonzero(self.shape)
        return [(self.x + int(dx), self.y + int(dy)) for dy, dx in zip(ys, xs)]

    def moved(self, dx: int = 0, dy: int = 0) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def at(self, x: int, y: int) -> "Piece":
        return replace(self, x=x, y=y)

    def rotated(self, direction: int = 1) -> "Piece":
        return replace(self, rotation=(self.rotation + direction) % 4)


class PieceBag:
    """7-bag randomizer: every kind once per cycle, in shuffled order."""

    KINDS: Tuple[PieceKind, ...] = tuple(PieceKind)

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random(seed)
        self._bag: List[PieceKind] = []

    def _refill(self) -> None:
        bag = list(self.KINDS)
        for i in range(len(bag) - 1, 0, -1):
            j = self.rng.randint(0, i)
            bag[i], bag[j] = bag[j], bag[i]
        self._bag = bag

    def draw(self) -> PieceKind:
        if not self._bag:
            self._refill()
        return self._bag.pop()

    def __len__(self) -> int:
        return len(self._bag)

    def copy(self) -> "PieceBag":
        """Independent bag that will produce the same future sequence."""
        rng = random.Random()
        rng.setstate(self.rng.getstate())
        clone = PieceBag(rng=rng)
        clone._bag = list(self._bag)
        return clone


def create_piece(kind: Optional[PieceKind] = None, bag: Optional[PieceBag] = None) -> Piece:
    if kind is None:
        if bag is None:
            raise ValueError("create_piece needs either a kind or a bag to draw from")
        kind = bag.draw()
    kind = PieceKind(kind)
    return Piece(kind=kind, rotation=0, x=SPAWN_X, y=spawn_y(kind))


def rotate_piece(piece: Piece, direction: int = 1) -> Piece:
    return piece.rotated(direction)
