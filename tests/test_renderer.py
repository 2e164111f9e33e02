from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame  # noqa: E402

from blockfall.game.core import create_initial_state, render_grid  # noqa: E402
from blockfall.game.pieces import PieceBag  # noqa: E402
from blockfall.visualization.renderer import Renderer, _color_for_value  # noqa: E402


def test_ghost_colour_is_dimmed():
    assert _color_for_value(0) == (20, 20, 26)
    assert _color_for_value(1) == (0, 240, 240)
    assert _color_for_value(-1) == (0, 80, 80)


def test_window_size_leaves_room_for_panel():
    r = Renderer(cell_size=10, margin=5, side_panel=4)
    assert r.window_size((20, 10)) == (5 * 3 + 14 * 10, 5 * 2 + 200)


def test_grid_surface_matches_board():
    state = create_initial_state(bag=PieceBag(0))
    grid = render_grid(state)
    surf = Renderer(cell_size=8).grid_surface(grid)
    assert surf.get_size() == (80, 160)
    piece = state.current
    x, y = next((x, y) for x, y in piece.cells() if y >= 0)
    assert surf.get_at((x * 8 + 3, y * 8 + 3))[:3] == _color_for_value(int(piece.kind))
    pygame.quit()
