from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from blockfall.game.pieces import Piece


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        0: (20, 20, 26),
        1: (0, 240, 240),  # I
        2: (240, 240, 0),  # O
        3: (160, 0, 240),  # T
        4: (0, 240, 0),    # S
        5: (240, 0, 0),    # Z
        6: (0, 0, 240),    # J
        7: (240, 160, 0),  # L
    }
    color = palette.get(abs(v), (200, 200, 200))
    if v < 0:
        # Ghost cells: dimmed version of the piece colour
        return (color[0] // 3, color[1] // 3, color[2] // 3)
    return color


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, side_panel: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.side_panel = side_panel
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, board_shape: Tuple[int, int]) -> Tuple[int, int]:
        h, w = board_shape
        width = self.margin * 3 + (w + self.side_panel) * self.cell_size
        height = self.margin * 2 + h * self.cell_size
        return width, height

    def grid_surface(self, state: np.ndarray, shadow: bool = True) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                v = int(state[y, x])
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, _color_for_value(v), rect)
                if v < 0:
                    pygame.draw.rect(surf, _color_for_value(-v), rect, 1)
                elif v > 0 and shadow:
                    pygame.draw.rect(surf, (255, 255, 255), rect, 1)
        return surf

    def _panel(self, screen: pygame.Surface, board_w: int, next_piece: Optional[Piece], lines: Tuple[str, ...]) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        x0 = self.margin * 2 + board_w * self.cell_size
        y = self.margin
        for text in lines:
            screen.blit(self._font.render(text, True, (230, 230, 230)), (x0, y))
            y += 24
        if next_piece is None:
            return
        y += 12
        shape = next_piece.shape
        for py in range(shape.shape[0]):
            for px in range(shape.shape[1]):
                if shape[py, px]:
                    rect = pygame.Rect(
                        x0 + px * self.cell_size,
                        y + py * self.cell_size,
                        self.cell_size - 1,
                        self.cell_size - 1,
                    )
                    pygame.draw.rect(screen, _color_for_value(int(next_piece.kind)), rect)

    def draw(
        self,
        screen: pygame.Surface,
        state: np.ndarray,
        next_piece: Optional[Piece] = None,
        lines: Tuple[str, ...] = (),
        shadow: bool = True,
    ) -> None:
        screen.fill((10, 10, 14))
        screen.blit(self.grid_surface(state, shadow), (self.margin, self.margin))
        self._panel(screen, state.shape[1], next_piece, lines)
        pygame.display.flip()
