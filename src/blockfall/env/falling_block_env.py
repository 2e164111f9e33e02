from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game.core import ActionType, GameAction, GameState, create_initial_state, reduce, render_grid
from blockfall.game.grid import BOARD_HEIGHT, BOARD_WIDTH
from blockfall.game.pieces import Piece, PieceBag, PieceKind
from blockfall.storage.records import GameSettings


# Discrete action index -> primitive game action
ACTIONS: Tuple[ActionType, ...] = (
    ActionType.MOVE_LEFT,
    ActionType.MOVE_RIGHT,
    ActionType.ROTATE,
    ActionType.SOFT_DROP,
    ActionType.HARD_DROP,
)

_COLORS = {
    0: (30, 30, 36),
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}


def _kind_index(piece: Optional[Piece]) -> int:
    return int(piece.kind) if piece is not None else 0


class FallingBlockEnv(gym.Env):
    """Primitive-action environment over the rules engine.

    Observation: board snapshot (locked blocks, falling piece, ghost as -kind),
    current and next kind (0 when absent). Reward: score gained by the step.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        render_mode: Optional[str] = None,
        show_ghost: bool = False,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.settings = settings or GameSettings()
        self.render_mode = render_mode
        self.show_ghost = bool(show_ghost)
        self.max_episode_steps = int(max_episode_steps)

        n_kinds = len(PieceKind)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_kinds, high=n_kinds, shape=(BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8),
                "current": spaces.Discrete(n_kinds + 1),
                "next": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(len(ACTIONS))

        self.state: GameState = create_initial_state(self.settings, bag=PieceBag(0))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "board": render_grid(self.state, show_ghost=self.show_ghost).astype(np.int8),
            "current": _kind_index(self.state.current),
            "next": _kind_index(self.state.next),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": self.get_action_mask(),
            "score": self.state.score,
            "level": self.state.level,
            "lines_cleared": self.state.lines_cleared,
        }

    def get_action_mask(self) -> np.ndarray:
        """True for actions that would change the state."""
        mask = np.zeros((len(ACTIONS),), dtype=np.bool_)
        for i, kind in enumerate(ACTIONS):
            mask[i] = reduce(self.state, GameAction(kind)) is not self.state
        return mask

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        bag_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.state = create_initial_state(self.settings, bag=PieceBag(bag_seed))
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        before = self.state.score
        self.state = reduce(self.state, GameAction(ACTIONS[int(action)]))
        self._steps += 1

        reward = float(self.state.score - before)
        terminated = bool(self.state.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = render_grid(self.state, show_ghost=True)
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = int(grid[y, x])
                color = _COLORS[abs(v)]
                if v < 0:
                    color = tuple(c // 3 for c in color)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img
