"""Heuristic placement AI."""

from .planner import AIMove, evaluate_state, execute_move, get_best_move

__all__ = ["AIMove", "evaluate_state", "execute_move", "get_best_move"]
