"""Blockfall: falling-block puzzle rules engine with a heuristic autoplayer."""

__version__ = "0.1.0"
