"""
World state for the tactical decision engine.

This module provides:
- Grid: Spatial logic and geometry
- GameState: Read-only battlefield snapshot
"""

from .grid import Grid
from .game_state import GameState

__all__ = [
    "Grid",
    "GameState",
]
