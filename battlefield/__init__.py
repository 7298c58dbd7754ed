"""
Battlefield model consumed by the tactical engine: grid, characters and
game-state snapshots.
"""

from .core import GridPos, WeaponCategory, Command
from .entities import ActionBudget, Character, Equipment, Weapon
from .world import GameState, Grid

__all__ = [
    "GridPos",
    "WeaponCategory",
    "Command",
    "ActionBudget",
    "Character",
    "Equipment",
    "Weapon",
    "GameState",
    "Grid",
]
