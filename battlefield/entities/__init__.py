"""
Character snapshot types.
"""

from .character import ActionBudget, Character, Equipment, Weapon

__all__ = [
    "ActionBudget",
    "Character",
    "Equipment",
    "Weapon",
]
