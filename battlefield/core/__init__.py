"""
Core types and constants for the tactical decision engine.
"""

# Instead of from battlefield.core.types import GridPos, you can do: from battlefield.core import GridPos
from .types import (
    GridPos,
    WeaponCategory,
    Objective,
    Stance,
    EngagementRange,
    Coordination,
    ActionType,
    CommandType,
)
from .commands import Command


__all__ = [
    "GridPos",
    "WeaponCategory",
    "Objective",
    "Stance",
    "EngagementRange",
    "Coordination",
    "ActionType",
    "CommandType",
    "Command",
]
