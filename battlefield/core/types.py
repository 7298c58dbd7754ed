"""
Core type definitions for the tactical decision engine.

This module contains all fundamental types, enums, and constants used
throughout the system. No logic, just pure data structures.
"""

from __future__ import annotations
from enum import Enum
from typing import Tuple

# ============================================================================
# SPATIAL TYPES
# ============================================================================

# Grid position: (x, y) where:
# - X increases to the RIGHT
# - Y increases DOWNWARD (row index of the map)
# - Origin (0, 0) is at TOP-LEFT
GridPos = Tuple[int, int]


# ============================================================================
# EQUIPMENT
# ============================================================================

class WeaponCategory(Enum):
    """Broad weapon families that matter for tactical reasoning."""
    MELEE = "melee"
    RANGED = "ranged"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# DIRECTIVE VOCABULARY
# ============================================================================

class Objective(str, Enum):
    """High-level goal handed down by the strategy layer."""
    ATTACK = "attack"
    DEFEND = "defend"
    PATROL = "patrol"
    PURSUE = "pursue"
    RETREAT = "retreat"
    SUPPORT = "support"

    def __str__(self) -> str:
        return self.value


class Stance(str, Enum):
    """Behavioral mode that selects the candidate-generation branch."""
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    FLANKING = "flanking"
    SUPPRESSIVE = "suppressive"
    RETREATING = "retreating"

    def __str__(self) -> str:
        return self.value


class EngagementRange(str, Enum):
    """Preferred engagement distance."""
    CLOSE = "close"
    MEDIUM = "medium"
    LONG = "long"

    def __str__(self) -> str:
        return self.value


class Coordination(str, Enum):
    """How a unit coordinates with its allies."""
    INDIVIDUAL = "individual"
    FLANKING = "flanking"
    CONCENTRATED = "concentrated"
    DISPERSED = "dispersed"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# ACTIONS
# ============================================================================

class ActionType(str, Enum):
    """Kinds of tactical action the engine can choose."""
    MOVEMENT = "movement"
    ATTACK = "attack"
    OVERWATCH = "overwatch"
    SPEECH = "speech"
    RELOAD = "reload"
    HEAL = "heal"

    def __str__(self) -> str:
        return self.value


class CommandType(str, Enum):
    """Kinds of command payload understood by the external executor."""
    MOVEMENT = "movement"
    ATTACK = "attack"
    OVERWATCH = "overwatch"
    SPEECH = "speech"

    def __str__(self) -> str:
        return self.value
