"""
Character snapshot - the read-only view of a combatant.

A Character is owned by the caller and is never mutated by the engine.
It carries:
- Identity, team and position
- Health and maximum health
- Equipped weapons (primary / secondary)
- An optional action-point budget with named cost tables
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from ..core.types import GridPos, WeaponCategory


@dataclass(frozen=True)
class Weapon:
    """An equipped weapon; only its category matters for tactics."""
    name: str
    category: WeaponCategory

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "category": self.category.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Weapon:
        return cls(name=data.get("name", ""), category=WeaponCategory(data["category"]))


@dataclass(frozen=True)
class Equipment:
    """Weapons held in the primary and secondary slots."""
    primary: Optional[Weapon] = None
    secondary: Optional[Weapon] = None

    @property
    def has_ranged(self) -> bool:
        """True if either slot holds a ranged weapon."""
        return any(
            w is not None and w.category == WeaponCategory.RANGED
            for w in (self.primary, self.secondary)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.to_dict() if self.primary else None,
            "secondary": self.secondary.to_dict() if self.secondary else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Equipment:
        data = data or {}
        primary = data.get("primary")
        secondary = data.get("secondary")
        return cls(
            primary=Weapon.from_dict(primary) if primary else None,
            secondary=Weapon.from_dict(secondary) if secondary else None,
        )


@dataclass(frozen=True)
class ActionBudget:
    """
    Per-turn action points.

    Attributes:
        points_left: Points remaining this turn
        general: Costs of general actions (e.g. {"move": 20})
        ranged_combat: Costs of ranged actions (e.g. {"shoot": 30, "overwatch": 40})
        melee_combat: Costs of melee actions (e.g. {"attack": 25})
    """
    points_left: int = 100
    general: Mapping[str, int] = field(default_factory=dict)
    ranged_combat: Mapping[str, int] = field(default_factory=dict)
    melee_combat: Mapping[str, int] = field(default_factory=dict)

    def cost(self, category: str, name: str) -> Optional[int]:
        """Look up a named cost, or None when the table has no such entry."""
        table = getattr(self, category, None) or {}
        value = table.get(name)
        return int(value) if value is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points_left": self.points_left,
            "general": dict(self.general),
            "ranged_combat": dict(self.ranged_combat),
            "melee_combat": dict(self.melee_combat),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ActionBudget:
        return cls(
            points_left=int(data.get("points_left", 100)),
            general=dict(data.get("general") or {}),
            ranged_combat=dict(data.get("ranged_combat") or {}),
            melee_combat=dict(data.get("melee_combat") or {}),
        )


@dataclass(frozen=True)
class Character:
    """
    Snapshot of a combatant as seen by the engine.

    Raises:
        ValueError: If max_health is not positive
    """

    id: str
    position: GridPos
    team: str
    health: int = 100
    max_health: int = 100
    equipment: Equipment = field(default_factory=Equipment)
    actions: Optional[ActionBudget] = None

    def __post_init__(self):
        if self.max_health <= 0:
            raise ValueError(f"Character {self.id!r} must have positive max_health")
        object.__setattr__(self, "position", (int(self.position[0]), int(self.position[1])))

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def health_ratio(self) -> float:
        """Fraction of health remaining in [0, 1]."""
        return max(0.0, min(1.0, self.health / self.max_health))

    @property
    def has_ranged_weapon(self) -> bool:
        return self.equipment.has_ranged

    def moved_to(self, position: GridPos) -> Character:
        """Return a copy standing on another cell."""
        return replace(self, position=position)

    def label(self) -> str:
        """Short label for logs."""
        return f"{self.id}@{self.position[0]},{self.position[1]}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "position": list(self.position),
            "team": self.team,
            "health": self.health,
            "max_health": self.max_health,
            "equipment": self.equipment.to_dict(),
            "actions": self.actions.to_dict() if self.actions else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Character:
        actions = data.get("actions")
        return cls(
            id=str(data["id"]),
            position=tuple(data["position"]),
            team=str(data["team"]),
            health=int(data.get("health", 100)),
            max_health=int(data.get("max_health", 100)),
            equipment=Equipment.from_dict(data.get("equipment")),
            actions=ActionBudget.from_dict(actions) if actions else None,
        )
