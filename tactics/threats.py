"""
ThreatAnalyzer - ranks visible hostiles by how dangerous they are.

The analyzer is stateless: it reads the evaluating character, the characters
it can see, the game-state snapshot and the directive, and returns a fresh
list of ThreatAssessment records sorted by threat level (highest first,
ties kept in encounter order).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING

from battlefield.entities.character import Character

from .config import DEFAULT_CONFIG, TacticalConfig

if TYPE_CHECKING:
    from battlefield.world.game_state import GameState
    from .directive import TacticalDirective


def clamp_score(value: float) -> int:
    """Clamp a score into [0, 100]."""
    return int(max(0, min(100, round(value))))


@dataclass(frozen=True)
class ThreatAssessment:
    """
    Scored summary of one hostile character.

    Attributes:
        character: The hostile character snapshot
        threat_level: Danger score in [0, 100]
        distance: Euclidean distance from the evaluating character
        has_line_of_sight: Whether the straight line between both is clear
        is_in_cover: Whether the hostile stands next to blocking terrain
        weapon_effectiveness: How well the evaluating character can hit it, in [0, 100]
    """
    character: Character
    threat_level: int
    distance: float
    has_line_of_sight: bool
    is_in_cover: bool
    weapon_effectiveness: int

    @property
    def id(self) -> str:
        return self.character.id

    @property
    def position(self):
        return self.character.position


def nearest_threat(threats: Sequence[ThreatAssessment]) -> Optional[ThreatAssessment]:
    """Closest threat; ties resolve to the higher-ranked entry."""
    nearest: Optional[ThreatAssessment] = None
    for threat in threats:
        if nearest is None or threat.distance < nearest.distance:
            nearest = threat
    return nearest


class ThreatAnalyzer:
    """Stateless threat scoring."""

    def __init__(self, config: TacticalConfig = DEFAULT_CONFIG):
        self.config = config

    def assess_threats(
        self,
        character: Character,
        visible_characters: Iterable[Character],
        game_state: "GameState",
        directive: Optional["TacticalDirective"] = None,
    ) -> List[ThreatAssessment]:
        """
        Assess every visible hostile.

        Allies and characters with health <= 0 are skipped.
        """
        priority_targets = set(directive.priority_targets) if directive else set()
        occupied = frozenset(game_state.occupied_cells())
        grid = game_state.grid
        threats: List[ThreatAssessment] = []

        for other in visible_characters:
            if other.id == character.id or not other.alive:
                continue
            if game_state.are_allied(character, other):
                continue

            distance = grid.distance(character.position, other.position)
            has_los = grid.has_line_of_sight(character.position, other.position, occupied)

            threat_level = (
                self.config.base_threat
                + round(self.config.health_threat_weight * other.health_ratio)
                + self._distance_bonus(distance)
            )
            if other.has_ranged_weapon:
                threat_level += self.config.ranged_threat_bonus
            if not has_los:
                threat_level -= self.config.no_los_threat_penalty
            if other.id in priority_targets:
                threat_level += self.config.priority_target_bonus

            threats.append(
                ThreatAssessment(
                    character=other,
                    threat_level=clamp_score(threat_level),
                    distance=distance,
                    has_line_of_sight=has_los,
                    is_in_cover=grid.is_in_cover(other.position),
                    weapon_effectiveness=self.weapon_effectiveness(character, distance),
                )
            )

        # sorted() is stable, so equal threat levels keep encounter order
        return sorted(threats, key=lambda t: t.threat_level, reverse=True)

    def weapon_effectiveness(self, attacker: Character, distance: float) -> int:
        """How effective the attacker's weapons are at the given distance."""
        if distance <= self.config.melee_reach:
            return clamp_score(self.config.melee_effectiveness)
        if attacker.has_ranged_weapon:
            for max_distance, value in self.config.ranged_effectiveness_bands:
                if distance <= max_distance:
                    return clamp_score(value)
        return clamp_score(self.config.out_of_range_effectiveness)

    def _distance_bonus(self, distance: float) -> int:
        for max_distance, bonus in self.config.threat_distance_bands:
            if distance <= max_distance:
                return bonus
        return 0
