"""
PositionEvaluator - scores a cell for cover, exposure and tactical value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING

from battlefield.core.types import GridPos
from battlefield.entities.character import Character

from .config import DEFAULT_CONFIG, TacticalConfig
from .threats import ThreatAssessment, clamp_score

if TYPE_CHECKING:
    from battlefield.world.game_state import GameState


@dataclass(frozen=True)
class PositionEvaluation:
    """
    Quality of one cell for the evaluating character.

    Attributes:
        position: The evaluated cell
        cover_score: Higher is better protected, in [0, 100]
        tactical_value: Closeness to the objective, in [0, 100]
        distance_to_objective: Euclidean distance to the objective, 0 without one
        exposure_risk: Share of threats that can see the cell, in [0, 100]
    """
    position: GridPos
    cover_score: int
    tactical_value: int
    distance_to_objective: float
    exposure_risk: int


class PositionEvaluator:
    """Stateless position scoring."""

    def __init__(self, config: TacticalConfig = DEFAULT_CONFIG):
        self.config = config

    def evaluate_position(
        self,
        position: GridPos,
        character: Character,
        threats: Sequence[ThreatAssessment],
        game_state: "GameState",
        objective: Optional[GridPos] = None,
    ) -> PositionEvaluation:
        cfg = self.config
        grid = game_state.grid

        cover_score = cfg.cover_score_in_cover if grid.is_in_cover(position) else cfg.cover_score_exposed
        watchers = sum(1 for t in threats if self._threat_sees(t, position, character, game_state))
        exposure_risk = min(100, cfg.exposure_per_visible_threat * watchers)

        if objective is not None:
            distance_to_objective = grid.distance(position, objective)
            tactical_value = max(0.0, 100 - cfg.objective_distance_weight * distance_to_objective)
        else:
            distance_to_objective = 0.0
            tactical_value = cfg.neutral_tactical_value

        return PositionEvaluation(
            position=position,
            cover_score=clamp_score(cover_score),
            tactical_value=clamp_score(tactical_value),
            distance_to_objective=distance_to_objective,
            exposure_risk=clamp_score(exposure_risk),
        )

    @staticmethod
    def _threat_sees(
        threat: ThreatAssessment,
        position: GridPos,
        character: Character,
        game_state: "GameState",
    ) -> bool:
        if position == character.position:
            return threat.has_line_of_sight
        # the evaluating character would have left its current cell
        occupied = frozenset(game_state.occupied_cells(exclude=(character.id,)))
        return game_state.grid.has_line_of_sight(threat.position, position, occupied)
