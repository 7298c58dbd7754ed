"""
ActionGenerator - builds the candidate actions for one evaluation.

Decision layout:
- no threats          -> a single patrol movement (objective anchor, map-edge
                         scouting when pursuing, random patrol otherwise)
- threats             -> the generator registered for the directive's stance
                         (defensive when the stance is absent or unknown)
- health override     -> retreat candidates appended when health is at or
                         below the directive's retreat threshold
- ally coordination   -> one speech candidate when no threat is close and a
                         living ally stands nearby

Candidates carry their own priority; ranking happens in the executor.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

from battlefield.core.commands import AREA_TARGET, Command
from battlefield.core.types import ActionType, GridPos, Objective, Stance
from battlefield.entities.character import Character

from .actions import TacticalAction
from .config import DEFAULT_CONFIG, TacticalConfig
from .positions import PositionEvaluation, PositionEvaluator
from .spatial import (
    find_cover_point,
    find_firing_position,
    find_flank_point,
    find_overwatch_point,
    find_patrol_point,
    find_retreat_point,
    find_scout_point,
    find_search_point,
)
from .threats import ThreatAssessment, nearest_threat

if TYPE_CHECKING:
    from battlefield.world.game_state import GameState
    from .context import TurnHistory
    from .directive import TacticalDirective


@dataclass(frozen=True)
class Situation:
    """Inputs of one generation pass, bundled for the per-stance generators."""
    character: Character
    threats: Sequence[ThreatAssessment]
    position_eval: PositionEvaluation
    directive: "TacticalDirective"
    game_state: "GameState"
    history: "TurnHistory"

    @property
    def nearest(self) -> Optional[ThreatAssessment]:
        return nearest_threat(self.threats)

    @property
    def stance(self) -> Optional[Stance]:
        return self.directive.tactics.stance


StanceGenerator = Callable[["ActionGenerator", Situation], List[TacticalAction]]


class ActionGenerator:
    """Stance-conditioned candidate generation."""

    def __init__(self, config: TacticalConfig = DEFAULT_CONFIG, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng or random.Random()
        self.evaluator = PositionEvaluator(config)

    def generate_actions(
        self,
        character: Character,
        threats: Sequence[ThreatAssessment],
        position_eval: PositionEvaluation,
        directive: "TacticalDirective",
        game_state: "GameState",
        turn_history: "TurnHistory",
    ) -> List[TacticalAction]:
        """Produce every candidate action for this evaluation."""
        situation = Situation(character, threats, position_eval, directive, game_state, turn_history)
        actions: List[TacticalAction] = []

        if threats:
            generator = STANCE_GENERATORS.get(situation.stance, ActionGenerator._defensive_actions)
            actions.extend(generator(self, situation))
        else:
            actions.append(self._patrol_action(situation))

        # Health override
        if (
            character.health_ratio <= directive.tactics.retreat_threshold
            and situation.stance != Stance.RETREATING
        ):
            actions.extend(self._retreat_actions(situation))

        speech = self._coordination_action(situation)
        if speech is not None:
            actions.append(speech)

        return actions

    # ------------------------------------------------------------------
    # Stance generators
    # ------------------------------------------------------------------
    def _aggressive_actions(self, s: Situation) -> List[TacticalAction]:
        cfg = self.config
        threat = s.nearest
        distance = threat.distance
        actions: List[TacticalAction] = []

        if distance <= cfg.melee_reach:
            actions.append(self._attack(s, threat, cfg.melee_attack_priority,
                                        "Enemy adjacent - melee attack", Stance.AGGRESSIVE))

        if threat.has_line_of_sight:
            priority = cfg.ranged_attack_priority
            if s.character.has_ranged_weapon:
                priority += cfg.ranged_weapon_bonus
            if distance > cfg.long_range_distance:
                priority -= cfg.long_range_penalty
            actions.append(self._attack(s, threat, priority,
                                        f"Attacking {threat.id} at distance {distance:.1f}", Stance.AGGRESSIVE))
        elif distance <= cfg.seek_los_max_distance:
            actions.append(self._seek_line_of_sight(s, threat, cfg.seek_los_priority, Stance.AGGRESSIVE))

        if distance > cfg.close_distance_threshold:
            priority, reasoning = cfg.close_distance_priority, "Closing distance to target"
        else:
            priority, reasoning = cfg.maneuver_priority, "Maneuvering for better position"
        actions.append(self._move(s, threat.position, priority, reasoning, Stance.AGGRESSIVE, target=threat.id))
        return actions

    def _defensive_actions(self, s: Situation) -> List[TacticalAction]:
        cfg = self.config
        character = s.character
        actions: List[TacticalAction] = []

        if s.position_eval.exposure_risk > cfg.exposure_cover_trigger:
            cover = find_cover_point(s.game_state, character, self._evaluator_for(s), cfg)
            if cover is not None:
                actions.append(self._move(s, cover, cfg.take_cover_priority, "Moving to cover", Stance.DEFENSIVE))

        threat = s.nearest
        if threat is not None:
            if threat.has_line_of_sight:
                priority = (
                    cfg.defensive_near_attack_priority
                    if threat.distance <= cfg.defensive_near_distance
                    else cfg.defensive_far_attack_priority
                )
                actions.append(self._attack(
                    s, threat, priority,
                    f"Defending against {threat.id} at distance {threat.distance:.1f}", Stance.DEFENSIVE,
                ))
            else:
                actions.append(self._seek_line_of_sight(s, threat, cfg.defensive_seek_los_priority, Stance.DEFENSIVE))

                if threat.distance > cfg.engagement_range_distance:
                    approach = find_search_point(s.game_state, character, threat.position, self.rng, cfg)
                    actions.append(self._move(s, approach, cfg.engagement_range_priority,
                                              "Moving to engagement range", Stance.DEFENSIVE, target=threat.id))

            points_left = character.actions.points_left if character.actions else 0
            if not s.history.has_taken(character.id, ActionType.ATTACK) and points_left >= cfg.overwatch_min_points:
                actions.append(TacticalAction(
                    type=ActionType.OVERWATCH,
                    priority=cfg.defensive_overwatch_priority,
                    command=Command.overwatch(character.id, threat.id),
                    reasoning="Setting defensive overwatch",
                    stance=Stance.DEFENSIVE,
                ))

        return actions

    def _flanking_actions(self, s: Situation) -> List[TacticalAction]:
        cfg = self.config
        threat = s.nearest
        flank = find_flank_point(s.game_state, s.character, threat.position, cfg)
        distance_to_flank = s.game_state.grid.distance(s.character.position, flank)
        actions: List[TacticalAction] = []

        if distance_to_flank > cfg.flank_arrival_distance:
            actions.append(self._move(s, flank, cfg.flank_move_priority,
                                      "Moving to flanking position", Stance.FLANKING, target=threat.id))
        elif threat.has_line_of_sight:
            actions.append(self._attack(s, threat, cfg.flank_attack_priority,
                                        "Attacking from flanking position", Stance.FLANKING))
        return actions

    def _suppressive_actions(self, s: Situation) -> List[TacticalAction]:
        cfg = self.config
        character = s.character
        actions: List[TacticalAction] = []

        vantage = find_overwatch_point(s.game_state, character, self._evaluator_for(s), cfg)
        if s.game_state.grid.distance(character.position, vantage) > 1:
            actions.append(self._move(s, vantage, cfg.vantage_move_priority,
                                      "Moving to overwatch position", Stance.SUPPRESSIVE))

        threat = s.nearest
        # a threat out of sight is suppressed by watching its area
        target = threat.id if threat is not None and threat.has_line_of_sight else AREA_TARGET
        actions.append(TacticalAction(
            type=ActionType.OVERWATCH,
            priority=cfg.suppressive_overwatch_priority,
            command=Command.overwatch(character.id, target, mode="hold"),
            reasoning="Providing suppressive overwatch",
            stance=Stance.SUPPRESSIVE,
        ))
        return actions

    def _retreat_actions(self, s: Situation) -> List[TacticalAction]:
        cfg = self.config
        character = s.character
        health_pct = round(character.health_ratio * 100)
        threat_positions = [t.position for t in s.threats]
        retreat = find_retreat_point(s.game_state, character, threat_positions, self.rng, cfg)

        if threat_positions:
            reasoning = f"Retreating (health: {health_pct}%)"
        else:
            reasoning = f"Retreating (health: {health_pct}%) - no threats in sight, patrolling to regroup"
        actions = [self._move(s, retreat, cfg.retreat_priority, reasoning, Stance.RETREATING)]

        threat = s.nearest
        if threat is not None and threat.distance <= cfg.fighting_retreat_distance:
            actions.append(self._attack(s, threat, cfg.fighting_retreat_priority, "Fighting retreat", Stance.RETREATING))
        return actions

    # ------------------------------------------------------------------
    # Shared candidates
    # ------------------------------------------------------------------
    def _patrol_action(self, s: Situation) -> TacticalAction:
        cfg = self.config
        anchor = s.directive.position
        if anchor is not None:
            destination = s.game_state.grid.clamp(*anchor)
            return self._move(s, destination, cfg.objective_move_priority,
                              "Patrolling toward objective", s.stance)
        if s.directive.objective == Objective.PURSUE:
            destination = find_scout_point(s.game_state, s.character, self.rng, cfg)
            return self._move(s, destination, cfg.patrol_priority,
                              "Scouting for contacts - patrolling map edge", s.stance)
        destination = find_patrol_point(s.game_state, s.character, self.rng, cfg)
        return self._move(s, destination, cfg.patrol_priority, "Patrolling area", s.stance)

    def _coordination_action(self, s: Situation) -> Optional[TacticalAction]:
        cfg = self.config
        threat = s.nearest
        if threat is not None and threat.distance <= cfg.speech_threat_distance:
            return None

        ally = self._nearest_ally(s)
        if ally is None:
            return None
        if s.game_state.grid.distance(s.character.position, ally.position) > cfg.speech_ally_distance:
            return None

        return TacticalAction(
            type=ActionType.SPEECH,
            priority=cfg.speech_priority,
            command=Command.speech(s.character.id, cfg.speech_content, list(cfg.speech_answers)),
            reasoning=f"Coordinating with ally {ally.id}",
        )

    def _seek_line_of_sight(
        self, s: Situation, threat: ThreatAssessment, priority: int, stance: Stance
    ) -> TacticalAction:
        firing = find_firing_position(s.game_state, s.character, threat.position, self.config)
        reasoning = f"Moving to get clear shot at {threat.id}"
        blocker = s.game_state.grid.first_blocker(
            s.character.position, threat.position, frozenset(s.game_state.occupied_cells())
        )
        if blocker is not None:
            reasoning += f" (line blocked by {blocker[0]})"
        return self._move(s, firing or threat.position, priority, reasoning, stance, target=threat.id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _evaluator_for(self, s: Situation) -> Callable[[GridPos], PositionEvaluation]:
        def evaluate(pos: GridPos) -> PositionEvaluation:
            return self.evaluator.evaluate_position(pos, s.character, s.threats, s.game_state)
        return evaluate

    @staticmethod
    def _nearest_ally(s: Situation) -> Optional[Character]:
        grid = s.game_state.grid
        allies = [
            other for other in s.game_state.living_characters()
            if other.id != s.character.id and s.game_state.are_allied(s.character, other)
        ]
        if not allies:
            return None
        return min(allies, key=lambda a: grid.distance(s.character.position, a.position))

    @staticmethod
    def _attack(
        s: Situation, threat: ThreatAssessment, priority: int, reasoning: str, stance: Optional[Stance]
    ) -> TacticalAction:
        return TacticalAction(
            type=ActionType.ATTACK,
            priority=priority,
            command=Command.attack(s.character.id, threat.id),
            reasoning=reasoning,
            stance=stance,
        )

    @staticmethod
    def _move(
        s: Situation,
        location: GridPos,
        priority: int,
        reasoning: str,
        stance: Optional[Stance],
        target: Optional[str] = None,
    ) -> TacticalAction:
        return TacticalAction(
            type=ActionType.MOVEMENT,
            priority=priority,
            command=Command.move(s.character.id, location, target),
            reasoning=reasoning,
            stance=stance,
        )


STANCE_GENERATORS: Dict[Optional[Stance], StanceGenerator] = {
    Stance.AGGRESSIVE: ActionGenerator._aggressive_actions,
    Stance.DEFENSIVE: ActionGenerator._defensive_actions,
    Stance.FLANKING: ActionGenerator._flanking_actions,
    Stance.SUPPRESSIVE: ActionGenerator._suppressive_actions,
    Stance.RETREATING: ActionGenerator._retreat_actions,
}

_unhandled = set(Stance) - set(STANCE_GENERATORS)
if _unhandled:
    raise RuntimeError(f"Stances without a generator: {sorted(s.value for s in _unhandled)}")
