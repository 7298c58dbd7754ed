"""
Tactical executor - one decision per character per call.

Pipeline for each evaluation:
    visible characters -> ThreatAnalyzer -> PositionEvaluator
    -> ActionGenerator -> scoring pass -> best action

The module-level functions take the session's TacticalContext explicitly.
TacticalExecutor is a thin object bound to one context for callers that
prefer to hold a single handle.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union, TYPE_CHECKING

from battlefield.core.commands import Command
from battlefield.core.types import ActionType, Objective
from battlefield.entities.character import Character
from infra.logger import get_logger

from .actions import TacticalAction
from .config import DEFAULT_CONFIG, TacticalConfig
from .context import TacticalContext, TurnHistory
from .directive import TacticalDirective, default_directive, parse_directive
from .generator import ActionGenerator
from .positions import PositionEvaluator
from .spatial import find_patrol_point
from .threats import ThreatAnalyzer, ThreatAssessment, clamp_score, nearest_threat

if TYPE_CHECKING:
    from battlefield.world.game_state import GameState

log = get_logger(__name__)


# ----------------------------------------------------------------------
# Scoring
# ----------------------------------------------------------------------
def estimate_action_cost(
    action: TacticalAction,
    character: Character,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> int:
    """Action-point cost of an action, read from the budget tables with defaults."""
    budget = character.actions
    action_type = action.type

    if action_type == ActionType.MOVEMENT:
        cost = budget.cost("general", "move") if budget else None
        return cost if cost is not None else config.default_move_cost
    if action_type == ActionType.ATTACK:
        cost = budget.cost("ranged_combat", "shoot") if budget else None
        return cost if cost is not None else config.default_shoot_cost
    if action_type == ActionType.OVERWATCH:
        cost = budget.cost("ranged_combat", "overwatch") if budget else None
        return cost if cost is not None else config.default_overwatch_cost
    if action_type == ActionType.SPEECH:
        return config.speech_cost
    if action_type == ActionType.RELOAD:
        return config.reload_cost
    if action_type == ActionType.HEAL:
        return config.heal_cost
    return config.fallback_cost


_OBJECTIVE_SYNERGY = {
    (Objective.ATTACK, ActionType.ATTACK): "attack_objective_bonus",
    (Objective.DEFEND, ActionType.OVERWATCH): "defend_objective_bonus",
    (Objective.RETREAT, ActionType.MOVEMENT): "retreat_objective_bonus",
}


def score_action(
    action: TacticalAction,
    character: Character,
    threats: Sequence[ThreatAssessment],
    directive: TacticalDirective,
    last_action: Optional[ActionType] = None,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> int:
    """
    Adjust a candidate's base priority.

    Adjustments:
        - unaffordable: -unaffordable_penalty
        - affordable while points are low: +low_points_bonus
        - same type as the character's last action: -repeat_penalty
        - objective synergy (attack/attack, defend/overwatch, retreat/movement)
        - proximity synergy on the nearest threat

    Returns:
        The adjusted priority clamped to [0, 100]
    """
    score = action.priority
    points_left = character.actions.points_left if character.actions else config.default_points_left
    cost = estimate_action_cost(action, character, config)

    if cost > points_left:
        score -= config.unaffordable_penalty
    elif points_left < config.low_points_threshold:
        score += config.low_points_bonus

    if last_action is not None and action.type == last_action:
        score -= config.repeat_penalty

    bonus = _OBJECTIVE_SYNERGY.get((directive.objective, action.type))
    if bonus:
        score += getattr(config, bonus)

    nearest = nearest_threat(threats)
    if nearest is not None:
        if action.type == ActionType.ATTACK and nearest.distance <= config.close_threat_distance:
            score += config.close_threat_attack_bonus
        elif action.type == ActionType.MOVEMENT and nearest.distance > config.far_threat_distance:
            score += config.far_threat_move_bonus

    return clamp_score(score)


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------
def default_action(
    character: Character,
    game_state: "GameState",
    context: TacticalContext,
) -> TacticalAction:
    """Bounded random patrol used when no candidate survives."""
    destination = find_patrol_point(game_state, character, context.rng, context.config)
    return TacticalAction(
        type=ActionType.MOVEMENT,
        priority=context.config.default_priority,
        command=Command.move(character.id, destination),
        reasoning="No threats detected - patrolling",
    )


def rank_actions(
    character: Character,
    game_state: "GameState",
    visible_characters: Iterable[Character],
    context: TacticalContext,
) -> List[TacticalAction]:
    """
    Score every candidate for the character without recording anything.

    Returns:
        Candidates with adjusted priorities, best first (stable on ties)
    """
    config = context.config
    directive = context.directive or default_directive()
    living = [c for c in visible_characters if c.alive]

    threats = ThreatAnalyzer(config).assess_threats(character, living, game_state, directive)
    position_eval = PositionEvaluator(config).evaluate_position(
        character.position, character, threats, game_state, directive.position
    )
    candidates = ActionGenerator(config, context.rng).generate_actions(
        character, threats, position_eval, directive, game_state, context.history
    )

    last_action = context.history.last_action(character.id)
    scored = [
        action.with_priority(score_action(action, character, threats, directive, last_action, config))
        for action in candidates
    ]
    return sorted(scored, key=lambda a: a.priority, reverse=True)


def evaluate_situation(
    character: Character,
    game_state: "GameState",
    visible_characters: Iterable[Character],
    context: TacticalContext,
) -> TacticalAction:
    """
    Decide the single best action for a character this turn.

    Never raises: an unexpected internal error is logged and the default
    patrol action is returned instead. The chosen type is recorded in the
    context's turn history.
    """
    try:
        ranked = rank_actions(character, game_state, visible_characters, context)
        chosen = ranked[0] if ranked else default_action(character, game_state, context)
    except Exception:
        log.exception("Tactical evaluation failed for %s, falling back to patrol", character.id)
        chosen = _safe_default(character, game_state, context)

    context.history.record(character.id, chosen.type)
    log.debug("%s chose %s", character.id, chosen)
    return chosen


def _safe_default(character: Character, game_state: "GameState", context: TacticalContext) -> TacticalAction:
    try:
        return default_action(character, game_state, context)
    except Exception:
        log.exception("Patrol fallback failed for %s, holding position", character.id)
        return TacticalAction(
            type=ActionType.MOVEMENT,
            priority=context.config.default_priority,
            command=Command.move(character.id, character.position),
            reasoning="No threats detected - patrolling",
        )


# ----------------------------------------------------------------------
# Bound executor
# ----------------------------------------------------------------------
class TacticalExecutor:
    """
    Decision engine bound to one session context.

    Usage:
        executor = TacticalExecutor(seed=7)
        executor.set_directive({"objective": "attack", "tactics": {"stance": "aggressive"}})
        for turn in ...:
            executor.clear_turn_actions()
            for character in ai_characters:
                action = executor.evaluate_situation(character, state, visible[character.id])
    """

    def __init__(
        self,
        context: Optional[TacticalContext] = None,
        *,
        seed: Optional[int] = None,
        config: Optional[TacticalConfig] = None,
    ):
        self.context = context or TacticalContext.create(seed=seed, config=config)

    @property
    def directive(self) -> TacticalDirective:
        """Standing directive, or the default one when none is set."""
        return self.context.directive or default_directive()

    @property
    def history(self) -> TurnHistory:
        return self.context.history

    def set_directive(self, directive: Union[TacticalDirective, Mapping[str, Any]]) -> TacticalDirective:
        """
        Replace the standing directive.

        Raises:
            InvalidDirectiveError: If a mapping fails validation
        """
        parsed = parse_directive(directive)
        self.context.directive = parsed
        log.info(
            "Directive set: objective=%s stance=%s targets=%s",
            parsed.objective.value,
            parsed.stance.value if parsed.stance else None,
            parsed.priority_targets,
        )
        return parsed

    def clear_turn_actions(self) -> None:
        """Reset the turn history; call once at every turn boundary."""
        self.context.history.clear()
        log.info("Turn actions cleared")

    def evaluate_situation(
        self,
        character: Character,
        game_state: "GameState",
        visible_characters: Iterable[Character],
    ) -> TacticalAction:
        return evaluate_situation(character, game_state, visible_characters, self.context)

    def rank_actions(
        self,
        character: Character,
        game_state: "GameState",
        visible_characters: Iterable[Character],
    ) -> List[TacticalAction]:
        return rank_actions(character, game_state, visible_characters, self.context)

    def score_action(
        self,
        action: TacticalAction,
        character: Character,
        threats: Sequence[ThreatAssessment],
    ) -> int:
        """Score one candidate against the standing directive and history."""
        return score_action(
            action,
            character,
            threats,
            self.directive,
            self.context.history.last_action(character.id),
            self.context.config,
        )
