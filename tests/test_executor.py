import logging

import pytest

from battlefield.core.commands import Command
from battlefield.core.types import ActionType, Objective
from tactics import (
    InvalidDirectiveError,
    TacticalAction,
    TacticalContext,
    TacticalExecutor,
    ThreatAnalyzer,
    evaluate_situation,
    parse_directive,
    score_action,
)
from tactics.executor import estimate_action_cost
from tactics.generator import ActionGenerator


def _attack(priority=80):
    return TacticalAction(ActionType.ATTACK, priority, Command.attack("me", "e1"), "test attack")


def _move(priority=60):
    return TacticalAction(ActionType.MOVEMENT, priority, Command.move("me", (1, 1)), "test move")


# ----------------------------------------------------------------------
# Decision properties
# ----------------------------------------------------------------------
@pytest.mark.parametrize("stance", ["aggressive", "defensive", "flanking", "suppressive", "retreating", None])
def test_evaluation_returns_one_bounded_action(make_character, make_state, stance):
    me = make_character("me", (10, 10), health=25, points=35)
    enemies = [
        make_character("e1", (12, 11), team="enemy"),
        make_character("e2", (25, 30), team="enemy", ranged=False),
    ]
    buddy = make_character("buddy", (9, 10))
    state = make_state(me, buddy, *enemies, blocked=[(11, 20), (20, 25)])
    executor = TacticalExecutor(seed=11)
    executor.set_directive({"objective": "attack", "tactics": {"stance": stance}})

    action = executor.evaluate_situation(me, state, [buddy, *enemies])

    assert isinstance(action, TacticalAction)
    assert 0 <= action.priority <= 100


def test_no_visible_characters_means_patrol(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)

    for stance in ("aggressive", "defensive", "flanking", "suppressive", "retreating"):
        executor = TacticalExecutor(seed=1)
        executor.set_directive({"objective": "attack", "tactics": {"stance": stance}})
        action = executor.evaluate_situation(me, state, [])
        assert action.type == ActionType.MOVEMENT
        assert "patrolling" in action.reasoning.lower()


def test_aggressive_adjacent_enemy_chosen_for_attack(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (11, 11), team="enemy")
    state = make_state(me, enemy)
    executor = TacticalExecutor(seed=1)
    executor.set_directive({"objective": "attack", "tactics": {"stance": "aggressive"}})

    action = executor.evaluate_situation(me, state, [enemy])

    assert action.type == ActionType.ATTACK
    assert action.command.target == "e1"


def test_defensive_hidden_far_enemy_means_movement(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (30, 30), team="enemy")
    state = make_state(me, enemy, blocked=[(20, 20)])
    executor = TacticalExecutor(seed=1)
    executor.set_directive({"objective": "defend", "tactics": {"stance": "defensive"}})

    action = executor.evaluate_situation(me, state, [enemy])

    assert action.type == ActionType.MOVEMENT
    assert "clear shot" in action.reasoning or "engagement range" in action.reasoning


def test_retreat_moves_away_from_threat_centroid(make_character, make_state):
    me = make_character("me", (10, 10))
    enemies = [
        make_character("e1", (18, 20), team="enemy"),
        make_character("e2", (22, 20), team="enemy"),
        make_character("e3", (20, 18), team="enemy"),
        make_character("e4", (20, 22), team="enemy"),
    ]
    state = make_state(me, *enemies)
    executor = TacticalExecutor(seed=1)
    executor.set_directive({"objective": "retreat", "tactics": {"stance": "retreating"}})

    action = executor.evaluate_situation(me, state, enemies)
    destination = action.command.location

    assert action.type == ActionType.MOVEMENT
    assert state.grid.in_bounds(destination)
    assert state.grid.distance(destination, (20, 20)) > state.grid.distance(me.position, (20, 20))


def test_low_health_retreat_is_scored(make_character, make_state):
    me = make_character("me", (10, 10), health=20)
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, enemy)
    executor = TacticalExecutor(seed=1)
    executor.set_directive(
        {"objective": "attack", "tactics": {"stance": "aggressive", "retreat_threshold": 0.3}}
    )

    ranked = executor.rank_actions(me, state, [enemy])

    assert any(a.reasoning.startswith("Retreating") for a in ranked)
    assert [a.priority for a in ranked] == sorted((a.priority for a in ranked), reverse=True)


def test_turn_reset_removes_repetition_penalty(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)
    executor = TacticalExecutor(seed=3)

    first = executor.evaluate_situation(me, state, [])
    repeated = executor.evaluate_situation(me, state, [])
    executor.clear_turn_actions()
    fresh = executor.evaluate_situation(me, state, [])

    assert first.priority == 40
    assert repeated.priority == 30
    assert fresh.priority == first.priority
    assert executor.history.turn_actions("me") == [ActionType.MOVEMENT]


def test_chosen_action_is_recorded(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (11, 10), team="enemy")
    state = make_state(me, enemy)
    context = TacticalContext.create(seed=2, directive=parse_directive({"objective": "attack",
                                                                         "tactics": {"stance": "aggressive"}}))

    action = evaluate_situation(me, state, [enemy], context)

    assert context.history.last_action("me") == action.type
    assert context.history.turn_actions("me") == [action.type]


def test_dead_visible_characters_are_ignored(make_character, make_state):
    me = make_character("me", (10, 10))
    corpse = make_character("e1", (11, 10), team="enemy", health=0)
    state = make_state(me, corpse)

    action = TacticalExecutor(seed=1).evaluate_situation(me, state, [corpse])
    assert action.type == ActionType.MOVEMENT


def test_same_seed_same_decisions(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)

    a = [TacticalExecutor(seed=5).evaluate_situation(me, state, []).to_dict() for _ in range(3)]
    b = [TacticalExecutor(seed=5).evaluate_situation(me, state, []).to_dict() for _ in range(3)]
    assert a == b


# ----------------------------------------------------------------------
# Degraded paths
# ----------------------------------------------------------------------
def test_internal_error_degrades_to_default_patrol(make_character, make_state, monkeypatch, caplog):
    def explode(self, *args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(ActionGenerator, "generate_actions", explode)
    me = make_character("me", (10, 10))
    state = make_state(me)
    executor = TacticalExecutor(seed=1)

    with caplog.at_level(logging.ERROR, logger="tactics.executor"):
        action = executor.evaluate_situation(me, state, [])

    assert action.type == ActionType.MOVEMENT
    assert action.priority == 10
    assert action.reasoning == "No threats detected - patrolling"
    assert "Tactical evaluation failed" in caplog.text
    assert executor.history.last_action("me") == ActionType.MOVEMENT


def test_empty_candidates_use_default_patrol(make_character, make_state, monkeypatch):
    monkeypatch.setattr(ActionGenerator, "generate_actions", lambda self, *a, **k: [])
    me = make_character("me", (10, 10))
    state = make_state(me)

    action = TacticalExecutor(seed=1).evaluate_situation(me, state, [])
    assert action.priority == 10
    assert action.command.location != me.position


def test_decisions_logged_at_debug(make_character, make_state, caplog):
    me = make_character("me", (10, 10))
    state = make_state(me)

    with caplog.at_level(logging.DEBUG, logger="tactics.executor"):
        TacticalExecutor(seed=1).evaluate_situation(me, state, [])

    assert "me chose movement" in caplog.text


# ----------------------------------------------------------------------
# Directive handling
# ----------------------------------------------------------------------
def test_default_directive_until_set():
    executor = TacticalExecutor()
    assert executor.directive.objective == Objective.DEFEND
    assert executor.context.directive is None


def test_invalid_directive_rejected_at_the_boundary():
    executor = TacticalExecutor()
    with pytest.raises(InvalidDirectiveError):
        executor.set_directive({"objective": "conquer"})
    assert executor.context.directive is None


def test_directive_persists_until_replaced():
    executor = TacticalExecutor()
    executor.set_directive({"objective": "attack", "tactics": {"stance": "flanking"}})
    executor.clear_turn_actions()
    assert executor.directive.stance.value == "flanking"

    executor.set_directive({"objective": "support"})
    assert executor.directive.stance is None


# ----------------------------------------------------------------------
# Scoring
# ----------------------------------------------------------------------
def test_unaffordable_action_loses_fifty(make_character):
    directive = parse_directive({"objective": "patrol"})
    rich = make_character("me", (0, 0), points=100)
    poor = make_character("me", (0, 0), points=20)

    affordable = score_action(_attack(), rich, [], directive)
    unaffordable = score_action(_attack(), poor, [], directive)

    assert affordable == 80
    assert affordable - unaffordable >= 50


def test_low_points_bonus_when_affordable(make_character):
    directive = parse_directive({"objective": "patrol"})
    me = make_character("me", (0, 0), points=35)
    assert score_action(_move(), me, [], directive) == 70


def test_repetition_and_objective_synergy(make_character):
    me = make_character("me", (0, 0))

    attack_directive = parse_directive({"objective": "attack"})
    assert score_action(_attack(), me, [], attack_directive) == 95
    assert score_action(_attack(), me, [], attack_directive, last_action=ActionType.ATTACK) == 85

    retreat_directive = parse_directive({"objective": "retreat"})
    assert score_action(_move(), me, [], retreat_directive) == 80

    defend_directive = parse_directive({"objective": "defend"})
    overwatch = TacticalAction(ActionType.OVERWATCH, 50, Command.overwatch("me"), "watch")
    assert score_action(overwatch, me, [], defend_directive) == 65


def test_proximity_synergy_uses_nearest_threat(make_character, make_state):
    me = make_character("me", (10, 10))
    close = make_character("c", (12, 10), team="enemy")
    far = make_character("f", (30, 10), team="enemy")
    directive = parse_directive({"objective": "patrol"})

    near_threats = ThreatAnalyzer().assess_threats(me, [far, close], make_state(me, close, far))
    assert score_action(_attack(), me, near_threats, directive) == 90
    assert score_action(_move(), me, near_threats, directive) == 60

    far_threats = ThreatAnalyzer().assess_threats(me, [far], make_state(me, far))
    assert score_action(_move(), me, far_threats, directive) == 65


def test_scores_are_clamped(make_character):
    me = make_character("me", (0, 0))
    directive = parse_directive({"objective": "attack"})
    assert score_action(_attack(priority=100), me, [], directive) == 100


def test_cost_estimates_prefer_budget_tables(make_character):
    me = make_character(
        "me", (0, 0), points=100,
        general={"move": 15}, ranged_combat={"overwatch": 25},
    )
    unbudgeted = make_character("me", (0, 0))
    speech = TacticalAction(ActionType.SPEECH, 30, Command.speech("me", "hi"), "talk")
    reload = TacticalAction(ActionType.RELOAD, 30, Command.move("me", (0, 0)), "reload")
    overwatch = TacticalAction(ActionType.OVERWATCH, 30, Command.overwatch("me"), "watch")

    assert estimate_action_cost(_move(), me) == 15
    assert estimate_action_cost(_attack(), me) == 30
    assert estimate_action_cost(overwatch, me) == 25
    assert estimate_action_cost(overwatch, unbudgeted) == 40
    assert estimate_action_cost(speech, me) == 0
    assert estimate_action_cost(reload, me) == 20
