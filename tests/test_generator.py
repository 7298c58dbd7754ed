import random

from battlefield.core.types import ActionType, Stance
from tactics import (
    STANCE_GENERATORS,
    ActionGenerator,
    PositionEvaluator,
    ThreatAnalyzer,
    TurnHistory,
    parse_directive,
)


def _generate(me, enemies, state, directive_data, history=None, seed=0):
    directive = parse_directive(directive_data)
    threats = ThreatAnalyzer().assess_threats(me, enemies, state, directive)
    evaluation = PositionEvaluator().evaluate_position(me.position, me, threats, state, directive.position)
    generator = ActionGenerator(rng=random.Random(seed))
    return generator.generate_actions(me, threats, evaluation, directive, state, history or TurnHistory())


def _directive(stance, objective="attack", **tactics):
    return {"objective": objective, "tactics": {"stance": stance, **tactics}}


def test_every_stance_has_a_generator():
    assert set(STANCE_GENERATORS) == set(Stance)


def test_no_threats_yields_single_patrol(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)

    actions = _generate(me, [], state, _directive("aggressive"))

    assert len(actions) == 1
    assert actions[0].type == ActionType.MOVEMENT
    assert "patrolling" in actions[0].reasoning.lower()
    assert actions[0].priority == 40


def test_patrol_heads_for_the_anchor(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)

    [action] = _generate(me, [], state, {"objective": "defend", "position": [30, 5]})

    assert action.command.location == (30, 5)
    assert action.priority == 50
    assert "patrolling" in action.reasoning.lower()


def test_pursuit_without_contacts_scouts_the_edges(make_character, make_state):
    me = make_character("me", (10, 10))
    state = make_state(me)

    [action] = _generate(me, [], state, {"objective": "pursue"})
    x, y = action.command.location

    assert x in (0, 39) or y in (0, 39)
    assert "patrolling" in action.reasoning.lower()


def test_aggressive_adjacent_enemy_is_attacked(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (11, 11), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("aggressive"))
    attacks = [a for a in actions if a.type == ActionType.ATTACK]

    assert attacks
    assert all(a.command.target == "e1" for a in attacks)
    assert max(a.priority for a in attacks) >= 90


def test_aggressive_ranged_attack_penalised_at_long_range(make_character, make_state):
    me = make_character("me", (5, 5))
    enemy = make_character("e1", (20, 5), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("aggressive"))
    [attack] = [a for a in actions if a.type == ActionType.ATTACK]

    assert attack.priority == 80 + 20 - 10
    closing = [a for a in actions if a.reasoning == "Closing distance to target"]
    assert closing and closing[0].command.location == (20, 5)


def test_aggressive_seeks_line_of_sight(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (18, 10), team="enemy")
    state = make_state(me, enemy, blocked=[(14, 10)])

    actions = _generate(me, [enemy], state, _directive("aggressive"))

    assert not any(a.type == ActionType.ATTACK for a in actions)
    [seek] = [a for a in actions if a.priority == 85]
    assert seek.type == ActionType.MOVEMENT
    assert seek.command.target == "e1"
    assert "line blocked by wall" in seek.reasoning
    assert state.grid.has_line_of_sight(seek.command.location, enemy.position)


def _clear_shot_moves(actions):
    return [a for a in actions if a.type == ActionType.MOVEMENT and "clear shot" in a.reasoning]


def test_aggressive_steps_around_an_ally_in_the_line(make_character, make_state):
    me = make_character("me", (10, 10))
    buddy = make_character("buddy", (12, 10))
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, buddy, enemy)

    actions = _generate(me, [buddy, enemy], state, _directive("aggressive"))

    [seek] = _clear_shot_moves(actions)
    assert "line blocked by character" in seek.reasoning
    assert seek.command.target == "e1"
    assert seek.command.location != me.position
    others = frozenset(state.occupied_cells(exclude=("me",)))
    assert state.grid.first_blocker(seek.command.location, enemy.position, others) is None


def test_defensive_steps_around_an_ally_in_the_line(make_character, make_state):
    me = make_character("me", (10, 10), points=100)
    buddy = make_character("buddy", (12, 10))
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, buddy, enemy)

    actions = _generate(me, [buddy, enemy], state, _directive("defensive", objective="defend"))

    assert not any(a.type == ActionType.ATTACK for a in actions)
    [seek] = _clear_shot_moves(actions)
    assert seek.priority == 75
    assert seek.command.location != me.position
    others = frozenset(state.occupied_cells(exclude=("me",)))
    assert state.grid.first_blocker(seek.command.location, enemy.position, others) is None


def test_defensive_attack_and_overwatch(make_character, make_state):
    me = make_character("me", (10, 10), points=100)
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("defensive", objective="defend"))
    by_type = {a.type: a for a in actions}

    assert by_type[ActionType.ATTACK].priority == 80
    assert by_type[ActionType.OVERWATCH].priority == 50
    assert by_type[ActionType.OVERWATCH].command.target == "e1"


def test_defensive_overwatch_needs_points_and_no_attack_yet(make_character, make_state):
    enemy = make_character("e1", (20, 10), team="enemy")

    broke = make_character("me", (10, 10), points=30)
    state = make_state(broke, enemy)
    actions = _generate(broke, [enemy], state, _directive("defensive"))
    assert not any(a.type == ActionType.OVERWATCH for a in actions)
    assert [a.priority for a in actions if a.type == ActionType.ATTACK] == [70]

    unbudgeted = make_character("me", (10, 10))
    state = make_state(unbudgeted, enemy)
    actions = _generate(unbudgeted, [enemy], state, _directive("defensive"))
    assert not any(a.type == ActionType.OVERWATCH for a in actions)

    history = TurnHistory()
    history.record("me", ActionType.ATTACK)
    rich = make_character("me", (10, 10), points=100)
    state = make_state(rich, enemy)
    actions = _generate(rich, [enemy], state, _directive("defensive"), history=history)
    assert not any(a.type == ActionType.OVERWATCH for a in actions)


def test_defensive_far_hidden_enemy_gets_approach_moves(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (30, 30), team="enemy")
    state = make_state(me, enemy, blocked=[(20, 20)])

    actions = _generate(me, [enemy], state, _directive("defensive"))
    reasons = [a.reasoning for a in actions]

    assert all(a.type == ActionType.MOVEMENT for a in actions)
    assert any("clear shot" in r for r in reasons)
    assert "Moving to engagement range" in reasons


def test_defensive_takes_cover_when_exposed(make_character, make_state):
    me = make_character("me", (10, 10))
    enemies = [
        make_character("e1", (10, 4), team="enemy"),
        make_character("e2", (5, 8), team="enemy"),
        make_character("e3", (4, 11), team="enemy"),
    ]
    # the wall column at x=12 screens every cell east of it from the enemies
    wall = [(12, y) for y in range(0, 40)]
    state = make_state(me, *enemies, blocked=wall)

    actions = _generate(me, enemies, state, _directive("defensive"))
    cover = [a for a in actions if a.reasoning == "Moving to cover"]

    assert cover
    assert cover[0].priority == 85
    assert state.grid.is_in_cover(cover[0].command.location)


def test_unknown_stance_falls_back_to_defensive(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("berserk"))

    assert actions
    assert all(a.stance == Stance.DEFENSIVE for a in actions)


def test_flanking_moves_to_the_side(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (20, 10), team="enemy")
    state = make_state(me, enemy)

    [action] = _generate(me, [enemy], state, _directive("flanking"))

    assert action.type == ActionType.MOVEMENT
    assert action.priority == 80
    assert action.command.location == (20, 15)


def test_suppressive_watches_visible_enemy_or_area(make_character, make_state):
    me = make_character("me", (10, 10))
    seen = make_character("e1", (15, 10), team="enemy")
    state = make_state(me, seen)

    actions = _generate(me, [seen], state, _directive("suppressive"))
    [overwatch] = [a for a in actions if a.type == ActionType.OVERWATCH]
    assert overwatch.command.target == "e1"
    assert overwatch.command.params["mode"] == "hold"
    assert overwatch.priority == 80

    hidden = make_character("e1", (15, 10), team="enemy")
    state = make_state(me, hidden, blocked=[(13, 10)])
    actions = _generate(me, [hidden], state, _directive("suppressive"))
    [overwatch] = [a for a in actions if a.type == ActionType.OVERWATCH]
    assert overwatch.command.target == "area"


def test_retreating_stance_runs_and_fights_back(make_character, make_state):
    me = make_character("me", (10, 10))
    enemy = make_character("e1", (13, 10), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("retreating"))
    move = next(a for a in actions if a.type == ActionType.MOVEMENT)
    attack = next(a for a in actions if a.type == ActionType.ATTACK)

    assert move.priority == 95
    assert state.grid.distance(move.command.location, enemy.position) > 3
    assert attack.priority == 60


def test_low_health_adds_retreat_candidates(make_character, make_state):
    me = make_character("me", (10, 10), health=20)
    enemy = make_character("e1", (14, 10), team="enemy")
    state = make_state(me, enemy)

    actions = _generate(me, [enemy], state, _directive("aggressive", retreat_threshold=0.3))

    retreats = [a for a in actions if a.stance == Stance.RETREATING]
    assert retreats
    assert retreats[0].reasoning.startswith("Retreating (health: 20%)")


def test_low_health_without_threats_regroups(make_character, make_state):
    me = make_character("me", (10, 10), health=10)
    state = make_state(me)

    actions = _generate(me, [], state, _directive("defensive"))
    retreat = next(a for a in actions if a.stance == Stance.RETREATING)

    assert retreat.priority == 95
    assert "patrolling" in retreat.reasoning


def test_speech_to_nearby_ally_when_no_close_threat(make_character, make_state):
    me = make_character("me", (10, 10))
    buddy = make_character("buddy", (12, 10))
    state = make_state(me, buddy)

    actions = _generate(me, [buddy], state, _directive("defensive"))
    [speech] = [a for a in actions if a.type == ActionType.SPEECH]

    assert speech.priority == 30
    assert speech.command.params["source"] == "me"
    assert speech.command.params["answers"] == ["Understood", "I need support", "Changing position"]


def test_no_speech_with_a_close_threat(make_character, make_state):
    me = make_character("me", (10, 10))
    buddy = make_character("buddy", (12, 10))
    enemy = make_character("e1", (16, 10), team="enemy")
    state = make_state(me, buddy, enemy)

    actions = _generate(me, [buddy, enemy], state, _directive("defensive"))
    assert not any(a.type == ActionType.SPEECH for a in actions)
