import pytest

from agents import (
    AgentSpec,
    BaseAgent,
    TacticalAgent,
    create_agent_from_spec,
    default_spec,
    register_agent,
    resolve_agent_class,
)
from battlefield.core.types import ActionType, Objective
from tactics import InvalidConfigError, UnknownControllerError


@register_agent("hold")
class HoldAgent(BaseAgent):
    """Controller that never acts."""

    def decide(self, game_state, visible):
        return {}


def test_resolve_registered_and_import_path():
    assert resolve_agent_class("tactical") is TacticalAgent
    assert resolve_agent_class("agents.tactical_agent.TacticalAgent") is TacticalAgent
    assert resolve_agent_class("hold") is HoldAgent


@pytest.mark.parametrize("type_ref", ["nope", "battlefield.Nope", "no_such_module.Agent", "battlefield.Grid"])
def test_unknown_controllers_rejected(type_ref):
    with pytest.raises(UnknownControllerError):
        resolve_agent_class(type_ref)


def test_factory_passes_team_name_and_seed():
    spec = AgentSpec(type="tactical", team="blue", name="Blue Team",
                     init_params={"directive": {"objective": "attack"}})
    agent = create_agent_from_spec(spec, seed=9)

    assert isinstance(agent, TacticalAgent)
    assert agent.team == "blue"
    assert agent.name == "Blue Team"
    assert agent.seed == 9
    assert agent.directive.objective == Objective.ATTACK


def test_spec_seed_wins_over_session_seed():
    spec = AgentSpec(type="tactical", team="blue", init_params={"seed": 3})
    assert create_agent_from_spec(spec, seed=9).seed == 3


def test_default_spec_takes_the_session_seed():
    spec = default_spec("blue")
    assert spec.type == "tactical"
    assert spec.init_params == {}
    assert create_agent_from_spec(spec, seed=9).seed == 9


def test_config_overrides_are_validated():
    with pytest.raises(InvalidConfigError):
        TacticalAgent("blue", config={"bogus": 1})
    agent = TacticalAgent("blue", config={"patrol_priority": 45})
    assert agent.executor.context.config.patrol_priority == 45


def test_tactical_agent_decides_for_living_team_members(make_character, make_state):
    me = make_character("me", (5, 5), team="blue")
    down = make_character("down", (6, 6), team="blue", health=0)
    foe = make_character("foe", (30, 30), team="red")
    state = make_state(me, down, foe)
    agent = TacticalAgent("blue", seed=1)

    agent.start_turn()
    decisions = agent.decide(state, {"me": []})

    assert list(decisions) == ["me"]
    assert decisions["me"].type == ActionType.MOVEMENT


def test_start_turn_clears_history(make_character, make_state):
    me = make_character("me", (5, 5), team="blue")
    state = make_state(me)
    agent = TacticalAgent("blue", seed=1)

    agent.decide(state, {})
    agent.start_turn()
    assert agent.executor.history.turn_actions("me") == []


def test_reset_restores_initial_directive():
    agent = TacticalAgent("blue", seed=1, directive={"objective": "attack"})
    agent.set_directive({"objective": "retreat"})
    agent.reset()
    assert agent.directive.objective == Objective.ATTACK
