from __future__ import annotations

from typing import Any, Dict

from .base_agent import BaseAgent
from .registry import resolve_agent_class
from .spec import AgentSpec


def create_agent_from_spec(spec: AgentSpec, **overrides: Any) -> BaseAgent:
    """
    Instantiate a controller from an AgentSpec.

    Keyword overrides (e.g. a session seed) fill init params the spec leaves unset.
    """
    cls = resolve_agent_class(spec.type)

    init_kwargs: Dict[str, Any] = dict(spec.init_params)
    init_kwargs.setdefault("team", spec.team)
    if spec.name is not None:
        init_kwargs.setdefault("name", spec.name)
    for key, value in overrides.items():
        if value is not None:
            init_kwargs.setdefault(key, value)

    agent = cls(**init_kwargs)
    if not isinstance(agent, BaseAgent):
        raise TypeError(f"Agent {cls} is not a BaseAgent")
    return agent


def default_spec(team: str) -> AgentSpec:
    """Tactical controller spec used for teams a scenario leaves unassigned."""
    return AgentSpec(type="tactical", team=team)
