"""
Team controllers for the turn runner.

This module provides:
- BaseAgent: Abstract controller interface
- TacticalAgent: Controller backed by the tactical decision engine
- AgentSpec / create_agent_from_spec: Config-driven construction
"""

from .base_agent import BaseAgent
from .registry import AGENT_REGISTRY, register_agent, resolve_agent_class
from .spec import AgentSpec
from .factory import create_agent_from_spec, default_spec
from .tactical_agent import TacticalAgent

__all__ = [
    "BaseAgent",
    "TacticalAgent",
    "AgentSpec",
    "AGENT_REGISTRY",
    "register_agent",
    "resolve_agent_class",
    "create_agent_from_spec",
    "default_spec",
]
