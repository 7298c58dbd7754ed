from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class AgentSpec:
    """
    Serializable description of a team controller.

    Used by scenarios and the HTTP adapter so controllers can be built
    dynamically by the factory/registry.
    """
    type: str
    team: str
    name: Optional[str] = None
    init_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {
            "type": self.type,
            "team": self.team,
            "name": self.name,
            "init_params": self.init_params,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentSpec":
        """Construct from a dict (e.g., loaded from JSON)."""
        team = data.get("team")
        if team is None:
            raise ValueError("AgentSpec requires 'team'")
        if "type" not in data:
            raise ValueError("AgentSpec requires 'type'")
        return cls(
            type=str(data["type"]),
            team=str(team),
            name=data.get("name"),
            init_params=dict(data.get("init_params") or {}),
        )

    def with_team(self, team: str) -> "AgentSpec":
        """Return a copy bound to another team."""
        return replace(self, team=team, init_params=dict(self.init_params))
