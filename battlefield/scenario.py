"""
Scenario - serializable starting point for a session.

Holds the map rows, the characters, the alliance table, one controller
spec per team, the seed and the sight range used by the turn runner.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from agents.spec import AgentSpec

from .entities.character import Character
from .world.game_state import GameState
from .world.grid import Grid


@dataclass
class Scenario:
    """
    Attributes:
        map: Grid rows, '#' for blocking cells and '.' for open ones
        characters: Starting character snapshots
        alliances: Team -> allied teams
        agents: Controller spec for each team
        seed: Seed for every controller's randomness source
        sight_range: Visibility radius, None for unlimited
    """
    map: List[str]
    characters: List[Character] = field(default_factory=list)
    alliances: Dict[str, List[str]] = field(default_factory=dict)
    agents: List[AgentSpec] = field(default_factory=list)
    seed: Optional[int] = None
    sight_range: Optional[float] = None

    def build_state(self) -> GameState:
        """Fresh GameState for this scenario (validates the map and placements)."""
        return GameState(
            grid=Grid.from_rows(self.map),
            characters=list(self.characters),
            alliances=self.alliances,
        )

    def agent_for(self, team: str) -> Optional[AgentSpec]:
        for spec in self.agents:
            if spec.team == team:
                return spec
        return None

    def clone(self) -> Scenario:
        return Scenario.from_dict(self.to_dict())

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "map": list(self.map),
            "characters": [c.to_dict() for c in self.characters],
            "alliances": {team: list(allies) for team, allies in self.alliances.items()},
            "agents": [spec.to_dict() for spec in self.agents],
            "seed": self.seed,
            "sight_range": self.sight_range,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Scenario:
        """
        Raises:
            ValueError: If the map is missing
        """
        if not data.get("map"):
            raise ValueError("Scenario requires a non-empty 'map'")
        sight_range = data.get("sight_range")
        seed = data.get("seed")
        return cls(
            map=[str(row) for row in data["map"]],
            characters=[Character.from_dict(c) for c in data.get("characters", [])],
            alliances={team: list(allies) for team, allies in (data.get("alliances") or {}).items()},
            agents=[AgentSpec.from_dict(a) for a in data.get("agents", [])],
            seed=int(seed) if seed is not None else None,
            sight_range=float(sight_range) if sight_range is not None else None,
        )

    def to_json(self, filepath: Optional[str | Path] = None, indent: int = 2) -> str:
        json_str = json.dumps(self.to_dict(), indent=indent, ensure_ascii=True)
        if filepath:
            path = Path(filepath)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(json_str)
        return json_str

    def save_json(self, filepath: str | Path) -> None:
        self.to_json(filepath)

    @classmethod
    def load_json(cls, filepath: str | Path) -> Scenario:
        with open(filepath, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
