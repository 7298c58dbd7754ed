from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from battlefield.world.game_state import GameState
from tactics.actions import TacticalAction


@dataclass
class TurnFrame:
    """UI-friendly record of one decision turn."""
    turn: int
    state: GameState
    decisions: Dict[str, TacticalAction] = field(default_factory=dict)
    visible: Dict[str, List[str]] = field(default_factory=dict)
    controllers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "state": self.state.to_dict(),
            "decisions": {cid: action.to_dict() for cid, action in self.decisions.items()},
            "visible": {cid: list(ids) for cid, ids in self.visible.items()},
            "controllers": dict(self.controllers),
        }
