"""
Session state for the tactical engine.

A TacticalContext is built once per game session by the turn orchestrator
and passed by reference into every evaluation. It owns the only mutable
state the engine touches:
- the standing directive
- the per-character turn history
- the randomness source used by every bounded search
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from battlefield.core.types import ActionType

from .config import DEFAULT_CONFIG, TacticalConfig
from .directive import TacticalDirective


class TurnHistory:
    """
    Per-character record of the action types chosen this turn.

    Appended to by every evaluation and cleared by the caller at each turn
    boundary. Not thread-safe: evaluate characters sequentially, or give each
    worker its own history.
    """

    def __init__(self):
        self._last: Dict[str, ActionType] = {}
        self._turn: Dict[str, List[ActionType]] = {}

    def record(self, character_id: str, action_type: ActionType) -> None:
        self._last[character_id] = action_type
        self._turn.setdefault(character_id, []).append(action_type)

    def last_action(self, character_id: str) -> Optional[ActionType]:
        return self._last.get(character_id)

    def turn_actions(self, character_id: str) -> List[ActionType]:
        """Action types chosen this turn, in order (a copy)."""
        return list(self._turn.get(character_id, []))

    def has_taken(self, character_id: str, action_type: ActionType) -> bool:
        return action_type in self._turn.get(character_id, ())

    def clear(self) -> None:
        self._last.clear()
        self._turn.clear()

    def __len__(self) -> int:
        return len(self._turn)

    def __repr__(self) -> str:
        return f"TurnHistory(characters={len(self._turn)})"


@dataclass
class TacticalContext:
    """
    Everything an evaluation may read or update besides its explicit inputs.

    Attributes:
        directive: Standing directive, None until the strategy layer sets one
        history: Turn-local record used for anti-repetition scoring
        rng: Single randomness source for every bounded search
        config: Tunable numbers
    """
    directive: Optional[TacticalDirective] = None
    history: TurnHistory = field(default_factory=TurnHistory)
    rng: random.Random = field(default_factory=random.Random)
    config: TacticalConfig = DEFAULT_CONFIG

    @classmethod
    def create(
        cls,
        *,
        seed: Optional[int] = None,
        directive: Optional[TacticalDirective] = None,
        config: Optional[TacticalConfig] = None,
    ) -> "TacticalContext":
        """Build a context with a seeded randomness source."""
        return cls(
            directive=directive,
            rng=random.Random(seed),
            config=config or DEFAULT_CONFIG,
        )
