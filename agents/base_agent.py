"""
Controller interface for the turn runner.

A controller decides for every living character of one team. The runner
calls start_turn() once at each turn boundary, then decide() once per turn.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Mapping

if TYPE_CHECKING:
    from battlefield.entities.character import Character
    from battlefield.world.game_state import GameState
    from tactics.actions import TacticalAction


class BaseAgent(ABC):
    """
    Abstract base class for all team controllers.

    Subclasses must implement:
    - decide(): Produce one action per living character of the team

    Attributes:
        team: The team this controller drives
        name: Name for logging/identification
    """

    def __init__(self, team: str, name: str | None = None):
        self.team = team
        self.name = name or self.__class__.__name__

    @abstractmethod
    def decide(
        self,
        game_state: "GameState",
        visible: Mapping[str, List["Character"]],
    ) -> Dict[str, "TacticalAction"]:
        """
        Decide one action for each living character of the team.

        Args:
            game_state: Snapshot of the battlefield
            visible: Character id -> characters that character can see

        Returns:
            Dict mapping character id to the chosen action
        """

    def start_turn(self) -> None:
        """Called once at each turn boundary, before decide()."""

    def reset(self) -> None:
        """
        Reset controller state between sessions.

        Override if the controller keeps state across turns.
        """

    def __str__(self) -> str:
        return f"{self.name} ({self.team})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(team={self.team!r}, name={self.name!r})"
