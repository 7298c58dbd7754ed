"""
TacticalAction - one candidate (or chosen) decision for a character.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from battlefield.core.commands import Command
from battlefield.core.types import ActionType, Stance


@dataclass(frozen=True)
class TacticalAction:
    """
    A decision handed to the external command-execution layer.

    Attributes:
        type: Kind of action
        priority: Urgency in [0, 100]; higher wins
        command: Opaque payload for the executor
        reasoning: Human-readable rationale for debugging
        stance: Stance branch that produced the candidate, if any
    """
    type: ActionType
    priority: int
    command: Command
    reasoning: str
    stance: Optional[Stance] = None

    def with_priority(self, priority: int) -> "TacticalAction":
        return replace(self, priority=priority)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {
            "type": self.type.value,
            "priority": self.priority,
            "command": self.command.to_dict(),
            "reasoning": self.reasoning,
            "stance": self.stance.value if self.stance else None,
        }

    def __str__(self) -> str:
        return f"{self.type.value}({self.priority}) {self.command} - {self.reasoning}"
