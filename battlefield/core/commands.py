"""
Command payload definitions.

A Command is the opaque instruction handed to the external command-execution
layer (path planner, attack resolver, dialogue trigger). This module provides:
- Command dataclass
- Per-type parameter validation
- Factory methods
- Serialization
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import json

from .types import CommandType, GridPos

AREA_TARGET = "area"


@dataclass
class Command:
    """
    A command for the external executor.

    Commands consist of a type and parameters. The parameters are validated
    based on the command type.

    Use static factory methods for convenient construction:
        - Command.move(character_id, location)
        - Command.attack(character_id, target_id)
        - Command.overwatch(character_id, target_id)
        - Command.speech(source_id, content, answers)

    Or construct directly:
        - Command(CommandType.ATTACK, {"character": "a", "target": "b"})
    """

    type: CommandType
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate command parameters after initialization."""
        self._validate()

    def _validate(self) -> None:
        """
        Validate that parameters match the command type.

        Raises:
            ValueError: If parameters are invalid for the command type
        """
        if self.type == CommandType.SPEECH:
            if not isinstance(self.params.get("source"), str):
                raise ValueError("SPEECH command requires a 'source' string")
            if not isinstance(self.params.get("content"), str):
                raise ValueError("SPEECH command requires a 'content' string")
            if not isinstance(self.params.get("answers", []), list):
                raise ValueError("'answers' must be a list of strings")
            return

        if not isinstance(self.params.get("character"), str):
            raise ValueError(f"{self.type.name} command requires a 'character' string")

        if self.type == CommandType.MOVEMENT:
            location = self.params.get("location")
            if not (isinstance(location, tuple) and len(location) == 2):
                raise ValueError(f"'location' must be an (x, y) tuple, got {location!r}")

        elif self.type in (CommandType.ATTACK, CommandType.OVERWATCH):
            if not isinstance(self.params.get("target"), str):
                raise ValueError(f"{self.type.name} command requires a 'target' string")

    @property
    def character(self) -> Optional[str]:
        """Id of the acting character (the speaker for speech)."""
        return self.params.get("character", self.params.get("source"))

    @property
    def target(self) -> Optional[str]:
        """Id of the targeted character, if any."""
        return self.params.get("target")

    @property
    def location(self) -> Optional[GridPos]:
        """Destination cell for movement commands."""
        return self.params.get("location")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert command to a JSON-serializable dictionary.

        Returns:
            Dictionary representation of the command
        """
        params_dict = {}
        for key, value in self.params.items():
            if isinstance(value, tuple):
                params_dict[key] = list(value)
            else:
                params_dict[key] = value

        return {
            "type": self.type.value,
            "params": params_dict,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Command:
        """
        Create a command from a dictionary.

        Raises:
            ValueError: If dictionary format is invalid
        """
        if "type" not in data:
            raise ValueError("Command dictionary must contain 'type'")

        command_type = CommandType(data["type"])
        params = dict(data.get("params", {}))

        if "location" in params and isinstance(params["location"], list):
            params["location"] = tuple(params["location"])

        return cls(type=command_type, params=params)

    def to_json(self) -> str:
        """Convert command to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.type == CommandType.MOVEMENT:
            x, y = self.params["location"]
            return f"MOVE {self.params['character']} -> {x},{y}"
        elif self.type == CommandType.ATTACK:
            return f"ATTACK {self.params['character']} -> {self.params['target']}"
        elif self.type == CommandType.OVERWATCH:
            return f"OVERWATCH {self.params['character']} -> {self.params['target']}"
        elif self.type == CommandType.SPEECH:
            return f"SPEECH {self.params['source']}: {self.params['content']}"
        return f"{self.type.name}({self.params})"

    # FACTORY METHODS
    @staticmethod
    def move(character_id: str, location: GridPos, target_id: Optional[str] = None) -> Command:
        """
        Create a MOVEMENT command.

        Args:
            character_id: Character that moves
            location: Destination cell
            target_id: Optional character the move is oriented toward

        Returns:
            Command that sends the character to the destination.
        """
        params: Dict[str, Any] = {
            "character": character_id,
            "location": (int(location[0]), int(location[1])),
        }
        if target_id is not None:
            params["target"] = target_id
        return Command(CommandType.MOVEMENT, params)

    @staticmethod
    def attack(character_id: str, target_id: str) -> Command:
        """Create an ATTACK command against a single target."""
        return Command(CommandType.ATTACK, {"character": character_id, "target": target_id})

    @staticmethod
    def overwatch(character_id: str, target_id: str = AREA_TARGET, mode: Optional[str] = None) -> Command:
        """
        Create an OVERWATCH command.

        Args:
            character_id: Character holding overwatch
            target_id: Character to cover, or "area" for a generic watch
            mode: Optional firing mode hint (e.g. "hold" for suppressive fire)
        """
        params: Dict[str, Any] = {"character": character_id, "target": target_id}
        if mode is not None:
            params["mode"] = mode
        return Command(CommandType.OVERWATCH, params)

    @staticmethod
    def speech(source_id: str, content: str, answers: Optional[List[str]] = None) -> Command:
        """Create a SPEECH command addressed to nearby allies."""
        return Command(
            CommandType.SPEECH,
            {"source": source_id, "content": content, "answers": list(answers or [])},
        )
