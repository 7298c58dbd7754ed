"""
GameState - Read-only battlefield snapshot.

The GameState bundles everything the tactical engine reads:
- The spatial grid (with blocking terrain)
- All character snapshots
- The alliance table between teams
- The turn counter

It does NOT:
- Execute commands (delegated to the external executor)
- Decide anything (delegated to the tactics package)
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from .grid import Grid
from ..core.types import GridPos
from ..entities.character import Character


class GameState:
    """
    Snapshot of the battlefield handed to the engine each evaluation.

    Attributes:
        grid: The tactical map
        characters: Every character on the map, alive or not
        alliances: Team -> set of teams it is allied with
        turn: Turn counter maintained by the caller
    """

    def __init__(
            self,
            grid: Grid,
            characters: Optional[Iterable[Character]] = None,
            alliances: Optional[Mapping[str, Iterable[str]]] = None,
            turn: int = 0,
    ):
        """
        Initialize a snapshot.

        Raises:
            ValueError: If a character stands outside the grid or ids repeat
        """
        self.grid = grid
        self._characters: List[Character] = []
        self._characters_by_id: Dict[str, Character] = {}
        self.alliances: Dict[str, FrozenSet[str]] = {
            team: frozenset(allies) for team, allies in (alliances or {}).items()
        }
        self.turn = turn

        for character in characters or ():
            self.add_character(character)

    # ========================================================================
    # CHARACTER MANAGEMENT
    # ========================================================================

    def add_character(self, character: Character) -> None:
        """
        Add a character to the snapshot.

        Raises:
            ValueError: If the position is out of bounds or the id is taken
        """
        if not self.grid.in_bounds(character.position):
            raise ValueError(f"Character position out of bounds: {character.label()}")
        if character.id in self._characters_by_id:
            raise ValueError(f"Duplicate character id: {character.id}")

        self._characters.append(character)
        self._characters_by_id[character.id] = character

    def replace_character(self, character: Character) -> None:
        """Swap in an updated snapshot for an existing character id."""
        if character.id not in self._characters_by_id:
            raise ValueError(f"Unknown character id: {character.id}")
        self._characters = [character if c.id == character.id else c for c in self._characters]
        self._characters_by_id[character.id] = character

    def get_character(self, character_id: str) -> Optional[Character]:
        return self._characters_by_id.get(character_id)

    @property
    def characters(self) -> List[Character]:
        """All characters (including dead ones)."""
        return self._characters.copy()

    def living_characters(self) -> List[Character]:
        return [c for c in self._characters if c.alive]

    def team_characters(self, team: str, alive_only: bool = True) -> List[Character]:
        members = [c for c in self._characters if c.team == team]
        if alive_only:
            members = [c for c in members if c.alive]
        return members

    @property
    def teams(self) -> List[str]:
        """Teams in first-seen order."""
        seen: List[str] = []
        for c in self._characters:
            if c.team not in seen:
                seen.append(c.team)
        return seen

    # ========================================================================
    # ALLIANCES
    # ========================================================================

    def are_allied(self, a: Character, b: Character) -> bool:
        """Same team, or either team lists the other as an ally."""
        if a.team == b.team:
            return True
        return b.team in self.alliances.get(a.team, frozenset()) or \
            a.team in self.alliances.get(b.team, frozenset())

    # ========================================================================
    # SPATIAL QUERIES
    # ========================================================================

    def occupied_cells(self, exclude: Iterable[str] = ()) -> Set[GridPos]:
        """Cells holding a living character, minus excluded ids."""
        skip = set(exclude)
        return {c.position for c in self._characters if c.alive and c.id not in skip}

    def has_line_of_sight(self, start: GridPos, end: GridPos, ignore_characters: bool = False) -> bool:
        """
        Raycast between two cells; living characters strictly between the
        endpoints occlude unless ignore_characters is set.
        """
        occupied = frozenset() if ignore_characters else self.occupied_cells()
        return self.grid.has_line_of_sight(start, end, occupied)

    def is_walkable(self, pos: GridPos, exclude: Optional[str] = None) -> bool:
        """In bounds, not blocking, and not held by another living character."""
        if not self.grid.in_bounds(pos) or self.grid.is_blocked(pos):
            return False
        return all(
            not (c.alive and c.position == pos and c.id != exclude)
            for c in self._characters
        )

    def visible_characters(self, observer: Character, sight_range: Optional[float] = None) -> List[Character]:
        """
        Living characters the observer can see.

        Sight is blocked only by terrain; range is unlimited when sight_range is None.
        """
        visible = []
        for other in self._characters:
            if other.id == observer.id or not other.alive:
                continue
            if sight_range is not None and self.grid.distance(observer.position, other.position) > sight_range:
                continue
            if self.has_line_of_sight(observer.position, other.position, ignore_characters=True):
                visible.append(other)
        return visible

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map": self.grid.to_rows(),
            "characters": [c.to_dict() for c in self._characters],
            "alliances": {team: sorted(allies) for team, allies in self.alliances.items()},
            "turn": self.turn,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameState:
        """
        Build a snapshot from a dict with 'map' rows (or 'width'/'height'),
        'characters', optional 'alliances' and 'turn'.
        """
        if "map" in data:
            grid = Grid.from_rows(data["map"])
        else:
            grid = Grid(int(data["width"]), int(data["height"]), [tuple(p) for p in data.get("blocked", [])])
        return cls(
            grid=grid,
            characters=[Character.from_dict(c) for c in data.get("characters", [])],
            alliances=data.get("alliances"),
            turn=int(data.get("turn", 0)),
        )

    def __str__(self) -> str:
        return f"GameState(turn={self.turn}, {self.grid}, characters={len(self._characters)})"
