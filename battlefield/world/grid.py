"""
Grid - Spatial logic for the tactical map.

The Grid handles:
- Coordinate validation and clamping
- Distance calculations
- Blocking terrain lookups
- Line-of-sight raycasts (Bresenham)
- Cover adjacency

Coordinate System:
- X increases to the RIGHT (column index)
- Y increases DOWNWARD (row index)
- Origin (0, 0) is at TOP-LEFT
"""

from __future__ import annotations
import math
from typing import AbstractSet, FrozenSet, Iterable, Iterator, Optional, Sequence, Set
from ..core.types import GridPos

BLOCKING_GLYPHS = frozenset("#")


class Grid:
    """
    A 2D grid of cells, each either open or blocking.

    Provides spatial queries and calculations without game logic and or state.

    Attributes:
        width: Grid width (X dimension)
        height: Grid height (Y dimension)
        blocked: Cells that block movement and sight
    """

    def __init__(self, width: int, height: int, blocked: Optional[Iterable[GridPos]] = None):
        """
        Initialize a grid.

        Args:
            width: Grid width (must be positive)
            height: Grid height (must be positive)
            blocked: Optional iterable of blocking cells

        Raises:
            ValueError: If dimensions are invalid
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive: {width}x{height}")

        self.width = width
        self.height = height
        self.blocked: FrozenSet[GridPos] = frozenset(
            (int(x), int(y)) for x, y in (blocked or ())
        )

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> Grid:
        """
        Build a grid from text rows, '#' marking a blocking cell.

        Raises:
            ValueError: If rows are empty or ragged
        """
        if not rows:
            raise ValueError("Grid rows must not be empty")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("Grid rows must all have the same length")

        blocked: Set[GridPos] = set()
        for y, row in enumerate(rows):
            for x, glyph in enumerate(row):
                if glyph in BLOCKING_GLYPHS:
                    blocked.add((x, y))
        return cls(width, len(rows), blocked)

    def to_rows(self) -> list[str]:
        """Render the grid back to text rows."""
        return [
            "".join("#" if (x, y) in self.blocked else "." for x in range(self.width))
            for y in range(self.height)
        ]

    def in_bounds(self, pos: GridPos) -> bool:
        """
        Check if a position is within grid boundaries.

        Args:
            pos: Position to check (x, y)

        Returns:
            True if position is valid, False otherwise
        """
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def is_blocked(self, pos: GridPos) -> bool:
        """Whether the cell holds blocking terrain (out-of-bounds cells never do)."""
        return pos in self.blocked

    def clamp(self, x: float, y: float) -> GridPos:
        """Round a point to the nearest cell and clamp it inside the map."""
        cx = max(0, min(self.width - 1, int(round(x))))
        cy = max(0, min(self.height - 1, int(round(y))))
        return (cx, cy)

    def distance(self, a: GridPos, b: GridPos) -> float:
        """
        Calculate Euclidean distance between two positions.

        Args:
            a: First position (x, y)
            b: Second position (x, y)

        Returns:
            Euclidean distance as a float
        """
        return math.hypot(a[0] - b[0], a[1] - b[1]) # equivalent to sqrt((x2 - x1)^2 + (y2 - y1)^2)

    def manhattan_distance(self, a: GridPos, b: GridPos) -> int:
        """
        Calculate Manhattan (taxicab) distance between two positions.

        Args:
            a: First position (x, y)
            b: Second position (x, y)

        Returns:
            Manhattan distance as an integer
        """
        return abs(a[0] - b[0]) + abs(a[1] - b[1])

    def get_neighbors(self, pos: GridPos, include_diagonals: bool = False) -> list[GridPos]:
        """
        Get neighboring positions (4 or 8 directions).

        Args:
            pos: Center position
            include_diagonals: If True, include diagonal neighbors (8 total)
                               If False, only cardinal directions (4 total)

        Returns:
            List of valid neighboring positions
        """
        x, y = pos

        candidates = [
            (x, y - 1),  # UP
            (x, y + 1),  # DOWN
            (x - 1, y),  # LEFT
            (x + 1, y),  # RIGHT
        ]

        if include_diagonals:
            candidates.extend([
                (x - 1, y - 1),  # UP-LEFT
                (x + 1, y - 1),  # UP-RIGHT
                (x - 1, y + 1),  # DOWN-LEFT
                (x + 1, y + 1),  # DOWN-RIGHT
            ])

        return [p for p in candidates if self.in_bounds(p)]

    def positions_in_range(self, center: GridPos, max_range: float) -> list[GridPos]:
        """
        Get all positions within a given range of a center point.

        Args:
            center: Center position
            max_range: Maximum distance (Euclidean)

        Returns:
            List of positions within range (including center)
        """
        cx, cy = center
        r = int(math.ceil(max_range))
        positions = []

        for y in range(max(0, cy - r), min(self.height, cy + r + 1)):
            for x in range(max(0, cx - r), min(self.width, cx + r + 1)):
                pos = (x, y)
                if self.distance(center, pos) <= max_range:
                    positions.append(pos)

        return positions

    # ------------------------------------------------------------------
    # Sight and cover
    # ------------------------------------------------------------------
    def line_cells(self, start: GridPos, end: GridPos) -> Iterator[GridPos]:
        """
        Yield the cells strictly between start and end on a Bresenham line.

        Neither endpoint is yielded.
        """
        x, y = int(round(start[0])), int(round(start[1]))
        tx, ty = int(round(end[0])), int(round(end[1]))
        dx = abs(tx - x)
        dy = abs(ty - y)
        sx = 1 if x < tx else -1
        sy = 1 if y < ty else -1
        err = dx - dy

        while True:
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x += sx
            if e2 < dx:
                err += dx
                y += sy
            if (x, y) == (tx, ty):
                return
            yield (x, y)

    def first_blocker(
        self,
        start: GridPos,
        end: GridPos,
        occupied: AbstractSet[GridPos] = frozenset(),
    ) -> Optional[tuple[str, GridPos]]:
        """
        Find what interrupts the line between two cells.

        Returns:
            ("wall", cell) or ("character", cell) for the first occluder,
            or None when the line is clear.
        """
        for cell in self.line_cells(start, end):
            if cell in self.blocked:
                return ("wall", cell)
            if cell in occupied:
                return ("character", cell)
        return None

    def has_line_of_sight(
        self,
        start: GridPos,
        end: GridPos,
        occupied: AbstractSet[GridPos] = frozenset(),
    ) -> bool:
        """
        Check whether a straight grid line between two cells is unobstructed.

        Blocking terrain and any cell in `occupied` strictly between the
        endpoints occlude; the endpoints themselves are never tested.
        """
        return self.first_blocker(start, end, occupied) is None

    def is_in_cover(self, pos: GridPos) -> bool:
        """A cell is in cover when an orthogonally adjacent cell is blocking."""
        return any(n in self.blocked for n in self.get_neighbors(pos))

    def __str__(self) -> str:
        """String representation."""
        return f"Grid({self.width}x{self.height})"

    def __repr__(self) -> str:
        """Detailed representation."""
        return f"Grid(width={self.width}, height={self.height}, blocked={len(self.blocked)})"
