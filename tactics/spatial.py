"""
Bounded position searches used by the action generator.

Every search here:
- draws randomness only from the `rng` it is handed
- gives up after a fixed number of attempts
- falls back to the nearest empty cell and finally to staying in place

so a search always returns a cell and never loops unbounded.
"""

from __future__ import annotations

import math
import random
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from battlefield.core.types import GridPos
from battlefield.entities.character import Character
from infra.logger import get_logger

from .config import DEFAULT_CONFIG, TacticalConfig

if TYPE_CHECKING:
    from battlefield.world.game_state import GameState
    from .positions import PositionEvaluation

log = get_logger(__name__)


def point_at(origin: GridPos, angle: float, distance: float) -> tuple[float, float]:
    """Point at a bearing/distance from origin (unrounded)."""
    return (origin[0] + math.cos(angle) * distance, origin[1] + math.sin(angle) * distance)


def bearing(start: GridPos, end: GridPos) -> float:
    """Angle in radians of the vector start -> end."""
    return math.atan2(end[1] - start[1], end[0] - start[0])


def centroid(positions: Sequence[GridPos]) -> tuple[float, float]:
    """Mean of a non-empty list of positions."""
    count = len(positions)
    return (sum(p[0] for p in positions) / count, sum(p[1] for p in positions) / count)


# ----------------------------------------------------------------------
# Fallbacks
# ----------------------------------------------------------------------
def find_nearest_empty_cell(
    game_state: "GameState",
    target: GridPos,
    *,
    origin: Optional[GridPos] = None,
    exclude: Optional[str] = None,
    max_radius: int = DEFAULT_CONFIG.nearest_empty_max_radius,
    accept: Optional[Callable[[GridPos], bool]] = None,
) -> Optional[GridPos]:
    """
    Walkable cell closest to target, searched in Manhattan rings of radius
    1..max_radius; within a ring the cell closest to origin wins. Cells
    rejected by `accept` are skipped.

    Returns:
        A cell, or None when every ring is blocked or occupied
    """
    for radius in range(1, max_radius + 1):
        candidates: List[tuple[int, GridPos]] = []
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                if abs(dx) + abs(dy) != radius:
                    continue
                pos = (target[0] + dx, target[1] + dy)
                if not game_state.is_walkable(pos, exclude=exclude):
                    continue
                if accept is not None and not accept(pos):
                    continue
                rank = game_state.grid.manhattan_distance(pos, origin) if origin is not None else 0
                candidates.append((rank, pos))
        if candidates:
            candidates.sort(key=lambda c: c[0])
            return candidates[0][1]
    return None


def _fallback(
    game_state: "GameState",
    character: Character,
    near: GridPos,
    what: str,
    max_radius: int,
    accept: Optional[Callable[[GridPos], bool]] = None,
) -> GridPos:
    cell = find_nearest_empty_cell(
        game_state, near, origin=character.position, exclude=character.id,
        max_radius=max_radius, accept=accept,
    )
    if cell is not None:
        return cell
    log.debug("%s: no valid target for %s, staying in place", what, character.id)
    return character.position


def _attempts(
    game_state: "GameState",
    character: Character,
    count: int,
    sample: Callable[[int], tuple[float, float]],
    accept: Optional[Callable[[GridPos], bool]] = None,
) -> Optional[GridPos]:
    """Run up to `count` samples and return the first walkable clamped cell `accept` allows."""
    grid = game_state.grid
    for attempt in range(count):
        x, y = sample(attempt)
        pos = grid.clamp(x, y)
        if pos == character.position or not game_state.is_walkable(pos, exclude=character.id):
            continue
        if accept is None or accept(pos):
            return pos
    return None


# ----------------------------------------------------------------------
# Searches
# ----------------------------------------------------------------------
def find_patrol_point(
    game_state: "GameState",
    character: Character,
    rng: random.Random,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """Random walkable cell around the character, shrinking the radius as attempts fail."""

    def sample(attempt: int) -> tuple[float, float]:
        max_distance = config.patrol_max_distance - attempt // config.patrol_reduction_interval
        min_distance = max(config.patrol_min_distance, max_distance - config.patrol_distance_reduction)
        angle = rng.random() * 2 * math.pi
        distance = min_distance + rng.random() * (max_distance - min_distance + 1)
        return point_at(character.position, angle, distance)

    found = _attempts(game_state, character, config.patrol_max_attempts, sample)
    if found is not None:
        return found
    return _fallback(game_state, character, character.position, "Patrol", config.nearest_empty_max_radius)


def find_scout_point(
    game_state: "GameState",
    character: Character,
    rng: random.Random,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """Random walkable cell on a map edge; falls back to patrolling."""
    width, height = game_state.grid.width, game_state.grid.height

    def sample(_attempt: int) -> tuple[float, float]:
        edge = rng.randrange(4)
        if edge == 0:
            return (rng.randrange(width), 0)
        if edge == 1:
            return (width - 1, rng.randrange(height))
        if edge == 2:
            return (rng.randrange(width), height - 1)
        return (0, rng.randrange(height))

    found = _attempts(game_state, character, config.scout_max_attempts, sample)
    if found is not None:
        return found
    log.debug("Scout: no edge target for %s, patrolling instead", character.id)
    return find_patrol_point(game_state, character, rng, config)


def find_search_point(
    game_state: "GameState",
    character: Character,
    target: GridPos,
    rng: random.Random,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """Walkable cell a few steps toward the target, with angular jitter."""
    base_angle = bearing(character.position, target)

    def sample(_attempt: int) -> tuple[float, float]:
        angle = base_angle + (rng.random() - 0.5) * config.search_angle_variance
        distance = config.search_base_distance + rng.random() * config.search_distance_variance
        return point_at(character.position, angle, distance)

    found = _attempts(game_state, character, config.search_max_attempts, sample)
    if found is not None:
        return found
    cell = find_nearest_empty_cell(
        game_state, target, origin=character.position, exclude=character.id,
        max_radius=config.nearest_empty_max_radius,
    )
    if cell is not None:
        return cell
    return find_scout_point(game_state, character, rng, config)


def find_retreat_point(
    game_state: "GameState",
    character: Character,
    threat_positions: Sequence[GridPos],
    rng: random.Random,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """
    Cell away from the centroid of the threats.

    The first candidate lies exactly `retreat_distance` along the bearing
    centroid -> character, clamped to the map. If it is not walkable or not
    strictly farther from the centroid than the character, jittered and
    shortened candidates are tried, then the nearest empty cell around the
    first candidate that is farther. The character stays put only when all
    of these fail. Without threats this is a patrol point.
    """
    if not threat_positions:
        return find_patrol_point(game_state, character, rng, config)

    grid = game_state.grid
    cx, cy = centroid(threat_positions)
    base_angle = math.atan2(character.position[1] - cy, character.position[0] - cx)
    threat_distance = grid.distance(character.position, (cx, cy))

    def farther(pos: GridPos) -> bool:
        return grid.distance(pos, (cx, cy)) > threat_distance

    direct = grid.clamp(*point_at(character.position, base_angle, config.retreat_distance))
    if (
        direct != character.position
        and game_state.is_walkable(direct, exclude=character.id)
        and farther(direct)
    ):
        return direct

    def sample(attempt: int) -> tuple[float, float]:
        angle = base_angle + (rng.random() - 0.5) * config.retreat_angle_variance
        distance = max(1.0, config.retreat_distance - attempt // 2)
        return point_at(character.position, angle, distance)

    found = _attempts(game_state, character, config.retreat_max_attempts, sample, accept=farther)
    if found is not None:
        return found
    return _fallback(
        game_state, character, direct, "Retreat", config.nearest_empty_max_radius, accept=farther
    )


def find_cover_point(
    game_state: "GameState",
    character: Character,
    evaluate: Callable[[GridPos], "PositionEvaluation"],
    config: TacticalConfig = DEFAULT_CONFIG,
) -> Optional[GridPos]:
    """
    Nearest walkable cell, by expanding radius up to `cover_search_radius`,
    whose evaluation clears the cover and exposure thresholds.

    Returns:
        The cell, or None when no cell inside the radius qualifies
    """
    grid = game_state.grid
    origin = character.position
    seen = {origin}
    for radius in range(1, config.cover_search_radius + 1):
        ring = [
            pos for pos in grid.positions_in_range(origin, radius)
            if pos not in seen
        ]
        ring.sort(key=lambda p: grid.distance(origin, p))
        for pos in ring:
            seen.add(pos)
            if not game_state.is_walkable(pos, exclude=character.id):
                continue
            evaluation = evaluate(pos)
            if evaluation.cover_score > config.cover_min_score and evaluation.exposure_risk < config.cover_max_exposure:
                return pos
    log.debug("Cover: nothing within %s cells of %s", config.cover_search_radius, character.label())
    return None


def find_overwatch_point(
    game_state: "GameState",
    character: Character,
    evaluate: Callable[[GridPos], "PositionEvaluation"],
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """Current cell if already in cover, else the nearest cover point, else stay."""
    if game_state.grid.is_in_cover(character.position):
        return character.position
    cover = find_cover_point(game_state, character, evaluate, config)
    return cover if cover is not None else character.position


def find_flank_point(
    game_state: "GameState",
    character: Character,
    target: GridPos,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> GridPos:
    """
    Cell `flank_offset` away from the target at +/-90 degrees to the
    attacker -> target bearing. The first walkable side wins.
    """
    grid = game_state.grid
    angle = bearing(character.position, target)
    sides = [
        grid.clamp(*point_at(target, angle + side, config.flank_offset))
        for side in (math.pi / 2, -math.pi / 2)
    ]
    for pos in sides:
        if pos == character.position or game_state.is_walkable(pos, exclude=character.id):
            return pos
    return _fallback(game_state, character, sides[0], "Flank", config.nearest_empty_max_radius)


def find_firing_position(
    game_state: "GameState",
    character: Character,
    target: GridPos,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> Optional[GridPos]:
    """
    Walkable cell other than the character's own within
    `firing_position_radius` of the target whose line to it is clear of
    walls and of other living characters, closest to the character first.

    Returns:
        The cell, or None if every candidate is walled off
    """
    grid = game_state.grid
    occupied = frozenset(game_state.occupied_cells(exclude=(character.id,)))
    candidates = [
        pos for pos in grid.positions_in_range(target, config.firing_position_radius)
        if pos != target
        and pos != character.position
        and game_state.is_walkable(pos, exclude=character.id)
        and grid.has_line_of_sight(pos, target, occupied)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda p: (grid.distance(character.position, p), p[1], p[0]))
