from pathlib import Path
import os
import sys

# Add repository root to sys.path so tests can import local modules without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the HTTP adapter from writing log files during tests.
os.environ.setdefault("TACTICS_LOG_FILE", "none")

import pytest

from battlefield import ActionBudget, Character, Equipment, GameState, Grid, Weapon
from battlefield.core.types import WeaponCategory

RIFLE = Weapon("rifle", WeaponCategory.RANGED)
KNIFE = Weapon("knife", WeaponCategory.MELEE)


@pytest.fixture
def make_character():
    def factory(cid, pos, team="player", health=100, ranged=True, points=None, **costs):
        equipment = Equipment(primary=RIFLE if ranged else KNIFE)
        budget = None
        if points is not None:
            budget = ActionBudget(
                points_left=points,
                general=costs.get("general", {}),
                ranged_combat=costs.get("ranged_combat", {}),
                melee_combat=costs.get("melee_combat", {}),
            )
        return Character(id=cid, position=pos, team=team, health=health, equipment=equipment, actions=budget)

    return factory


@pytest.fixture
def make_state():
    def factory(*characters, width=40, height=40, blocked=(), alliances=None):
        return GameState(Grid(width, height, blocked), characters, alliances=alliances)

    return factory
