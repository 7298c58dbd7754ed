"""
Tunable numbers for threat scoring, candidate generation and ranking.

Every constant the engine uses lives on TacticalConfig so a scenario or a
test can override it without touching code.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .errors import InvalidConfigError


@dataclass(frozen=True)
class TacticalConfig:
    # --- threat analysis ---
    base_threat: int = 50
    health_threat_weight: int = 20
    # (max distance, bonus), closest band wins
    threat_distance_bands: Tuple[Tuple[float, int], ...] = ((2.0, 30), (5.0, 20), (10.0, 10))
    ranged_threat_bonus: int = 20
    no_los_threat_penalty: int = 20
    priority_target_bonus: int = 30

    melee_reach: float = 1.5
    melee_effectiveness: int = 90
    ranged_effectiveness_bands: Tuple[Tuple[float, int], ...] = ((5.0, 80), (10.0, 60), (15.0, 40))
    out_of_range_effectiveness: int = 10

    # --- position evaluation ---
    cover_score_in_cover: int = 70
    cover_score_exposed: int = 30
    exposure_per_visible_threat: int = 25
    neutral_tactical_value: int = 50
    objective_distance_weight: float = 2.0

    # --- candidate generation ---
    patrol_priority: int = 40
    objective_move_priority: int = 50
    melee_attack_priority: int = 90
    ranged_attack_priority: int = 80
    ranged_weapon_bonus: int = 20
    long_range_penalty: int = 10
    long_range_distance: float = 10.0
    seek_los_priority: int = 85
    seek_los_max_distance: float = 15.0
    close_distance_priority: int = 75
    maneuver_priority: int = 60
    close_distance_threshold: float = 5.0

    take_cover_priority: int = 85
    exposure_cover_trigger: int = 60
    cover_min_score: int = 60
    cover_max_exposure: int = 40
    cover_search_radius: int = 5
    defensive_near_attack_priority: int = 80
    defensive_far_attack_priority: int = 70
    defensive_near_distance: float = 5.0
    defensive_seek_los_priority: int = 75
    engagement_range_priority: int = 60
    engagement_range_distance: float = 10.0
    defensive_overwatch_priority: int = 50
    overwatch_min_points: int = 40

    flank_offset: float = 5.0
    flank_arrival_distance: float = 1.0
    flank_move_priority: int = 80
    flank_attack_priority: int = 85

    vantage_move_priority: int = 70
    suppressive_overwatch_priority: int = 80

    retreat_distance: float = 8.0
    retreat_priority: int = 95
    fighting_retreat_priority: int = 60
    fighting_retreat_distance: float = 5.0

    speech_priority: int = 30
    speech_threat_distance: float = 10.0
    speech_ally_distance: float = 3.0
    speech_content: str = "Hold this position, I'm covering your flank."
    speech_answers: Tuple[str, ...] = ("Understood", "I need support", "Changing position")

    # --- bounded searches ---
    patrol_max_attempts: int = 10
    patrol_max_distance: int = 8
    patrol_min_distance: int = 2
    patrol_reduction_interval: int = 3
    patrol_distance_reduction: int = 5
    search_max_attempts: int = 6
    search_base_distance: float = 5.0
    search_distance_variance: float = 3.0
    search_angle_variance: float = 1.0471975511965976  # pi / 3
    scout_max_attempts: int = 12
    retreat_max_attempts: int = 8
    retreat_angle_variance: float = 1.0471975511965976
    nearest_empty_max_radius: int = 10
    firing_position_radius: int = 8
    default_priority: int = 10

    # --- scoring ---
    default_move_cost: int = 20
    default_shoot_cost: int = 30
    default_overwatch_cost: int = 40
    speech_cost: int = 0
    reload_cost: int = 20
    heal_cost: int = 30
    fallback_cost: int = 20
    default_points_left: int = 100
    unaffordable_penalty: int = 50
    low_points_threshold: int = 40
    low_points_bonus: int = 10
    repeat_penalty: int = 10
    attack_objective_bonus: int = 15
    defend_objective_bonus: int = 15
    retreat_objective_bonus: int = 20
    close_threat_distance: float = 3.0
    close_threat_attack_bonus: int = 10
    far_threat_distance: float = 10.0
    far_threat_move_bonus: int = 5

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = [list(v) if isinstance(v, tuple) else v for v in value]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TacticalConfig":
        """
        Construct from a dict of overrides; missing keys keep their defaults.

        Raises:
            InvalidConfigError: On keys TacticalConfig does not define
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigError(f"Unknown tactical config keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, list):
                value = tuple(tuple(v) if isinstance(v, list) else v for v in value)
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def load_json(cls, path: str | Path) -> "TacticalConfig":
        """Load overrides from a JSON file."""
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))


DEFAULT_CONFIG = TacticalConfig()
