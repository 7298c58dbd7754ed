"""
Tactical directive - the standing order handed down by the strategy layer.

Directives usually arrive as JSON produced by an external planner, so they
are modelled with pydantic and validated once at the boundary
(`parse_directive`). Inside the engine they are treated as immutable.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from battlefield.core.types import Coordination, EngagementRange, Objective, Stance
from infra.logger import get_logger

from .errors import InvalidDirectiveError

log = get_logger(__name__)


class Tactics(BaseModel):
    """How the objective should be pursued."""
    model_config = ConfigDict(frozen=True)

    stance: Optional[Stance] = Field(
        default=None,
        description="Behavioral mode; unknown values are treated as absent",
    )
    engagement_range: EngagementRange = Field(
        default=EngagementRange.MEDIUM,
        description="Preferred engagement distance",
    )
    retreat_threshold: float = Field(
        default=0.3, gt=0.0, lt=1.0,
        description="Health fraction at or below which retreat candidates are added",
    )
    coordination: Optional[Coordination] = Field(
        default=None,
        description="How the unit coordinates with allies",
    )

    @field_validator("stance", mode="before")
    @classmethod
    def _unknown_stance_is_absent(cls, value: Any) -> Any:
        if value is None or isinstance(value, Stance):
            return value
        try:
            return Stance(str(value).lower())
        except ValueError:
            log.warning("Unrecognized stance %r, treating as absent", value)
            return None


class TacticalDirective(BaseModel):
    """Standing order: objective, priority targets, tactics and an optional anchor."""
    model_config = ConfigDict(frozen=True)

    type: str = Field(default="tactical_directive")
    objective: Objective = Field(description="High-level goal for the unit")
    priority_targets: List[str] = Field(
        default_factory=list,
        description="Ids of characters that deserve extra attention",
    )
    tactics: Tactics = Field(default_factory=Tactics)
    position: Optional[Tuple[int, int]] = Field(
        default=None,
        description="Optional anchor position to defend or move to",
    )

    @property
    def stance(self) -> Optional[Stance]:
        return self.tactics.stance

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def default_directive() -> TacticalDirective:
    """Directive used when the strategy layer has not set one."""
    return TacticalDirective(
        objective=Objective.DEFEND,
        tactics=Tactics(
            stance=Stance.DEFENSIVE,
            engagement_range=EngagementRange.MEDIUM,
            retreat_threshold=0.3,
            coordination=Coordination.INDIVIDUAL,
        ),
    )


def parse_directive(data: Union[TacticalDirective, Mapping[str, Any]]) -> TacticalDirective:
    """
    Validate a directive coming from outside the engine.

    Raises:
        InvalidDirectiveError: If the mapping does not describe a valid directive
    """
    if isinstance(data, TacticalDirective):
        return data
    try:
        return TacticalDirective.model_validate(dict(data))
    except (ValidationError, TypeError) as exc:
        raise InvalidDirectiveError(f"Invalid tactical directive: {exc}") from exc
