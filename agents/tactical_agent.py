"""
Tactical controller: drives one team with the tactical decision engine.

Each controller owns one TacticalContext (directive, turn history, seeded
randomness) for its whole session.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from infra.logger import get_logger
from tactics.actions import TacticalAction
from tactics.config import TacticalConfig
from tactics.directive import TacticalDirective
from tactics.executor import TacticalExecutor

from .base_agent import BaseAgent
from .registry import register_agent

if TYPE_CHECKING:
    from battlefield.entities.character import Character
    from battlefield.world.game_state import GameState

log = get_logger(__name__)


@register_agent("tactical")
class TacticalAgent(BaseAgent):
    """
    Decision process:
    - Evaluate living team members in roster order
    - Each evaluation sees only that character's visible set
    - Turn history is cleared on start_turn()
    """

    def __init__(
        self,
        team: str,
        name: Optional[str] = None,
        seed: Optional[int] = None,
        directive: Optional[Mapping[str, Any] | TacticalDirective] = None,
        config: Optional[Mapping[str, Any]] = None,
        **_: Any,
    ):
        """
        Args:
            team: Team to control
            name: Controller name (default: "TacticalAgent")
            seed: Seed for the randomness source (None = random)
            directive: Initial standing directive (dict or model)
            config: Overrides for TacticalConfig

        Raises:
            InvalidDirectiveError: If the directive fails validation
            InvalidConfigError: If the config has unknown keys
        """
        super().__init__(team, name)
        self.seed = seed
        self._initial_directive = directive
        self._config = TacticalConfig.from_dict(config) if config else None
        self.executor = TacticalExecutor(seed=seed, config=self._config)
        if directive is not None:
            self.executor.set_directive(directive)

    @property
    def directive(self) -> TacticalDirective:
        return self.executor.directive

    def set_directive(self, directive: Mapping[str, Any] | TacticalDirective) -> TacticalDirective:
        return self.executor.set_directive(directive)

    def start_turn(self) -> None:
        self.executor.clear_turn_actions()

    def decide(
        self,
        game_state: "GameState",
        visible: Mapping[str, List["Character"]],
    ) -> Dict[str, TacticalAction]:
        decisions: Dict[str, TacticalAction] = {}
        for character in game_state.team_characters(self.team):
            action = self.executor.evaluate_situation(character, game_state, visible.get(character.id, []))
            decisions[character.id] = action
        log.debug("%s decided %d actions", self.name, len(decisions))
        return decisions

    def reset(self) -> None:
        """Fresh context: same seed, initial directive restored."""
        self.executor = TacticalExecutor(seed=self.seed, config=self._config)
        if self._initial_directive is not None:
            self.executor.set_directive(self._initial_directive)
