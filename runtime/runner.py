from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from agents import BaseAgent, TacticalAgent, create_agent_from_spec, default_spec
from battlefield.entities.character import Character
from battlefield.scenario import Scenario
from battlefield.world.game_state import GameState
from infra.logger import get_logger
from tactics.actions import TacticalAction
from tactics.directive import TacticalDirective

from .frame import TurnFrame

log = get_logger(__name__)

CommandCallback = Callable[[str, TacticalAction], None]


class TurnRunner:
    """
    Turn orchestrator around a scenario.

    Each turn it:
    - resets every controller's turn history
    - computes each living character's visible set
    - asks each team controller for its decisions
    - hands every command to `on_command` (the external execution layer)

    The runner never applies commands itself; push the resulting snapshot
    back with update_state().
    """

    def __init__(
        self,
        scenario: Scenario,
        on_command: Optional[CommandCallback] = None,
        sight_range: Optional[float] = None,
    ):
        self.scenario = scenario.clone()
        self.on_command = on_command
        self.sight_range = sight_range if sight_range is not None else self.scenario.sight_range

        self._state = self.scenario.build_state()
        self._agents: Dict[str, BaseAgent] = {
            team: self._agent_for_team(team) for team in self._state.teams
        }
        self._done = False
        self._last_frame: Optional[TurnFrame] = None

        log.info(
            "TurnRunner initialized: teams=%s seed=%s sight_range=%s",
            list(self._agents), self.scenario.seed, self.sight_range,
        )

    # ------------------------------------------------------------------#
    # Core API
    # ------------------------------------------------------------------#
    def step(self) -> TurnFrame:
        """
        Run one decision turn for every team.

        Raises:
            RuntimeError: If the session was stopped
        """
        if self._done:
            raise RuntimeError("Session is stopped")

        self._state.turn += 1
        visible = self.visible_map()

        decisions: Dict[str, TacticalAction] = {}
        for team, agent in self._agents.items():
            agent.start_turn()
            decisions.update(agent.decide(self._state, visible))

        for character_id, action in decisions.items():
            if self.on_command is not None:
                self.on_command(character_id, action)

        log.info("Turn %d: %d decisions", self._state.turn, len(decisions))
        self._last_frame = TurnFrame(
            turn=self._state.turn,
            state=self._state,
            decisions=decisions,
            visible={cid: [c.id for c in seen] for cid, seen in visible.items()},
            controllers={team: agent.name for team, agent in self._agents.items()},
        )
        return self._last_frame

    def evaluate(self, character_id: str) -> TacticalAction:
        """
        Decide for a single character without starting a new turn.

        Raises:
            KeyError: If no living character has that id
            RuntimeError: If the team's controller is not tactical
        """
        character = self._state.get_character(character_id)
        if character is None or not character.alive:
            raise KeyError(f"No living character {character_id!r}")
        agent = self._agents.get(character.team)
        if not isinstance(agent, TacticalAgent):
            raise RuntimeError(f"Team {character.team!r} is not driven by a tactical controller")
        return agent.executor.evaluate_situation(character, self._state, self._visible_to(character))

    def set_directive(self, team: str, directive: Mapping[str, Any] | TacticalDirective) -> TacticalDirective:
        """
        Raises:
            KeyError: If the team has no controller
            RuntimeError: If the team's controller does not accept directives
            InvalidDirectiveError: If the directive fails validation
        """
        agent = self._agents.get(team)
        if agent is None:
            raise KeyError(f"Unknown team {team!r}")
        if not isinstance(agent, TacticalAgent):
            raise RuntimeError(f"Team {team!r} does not accept directives")
        return agent.set_directive(directive)

    def update_state(self, state: GameState | Mapping[str, Any]) -> None:
        """Replace the snapshot after the execution layer applied commands."""
        if not isinstance(state, GameState):
            state = GameState.from_dict(state)
        state.turn = max(state.turn, self._state.turn)
        self._state = state
        for team in state.teams:
            if team not in self._agents:
                self._agents[team] = self._agent_for_team(team)

    def stop(self) -> None:
        """End the session and reset every controller."""
        if self._done:
            return
        self._done = True
        for agent in self._agents.values():
            agent.reset()
        log.info("Session stopped at turn %d", self._state.turn)

    # ------------------------------------------------------------------#
    # Helpers
    # ------------------------------------------------------------------#
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def turn(self) -> int:
        return self._state.turn

    @property
    def done(self) -> bool:
        return self._done

    @property
    def agents(self) -> Dict[str, BaseAgent]:
        return dict(self._agents)

    def visible_map(self) -> Dict[str, List[Character]]:
        return {c.id: self._visible_to(c) for c in self._state.living_characters()}

    def _visible_to(self, character: Character) -> List[Character]:
        return self._state.visible_characters(character, self.sight_range)

    def _agent_for_team(self, team: str) -> BaseAgent:
        spec = self.scenario.agent_for(team) or default_spec(team)
        return create_agent_from_spec(spec, seed=self.scenario.seed)
