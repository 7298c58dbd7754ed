"""
Tactical decision engine.

Given one character, the characters it sees and a standing directive,
decide the single best action for this turn.
"""

from .actions import TacticalAction
from .config import DEFAULT_CONFIG, TacticalConfig
from .context import TacticalContext, TurnHistory
from .directive import Tactics, TacticalDirective, default_directive, parse_directive
from .errors import InvalidConfigError, InvalidDirectiveError, TacticsError, UnknownControllerError
from .executor import TacticalExecutor, evaluate_situation, rank_actions, score_action
from .generator import ActionGenerator, STANCE_GENERATORS
from .positions import PositionEvaluation, PositionEvaluator
from .threats import ThreatAnalyzer, ThreatAssessment

__all__ = [
    "TacticalAction",
    "DEFAULT_CONFIG",
    "TacticalConfig",
    "TacticalContext",
    "TurnHistory",
    "Tactics",
    "TacticalDirective",
    "default_directive",
    "parse_directive",
    "InvalidConfigError",
    "InvalidDirectiveError",
    "TacticsError",
    "UnknownControllerError",
    "TacticalExecutor",
    "evaluate_situation",
    "rank_actions",
    "score_action",
    "ActionGenerator",
    "STANCE_GENERATORS",
    "PositionEvaluation",
    "PositionEvaluator",
    "ThreatAnalyzer",
    "ThreatAssessment",
]
