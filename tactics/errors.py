"""Exceptions raised at the engine's input boundaries."""

from __future__ import annotations


class TacticsError(Exception):
    """Base class for tactical engine errors."""


class InvalidDirectiveError(TacticsError, ValueError):
    """A directive handed in by the strategy layer failed validation."""


class InvalidConfigError(TacticsError, ValueError):
    """A tactical configuration mapping contains unknown or malformed keys."""


class UnknownControllerError(TacticsError, ValueError):
    """A controller spec names a type that is neither registered nor importable."""
