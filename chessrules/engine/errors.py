from __future__ import annotations


class ChessRulesError(Exception):
    """Base class for every error raised by the rules engine."""


class InvalidArgumentError(ChessRulesError, ValueError):
    """A required argument is missing or malformed (e.g. no promotion choice)."""


class IllegalStateError(ChessRulesError, RuntimeError):
    """The game state cannot support the requested operation."""


class FenError(ChessRulesError, ValueError):
    """A position description could not be parsed."""
