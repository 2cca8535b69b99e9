"""Exception hierarchy for the rules engine.

Every error derives from ``ValueError`` so callers that only care about
"bad input" can keep catching the builtin, while adapters map the specific
subclasses onto protocol-level responses.
"""

from __future__ import annotations


class ChessRulesError(ValueError):
    """Base class for all engine errors."""


class MalformedSquare(ChessRulesError):
    """Square name or index outside a1..h8 / 0..63."""


class InvalidMove(ChessRulesError):
    """Destination is not among the legal destinations of the piece."""


class IllegalWhileTerminal(ChessRulesError):
    """A mutating call was made after checkmate or stalemate."""


class PromotionPending(ChessRulesError):
    """A pawn reached the last rank and is waiting for a promotion choice."""


class InvalidFen(ChessRulesError):
    """FEN text could not be parsed into a position."""


class EngineError(ChessRulesError):
    """An external UCI engine failed to start or to answer."""
