"""Board model, move generation, check detection and game state."""

from __future__ import annotations

from .board import Board
from .game import Game, MoveResult, Outcome
from .move import Move, parse_uci, square_to_str, str_to_square
from .pieces import Color, Kind, Piece
from .position import Position

__all__ = [
    "Board",
    "Color",
    "Game",
    "Kind",
    "Move",
    "MoveResult",
    "Outcome",
    "Piece",
    "Position",
    "parse_uci",
    "square_to_str",
    "str_to_square",
]
