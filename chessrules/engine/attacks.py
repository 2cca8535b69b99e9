from __future__ import annotations

from typing import Callable, FrozenSet, Iterable, Set, Tuple

from .board import Board
from .movegen import bishop_moves, king_moves, knight_moves, pawn_captures, rook_moves
from .pieces import Color, Kind


Generator = Callable[[int, Color, Board], Set[int]]


def _pawn_attack_squares(sq: int, color: Color, board: Board) -> Set[int]:
    # Diagonals of a defending pawn point at the squares an enemy pawn attacks from.
    return pawn_captures(sq, color, board)


# Each probe generates as if ``defender``'s piece of that kind stood on the
# square and looks for an enemy attacker of a matching kind at the end.
_PROBES: Tuple[Tuple[Generator, FrozenSet[Kind]], ...] = (
    (rook_moves, frozenset({Kind.ROOK, Kind.QUEEN})),
    (bishop_moves, frozenset({Kind.BISHOP, Kind.QUEEN})),
    (_pawn_attack_squares, frozenset({Kind.PAWN})),
    (knight_moves, frozenset({Kind.KNIGHT})),
    (king_moves, frozenset({Kind.KING})),
)


def is_attacked(sq: int, defender: Color, board: Board) -> bool:
    """Return True if an opponent of ``defender`` could capture on ``sq``.

    The board is only read. Castling hops are never considered attacks.
    """
    for gen, attackers in _PROBES:
        for target in gen(sq, defender, board):
            piece = board.squares[target]
            if piece is not None and piece.color is not defender and piece.kind in attackers:
                return True
    return False


def any_attacked(squares: Iterable[int], defender: Color, board: Board) -> bool:
    return any(is_attacked(sq, defender, board) for sq in squares)
