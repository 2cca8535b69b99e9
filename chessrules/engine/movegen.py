"""Pseudo-legal move generation per piece kind.

Generators answer "where could this piece go given occupancy" and ignore
whether the mover's own king ends up attacked; see ``legality`` for that.
Every generator returns a set of destination square indices.
"""

from __future__ import annotations

from typing import Iterable, Optional, Set, Tuple

from .board import Board
from .move import offset
from .pieces import Color, Kind, Piece


Direction = Tuple[int, int]

ROOK_DIRS: Tuple[Direction, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
BISHOP_DIRS: Tuple[Direction, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
QUEEN_DIRS: Tuple[Direction, ...] = ROOK_DIRS + BISHOP_DIRS
KNIGHT_OFFSETS: Tuple[Direction, ...] = (
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
)
KING_OFFSETS: Tuple[Direction, ...] = QUEEN_DIRS


def slider_moves(sq: int, color: Color, board: Board, dirs: Iterable[Direction]) -> Set[int]:
    """Walk each ray until the edge, a friendly blocker, or a capture."""
    out: Set[int] = set()
    for df, dr in dirs:
        cur = offset(sq, df, dr)
        while cur is not None:
            occupant = board.squares[cur]
            if occupant is None:
                out.add(cur)
            else:
                if occupant.color is not color:
                    out.add(cur)
                break
            cur = offset(cur, df, dr)
    return out


def rook_moves(sq: int, color: Color, board: Board) -> Set[int]:
    return slider_moves(sq, color, board, ROOK_DIRS)


def bishop_moves(sq: int, color: Color, board: Board) -> Set[int]:
    return slider_moves(sq, color, board, BISHOP_DIRS)


def queen_moves(sq: int, color: Color, board: Board) -> Set[int]:
    return slider_moves(sq, color, board, QUEEN_DIRS)


def _step_moves(sq: int, color: Color, board: Board, offsets: Iterable[Direction]) -> Set[int]:
    out: Set[int] = set()
    for df, dr in offsets:
        to = offset(sq, df, dr)
        if to is None:
            continue
        occupant = board.squares[to]
        if occupant is not None and occupant.color is color:
            continue
        out.add(to)
    return out


def knight_moves(sq: int, color: Color, board: Board) -> Set[int]:
    return _step_moves(sq, color, board, KNIGHT_OFFSETS)


def king_moves(
    sq: int, color: Color, board: Board, castle_targets: Iterable[int] = ()
) -> Set[int]:
    """Adjacent squares plus any castling hops the caller already validated.

    Attack detection passes no ``castle_targets``: a castling hop never
    attacks anything.
    """
    out = _step_moves(sq, color, board, KING_OFFSETS)
    out.update(castle_targets)
    return out


def pawn_pushes(sq: int, color: Color, board: Board) -> Set[int]:
    out: Set[int] = set()
    one = offset(sq, 0, color.forward)
    if one is None or board.squares[one] is not None:
        return out
    out.add(one)
    if sq // 8 == color.pawn_rank:
        two = offset(one, 0, color.forward)
        if two is not None and board.squares[two] is None:
            out.add(two)
    return out


def pawn_captures(
    sq: int, color: Color, board: Board, ep_square: Optional[int] = None
) -> Set[int]:
    """Forward diagonals holding an enemy, or the empty en-passant target."""
    out: Set[int] = set()
    for df in (-1, 1):
        to = offset(sq, df, color.forward)
        if to is None:
            continue
        occupant = board.squares[to]
        if occupant is not None:
            if occupant.color is not color:
                out.add(to)
        elif to == ep_square:
            out.add(to)
    return out


def pawn_moves(sq: int, color: Color, board: Board, ep_square: Optional[int] = None) -> Set[int]:
    return pawn_pushes(sq, color, board) | pawn_captures(sq, color, board, ep_square)


def pseudo_legal_moves(
    sq: int,
    piece: Piece,
    board: Board,
    *,
    ep_square: Optional[int] = None,
    castle_targets: Iterable[int] = (),
) -> Set[int]:
    """Dispatch to the generator for ``piece.kind``.

    Args:
        sq (int): Square the piece stands on (or is imagined on).
        piece (Piece): Moving piece.
        board (Board): Occupancy snapshot; never mutated.
        ep_square (Optional[int]): Current en-passant target, if any.
        castle_targets (Iterable[int]): King castling destinations to append.

    Returns:
        Set[int]: Pseudo-legal destination squares.
    """
    kind = piece.kind
    color = piece.color
    if kind is Kind.PAWN:
        return pawn_moves(sq, color, board, ep_square)
    if kind is Kind.KNIGHT:
        return knight_moves(sq, color, board)
    if kind is Kind.BISHOP:
        return bishop_moves(sq, color, board)
    if kind is Kind.ROOK:
        return rook_moves(sq, color, board)
    if kind is Kind.QUEEN:
        return queen_moves(sq, color, board)
    return king_moves(sq, color, board, castle_targets)
