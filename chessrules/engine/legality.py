from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .attacks import is_attacked
from .castling import castling_targets
from .move import Move
from .movegen import pseudo_legal_moves
from .pieces import PROMOTION_KINDS, Color, Kind
from .position import Position


def filter_by_check_safety(candidates: Iterable[int], from_sq: int, position: Position) -> Set[int]:
    """Drop destinations that would leave the mover's own king attacked.

    Each candidate is played on a scratch copy of the board. For a king move
    the destination is tested; for any other piece the king's current
    square (from the position's king cache) is tested.
    """
    board = position.board
    piece = board.squares[from_sq]
    if piece is None:
        return set()
    color = piece.color
    is_king = piece.kind is Kind.KING
    is_pawn = piece.kind is Kind.PAWN
    king_sq = position.king_square(color)
    ep = position.ep_square if color is position.side_to_move else None

    safe: Set[int] = set()
    for to_sq in candidates:
        scratch = board.copy()
        if is_pawn and to_sq == ep and scratch.squares[to_sq] is None and (to_sq - from_sq) % 8:
            scratch.squares[to_sq - 8 * color.forward] = None
        scratch.move_piece(from_sq, to_sq)
        probe = to_sq if is_king else king_sq
        if not is_attacked(probe, color, scratch):
            safe.add(to_sq)
    return safe


def pseudo_legal_destinations(position: Position, sq: int) -> Set[int]:
    board = position.board
    piece = board.piece_at(sq)
    if piece is None:
        return set()
    # The en-passant target and castling only ever belong to the side to move.
    own_turn = piece.color is position.side_to_move
    castle: List[int] = []
    if piece.kind is Kind.KING and own_turn:
        castle = castling_targets(piece.color, board, position.castling)
    return pseudo_legal_moves(
        sq,
        piece,
        board,
        ep_square=position.ep_square if own_turn else None,
        castle_targets=castle,
    )


def legal_destinations(position: Position, sq: int) -> Set[int]:
    """Legal destination squares for the piece on ``sq`` (empty if blank)."""
    return filter_by_check_safety(pseudo_legal_destinations(position, sq), sq, position)


def legal_moves(position: Position, color: Optional[Color] = None) -> List[Move]:
    """Every legal move of ``color`` (default: side to move).

    Order is stable: origins a1..h8, destinations ascending, and one move
    per promotion kind (queen, rook, bishop, knight) for last-rank pawn moves.
    """
    c = position.side_to_move if color is None else color
    moves: List[Move] = []
    for sq, piece in position.board.pieces(c):
        for to_sq in sorted(legal_destinations(position, sq)):
            if piece.kind is Kind.PAWN and to_sq // 8 == c.last_rank:
                moves.extend(Move(sq, to_sq, kind) for kind in PROMOTION_KINDS)
            else:
                moves.append(Move(sq, to_sq))
    return moves


def has_legal_moves(position: Position, color: Optional[Color] = None) -> bool:
    c = position.side_to_move if color is None else color
    for sq, _ in position.board.pieces(c):
        if legal_destinations(position, sq):
            return True
    return False
