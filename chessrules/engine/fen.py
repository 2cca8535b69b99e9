from __future__ import annotations

from typing import List

from ..errors import InvalidFen, MalformedSquare
from .board import Board
from .castling import CastlingRights
from .move import square_to_str, str_to_square
from .pieces import Color, Piece
from .position import Position


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def parse_fen(fen: str) -> Position:
    """Create a position from a Forsyth–Edwards Notation (FEN) string.

    Args:
        fen (str): FEN string describing the position to load.

    Returns:
        Position: Position initialized with the state encoded in ``fen``.

    Raises:
        InvalidFen: If ``fen`` is empty, has the wrong number of fields, or
            contains invalid piece placement, castling rights, en passant
            square, move counters, or king count.
    """
    if not fen or not isinstance(fen, str):
        raise InvalidFen("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise InvalidFen("FEN must have 6 fields")
    placement, stm, castling, ep, halfmove, fullmove = parts

    ranks = placement.split("/")
    if len(ranks) != 8:
        raise InvalidFen("FEN board must have 8 ranks")
    board = Board.empty()
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise InvalidFen("invalid empty count in FEN rank")
                file_idx += n
            else:
                if file_idx >= 8:
                    raise InvalidFen("too many squares in FEN rank")
                try:
                    piece = Piece.from_symbol(ch)
                except ValueError as e:
                    raise InvalidFen(f"invalid piece in FEN: {ch!r}") from e
                board.squares[rank_idx * 8 + file_idx] = piece
                file_idx += 1
        if file_idx != 8:
            raise InvalidFen("rank does not sum to 8 squares in FEN")

    if stm not in ("w", "b"):
        raise InvalidFen("side to move must be 'w' or 'b'")
    side = Color.WHITE if stm == "w" else Color.BLACK

    try:
        rights = CastlingRights.from_fen(castling)
    except ValueError as e:
        raise InvalidFen(str(e)) from e

    ep_square = None
    if ep != "-":
        try:
            ep_square = str_to_square(ep)
        except MalformedSquare as e:
            raise InvalidFen("invalid en passant square") from e
        if ep_square // 8 not in (2, 5):
            raise InvalidFen("invalid en passant square rank")

    try:
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise InvalidFen("invalid move counters in FEN") from e
    if halfmove_clock < 0 or fullmove_number <= 0:
        raise InvalidFen("invalid move counters in FEN")

    try:
        return Position.from_board(
            board,
            side,
            castling=rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )
    except ValueError as e:
        raise InvalidFen(str(e)) from e


def to_fen(position: Position) -> str:
    """Serialize a position into a normalized FEN string."""
    ranks_str: List[str] = []
    for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
        run = 0
        row = []
        for file_idx in range(8):
            piece = position.board.squares[rank_idx * 8 + file_idx]
            if piece is None:
                run += 1
            else:
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(piece.symbol)
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    stm = "w" if position.side_to_move is Color.WHITE else "b"
    castling = position.castling.to_fen()
    ep = square_to_str(position.ep_square) if position.ep_square is not None else "-"
    return f"{placement} {stm} {castling} {ep} {position.halfmove_clock} {position.fullmove_number}"
