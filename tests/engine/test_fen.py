from __future__ import annotations

import pytest

from chessrules.engine.fen import STARTPOS_FEN, parse_fen, to_fen
from chessrules.engine.pieces import Color, Kind, Piece
from chessrules.errors import InvalidFen


def test_startpos_round_trip() -> None:
    p = parse_fen(STARTPOS_FEN)
    assert to_fen(p) == STARTPOS_FEN
    assert p.side_to_move is Color.WHITE
    assert p.king_squares == {Color.WHITE: 4, Color.BLACK: 60}


@pytest.mark.parametrize(
    "fen",
    [
        # Mixed pieces and empty squares, some castling rights
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 2 3",
        # No castling rights, ep target present on rank 3 or 6
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - e3 0 1",
        # All castling rights
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
        # One right per side
        "r3k2r/8/8/8/8/8/8/R3K2R b Kq - 5 40",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    assert to_fen(parse_fen(fen)) == fen


def test_placement_maps_to_squares() -> None:
    p = parse_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1")
    assert p.board.squares[35] == Piece(Color.WHITE, Kind.PAWN)  # d5
    assert p.board.squares[36] == Piece(Color.BLACK, Kind.PAWN)  # e5
    assert p.ep_square == 44  # e6


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "8/8/8/8/8/8/8 w - - 0 1",  # not enough ranks
        "4k3/8/8/8/8/8/8/4K3 w - - 0",  # missing fields
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",  # bad side to move
        "4k3/8/8/8/8/8/8/4K3 w A - 0 1",  # bad castling
        "4k3/8/8/8/8/8/8/4K3 w - z9 0 1",  # bad ep square
        "4k3/8/8/8/8/8/8/4K3 w - e4 0 1",  # ep square on wrong rank
        "4k3/8/8/8/8/8/8/4K3 w - - -1 1",  # bad halfmove
        "4k3/8/8/8/8/8/8/4K3 w - - 0 0",  # bad fullmove
        "9/8/8/8/8/8/8/8 w - - 0 1",  # too many squares
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",  # bad piece
        "8/8/8/8/8/8/8/4K3 w - - 0 1",  # missing black king
        "4k3/8/8/8/8/8/8/3KK3 w - - 0 1",  # two white kings
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(InvalidFen):
        parse_fen(fen)


def test_invalid_fen_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_fen("not a fen")
