from __future__ import annotations

import pytest

from chessrules.engine.fen import STARTPOS_FEN, parse_fen, to_fen
from chessrules.engine.perft import divide, perft
from chessrules.engine.position import Position


def test_perft_startpos_depths_1_3() -> None:
    p = parse_fen(STARTPOS_FEN)
    assert perft(p, 0) == 1
    assert perft(p, 1) == 20
    assert perft(p, 2) == 400
    assert perft(p, 3) == 8902


def test_perft_leaves_position_untouched() -> None:
    p = Position.startpos()
    perft(p, 2)
    assert to_fen(p) == STARTPOS_FEN


def test_perft_kiwipete_depth_2() -> None:
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    p = parse_fen(fen)
    assert perft(p, 1) == 48
    assert perft(p, 2) == 2039


def test_perft_endgame_with_pins_and_ep() -> None:
    # "Position 3" from the standard perft suite
    p = parse_fen("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1")
    assert perft(p, 1) == 14
    assert perft(p, 2) == 191
    assert perft(p, 3) == 2812


def test_divide_sums_to_perft() -> None:
    p = Position.startpos()
    split = divide(p, 2)
    assert len(split) == 20
    assert all(v == 20 for v in split.values())
    assert sum(split.values()) == perft(p, 2)


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        perft(Position.startpos(), -1)
    with pytest.raises(ValueError):
        divide(Position.startpos(), 0)
