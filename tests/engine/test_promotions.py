from __future__ import annotations

import pytest

from chessrules.engine.fen import parse_fen
from chessrules.engine.game import Game
from chessrules.engine.legality import legal_moves
from chessrules.engine.move import parse_uci, str_to_square
from chessrules.engine.movegen import queen_moves
from chessrules.engine.pieces import Color, Kind, Piece
from chessrules.errors import InvalidMove, PromotionPending


def _uci_set(fen: str) -> set[str]:
    return {m.to_uci() for m in legal_moves(parse_fen(fen))}


def test_white_pawn_push_promotions() -> None:
    assert _uci_set("k7/4P3/8/8/8/8/8/4K3 w - - 0 1") >= {"e7e8q", "e7e8r", "e7e8b", "e7e8n"}


def test_white_pawn_capture_promotion() -> None:
    assert _uci_set("3rk3/4P3/8/8/8/8/8/4K3 w - - 0 1") >= {"e7d8q", "e7d8r", "e7d8b", "e7d8n"}


def test_black_pawn_push_promotions() -> None:
    assert _uci_set("4k3/8/8/8/8/8/3p4/K7 b - - 0 1") >= {"d2d1q", "d2d1r", "d2d1b", "d2d1n"}


def test_promotion_waits_for_choice_then_becomes_queen() -> None:
    game = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    e7, e8 = str_to_square("e7"), str_to_square("e8")

    result = game.apply_move(e7, e8)
    assert result.promotion_pending
    assert game.pending_promotion == e8
    assert game.side_to_move is Color.WHITE
    assert game.board.piece_at(e8) == Piece(Color.WHITE, Kind.PAWN)
    with pytest.raises(PromotionPending):
        game.apply_move(str_to_square("e1"), str_to_square("e2"))

    done = game.promote(Kind.QUEEN)
    assert not done.promotion_pending
    assert game.pending_promotion is None
    assert game.side_to_move is Color.BLACK
    assert game.board.piece_at(e8) == Piece(Color.WHITE, Kind.QUEEN)
    assert game.move_history_uci() == ["e7e8q"]

    # The new queen moves like a queen
    dests = game.legal_destinations(e8)
    assert dests == queen_moves(e8, Color.WHITE, game.board)
    assert {str_to_square("a4"), str_to_square("h8"), str_to_square("e2")} <= dests


def test_promotion_supplied_up_front() -> None:
    game = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    game.apply_move(str_to_square("e7"), str_to_square("e8"), Kind.KNIGHT)
    assert game.board.piece_at(str_to_square("e8")) == Piece(Color.WHITE, Kind.KNIGHT)
    assert game.side_to_move is Color.BLACK


def test_promotion_rejects_king_and_pawn() -> None:
    game = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    game.apply_move(str_to_square("e7"), str_to_square("e8"))
    with pytest.raises(InvalidMove):
        game.promote(Kind.KING)
    with pytest.raises(InvalidMove):
        game.promote(Kind.PAWN)
    assert game.pending_promotion == str_to_square("e8")


def test_promote_without_pending_pawn_is_invalid() -> None:
    with pytest.raises(InvalidMove):
        Game.new().promote(Kind.QUEEN)


def test_promotion_kind_on_ordinary_move_is_invalid() -> None:
    game = Game.new()
    with pytest.raises(InvalidMove):
        game.apply_move(str_to_square("e2"), str_to_square("e4"), Kind.QUEEN)
    assert game.history == []


def test_default_promotion_only_touches_bare_last_rank_pawn_moves() -> None:
    p = parse_fen("k7/4P3/8/8/8/8/3P4/4K3 w - - 0 1")
    assert p.with_default_promotion(parse_uci("e7e8")) == parse_uci("e7e8q")
    assert p.with_default_promotion(parse_uci("e7e8n")) == parse_uci("e7e8n")
    assert p.with_default_promotion(parse_uci("d2d4")) == parse_uci("d2d4")
    assert p.with_default_promotion(parse_uci("e1f1")) == parse_uci("e1f1")
