from __future__ import annotations

import random

import pytest

from chessrules.config import Settings
from chessrules.engine.fen import parse_fen
from chessrules.engine.game import Game
from chessrules.engine.legality import legal_moves
from chessrules.engine.move import parse_uci
from chessrules.engine.pieces import Kind
from chessrules.engine.position import Position
from chessrules.search import (
    GreedyStrategy,
    MinimaxStrategy,
    RandomStrategy,
    SearchService,
)


HANGING_QUEEN = "4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1"


def test_random_picks_a_legal_move_reproducibly() -> None:
    p = Position.startpos()
    a = RandomStrategy(random.Random(7)).select(p)
    b = RandomStrategy(random.Random(7)).select(p)
    assert a is not None and a == b
    assert a in legal_moves(p)


def test_strategies_return_none_without_moves() -> None:
    p = parse_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert RandomStrategy(random.Random(0)).select(p) is None
    assert GreedyStrategy(random.Random(0)).select(p) is None
    assert MinimaxStrategy(depth=2).select(p) is None


def test_greedy_takes_the_only_capture() -> None:
    p = parse_fen(HANGING_QUEEN)
    for seed in range(5):
        assert GreedyStrategy(random.Random(seed)).select(p) == parse_uci("d2d5")


def test_greedy_prefers_checks_when_nothing_to_capture() -> None:
    # Ra8+ is the only checking move
    p = parse_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    for seed in range(5):
        assert GreedyStrategy(random.Random(seed)).select(p) == parse_uci("a1a8")


def test_greedy_ignores_en_passant_as_a_capture() -> None:
    # With no ordinary capture or check on offer the choice stays random
    p = parse_fen("k7/8/8/3Pp3/8/8/8/7K w - e6 0 1")
    picks = {GreedyStrategy(random.Random(seed)).select(p) for seed in range(20)}
    assert parse_uci("d5e6") in legal_moves(p)
    assert len(picks) > 1


def test_service_maps_levels_to_strategies() -> None:
    service = SearchService(Settings(ai_level=1), rng=random.Random(1))
    assert isinstance(service.strategy_for_level(), RandomStrategy)
    assert isinstance(service.strategy_for_level(2), GreedyStrategy)
    minimax = service.strategy_for_level(3)
    assert isinstance(minimax, MinimaxStrategy)
    assert (minimax.depth, minimax.root_cap, minimax.node_cap) == (3, 20, 10)
    with pytest.raises(ValueError):
        service.strategy_for_level(4)


def test_service_play_applies_and_returns_result() -> None:
    service = SearchService(rng=random.Random(3))
    game = Game.new()
    result = service.play(game, 2)
    assert result is not None
    assert game.side_to_move.value == "black"
    assert game.move_history_uci() == [result.move.to_uci()]


def test_service_play_completes_promotion() -> None:
    # At depth 1 promoting now is the only way to gain material
    service = SearchService(Settings(search_depth=1), rng=random.Random(0))
    game = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    service.play(game, 3)
    assert game.pending_promotion is None
    assert game.board.piece_at(parse_uci("e7e8").to_sq).kind is Kind.QUEEN


def test_service_returns_none_for_finished_game() -> None:
    service = SearchService(rng=random.Random(0))
    game = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert service.choose_move(game, 1) is None
    assert service.play(game, 3) is None
