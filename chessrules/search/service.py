from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..config import Settings
from ..engine.game import Game, MoveResult
from ..engine.legality import legal_moves
from ..engine.move import Move
from ..engine.pieces import Color, Kind
from ..engine.position import Position
from ..eval import DRAW_SCORE, MATE_SCORE, evaluate
from .external import ExternalEngineStrategy


logger = logging.getLogger(__name__)

LEVEL_RANDOM = 1
LEVEL_GREEDY = 2
LEVEL_MINIMAX = 3
LEVELS = (LEVEL_RANDOM, LEVEL_GREEDY, LEVEL_MINIMAX)

INF = 10_000_000


class MoveStrategy(Protocol):
    name: str

    def select(self, position: Position) -> Optional[Move]:
        """Return a legal move for the side to move, or None if it has none."""
        ...


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    nodes: int
    depth: int
    time_ms: int


class RandomStrategy:
    """Uniform choice among all legal moves."""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def select(self, position: Position) -> Optional[Move]:
        moves = legal_moves(position)
        if not moves:
            return None
        return self.rng.choice(moves)


class GreedyStrategy:
    """Prefer captures, then checks, then anything."""

    name = "greedy"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def select(self, position: Position) -> Optional[Move]:
        moves = legal_moves(position)
        if not moves:
            return None
        board = position.board
        mover = position.side_to_move

        captures: List[Move] = []
        for m in moves:
            target = board.squares[m.to_sq]
            if target is not None and target.color is not mover:
                captures.append(m)
        if captures:
            return self.rng.choice(captures)

        checks: List[Move] = []
        for m in moves:
            child = position.copy()
            child.push(m)
            if child.in_check(mover.opposite):
                checks.append(m)
        if checks:
            return self.rng.choice(checks)

        return self.rng.choice(moves)


class MinimaxStrategy:
    """Depth-bounded minimax with alpha-beta pruning over material.

    Scores are white-positive: white maximizes, black minimizes. Only the
    first ``root_cap`` moves at the root and ``node_cap`` moves at inner
    nodes are explored, in generation order (a1..h8 origins). This bounds
    the work per reply; it is not meant to find the best move.
    """

    name = "minimax"

    def __init__(self, depth: int = 3, root_cap: int = 20, node_cap: int = 10) -> None:
        if depth < 1:
            raise ValueError("depth must be >= 1")
        if root_cap < 1 or node_cap < 1:
            raise ValueError("branch caps must be >= 1")
        self.depth = depth
        self.root_cap = root_cap
        self.node_cap = node_cap
        self._nodes = 0

    def select(self, position: Position) -> Optional[Move]:
        return self.search(position).best_move

    def search(self, position: Position) -> SearchResult:
        start = time.perf_counter()
        self._nodes = 0
        moves = _search_moves(position)
        if not moves:
            score = self._terminal_score(position, self.depth)
            return SearchResult(None, score, 0, self.depth, _elapsed_ms(start))

        maximizing = position.side_to_move is Color.WHITE
        alpha, beta = -INF, INF
        best_move: Optional[Move] = None
        best_score = -INF if maximizing else INF
        for m in moves[: self.root_cap]:
            child = position.copy()
            child.push(m)
            self._nodes += 1
            score = self._minimax(child, self.depth - 1, alpha, beta)
            if best_move is None or (score > best_score if maximizing else score < best_score):
                best_move, best_score = m, score
            if maximizing:
                alpha = max(alpha, score)
            else:
                beta = min(beta, score)

        result = SearchResult(best_move, best_score, self._nodes, self.depth, _elapsed_ms(start))
        logger.debug(
            "minimax done",
            extra={
                "best_move": best_move.to_uci() if best_move else None,
                "score": best_score,
                "nodes": result.nodes,
                "time_ms": result.time_ms,
            },
        )
        return result

    def _minimax(self, position: Position, depth: int, alpha: int, beta: int) -> int:
        if depth == 0:
            return evaluate(position.board)
        moves = _search_moves(position)
        if not moves:
            return self._terminal_score(position, depth)

        if position.side_to_move is Color.WHITE:
            value = -INF
            for m in moves[: self.node_cap]:
                child = position.copy()
                child.push(m)
                self._nodes += 1
                value = max(value, self._minimax(child, depth - 1, alpha, beta))
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return value

        value = INF
        for m in moves[: self.node_cap]:
            child = position.copy()
            child.push(m)
            self._nodes += 1
            value = min(value, self._minimax(child, depth - 1, alpha, beta))
            beta = min(beta, value)
            if beta <= alpha:
                break
        return value

    @staticmethod
    def _terminal_score(position: Position, depth: int) -> int:
        mover = position.side_to_move
        if not position.in_check(mover):
            return DRAW_SCORE
        # Remaining depth rewards the quicker mate.
        mate = MATE_SCORE + depth
        return -mate if mover is Color.WHITE else mate


def _search_moves(position: Position) -> List[Move]:
    # Under-promotions are left out of the search tree.
    return [m for m in legal_moves(position) if m.promotion in (None, Kind.QUEEN)]


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class SearchService:
    """Pick replies for the automated side at a difficulty tier.

    Tiers: 1 random, 2 greedy, 3 minimax (or the external UCI engine when
    one is configured).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        external: Optional[ExternalEngineStrategy] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.rng = rng or random.Random()
        if external is None and self.settings.engine_path:
            external = ExternalEngineStrategy(
                [self.settings.engine_path], movetime_ms=self.settings.engine_movetime_ms
            )
        self.external = external

    def strategy_for_level(self, level: Optional[int] = None) -> MoveStrategy:
        lvl = self.settings.ai_level if level is None else level
        if lvl not in LEVELS:
            raise ValueError(f"difficulty level must be one of {LEVELS}, got {lvl}")
        if lvl == LEVEL_RANDOM:
            return RandomStrategy(self.rng)
        if lvl == LEVEL_GREEDY:
            return GreedyStrategy(self.rng)
        if self.external is not None:
            return self.external
        return MinimaxStrategy(
            depth=self.settings.search_depth,
            root_cap=self.settings.root_cap,
            node_cap=self.settings.node_cap,
        )

    def choose_move(self, game: Game, level: Optional[int] = None) -> Optional[Move]:
        """Return the reply for the side to move without applying it.

        None means there is nothing to play: the game is over (or a
        promotion choice is pending).
        """
        if game.is_over() or game.pending_promotion is not None:
            return None
        strategy = self.strategy_for_level(level)
        move = strategy.select(game.position)
        logger.info(
            "automated move",
            extra={
                "strategy": strategy.name,
                "side": game.side_to_move.value,
                "move": move.to_uci() if move else None,
            },
        )
        return move

    def play(self, game: Game, level: Optional[int] = None) -> Optional[MoveResult]:
        """Choose a reply and apply it to ``game``."""
        move = self.choose_move(game, level)
        if move is None:
            return None
        return game.apply(game.position.with_default_promotion(move))

    def close(self) -> None:
        if self.external is not None:
            self.external.close()
