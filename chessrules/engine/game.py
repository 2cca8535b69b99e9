from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List, Optional, Set

from ..errors import IllegalWhileTerminal, InvalidMove, PromotionPending
from .attacks import is_attacked
from .board import Board
from .fen import parse_fen, to_fen
from .legality import (
    filter_by_check_safety,
    has_legal_moves,
    legal_destinations,
    legal_moves,
    pseudo_legal_destinations,
)
from .move import Move, check_square, square_to_str
from .pieces import PROMOTION_KINDS, Color, Kind, Piece
from .position import Position


logger = logging.getLogger(__name__)

CHECKMATE = "checkmate"
STALEMATE = "stalemate"


@dataclass(frozen=True)
class Outcome:
    kind: str  # CHECKMATE or STALEMATE
    winner: Optional[Color] = None

    def describe(self) -> str:
        if self.kind == CHECKMATE and self.winner is not None:
            return f"{self.winner.value.capitalize()} wins by checkmate"
        return "Game ended in stalemate"


@dataclass(frozen=True)
class HistoryEntry:
    """One applied move plus the position it was played from."""

    from_sq: int
    to_sq: int
    piece: Piece
    color: Color
    before: Position
    captured: Optional[Piece] = None
    promotion: Optional[Kind] = None

    def to_move(self) -> Move:
        return Move(self.from_sq, self.to_sq, self.promotion)


@dataclass(frozen=True)
class MoveResult:
    move: Move
    captured: Optional[Piece] = None
    promotion_pending: bool = False
    in_check: bool = False
    outcome: Optional[Outcome] = None


OutcomeListener = Callable[[Outcome], None]


@dataclass
class Game:
    """Game wrapper around a position with turn, history and terminal state.

    Responsibility: validate and apply moves, keep the undo history, hold a
    pawn promotion until a piece kind is chosen, and detect checkmate and
    stalemate. Once an outcome is reached the game is frozen.
    """

    position: Position
    history: List[HistoryEntry] = field(default_factory=list)
    outcome: Optional[Outcome] = None
    pending_promotion: Optional[int] = None
    on_outcome: Optional[OutcomeListener] = field(default=None, repr=False, compare=False)

    @classmethod
    def new(cls, on_outcome: Optional[OutcomeListener] = None) -> "Game":
        return cls(position=Position.startpos(), on_outcome=on_outcome)

    @classmethod
    def from_fen(cls, fen: str, on_outcome: Optional[OutcomeListener] = None) -> "Game":
        return cls(position=parse_fen(fen), on_outcome=on_outcome)

    def __post_init__(self) -> None:
        # A loaded position may already be mate or stalemate.
        if self.outcome is None:
            self._refresh_outcome()

    # --- Queries ---
    @property
    def board(self) -> Board:
        return self.position.board

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    def to_fen(self) -> str:
        return to_fen(self.position)

    def piece_at(self, sq: int) -> Optional[Piece]:
        return self.position.board.piece_at(sq)

    def legal_destinations(self, sq: int) -> Set[int]:
        """Legal destinations for the piece on ``sq``; empty for a blank square."""
        if self.outcome is not None or self.pending_promotion is not None:
            return set()
        return legal_destinations(self.position, sq)

    def legal_moves(self) -> List[Move]:
        if self.outcome is not None or self.pending_promotion is not None:
            return []
        return legal_moves(self.position)

    def is_attacked(self, sq: int, by: Color) -> bool:
        """Return True if a piece of color ``by`` attacks ``sq``."""
        return is_attacked(check_square(sq), by.opposite, self.position.board)

    def in_check(self, color: Optional[Color] = None) -> bool:
        return self.position.in_check(color)

    def checkmate(self) -> bool:
        return self.outcome is not None and self.outcome.kind == CHECKMATE

    def stalemate(self) -> bool:
        return self.outcome is not None and self.outcome.kind == STALEMATE

    def is_over(self) -> bool:
        return self.outcome is not None

    def move_history_uci(self) -> List[str]:
        return [e.to_move().to_uci() for e in self.history]

    # --- Commands ---
    def apply_move(
        self,
        from_sq: int,
        to_sq: int,
        promotion: Optional[Kind] = None,
        legal: Optional[Iterable[int]] = None,
    ) -> MoveResult:
        """Validate and play a move for the side to move.

        Args:
            from_sq (int): Origin square.
            to_sq (int): Destination square.
            promotion (Optional[Kind]): Promotion kind for a last-rank pawn
                move. When omitted the game waits for ``promote``.
            legal (Optional[Iterable[int]]): Destinations the caller already
                computed for ``from_sq``; still re-checked against king safety.

        Returns:
            MoveResult: What happened, including any reached outcome.

        Raises:
            IllegalWhileTerminal: If the game is over.
            PromotionPending: If an earlier promotion is still unresolved.
            MalformedSquare: If a square index is out of range.
            InvalidMove: If the move is not legal in the current position.
        """
        if self.outcome is not None:
            raise IllegalWhileTerminal("game is over")
        if self.pending_promotion is not None:
            raise PromotionPending("a promotion choice is pending")
        check_square(from_sq)
        check_square(to_sq)

        position = self.position
        piece = position.board.squares[from_sq]
        if piece is None:
            raise InvalidMove(f"no piece on {square_to_str(from_sq)}")
        if piece.color is not position.side_to_move:
            raise InvalidMove(f"it is {position.side_to_move.value}'s turn")

        if legal is None:
            allowed = legal_destinations(position, from_sq)
        else:
            candidates = set(legal) & pseudo_legal_destinations(position, from_sq)
            allowed = filter_by_check_safety(candidates, from_sq, position)
        if to_sq not in allowed:
            raise InvalidMove("illegal move")

        reaches_last_rank = piece.kind is Kind.PAWN and to_sq // 8 == piece.color.last_rank
        if promotion is not None and (not reaches_last_rank or promotion not in PROMOTION_KINDS):
            raise InvalidMove("invalid promotion")

        before = position.copy()
        move = Move(from_sq, to_sq, promotion)
        played = position.play(move)
        self.history.append(
            HistoryEntry(
                from_sq=from_sq,
                to_sq=to_sq,
                piece=piece,
                color=piece.color,
                before=before,
                captured=played.captured,
                promotion=promotion,
            )
        )
        logger.debug(
            "move applied",
            extra={"move": move.to_uci(), "color": piece.color.value, "kind": piece.kind.value},
        )

        if played.promotion_pending:
            self.pending_promotion = to_sq
            return MoveResult(move=move, captured=played.captured, promotion_pending=True)
        return self._finish_turn(move, played.captured)

    def apply(self, move: Move) -> MoveResult:
        return self.apply_move(move.from_sq, move.to_sq, move.promotion)

    def promote(self, kind: Kind) -> MoveResult:
        """Resolve a pending promotion and complete the turn.

        Raises:
            IllegalWhileTerminal: If the game is over.
            InvalidMove: If no promotion is pending or ``kind`` is not one of
                queen, rook, bishop or knight.
        """
        if self.outcome is not None:
            raise IllegalWhileTerminal("game is over")
        sq = self.pending_promotion
        if sq is None:
            raise InvalidMove("no promotion pending")
        if kind not in PROMOTION_KINDS:
            raise InvalidMove(f"cannot promote to {kind.value}")
        color = self.position.side_to_move
        self.position.board.put(sq, Piece(color, kind))
        self.pending_promotion = None
        last = replace(self.history[-1], promotion=kind)
        self.history[-1] = last
        return self._finish_turn(last.to_move(), last.captured)

    def undo(self) -> bool:
        """Restore the position before the most recent move.

        Returns:
            bool: False when there is nothing to undo.

        Raises:
            IllegalWhileTerminal: If the game is over.
        """
        if self.outcome is not None:
            raise IllegalWhileTerminal("game is over")
        if not self.history:
            return False
        last = self.history.pop()
        self.position = last.before
        self.pending_promotion = None
        return True

    # --- Internals ---
    def _finish_turn(self, move: Move, captured: Optional[Piece]) -> MoveResult:
        self.position.end_turn()
        outcome = self._refresh_outcome()
        return MoveResult(
            move=move,
            captured=captured,
            in_check=self.position.in_check(),
            outcome=outcome,
        )

    def _refresh_outcome(self) -> Optional[Outcome]:
        position = self.position
        if has_legal_moves(position):
            return None
        mover = position.side_to_move
        if position.in_check(mover):
            outcome = Outcome(CHECKMATE, winner=mover.opposite)
        else:
            outcome = Outcome(STALEMATE)
        self.outcome = outcome
        logger.info(
            "game over",
            extra={"outcome": outcome.kind, "winner": outcome.winner.value if outcome.winner else None},
        )
        if self.on_outcome is not None:
            self.on_outcome(outcome)
        return outcome
