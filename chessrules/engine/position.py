from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .attacks import is_attacked
from .board import Board
from .castling import CastlingRights, castling_rook_hop, king_home
from .move import Move
from .pieces import Color, Kind, Piece


@dataclass(frozen=True)
class PlayResult:
    """What a single ``Position.play`` call did to the board.

    Attributes:
        piece (Piece): The piece that moved.
        captured (Optional[Piece]): Captured piece, including en passant.
        captured_sq (Optional[int]): Square the captured piece was removed from.
        rook_hop (Optional[tuple[int, int]]): Rook relocation for castling.
        promotion_pending (bool): Pawn landed on the last rank without a kind.
    """

    piece: Piece
    captured: Optional[Piece] = None
    captured_sq: Optional[int] = None
    rook_hop: Optional[tuple[int, int]] = None
    promotion_pending: bool = False


def _default_kings() -> Dict[Color, int]:
    return {Color.WHITE: king_home(Color.WHITE), Color.BLACK: king_home(Color.BLACK)}


@dataclass
class Position:
    """Everything needed to generate moves: board, turn, rights, ep target.

    ``king_squares`` caches where each king stands and is kept in step with
    the board by ``play``.
    """

    board: Board
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = field(default_factory=CastlingRights)
    ep_square: Optional[int] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    king_squares: Dict[Color, int] = field(default_factory=_default_kings)

    @classmethod
    def startpos(cls) -> "Position":
        return cls(board=Board.startpos())

    @classmethod
    def from_board(cls, board: Board, side_to_move: Color = Color.WHITE, **kwargs) -> "Position":
        """Wrap an arbitrary board, locating both kings.

        Raises:
            ValueError: If either color does not have exactly one king.
        """
        kings: Dict[Color, int] = {}
        for color in (Color.WHITE, Color.BLACK):
            if board.count(color, Kind.KING) != 1:
                raise ValueError(f"board must hold exactly one {color.value} king")
            sq = board.find_king(color)
            assert sq is not None
            kings[color] = sq
        return cls(board=board, side_to_move=side_to_move, king_squares=kings, **kwargs)

    def copy(self) -> "Position":
        return Position(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling=self.castling.copy(),
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            king_squares=dict(self.king_squares),
        )

    def king_square(self, color: Color) -> int:
        return self.king_squares[color]

    def in_check(self, color: Optional[Color] = None) -> bool:
        c = self.side_to_move if color is None else color
        return is_attacked(self.king_squares[c], c, self.board)

    def play(self, move: Move) -> PlayResult:
        """Apply ``move`` to the board without legality checks or turn change.

        Special moves are resolved before the moving piece is relocated:
        castling moves the rook, a double pawn step sets the en-passant
        target (anything else clears it), and an en-passant capture removes
        the pawn behind the target square.

        Raises:
            ValueError: If ``move.from_sq`` is empty.
        """
        board = self.board
        piece = board.squares[move.from_sq]
        if piece is None:
            raise ValueError("no piece on origin square")
        color = piece.color
        captured = board.squares[move.to_sq]
        captured_sq: Optional[int] = move.to_sq if captured is not None else None
        rook_hop = None
        is_pawn = piece.kind is Kind.PAWN

        if piece.kind is Kind.KING:
            rook_hop = castling_rook_hop(move.from_sq, move.to_sq)
            if rook_hop is not None:
                board.move_piece(*rook_hop)
                self.castling.note_square_touched(rook_hop[0])

        prev_ep = self.ep_square
        if is_pawn and abs(move.to_sq - move.from_sq) == 16:
            self.ep_square = (move.from_sq + move.to_sq) // 2
        else:
            self.ep_square = None

        if (
            is_pawn
            and prev_ep is not None
            and move.to_sq == prev_ep
            and captured is None
            and (move.to_sq - move.from_sq) % 8 != 0
        ):
            captured_sq = move.to_sq - 8 * color.forward
            captured = board.remove(captured_sq)

        board.move_piece(move.from_sq, move.to_sq)
        self.castling.note_square_touched(move.from_sq)
        self.castling.note_square_touched(move.to_sq)
        if piece.kind is Kind.KING:
            self.king_squares[color] = move.to_sq

        promotion_pending = False
        if is_pawn and move.to_sq // 8 == color.last_rank:
            if move.promotion is not None:
                board.put(move.to_sq, Piece(color, move.promotion))
            else:
                promotion_pending = True

        if is_pawn or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        return PlayResult(
            piece=piece,
            captured=captured,
            captured_sq=captured_sq,
            rook_hop=rook_hop,
            promotion_pending=promotion_pending,
        )

    def end_turn(self) -> None:
        if self.side_to_move is Color.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.opposite

    def with_default_promotion(self, move: Move) -> Move:
        """Return ``move`` with a queen promotion if it is a bare last-rank pawn move."""
        piece = self.board.squares[move.from_sq]
        if (
            move.promotion is None
            and piece is not None
            and piece.kind is Kind.PAWN
            and move.to_sq // 8 == piece.color.last_rank
        ):
            return Move(move.from_sq, move.to_sq, Kind.QUEEN)
        return move

    def push(self, move: Move) -> PlayResult:
        """Play ``move`` and pass the turn; a bare promotion becomes a queen."""
        result = self.play(self.with_default_promotion(move))
        self.end_turn()
        return result
