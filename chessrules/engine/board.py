from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .move import check_square
from .pieces import Color, Kind, Piece


BACK_RANK = (
    Kind.ROOK,
    Kind.KNIGHT,
    Kind.BISHOP,
    Kind.QUEEN,
    Kind.KING,
    Kind.BISHOP,
    Kind.KNIGHT,
    Kind.ROOK,
)


def _empty_squares() -> List[Optional[Piece]]:
    return [None] * 64


@dataclass
class Board:
    """Occupancy of the 64 squares.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``None`` marks a blank square.
    - Pure data: move legality lives in the generator and filter modules.
    """

    squares: List[Optional[Piece]] = field(default_factory=_empty_squares)

    def __post_init__(self) -> None:
        if len(self.squares) != 64:
            raise ValueError("board must have exactly 64 squares")

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board holding the standard starting setup."""
        board = cls()
        for file_idx, kind in enumerate(BACK_RANK):
            board.squares[file_idx] = Piece(Color.WHITE, kind)
            board.squares[8 + file_idx] = Piece(Color.WHITE, Kind.PAWN)
            board.squares[48 + file_idx] = Piece(Color.BLACK, Kind.PAWN)
            board.squares[56 + file_idx] = Piece(Color.BLACK, kind)
        return board

    def piece_at(self, sq: int) -> Optional[Piece]:
        return self.squares[check_square(sq)]

    def move_piece(self, from_sq: int, to_sq: int) -> Optional[Piece]:
        """Relocate whatever stands on ``from_sq`` onto ``to_sq``.

        The occupant of ``to_sq`` is overwritten and ``from_sq`` cleared. No
        rule is checked here.

        Returns:
            Optional[Piece]: The piece that was overwritten on ``to_sq``.
        """
        captured = self.squares[to_sq]
        self.squares[to_sq] = self.squares[from_sq]
        self.squares[from_sq] = None
        return captured

    def put(self, sq: int, piece: Piece) -> None:
        self.squares[check_square(sq)] = piece

    def remove(self, sq: int) -> Optional[Piece]:
        piece = self.squares[check_square(sq)]
        self.squares[sq] = None
        return piece

    def copy(self) -> "Board":
        # Pieces are frozen, a shallow list copy shares nothing mutable.
        return Board(list(self.squares))

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[int, Piece]]:
        """Yield ``(square, piece)`` pairs in square order a1..h8."""
        for sq, piece in enumerate(self.squares):
            if piece is not None and (color is None or piece.color is color):
                yield sq, piece

    def find_king(self, color: Color) -> Optional[int]:
        target = Piece(color, Kind.KING)
        for sq, piece in enumerate(self.squares):
            if piece == target:
                return sq
        return None

    def count(self, color: Color, kind: Optional[Kind] = None) -> int:
        return sum(1 for _, p in self.pieces(color) if kind is None or p.kind is kind)
