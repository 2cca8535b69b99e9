from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .attacks import any_attacked, is_attacked
from .board import Board
from .move import make_square
from .pieces import Color, Kind, Piece


class CastleSide(str, Enum):
    KING = "king"
    QUEEN = "queen"


KING_FILE = 4
ROOK_FILE = {CastleSide.KING: 7, CastleSide.QUEEN: 0}
# Files that must be empty, and files the king crosses or lands on.
BETWEEN_FILES = {CastleSide.KING: (5, 6), CastleSide.QUEEN: (1, 2, 3)}
KING_PATH_FILES = {CastleSide.KING: (5, 6), CastleSide.QUEEN: (3, 2)}
KING_TARGET_FILE = {CastleSide.KING: 6, CastleSide.QUEEN: 2}
ROOK_TARGET_FILE = {CastleSide.KING: 5, CastleSide.QUEEN: 3}


@dataclass
class SideRights:
    """Moved flags for one color's king and its two rooks."""

    king_moved: bool = False
    rook_a_moved: bool = False
    rook_h_moved: bool = False

    def rook_moved(self, side: CastleSide) -> bool:
        return self.rook_h_moved if side is CastleSide.KING else self.rook_a_moved

    def may_castle(self, side: CastleSide) -> bool:
        return not self.king_moved and not self.rook_moved(side)


@dataclass
class CastlingRights:
    white: SideRights = field(default_factory=SideRights)
    black: SideRights = field(default_factory=SideRights)

    def for_color(self, color: Color) -> SideRights:
        return self.white if color is Color.WHITE else self.black

    def copy(self) -> "CastlingRights":
        return CastlingRights(
            white=SideRights(**vars(self.white)),
            black=SideRights(**vars(self.black)),
        )

    def note_square_touched(self, sq: int) -> None:
        """Mark the king or rook whose home square ``sq`` is as moved.

        Called for both the origin of a move (the piece left) and its
        destination (a rook captured at home can no longer castle).
        """
        for color in (Color.WHITE, Color.BLACK):
            rank = color.home_rank
            rights = self.for_color(color)
            if sq == make_square(KING_FILE, rank):
                rights.king_moved = True
            elif sq == make_square(0, rank):
                rights.rook_a_moved = True
            elif sq == make_square(7, rank):
                rights.rook_h_moved = True

    def to_fen(self) -> str:
        out = ""
        for color, letters in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
            rights = self.for_color(color)
            if rights.may_castle(CastleSide.KING):
                out += letters[0]
            if rights.may_castle(CastleSide.QUEEN):
                out += letters[1]
        return out or "-"

    @classmethod
    def from_fen(cls, field_text: str) -> "CastlingRights":
        """Build flags from a FEN castling field such as ``"KQkq"`` or ``"-"``.

        A side with no right at all gets ``king_moved`` set; a side with one
        right gets the other rook marked as moved.

        Raises:
            ValueError: On letters outside ``KQkq``.
        """
        text = "" if field_text == "-" else field_text
        for ch in text:
            if ch not in "KQkq":
                raise ValueError("invalid castling rights")
        rights = cls()
        for color, (k, q) in ((Color.WHITE, ("K", "Q")), (Color.BLACK, ("k", "q"))):
            side = rights.for_color(color)
            has_k, has_q = k in text, q in text
            if not has_k and not has_q:
                side.king_moved = True
            side.rook_h_moved = not has_k
            side.rook_a_moved = not has_q
        return rights


def king_home(color: Color) -> int:
    return make_square(KING_FILE, color.home_rank)


def rook_home(color: Color, side: CastleSide) -> int:
    return make_square(ROOK_FILE[side], color.home_rank)


def can_castle(color: Color, side: CastleSide, board: Board, rights: CastlingRights) -> bool:
    """Return True if ``color`` may castle on ``side`` right now.

    Requires: king and that rook unmoved and on their home squares, every
    square between them empty, the king not in check, and neither the
    transit nor destination square attacked. On the queen side the b-file
    square must be empty but may be attacked.
    """
    if not rights.for_color(color).may_castle(side):
        return False
    rank = color.home_rank
    k_sq = king_home(color)
    if board.squares[k_sq] != Piece(color, Kind.KING):
        return False
    if board.squares[rook_home(color, side)] != Piece(color, Kind.ROOK):
        return False
    if is_attacked(k_sq, color, board):
        return False
    if any(board.squares[make_square(f, rank)] is not None for f in BETWEEN_FILES[side]):
        return False
    path = [make_square(f, rank) for f in KING_PATH_FILES[side]]
    return not any_attacked(path, color, board)


def castling_targets(color: Color, board: Board, rights: CastlingRights) -> List[int]:
    """King destinations (g-file, c-file) for every side ``color`` may castle."""
    out: List[int] = []
    for side in (CastleSide.KING, CastleSide.QUEEN):
        if can_castle(color, side, board, rights):
            out.append(make_square(KING_TARGET_FILE[side], color.home_rank))
    return out


ROOK_HOPS: Dict[int, Tuple[int, int]] = {}
for _color in (Color.WHITE, Color.BLACK):
    for _side in (CastleSide.KING, CastleSide.QUEEN):
        _rank = _color.home_rank
        ROOK_HOPS[make_square(KING_TARGET_FILE[_side], _rank)] = (
            make_square(ROOK_FILE[_side], _rank),
            make_square(ROOK_TARGET_FILE[_side], _rank),
        )


def castling_rook_hop(from_sq: int, to_sq: int) -> Optional[Tuple[int, int]]:
    """Rook ``(from, to)`` for a king two-file hop from its home square."""
    if abs(to_sq - from_sq) != 2 or from_sq not in (king_home(Color.WHITE), king_home(Color.BLACK)):
        return None
    return ROOK_HOPS.get(to_sq)
