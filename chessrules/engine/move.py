from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import MalformedSquare
from .pieces import KIND_TO_LETTER, PROMOTION_KINDS, Kind, parse_kind


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (int): Origin square index (0-based).
        to_sq (int): Destination square index (0-based).
        promotion (Optional[Kind]): Promotion kind for a pawn reaching the
            last rank, if already chosen.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[Kind] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = KIND_TO_LETTER[self.promotion] if self.promotion else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        MalformedSquare: If either square is off the board.
        ValueError: If the string has an invalid length or promotion piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[Kind] = None
    if len(uci) == 5:
        promo = parse_kind(uci[4])
        if promo not in PROMOTION_KINDS:
            raise ValueError(f"invalid promotion piece: {uci[4]!r}")
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        MalformedSquare: If ``s`` is not a valid square.
    """
    if not isinstance(s, str) or len(s) != 2:
        raise MalformedSquare(f"invalid square: {s!r}")
    f = s[0].lower()
    if f < "a" or f > "h" or s[1] < "1" or s[1] > "8":
        raise MalformedSquare(f"invalid square: {s!r}")
    return (int(s[1]) - 1) * 8 + (ord(f) - ord("a"))


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        MalformedSquare: If ``idx`` is outside the valid square range.
    """
    check_square(idx)
    return chr(ord("a") + idx % 8) + str(idx // 8 + 1)


def check_square(idx: int) -> int:
    if not isinstance(idx, int) or isinstance(idx, bool) or idx < 0 or idx > 63:
        raise MalformedSquare(f"invalid square index: {idx!r}")
    return idx


def make_square(file: int, rank: int) -> int:
    """Square index for zero-based ``file`` (a=0) and ``rank`` (1=0)."""
    if not (0 <= file < 8 and 0 <= rank < 8):
        raise MalformedSquare(f"invalid file/rank: ({file}, {rank})")
    return rank * 8 + file


def file_of(sq: int) -> int:
    return sq % 8


def rank_of(sq: int) -> int:
    return sq // 8


def offset(sq: int, df: int, dr: int) -> Optional[int]:
    """Square reached from ``sq`` by a file/rank delta, or None off the board.

    Files never wrap: h-file plus one is off the board, not the next a-file.
    """
    f = sq % 8 + df
    r = sq // 8 + dr
    if 0 <= f < 8 and 0 <= r < 8:
        return r * 8 + f
    return None
