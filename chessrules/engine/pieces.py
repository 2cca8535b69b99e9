from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Rank delta of a pawn advance for this color."""
        return 1 if self is Color.WHITE else -1

    @property
    def home_rank(self) -> int:
        """Zero-based back rank holding the king and rooks."""
        return 0 if self is Color.WHITE else 7

    @property
    def pawn_rank(self) -> int:
        """Zero-based rank pawns start on (rank 2 / rank 7)."""
        return 1 if self is Color.WHITE else 6

    @property
    def last_rank(self) -> int:
        """Zero-based promotion rank."""
        return 7 if self is Color.WHITE else 0


class Kind(str, Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


PROMOTION_KINDS = (Kind.QUEEN, Kind.ROOK, Kind.BISHOP, Kind.KNIGHT)

KIND_TO_LETTER: Dict[Kind, str] = {
    Kind.PAWN: "p",
    Kind.KNIGHT: "n",
    Kind.BISHOP: "b",
    Kind.ROOK: "r",
    Kind.QUEEN: "q",
    Kind.KING: "k",
}
LETTER_TO_KIND: Dict[str, Kind] = {v: k for k, v in KIND_TO_LETTER.items()}


@dataclass(frozen=True)
class Piece:
    """A colored piece. Two pieces are equal when color and kind match."""

    color: Color
    kind: Kind

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        letter = KIND_TO_LETTER[self.kind]
        return letter.upper() if self.color is Color.WHITE else letter

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        kind = LETTER_TO_KIND.get(ch.lower())
        if kind is None:
            raise ValueError(f"invalid piece symbol: {ch!r}")
        return cls(Color.WHITE if ch.isupper() else Color.BLACK, kind)


def parse_kind(name: str) -> Kind:
    """Parse a piece kind from its name (``"queen"``) or letter (``"q"``).

    Raises:
        ValueError: If ``name`` is neither.
    """
    key = name.strip().lower()
    if key in LETTER_TO_KIND:
        return LETTER_TO_KIND[key]
    try:
        return Kind(key)
    except ValueError as e:
        raise ValueError(f"invalid piece kind: {name!r}") from e
