"""Static evaluation.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Dict, Final

from ..engine.board import Board
from ..engine.pieces import Color, Kind


P_VAL: Final = 1
N_VAL: Final = 3
B_VAL: Final = 3
R_VAL: Final = 5
Q_VAL: Final = 9
K_VAL: Final = 0

PIECE_VALUES: Final[Dict[Kind, int]] = {
    Kind.PAWN: P_VAL,
    Kind.KNIGHT: N_VAL,
    Kind.BISHOP: B_VAL,
    Kind.ROOK: R_VAL,
    Kind.QUEEN: Q_VAL,
    Kind.KING: K_VAL,
}

# Terminal scores sit far outside any reachable material balance.
MATE_SCORE: Final = 10_000
DRAW_SCORE: Final = 0


def material(board: Board, color: Color) -> int:
    """Sum of piece values ``color`` still has on the board."""
    return sum(PIECE_VALUES[p.kind] for _, p in board.pieces(color))


def evaluate(board: Board) -> int:
    """Material balance: positive favors white, negative favors black."""
    score = 0
    for piece in board.squares:
        if piece is None:
            continue
        if piece.color is Color.WHITE:
            score += PIECE_VALUES[piece.kind]
        else:
            score -= PIECE_VALUES[piece.kind]
    return score
