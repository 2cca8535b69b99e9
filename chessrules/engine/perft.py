from __future__ import annotations

from typing import Dict

from .legality import legal_moves
from .position import Position


def perft(position: Position, depth: int) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are played on copies, so ``position`` is left untouched.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = legal_moves(position)
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        child = position.copy()
        child.push(m)
        nodes += perft(child, depth - 1)
    return nodes


def divide(position: Position, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by UCI move, for debugging generators."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in legal_moves(position):
        child = position.copy()
        child.push(m)
        out[m.to_uci()] = perft(child, depth - 1)
    return out
