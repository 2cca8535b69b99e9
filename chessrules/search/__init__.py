"""Automated move selection."""

from __future__ import annotations

from .service import (
    GreedyStrategy,
    MinimaxStrategy,
    MoveStrategy,
    RandomStrategy,
    SearchResult,
    SearchService,
)

__all__ = [
    "GreedyStrategy",
    "MinimaxStrategy",
    "MoveStrategy",
    "RandomStrategy",
    "SearchResult",
    "SearchService",
]
