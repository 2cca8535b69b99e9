from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.game import Game, Outcome


@dataclass
class GameSession:
    """A game plus outcome notifications not yet delivered to the client."""

    game: Game
    events: List[Outcome] = field(default_factory=list)

    def drain_events(self) -> List[Outcome]:
        # Drained in place: the game's outcome callback is bound to this list.
        out = list(self.events)
        self.events.clear()
        return out


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create sessions with unique ``game_id``s, wiring each game's outcome
      callback into the session's event queue
    - Retrieve, replace and delete sessions by ``game_id``
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its ``game_id``."""
        gid = str(uuid.uuid4())
        session = self._wrap(game if game is not None else Game.new())
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def replace_game(self, game_id: str, game: Game) -> GameSession:
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            session = self._wrap(game)
            self._sessions[game_id] = session
            return session

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    @staticmethod
    def _wrap(game: Game) -> GameSession:
        session = GameSession(game=game)
        # A game loaded already finished reports its outcome once as well.
        if game.outcome is not None:
            session.events.append(game.outcome)
        game.on_outcome = session.events.append
        return session
