from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable, List, Optional, Sequence

from ..engine.fen import to_fen
from ..engine.legality import legal_moves
from ..engine.move import Move, parse_uci
from ..engine.pieces import Kind
from ..engine.position import Position
from ..errors import EngineError


logger = logging.getLogger(__name__)


class UCIEngineClient:
    """Drive a UCI engine subprocess over stdin/stdout."""

    def __init__(self, command: Sequence[str], timeout: float = 5.0) -> None:
        self.command = list(command)
        self.timeout = timeout
        self.proc: Optional[subprocess.Popen] = None

    @property
    def running(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    def start(self) -> None:
        try:
            self.proc = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise EngineError(f"cannot start engine {self.command[0]!r}: {e}") from e
        logger.info("engine started", extra={"command": " ".join(self.command)})
        self.send("uci")
        if not self._read_until(lambda line: line.strip() == "uciok", self.timeout):
            self.quit()
            raise EngineError("Engine did not respond to 'uci'")
        self.send("isready")
        if not self._read_until(lambda line: line.strip() == "readyok", self.timeout):
            self.quit()
            raise EngineError("Engine not ready")

    def send(self, cmd: str) -> None:
        if self.proc is None or self.proc.stdin is None:
            raise EngineError("engine is not running")
        try:
            self.proc.stdin.write(cmd + "\n")
            self.proc.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise EngineError(f"engine pipe closed: {e}") from e

    def _read_until(self, predicate: Callable[[str], bool], timeout: float) -> bool:
        return self._read_line_matching(predicate, timeout) is not None

    def _read_line_matching(self, predicate: Callable[[str], bool], timeout: float) -> Optional[str]:
        if self.proc is None or self.proc.stdout is None:
            raise EngineError("engine is not running")
        end = time.time() + timeout
        while time.time() < end:
            line = self.proc.stdout.readline()
            if not line:
                if self.proc.poll() is not None:
                    return None
                time.sleep(0.01)
                continue
            if predicate(line):
                return line
        return None

    def bestmove(self, fen: str, movetime_ms: Optional[int] = None, depth: Optional[int] = None) -> Optional[str]:
        """Ask for the best move in ``fen``; returns the UCI text or None."""
        self.send("ucinewgame")
        self.send(f"position fen {fen}")
        self.send("isready")
        if not self._read_until(lambda line: line.strip() == "readyok", self.timeout):
            raise EngineError("Engine not ready for position")

        if depth is not None:
            self.send(f"go depth {depth}")
            timeout_s = 10.0
        else:
            mt = movetime_ms or 1000
            self.send(f"go movetime {mt}")
            timeout_s = max(2.0, (mt / 1000.0) * 2.5)

        line = self._read_line_matching(lambda ln: ln.startswith("bestmove"), timeout_s)
        if line is None:
            raise EngineError("Engine did not answer with bestmove")
        parts = line.strip().split()
        if len(parts) < 2 or parts[1] in ("(none)", "0000"):
            return None
        return parts[1].lower()

    def quit(self) -> None:
        if self.proc is None:
            return
        proc, self.proc = self.proc, None
        try:
            if proc.stdin is not None and proc.poll() is None:
                proc.stdin.write("quit\n")
                proc.stdin.flush()
            proc.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            proc.terminate()
        except (BrokenPipeError, OSError):
            proc.kill()


class ExternalEngineStrategy:
    """Move selection backed by an external UCI engine process.

    The engine sees the position as FEN; its answer must be one of our own
    legal moves, otherwise ``EngineError`` is raised.
    """

    name = "external"

    def __init__(
        self,
        command: Sequence[str],
        movetime_ms: int = 500,
        depth: Optional[int] = None,
        client_factory: Callable[[Sequence[str]], UCIEngineClient] = UCIEngineClient,
    ) -> None:
        self.command = list(command)
        self.movetime_ms = movetime_ms
        self.depth = depth
        self._client_factory = client_factory
        self._client: Optional[UCIEngineClient] = None

    def _ensure_client(self) -> UCIEngineClient:
        if self._client is None or not self._client.running:
            client = self._client_factory(self.command)
            client.start()
            self._client = client
        return self._client

    def select(self, position: Position) -> Optional[Move]:
        moves = legal_moves(position)
        if not moves:
            return None
        client = self._ensure_client()
        uci = client.bestmove(to_fen(position), movetime_ms=self.movetime_ms, depth=self.depth)
        if uci is None:
            raise EngineError("engine found no move in a position with legal moves")
        try:
            proposed = parse_uci(uci)
        except ValueError as e:
            raise EngineError(f"engine answered malformed move {uci!r}") from e
        return _match_legal(proposed, moves, uci)

    def close(self) -> None:
        if self._client is not None:
            self._client.quit()
            self._client = None


def _match_legal(proposed: Move, moves: List[Move], uci: str) -> Move:
    for m in moves:
        if m.from_sq != proposed.from_sq or m.to_sq != proposed.to_sq:
            continue
        if m.promotion == (proposed.promotion or (Kind.QUEEN if m.promotion else None)):
            return m
    logger.warning("engine proposed illegal move", extra={"move": uci})
    raise EngineError(f"engine proposed illegal move {uci!r}")
