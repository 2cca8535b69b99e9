from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional, TextIO

from ...config import Settings
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.pieces import Color
from ...errors import ChessRulesError
from ...search.service import LEVELS, MinimaxStrategy, SearchService


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]

MAX_DEPTH = 8


class UCIEngine:
    """UCI protocol adapter around the rules engine.

    Notes:
    - Core remains pure; I/O is isolated here.
    - Searches run synchronously: ``go`` answers before the next command is read.
    - Command set: uci, isready, ucinewgame, setoption (Skill, Depth),
      position, go [depth n], quit.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.game: Game = Game.new()
        self.search = SearchService(self.settings)
        self.skill: int = 3
        self.depth: int = self.settings.search_depth

    # ---- Command handlers ----
    def cmd_uci(self, write: Writer) -> None:
        write("id name chessrules")
        write("id author chessrules")
        write(f"option name Skill type spin default {self.skill} min 1 max 3")
        write(f"option name Depth type spin default {self.depth} min 1 max {MAX_DEPTH}")
        write("uciok")

    def cmd_isready(self, write: Writer) -> None:
        write("readyok")

    def cmd_ucinewgame(self) -> None:
        self.game = Game.new()

    def cmd_position(self, args: List[str]) -> None:
        """``position startpos|fen <six fields> [moves m1 m2 ...]``.

        An unparsable FEN leaves the current game untouched. Moves are applied
        in order until the first one that is malformed or illegal.
        """
        if "moves" in args:
            cut = args.index("moves")
            head, moves = args[:cut], args[cut + 1 :]
        else:
            head, moves = args, []
        if not head:
            return
        if head[0] == "startpos":
            self.game = Game.new()
        elif head[0] == "fen":
            fen = " ".join(head[1:])
            try:
                self.game = Game.from_fen(fen)
            except ChessRulesError:
                logger.warning("ignoring invalid FEN", extra={"fen": fen})
                return
        else:
            return
        for u in moves:
            try:
                # A bare last-rank pawn move promotes to a queen, as UCI GUIs expect.
                self.game.apply(self.game.position.with_default_promotion(parse_uci(u)))
            except ValueError:
                logger.warning("ignoring invalid move", extra={"move": u})
                break

    def cmd_setoption(self, args: List[str]) -> None:
        # setoption name <name> value <value>; unknown names and non-integers are ignored
        text = " ".join(args)
        if not text.startswith("name ") or " value " not in text:
            return
        name, _, value = text[len("name ") :].partition(" value ")
        try:
            n = int(value.strip())
        except ValueError:
            return
        key = name.strip().lower()
        if key == "skill":
            self.skill = min(max(n, LEVELS[0]), LEVELS[-1])
        elif key == "depth":
            self.depth = min(max(n, 1), MAX_DEPTH)

    def cmd_go(self, args: List[str], write: Writer) -> None:
        depth = self._parse_depth(args)
        if self.game.is_over():
            write("bestmove (none)")
            return
        if self.skill == LEVELS[-1]:
            strategy = MinimaxStrategy(
                depth=depth,
                root_cap=self.settings.root_cap,
                node_cap=self.settings.node_cap,
            )
            res = strategy.search(self.game.position)
            # Search scores are white-positive; UCI reports the side to move's view.
            sign = 1 if self.game.side_to_move is Color.WHITE else -1
            write(f"info depth {res.depth} time {res.time_ms} nodes {res.nodes} score cp {sign * res.score * 100}")
            best = res.best_move
        else:
            best = self.search.choose_move(self.game, self.skill)
        write(f"bestmove {best.to_uci() if best else '(none)'}")

    # ---- Utilities ----
    def _parse_depth(self, args: List[str]) -> int:
        if "depth" in args:
            i = args.index("depth")
            if i + 1 < len(args):
                try:
                    return max(1, int(args[i + 1]))
                except ValueError:
                    pass
        return self.depth


def _default_writer(line: str) -> None:
    # Ensure newline termination and immediate flush
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_uci(stream: Optional[TextIO] = None, write: Writer = _default_writer, settings: Optional[Settings] = None) -> None:
    eng = UCIEngine(settings)
    for raw in stream or sys.stdin:
        line = raw.strip()
        if not line:
            continue
        parts = line.split()
        cmd, args = parts[0], parts[1:]

        if cmd == "uci":
            eng.cmd_uci(write)
        elif cmd == "isready":
            eng.cmd_isready(write)
        elif cmd == "setoption":
            eng.cmd_setoption(args)
        elif cmd == "ucinewgame":
            eng.cmd_ucinewgame()
        elif cmd == "position":
            eng.cmd_position(args)
        elif cmd == "go":
            eng.cmd_go(args, write)
        elif cmd == "quit":
            break
        # Ignore unknown commands per UCI convention
