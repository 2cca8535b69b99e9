from __future__ import annotations

import io
from typing import List

from chessrules.config import Settings
from chessrules.protocol.uci.loop import UCIEngine, run_uci


def capture_writer(buf: List[str]):
    def _w(line: str) -> None:
        buf.append(line)

    return _w


def test_basic_handshake():
    eng = UCIEngine()
    out: List[str] = []
    eng.cmd_uci(capture_writer(out))
    assert out[0] == "id name chessrules"
    assert any(line.startswith("option name Skill") for line in out)
    assert out[-1] == "uciok"


def test_isready():
    eng = UCIEngine()
    out: List[str] = []
    eng.cmd_isready(capture_writer(out))
    assert out == ["readyok"]


def test_position_startpos_with_moves():
    eng = UCIEngine()
    eng.cmd_position(["startpos", "moves", "e2e4", "e7e5"])
    assert eng.game.move_history_uci() == ["e2e4", "e7e5"]
    assert eng.game.to_fen().split()[1] == "w"


def test_position_stops_at_first_invalid_move():
    eng = UCIEngine()
    eng.cmd_position(["startpos", "moves", "e2e4", "e2e4", "d7d5"])
    assert eng.game.move_history_uci() == ["e2e4"]


def test_position_fen_and_go_depth():
    eng = UCIEngine()
    fen = "4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1"
    eng.cmd_position(["fen", *fen.split()])
    out: List[str] = []
    eng.cmd_go(["depth", "2"], capture_writer(out))
    assert out[0].startswith("info depth 2 ")
    assert out[-1] == "bestmove d2d5"


def test_go_at_lower_skill_has_no_info_line():
    eng = UCIEngine()
    eng.cmd_setoption(["name", "Skill", "value", "1"])
    assert eng.skill == 1
    out: List[str] = []
    eng.cmd_go([], capture_writer(out))
    assert len(out) == 1 and out[0].startswith("bestmove ")


def test_go_in_finished_game():
    eng = UCIEngine()
    eng.cmd_position(["fen", "7k/5Q2/6K1/8/8/8/8/8", "b", "-", "-", "0", "1"])
    out: List[str] = []
    eng.cmd_go([], capture_writer(out))
    assert out == ["bestmove (none)"]


def test_setoption_clamps_and_ignores_garbage():
    eng = UCIEngine(Settings(search_depth=2))
    assert eng.depth == 2
    eng.cmd_setoption(["name", "Depth", "value", "99"])
    assert eng.depth == 8
    eng.cmd_setoption(["name", "Skill", "value", "high"])
    assert eng.skill == 3


def test_run_uci_session():
    script = "\n".join(
        [
            "uci",
            "isready",
            "ucinewgame",
            "position startpos moves f2f3 e7e5 g2g4",
            "go depth 2",
            "unknowncommand",
            "quit",
            "isready",
        ]
    )
    out: List[str] = []
    run_uci(io.StringIO(script), capture_writer(out))
    assert "uciok" in out
    assert out.count("readyok") == 1
    assert out[-1] == "bestmove d8h4"


def test_bare_promotion_in_move_list_becomes_queen():
    eng = UCIEngine()
    eng.cmd_position(["fen", "k7/4P3/8/8/8/8/8/4K3", "w", "-", "-", "0", "1", "moves", "e7e8", "a8a7"])
    assert eng.game.move_history_uci() == ["e7e8q", "a8a7"]
    assert eng.game.pending_promotion is None
    assert eng.game.to_fen().split()[1] == "w"


def test_info_score_is_from_side_to_move_view():
    # Black to move and a queen up: a positive score for black
    eng = UCIEngine()
    eng.cmd_position(["fen", "4k3/8/8/3q4/8/8/8/4K3", "b", "-", "-", "0", "1"])
    out: List[str] = []
    eng.cmd_go(["depth", "1"], capture_writer(out))
    assert out[0].endswith(" score cp 900")

    eng.cmd_position(["fen", "4k3/8/8/3q4/8/8/8/4K3", "w", "-", "-", "0", "1"])
    out = []
    eng.cmd_go(["depth", "2"], capture_writer(out))
    assert out[0].endswith(" score cp -900")
