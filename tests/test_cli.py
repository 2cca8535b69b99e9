from __future__ import annotations

import pytest

from chessrules.cli.main import main


def test_perft_subcommand_prints_nodes(capsys: pytest.CaptureFixture[str]) -> None:
    main(["perft", "--depth", "2"])
    out = capsys.readouterr().out
    assert out.startswith("nodes=400 depth=2 ")


def test_perft_divide_lists_root_moves(capsys: pytest.CaptureFixture[str]) -> None:
    main(["perft", "--depth", "1", "--divide"])
    lines = capsys.readouterr().out.splitlines()
    assert "e2e4: 1" in lines
    assert lines[-1].startswith("nodes=20 ")
