from __future__ import annotations

import argparse
import logging
import time
from typing import List, Optional

import uvicorn

from ..config import Settings
from ..engine.fen import STARTPOS_FEN, parse_fen
from ..engine.perft import divide, perft
from ..protocol.uci.loop import run_uci


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessrules", description="Chess rules engine")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", type=str, default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Bind port")

    sub.add_parser("uci", help="Speak UCI on stdin/stdout")

    p = sub.add_parser("perft", help="Count leaf nodes of the legal move tree")
    p.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    p.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    p.add_argument("--divide", action="store_true", help="Print per-move counts")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    settings = Settings()

    if args.command == "uci":
        logging.basicConfig(level=settings.log_level)
        run_uci(settings=settings)
        return

    if args.command == "perft":
        position = parse_fen(args.fen)
        start = time.perf_counter()
        if args.divide:
            counts = divide(position, args.depth)
            for uci, n in sorted(counts.items()):
                print(f"{uci}: {n}")
            nodes = sum(counts.values())
        else:
            nodes = perft(position, args.depth)
        dt = time.perf_counter() - start
        print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")
        return

    uvicorn.run(
        "chessrules.protocol.http.app:create_app",
        factory=True,
        host=getattr(args, "host", None) or settings.host,
        port=getattr(args, "port", None) or settings.port,
    )


if __name__ == "__main__":
    main()
