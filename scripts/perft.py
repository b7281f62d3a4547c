#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `chessrules/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.engine.fen import STARTPOS_FEN
from chessrules.engine.game import Game
from chessrules.engine.perft import perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Count legal move paths from a FEN to a depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=2, help="Perft depth (default: 2)")
    parser.add_argument("--divide", action="store_true", help="Print node counts per root move")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine debug output")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    game = Game.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth > 0:
        nodes = 0
        for m in game.legal_moves():
            child = game.copy()
            child.make_move(m, validated=True)
            count = perft(child, args.depth - 1)
            nodes += count
            print(f"{m.to_uci()}: {count}")
    else:
        nodes = perft(game, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
