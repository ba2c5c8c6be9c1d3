#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo's `src/` to sys.path.
SRC_ROOT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from minimax_chess.engine.board import Board, Color
from minimax_chess.engine.perft import perft, perft_divide
from minimax_chess.engine.state import CastlingRights, GameState

def main() -> None:
    parser = argparse.ArgumentParser(description="Count leaf nodes of the legal move tree")
    parser.add_argument(
        "--diagram",
        type=str,
        default=None,
        help="8 slash-separated rows, rank 8 first, '.' for empty (default: start position)",
    )
    parser.add_argument(
        "--to-move", choices=["white", "black"], default="white", help="Side to move"
    )
    parser.add_argument(
        "--no-castling", action="store_true", help="Clear all castling rights for --diagram"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print per-move subtotals")
    args = parser.parse_args()

    if args.diagram is None:
        state = GameState.initial()
    else:
        board = Board.from_diagram(args.diagram.split("/"))
        rights = CastlingRights.none() if args.no_castling else CastlingRights()
        state = GameState.from_board(board, Color(args.to_move), castling_rights=rights)

    start = time.perf_counter()
    if args.divide:
        nodes = 0
        for uci, count in sorted(perft_divide(state, args.depth).items()):
            print(f"{uci}: {count}")
            nodes += count
    else:
        nodes = perft(state, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
