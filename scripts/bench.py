#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Ensure the repo's `src/` is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from minimax_chess.engine.board import Board, Color
from minimax_chess.engine.state import CastlingRights, GameState
from minimax_chess.search.service import Difficulty, SearchService, depth_for


def _git_info() -> Dict[str, Optional[str]]:
    def run(cmd: List[str]) -> Optional[str]:
        try:
            out = subprocess.check_output(cmd, cwd=REPO_ROOT, stderr=subprocess.DEVNULL)
            return out.decode().strip()
        except (OSError, subprocess.CalledProcessError):
            return None

    return {
        "commit": run(["git", "rev-parse", "HEAD"]),
        "describe": run(["git", "describe", "--dirty", "--tags", "--always"]),
    }


@dataclass
class BenchItem:
    id: str
    name: str
    diagram: List[str]
    to_move: Color = Color.WHITE
    castling: bool = True

    def state(self) -> GameState:
        rights = CastlingRights() if self.castling else CastlingRights.none()
        return GameState.from_board(
            Board.from_diagram(self.diagram), self.to_move, castling_rights=rights
        )


POSITIONS: List[BenchItem] = [
    BenchItem(
        id="startpos",
        name="Initial position",
        diagram=[
            "rnbqkbnr",
            "pppppppp",
            "........",
            "........",
            "........",
            "........",
            "PPPPPPPP",
            "RNBQKBNR",
        ],
    ),
    BenchItem(
        id="kiwipete",
        name="Kiwipete middlegame",
        diagram=[
            "r...k..r",
            "p.ppqpb.",
            "bn..pnp.",
            "...PN...",
            ".p..P...",
            "..N..Q.p",
            "PPPBBPPP",
            "R...K..R",
        ],
    ),
    BenchItem(
        id="rook-endgame",
        name="Rook and pawns endgame",
        diagram=[
            "........",
            "..p.....",
            "...p....",
            "KP.....r",
            ".R...p.k",
            "........",
            "....P.P.",
            "........",
        ],
        castling=False,
    ),
]


def bench_position(
    svc: SearchService,
    item: BenchItem,
    *,
    depth: int,
    movetime_ms: Optional[int],
    iterations: int,
) -> Dict[str, Any]:
    state = item.state()
    total_time = 0
    total_nodes = 0
    last = None

    for _ in range(max(1, iterations)):
        res = svc.search(state, depth=depth, movetime_ms=movetime_ms)
        total_time += max(0, res.time_ms)
        total_nodes += max(0, res.nodes)
        last = res

    assert last is not None

    avg_time = int(total_time / max(1, iterations))
    avg_nodes = int(total_nodes / max(1, iterations))
    nps = int(avg_nodes * 1000 / max(1, avg_time)) if avg_time > 0 else 0

    return {
        "id": item.id,
        "name": item.name,
        "depth": last.depth,
        "movetime_ms": movetime_ms,
        "best_move": (last.best_move.to_uci() if last.best_move else None),
        "notation": (last.best_move.notation if last.best_move else None),
        "score": last.score,
        "aborted": last.aborted,
        "time_ms": avg_time,
        "nodes": avg_nodes,
        "nps": nps,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Time the search at each difficulty tier")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        action="append",
        default=None,
        help="Tier(s) to run (default: all)",
    )
    parser.add_argument("--depth", type=int, default=None, help="Explicit depth; overrides tiers")
    parser.add_argument("--movetime-ms", type=int, default=None, help="Per-search time budget")
    parser.add_argument(
        "--iterations", type=int, default=1, help="Repeat runs per position and average"
    )
    parser.add_argument("--out", type=str, default=None, help="Write JSON results to file path")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument(
        "--progress", action="store_true", help="Print per-position progress to stderr"
    )
    args = parser.parse_args()

    if args.depth is not None:
        depths = [args.depth]
    else:
        tiers = [Difficulty(d) for d in args.difficulty] if args.difficulty else list(Difficulty)
        depths = [depth_for(t) for t in tiers]

    svc = SearchService()

    results: List[Dict[str, Any]] = []
    t0 = time.perf_counter()
    for depth in depths:
        for it in POSITIONS:
            if args.progress:
                sys.stderr.write(f"[depth {depth}] {it.id}: running...\n")
                sys.stderr.flush()
            res = bench_position(
                svc,
                it,
                depth=depth,
                movetime_ms=args.movetime_ms,
                iterations=max(1, args.iterations),
            )
            results.append(res)
            if args.progress:
                sys.stderr.write(
                    f"    time={res['time_ms']}ms nodes={res['nodes']} nps={res['nps']} best={res['best_move']}\n"
                )
                sys.stderr.flush()

    dt_ms = int((time.perf_counter() - t0) * 1000)
    total_nodes = sum(r["nodes"] for r in results)
    overall_nps = int(total_nodes * 1000 / max(1, dt_ms)) if dt_ms > 0 else 0

    payload = {
        "meta": {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
            "git": _git_info(),
            "config": {
                "depths": depths,
                "iterations": max(1, args.iterations),
                "movetime_ms": args.movetime_ms,
            },
        },
        "results": results,
        "summary": {
            "searches": len(results),
            "total_time_ms": dt_ms,
            "total_nodes": total_nodes,
            "overall_nps": overall_nps,
        },
    }

    if args.out:
        out_path = args.out
        out_dir = os.path.dirname(out_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2 if args.pretty else None)
        print(out_path)
    else:
        print(json.dumps(payload, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
