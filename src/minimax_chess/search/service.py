from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from minimax_chess.engine.board import Color, Position
from minimax_chess.engine.move import Move
from minimax_chess.engine.rules import all_legal_moves
from minimax_chess.engine.state import GameState, make_move
from minimax_chess.eval import evaluate_for


logger = logging.getLogger(__name__)


INF = 10_000_000
MATE_SCORE = 50_000
CHECK_BONUS = 50


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DIFFICULTY_DEPTHS = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 4,
}


def depth_for(difficulty: Difficulty) -> int:
    return DIFFICULTY_DEPTHS[Difficulty(difficulty)]


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    nodes: int
    depth: int
    time_ms: int
    aborted: bool = False


class _SearchTimeout(Exception):
    pass


class SearchService:
    """Depth-limited minimax with alpha-beta pruning.

    The side to move at the root is the maximiser. Children are produced with
    ``make_move`` so every explored move passes the same legality gate as a
    played one.
    """

    def search(
        self,
        state: GameState,
        depth: int = 3,
        movetime_ms: Optional[int] = None,
    ) -> SearchResult:
        # Deterministic: captures-first stable ordering, first best move kept on ties.
        if depth < 1:
            raise ValueError("depth must be >= 1")
        if movetime_ms is not None and movetime_ms <= 0:
            raise ValueError("movetime_ms must be > 0")

        root_color: Color = state.current_player
        nodes = 0

        # Time control (optional, cooperative)
        start = time.perf_counter()
        time_up = False

        def out_of_time() -> bool:
            nonlocal time_up
            if movetime_ms is None or time_up:
                return time_up
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            if elapsed_ms >= movetime_ms:
                time_up = True
            return time_up

        def ordered_moves(node: GameState) -> List[Tuple[Position, Position]]:
            moves = all_legal_moves(
                node.board, node.current_player, node.en_passant_target, node.castling_rights
            )
            # Captures first; sort is stable so generation order breaks ties
            moves.sort(key=lambda m: 0 if node.board.piece_at(m[1]) is not None else 1)
            return moves

        def leaf_score(node: GameState, maximizing: bool) -> int:
            if node.is_checkmate:
                return -MATE_SCORE if maximizing else MATE_SCORE
            if node.is_stalemate:
                return 0
            score = evaluate_for(node.board, root_color)
            if node.is_check:
                score += -CHECK_BONUS if maximizing else CHECK_BONUS
            return score

        def minimax(node: GameState, d: int, alpha: int, beta: int, maximizing: bool) -> int:
            nonlocal nodes
            nodes += 1
            if out_of_time():
                raise _SearchTimeout()
            if d == 0 or node.is_game_over:
                return leaf_score(node, maximizing)

            best_score = -INF if maximizing else INF
            for from_pos, to_pos in ordered_moves(node):
                child = make_move(node, from_pos, to_pos)
                if child is None:
                    continue
                score = minimax(child, d - 1, alpha, beta, not maximizing)
                if maximizing:
                    if score > best_score:
                        best_score = score
                    alpha = max(alpha, score)
                else:
                    if score < best_score:
                        best_score = score
                    beta = min(beta, score)
                if beta <= alpha:
                    break
            return best_score

        def finish(best: Optional[Move], score: Optional[int], aborted: bool) -> SearchResult:
            time_ms = int((time.perf_counter() - start) * 1000)
            logger.debug(
                "search depth=%d nodes=%d time_ms=%d best=%s score=%s aborted=%s",
                depth,
                nodes,
                time_ms,
                best.notation if best else None,
                score,
                aborted,
            )
            return SearchResult(
                best_move=best,
                score=score,
                nodes=nodes,
                depth=depth,
                time_ms=time_ms,
                aborted=aborted,
            )

        if state.is_game_over:
            nodes += 1
            return finish(None, leaf_score(state, True), False)

        # Root: a maximising node that remembers which child produced the best score
        nodes += 1
        alpha, beta = -INF, INF
        best_score = -INF
        best_move: Optional[Move] = None
        first_move: Optional[Move] = None
        for from_pos, to_pos in ordered_moves(state):
            child = make_move(state, from_pos, to_pos)
            if child is None:
                continue
            if first_move is None:
                first_move = child.last_move
            try:
                score = minimax(child, depth - 1, alpha, beta, False)
            except _SearchTimeout:
                if best_move is None:
                    # Nothing finished in time; still hand back a legal move
                    return finish(first_move, None, True)
                return finish(best_move, best_score, True)
            if score > best_score:
                best_score = score
                best_move = child.last_move
            alpha = max(alpha, score)
            if beta <= alpha:
                break

        if best_move is None:
            return finish(None, None, False)
        return finish(best_move, best_score, False)


def best_move(state: GameState, depth: int = 3) -> Optional[Move]:
    """Return the move the engine would play, or None when no legal move exists."""
    return SearchService().search(state, depth=depth).best_move
