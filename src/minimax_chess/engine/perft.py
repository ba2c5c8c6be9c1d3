from __future__ import annotations

from typing import Dict

from .move import PROMOTION_PIECES, PROMOTION_SUFFIX, square_to_str
from .rules import all_legal_moves
from .state import GameState, make_move, promote_pawn, should_promote_pawn


def perft(state: GameState, depth: int) -> int:
    """Compute perft node count for ``state`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are produced by ``make_move``; a pawn reaching the far rank
    branches once per promotion piece, as in standard perft tables.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    moves = all_legal_moves(
        state.board, state.current_player, state.en_passant_target, state.castling_rights
    )
    for from_pos, to_pos in moves:
        child = make_move(state, from_pos, to_pos)
        if child is None:
            raise AssertionError(f"generated move rejected: {from_pos} -> {to_pos}")
        if should_promote_pawn(child.board, to_pos):
            for kind in PROMOTION_PIECES:
                nodes += perft(promote_pawn(child, to_pos, kind), depth - 1)
        else:
            nodes += perft(child, depth - 1)
    return nodes


def perft_divide(state: GameState, depth: int) -> Dict[str, int]:
    """Per root move perft counts keyed by UCI string (promotions suffixed)."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    moves = all_legal_moves(
        state.board, state.current_player, state.en_passant_target, state.castling_rights
    )
    for from_pos, to_pos in moves:
        child = make_move(state, from_pos, to_pos)
        if child is None:
            raise AssertionError(f"generated move rejected: {from_pos} -> {to_pos}")
        uci = square_to_str(from_pos) + square_to_str(to_pos)
        if should_promote_pawn(child.board, to_pos):
            for kind in PROMOTION_PIECES:
                promoted = promote_pawn(child, to_pos, kind)
                out[uci + PROMOTION_SUFFIX[kind]] = perft(promoted, depth - 1)
        else:
            out[uci] = perft(child, depth - 1)
    return out
