from __future__ import annotations

import pytest

from minimax_chess.engine.board import Board, Color, Piece, PieceType, Position
from minimax_chess.engine.move import PROMOTION_PIECES, str_to_square
from minimax_chess.engine.state import (
    GameState,
    make_move,
    pending_promotion,
    promote_pawn,
    settle_promotion,
    should_promote_pawn,
)


def _pawn_on_seventh() -> GameState:
    board = Board.from_diagram(
        [
            "....k...",
            "P.......",
            "........",
            "........",
            "........",
            "........",
            "........",
            "....K...",
        ]
    )
    return GameState.from_board(board, Color.WHITE)


def _after_push() -> GameState:
    nxt = make_move(_pawn_on_seventh(), str_to_square("a7"), str_to_square("a8"))
    assert nxt is not None
    return nxt


def test_reaching_far_rank_leaves_pawn_pending() -> None:
    s = _after_push()
    a8 = str_to_square("a8")
    assert s.board.piece_at(a8) == Piece(PieceType.PAWN, Color.WHITE)
    assert should_promote_pawn(s.board, a8)
    assert pending_promotion(s) == a8
    assert s.current_player is Color.BLACK
    assert pending_promotion(_pawn_on_seventh()) is None


@pytest.mark.parametrize("kind", PROMOTION_PIECES)
def test_promotion_changes_only_that_square(kind: PieceType) -> None:
    s = _after_push()
    a8 = str_to_square("a8")
    promoted = promote_pawn(s, a8, kind)

    assert promoted.board.piece_at(a8) == Piece(kind, Color.WHITE)
    for row in range(8):
        for col in range(8):
            pos = Position(row, col)
            if pos != a8:
                assert promoted.board.piece_at(pos) == s.board.piece_at(pos)
    assert promoted.current_player is s.current_player
    assert promoted.move_history == s.move_history
    assert promoted.is_check == s.is_check
    assert promoted.castling_rights == s.castling_rights
    # Source snapshot is untouched
    assert s.board.piece_at(a8) == Piece(PieceType.PAWN, Color.WHITE)


def test_promotion_rejects_bad_requests() -> None:
    s = _after_push()
    with pytest.raises(ValueError):
        promote_pawn(s, str_to_square("a8"), PieceType.KING)
    with pytest.raises(ValueError):
        promote_pawn(s, str_to_square("a8"), PieceType.PAWN)
    with pytest.raises(ValueError):
        promote_pawn(s, str_to_square("e1"), PieceType.QUEEN)
    with pytest.raises(ValueError):
        promote_pawn(_pawn_on_seventh(), str_to_square("a7"), PieceType.QUEEN)


def test_settle_promotion_restamps_check_and_records_piece() -> None:
    s = _after_push()
    assert not s.is_check

    # The raw promotion keeps the stale flag, the settled one sees the check
    assert not promote_pawn(s, str_to_square("a8"), PieceType.QUEEN).is_check
    settled = settle_promotion(s, str_to_square("a8"), PieceType.QUEEN)
    assert settled.is_check
    assert not settled.is_checkmate
    assert settled.last_move is not None
    assert settled.last_move.promotion is PieceType.QUEEN
    assert settled.last_move.to_uci() == "a7a8q"
    assert settled.move_history[-1] == settled.last_move
    assert pending_promotion(settled) is None
