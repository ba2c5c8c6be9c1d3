from __future__ import annotations

import pytest

from minimax_chess.engine.board import Board, Color, Position
from minimax_chess.engine.move import square_to_str, str_to_square
from minimax_chess.engine.movegen import in_check, pseudo_legal_moves, square_attacked_by


KIWIPETE = [
    "r...k..r",
    "p.ppqpb.",
    "bn..pnp.",
    "...PN...",
    ".p..P...",
    "..N..Q.p",
    "PPPBBPPP",
    "R...K..R",
]

ENDGAME = [
    "........",
    "..p.....",
    "...p....",
    "KP.....r",
    ".R...p.k",
    "........",
    "....P.P.",
    "........",
]


def dests(board: Board, square: str) -> set[str]:
    return {square_to_str(p) for p in pseudo_legal_moves(board, str_to_square(square))}


def test_initial_pawn_and_knight_moves() -> None:
    b = Board.initial()
    assert dests(b, "e2") == {"e3", "e4"}
    assert dests(b, "e7") == {"e6", "e5"}
    assert dests(b, "b1") == {"a3", "c3"}
    assert dests(b, "a1") == set()
    assert dests(b, "e4") == set()


def test_pawn_double_push_needs_both_squares_empty() -> None:
    b = Board.from_diagram(
        [
            "....k...",
            "........",
            "........",
            "........",
            "....n...",
            "...n....",
            "...PP...",
            "....K...",
        ]
    )
    # d-pawn fully blocked; e-pawn may only step once
    assert dests(b, "d2") == set()
    assert dests(b, "e2") == {"e3", "d3"}


def test_sliders_stop_at_blockers() -> None:
    b = Board.from_diagram(
        [
            "....k...",
            "........",
            "........",
            "........",
            "P.......",
            "........",
            "........",
            "R...K..b",
        ]
    )
    assert dests(b, "a1") == {"a2", "a3", "b1", "c1", "d1"}


def test_en_passant_destination_only_when_target_given() -> None:
    b = Board.from_diagram(
        [
            "....k...",
            "........",
            "........",
            "...pP...",
            "........",
            "........",
            "........",
            "....K...",
        ]
    )
    assert dests(b, "e5") == {"e6"}
    with_ep = {
        square_to_str(p)
        for p in pseudo_legal_moves(b, str_to_square("e5"), str_to_square("d6"))
    }
    assert with_ep == {"e6", "d6"}


@pytest.mark.parametrize("diagram", [Board.initial().to_diagram(), KIWIPETE, ENDGAME])
def test_square_attacked_by_matches_pseudo_legal_generation(diagram: list[str]) -> None:
    b = Board.from_diagram(diagram)
    for color in (Color.WHITE, Color.BLACK):
        reachable = set()
        for pos, _ in b.pieces(color):
            reachable.update(pseudo_legal_moves(b, pos))
        for row in range(8):
            for col in range(8):
                pos = Position(row, col)
                assert square_attacked_by(b, pos, color) == (pos in reachable), (color, pos)


def test_pawn_attack_semantics() -> None:
    b = Board.from_diagram(
        [
            "....k...",
            "........",
            "........",
            "...n....",
            "....P...",
            "........",
            "........",
            "....K...",
        ]
    )
    # Push onto an empty square counts, diagonal onto an empty square does not
    assert square_attacked_by(b, str_to_square("e5"), Color.WHITE)
    assert not square_attacked_by(b, str_to_square("f5"), Color.WHITE)
    assert square_attacked_by(b, str_to_square("d5"), Color.WHITE)


def test_in_check() -> None:
    b = Board.from_diagram(
        [
            "....k...",
            "........",
            "........",
            "........",
            "........",
            "........",
            "........",
            "....R..K",
        ]
    )
    assert in_check(b, Color.BLACK)
    assert not in_check(b, Color.WHITE)
    assert not in_check(Board.empty(), Color.WHITE)
