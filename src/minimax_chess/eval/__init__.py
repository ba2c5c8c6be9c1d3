"""Evaluation heuristics and related utilities.

Pure, deterministic, and side-effect free. Scores are centipawns from black's
point of view: positive favours black whoever is to move.
"""

from __future__ import annotations

from typing import Dict, Final, List

from minimax_chess.engine.board import Board, Color, Piece, PieceType


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
# Sentinel only: kings are never captured, both sides' values cancel out
K_VAL: Final = 20000

PIECE_VALUES: Final[Dict[PieceType, int]] = {
    PieceType.PAWN: P_VAL,
    PieceType.KNIGHT: N_VAL,
    PieceType.BISHOP: B_VAL,
    PieceType.ROOK: R_VAL,
    PieceType.QUEEN: Q_VAL,
    PieceType.KING: K_VAL,
}

# Piece-square tables from white's perspective, indexed [row][col] with row 0
# the eighth rank (where white pawns promote).
PSQT_P: Final[List[List[int]]] = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

PSQT_N: Final[List[List[int]]] = [
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20, 0, 0, 0, 0, -20, -40],
    [-30, 0, 10, 15, 15, 10, 0, -30],
    [-30, 5, 15, 20, 20, 15, 5, -30],
    [-30, 0, 15, 20, 20, 15, 0, -30],
    [-30, 5, 10, 15, 15, 10, 5, -30],
    [-40, -20, 0, 5, 5, 0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
]

PSQT_B: Final[List[List[int]]] = [
    [-20, -10, -10, -10, -10, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 10, 10, 5, 0, -10],
    [-10, 5, 5, 10, 10, 5, 5, -10],
    [-10, 0, 10, 10, 10, 10, 0, -10],
    [-10, 10, 10, 10, 10, 10, 10, -10],
    [-10, 5, 0, 0, 0, 0, 5, -10],
    [-20, -10, -10, -10, -10, -10, -10, -20],
]

PSQT_R: Final[List[List[int]]] = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [5, 10, 10, 10, 10, 10, 10, 5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [0, 0, 0, 5, 5, 0, 0, 0],
]

PSQT_Q: Final[List[List[int]]] = [
    [-20, -10, -10, -5, -5, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 5, 5, 5, 0, -10],
    [-5, 0, 5, 5, 5, 5, 0, -5],
    [0, 0, 5, 5, 5, 5, 0, -5],
    [-10, 5, 5, 5, 5, 5, 0, -10],
    [-10, 0, 5, 0, 0, 0, 0, -10],
    [-20, -10, -10, -5, -5, -10, -10, -20],
]

# King safety: stay behind the pawn shield, keep off the open board
PSQT_K: Final[List[List[int]]] = [
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-20, -30, -30, -40, -40, -30, -30, -20],
    [-10, -20, -20, -20, -20, -20, -20, -10],
    [20, 20, 0, 0, 0, 0, 20, 20],
    [20, 30, 10, 0, 0, 10, 30, 20],
]

PSQT: Final[Dict[PieceType, List[List[int]]]] = {
    PieceType.PAWN: PSQT_P,
    PieceType.KNIGHT: PSQT_N,
    PieceType.BISHOP: PSQT_B,
    PieceType.ROOK: PSQT_R,
    PieceType.QUEEN: PSQT_Q,
    PieceType.KING: PSQT_K,
}


def _mirror_row(row: int) -> int:
    # Flip vertically (rank mirror)
    return 7 - row


def piece_square_value(piece: Piece, row: int, col: int) -> int:
    table_row = row if piece.color is Color.WHITE else _mirror_row(row)
    return PSQT[piece.type][table_row][col]


def evaluate(board: Board) -> int:
    """Return a static evaluation of ``board`` in centipawns, black-positive.

    Each piece contributes its material value plus its piece-square bonus;
    black pieces add to the score and white pieces subtract from it.
    """
    score = 0
    for pos, piece in board.pieces():
        value = PIECE_VALUES[piece.type] + piece_square_value(piece, pos.row, pos.col)
        if piece.color is Color.BLACK:
            score += value
        else:
            score -= value
    return score


def evaluate_for(board: Board, color: Color) -> int:
    """Return ``evaluate`` from ``color``'s point of view."""
    score = evaluate(board)
    return score if color is Color.BLACK else -score
