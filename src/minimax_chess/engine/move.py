from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .board import Piece, PieceType, Position


FILES = "abcdefgh"
PROMOTION_PIECES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)
NOTATION_LETTERS = {
    PieceType.KING: "K",
    PieceType.QUEEN: "Q",
    PieceType.ROOK: "R",
    PieceType.BISHOP: "B",
    PieceType.KNIGHT: "N",
    PieceType.PAWN: "",
}
PROMOTION_SUFFIX = {
    PieceType.QUEEN: "q",
    PieceType.ROOK: "r",
    PieceType.BISHOP: "b",
    PieceType.KNIGHT: "n",
}


@dataclass(frozen=True)
class Move:
    """A move as played, produced by the state transition.

    Attributes:
        from_pos (Position): Origin square.
        to_pos (Position): Destination square.
        piece (Piece): The piece that moved.
        captured_piece (Optional[Piece]): Piece removed from the board, if any
            (the passed pawn for en passant).
        is_en_passant (bool): Pawn captured en passant.
        is_castling (bool): King moved two files; the rook moved with it.
        promotion (Optional[PieceType]): Promotion piece, if known at
            creation time.
        notation (str): Algebraic-style text for move lists.
    """

    from_pos: Position
    to_pos: Position
    piece: Piece
    captured_piece: Optional[Piece] = None
    is_en_passant: bool = False
    is_castling: bool = False
    promotion: Optional[PieceType] = None
    notation: str = ""

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None

    def to_uci(self) -> str:
        """Serialize the move into coordinate form.

        Returns:
            str: Move encoded like ``"e2e4"``, or ``"e7e8q"`` once promoted.
        """
        uci = square_to_str(self.from_pos) + square_to_str(self.to_pos)
        if self.promotion is not None:
            uci += PROMOTION_SUFFIX[self.promotion]
        return uci


def str_to_square(s: str) -> Position:
    """Convert algebraic notation into a board position.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Position: Row/column of the square (rank 8 is row 0).

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return Position(row, col)


def square_to_str(pos: Position) -> str:
    """Convert a board position into algebraic notation.

    Raises:
        ValueError: If ``pos`` is off the board.
    """
    if not pos.in_bounds():
        raise ValueError(f"invalid square position: {pos}")
    return FILES[pos.col] + str(8 - pos.row)


def move_notation(
    piece: Piece,
    from_pos: Position,
    to_pos: Position,
    *,
    is_capture: bool,
    is_castling: bool,
) -> str:
    if is_castling:
        return "O-O" if to_pos.col == 6 else "O-O-O"
    letter = NOTATION_LETTERS[piece.type]
    from_file = FILES[from_pos.col] if piece.type is PieceType.PAWN and is_capture else ""
    marker = "x" if is_capture else ""
    return f"{letter}{from_file}{marker}{square_to_str(to_pos)}"
