from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceType(str, Enum):
    KING = "king"
    QUEEN = "queen"
    ROOK = "rook"
    BISHOP = "bishop"
    KNIGHT = "knight"
    PAWN = "pawn"


PIECE_TO_CHAR = {
    PieceType.KING: "k",
    PieceType.QUEEN: "q",
    PieceType.ROOK: "r",
    PieceType.BISHOP: "b",
    PieceType.KNIGHT: "n",
    PieceType.PAWN: "p",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}

BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

INITIAL_DIAGRAM = (
    "rnbqkbnr",
    "pppppppp",
    "........",
    "........",
    "........",
    "........",
    "PPPPPPPP",
    "RNBQKBNR",
)


@dataclass(frozen=True)
class Position:
    """A square on the board.

    Attributes:
        row (int): 0..7, row 0 is black's back rank (rank 8).
        col (int): 0..7, col 0 is the a-file.
    """

    row: int
    col: int

    def in_bounds(self) -> bool:
        return 0 <= self.row < 8 and 0 <= self.col < 8

    def offset(self, d_row: int, d_col: int) -> "Position":
        return Position(self.row + d_row, self.col + d_col)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    def symbol(self) -> str:
        ch = PIECE_TO_CHAR[self.type]
        return ch.upper() if self.color is Color.WHITE else ch


def home_row(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


def pawn_direction(color: Color) -> int:
    # White pawns move towards row 0
    return -1 if color is Color.WHITE else 1


class Board:
    """Fixed 8x8 grid of optional pieces.

    Notes:
    - Boards owned by a ``GameState`` are treated as read-only; every
      transition works on a ``copy()``.
    - Pieces are immutable values, so copying a row copies the board.
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: Optional[Sequence[Sequence[Optional[Piece]]]] = None) -> None:
        if grid is None:
            self._grid: List[List[Optional[Piece]]] = [[None] * 8 for _ in range(8)]
        else:
            if len(grid) != 8 or any(len(row) != 8 for row in grid):
                raise ValueError("board must be 8x8")
            self._grid = [list(row) for row in grid]

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def initial(cls) -> "Board":
        """Create a board with the standard starting setup."""
        board = cls()
        for col, kind in enumerate(BACK_RANK):
            board._grid[0][col] = Piece(kind, Color.BLACK)
            board._grid[1][col] = Piece(PieceType.PAWN, Color.BLACK)
            board._grid[6][col] = Piece(PieceType.PAWN, Color.WHITE)
            board._grid[7][col] = Piece(kind, Color.WHITE)
        return board

    @classmethod
    def from_diagram(cls, rows: Sequence[str]) -> "Board":
        """Build a board from eight 8-character rows.

        Args:
            rows (Sequence[str]): Row 0 (rank 8) first. ``.`` marks an empty
                square, upper-case letters are white pieces and lower-case
                letters black pieces (``KQRBNP``).

        Returns:
            Board: Board holding the described pieces.

        Raises:
            ValueError: If the diagram is not 8x8 or contains an unknown
                character.
        """
        if len(rows) != 8:
            raise ValueError("diagram must have 8 rows")
        board = cls()
        for r, line in enumerate(rows):
            if len(line) != 8:
                raise ValueError(f"diagram row {r} must have 8 squares: {line!r}")
            for c, ch in enumerate(line):
                if ch == ".":
                    continue
                kind = CHAR_TO_PIECE.get(ch.lower())
                if kind is None:
                    raise ValueError(f"invalid piece in diagram: {ch!r}")
                color = Color.WHITE if ch.isupper() else Color.BLACK
                board._grid[r][c] = Piece(kind, color)
        return board

    def to_diagram(self) -> List[str]:
        return [
            "".join("." if p is None else p.symbol() for p in row) for row in self._grid
        ]

    def copy(self) -> "Board":
        clone = Board.__new__(Board)
        clone._grid = [row[:] for row in self._grid]
        return clone

    def piece_at(self, pos: Position) -> Optional[Piece]:
        if not pos.in_bounds():
            return None
        return self._grid[pos.row][pos.col]

    def set_piece(self, pos: Position, piece: Optional[Piece]) -> None:
        if not pos.in_bounds():
            raise ValueError(f"position out of bounds: {pos}")
        self._grid[pos.row][pos.col] = piece

    def move_piece(self, from_pos: Position, to_pos: Position) -> Optional[Piece]:
        """Move whatever stands on ``from_pos`` to ``to_pos``; return the piece it replaced."""
        replaced = self._grid[to_pos.row][to_pos.col]
        self._grid[to_pos.row][to_pos.col] = self._grid[from_pos.row][from_pos.col]
        self._grid[from_pos.row][from_pos.col] = None
        return replaced

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Position, Piece]]:
        """Yield ``(position, piece)`` pairs in row-major order."""
        for r, row in enumerate(self._grid):
            for c, piece in enumerate(row):
                if piece is not None and (color is None or piece.color is color):
                    yield Position(r, c), piece

    def find_king(self, color: Color) -> Optional[Position]:
        for pos, piece in self.pieces(color):
            if piece.type is PieceType.KING:
                return pos
        return None

    def rows(self) -> Tuple[Tuple[Optional[Piece], ...], ...]:
        return tuple(tuple(row) for row in self._grid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __hash__(self) -> int:
        return hash(self.rows())

    def __repr__(self) -> str:
        return "Board(" + "/".join(self.to_diagram()) + ")"

    def __str__(self) -> str:
        return "\n".join(self.to_diagram())
