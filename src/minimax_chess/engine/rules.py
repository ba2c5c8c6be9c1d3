from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .board import Board, Color, Piece, PieceType, Position, home_row
from .movegen import in_check, pseudo_legal_moves

if TYPE_CHECKING:
    from .state import CastlingRights


KING_HOME_COL = 4
# side -> (rook corner col, king destination col, rook destination col, squares that must be empty)
CASTLING_GEOMETRY = {
    "kingside": (7, 6, 5, (5, 6)),
    "queenside": (0, 2, 3, (1, 2, 3)),
}


def is_en_passant_capture(
    piece: Piece, from_pos: Position, to_pos: Position, en_passant_target: Optional[Position]
) -> bool:
    return (
        piece.type is PieceType.PAWN
        and en_passant_target is not None
        and to_pos == en_passant_target
        and from_pos.col != to_pos.col
    )


def is_castling_move(piece: Piece, from_pos: Position, to_pos: Position) -> bool:
    return piece.type is PieceType.KING and abs(to_pos.col - from_pos.col) == 2


def castling_rook_squares(king_to: Position) -> Tuple[Position, Position]:
    """Return ``(rook_from, rook_to)`` for a castling king landing on ``king_to``."""
    side = "kingside" if king_to.col == 6 else "queenside"
    rook_col, _, rook_to_col, _ = CASTLING_GEOMETRY[side]
    return Position(king_to.row, rook_col), Position(king_to.row, rook_to_col)


def simulate_move(
    board: Board, from_pos: Position, to_pos: Position, en_passant_target: Optional[Position]
) -> Board:
    """Return a scratch copy of ``board`` with the move's piece relocations applied."""
    scratch = board.copy()
    piece = board.piece_at(from_pos)
    if piece is None:
        return scratch
    if is_en_passant_capture(piece, from_pos, to_pos, en_passant_target):
        scratch.set_piece(Position(from_pos.row, to_pos.col), None)
    if is_castling_move(piece, from_pos, to_pos):
        rook_from, rook_to = castling_rook_squares(to_pos)
        scratch.move_piece(rook_from, rook_to)
    scratch.move_piece(from_pos, to_pos)
    return scratch


def _castling_destinations(
    board: Board, from_pos: Position, king: Piece, castling_rights: "CastlingRights"
) -> List[Position]:
    row = home_row(king.color)
    if from_pos != Position(row, KING_HOME_COL):
        return []
    if in_check(board, king.color):
        return []

    dests: List[Position] = []
    for side, (rook_col, king_to_col, _, between) in CASTLING_GEOMETRY.items():
        if not castling_rights.allows(king.color, side):
            continue
        if board.piece_at(Position(row, rook_col)) != Piece(PieceType.ROOK, king.color):
            continue
        if any(board.piece_at(Position(row, c)) is not None for c in between):
            continue
        step = 1 if king_to_col > KING_HOME_COL else -1
        crossed = Position(row, KING_HOME_COL + step)
        landing = Position(row, king_to_col)
        # The king may neither pass through nor land on an attacked square
        if any(_king_attacked_on(board, from_pos, sq, king.color) for sq in (crossed, landing)):
            continue
        dests.append(landing)
    return dests


def _king_attacked_on(board: Board, king_from: Position, sq: Position, color: Color) -> bool:
    scratch = board.copy()
    scratch.move_piece(king_from, sq)
    return in_check(scratch, color)


def legal_moves(
    board: Board,
    from_pos: Position,
    en_passant_target: Optional[Position],
    castling_rights: "CastlingRights",
) -> List[Position]:
    """Return the destinations the piece on ``from_pos`` may legally move to.

    Args:
        board (Board): Current board.
        from_pos (Position): Square of the piece to move.
        en_passant_target (Optional[Position]): En-passant square of the
            current state.
        castling_rights (CastlingRights): Castling flags of the current state.

    Returns:
        List[Position]: Pseudo-legal destinations plus eligible castling
            squares, minus every destination that would leave the mover's own
            king in check. Empty for an empty square.

    Notes:
        Each candidate is played out on a scratch board (en-passant removal and
        castling rook relocation included) and kept only if the mover's king
        is not attacked afterwards. This is the single legality test for all
        move kinds.
    """
    piece = board.piece_at(from_pos)
    if piece is None:
        return []

    candidates = pseudo_legal_moves(board, from_pos, en_passant_target)
    if piece.type is PieceType.KING:
        candidates = candidates + _castling_destinations(board, from_pos, piece, castling_rights)

    legal: List[Position] = []
    for to_pos in candidates:
        scratch = simulate_move(board, from_pos, to_pos, en_passant_target)
        if not in_check(scratch, piece.color):
            legal.append(to_pos)
    return legal


def has_legal_moves(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position],
    castling_rights: "CastlingRights",
) -> bool:
    """Return True if any ``color`` piece has a non-empty legal move set."""
    for pos, _ in board.pieces(color):
        if legal_moves(board, pos, en_passant_target, castling_rights):
            return True
    return False


def all_legal_moves(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position],
    castling_rights: "CastlingRights",
) -> List[Tuple[Position, Position]]:
    """Return every legal ``(from, to)`` pair for ``color``, row-major by origin."""
    moves: List[Tuple[Position, Position]] = []
    for pos, _ in board.pieces(color):
        for to_pos in legal_moves(board, pos, en_passant_target, castling_rights):
            moves.append((pos, to_pos))
    return moves
