"""Pseudo-legal move generation and attack detection.

Pure functions over a ``Board``; nothing here consults castling rights or
king safety of the mover.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .board import Board, Color, Piece, PieceType, Position, pawn_direction


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
DIAGONALS: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ORTHOGONALS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def pawn_start_row(color: Color) -> int:
    return 6 if color is Color.WHITE else 1


def _pawn_moves(
    board: Board, from_pos: Position, color: Color, en_passant_target: Optional[Position]
) -> List[Position]:
    moves: List[Position] = []
    d = pawn_direction(color)

    forward = from_pos.offset(d, 0)
    if forward.in_bounds() and board.piece_at(forward) is None:
        moves.append(forward)
        if from_pos.row == pawn_start_row(color):
            double = from_pos.offset(2 * d, 0)
            if board.piece_at(double) is None:
                moves.append(double)

    for dc in (-1, 1):
        cap = from_pos.offset(d, dc)
        if not cap.in_bounds():
            continue
        target = board.piece_at(cap)
        if target is not None and target.color is not color:
            moves.append(cap)
        elif en_passant_target is not None and cap == en_passant_target:
            moves.append(cap)
    return moves


def _step_moves(
    board: Board, from_pos: Position, color: Color, offsets: Tuple[Tuple[int, int], ...]
) -> List[Position]:
    moves: List[Position] = []
    for dr, dc in offsets:
        to = from_pos.offset(dr, dc)
        if not to.in_bounds():
            continue
        target = board.piece_at(to)
        if target is None or target.color is not color:
            moves.append(to)
    return moves


def _slide_moves(
    board: Board, from_pos: Position, color: Color, directions: Tuple[Tuple[int, int], ...]
) -> List[Position]:
    moves: List[Position] = []
    for dr, dc in directions:
        to = from_pos.offset(dr, dc)
        while to.in_bounds():
            target = board.piece_at(to)
            if target is None:
                moves.append(to)
            else:
                if target.color is not color:
                    moves.append(to)
                break
            to = to.offset(dr, dc)
    return moves


_Generator = Callable[[Board, Position, Piece, Optional[Position]], List[Position]]

_GENERATORS: Dict[PieceType, _Generator] = {
    PieceType.PAWN: lambda b, p, pc, ep: _pawn_moves(b, p, pc.color, ep),
    PieceType.KNIGHT: lambda b, p, pc, ep: _step_moves(b, p, pc.color, KNIGHT_OFFSETS),
    PieceType.BISHOP: lambda b, p, pc, ep: _slide_moves(b, p, pc.color, DIAGONALS),
    PieceType.ROOK: lambda b, p, pc, ep: _slide_moves(b, p, pc.color, ORTHOGONALS),
    PieceType.QUEEN: lambda b, p, pc, ep: _slide_moves(b, p, pc.color, DIAGONALS + ORTHOGONALS),
    PieceType.KING: lambda b, p, pc, ep: _step_moves(b, p, pc.color, KING_OFFSETS),
}


def pseudo_legal_moves(
    board: Board, from_pos: Position, en_passant_target: Optional[Position] = None
) -> List[Position]:
    """Return destinations allowed by the piece's movement pattern.

    Args:
        board (Board): Position to inspect.
        from_pos (Position): Square of the moving piece.
        en_passant_target (Optional[Position]): Square a pawn may capture onto
            en passant, if any.

    Returns:
        List[Position]: Destinations in generation order; empty when
            ``from_pos`` is empty or off the board. King safety is not
            considered.
    """
    piece = board.piece_at(from_pos)
    if piece is None:
        return []
    return _GENERATORS[piece.type](board, from_pos, piece, en_passant_target)


def square_attacked_by(board: Board, pos: Position, by_color: Color) -> bool:
    """Return True if some ``by_color`` piece has ``pos`` among its pseudo-legal moves.

    Scans outwards from ``pos`` instead of generating every enemy move list.
    Pawn semantics follow the move generator: onto an empty square only
    pushes count, onto an occupied square only diagonal captures count. En
    passant is ignored.
    """
    if not pos.in_bounds():
        return False
    target = board.piece_at(pos)
    if target is not None and target.color is by_color:
        return False

    # Pawns
    d = pawn_direction(by_color)
    if target is None:
        behind = pos.offset(-d, 0)
        if _is(board.piece_at(behind), PieceType.PAWN, by_color):
            return True
        if board.piece_at(behind) is None:
            origin = pos.offset(-2 * d, 0)
            if origin.row == pawn_start_row(by_color) and _is(
                board.piece_at(origin), PieceType.PAWN, by_color
            ):
                return True
    else:
        for dc in (-1, 1):
            if _is(board.piece_at(pos.offset(-d, dc)), PieceType.PAWN, by_color):
                return True

    for dr, dc in KNIGHT_OFFSETS:
        if _is(board.piece_at(pos.offset(dr, dc)), PieceType.KNIGHT, by_color):
            return True
    for dr, dc in KING_OFFSETS:
        if _is(board.piece_at(pos.offset(dr, dc)), PieceType.KING, by_color):
            return True

    for directions, slider in ((DIAGONALS, PieceType.BISHOP), (ORTHOGONALS, PieceType.ROOK)):
        for dr, dc in directions:
            sq = pos.offset(dr, dc)
            while sq.in_bounds():
                piece = board.piece_at(sq)
                if piece is not None:
                    if piece.color is by_color and piece.type in (slider, PieceType.QUEEN):
                        return True
                    break
                sq = sq.offset(dr, dc)
    return False


def in_check(board: Board, color: Color) -> bool:
    """Return True if ``color``'s king is attacked; False when it has no king."""
    king_pos = board.find_king(color)
    if king_pos is None:
        return False
    return square_attacked_by(board, king_pos, color.opponent)


def _is(piece: Optional[Piece], kind: PieceType, color: Color) -> bool:
    return piece is not None and piece.type is kind and piece.color is color
