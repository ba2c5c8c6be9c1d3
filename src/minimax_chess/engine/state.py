from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, Color, Piece, PieceType, Position, pawn_direction
from .move import PROMOTION_PIECES, Move, move_notation
from .movegen import in_check
from .rules import (
    castling_rook_squares,
    has_legal_moves,
    is_castling_move,
    is_en_passant_capture,
    legal_moves,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CastlingRights:
    """Castling availability; a flag never turns back on once cleared."""

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    def allows(self, color: Color, side: str) -> bool:
        return bool(getattr(self, f"{color.value}_{side}"))

    def revoke(self, color: Color, *sides: str) -> "CastlingRights":
        if not sides:
            sides = ("kingside", "queenside")
        return replace(self, **{f"{color.value}_{side}": False for side in sides})


# Original rook corner -> (owner, castling side it enables)
ROOK_CORNERS = {
    Position(7, 7): (Color.WHITE, "kingside"),
    Position(7, 0): (Color.WHITE, "queenside"),
    Position(0, 7): (Color.BLACK, "kingside"),
    Position(0, 0): (Color.BLACK, "queenside"),
}


@dataclass(frozen=True)
class CapturedPieces:
    """Pieces taken so far, keyed by the colour that captured them."""

    white: Tuple[Piece, ...] = ()
    black: Tuple[Piece, ...] = ()

    def add(self, capturer: Color, piece: Piece) -> "CapturedPieces":
        if capturer is Color.WHITE:
            return replace(self, white=self.white + (piece,))
        return replace(self, black=self.black + (piece,))

    def by(self, capturer: Color) -> Tuple[Piece, ...]:
        return self.white if capturer is Color.WHITE else self.black


class GameStatus(str, Enum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a game.

    Every transition returns a new ``GameState``; earlier snapshots stay valid
    and can be kept for undo or replay. ``board`` must not be mutated.
    """

    board: Board
    current_player: Color = Color.WHITE
    move_history: Tuple[Move, ...] = ()
    captured_pieces: CapturedPieces = field(default_factory=CapturedPieces)
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    last_move: Optional[Move] = None
    en_passant_target: Optional[Position] = None
    castling_rights: CastlingRights = field(default_factory=CastlingRights)

    @classmethod
    def initial(cls) -> "GameState":
        return cls(board=Board.initial())

    @classmethod
    def from_board(
        cls,
        board: Board,
        current_player: Color = Color.WHITE,
        *,
        castling_rights: Optional[CastlingRights] = None,
        en_passant_target: Optional[Position] = None,
    ) -> "GameState":
        """Create a state for an arbitrary setup and stamp its terminal flags.

        Castling rights default to none, since a hand-made setup carries no
        history proving that kings and rooks never moved.
        """
        rights = castling_rights if castling_rights is not None else CastlingRights.none()
        snapshot = board.copy()
        check, mate, stale = _terminal_flags(snapshot, current_player, en_passant_target, rights)
        return cls(
            board=snapshot,
            current_player=current_player,
            is_check=check,
            is_checkmate=mate,
            is_stalemate=stale,
            en_passant_target=en_passant_target,
            castling_rights=rights,
        )

    @property
    def is_game_over(self) -> bool:
        return self.is_checkmate or self.is_stalemate

    def legal_moves(self, from_pos: Position) -> List[Position]:
        return legal_moves(self.board, from_pos, self.en_passant_target, self.castling_rights)


def _terminal_flags(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position],
    castling_rights: CastlingRights,
) -> Tuple[bool, bool, bool]:
    check = in_check(board, color)
    can_move = has_legal_moves(board, color, en_passant_target, castling_rights)
    return check, check and not can_move, (not check) and not can_move


def _updated_castling_rights(
    rights: CastlingRights,
    piece: Piece,
    from_pos: Position,
    to_pos: Position,
    captured: Optional[Piece],
) -> CastlingRights:
    if piece.type is PieceType.KING:
        rights = rights.revoke(piece.color)
    elif piece.type is PieceType.ROOK and from_pos in ROOK_CORNERS:
        color, side = ROOK_CORNERS[from_pos]
        if color is piece.color:
            rights = rights.revoke(color, side)
    # A rook taken on its original corner takes its side's castling with it
    if captured is not None and captured.type is PieceType.ROOK and to_pos in ROOK_CORNERS:
        color, side = ROOK_CORNERS[to_pos]
        if color is captured.color:
            rights = rights.revoke(color, side)
    return rights


def make_move(state: GameState, from_pos: Position, to_pos: Position) -> Optional[GameState]:
    """Apply a move and return the next state, or None if it is not legal.

    Args:
        state (GameState): State to move from; never modified.
        from_pos (Position): Square of the piece to move.
        to_pos (Position): Destination square.

    Returns:
        Optional[GameState]: The successor state with flags, history, castling
            rights and en-passant target updated, or ``None`` when the square
            is empty, holds an opponent piece, or ``to_pos`` is not a legal
            destination.

    Notes:
        Promotion is not applied here; see ``promote_pawn``.
    """
    piece = state.board.piece_at(from_pos)
    if piece is None or piece.color is not state.current_player:
        logger.debug("rejected move from %s: no piece of the side to move", from_pos)
        return None
    if to_pos not in state.legal_moves(from_pos):
        logger.debug("rejected illegal move %s -> %s", from_pos, to_pos)
        return None

    board = state.board.copy()
    captured_pieces = state.captured_pieces
    captured: Optional[Piece] = None

    en_passant = is_en_passant_capture(piece, from_pos, to_pos, state.en_passant_target)
    if en_passant:
        victim_pos = Position(to_pos.row - pawn_direction(piece.color), to_pos.col)
        captured = board.piece_at(victim_pos)
        board.set_piece(victim_pos, None)
        if captured is not None:
            captured_pieces = captured_pieces.add(piece.color, captured)

    castling = is_castling_move(piece, from_pos, to_pos)
    if castling:
        rook_from, rook_to = castling_rook_squares(to_pos)
        board.move_piece(rook_from, rook_to)

    replaced = board.move_piece(from_pos, to_pos)
    if replaced is not None and not en_passant:
        captured = replaced
        captured_pieces = captured_pieces.add(piece.color, replaced)

    en_passant_target: Optional[Position] = None
    if piece.type is PieceType.PAWN and abs(to_pos.row - from_pos.row) == 2:
        en_passant_target = Position((from_pos.row + to_pos.row) // 2, from_pos.col)

    rights = _updated_castling_rights(
        state.castling_rights, piece, from_pos, to_pos, None if en_passant else replaced
    )

    move = Move(
        from_pos=from_pos,
        to_pos=to_pos,
        piece=piece,
        captured_piece=captured,
        is_en_passant=en_passant,
        is_castling=castling,
        notation=move_notation(
            piece, from_pos, to_pos, is_capture=captured is not None, is_castling=castling
        ),
    )

    next_player = piece.color.opponent
    check, mate, stale = _terminal_flags(board, next_player, en_passant_target, rights)
    return GameState(
        board=board,
        current_player=next_player,
        move_history=state.move_history + (move,),
        captured_pieces=captured_pieces,
        is_check=check,
        is_checkmate=mate,
        is_stalemate=stale,
        last_move=move,
        en_passant_target=en_passant_target,
        castling_rights=rights,
    )


def should_promote_pawn(board: Board, pos: Position) -> bool:
    """Return True if a pawn stands on the far rank for its colour."""
    piece = board.piece_at(pos)
    if piece is None or piece.type is not PieceType.PAWN:
        return False
    return (piece.color is Color.WHITE and pos.row == 0) or (
        piece.color is Color.BLACK and pos.row == 7
    )


def promote_pawn(state: GameState, pos: Position, new_type: PieceType) -> GameState:
    """Replace the pawn on ``pos`` with a piece of ``new_type``.

    Only that square changes; flags, history and rights are carried over.

    Raises:
        ValueError: If no pawn awaits promotion on ``pos`` or ``new_type`` is
            not a queen, rook, bishop or knight.
    """
    if new_type not in PROMOTION_PIECES:
        raise ValueError(f"cannot promote to {new_type.value}")
    pawn = state.board.piece_at(pos)
    if pawn is None or not should_promote_pawn(state.board, pos):
        raise ValueError(f"no pawn to promote on {pos}")
    board = state.board.copy()
    board.set_piece(pos, Piece(new_type, pawn.color))
    return replace(state, board=board)


def pending_promotion(state: GameState) -> Optional[Position]:
    """Return the square of a pawn that reached the far rank on the last move."""
    last = state.last_move
    if last is None or last.piece.type is not PieceType.PAWN:
        return None
    if should_promote_pawn(state.board, last.to_pos):
        return last.to_pos
    return None


def game_status(state: GameState) -> GameStatus:
    if state.is_checkmate:
        return GameStatus.CHECKMATE
    if state.is_stalemate:
        return GameStatus.STALEMATE
    if state.is_check:
        return GameStatus.CHECK
    return GameStatus.PLAYING


def settle_promotion(state: GameState, pos: Position, new_type: PieceType) -> GameState:
    """Promote and re-stamp the terminal flags and last move record.

    ``promote_pawn`` leaves everything but the board alone; a session that
    shows status after the promotion needs the flags to reflect the new piece.
    """
    promoted = promote_pawn(state, pos, new_type)
    check, mate, stale = _terminal_flags(
        promoted.board, promoted.current_player, promoted.en_passant_target,
        promoted.castling_rights,
    )
    last = promoted.last_move
    history = promoted.move_history
    if last is not None and last.to_pos == pos:
        last = replace(last, promotion=new_type)
        history = history[:-1] + (last,)
    return replace(
        promoted,
        is_check=check,
        is_checkmate=mate,
        is_stalemate=stale,
        last_move=last,
        move_history=history,
    )
