from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .board import Color, PieceType, Position
from .move import Move, square_to_str
from .state import (
    GameState,
    GameStatus,
    game_status,
    make_move,
    pending_promotion,
    settle_promotion,
)
from ..search.service import Difficulty, SearchResult, SearchService, depth_for


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a stack of state snapshots with helper operations.

    Responsibility: track the current ``GameState``, apply human and computer
    moves, handle promotion and undo. Transitions are serialized by ``lock``.
    """

    states: List[GameState] = field(default_factory=lambda: [GameState.initial()])
    computer_color: Optional[Color] = Color.BLACK
    difficulty: Difficulty = Difficulty.MEDIUM
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def new(
        cls,
        computer_color: Optional[Color] = Color.BLACK,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> "Game":
        return cls(computer_color=computer_color, difficulty=Difficulty(difficulty))

    @classmethod
    def from_state(cls, state: GameState, computer_color: Optional[Color] = None) -> "Game":
        return cls(states=[state], computer_color=computer_color)

    @property
    def state(self) -> GameState:
        return self.states[-1]

    @property
    def computer_to_move(self) -> bool:
        return self.computer_color is not None and self.state.current_player is self.computer_color

    @property
    def pending_promotion(self) -> Optional[Position]:
        return pending_promotion(self.state)

    def legal_moves(self, from_pos: Position) -> List[Position]:
        if self.pending_promotion is not None or self.computer_to_move:
            return []
        piece = self.state.board.piece_at(from_pos)
        if piece is None or piece.color is not self.state.current_player:
            return []
        return self.state.legal_moves(from_pos)

    def apply_move(self, from_pos: Position, to_pos: Position) -> GameState:
        """Play a human move.

        Raises:
            ValueError: If a promotion is outstanding, the computer is to move,
                or the move is illegal.
        """
        with self.lock:
            if self.pending_promotion is not None:
                raise ValueError("promotion pending")
            if self.computer_to_move:
                raise ValueError("not your turn")
            return self._play(from_pos, to_pos)

    def _play(self, from_pos: Position, to_pos: Position) -> GameState:
        nxt = make_move(self.state, from_pos, to_pos)
        if nxt is None:
            raise ValueError("illegal move")
        self.states.append(nxt)
        logger.info("move %s (%s)", nxt.move_history[-1].notation, game_status(nxt).value)
        return nxt

    def promote(self, piece_type: PieceType) -> GameState:
        with self.lock:
            square = self.pending_promotion
            if square is None:
                raise ValueError("no promotion pending")
            promoted = settle_promotion(self.state, square, piece_type)
            # Same ply: the snapshot is replaced, not pushed
            self.states[-1] = promoted
            logger.info("promoted on %s to %s", square_to_str(square), piece_type.value)
            return promoted

    def computer_move(
        self, depth: Optional[int] = None, movetime_ms: Optional[int] = None
    ) -> SearchResult:
        """Search for and play the computer's move, promoting to a queen if needed.

        Raises:
            ValueError: If the game is over, a promotion is outstanding, or the
                side to move is not the computer's.
        """
        with self.lock:
            state = self.state
            if state.is_game_over:
                raise ValueError("game is over")
            if self.pending_promotion is not None:
                raise ValueError("promotion pending")
            if self.computer_color is not None and state.current_player is not self.computer_color:
                raise ValueError("not the computer's turn")

            result = SearchService().search(
                state,
                depth=depth if depth is not None else depth_for(self.difficulty),
                movetime_ms=movetime_ms,
            )
            if result.best_move is None:
                raise ValueError("no legal moves")
            self._play(result.best_move.from_pos, result.best_move.to_pos)
            if self.pending_promotion is not None:
                self.promote(PieceType.QUEEN)
            return result

    def undo_move(self) -> GameState:
        with self.lock:
            if len(self.states) <= 1:
                raise ValueError("no moves to undo")
            self.states.pop()
            return self.state

    # --- State flags for protocol ---
    def status(self) -> GameStatus:
        return game_status(self.state)

    def last_move(self) -> Optional[Move]:
        return self.state.last_move

    def move_history_notation(self) -> List[str]:
        return [m.notation for m in self.state.move_history]
