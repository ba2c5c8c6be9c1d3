from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from .error import (
    exception_handler,
    game_error,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.board import Color, PieceType, Position
from ...engine.game import Game
from ...engine.move import square_to_str, str_to_square
from ...engine.rules import all_legal_moves
from ...search.service import Difficulty, SearchService, depth_for


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    computer_color: Optional[Color] = Field(
        default=Color.BLACK, description="Side played by the engine; null for two humans"
    )
    difficulty: Difficulty = Difficulty.MEDIUM


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Origin square, e.g. e2")
    to_square: str = Field(..., alias="to", description="Destination square, e.g. e4")


class PromoteRequest(BaseModel):
    piece: PieceType = Field(..., description="queen, rook, bishop or knight")


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=6)
    difficulty: Optional[Difficulty] = None
    movetime_ms: Optional[int] = Field(default=None, ge=1)


class GameStateResponse(BaseModel):
    game_id: str
    board: List[str]
    current_player: Color
    status: str
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: List[str]
    captured: Dict[str, List[str]]
    en_passant_target: Optional[str]
    castling_rights: Dict[str, bool]
    pending_promotion: Optional[str]
    legal_moves: List[str]
    computer_color: Optional[Color]
    difficulty: Difficulty


class SearchResponse(BaseModel):
    best_move: Optional[str]
    notation: Optional[str]
    score: Optional[int]
    nodes: int
    depth: int
    time_ms: int
    aborted: bool


class ComputerMoveResponse(SearchResponse):
    state: GameStateResponse


def create_app() -> FastAPI:
    app = FastAPI(title="Minimax Chess API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    # In-memory session store for games
    store = InMemorySessionStore()
    app.state.sessions = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=GameStateResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> GameStateResponse:
        req = req or CreateGameRequest()
        game = Game.new(computer_color=req.computer_color, difficulty=req.difficulty)
        game_id = store.create(game)
        return _state_response(game_id, game)

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        return _state_response(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/legal-moves")
    async def legal_moves(game_id: str, square: str) -> Dict[str, Any]:
        game = _require_game(store, game_id)
        pos = _parse_square(square)
        return {
            "square": square,
            "destinations": [square_to_str(p) for p in game.legal_moves(pos)],
        }

    @app.post("/api/games/{game_id}/move", response_model=GameStateResponse)
    def make_move(game_id: str, req: MoveRequest) -> GameStateResponse:
        game = _require_game(store, game_id)
        from_pos = _parse_square(req.from_square)
        to_pos = _parse_square(req.to_square)
        try:
            game.apply_move(from_pos, to_pos)
        except ValueError as e:
            raise game_error(e)
        return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/promote", response_model=GameStateResponse)
    def promote(game_id: str, req: PromoteRequest) -> GameStateResponse:
        game = _require_game(store, game_id)
        try:
            game.promote(req.piece)
        except ValueError as e:
            raise game_error(e)
        return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/computer-move", response_model=ComputerMoveResponse)
    async def computer_move(
        game_id: str, req: Optional[SearchRequest] = None
    ) -> ComputerMoveResponse:
        game = _require_game(store, game_id)
        req = req or SearchRequest()
        depth = _resolve_depth(req, game)
        try:
            # The search blocks for as long as it takes; keep it off the event loop
            res = await run_in_threadpool(game.computer_move, depth, req.movetime_ms)
        except ValueError as e:
            raise game_error(e)
        return ComputerMoveResponse(
            best_move=res.best_move.to_uci() if res.best_move else None,
            notation=res.best_move.notation if res.best_move else None,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            aborted=res.aborted,
            state=_state_response(game_id, game),
        )

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    async def search(game_id: str, req: Optional[SearchRequest] = None) -> SearchResponse:
        game = _require_game(store, game_id)
        req = req or SearchRequest()
        depth = _resolve_depth(req, game)
        res = await run_in_threadpool(
            SearchService().search, game.state, depth, req.movetime_ms
        )
        return SearchResponse(
            best_move=res.best_move.to_uci() if res.best_move else None,
            notation=res.best_move.notation if res.best_move else None,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            aborted=res.aborted,
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameStateResponse)
    def undo(game_id: str) -> GameStateResponse:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_response(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _parse_square(square: str) -> Position:
    try:
        return str_to_square(square)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _resolve_depth(req: SearchRequest, game: Game) -> int:
    if req.depth is not None:
        return req.depth
    return depth_for(req.difficulty or game.difficulty)


def _state_response(game_id: str, game: Game) -> GameStateResponse:
    state = game.state
    pending = game.pending_promotion
    if pending is None and not game.computer_to_move:
        moves = all_legal_moves(
            state.board, state.current_player, state.en_passant_target, state.castling_rights
        )
        legal = [square_to_str(f) + square_to_str(t) for f, t in moves]
    else:
        legal = []
    rights = state.castling_rights
    return GameStateResponse(
        game_id=game_id,
        board=state.board.to_diagram(),
        current_player=state.current_player,
        status=game.status().value,
        in_check=state.is_check,
        checkmate=state.is_checkmate,
        stalemate=state.is_stalemate,
        last_move=state.last_move.notation if state.last_move else None,
        move_history=game.move_history_notation(),
        captured={
            "white": [p.type.value for p in state.captured_pieces.white],
            "black": [p.type.value for p in state.captured_pieces.black],
        },
        en_passant_target=(
            square_to_str(state.en_passant_target) if state.en_passant_target else None
        ),
        castling_rights={
            "white_kingside": rights.white_kingside,
            "white_queenside": rights.white_queenside,
            "black_kingside": rights.black_kingside,
            "black_queenside": rights.black_queenside,
        },
        pending_promotion=square_to_str(pending) if pending else None,
        legal_moves=legal,
        computer_color=game.computer_color,
        difficulty=game.difficulty,
    )


# Default app for non-factory servers
app = create_app()
