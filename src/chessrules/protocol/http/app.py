from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    rules_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.game import Game, Rejected
from ...engine.perft import perft as perft_nodes
from ...engine.state import GameState
from ...errors import ChessRulesError, IllegalMoveError
from .session import GameSessionStore


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Starting position; standard start if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string, fields separated by spaces or underscores")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move string, e.g. e2e4 or e7e8q")


class PromoteRequest(BaseModel):
    piece: Optional[str] = Field(default=None, description="One of q, r, b, n; anything else gives a queen")


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=4)


class GameStateModel(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    status: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    pending_promotion: Optional[str]
    halfmove_clock: int
    fullmove_number: int
    last_move: Optional[str]
    move_history: list[str]


class SnapshotModel(BaseModel):
    squares: List[str]
    status: str
    side_to_move: str
    checked_king: Optional[str]
    pending_promotion: Optional[str]
    fen: str


class DestinationsModel(BaseModel):
    square: str
    destinations: list[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessRulesError, rules_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = GameSessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = Game.from_fen(req.fen) if req is not None and req.fen else Game.new()
        game_id = store.create(game)
        logger.info("created game %s", game_id)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.get("/api/games/{game_id}/state", response_model=GameStateModel)
    async def get_state(game_id: str) -> GameStateModel:
        game = _require_game(store, game_id)
        with game.lock:
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameStateModel)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStateModel:
        _require_game(store, game_id)
        store.replace(game_id, Game.from_fen(req.fen))
        game = _require_game(store, game_id)
        with game.lock:
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameStateModel)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateModel:
        game = _require_game(store, game_id)
        with game.lock:
            outcome = game.apply_move(req.move)
            if isinstance(outcome, Rejected):
                raise IllegalMoveError(outcome.reason, outcome.message)
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/promote", response_model=GameStateModel)
    async def promote(game_id: str, req: PromoteRequest) -> GameStateModel:
        game = _require_game(store, game_id)
        with game.lock:
            if game.promote(req.piece) is None:
                raise HTTPException(status_code=409, detail="no promotion pending")
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameStateModel)
    async def undo(game_id: str) -> GameStateModel:
        game = _require_game(store, game_id)
        with game.lock:
            game.undo_move()
            return _state_model(game_id, game)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=DestinationsModel)
    async def destinations(game_id: str, square: str) -> DestinationsModel:
        game = _require_game(store, game_id)
        with game.lock:
            found = game.valid_destinations(square)
        return DestinationsModel(square=square, destinations=sorted(found))

    @app.get("/api/games/{game_id}/snapshot", response_model=SnapshotModel)
    async def snapshot(game_id: str) -> SnapshotModel:
        game = _require_game(store, game_id)
        with game.lock:
            snap = game.snapshot()
        return SnapshotModel(
            squares=list(snap.squares),
            status=snap.status.value,
            side_to_move=snap.side_to_move.value,
            checked_king=snap.checked_king,
            pending_promotion=snap.pending_promotion,
            fen=snap.fen,
        )

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        state = GameState.from_fen(req.fen)
        return {"nodes": perft_nodes(state.board(), state, req.depth)}

    return app


def _require_game(store: GameSessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state_model(game_id: str, game: Game) -> GameStateModel:
    history = game.move_history_uci()
    status = game.status()
    return GameStateModel(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.state.side_to_move.value,
        status=status.value,
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        pending_promotion=game.pending_promotion.square_name if game.pending_promotion else None,
        halfmove_clock=game.state.halfmove_clock,
        fullmove_number=game.state.fullmove_number,
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
