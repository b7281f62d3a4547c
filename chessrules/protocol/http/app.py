from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    rules_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.errors import ChessRulesError, FenError
from ...engine.fen import STARTPOS_FEN
from ...engine.game import Game
from ...engine.move import Move, Square, parse_promotion, parse_square
from ...engine.perft import perft as perft_nodes
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Initial FEN (default: startpos)")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Source square, e.g. e2")
    to_square: str = Field(..., alias="to", description="Destination square, e.g. e4")
    promotion: Optional[str] = Field(default=None, description="q, r, b or n")
    validated: bool = Field(default=False, description="Skip the legality check")


class ValidateResponse(BaseModel):
    valid: bool


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0, le=4)


class StatusModel(BaseModel):
    kind: str
    side: Optional[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    status: StatusModel
    in_check: bool
    castling: str
    legal_moves: list[str]
    last_move: Optional[str]
    move_history: list[str]


class PieceResponse(BaseModel):
    square: str
    piece: Optional[str]


class HistoryResponse(BaseModel):
    moves: list[str]


def create_app(log_level: str = "INFO") -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessRulesError, rules_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        fen = req.fen if req is not None and req.fen else None
        game = _load(fen) if fen else Game.new()
        game_id = store.create(game)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            return _state(game_id, _require(game))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        with store.locked(game_id) as game:
            _require(game)
            replacement = _load(req.fen)
            store.set(game_id, replacement)
            return _state(game_id, replacement)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        with store.locked(game_id) as game:
            game = _require(game)
            move = _build_move(game, req)
            if not game.make_move(move, validated=req.validated):
                logger.info("illegal move", extra={"game_id": game_id, "move": move.to_uci()})
                raise HTTPException(status_code=400, detail="illegal move")
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/validate", response_model=ValidateResponse)
    async def validate_move(game_id: str, req: MoveRequest) -> ValidateResponse:
        with store.locked(game_id) as game:
            game = _require(game)
            return ValidateResponse(valid=game.is_valid_move(_build_move(game, req)))

    @app.get("/api/games/{game_id}/pieces/{square}", response_model=PieceResponse)
    async def get_piece(game_id: str, square: str) -> PieceResponse:
        with store.locked(game_id) as game:
            game = _require(game)
            piece = game.piece_at(_square(square))
            return PieceResponse(square=square, piece=str(piece) if piece else None)

    @app.get("/api/games/{game_id}/history", response_model=HistoryResponse)
    async def get_history(game_id: str) -> HistoryResponse:
        with store.locked(game_id) as game:
            return HistoryResponse(moves=_require(game).move_history_uci())

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        game = _load(req.fen)
        return {"nodes": perft_nodes(game, req.depth)}

    return app


def _require(game: Optional[Game]) -> Game:
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _load(fen: str) -> Game:
    try:
        return Game.from_fen(fen)
    except FenError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")


def _square(text: str) -> Square:
    try:
        return parse_square(text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _build_move(game: Game, req: MoveRequest) -> Move:
    promotion = parse_promotion(req.promotion) if req.promotion else None
    return Move(_square(req.from_square), _square(req.to_square), game.side_to_move, promotion)


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history_uci()
    status = game.status
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.value,
        status=StatusModel(kind=status.kind.value, side=status.side.value if status.side else None),
        in_check=game.in_check(),
        castling=game.castling_rights.to_fen(),
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
