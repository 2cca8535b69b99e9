from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from ...config import Settings
from ...engine.fen import parse_fen
from ...engine.game import Game, Outcome
from ...engine.move import parse_uci, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import Color, Kind, parse_kind
from ...errors import ChessRulesError, InvalidFen
from ...search.service import SearchService
from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    rules_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: Optional[str] = Field(default=None, description="UCI move string, e.g., e2e4")
    from_square: Optional[str] = Field(default=None, description="Origin square, e.g., e2")
    to_square: Optional[str] = Field(default=None, description="Destination square, e.g., e4")
    promotion: Optional[str] = Field(default=None, description="queen, rook, bishop or knight")


class PromoteRequest(BaseModel):
    piece: str = Field(..., description="queen, rook, bishop or knight")


class AIMoveRequest(BaseModel):
    level: Optional[int] = Field(default=None, ge=1, le=3)


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=5)


class OutcomeModel(BaseModel):
    kind: str
    winner: Optional[str]
    message: str


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    outcome: Optional[OutcomeModel]
    pending_promotion: Optional[str]
    last_move: Optional[str]
    move_history: list[str]
    events: list[OutcomeModel]


class SquareMoves(BaseModel):
    square: str
    piece: Optional[str]
    destinations: list[str]


class AttackedResponse(BaseModel):
    square: str
    by: str
    attacked: bool


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    store = InMemorySessionStore()
    service = SearchService(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        service.close()

    app = FastAPI(title="Chess Rules API", version="0.1.0", lifespan=lifespan)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessRulesError, rules_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        logger.info("game created", extra={"game_id": game_id})
        session = _require_session(store, game_id)
        return CreateGameResponse(game_id=game_id, fen=session.game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_session(store, game_id))

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, bool]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"deleted": True}

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_session(store, game_id)
        try:
            position = parse_fen(req.fen)
        except InvalidFen:
            raise HTTPException(status_code=400, detail="invalid FEN")
        session = store.replace_game(game_id, Game(position=position))
        return _state(game_id, session)

    @app.get("/api/games/{game_id}/squares/{square}/moves", response_model=SquareMoves)
    async def square_moves(game_id: str, square: str) -> SquareMoves:
        game = _require_session(store, game_id).game
        sq = str_to_square(square)
        piece = game.piece_at(sq)
        return SquareMoves(
            square=square_to_str(sq),
            piece=piece.symbol if piece else None,
            destinations=[square_to_str(d) for d in sorted(game.legal_destinations(sq))],
        )

    @app.get("/api/games/{game_id}/squares/{square}/attacked", response_model=AttackedResponse)
    async def square_attacked(game_id: str, square: str, by: Color) -> AttackedResponse:
        game = _require_session(store, game_id).game
        sq = str_to_square(square)
        return AttackedResponse(square=square_to_str(sq), by=by.value, attacked=game.is_attacked(sq, by))

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_session(store, game_id)
        if req.move:
            try:
                move = parse_uci(req.move)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            from_sq, to_sq, promotion = move.from_sq, move.to_sq, move.promotion
        elif req.from_square and req.to_square:
            from_sq = str_to_square(req.from_square)
            to_sq = str_to_square(req.to_square)
            promotion = _parse_promotion(req.promotion) if req.promotion else None
        else:
            raise HTTPException(status_code=400, detail="move or from_square/to_square is required")
        session.game.apply_move(from_sq, to_sq, promotion)
        return _state(game_id, session)

    @app.post("/api/games/{game_id}/promote", response_model=GameState)
    async def promote(game_id: str, req: PromoteRequest) -> GameState:
        session = _require_session(store, game_id)
        session.game.promote(_parse_promotion(req.piece))
        return _state(game_id, session)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        if not session.game.undo():
            raise HTTPException(status_code=400, detail="no moves to undo")
        return _state(game_id, session)

    @app.post("/api/games/{game_id}/ai-move", response_model=GameState)
    async def ai_move(game_id: str, req: AIMoveRequest) -> GameState:
        session = _require_session(store, game_id)
        if session.game.is_over():
            raise HTTPException(status_code=409, detail="game is over")
        service.play(session.game, req.level)
        return _state(game_id, session)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, Any]:
        try:
            position = parse_fen(req.fen)
        except InvalidFen:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(position, req.depth)}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _parse_promotion(name: str) -> Kind:
    try:
        return parse_kind(name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _outcome_model(outcome: Outcome) -> OutcomeModel:
    return OutcomeModel(
        kind=outcome.kind,
        winner=outcome.winner.value if outcome.winner else None,
        message=outcome.describe(),
    )


def _state(game_id: str, session: GameSession) -> GameState:
    game = session.game
    history: List[str] = game.move_history_uci()
    pending = game.pending_promotion
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.value,
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        outcome=_outcome_model(game.outcome) if game.outcome else None,
        pending_promotion=square_to_str(pending) if pending is not None else None,
        last_move=history[-1] if history else None,
        move_history=history,
        events=[_outcome_model(o) for o in session.drain_events()],
    )


# Default app for non-factory servers
app = create_app()
