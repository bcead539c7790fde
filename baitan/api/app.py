"""
FastAPI Application - REST transport for pass-and-play front ends.

Endpoints:
    GET    /api/v1/health                     Health check
    POST   /api/v1/games                      Deal a new game (creates a session)
    GET    /api/v1/games                      List active sessions
    GET    /api/v1/games/{id}                 Current state
    DELETE /api/v1/games/{id}                 End session
    POST   /api/v1/games/{id}/new             Re-deal at the same table
    POST   /api/v1/games/{id}/attack          Opening attack
    POST   /api/v1/games/{id}/defend          Defend one pair
    POST   /api/v1/games/{id}/add-attack      Add an attack
    POST   /api/v1/games/{id}/take            Defender picks up the table
    POST   /api/v1/games/{id}/click           Card click, interpreted by role
    GET    /api/v1/games/{id}/export          Snapshot JSON
    POST   /api/v1/games/{id}/import          Replace state from a snapshot

Rejected actions return 409 with an ErrorResponse; the game is unchanged.
"""

from typing import Union
import dataclasses
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..engine_core.action import Action, ActionResult
from ..engine_core.cards import Card, parse_card
from ..engine_core.rules import RuleVariant
from ..session import Session, SessionManager
from .schemas import (
    # Request models
    CreateGameRequest,
    CardActionRequest,
    DefendRequest,
    TakeRequest,
    ImportRequest,
    # Response models
    GameStateResponse,
    ActionResponse,
    ExportResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

# Environment configuration
BAITAN_ENV = os.getenv("BAITAN_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(manager: SessionManager | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        manager: Optional SessionManager instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Bài Tấn Engine API",
        description="Rules engine for the 8-card Tấn trick-taking game (2-4 players).",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    sessions = manager or SessionManager()

    # =========================================================================
    # Helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def session_not_found(session_id: str) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            f"Session {session_id} not found",
            status_code=404,
        )

    def bad_card(key: str) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid card key: {key!r}",
            details={"card": key},
        )

    def state_response(session: Session) -> GameStateResponse:
        return GameStateResponse(**session.view())

    def action_response(
        session: Session, result: ActionResult
    ) -> Union[ActionResponse, JSONResponse]:
        if not result.success:
            return make_error_response(
                ErrorCode(result.error_code.value),
                result.error,
                status_code=409,
            )
        return ActionResponse(events=result.state_changes, state=state_response(session))

    def parse_card_key(key: str) -> Card | None:
        try:
            return parse_card(key)
        except ValueError:
            return None

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(
            environment=BAITAN_ENV,
            active_sessions=len(sessions.list_active_sessions()),
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        tags=["Games"],
        summary="Deal a new game",
    )
    async def create_game(request: CreateGameRequest) -> GameStateResponse:
        """Create a session and deal the opening hands."""
        rules = None
        if request.allow_side_attacks is not None:
            rules = dataclasses.replace(
                sessions.rules, allow_side_attacks=request.allow_side_attacks
            )
        session = sessions.create_session(
            num_players=request.num_players,
            seed=request.seed,
            rules=rules,
        )
        return state_response(session)

    @app.get("/api/v1/games", response_model=SessionListResponse, tags=["Games"])
    async def list_games() -> SessionListResponse:
        active = sessions.list_active_sessions()
        return SessionListResponse(sessions=active, count=len(active))

    @app.get(
        "/api/v1/games/{session_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
    )
    async def get_game(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        return state_response(session)

    @app.delete(
        "/api/v1/games/{session_id}",
        response_model=EndSessionResponse,
        tags=["Games"],
    )
    async def end_game(session_id: str) -> EndSessionResponse:
        success = sessions.end_session(session_id, reason="user_ended")
        return EndSessionResponse(success=success, session_id=session_id)

    @app.post(
        "/api/v1/games/{session_id}/new",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Re-deal at the same table",
    )
    async def redeal(
        session_id: str, request: CreateGameRequest
    ) -> Union[GameStateResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        rules = None
        if request.allow_side_attacks is not None:
            rules = dataclasses.replace(
                session.rules, allow_side_attacks=request.allow_side_attacks
            )
        session.new_game(request.num_players, seed=request.seed, rules=rules)
        return state_response(session)

    # =========================================================================
    # Action Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{session_id}/attack",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Actions"],
    )
    async def attack(
        session_id: str, request: CardActionRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        card = parse_card_key(request.card)
        if card is None:
            return bad_card(request.card)
        return action_response(session, session.apply(Action.attack(request.player, card)))

    @app.post(
        "/api/v1/games/{session_id}/defend",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Actions"],
    )
    async def defend(
        session_id: str, request: DefendRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        card = parse_card_key(request.card)
        if card is None:
            return bad_card(request.card)
        action = Action.defend(request.player, request.pair_index, card)
        return action_response(session, session.apply(action))

    @app.post(
        "/api/v1/games/{session_id}/add-attack",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Actions"],
    )
    async def add_attack(
        session_id: str, request: CardActionRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        card = parse_card_key(request.card)
        if card is None:
            return bad_card(request.card)
        return action_response(
            session, session.apply(Action.add_attack(request.player, card))
        )

    @app.post(
        "/api/v1/games/{session_id}/take",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Actions"],
    )
    async def take(
        session_id: str, request: TakeRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        return action_response(session, session.apply(Action.take(request.player)))

    @app.post(
        "/api/v1/games/{session_id}/click",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Actions"],
        summary="Play a card according to the player's current role",
    )
    async def click(
        session_id: str, request: CardActionRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        card = parse_card_key(request.card)
        if card is None:
            return bad_card(request.card)
        return action_response(session, session.click(request.player, card))

    # =========================================================================
    # Snapshot Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{session_id}/export",
        response_model=ExportResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Snapshots"],
    )
    async def export_game(session_id: str) -> Union[ExportResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        return ExportResponse(session_id=session_id, snapshot=session.export_state())

    @app.post(
        "/api/v1/games/{session_id}/import",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Snapshots"],
    )
    async def import_game(
        session_id: str, request: ImportRequest
    ) -> Union[ActionResponse, JSONResponse]:
        session = sessions.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        result = session.import_state(request.snapshot)
        if not result.success:
            return make_error_response(ErrorCode.MALFORMED_IMPORT, result.error)
        return ActionResponse(events=result.state_changes, state=state_response(session))

    return app


# For running directly: uvicorn baitan.api.app:app
app = create_app()
