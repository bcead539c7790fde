"""
API Module - HTTP interface for pass-and-play front ends.

Exposes the engine via REST:
1. Deal a game (creates a session)
2. Send attack / defend / add-attack / take actions
3. Read the state to redraw
4. Export and import snapshots to continue on another device

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    CardActionRequest,
    DefendRequest,
    TakeRequest,
    ImportRequest,
    # Responses
    GameStateResponse,
    ActionResponse,
    ExportResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    PairInfo,
    ErrorCode,
)
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "CardActionRequest",
    "DefendRequest",
    "TakeRequest",
    "ImportRequest",
    # Responses
    "GameStateResponse",
    "ActionResponse",
    "ExportResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "PairInfo",
    "ErrorCode",
    # App
    "create_app",
]
