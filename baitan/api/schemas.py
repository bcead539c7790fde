"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a pass-and-play front end
and the engine.

Error Codes:
- WrongActor / WrongPhase / CardNotOwned / IllegalDefend /
  IllegalAddRank / TableFull / InvalidTarget / UnknownPlayer:
  the action was rejected; the game is unchanged
- MalformedImport: the pasted snapshot failed validation
- SESSION_NOT_FOUND: Session does not exist or has ended
- VALIDATION_ERROR: The request itself is malformed (e.g. unknown card key)
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    WRONG_ACTOR = "WrongActor"
    WRONG_PHASE = "WrongPhase"
    CARD_NOT_OWNED = "CardNotOwned"
    ILLEGAL_DEFEND = "IllegalDefend"
    ILLEGAL_ADD_RANK = "IllegalAddRank"
    TABLE_FULL = "TableFull"
    MALFORMED_IMPORT = "MalformedImport"
    INVALID_TARGET = "InvalidTarget"
    UNKNOWN_PLAYER = "UnknownPlayer"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PairInfo(BaseModel):
    """One attack pair on the table."""
    attack: str
    defend: Optional[str] = None
    by: int


class PlayerInfo(BaseModel):
    """Player information for display."""
    id: int
    name: str
    hand: list[str] = Field(default_factory=list)
    count: int = 0
    finished: bool = False


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    """Deal a new game."""
    num_players: int = Field(default=3, ge=2, le=4)
    seed: Optional[int] = Field(default=None, description="Shuffle seed for a reproducible deal")
    allow_side_attacks: Optional[bool] = Field(
        default=None,
        description="Let every non-defender add attacks (default: server setting)",
    )


class CardActionRequest(BaseModel):
    """Attack, add-attack or click with one card."""
    player: int = Field(ge=0)
    card: str = Field(description="Card key, e.g. '10♥'")


class DefendRequest(BaseModel):
    """Defend one pair on the table."""
    player: int = Field(ge=0)
    pair_index: int = Field(ge=0)
    card: str


class TakeRequest(BaseModel):
    """Defender picks up the table."""
    player: int = Field(ge=0)


class ImportRequest(BaseModel):
    """Paste a previously exported snapshot."""
    snapshot: str


# =============================================================================
# Responses
# =============================================================================

class GameStateResponse(BaseModel):
    """Everything the presentation layer needs to redraw."""
    session_id: str
    phase: str
    attacker: int
    defender: int
    trump: str
    trump_card: Optional[str] = None
    deck_count: int
    max_adds: int = 0
    table: list[PairInfo] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    winners: list[int] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)


class ActionResponse(BaseModel):
    """Result of an accepted action."""
    success: bool = True
    events: list[str] = Field(default_factory=list)
    state: GameStateResponse


class ExportResponse(BaseModel):
    """Serialized snapshot for sharing."""
    session_id: str
    snapshot: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class SessionListResponse(BaseModel):
    """Active session IDs."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Result of ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check."""
    status: str = "ok"
    environment: str
    active_sessions: int = 0
