"""
Pydantic Schemas for snapshots - the JSON shape of a shared game.

A snapshot is what one pass-and-play session copies out and another
pastes in. Cards travel as their canonical keys ("10♥", "6♣").
Structural problems surface as pydantic ValidationError.
"""

from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, Field

from ..engine_core.cards import Suit, parse_card
from ..engine_core.state import GamePhase, LOG_LIMIT


def _check_card_key(value: str) -> str:
    parse_card(value)
    return value


def _check_suit(value: str) -> str:
    Suit(value)
    return value


CardKey = Annotated[str, AfterValidator(_check_card_key)]
SuitSymbol = Annotated[str, AfterValidator(_check_suit)]


class PairModel(BaseModel):
    """One attack/defence pair on the table."""
    attack: CardKey
    defend: Optional[CardKey] = None
    by: int = Field(ge=0, description="Index of the attacking player")

    model_config = {"extra": "forbid"}


class PlayerModel(BaseModel):
    """A seat and its hand, in display order."""
    id: int = Field(ge=0)
    name: str
    hand: list[CardKey] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class SnapshotModel(BaseModel):
    """Complete serialized game state."""
    version: int = 1
    players: list[PlayerModel] = Field(min_length=2, max_length=4)
    deck: list[CardKey] = Field(
        default_factory=list,
        description="Draw pile; cards are drawn from the end, the trump card sits first",
    )
    trump: SuitSymbol
    table: list[PairModel] = Field(default_factory=list, max_length=8)
    attacker: int = Field(ge=0)
    defender: int = Field(ge=0)
    phase: GamePhase
    max_adds: int = Field(default=0, ge=0)
    discard: list[CardKey] = Field(default_factory=list)
    winners: list[int] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list, max_length=LOG_LIMIT)

    model_config = {"extra": "forbid"}
