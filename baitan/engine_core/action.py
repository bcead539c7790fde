"""
Action System - Actions, rejection codes and results.

Actions represent the four player moves of a round:
attack, defend, add-attack and take.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Card


class ActionType(Enum):
    """Types of actions in the system."""
    ATTACK = "attack"
    DEFEND = "defend"
    ADD_ATTACK = "add_attack"
    TAKE = "take"


class Rejection(str, Enum):
    """
    Named reasons an action is refused.

    Rejections are recoverable: the prior state is left untouched.
    """
    WRONG_ACTOR = "WrongActor"
    WRONG_PHASE = "WrongPhase"
    CARD_NOT_OWNED = "CardNotOwned"
    ILLEGAL_DEFEND = "IllegalDefend"
    ILLEGAL_ADD_RANK = "IllegalAddRank"
    TABLE_FULL = "TableFull"
    MALFORMED_IMPORT = "MalformedImport"
    INVALID_TARGET = "InvalidTarget"
    UNKNOWN_PLAYER = "UnknownPlayer"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    player: int
    card: Card | None = None
    pair_index: int | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are validated before application and
    applied atomically by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload

    @property
    def player(self) -> int:
        return self.payload.player

    @classmethod
    def attack(cls, player: int, card: Card) -> Action:
        """Factory for an opening attack."""
        return cls(
            action_type=ActionType.ATTACK,
            payload=ActionPayload(player=player, card=card),
        )

    @classmethod
    def defend(cls, player: int, pair_index: int, card: Card) -> Action:
        """Factory for a defence against one table pair."""
        return cls(
            action_type=ActionType.DEFEND,
            payload=ActionPayload(player=player, card=card, pair_index=pair_index),
        )

    @classmethod
    def add_attack(cls, player: int, card: Card) -> Action:
        """Factory for an additional attack during the defence."""
        return cls(
            action_type=ActionType.ADD_ATTACK,
            payload=ActionPayload(player=player, card=card),
        )

    @classmethod
    def take(cls, player: int) -> Action:
        """Factory for the defender picking up the table."""
        return cls(
            action_type=ActionType.TAKE,
            payload=ActionPayload(player=player),
        )

    def describe(self) -> str:
        parts = [self.action_type.value, f"player={self.payload.player}"]
        if self.payload.pair_index is not None:
            parts.append(f"pair={self.payload.pair_index}")
        if self.payload.card is not None:
            parts.append(f"card={self.payload.card}")
        return " ".join(parts)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error and its rejection code (if failed)
    - Human-readable events for the activity log
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: Rejection | None = None

    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: Rejection | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
