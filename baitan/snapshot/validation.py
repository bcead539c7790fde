"""
Snapshot Validation - Semantic checks on an imported game.

Structural validation is pydantic's job. This module checks that:
1. Indices are in range and consistent
2. Phase and table agree
3. Winners are only recorded on a finished game
4. Card conservation holds (the full 36-card deck, no duplicates)
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.action import Rejection
from ..engine_core.state import GameState, GamePhase, conservation_errors
from ..engine_core.rules import MAX_TABLE
from ..engine_core.refill import finished_players


class SnapshotImportError(Exception):
    """Raised when an imported snapshot is malformed."""

    code = Rejection.MALFORMED_IMPORT

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Snapshot import failed with {len(errors)} error(s): " + "; ".join(errors)
        )


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_snapshot(state: GameState) -> ValidationResult:
    """
    Validate a decoded game state.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []
    n = state.num_players

    for idx, player in enumerate(state.players):
        if player.player_id != idx:
            errors.append(f"Player at seat {idx} has id {player.player_id}")

    for field_name in ("attacker", "defender"):
        value = getattr(state, field_name)
        if not 0 <= value < n:
            errors.append(f"{field_name} index {value} out of range for {n} players")
    if state.phase != GamePhase.FINISHED and state.attacker == state.defender:
        errors.append("attacker and defender must be different players")

    errors.extend(_validate_table(state))
    if not errors:
        errors.extend(_validate_playable(state))

    if state.winners and state.phase != GamePhase.FINISHED:
        errors.append("winners recorded on a game that is not finished")
    for idx in state.winners:
        if not 0 <= idx < n:
            errors.append(f"winner index {idx} out of range")
        elif state.players[idx].hand or state.deck:
            errors.append(f"winner {idx} still has cards to play")

    errors.extend(conservation_errors(state))

    if state.deck and state.deck[0].suit != state.trump:
        warnings.append(
            f"Bottom card {state.deck[0]} does not match trump suit {state.trump.value}"
        )

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_table(state: GameState) -> list[str]:
    errors = []
    if len(state.table) > MAX_TABLE:
        errors.append(f"Table holds {len(state.table)} pairs (max {MAX_TABLE})")

    for i, pair in enumerate(state.table):
        if not 0 <= pair.by < state.num_players:
            errors.append(f"Table pair {i} played by unknown player {pair.by}")

    if state.phase == GamePhase.CLEANUP:
        errors.append("cleanup is a transient phase and cannot be imported")
    elif state.phase == GamePhase.DEFEND:
        if not state.undefended_pairs():
            errors.append("defend phase requires at least one undefended attack")
    elif state.table:
        errors.append(f"table must be empty during {state.phase.value} phase")

    return errors


def _validate_playable(state: GameState) -> list[str]:
    """
    Reject positions the engine can never move out of.

    Assumes indices and table shape were already checked.
    """
    errors = []
    if state.phase == GamePhase.ATTACK:
        # The end-of-game check runs before every attack phase begins
        if finished_players(state):
            errors.append("game meets the end condition but is not finished")
        elif state.attacker_player.is_empty:
            errors.append(f"attacker {state.attacker} has no cards to attack with")
    elif state.phase == GamePhase.DEFEND:
        open_pairs = len(state.undefended_pairs())
        if open_pairs > state.defender_player.count:
            errors.append(
                f"{open_pairs} open attacks but the defender holds "
                f"{state.defender_player.count} cards"
            )
    return errors
