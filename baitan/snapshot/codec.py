"""
Snapshot codec - GameState <-> JSON text.

deserialize(serialize(state)) == state for every reachable state:
deck order, hand order, table order, phase, indices and log all survive.
"""

from __future__ import annotations
import logging

from pydantic import ValidationError

from ..engine_core.cards import Suit, identify, parse_card
from ..engine_core.state import GameState, Player, AttackPair
from .schema import SnapshotModel, PairModel, PlayerModel
from .validation import SnapshotImportError, validate_snapshot


logger = logging.getLogger(__name__)


def to_model(state: GameState) -> SnapshotModel:
    """Convert engine state to its pydantic snapshot."""
    return SnapshotModel(
        players=[
            PlayerModel(
                id=p.player_id,
                name=p.name,
                hand=[identify(c) for c in p.hand],
            )
            for p in state.players
        ],
        deck=[identify(c) for c in state.deck],
        trump=state.trump.value,
        table=[
            PairModel(
                attack=identify(pair.attack),
                defend=identify(pair.defend) if pair.defend else None,
                by=pair.by,
            )
            for pair in state.table
        ],
        attacker=state.attacker,
        defender=state.defender,
        phase=state.phase,
        max_adds=state.max_adds,
        discard=[identify(c) for c in state.discard],
        winners=list(state.winners),
        log=list(state.log),
    )


def from_model(model: SnapshotModel) -> GameState:
    """Convert a pydantic snapshot back to engine state."""
    return GameState(
        players=[
            Player(
                player_id=p.id,
                name=p.name,
                hand=[parse_card(k) for k in p.hand],
            )
            for p in model.players
        ],
        deck=[parse_card(k) for k in model.deck],
        trump=Suit(model.trump),
        table=[
            AttackPair(
                attack=parse_card(pair.attack),
                defend=parse_card(pair.defend) if pair.defend else None,
                by=pair.by,
            )
            for pair in model.table
        ],
        attacker=model.attacker,
        defender=model.defender,
        phase=model.phase,
        max_adds=model.max_adds,
        discard=[parse_card(k) for k in model.discard],
        winners=list(model.winners),
        log=list(model.log),
    )


def serialize(state: GameState) -> str:
    """Serialize a game state to JSON text."""
    return to_model(state).model_dump_json()


def deserialize(text: str) -> GameState:
    """
    Parse and validate a JSON snapshot.

    Raises SnapshotImportError if the text is not valid JSON, does not
    match the snapshot schema, or describes an impossible game.
    """
    try:
        model = SnapshotModel.model_validate_json(text)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or 'snapshot'}: {err['msg']}"
            for err in e.errors()
        ]
        logger.warning("Rejected snapshot import: %s", errors)
        raise SnapshotImportError(errors) from e

    state = from_model(model)
    result = validate_snapshot(state)
    if not result.valid:
        logger.warning("Rejected snapshot import: %s", result.errors)
        raise SnapshotImportError(result.errors)
    for warning in result.warnings:
        logger.warning("Snapshot import: %s", warning)
    return state
