"""
Session Manager - Creates and manages pass-and-play game sessions.

A session represents one table of players sharing a device:
- Created when the players start a game
- Holds the current canonical GameState snapshot
- Applies one action at a time; only accepted actions replace the snapshot
- Exports/imports the snapshot so another device can continue the game

Sessions are EPHEMERAL:
- No persistence to database
- The exported JSON snapshot is the only way to carry a game elsewhere
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import random
import time
import uuid

from ..engine_core.action import Action, ActionResult, Rejection
from ..engine_core.cards import Card, identify
from ..engine_core.reducer import Reducer
from ..engine_core.rules import RuleVariant
from ..engine_core.setup import new_game
from ..engine_core.state import GameState, GamePhase
from ..snapshot import SnapshotImportError, deserialize, serialize


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Players quit


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The current canonical game state
    - The reducer configured with this table's rule variant
    - Session metadata

    The session is destroyed when the game ends.
    """
    session_id: str
    game_state: GameState
    rules: RuleVariant = field(default_factory=RuleVariant)
    created_at: float = field(default_factory=time.time)
    state: SessionState = SessionState.ACTIVE
    seed: int | None = None

    @property
    def reducer(self) -> Reducer:
        return Reducer(rules=self.rules)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state == SessionState.ACTIVE

    def apply(self, action: Action) -> ActionResult:
        """
        Apply one action to the current snapshot.

        The snapshot is only replaced when the action is accepted.
        """
        result = self.reducer.apply(self.game_state, action)
        if result.success:
            self.game_state = result.new_state
            if self.game_state.phase == GamePhase.FINISHED:
                self.state = SessionState.GAME_OVER
                logger.info("Session %s finished, winners %s",
                            self.session_id, self.game_state.winners)
        return result

    def click(self, player: int, card: Card) -> ActionResult:
        """
        Map a click on a card to the action it means for that player.

        Attacker in the attack phase attacks; the defender defends the
        first undefended pair; an eligible attacker adds an attack.
        """
        gs = self.game_state
        if gs.phase == GamePhase.ATTACK and player == gs.attacker:
            return self.apply(Action.attack(player, card))
        if gs.phase == GamePhase.DEFEND and player == gs.defender:
            open_pairs = gs.undefended_pairs()
            if not open_pairs:
                return ActionResult.failure("No attack to defend", Rejection.INVALID_TARGET)
            return self.apply(Action.defend(player, open_pairs[0], card))
        if gs.phase == GamePhase.DEFEND:
            return self.apply(Action.add_attack(player, card))
        if gs.phase == GamePhase.FINISHED:
            return ActionResult.failure("Game is over - no actions allowed", Rejection.WRONG_PHASE)
        return ActionResult.failure(
            f"Player {player + 1} has nothing to do right now", Rejection.WRONG_ACTOR
        )

    def new_game(
        self,
        num_players: int,
        seed: int | None = None,
        rules: RuleVariant | None = None,
    ) -> GameState:
        """Deal a fresh game at this table, optionally under new rules."""
        if rules is not None:
            self.rules = rules
        self.seed = seed
        self.game_state = new_game(num_players, seed=seed, rules=self.rules)
        self.state = SessionState.ACTIVE
        logger.info("Session %s dealt a new %d-player game", self.session_id, num_players)
        return self.game_state

    def export_state(self) -> str:
        """
        Serialize the current snapshot for sharing.

        The export itself is logged into the live snapshot first, so two
        exports in a row produce different JSON.
        """
        self.game_state = self.game_state.with_event(
            "Game state exported. Share it with friends to continue"
        )
        return serialize(self.game_state)

    def import_state(self, text: str) -> ActionResult:
        """
        Replace the snapshot with an imported one.

        A malformed import leaves the current game untouched.
        """
        try:
            imported = deserialize(text)
        except SnapshotImportError as e:
            return ActionResult.failure(str(e), Rejection.MALFORMED_IMPORT)

        self.game_state = imported.with_event("Imported game state")
        self.state = (
            SessionState.GAME_OVER if imported.is_finished else SessionState.ACTIVE
        )
        return ActionResult.success_with_state(
            self.game_state, changes=["Imported game state"]
        )

    def view(self) -> dict[str, Any]:
        """Query surface for the presentation layer."""
        gs = self.game_state
        return {
            "session_id": self.session_id,
            "phase": gs.phase.value,
            "attacker": gs.attacker,
            "defender": gs.defender,
            "trump": gs.trump.value,
            "trump_card": identify(gs.trump_card) if gs.trump_card else None,
            "deck_count": gs.deck_count,
            "max_adds": gs.max_adds,
            "table": [
                {
                    "attack": identify(pair.attack),
                    "defend": identify(pair.defend) if pair.defend else None,
                    "by": pair.by,
                }
                for pair in gs.table
            ],
            "players": [
                {
                    "id": p.player_id,
                    "name": p.name,
                    "hand": [identify(c) for c in p.hand],
                    "count": p.count,
                    "finished": p.is_empty and not gs.deck,
                }
                for p in gs.players
            ],
            "winners": list(gs.winners),
            "log": list(gs.log),
        }


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a freshly dealt game
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, rules: RuleVariant | None = None):
        self._sessions: dict[str, Session] = {}
        self.rules = rules or RuleVariant.from_env()

    def create_session(
        self,
        num_players: int = 3,
        seed: int | None = None,
        rules: RuleVariant | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            num_players: Number of players at the table (2-4)
            seed: Shuffle seed; a random one is drawn when omitted
            rules: Rule variant for this table (defaults to the manager's)

        Returns:
            New Session with the opening deal
        """
        rules = rules or self.rules
        if seed is None:
            seed = random.SystemRandom().randint(0, 2**31 - 1)
        session_id = str(uuid.uuid4())
        session = Session(
            session_id=session_id,
            game_state=new_game(num_players, seed=seed, rules=rules),
            rules=rules,
            seed=seed,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s (%d players, seed %d)",
                    session_id, num_players, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and remove it from memory.

        Returns True if a session was removed.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions still being played."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove finished sessions older than max_age_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
            and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
