"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; a rejection leaves the old state untouched
- Returns ActionResult with success/failure
- Checks card conservation after every accepted action
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import GameState, GamePhase, AttackPair, conservation_errors
from .action import Action, ActionType, ActionResult, Rejection
from .cards import beats
from .rules import RuleVariant, DEFAULT_RULES
from .refill import refill, check_finished


logger = logging.getLogger(__name__)


class InvariantViolation(RuntimeError):
    """Raised when an accepted action breaks card conservation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    The rule variant decides who may add attacks and the table/hand caps.
    """
    rules: RuleVariant = field(default_factory=lambda: DEFAULT_RULES)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or a named rejection.
        """
        rejection = self._validate_action(state, action)
        if rejection:
            message, code = rejection
            logger.debug("Rejected %s: %s", action.describe(), message)
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        result = handler(state, action)
        if not result.success:
            logger.debug("Rejected %s: %s", action.describe(), result.error)
            return result

        new_state = result.new_state
        errors = conservation_errors(new_state)
        if errors:
            logger.error("Card conservation broken after %s: %s",
                         action.describe(), errors)
            raise InvariantViolation(errors)

        for change in result.state_changes:
            new_state = new_state.with_event(change)
        result.new_state = new_state
        logger.debug("Applied %s -> phase %s", action.describe(), new_state.phase.value)
        return result

    def _validate_action(
        self, state: GameState, action: Action
    ) -> tuple[str, Rejection] | None:
        """
        Checks shared by every action type.

        Returns (message, code) if invalid, None if valid.
        """
        if state.phase == GamePhase.FINISHED:
            return "Game is over - no actions allowed", Rejection.WRONG_PHASE

        if state.get_player(action.player) is None:
            return f"No player with index {action.player}", Rejection.UNKNOWN_PLAYER

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.ATTACK: self._handle_attack,
            ActionType.DEFEND: self._handle_defend,
            ActionType.ADD_ATTACK: self._handle_add_attack,
            ActionType.TAKE: self._handle_take,
        }
        return handlers[action_type]

    def _handle_attack(self, state: GameState, action: Action) -> ActionResult:
        """Handle the opening attack of a round."""
        player_idx = action.player
        card = action.payload.card

        if player_idx != state.attacker:
            return ActionResult.failure(
                f"Player {player_idx + 1} is not the attacker", Rejection.WRONG_ACTOR
            )
        if state.phase != GamePhase.ATTACK:
            return ActionResult.failure(
                f"Cannot attack during {state.phase.value} phase", Rejection.WRONG_PHASE
            )
        player = state.players[player_idx]
        if card is None or not player.has_card(card):
            return ActionResult.failure(f"Card {card} not in hand", Rejection.CARD_NOT_OWNED)

        new_table = state.table + [AttackPair(attack=card, by=player_idx)]
        new_state = state.with_player(player.without_card(card))
        new_state = new_state._copy_with(
            table=new_table,
            phase=GamePhase.DEFEND,
            max_adds=self._max_adds(new_state, new_table),
        )

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player.name} attacks {card}"],
        )

    def _handle_defend(self, state: GameState, action: Action) -> ActionResult:
        """Handle a defence against one pair on the table."""
        player_idx = action.player
        card = action.payload.card
        pair_index = action.payload.pair_index

        if player_idx != state.defender:
            return ActionResult.failure(
                f"Player {player_idx + 1} is not the defender", Rejection.WRONG_ACTOR
            )
        if state.phase != GamePhase.DEFEND:
            return ActionResult.failure(
                f"Cannot defend during {state.phase.value} phase", Rejection.WRONG_PHASE
            )
        if pair_index is None or not 0 <= pair_index < len(state.table):
            return ActionResult.failure(
                f"No attack at position {pair_index}", Rejection.INVALID_TARGET
            )
        pair = state.table[pair_index]
        if pair.is_defended:
            return ActionResult.failure(
                f"{pair.attack} is already defended", Rejection.INVALID_TARGET
            )
        player = state.players[player_idx]
        if card is None or not player.has_card(card):
            return ActionResult.failure(f"Card {card} not in hand", Rejection.CARD_NOT_OWNED)
        if not beats(pair.attack, card, state.trump):
            return ActionResult.failure(
                f"Cannot beat {pair.attack} with {card}", Rejection.ILLEGAL_DEFEND
            )

        new_table = list(state.table)
        new_table[pair_index] = AttackPair(attack=pair.attack, defend=card, by=pair.by)
        new_state = state.with_player(player.without_card(card))
        new_state = new_state._copy_with(table=new_table)
        changes = [f"{player.name} defends {pair.attack} with {card}"]

        if all(p.is_defended for p in new_table):
            new_state, resolved = self._resolve_round(new_state)
            changes.extend(resolved)
        else:
            new_state = new_state._copy_with(
                max_adds=self._max_adds(new_state, new_table),
            )

        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_add_attack(self, state: GameState, action: Action) -> ActionResult:
        """Handle an extra attack thrown in while the defender is responding."""
        player_idx = action.player
        card = action.payload.card

        if state.phase != GamePhase.DEFEND:
            return ActionResult.failure(
                f"Cannot add attacks during {state.phase.value} phase",
                Rejection.WRONG_PHASE,
            )
        if not self.rules.may_add_attack(player_idx, state.attacker, state.defender):
            return ActionResult.failure(
                f"Player {player_idx + 1} may not add attacks", Rejection.WRONG_ACTOR
            )
        player = state.players[player_idx]
        if card is None or not player.has_card(card):
            return ActionResult.failure(f"Card {card} not in hand", Rejection.CARD_NOT_OWNED)
        if card.rank not in state.ranks_on_table():
            return ActionResult.failure(
                "Can only add cards with ranks already on table",
                Rejection.ILLEGAL_ADD_RANK,
            )
        if len(state.table) >= self.rules.max_table:
            return ActionResult.failure(
                f"Max {self.rules.max_table} attacks in one round", Rejection.TABLE_FULL
            )
        # The defender must be able to answer every open attack
        if len(state.undefended_pairs()) + 1 > state.defender_player.count:
            return ActionResult.failure(
                f"{state.defender_player.name} cannot answer another attack",
                Rejection.TABLE_FULL,
            )

        new_table = state.table + [AttackPair(attack=card, by=player_idx)]
        new_state = state.with_player(player.without_card(card))
        new_state = new_state._copy_with(
            table=new_table,
            max_adds=self._max_adds(new_state, new_table),
        )

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player.name} adds attack {card}"],
        )

    def _handle_take(self, state: GameState, action: Action) -> ActionResult:
        """Handle the defender giving up the round and picking up the table."""
        player_idx = action.player

        if player_idx != state.defender:
            return ActionResult.failure(
                f"Player {player_idx + 1} is not the defender", Rejection.WRONG_ACTOR
            )
        if state.phase != GamePhase.DEFEND:
            return ActionResult.failure(
                f"Cannot take during {state.phase.value} phase", Rejection.WRONG_PHASE
            )

        defender = state.players[player_idx]
        taken = state.table_cards()
        new_state = state.with_player(defender.with_hand(defender.hand + taken))
        new_state = new_state._copy_with(
            table=[],
            defender=(state.attacker + 1) % state.num_players,
            phase=GamePhase.CLEANUP,
            max_adds=0,
        )
        new_state = refill(new_state, self.rules.hand_size)._copy_with(phase=GamePhase.ATTACK)
        new_state, finished = check_finished(new_state)

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{defender.name} takes {len(taken)} cards"] + finished,
        )

    def _resolve_round(self, state: GameState) -> tuple[GameState, list[str]]:
        """
        Successful defence: discard the table, defender becomes attacker.

        Returns (state, events).
        """
        defender = state.defender_player
        new_attacker = state.defender
        new_state = state._copy_with(
            discard=state.discard + state.table_cards(),
            table=[],
            attacker=new_attacker,
            defender=(new_attacker + 1) % state.num_players,
            phase=GamePhase.CLEANUP,
            max_adds=0,
        )
        new_state = refill(new_state, self.rules.hand_size)._copy_with(phase=GamePhase.ATTACK)
        new_state, finished = check_finished(new_state)
        return new_state, [f"{defender.name} defended all. Becomes attacker."] + finished

    def _max_adds(self, state: GameState, table: list[AttackPair]) -> int:
        return max(0, min(state.defender_player.count, self.rules.max_table - len(table)))


def apply_action(
    state: GameState, action: Action, rules: RuleVariant | None = None
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rules=rules or DEFAULT_RULES)
    return reducer.apply(state, action)
