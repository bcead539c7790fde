"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. The presentation layer, to decide what a click on a card means
2. The CLI, to list options for the player in the hot seat
3. Property tests that walk whole games through legal moves

Every generated action is accepted by the Reducer with the same rules.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import GameState, GamePhase
from .action import Action
from .cards import beats
from .rules import RuleVariant, DEFAULT_RULES


@dataclass
class ActionGenerator:
    """Generates legal actions for the current game state."""
    rules: RuleVariant = field(default_factory=lambda: DEFAULT_RULES)

    def generate(self, state: GameState) -> list[Action]:
        """Generate all legal actions for every player."""
        if state.phase == GamePhase.FINISHED:
            return []

        if state.phase == GamePhase.ATTACK:
            return self._generate_attack_actions(state)

        actions = []
        if state.phase == GamePhase.DEFEND:
            actions.extend(self._generate_defend_actions(state))
            actions.extend(self._generate_add_attack_actions(state))
            actions.append(Action.take(state.defender))
        return actions

    def generate_for_player(self, state: GameState, player: int) -> list[Action]:
        """Generate legal actions for a specific player."""
        return [a for a in self.generate(state) if a.player == player]

    def _generate_attack_actions(self, state: GameState) -> list[Action]:
        attacker = state.attacker_player
        return [Action.attack(state.attacker, card) for card in attacker.hand]

    def _generate_defend_actions(self, state: GameState) -> list[Action]:
        defender = state.defender_player
        actions = []
        for pair_index in state.undefended_pairs():
            attack = state.table[pair_index].attack
            for card in defender.hand:
                if beats(attack, card, state.trump):
                    actions.append(Action.defend(state.defender, pair_index, card))
        return actions

    def _generate_add_attack_actions(self, state: GameState) -> list[Action]:
        if len(state.table) >= self.rules.max_table:
            return []
        if len(state.undefended_pairs()) + 1 > state.defender_player.count:
            return []

        ranks = state.ranks_on_table()
        actions = []
        for player in state.players:
            if not self.rules.may_add_attack(
                player.player_id, state.attacker, state.defender
            ):
                continue
            for card in player.hand:
                if card.rank in ranks:
                    actions.append(Action.add_attack(player.player_id, card))
        return actions


def legal_actions(state: GameState, rules: RuleVariant | None = None) -> list[Action]:
    """Convenience function to get legal actions."""
    generator = ActionGenerator(rules=rules or DEFAULT_RULES)
    return generator.generate(state)
