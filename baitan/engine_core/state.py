"""
Game State - The single serializable snapshot of a Tấn game.

Design principles:
- Immutable-friendly: all mutations return new state
- Serializable: round-trips through baitan.snapshot without loss
- Auditable: every card is always in exactly one place
  (deck, a hand, the table or the discard pile)
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum

from .cards import Card, Rank, Suit, build_deck


LOG_LIMIT = 200


class GamePhase(Enum):
    """Turn engine phases."""
    ATTACK = "attack"
    DEFEND = "defend"
    CLEANUP = "cleanup"  # transient, between resolution and refill
    FINISHED = "finished"


@dataclass
class AttackPair:
    """One attack card and its (possibly still pending) defence."""
    attack: Card
    defend: Card | None = None
    by: int = 0  # index of the player who played the attack

    @property
    def is_defended(self) -> bool:
        return self.defend is not None

    def cards(self) -> list[Card]:
        if self.defend is None:
            return [self.attack]
        return [self.attack, self.defend]


@dataclass
class Player:
    """A seat at the table."""
    player_id: int
    name: str
    hand: list[Card] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.hand)

    @property
    def is_empty(self) -> bool:
        return len(self.hand) == 0

    def has_card(self, card: Card) -> bool:
        return card in self.hand

    def with_hand(self, hand: list[Card]) -> Player:
        """Return new player with a replaced hand."""
        return Player(player_id=self.player_id, name=self.name, hand=list(hand))

    def without_card(self, card: Card) -> Player:
        """Return new player with card removed from hand."""
        return self.with_hand([c for c in self.hand if c != card])


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.

    The deck is drawn from its end; the trump card sits at index 0
    and is the last card to be drawn.
    """
    players: list[Player]
    deck: list[Card]
    trump: Suit
    table: list[AttackPair] = field(default_factory=list)
    attacker: int = 0
    defender: int = 1
    phase: GamePhase = GamePhase.ATTACK
    max_adds: int = 0

    # Cards beaten off the table, out of play for good
    discard: list[Card] = field(default_factory=list)

    # Filled once, when the game finishes
    winners: list[int] = field(default_factory=list)

    # Event log, most recent first
    log: list[str] = field(default_factory=list)

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def attacker_player(self) -> Player:
        return self.players[self.attacker]

    @property
    def defender_player(self) -> Player:
        return self.players[self.defender]

    @property
    def deck_count(self) -> int:
        return len(self.deck)

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    @property
    def trump_card(self) -> Card | None:
        """The face-up trump card, while it is still in the deck."""
        return self.deck[0] if self.deck else None

    def undefended_pairs(self) -> list[int]:
        """Indices of table pairs still awaiting a defence."""
        return [i for i, pair in enumerate(self.table) if not pair.is_defended]

    def ranks_on_table(self) -> set[Rank]:
        ranks = set()
        for pair in self.table:
            for card in pair.cards():
                ranks.add(card.rank)
        return ranks

    def table_cards(self) -> list[Card]:
        cards = []
        for pair in self.table:
            cards.extend(pair.cards())
        return cards

    def get_player(self, player_id: int) -> Player | None:
        """Get player by index."""
        if 0 <= player_id < len(self.players):
            return self.players[player_id]
        return None

    def with_player(self, player: Player) -> GameState:
        """Return new state with updated player."""
        new_players = [
            player if p.player_id == player.player_id else p
            for p in self.players
        ]
        return self._copy_with(players=new_players)

    def with_event(self, text: str) -> GameState:
        """Return new state with an event prepended to the bounded log."""
        return self._copy_with(log=([text] + self.log)[:LOG_LIMIT])

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            players=kwargs.get("players", self.players),
            deck=kwargs.get("deck", self.deck),
            trump=kwargs.get("trump", self.trump),
            table=kwargs.get("table", self.table),
            attacker=kwargs.get("attacker", self.attacker),
            defender=kwargs.get("defender", self.defender),
            phase=kwargs.get("phase", self.phase),
            max_adds=kwargs.get("max_adds", self.max_adds),
            discard=kwargs.get("discard", self.discard),
            winners=kwargs.get("winners", self.winners),
            log=kwargs.get("log", self.log),
        )

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)


def all_cards(state: GameState) -> list[Card]:
    """Every card the state knows about, wherever it sits."""
    cards = list(state.deck)
    for player in state.players:
        cards.extend(player.hand)
    cards.extend(state.table_cards())
    cards.extend(state.discard)
    return cards


def conservation_errors(state: GameState) -> list[str]:
    """
    Check that the state holds exactly the 36-card deck.

    Returns a list of problems; empty means the invariant holds.
    """
    errors = []
    counts = Counter(all_cards(state))
    expected = set(build_deck())

    duplicates = sorted(str(c) for c, n in counts.items() if n > 1)
    if duplicates:
        errors.append(f"Duplicate cards: {', '.join(duplicates)}")

    missing = sorted(str(c) for c in expected if c not in counts)
    if missing:
        errors.append(f"Missing cards: {', '.join(missing)}")

    return errors
