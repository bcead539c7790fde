"""
Game Setup - Creates the initial game state.

This module handles:
- Building and shuffling the deck (seeded for determinism)
- Dealing 8 cards to each player, round-robin
- Turning up the trump card and tucking it under the deck
- Choosing the first attacker
"""

from __future__ import annotations
import logging
import random

from .cards import Card, Suit, build_deck, rank_value, shuffle
from .rules import RuleVariant, DEFAULT_RULES, MIN_PLAYERS, MAX_PLAYERS
from .state import GameState, GamePhase, Player


logger = logging.getLogger(__name__)


def new_game(
    num_players: int = 3,
    rng: random.Random | None = None,
    seed: int | None = None,
    rules: RuleVariant | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        num_players: Number of players (2-4)
        rng: Random source used for the shuffle
        seed: Seed for a fresh random source (ignored if rng is given)
        rules: Rule variant (hand size)

    Returns:
        Initial GameState in the attack phase
    """
    if num_players < MIN_PLAYERS or num_players > MAX_PLAYERS:
        raise ValueError(f"Tấn supports {MIN_PLAYERS}-{MAX_PLAYERS} players")

    rules = rules or DEFAULT_RULES
    rng = rng or random.Random(seed)

    deck = shuffle(build_deck(), rng)
    players = _create_players(num_players)
    players, deck = _deal(players, deck, rules.hand_size)

    # Trump card goes back under the deck; it is the last card drawn
    trump_card = deck.pop()
    deck.insert(0, trump_card)
    trump = trump_card.suit

    first = find_first_attacker(players, trump)

    state = GameState(
        players=players,
        deck=deck,
        trump=trump,
        table=[],
        attacker=first,
        defender=(first + 1) % num_players,
        phase=GamePhase.ATTACK,
        max_adds=0,
    )
    logger.debug("New game: %d players, trump %s, first attacker %d",
                 num_players, trump.value, first)
    return state.with_event(f"New game: {num_players} players, trump {trump.value}")


def find_first_attacker(players: list[Player], trump: Suit) -> int:
    """
    Index of the player holding the lowest trump.

    Falls back to player 0 when nobody holds a trump.
    """
    best: tuple[int, Card] | None = None
    for idx, player in enumerate(players):
        trumps = sorted(
            (c for c in player.hand if c.suit == trump),
            key=lambda c: rank_value(c.rank),
        )
        if not trumps:
            continue
        if best is None or rank_value(trumps[0].rank) < rank_value(best[1].rank):
            best = (idx, trumps[0])
    return best[0] if best else 0


def _create_players(num_players: int) -> list[Player]:
    return [Player(player_id=i, name=f"Player {i + 1}") for i in range(num_players)]


def _deal(
    players: list[Player], deck: list[Card], hand_size: int
) -> tuple[list[Player], list[Card]]:
    """Deal hand_size passes of one card each, drawing from the deck end."""
    deck = list(deck)
    hands: list[list[Card]] = [[] for _ in players]
    for _ in range(hand_size):
        for hand in hands:
            hand.append(deck.pop())
    return [p.with_hand(h) for p, h in zip(players, hands)], deck
