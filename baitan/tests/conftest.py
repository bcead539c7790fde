"""
Pytest fixtures for Bài Tấn tests.
"""

import pytest

from ..engine_core.cards import Suit, build_deck, parse_card
from ..engine_core.reducer import Reducer
from ..engine_core.rules import RuleVariant
from ..engine_core.setup import new_game
from ..engine_core.state import GameState, GamePhase, Player, AttackPair


def cards(*keys):
    """Parse card keys: cards("6♣", "10♦")."""
    return [parse_card(k) for k in keys]


def build_state(
    hands,
    trump=Suit.SPADES,
    attacker=0,
    defender=None,
    phase=GamePhase.ATTACK,
    table=None,
    deck=None,
    discard=None,
):
    """
    Build a state that holds the full deck.

    hands is a list of lists of card keys. table is a list of
    (attack, defend_or_None, by) tuples. When deck is None the unused
    cards form the deck, with one trump-suit card moved to the bottom
    (index 0). When deck is given, unused cards go to the discard pile.
    """
    players = [
        Player(player_id=i, name=f"Player {i + 1}", hand=cards(*h))
        for i, h in enumerate(hands)
    ]
    pairs = [
        AttackPair(
            attack=parse_card(a),
            defend=parse_card(d) if d else None,
            by=by,
        )
        for a, d, by in (table or [])
    ]
    used = [c for p in players for c in p.hand]
    used += [c for pair in pairs for c in pair.cards()]
    explicit_discard = cards(*(discard or []))
    used += explicit_discard

    if deck is None:
        remaining = [c for c in build_deck() if c not in used]
        bottom = next((c for c in remaining if c.suit == trump), None)
        if bottom is not None:
            remaining.remove(bottom)
            remaining.insert(0, bottom)
        deck_cards = remaining
        discard_cards = explicit_discard
    else:
        deck_cards = cards(*deck)
        used += deck_cards
        discard_cards = explicit_discard + [c for c in build_deck() if c not in used]

    n = len(players)
    return GameState(
        players=players,
        deck=deck_cards,
        trump=trump,
        table=pairs,
        attacker=attacker,
        defender=(attacker + 1) % n if defender is None else defender,
        phase=phase,
        discard=discard_cards,
    )


@pytest.fixture
def reducer() -> Reducer:
    """Reducer with the default (attacker-only add-attack) rules."""
    return Reducer()


@pytest.fixture
def side_attack_reducer() -> Reducer:
    """Reducer that lets every non-defender add attacks."""
    return Reducer(rules=RuleVariant(allow_side_attacks=True))


@pytest.fixture
def seeded_game() -> GameState:
    """A 3-player game dealt from a fixed seed."""
    return new_game(3, seed=1234)


@pytest.fixture
def three_player_state() -> GameState:
    """
    Hand-built 3-player state, trump ♠, player 1 attacking player 2.

    Player 2 holds only diamonds: no clubs and no trump.
    """
    return build_state([
        ["6♣", "7♣", "8♣", "9♣", "10♣", "J♣", "Q♣", "K♣"],
        ["6♦", "7♦", "8♦", "9♦", "10♦", "J♦", "Q♦", "K♦"],
        ["6♥", "7♥", "8♥", "9♥", "10♥", "J♥", "Q♥", "K♥"],
    ])


@pytest.fixture
def mixed_state() -> GameState:
    """
    Hand-built 3-player state, trump ♠, player 1 attacking player 2.

    Player 1 holds 7♦ and 7♣; player 2 holds 9♦ and low trumps.
    """
    return build_state([
        ["7♦", "7♣", "8♥", "10♥", "J♥", "Q♥", "K♥", "A♥"],
        ["9♦", "6♠", "7♠", "6♣", "8♣", "9♣", "10♣", "J♣"],
        ["6♦", "8♦", "10♦", "J♦", "Q♦", "K♦", "A♦", "6♥"],
    ])
