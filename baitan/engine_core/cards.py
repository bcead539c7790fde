"""
Cards - Card identity, ordering and deck construction.

The Tấn deck is the 36-card short pack:
- 4 suits: ♣ (nhép), ♦ (rô), ♥ (cơ), ♠ (bích)
- 9 ranks: 6 through A, low to high

Cards are immutable values; two cards are equal iff suit and rank match.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import random


class Suit(Enum):
    """The four suits, in deck-building order."""
    CLUBS = "♣"
    DIAMONDS = "♦"
    HEARTS = "♥"
    SPADES = "♠"


class Rank(Enum):
    """The nine ranks, declared low to high."""
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


SUITS: list[Suit] = list(Suit)
RANKS: list[Rank] = list(Rank)

DECK_SIZE = len(SUITS) * len(RANKS)


def rank_value(rank: Rank) -> int:
    """Total order index used for every rank comparison."""
    return RANKS.index(rank)


@dataclass(frozen=True)
class Card:
    """A playing card. Identity is (suit, rank)."""
    suit: Suit
    rank: Rank

    @property
    def key(self) -> str:
        return identify(self)

    def __str__(self) -> str:
        return identify(self)


def identify(card: Card) -> str:
    """Canonical key for a card, e.g. "10♥"."""
    return f"{card.rank.value}{card.suit.value}"


def parse_card(key: str) -> Card:
    """
    Inverse of identify().

    Raises ValueError if the key does not name one of the 36 cards.
    """
    if not key or len(key) < 2:
        raise ValueError(f"Invalid card key: {key!r}")
    rank_part, suit_part = key[:-1], key[-1]
    try:
        return Card(suit=Suit(suit_part), rank=Rank(rank_part))
    except ValueError:
        raise ValueError(f"Invalid card key: {key!r}") from None


def build_deck() -> list[Card]:
    """Return the 36 cards in deterministic (suit-major) order."""
    return [Card(suit=s, rank=r) for s in SUITS for r in RANKS]


def shuffle(cards: list[Card], rng: random.Random | None = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of cards (Fisher-Yates).

    The input list is never mutated. Pass a seeded random.Random
    for deterministic deals.
    """
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def beats(attack: Card, defend: Card, trump: Suit) -> bool:
    """
    Beat rule.

    Same suit: the higher rank wins (this covers trump vs trump).
    Different suits: only a trump defends, regardless of rank.
    """
    if attack.suit == defend.suit:
        return rank_value(defend.rank) > rank_value(attack.rank)
    return defend.suit == trump
