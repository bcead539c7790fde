"""
Refill & Termination - post-round draw and end-of-game detection.

Refill order is fairness-relevant: the attacker draws first and
the rest follow clockwise, so on a short deck the attacker gets priority.
"""

from __future__ import annotations

from .state import GameState, GamePhase
from .rules import HAND_SIZE


def refill(state: GameState, hand_size: int = HAND_SIZE) -> GameState:
    """
    Draw every hand back up to hand_size, attacker first.

    Cards come off the end of the deck. Stops early when the deck runs out.
    """
    deck = list(state.deck)
    players = list(state.players)
    n = len(players)

    for offset in range(n):
        idx = (state.attacker + offset) % n
        hand = list(players[idx].hand)
        while len(hand) < hand_size and deck:
            hand.append(deck.pop())
        players[idx] = players[idx].with_hand(hand)

    return state._copy_with(players=players, deck=deck)


def finished_players(state: GameState) -> list[int]:
    """Players out of the game: empty hand with an empty deck."""
    if state.deck:
        return []
    return [p.player_id for p in state.players if p.is_empty]


def check_finished(state: GameState) -> tuple[GameState, list[str]]:
    """
    Finish the game if any player has emptied their hand on an empty deck.

    Every player meeting the condition wins; ties are expected.
    Returns (state, events).
    """
    winners = finished_players(state)
    if not winners:
        return state, []

    names = ", ".join(state.players[i].name for i in winners)
    event = f"Game finished. Winners: {names}"
    new_state = state._copy_with(
        phase=GamePhase.FINISHED,
        winners=winners,
        max_adds=0,
    )
    return new_state, [event]
