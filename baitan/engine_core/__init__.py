"""
Engine Core - Deterministic Tấn game state management.

The engine is the runtime that:
1. Builds and deals the deck
2. Manages GameState snapshots
3. Generates legal actions
4. Applies actions via the reducer
5. Refills hands and detects the end of the game
"""

from .cards import Card, Suit, Rank, build_deck, shuffle, rank_value, identify, parse_card, beats
from .state import GameState, GamePhase, Player, AttackPair, all_cards, conservation_errors
from .action import Action, ActionType, ActionPayload, ActionResult, Rejection
from .rules import RuleVariant, DEFAULT_RULES
from .setup import new_game, find_first_attacker
from .reducer import Reducer, apply_action, InvariantViolation
from .refill import refill, check_finished, finished_players
from .action_generator import ActionGenerator, legal_actions

__all__ = [
    "Card",
    "Suit",
    "Rank",
    "build_deck",
    "shuffle",
    "rank_value",
    "identify",
    "parse_card",
    "beats",
    "GameState",
    "GamePhase",
    "Player",
    "AttackPair",
    "all_cards",
    "conservation_errors",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Rejection",
    "RuleVariant",
    "DEFAULT_RULES",
    "new_game",
    "find_first_attacker",
    "Reducer",
    "apply_action",
    "InvariantViolation",
    "refill",
    "check_finished",
    "finished_players",
    "ActionGenerator",
    "legal_actions",
]
