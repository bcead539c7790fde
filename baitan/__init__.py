"""
Bài Tấn - Rules engine for the 8-card Tấn trick-taking game.

A deterministic, rules-driven engine for 2-4 players. It provides:
- Deck construction, seeded deal and trump selection
- The attack / defend / add-attack / take state machine
- Refill and end-of-game detection
- JSON snapshots to continue a game on another device
"""

__version__ = "0.1.0"
