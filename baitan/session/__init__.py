"""
Session Module - Manages ephemeral pass-and-play sessions.

A session represents one play-through at one table:
- Created when players start a game
- Holds the current game snapshot and applies actions to it
- Destroyed when the game ends

Sessions are EPHEMERAL: the exported JSON snapshot is the only
way to carry a game to another device.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
