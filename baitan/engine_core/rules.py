"""
Rule variant switches for the Tấn engine.

The default variant follows the pass-and-play house rules:
only the current attacker may add attacks mid-round.
Folk rules let every non-defending player pile on; enable that
with allow_side_attacks.
"""

from __future__ import annotations
from dataclasses import dataclass
import os


HAND_SIZE = 8
MAX_TABLE = 8
MIN_PLAYERS = 2
MAX_PLAYERS = 4

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RuleVariant:
    """Configurable rule knobs passed to the reducer."""
    hand_size: int = HAND_SIZE
    max_table: int = MAX_TABLE
    allow_side_attacks: bool = False

    @classmethod
    def from_env(cls) -> RuleVariant:
        """Build the variant from BAITAN_SIDE_ATTACKS."""
        flag = os.getenv("BAITAN_SIDE_ATTACKS", "").strip().lower()
        return cls(allow_side_attacks=flag in _TRUTHY)

    def may_add_attack(self, player: int, attacker: int, defender: int) -> bool:
        if player == defender:
            return False
        if self.allow_side_attacks:
            return True
        return player == attacker


DEFAULT_RULES = RuleVariant()
