"""
Snapshot Module - Export and import of a game in progress.

The snapshot is the only persistence the engine offers: a JSON document
that one session copies out and another pastes in to continue the game.
Imports are validated structurally (pydantic) and semantically
(card conservation, index and phase consistency).
"""

from .schema import SnapshotModel, PlayerModel, PairModel
from .validation import SnapshotImportError, ValidationResult, validate_snapshot
from .codec import serialize, deserialize, to_model, from_model

__all__ = [
    "SnapshotModel",
    "PlayerModel",
    "PairModel",
    "SnapshotImportError",
    "ValidationResult",
    "validate_snapshot",
    "serialize",
    "deserialize",
    "to_model",
    "from_model",
]
