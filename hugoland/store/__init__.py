"""
Store - Persistence for player snapshots.
"""

from .snapshot import SaveFile, SnapshotInvariantError, to_snapshot, from_snapshot
from .file_store import StateStore

__all__ = [
    "SaveFile",
    "SnapshotInvariantError",
    "to_snapshot",
    "from_snapshot",
    "StateStore",
]
