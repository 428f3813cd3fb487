"""
State Store - One JSON save file per player on local disk.

The store is the only component that does I/O. Writes go to a
temporary file that is renamed over the save, so a crash mid-write
never leaves a truncated snapshot behind.

A snapshot that cannot be read back (bad JSON, schema mismatch,
impossible values) is logged and replaced by a fresh default state.
The caller never sees an exception for it.
"""

from __future__ import annotations
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ..engine_core.state import GameState
from .snapshot import SnapshotInvariantError, from_snapshot, to_snapshot


logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


class StateStore:
    """
    File-backed snapshot store.

    Args:
        save_dir: Directory holding <player_id>.json files
        default_factory: Builds a fresh state for a player id; used when
            a snapshot is corrupted
        clock: Source of `saved_at` timestamps
    """

    def __init__(
        self,
        save_dir: str | Path,
        default_factory: Callable[[str], GameState],
        clock: Callable[[], float] = time.time,
    ):
        self.save_dir = Path(save_dir)
        self.default_factory = default_factory
        self.clock = clock

    def path_for(self, player_id: str) -> Path:
        safe = _SAFE_ID.sub("_", player_id) or "player"
        return self.save_dir / f"{safe}.json"

    def exists(self, player_id: str) -> bool:
        return self.path_for(player_id).exists()

    def save(self, state: GameState) -> Path:
        """Write the state atomically. Returns the save path."""
        path = self.path_for(state.player_id)
        payload = to_snapshot(state, saved_at=self.clock())

        self.save_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.save_dir, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Saved %s to %s", state.player_id, path)
        return path

    def load(self, player_id: str) -> GameState | None:
        """
        Load a player's state.

        Returns None when no save exists, and a fresh default state when
        the save is corrupted or unreadable.
        """
        path = self.path_for(player_id)
        if not path.exists():
            return None

        try:
            save = from_snapshot(path.read_bytes())
        except (ValidationError, SnapshotInvariantError, UnicodeDecodeError, OSError) as e:
            logger.warning("Unreadable snapshot for %s at %s, starting fresh: %s", player_id, path, e)
            return self.default_factory(player_id)

        logger.debug("Loaded %s (saved at %.0f)", player_id, save.saved_at)
        return save.state

    def delete(self, player_id: str) -> bool:
        path = self.path_for(player_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_players(self) -> list[str]:
        return sorted(p.stem for p in self.save_dir.glob("*.json"))
