"""
Snapshot codec - GameState <-> JSON.

The dataclass tree is validated with a pydantic TypeAdapter, wrapped in
a versioned SaveFile envelope. Timestamps are floats, so a round trip
is exact.
"""

from __future__ import annotations
from pydantic import BaseModel, Field, TypeAdapter

from ..engine_core.state import GameState


SCHEMA_VERSION = 1

GAME_STATE_ADAPTER = TypeAdapter(GameState)


class SnapshotInvariantError(ValueError):
    """A snapshot parsed but describes an impossible state."""


class SaveFile(BaseModel):
    """On-disk envelope for one player's state."""
    schema_version: int = Field(SCHEMA_VERSION, description="Snapshot format version")
    saved_at: float = Field(..., description="POSIX seconds when the snapshot was written")
    state: GameState


def to_snapshot(state: GameState, saved_at: float) -> str:
    """Serialize a state into a JSON save file."""
    return SaveFile(saved_at=saved_at, state=state).model_dump_json(indent=2)


def from_snapshot(data: str | bytes) -> SaveFile:
    """
    Parse and validate a save file.

    Raises pydantic.ValidationError for malformed input and
    SnapshotInvariantError for states that violate engine invariants.
    """
    save = SaveFile.model_validate_json(data)
    check_invariants(save.state)
    return save


def check_invariants(state: GameState) -> None:
    for name in ("coins", "gems", "shiny_gems"):
        if getattr(state, name) < 0:
            raise SnapshotInvariantError(f"{name} is negative: {getattr(state, name)}")
    if state.zone < 1:
        raise SnapshotInvariantError(f"zone must be >= 1, got {state.zone}")
    inventory = state.inventory
    if inventory.equipped_weapon_id is not None and inventory.equipped_weapon is None:
        raise SnapshotInvariantError(f"equipped weapon {inventory.equipped_weapon_id} is not owned")
    if inventory.equipped_armor_id is not None and inventory.equipped_armor is None:
        raise SnapshotInvariantError(f"equipped armor {inventory.equipped_armor_id} is not owned")
    for relic_id in inventory.equipped_relic_ids:
        if inventory.get_relic(relic_id) is None:
            raise SnapshotInvariantError(f"equipped relic {relic_id} is not owned")


__all__ = [
    "SCHEMA_VERSION",
    "GAME_STATE_ADAPTER",
    "SaveFile",
    "SnapshotInvariantError",
    "to_snapshot",
    "from_snapshot",
    "check_invariants",
]
