"""
Tests for snapshot persistence.

Tests:
- Round trip through the JSON snapshot
- Corrupted and impossible snapshots fall back to a fresh state
- File store bookkeeping
"""

import json

import pytest
from pydantic import ValidationError

from ..engine_core.reconciler import daily_reward_for_day
from ..engine_core.state import ActiveBuff, BuffType, CategoryAccuracy, GameMode
from ..store import SnapshotInvariantError, StateStore, from_snapshot, to_snapshot
from .conftest import NOW


@pytest.fixture
def store(tmp_path, reducer) -> StateStore:
    return StateStore(
        tmp_path / "saves",
        default_factory=lambda player_id: reducer.new_game(player_id=player_id, now=0.0),
        clock=lambda: NOW,
    )


class TestSnapshot:

    def test_round_trip_preserves_everything(self, geared_state):
        state = geared_state
        state.inventory.equipped_weapon_id = "w1"
        state.game_mode.current = GameMode.BLITZ
        state.buffs.active = ActiveBuff(
            id="b", type=BuffType.GEM_MAGNET, activated_at=NOW, expires_at=NOW + 3600.5
        )
        state.statistics.accuracy_by_category["history"] = CategoryAccuracy(correct=3, total=4)
        state.daily_rewards.available_reward = daily_reward_for_day(7)

        save = from_snapshot(to_snapshot(state, saved_at=NOW))

        assert save.saved_at == NOW
        assert save.schema_version == 1
        assert save.state == state

    def test_snapshot_is_plain_json(self, fresh_state):
        data = json.loads(to_snapshot(fresh_state, saved_at=NOW))

        assert data["state"]["player_id"] == "tester"
        assert data["state"]["coins"] == 500

    def test_malformed_json_rejected(self):
        with pytest.raises(ValidationError):
            from_snapshot("{not json")

    def test_negative_currency_rejected(self, fresh_state):
        fresh_state.coins = -1

        with pytest.raises(SnapshotInvariantError):
            from_snapshot(to_snapshot(fresh_state, saved_at=NOW))

    def test_dangling_equipped_id_rejected(self, fresh_state):
        fresh_state.inventory.equipped_armor_id = "gone"

        with pytest.raises(SnapshotInvariantError):
            from_snapshot(to_snapshot(fresh_state, saved_at=NOW))


class TestStateStore:

    def test_missing_save_is_none(self, store):
        assert store.load("nobody") is None
        assert not store.exists("nobody")

    def test_save_and_load(self, store, fresh_state):
        path = store.save(fresh_state)

        assert path.exists()
        assert store.load("tester") == fresh_state
        assert store.list_players() == ["tester"]

    def test_no_temp_files_left(self, store, fresh_state):
        store.save(fresh_state)
        store.save(fresh_state)

        assert [p.name for p in store.save_dir.iterdir()] == ["tester.json"]

    def test_corrupted_save_starts_fresh(self, store):
        store.save_dir.mkdir(parents=True)
        store.path_for("tester").write_text("garbage", encoding="utf-8")

        state = store.load("tester")

        assert state.player_id == "tester"
        assert state.coins == 500

    def test_unreadable_save_starts_fresh(self, store):
        store.path_for("tester").mkdir(parents=True)

        state = store.load("tester")

        assert state.player_id == "tester"
        assert state.coins == 500

    def test_negative_gems_save_starts_fresh(self, store, fresh_state):
        fresh_state.gems = -10
        store.save(fresh_state)

        state = store.load("tester")

        assert state.gems == 50

    def test_player_id_sanitized(self, store):
        assert store.path_for("../evil").name == ".._evil.json"

    def test_delete(self, store, fresh_state):
        store.save(fresh_state)

        assert store.delete("tester")
        assert not store.delete("tester")
