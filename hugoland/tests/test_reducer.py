"""
Tests for the reducer (state transitions).

Tests:
- Action application and copy-on-write
- Economy entry points and their failure codes
- Achievement evaluation and one-time rewards
- Error handling
"""

import pytest

from ..engine_core.action import Action, ActionType, ErrorCode
from ..engine_core.loot import RewardOutcome
from ..engine_core.reducer import MiningYield, apply_action
from ..engine_core.state import (
    ActiveBuff,
    BuffType,
    CombatPhase,
    GameMode,
    Relic,
    RelicSlot,
)
from .conftest import NOW


def achievement(state, achievement_id):
    return next(a for a in state.achievements if a.id == achievement_id)


class TestApply:

    def test_failure_returns_original_state(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.equip_weapon("missing"))

        assert not result.success
        assert result.error_code == ErrorCode.INVALID_REFERENCE
        assert result.new_state is fresh_state

    def test_success_does_not_mutate_input(self, reducer, fresh_state):
        before = fresh_state.clone()

        result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

        assert result.success
        assert fresh_state == before
        assert result.new_state is not fresh_state

    def test_unknown_handler(self, reducer, fresh_state, monkeypatch):
        monkeypatch.setattr(reducer, "_get_handler", lambda action_type: None)

        result = reducer.apply(fresh_state, Action.prestige())

        assert result.error_code == ErrorCode.NO_HANDLER

    def test_handler_exception_becomes_failure(self, reducer, fresh_state, monkeypatch):
        def boom(state, action):
            raise RuntimeError("boom")

        monkeypatch.setattr(reducer, "_get_handler", lambda action_type: boom)

        result = reducer.apply(fresh_state, Action.prestige())

        assert not result.success
        assert result.error_code == ErrorCode.HANDLER_ERROR
        assert result.new_state is fresh_state

    def test_apply_action_helper(self, content, fresh_state):
        result = apply_action(content, fresh_state, Action.set_game_mode("blitz"))

        assert result.success
        assert result.new_state.game_mode.current == GameMode.BLITZ


class TestEquipment:

    def test_equip_weapon_updates_stats(self, reducer, geared_state):
        result = reducer.apply(geared_state, Action.equip_weapon("w1"))

        assert result.success
        assert result.new_state.inventory.equipped_weapon_id == "w1"
        assert result.new_state.stats.attack == 30

    def test_equip_twice_fails(self, reducer, geared_state):
        state = reducer.apply(geared_state, Action.equip_armor("a1")).new_state

        result = reducer.apply(state, Action.equip_armor("a1"))

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_upgrade_costs_gems(self, reducer, geared_state):
        result = reducer.apply(geared_state, Action.upgrade_weapon("w1"))

        weapon = result.new_state.inventory.get_weapon("w1")
        assert result.success
        assert weapon.level == 2
        assert weapon.upgrade_cost == 15
        assert weapon.sell_price == 30
        assert result.new_state.gems == 40

    def test_upgrade_without_gems(self, reducer, geared_state):
        geared_state.gems = 5

        result = reducer.apply(geared_state, Action.upgrade_armor("a1"))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert result.new_state.gems == 5

    def test_sell_item(self, reducer, geared_state):
        result = reducer.apply(geared_state, Action.sell_weapon("w1"))

        assert result.success
        assert result.new_state.inventory.weapons == []
        assert result.new_state.coins == 525

    def test_cannot_sell_equipped(self, reducer, geared_state):
        state = reducer.apply(geared_state, Action.equip_weapon("w1")).new_state

        result = reducer.apply(state, Action.sell_weapon("w1"))

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_discard_item(self, reducer, geared_state):
        result = reducer.apply(geared_state, Action.discard_item("a1", "armor"))

        assert result.success
        assert result.new_state.inventory.armor == []
        assert result.new_state.coins == 500

    def test_discard_unknown_type(self, reducer, geared_state):
        result = reducer.apply(geared_state, Action.discard_item("a1", "shield"))

        assert result.error_code == ErrorCode.INVALID_REFERENCE

    def test_bulk_sell_skips_equipped(self, reducer, geared_state, content, rng):
        extra = content.generate_weapon(rng, force_base=True)
        geared_state.inventory.weapons.append(extra)
        geared_state.inventory.equipped_weapon_id = "w1"

        result = reducer.apply(geared_state, Action.bulk_sell(["w1", extra.id], "weapon"))

        assert result.success
        assert result.value == extra.sell_price
        assert [w.id for w in result.new_state.inventory.weapons] == ["w1"]

    def test_bulk_upgrade_all_or_nothing(self, reducer, geared_state, content, rng):
        extra = content.generate_weapon(rng, force_base=True)
        geared_state.inventory.weapons.append(extra)
        geared_state.gems = 14

        result = reducer.apply(geared_state, Action.bulk_upgrade(["w1", extra.id], "weapon"))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

        geared_state.gems = 15
        result = reducer.apply(geared_state, Action.bulk_upgrade(["w1", extra.id], "weapon"))

        assert result.success
        assert result.value == 15
        assert result.new_state.gems == 0
        assert all(w.level == 2 for w in result.new_state.inventory.weapons)


class TestShops:

    def test_open_chest(self, reducer, fresh_state, rng):
        rng.push(0.0, 0.9)

        result = reducer.apply(fresh_state, Action.open_chest(100))

        assert result.success
        assert isinstance(result.value, RewardOutcome)
        state = result.new_state
        assert state.coins == 400
        assert state.statistics.chests_opened == 1
        # first_chest pays 5 gems on top of the chest
        assert state.gems == 50 + result.value.total_gems + 5
        assert achievement(state, "first_chest").unlocked

    def test_chest_too_expensive(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.open_chest(10_000))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_treasurer_consumed_by_chest(self, reducer, fresh_state, rng):
        fresh_state.buffs.active = ActiveBuff(
            id="b", type=BuffType.TREASURER, activated_at=NOW, expires_at=NOW + 3600
        )
        rng.push(0.0, 0.9)

        result = reducer.apply(fresh_state, Action.open_chest(100))

        assert result.value.rarity.value == "epic"
        assert result.new_state.buffs.active is None

    def test_purchase_mythical(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.purchase_mythical(300))

        assert result.success
        assert result.value.rarity.value == "mythical"
        assert result.new_state.coins == 200

    def test_purchase_relic(self, reducer, fresh_state):
        fresh_state.gems = 100
        relic = fresh_state.market.items[0]

        result = reducer.apply(fresh_state, Action.purchase_relic(relic.id))

        state = result.new_state
        assert result.success
        assert result.value is True
        assert state.gems == 100 - relic.cost
        assert relic.id not in [r.id for r in state.market.items]
        assert state.inventory.get_relic(relic.id) is not None

    def test_purchase_relic_not_on_market(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.purchase_relic("nope"))

        assert result.error_code == ErrorCode.INVALID_REFERENCE


class TestRelics:

    @pytest.fixture
    def relic_state(self, fresh_state):
        fresh_state.inventory.relics.append(
            Relic(id="r1", name="Ember Idol", slot=RelicSlot.OFFENSE, base_bonus=30,
                  per_level_bonus=22, cost=40, upgrade_cost=20)
        )
        return fresh_state

    def test_equip_and_unequip(self, reducer, relic_state):
        equipped = reducer.apply(relic_state, Action.equip_relic("r1")).new_state
        assert equipped.stats.attack == 50

        unequipped = reducer.apply(equipped, Action.unequip_relic("r1")).new_state
        assert unequipped.stats.attack == 20

    def test_upgrade_relic(self, reducer, relic_state):
        state = reducer.apply(relic_state, Action.equip_relic("r1")).new_state

        result = reducer.apply(state, Action.upgrade_relic("r1"))

        assert result.new_state.inventory.get_relic("r1").level == 2
        assert result.new_state.gems == 30
        assert result.new_state.stats.attack == 72

    def test_sell_relic_for_half_cost(self, reducer, relic_state):
        result = reducer.apply(relic_state, Action.sell_relic("r1"))

        assert result.value == 20
        assert result.new_state.gems == 70

    def test_cannot_sell_equipped_relic(self, reducer, relic_state):
        state = reducer.apply(relic_state, Action.equip_relic("r1")).new_state

        result = reducer.apply(state, Action.sell_relic("r1"))

        assert result.error_code == ErrorCode.INVALID_STATE


class TestCombatActions:

    def test_answer_outside_encounter_fails(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.answer(True))

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_begin_twice_fails(self, reducer, fresh_state, rng):
        rng.push(0.9)
        state = reducer.apply(fresh_state, Action.begin_encounter()).new_state

        result = reducer.apply(state, Action.begin_encounter())

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_select_requires_offer(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.select_adventure_skill("phoenix"))

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_skill_offer_flow(self, reducer, fresh_state, rng):
        rng.push(0.1)
        state = reducer.apply(fresh_state, Action.begin_encounter()).new_state
        assert state.combat.phase == CombatPhase.SKILL_SELECTION

        bad = reducer.apply(state, Action.select_adventure_skill("nope"))
        assert bad.error_code == ErrorCode.INVALID_REFERENCE

        skipped = reducer.apply(state, Action.skip_adventure_skills()).new_state
        assert skipped.combat.phase == CombatPhase.ACTIVE
        assert skipped.adventure.selected is None

    def test_skip_card_requires_skill(self, reducer, fresh_state, rng):
        rng.push(0.9)
        state = reducer.apply(fresh_state, Action.begin_encounter()).new_state

        result = reducer.apply(state, Action.use_skip_card())

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_first_victory_paid_once(self, reducer, fresh_state, make_encounter):
        state = make_encounter(fresh_state, enemy_hp=10)

        won = reducer.apply(state, Action.answer(True)).new_state

        # 13 from the fight, 50 from the achievement
        assert won.coins == 500 + 13 + 50
        assert achievement(won, "first_victory").unlocked
        assert achievement(won, "first_victory").unlocked_at == NOW

        again = reducer.apply(make_encounter(won, enemy_hp=10), Action.answer(True)).new_state
        assert again.statistics.total_victories == 2
        # zone 2, streak 2: floor(14 * 1.2); no second achievement payout
        assert again.coins == won.coins + 16

    def test_survival_without_lives(self, reducer, fresh_state):
        state = reducer.apply(fresh_state, Action.set_game_mode("survival")).new_state
        state.game_mode.survival_lives = 0

        result = reducer.apply(state, Action.begin_encounter())

        assert result.error_code == ErrorCode.INVALID_STATE


class TestMining:

    def test_mine_plain_gem(self, reducer, fresh_state, rng):
        rng.push(0.5)

        result = reducer.apply(fresh_state, Action.mine_gem(1, 2))

        assert result.value == MiningYield(gems=1, shiny_gems=0)
        assert result.state_changes[0] == "Mined a gem at (1, 2)"
        assert result.new_state.gems == 51
        assert result.new_state.mining.total_gems_mined == 1

    def test_mine_shiny_gem(self, reducer, fresh_state, rng):
        rng.push(0.01)

        result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

        assert result.value == MiningYield(gems=0, shiny_gems=1)
        assert result.new_state.shiny_gems == 1

    def test_luck_gem_always_shiny(self, reducer, fresh_state, rng):
        fresh_state.buffs.active = ActiveBuff(
            id="b", type=BuffType.LUCK_GEM, activated_at=NOW, expires_at=NOW + 3600
        )
        rng.push(0.99)

        result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

        assert result.value.shiny_gems == 1

    def test_exchange_shiny(self, reducer, fresh_state):
        fresh_state.shiny_gems = 3

        result = reducer.apply(fresh_state, Action.exchange_shiny_gems(2))

        assert result.new_state.shiny_gems == 1
        assert result.new_state.gems == 70

    def test_exchange_more_than_owned(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.exchange_shiny_gems(1))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES


class TestTimedSystems:

    def test_lapsed_treasurer_does_not_lift_chest(self, reducer, fresh_state, rng):
        fresh_state.buffs.active = ActiveBuff(
            id="b", type=BuffType.TREASURER, activated_at=NOW - 7200, expires_at=NOW - 3600
        )
        rng.push(0.0, 0.9)

        result = reducer.apply(fresh_state, Action.open_chest(100))

        assert result.value.rarity.value == "common"
        assert result.value.consumed_buff is None
        assert result.new_state.buffs.active is None
        assert fresh_state.buffs.active is not None

    def test_lapsed_luck_gem_cleared_on_mining(self, reducer, fresh_state, rng):
        fresh_state.buffs.active = ActiveBuff(
            id="b", type=BuffType.LUCK_GEM, activated_at=NOW - 7200, expires_at=NOW
        )
        rng.push(0.99)

        result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

        assert result.value == MiningYield(gems=1, shiny_gems=0)
        assert result.new_state.buffs.active is None

    def test_due_market_restocked_mid_session(self, reducer, fresh_state):
        fresh_state.market.next_refresh = NOW - 1

        result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

        market = result.new_state.market
        assert market.last_refresh == NOW
        assert market.next_refresh == NOW + 300
        assert fresh_state.market.next_refresh == NOW - 1

    def test_rejected_action_keeps_lapsed_buff_on_input(self, reducer, fresh_state):
        fresh_state.buffs.active = ActiveBuff(
            id="b", type=BuffType.TREASURER, activated_at=NOW - 7200, expires_at=NOW - 3600
        )

        result = reducer.apply(fresh_state, Action.equip_weapon("missing"))

        assert result.new_state is fresh_state
        assert fresh_state.buffs.active is not None

    def test_engine_leaves_caller_action_untouched(self, engine, fresh_state):
        action = Action.mine_gem(0, 0)

        result = engine.apply(fresh_state, action)

        assert result.success
        assert action.timestamp is None

    def test_roll_buff(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.roll_buff(NOW))

        buff = result.value
        state = result.new_state
        assert result.success
        assert state.buffs.active == buff
        assert state.buffs.last_roll_time == NOW
        assert buff.expires_at > NOW
        assert state.coins == 400

    def test_roll_buff_needs_coins(self, reducer, fresh_state):
        fresh_state.coins = 50

        result = reducer.apply(fresh_state, Action.roll_buff(NOW))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_claim_daily_reward(self, reducer, engine, fresh_state):
        state = engine.reconcile(fresh_state, NOW)

        result = reducer.apply(state, Action.claim_daily_reward(NOW))

        daily = result.new_state.daily_rewards
        assert result.new_state.coins == 575
        assert daily.available_reward is None
        assert daily.last_claim_date == NOW
        assert daily.reward_history[-1].claimed

        again = reducer.apply(result.new_state, Action.claim_daily_reward(NOW))
        assert again.error_code == ErrorCode.INVALID_STATE

    def test_claim_offline_rewards(self, reducer, fresh_state):
        fresh_state.offline.offline_coins = 40
        fresh_state.offline.offline_gems = 4

        result = reducer.apply(fresh_state, Action.claim_offline_rewards())

        assert result.value == (40, 4)
        assert result.new_state.coins == 540
        assert result.new_state.offline.offline_coins == 0

    def test_plant_and_water(self, reducer, fresh_state):
        fresh_state.coins = 2000

        planted = reducer.apply(fresh_state, Action.plant_seed(NOW)).new_state
        assert planted.garden.is_planted
        assert planted.coins == 1000
        assert planted.garden.water_hours_remaining == 24.0

        watered = reducer.apply(planted, Action.buy_water(12, NOW + 3600)).new_state
        assert watered.coins == 500
        assert watered.garden.water_hours_remaining == pytest.approx(35.0)
        assert watered.garden.growth_cm == pytest.approx(0.5)

    def test_plant_twice_fails(self, reducer, fresh_state):
        fresh_state.coins = 5000
        planted = reducer.apply(fresh_state, Action.plant_seed(NOW)).new_state

        result = reducer.apply(planted, Action.plant_seed(NOW))

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_water_unplanted_fails(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.buy_water(12, NOW))

        assert result.error_code == ErrorCode.INVALID_STATE


class TestProgression:

    def test_upgrade_skill(self, reducer, fresh_state):
        fresh_state.progression.skill_points = 1

        result = reducer.apply(fresh_state, Action.upgrade_skill("power_strike"))

        assert result.new_state.progression.unlocked_skills == ["power_strike"]
        assert result.new_state.progression.skill_points == 0

    def test_upgrade_skill_without_points(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.upgrade_skill("power_strike"))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_set_unknown_mode(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.set_game_mode("hardcore"))

        assert result.error_code == ErrorCode.INVALID_REFERENCE

    def test_bloodlust_halves_hp(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.set_game_mode("bloodlust"))

        assert result.new_state.stats.max_hp == 50
        assert result.new_state.stats.hp == 50

    def test_prestige_requires_level(self, reducer, fresh_state):
        result = reducer.apply(fresh_state, Action.prestige())

        assert result.error_code == ErrorCode.INVALID_STATE

    def test_prestige_resets_run(self, reducer, fresh_state):
        fresh_state.progression.level = 55
        fresh_state.zone = 60
        fresh_state.coins = 9000
        fresh_state.stats.hp = 10

        result = reducer.apply(fresh_state, Action.prestige())

        state = result.new_state
        assert state.progression.prestige_level == 1
        assert state.progression.prestige_points == 5
        assert state.progression.level == 1
        assert state.zone == 1
        assert state.coins == 500
        assert state.stats.hp == state.stats.max_hp
        assert achievement(state, "first_prestige").unlocked
        assert state.gems == 50 + 100

    def test_reset_game_keeps_identity(self, reducer, fresh_state):
        fresh_state.coins = 9
        fresh_state.zone = 7

        result = reducer.apply(fresh_state, Action.reset_game(NOW))

        state = result.new_state
        assert state.player_id == "tester"
        assert state.random_seed == 42
        assert state.coins == 500
        assert state.zone == 1


def test_premium_flag_at_zone_fifty(reducer, fresh_state):
    fresh_state.zone = 50

    result = reducer.apply(fresh_state, Action.mine_gem(0, 0))

    assert result.new_state.is_premium
    assert "Premium unlocked" in result.state_changes


def test_every_action_type_has_a_handler(reducer):
    for action_type in ActionType:
        assert reducer._get_handler(action_type) is not None
