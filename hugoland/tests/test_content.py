"""
Tests for the default content provider and achievement evaluation.
"""

import random

import pytest

from ..content import ContentProvider, DefaultContent, achievements, catalog
from ..engine_core.state import GameMode, Rarity, RelicSlot


class TestGenerators:

    def test_base_weapon_is_weakest_common(self, content):
        weapon = content.generate_weapon(random.Random(1), force_base=True)

        assert weapon.rarity == Rarity.COMMON
        assert weapon.base_attack == catalog.WEAPON_POWER[Rarity.COMMON][0]
        assert weapon.level == 1
        assert weapon.durability == weapon.max_durability == 100
        assert weapon.upgrade_cost == 5
        assert weapon.sell_price == 25

    def test_enchanted_armor(self, content):
        armor = content.generate_armor(random.Random(3), rarity=Rarity.EPIC, force_enchanted=True)

        low, high = catalog.ARMOR_POWER[Rarity.EPIC]
        assert armor.enchanted
        assert armor.name.startswith("Enchanted ")
        assert int(low * 1.5) <= armor.base_defense <= int(high * 1.5)

    def test_ids_follow_the_rng(self, content):
        first = content.generate_weapon(random.Random(9))
        second = content.generate_weapon(random.Random(9))

        assert first == second

    @pytest.mark.parametrize("seed", range(20))
    def test_relic_ranges(self, content, seed):
        relic = content.generate_relic(random.Random(seed))

        assert 30 <= relic.cost <= 80
        assert relic.upgrade_cost == relic.cost // 2
        assert relic.level == 1
        if relic.slot == RelicSlot.OFFENSE:
            assert 20 <= relic.base_bonus <= 40
        else:
            assert 10 <= relic.base_bonus <= 25

    def test_enemy_scales_with_zone(self, content):
        enemy = content.generate_enemy(random.Random(5), zone=4)

        assert enemy.attack == 20
        assert enemy.defense == 10
        assert 110 <= enemy.hp <= 120
        assert enemy.hp == enemy.max_hp

    def test_skill_offers_are_distinct(self, content):
        offers = content.offer_adventure_skills(random.Random(2), 3)

        assert len({skill.type for skill in offers}) == 3
        assert all(skill.name for skill in offers)


class TestAchievements:

    def test_initial_entries_locked(self, content):
        assert content.initial_achievements()
        assert not any(a.unlocked for a in content.initial_achievements())
        assert not any(t.unlocked for t in content.initial_player_tags())

    def test_unlocks_stamped_with_now(self, fresh_state):
        fresh_state.statistics.total_victories = 1

        unlocked = achievements.evaluate_achievements(fresh_state, 123.0)

        assert [a.id for a in unlocked] == ["first_victory"]
        assert unlocked[0].unlocked_at == 123.0
        assert unlocked[0].reward_coins == 50

    def test_already_unlocked_not_repeated(self, fresh_state):
        fresh_state.statistics.total_victories = 1
        fresh_state.achievements = achievements.evaluate_achievements(fresh_state, 1.0)

        assert achievements.evaluate_achievements(fresh_state, 2.0) == []

    def test_evaluation_leaves_state_alone(self, fresh_state):
        fresh_state.statistics.chests_opened = 1
        before = fresh_state.clone()

        achievements.evaluate_achievements(fresh_state, 1.0)

        assert fresh_state == before

    def test_survivor_tag(self, fresh_state):
        fresh_state.game_mode.current = GameMode.SURVIVAL
        fresh_state.statistics.total_victories = 2

        tags = achievements.evaluate_player_tags(fresh_state, 5.0)

        assert [t.id for t in tags] == ["survivor"]


def test_minimal_provider_has_no_achievements(fresh_state):
    class Bare(ContentProvider):
        generate_weapon = DefaultContent.generate_weapon
        generate_armor = DefaultContent.generate_armor
        generate_relic = DefaultContent.generate_relic
        generate_enemy = DefaultContent.generate_enemy
        rarity_weights = DefaultContent.rarity_weights
        offer_adventure_skills = DefaultContent.offer_adventure_skills

    bare = Bare()

    assert bare.initial_achievements() == []
    assert bare.evaluate_achievements(fresh_state, 0.0) == []
    assert bare.evaluate_player_tags(fresh_state, 0.0) == []
