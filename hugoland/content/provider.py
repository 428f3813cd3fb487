"""
Content Provider - Generators the engine calls for new entities.

A ContentProvider is consumed, never owned, by the engine. Every
generator draws from the rng it is handed so that seeded runs are
reproducible; none of them touch GameState.
"""

from __future__ import annotations
import math
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..engine_core.effects import SKILL_EFFECTS
from ..engine_core.state import (
    Achievement,
    AdventureSkill,
    AdventureSkillType,
    Armor,
    Enemy,
    PlayerTag,
    Rarity,
    RARITY_ORDER,
    Relic,
    RelicSlot,
    Weapon,
    new_id,
)
from . import achievements, catalog

if TYPE_CHECKING:
    from ..engine_core.state import GameState


class ContentProvider(ABC):
    """
    Abstract source of generated content.

    Implementations decide names and base numbers; the engine decides
    everything that happens to the entities afterwards.
    """

    @abstractmethod
    def generate_weapon(
        self,
        rng: random.Random,
        force_base: bool = False,
        rarity: Rarity | None = None,
        force_enchanted: bool = False,
    ) -> Weapon:
        pass

    @abstractmethod
    def generate_armor(
        self,
        rng: random.Random,
        force_base: bool = False,
        rarity: Rarity | None = None,
        force_enchanted: bool = False,
    ) -> Armor:
        pass

    @abstractmethod
    def generate_relic(self, rng: random.Random) -> Relic:
        pass

    @abstractmethod
    def generate_enemy(self, rng: random.Random, zone: int) -> Enemy:
        pass

    @abstractmethod
    def rarity_weights(self, cost: int) -> list[float]:
        """Weights for (common, rare, epic, legendary, mythical)."""
        pass

    @abstractmethod
    def offer_adventure_skills(self, rng: random.Random, count: int) -> list[AdventureSkill]:
        pass

    def initial_achievements(self) -> list[Achievement]:
        return []

    def initial_player_tags(self) -> list[PlayerTag]:
        return []

    def evaluate_achievements(self, state: GameState, now: float) -> list[Achievement]:
        return []

    def evaluate_player_tags(self, state: GameState, now: float) -> list[PlayerTag]:
        return []


class DefaultContent(ContentProvider):
    """Table-driven content built from hugoland.content.catalog."""

    def generate_weapon(self, rng, force_base=False, rarity=None, force_enchanted=False):
        if force_base:
            rarity = Rarity.COMMON
        elif rarity is None:
            rarity = self._random_rarity(rng)

        low, high = catalog.WEAPON_POWER[rarity]
        power = low if force_base else rng.randint(low, high)
        name = rng.choice(catalog.WEAPON_NAMES[rarity])
        if force_enchanted:
            power = math.floor(power * catalog.ENCHANT_POWER_BONUS)
            name = f"{catalog.ENCHANTED_PREFIX} {name}"

        durability = catalog.MAX_DURABILITY[rarity]
        return Weapon(
            id=new_id(rng),
            name=name,
            rarity=rarity,
            base_attack=power,
            durability=durability,
            max_durability=durability,
            upgrade_cost=catalog.UPGRADE_COST[rarity],
            sell_price=catalog.SELL_PRICE[rarity],
            enchanted=force_enchanted,
        )

    def generate_armor(self, rng, force_base=False, rarity=None, force_enchanted=False):
        if force_base:
            rarity = Rarity.COMMON
        elif rarity is None:
            rarity = self._random_rarity(rng)

        low, high = catalog.ARMOR_POWER[rarity]
        power = low if force_base else rng.randint(low, high)
        name = rng.choice(catalog.ARMOR_NAMES[rarity])
        if force_enchanted:
            power = math.floor(power * catalog.ENCHANT_POWER_BONUS)
            name = f"{catalog.ENCHANTED_PREFIX} {name}"

        durability = catalog.MAX_DURABILITY[rarity]
        return Armor(
            id=new_id(rng),
            name=name,
            rarity=rarity,
            base_defense=power,
            durability=durability,
            max_durability=durability,
            upgrade_cost=catalog.UPGRADE_COST[rarity],
            sell_price=catalog.SELL_PRICE[rarity],
            enchanted=force_enchanted,
        )

    def generate_relic(self, rng):
        if rng.random() < 0.5:
            slot = RelicSlot.OFFENSE
            name = rng.choice(catalog.OFFENSE_RELICS)
            base_bonus = rng.randint(20, 40)
            per_level = catalog.OFFENSE_PER_LEVEL
        else:
            slot = RelicSlot.DEFENSE
            name = rng.choice(catalog.DEFENSE_RELICS)
            base_bonus = rng.randint(10, 25)
            per_level = catalog.DEFENSE_PER_LEVEL

        cost = rng.randint(30, 80)
        return Relic(
            id=new_id(rng),
            name=name,
            slot=slot,
            base_bonus=base_bonus,
            per_level_bonus=per_level,
            cost=cost,
            upgrade_cost=cost // 2,
        )

    def generate_enemy(self, rng, zone):
        # Every tenth zone draws from the next name tier
        tier = min(zone // 10, len(catalog.ENEMY_NAMES) - 1)
        name = catalog.ENEMY_NAMES[min(tier + rng.randint(0, 1), len(catalog.ENEMY_NAMES) - 1)]
        hp = 50 + zone * 15 + rng.randint(0, 10)
        return Enemy(
            name=name,
            hp=hp,
            max_hp=hp,
            attack=8 + zone * 3,
            defense=2 + zone * 2,
            zone=zone,
        )

    def rarity_weights(self, cost):
        for min_cost, weights in catalog.CHEST_WEIGHTS:
            if cost >= min_cost:
                return list(weights)
        return list(catalog.CHEST_WEIGHTS[-1][1])

    def offer_adventure_skills(self, rng, count):
        picked = rng.sample(list(AdventureSkillType), count)
        return [
            AdventureSkill(
                id=skill_type.value,
                type=skill_type,
                name=SKILL_EFFECTS[skill_type].name,
                description=SKILL_EFFECTS[skill_type].description,
            )
            for skill_type in picked
        ]

    def initial_achievements(self):
        return achievements.initial_achievements()

    def initial_player_tags(self):
        return achievements.initial_player_tags()

    def evaluate_achievements(self, state, now):
        return achievements.evaluate_achievements(state, now)

    def evaluate_player_tags(self, state, now):
        return achievements.evaluate_player_tags(state, now)

    def _random_rarity(self, rng: random.Random) -> Rarity:
        return rng.choices(RARITY_ORDER, weights=self.rarity_weights(0))[0]
