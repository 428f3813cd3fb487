"""
Loot Generator Adapter - Rarity sampling and reward rolls.

Everything here is a pure function of (rng, content, inputs) and
returns new entities. The only function that touches a GameState is
grant_items(), which the reducer calls on its working clone.

Draw order inside open_reward() is fixed so seeded runs reproduce:
rarity, items-vs-gems, item count, then per item weapon-vs-armor and
enchantment, and finally the bonus gems.
"""

from __future__ import annotations
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from ..config import BalanceConfig, DEFAULT_BALANCE
from .effects import buff_effect
from .state import (
    Armor,
    BuffType,
    GameState,
    Rarity,
    RARITY_ORDER,
    Relic,
    Weapon,
)

if TYPE_CHECKING:
    from ..content import ContentProvider


Item = Union[Weapon, Armor]

ENCHANT_CHANCE: dict[Rarity, float] = {
    Rarity.COMMON: 0.05,
    Rarity.RARE: 0.05,
    Rarity.EPIC: 0.15,
    Rarity.LEGENDARY: 0.25,
    Rarity.MYTHICAL: 0.4,
}

GEM_MULTIPLIER: dict[Rarity, int] = {
    Rarity.COMMON: 1,
    Rarity.RARE: 2,
    Rarity.EPIC: 3,
    Rarity.LEGENDARY: 5,
    Rarity.MYTHICAL: 8,
}

LEGENDARY_CHEST = "Legendary Chest"
MYTHICAL_ITEM = "Mythical Item"


@dataclass
class RewardOutcome:
    """What a chest produced. Nothing here has been merged into state yet."""
    rarity: Rarity
    items: list[Item] = field(default_factory=list)
    gems: int = 0
    bonus_gems: int = 0
    consumed_buff: BuffType | None = None

    @property
    def is_gems(self) -> bool:
        return not self.items

    @property
    def total_gems(self) -> int:
        return self.gems + self.bonus_gems


def select_rarity(weights: list[float], draw: float) -> Rarity:
    """
    Pick a tier by walking cumulative weights.

    The first tier whose running sum is >= draw wins; a draw past the
    total resolves to the last tier.
    """
    cumulative = 0.0
    for rarity, weight in zip(RARITY_ORDER, weights):
        cumulative += weight
        if draw <= cumulative:
            return rarity
    return RARITY_ORDER[min(len(weights), len(RARITY_ORDER)) - 1]


def enchant_chance(rarity: Rarity, buff_type: BuffType | None = None) -> float:
    boosted = buff_effect(buff_type).enchant_epic_chance
    if boosted is not None and rarity.rank >= Rarity.EPIC.rank:
        return boosted
    return ENCHANT_CHANCE[rarity]


def roll_item(
    rng: random.Random,
    content: ContentProvider,
    rarity: Rarity,
    buff_type: BuffType | None = None,
) -> Item:
    """One weapon or armor (50/50) of the given rarity."""
    is_weapon = rng.random() < 0.5
    enchanted = rng.random() < enchant_chance(rarity, buff_type)
    if is_weapon:
        return content.generate_weapon(rng, False, rarity, enchanted)
    return content.generate_armor(rng, False, rarity, enchanted)


def open_reward(
    rng: random.Random,
    content: ContentProvider,
    cost: int,
    buff_type: BuffType | None = None,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> RewardOutcome:
    """Roll the contents of a chest bought for `cost` coins."""
    weights = content.rarity_weights(cost)
    rarity = select_rarity(weights, rng.random() * sum(weights))

    consumed = None
    floor_rarity = buff_effect(buff_type).chest_min_rarity
    if floor_rarity is not None:
        if rarity.rank < floor_rarity.rank:
            rarity = floor_rarity
        consumed = buff_type

    outcome = RewardOutcome(rarity=rarity, consumed_buff=consumed)
    if rng.random() < balance.chest_item_chance:
        count = 2 if rng.random() < balance.chest_double_chance else 1
        outcome.items = [roll_item(rng, content, rarity, buff_type) for _ in range(count)]
    else:
        outcome.gems = math.floor(cost / 20) * GEM_MULTIPLIER[rarity]

    low, high = balance.chest_bonus_gems
    outcome.bonus_gems = rng.randint(low, high)
    return outcome


def roll_mythical_item(rng: random.Random, content: ContentProvider) -> Item:
    if rng.random() < 0.5:
        return content.generate_weapon(rng, False, Rarity.MYTHICAL)
    return content.generate_armor(rng, False, Rarity.MYTHICAL)


def roll_victory_drop(
    rng: random.Random,
    content: ContentProvider,
    zone: int,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> Item | None:
    """Zone-gated drop after a won encounter."""
    if zone < balance.loot_zone_gate:
        return None
    if rng.random() >= balance.loot_drop_chance:
        return None
    rarity = Rarity.RARE if rng.random() < balance.loot_rare_chance else Rarity.COMMON
    if rng.random() < 0.5:
        return content.generate_weapon(rng, False, rarity)
    return content.generate_armor(rng, False, rarity)


def roll_market_batch(
    rng: random.Random,
    content: ContentProvider,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> list[Relic]:
    return [content.generate_relic(rng) for _ in range(balance.market_size)]


def roll_daily_special(
    rng: random.Random,
    content: ContentProvider,
    special: str | None,
) -> Item | None:
    """Item granted by a milestone daily reward, if any."""
    if special == LEGENDARY_CHEST:
        rarity = Rarity.LEGENDARY
    elif special == MYTHICAL_ITEM:
        rarity = Rarity.MYTHICAL
    else:
        return None
    if rng.random() < 0.5:
        return content.generate_weapon(rng, False, rarity)
    return content.generate_armor(rng, False, rarity)


def grant_items(state: GameState, items: list[Item]) -> list[str]:
    """
    Merge new items into a working state: inventory, collection book
    and statistics. Returns change descriptions.
    """
    changes = []
    for item in items:
        if isinstance(item, Weapon):
            state.inventory.weapons.append(item)
            state.collection.weapons[item.name] = True
            state.collection.total_weapons_found += 1
        else:
            state.inventory.armor.append(item)
            state.collection.armor[item.name] = True
            state.collection.total_armor_found += 1
        rarity_key = item.rarity.value
        state.collection.rarity_stats[rarity_key] = state.collection.rarity_stats.get(rarity_key, 0) + 1
        state.statistics.items_collected += 1
        changes.append(f"Found {item.rarity.value} {item.name}")
    return changes


__all__ = [
    "Item",
    "RewardOutcome",
    "ENCHANT_CHANCE",
    "GEM_MULTIPLIER",
    "LEGENDARY_CHEST",
    "MYTHICAL_ITEM",
    "select_rarity",
    "enchant_chance",
    "roll_item",
    "open_reward",
    "roll_mythical_item",
    "roll_victory_drop",
    "roll_market_batch",
    "roll_daily_special",
    "grant_items",
]
