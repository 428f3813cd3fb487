"""
Attribute Resolver - Derived stats from base stats plus every modifier.

resolve() is a pure function of the state. Absent equipment
contributes 0 and nothing here raises.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from ..config import BalanceConfig, DEFAULT_BALANCE
from .effects import buff_effect
from .state import Armor, GameMode, GameState, RelicSlot, Weapon


@dataclass(frozen=True)
class DerivedStats:
    attack: int
    defense: int
    max_hp: int


@dataclass(frozen=True)
class ModeModifier:
    attack: float = 1.0
    defense: float = 1.0
    hp: float = 1.0


MODE_MODIFIERS: dict[GameMode, ModeModifier] = {
    GameMode.NORMAL: ModeModifier(),
    GameMode.BLITZ: ModeModifier(),
    GameMode.BLOODLUST: ModeModifier(attack=2.0, defense=0.5, hp=0.5),
    GameMode.SURVIVAL: ModeModifier(),
}


def weapon_power(weapon: Weapon, balance: BalanceConfig = DEFAULT_BALANCE) -> int:
    return weapon.base_attack + (weapon.level - 1) * balance.weapon_power_per_level


def armor_power(armor: Armor, balance: BalanceConfig = DEFAULT_BALANCE) -> int:
    return armor.base_defense + (armor.level - 1) * balance.armor_power_per_level


def scale_by_durability(power: int, durability: int, max_durability: int) -> int:
    """Power scaled linearly by remaining durability."""
    if max_durability <= 0:
        return 0
    return math.floor(power * durability / max_durability)


def relic_bonus(state: GameState, slot: RelicSlot) -> int:
    return sum(
        relic.bonus
        for relic in state.inventory.equipped_relics
        if relic.slot == slot
    )


def environment_multiplier(state: GameState) -> float:
    return 1 + state.garden.total_growth_bonus / 100


def resolve(state: GameState, balance: BalanceConfig = DEFAULT_BALANCE) -> DerivedStats:
    """
    Compute attack, defense and max HP.

    attack  = floor((base + weapon + offense relics) * mode * buff * environment)
    defense = floor((base + armor + defense relics) * mode * buff * environment)
    max_hp  = floor(base_hp * mode * buff * environment)
    """
    weapon = state.inventory.equipped_weapon
    armor = state.inventory.equipped_armor

    weapon_contrib = 0
    if weapon is not None:
        weapon_contrib = scale_by_durability(
            weapon_power(weapon, balance), weapon.durability, weapon.max_durability
        )

    armor_contrib = 0
    if armor is not None:
        armor_contrib = scale_by_durability(
            armor_power(armor, balance), armor.durability, armor.max_durability
        )

    environment = environment_multiplier(state)
    mode = MODE_MODIFIERS.get(state.game_mode.current, ModeModifier())
    buff = buff_effect(state.buffs.active.type if state.buffs.active else None)

    stats = state.stats
    attack = math.floor(
        (stats.base_attack + weapon_contrib + relic_bonus(state, RelicSlot.OFFENSE))
        * mode.attack * buff.attack_multiplier * environment
    )
    defense = math.floor(
        (stats.base_defense + armor_contrib + relic_bonus(state, RelicSlot.DEFENSE))
        * mode.defense * buff.defense_multiplier * environment
    )
    max_hp = math.floor(stats.base_hp * mode.hp * buff.hp_multiplier * environment)

    return DerivedStats(attack=attack, defense=defense, max_hp=max_hp)


def apply_derived_stats(state: GameState, balance: BalanceConfig = DEFAULT_BALANCE) -> GameState:
    """Write resolved stats into state.stats in place and clamp HP."""
    derived = resolve(state, balance)
    state.stats.attack = derived.attack
    state.stats.defense = derived.defense
    state.stats.max_hp = derived.max_hp
    state.stats.hp = max(0, min(state.stats.hp, derived.max_hp))
    return state


__all__ = [
    "DerivedStats",
    "MODE_MODIFIERS",
    "weapon_power",
    "armor_power",
    "scale_by_durability",
    "relic_bonus",
    "environment_multiplier",
    "resolve",
    "apply_derived_stats",
]
