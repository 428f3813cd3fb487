"""
Effect Tables - Closed mappings from buff and skill types to their effects.

Every BuffType and AdventureSkillType has exactly one entry. Combat,
loot and the attribute resolver read multipliers from these tables
instead of switching on type names, so adding a type without an
effect fails at import time.

Precedence used everywhere: skill effects apply before buff effects.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import AdventureSkillType, BuffType, Rarity


class RollTrigger(Enum):
    """One-time effect applied the moment a buff is rolled."""
    NONE = "none"
    ZONE_SKIP = "zone_skip"
    MARKET_REFRESH = "market_refresh"
    REFILL_HP = "refill_hp"


@dataclass(frozen=True)
class BuffEffect:
    name: str
    description: str
    duration_hours: float

    # Derived stat modifiers
    attack_multiplier: float = 1.0
    defense_multiplier: float = 1.0
    hp_multiplier: float = 1.0

    # Combat
    damage_multiplier: float = 1.0
    damage_taken_multiplier: float = 1.0
    blocks_damage: bool = False
    streak_step: float | None = None
    keeps_streak: bool = False
    preserves_durability: bool = False

    # Rewards
    coin_multiplier: float = 1.0
    gem_multiplier: float = 1.0
    xp_multiplier: float = 1.0

    # Loot and mining
    chest_min_rarity: Rarity | None = None
    enchant_epic_chance: float | None = None
    always_shiny: bool = False

    on_roll: RollTrigger = RollTrigger.NONE


@dataclass(frozen=True)
class SkillEffect:
    name: str
    description: str

    # Outgoing damage
    damage_multiplier: float = 1.0
    crit_chance: float = 0.0
    crit_multiplier: float = 1.0
    ramp_per_streak: float = 0.0
    scales_with_missing_hp: bool = False
    hp_cost_ratio: float = 0.0
    lifesteal_ratio: float = 0.0

    # Incoming damage
    damage_taken_multiplier: float = 1.0
    block_charges: int = 0

    # Lethal hit fallbacks
    revives: bool = False
    prevents_death: bool = False

    # Misc
    victory_heal_ratio: float = 0.0
    skip_charges: int = 0


BUFF_EFFECTS: dict[BuffType, BuffEffect] = {
    BuffType.COIN_VACUUM: BuffEffect(
        "Coin Vacuum", "Get 15 free coins per minute of play time", 2),
    BuffType.TREASURER: BuffEffect(
        "Treasurer", "Guarantees next chest opened is epic or better", 1,
        chest_min_rarity=Rarity.EPIC),
    BuffType.XP_SURGE: BuffEffect(
        "XP Surge", "Gives 300% XP gains for 24 hours", 24,
        xp_multiplier=4.0),
    BuffType.LUCK_GEM: BuffEffect(
        "Luck Gem", "All gems mined for 1 hour are shiny gems", 1,
        always_shiny=True),
    BuffType.ENCHANTER: BuffEffect(
        "Enchanter", "Epic+ drops have 80% chance to be enchanted", 4,
        enchant_epic_chance=0.8),
    BuffType.TIME_WARP: BuffEffect(
        "Time Warp", "Get 50% more time to answer questions for 12 hours", 12),
    BuffType.GOLDEN_TOUCH: BuffEffect(
        "Golden Touch", "All coin rewards are tripled for 8 hours", 8,
        coin_multiplier=3.0),
    BuffType.KNOWLEDGE_BOOST: BuffEffect(
        "Knowledge Boost", "Knowledge streaks build 50% faster for 24 hours", 24,
        streak_step=0.15),
    BuffType.DURABILITY_MASTER: BuffEffect(
        "Durability Master", "Items lose no durability for 6 hours", 6,
        preserves_durability=True),
    BuffType.RELIC_FINDER: BuffEffect(
        "Relic Finder", "Market refreshes favour rare relics for 12 hours", 12),
    BuffType.STAT_AMPLIFIER: BuffEffect(
        "Stat Amplifier", "All stats (ATK, DEF, HP) increased by 50% for 4 hours", 4,
        attack_multiplier=1.5, defense_multiplier=1.5, hp_multiplier=1.5),
    BuffType.QUESTION_MASTER: BuffEffect(
        "Question Master", "See question category and difficulty before answering", 2),
    BuffType.GEM_MAGNET: BuffEffect(
        "Gem Magnet", "Triple gem rewards from combat for 3 hours", 3,
        gem_multiplier=3.0),
    BuffType.STREAK_GUARDIAN: BuffEffect(
        "Streak Guardian", "Knowledge streak cannot be broken for 1 hour", 1,
        keeps_streak=True),
    BuffType.REVIVAL_BLESSING: BuffEffect(
        "Revival Blessing", "A blessing of resilience for this session", 24),
    BuffType.ZONE_SKIPPER: BuffEffect(
        "Zone Skipper", "Skip directly to zone +5 without fighting", 0.1,
        on_roll=RollTrigger.ZONE_SKIP),
    BuffType.ITEM_DUPLICATOR: BuffEffect(
        "Item Duplicator", "Next item found is automatically duplicated", 2),
    BuffType.RESEARCH_ACCELERATOR: BuffEffect(
        "Research Accelerator", "Research costs 50% less for 6 hours", 6),
    BuffType.GARDEN_BOOSTER: BuffEffect(
        "Garden Booster", "Garden grows faster for 2 hours", 2),
    BuffType.MARKET_REFRESH: BuffEffect(
        "Market Refresh", "Instantly refresh the relic market", 0.1,
        on_roll=RollTrigger.MARKET_REFRESH),
    BuffType.COIN_MULTIPLIER: BuffEffect(
        "Coin Multiplier", "All coin gains are multiplied by 3x for 4 hours", 4,
        coin_multiplier=3.0),
    BuffType.GEM_MULTIPLIER: BuffEffect(
        "Gem Multiplier", "All gem gains are multiplied by 3x for 3 hours", 3,
        gem_multiplier=3.0),
    BuffType.XP_MULTIPLIER: BuffEffect(
        "XP Multiplier", "All experience gains are multiplied by 4x for 2 hours", 2,
        xp_multiplier=4.0),
    BuffType.DAMAGE_BOOST: BuffEffect(
        "Damage Boost", "Deal 100% more damage in combat for 5 hours", 5,
        damage_multiplier=2.0),
    BuffType.DEFENSE_BOOST: BuffEffect(
        "Defense Boost", "Take 75% less damage in combat for 6 hours", 6,
        damage_taken_multiplier=0.25),
    BuffType.HEALTH_BOOST: BuffEffect(
        "Health Boost", "Maximum health increased by 200% for 8 hours", 8,
        hp_multiplier=3.0, on_roll=RollTrigger.REFILL_HP),
    BuffType.SPEED_BOOST: BuffEffect(
        "Speed Boost", "Answer time increased by 100% for 3 hours", 3),
    BuffType.LUCK_BOOST: BuffEffect(
        "Luck Boost", "Random events have better outcomes for 4 hours", 4),
    BuffType.MAGIC_SHIELD: BuffEffect(
        "Magic Shield", "Immune to enemy damage for 2 hours", 2,
        blocks_damage=True),
    BuffType.AUTO_HEAL: BuffEffect(
        "Auto Heal", "Automatically heal over time for 1 hour", 1),
}


SKILL_EFFECTS: dict[AdventureSkillType, SkillEffect] = {
    AdventureSkillType.RISKER: SkillEffect(
        "Risker", "Gain extra revival chance but take 50% more damage",
        damage_taken_multiplier=1.5, revives=True),
    AdventureSkillType.LIGHTNING_CHAIN: SkillEffect(
        "Lightning Chain", "Correct answers deal 200% damage",
        damage_multiplier=2.0),
    AdventureSkillType.SKIP_CARD: SkillEffect(
        "Skip Card", "Skip one question and automatically get it correct",
        skip_charges=1),
    AdventureSkillType.METAL_SHIELD: SkillEffect(
        "Metal Shield", "Block the first enemy attack completely",
        block_charges=1),
    AdventureSkillType.TRUTH_LIES: SkillEffect(
        "Truth & Lies", "Remove one wrong answer from multiple choice questions"),
    AdventureSkillType.RAMP: SkillEffect(
        "Ramp", "Each correct answer increases damage by 25%",
        ramp_per_streak=0.25),
    AdventureSkillType.DODGE: SkillEffect(
        "Dodge", "Avoid the next enemy attack",
        block_charges=1),
    AdventureSkillType.BERSERKER: SkillEffect(
        "Berserker", "Deal 300% damage but take 200% damage",
        damage_multiplier=3.0, damage_taken_multiplier=2.0),
    AdventureSkillType.VAMPIRIC: SkillEffect(
        "Vampiric", "Heal 25% of damage dealt",
        lifesteal_ratio=0.25),
    AdventureSkillType.PHOENIX: SkillEffect(
        "Phoenix", "Automatically revive once with 50% HP",
        revives=True),
    AdventureSkillType.TIME_SLOW: SkillEffect(
        "Time Slow", "Get 50% more time to answer questions"),
    AdventureSkillType.CRITICAL_STRIKE: SkillEffect(
        "Critical Strike", "25% chance to deal 400% damage",
        crit_chance=0.25, crit_multiplier=4.0),
    AdventureSkillType.SHIELD_WALL: SkillEffect(
        "Shield Wall", "Reduce all damage taken by 75%",
        damage_taken_multiplier=0.25),
    AdventureSkillType.POISON_BLADE: SkillEffect(
        "Poison Blade", "Attacks poison enemies for 3 turns"),
    AdventureSkillType.ARCANE_SHIELD: SkillEffect(
        "Arcane Shield", "Absorb the next enemy attack completely",
        block_charges=1),
    AdventureSkillType.BATTLE_FRENZY: SkillEffect(
        "Battle Frenzy", "Attack speed increased by 100%"),
    AdventureSkillType.ELEMENTAL_MASTERY: SkillEffect(
        "Elemental Mastery", "Attacks have random elemental effects"),
    AdventureSkillType.SHADOW_STEP: SkillEffect(
        "Shadow Step", "Teleport past this enemy without fighting"),
    AdventureSkillType.HEALING_AURA: SkillEffect(
        "Healing Aura", "Recover an extra 10% HP after each victory",
        victory_heal_ratio=0.1),
    AdventureSkillType.DOUBLE_STRIKE: SkillEffect(
        "Double Strike", "Each attack hits twice",
        damage_multiplier=2.0),
    AdventureSkillType.MANA_SHIELD: SkillEffect(
        "Mana Shield", "Convert damage to mana cost"),
    AdventureSkillType.BERSERK_RAGE: SkillEffect(
        "Berserk Rage", "Damage increases as HP decreases",
        scales_with_missing_hp=True),
    AdventureSkillType.DIVINE_PROTECTION: SkillEffect(
        "Divine Protection", "Survive one lethal hit with 1 HP",
        prevents_death=True),
    AdventureSkillType.STORM_CALL: SkillEffect(
        "Storm Call", "Lightning strikes deal area damage",
        damage_multiplier=1.5),
    AdventureSkillType.BLOOD_PACT: SkillEffect(
        "Blood Pact", "Sacrifice HP to deal massive damage",
        damage_multiplier=2.5, hp_cost_ratio=0.1),
}


def _check_exhaustive() -> None:
    missing_buffs = set(BuffType) - set(BUFF_EFFECTS)
    if missing_buffs:
        raise RuntimeError(f"Buff types without effects: {sorted(b.value for b in missing_buffs)}")
    missing_skills = set(AdventureSkillType) - set(SKILL_EFFECTS)
    if missing_skills:
        raise RuntimeError(f"Skill types without effects: {sorted(s.value for s in missing_skills)}")


_check_exhaustive()


NEUTRAL_BUFF = BuffEffect("None", "", 0)
NEUTRAL_SKILL = SkillEffect("None", "")


def buff_effect(buff_type: BuffType | None) -> BuffEffect:
    """Effect for a buff type; the neutral effect when no buff is active."""
    if buff_type is None:
        return NEUTRAL_BUFF
    return BUFF_EFFECTS[buff_type]


def skill_effect(skill_type: AdventureSkillType | None) -> SkillEffect:
    """Effect for a skill type; the neutral effect when no skill is selected."""
    if skill_type is None:
        return NEUTRAL_SKILL
    return SKILL_EFFECTS[skill_type]


__all__ = [
    "RollTrigger",
    "BuffEffect",
    "SkillEffect",
    "BUFF_EFFECTS",
    "SKILL_EFFECTS",
    "buff_effect",
    "skill_effect",
]
