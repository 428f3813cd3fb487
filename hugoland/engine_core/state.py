"""
Game State - The player's complete save snapshot.

Design principles:
- Copy-on-write: transitions clone the state before changing it
- Serializable: every field round-trips through the snapshot store
- Items are owned once, by id; "equipped" fields hold ids only
- Derived stats are a cache of the attribute resolver's output
"""

from __future__ import annotations
import random
import uuid
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import BalanceConfig


def new_id(rng: random.Random) -> str:
    """Entity id drawn from the injected rng so seeded runs stay reproducible."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


class Rarity(str, Enum):
    """Item rarity tiers, in ascending order."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHICAL = "mythical"

    @property
    def rank(self) -> int:
        return RARITY_ORDER.index(self)


RARITY_ORDER = [
    Rarity.COMMON,
    Rarity.RARE,
    Rarity.EPIC,
    Rarity.LEGENDARY,
    Rarity.MYTHICAL,
]


class ItemType(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"


class RelicSlot(str, Enum):
    """Which derived stat a relic feeds."""
    OFFENSE = "offense"
    DEFENSE = "defense"


class GameMode(str, Enum):
    NORMAL = "normal"
    BLITZ = "blitz"
    BLOODLUST = "bloodlust"
    SURVIVAL = "survival"


class CombatPhase(str, Enum):
    """Encounter state machine."""
    IDLE = "idle"
    SKILL_SELECTION = "skill_selection"  # Waiting for an adventure skill pick
    ACTIVE = "active"


class BuffType(str, Enum):
    """Timed menu skills rolled from the main menu."""
    COIN_VACUUM = "coin_vacuum"
    TREASURER = "treasurer"
    XP_SURGE = "xp_surge"
    LUCK_GEM = "luck_gem"
    ENCHANTER = "enchanter"
    TIME_WARP = "time_warp"
    GOLDEN_TOUCH = "golden_touch"
    KNOWLEDGE_BOOST = "knowledge_boost"
    DURABILITY_MASTER = "durability_master"
    RELIC_FINDER = "relic_finder"
    STAT_AMPLIFIER = "stat_amplifier"
    QUESTION_MASTER = "question_master"
    GEM_MAGNET = "gem_magnet"
    STREAK_GUARDIAN = "streak_guardian"
    REVIVAL_BLESSING = "revival_blessing"
    ZONE_SKIPPER = "zone_skipper"
    ITEM_DUPLICATOR = "item_duplicator"
    RESEARCH_ACCELERATOR = "research_accelerator"
    GARDEN_BOOSTER = "garden_booster"
    MARKET_REFRESH = "market_refresh"
    COIN_MULTIPLIER = "coin_multiplier"
    GEM_MULTIPLIER = "gem_multiplier"
    XP_MULTIPLIER = "xp_multiplier"
    DAMAGE_BOOST = "damage_boost"
    DEFENSE_BOOST = "defense_boost"
    HEALTH_BOOST = "health_boost"
    SPEED_BOOST = "speed_boost"
    LUCK_BOOST = "luck_boost"
    MAGIC_SHIELD = "magic_shield"
    AUTO_HEAL = "auto_heal"


class AdventureSkillType(str, Enum):
    """Per-encounter skills offered at the start of a fight."""
    RISKER = "risker"
    LIGHTNING_CHAIN = "lightning_chain"
    SKIP_CARD = "skip_card"
    METAL_SHIELD = "metal_shield"
    TRUTH_LIES = "truth_lies"
    RAMP = "ramp"
    DODGE = "dodge"
    BERSERKER = "berserker"
    VAMPIRIC = "vampiric"
    PHOENIX = "phoenix"
    TIME_SLOW = "time_slow"
    CRITICAL_STRIKE = "critical_strike"
    SHIELD_WALL = "shield_wall"
    POISON_BLADE = "poison_blade"
    ARCANE_SHIELD = "arcane_shield"
    BATTLE_FRENZY = "battle_frenzy"
    ELEMENTAL_MASTERY = "elemental_mastery"
    SHADOW_STEP = "shadow_step"
    HEALING_AURA = "healing_aura"
    DOUBLE_STRIKE = "double_strike"
    MANA_SHIELD = "mana_shield"
    BERSERK_RAGE = "berserk_rage"
    DIVINE_PROTECTION = "divine_protection"
    STORM_CALL = "storm_call"
    BLOOD_PACT = "blood_pact"


# =============================================================================
# Items
# =============================================================================

@dataclass
class Weapon:
    id: str
    name: str
    rarity: Rarity
    base_attack: int
    level: int = 1
    durability: int = 100
    max_durability: int = 100
    upgrade_cost: int = 10  # gems
    sell_price: int = 25  # coins
    enchanted: bool = False


@dataclass
class Armor:
    id: str
    name: str
    rarity: Rarity
    base_defense: int
    level: int = 1
    durability: int = 100
    max_durability: int = 100
    upgrade_cost: int = 10
    sell_price: int = 25
    enchanted: bool = False


@dataclass
class Relic:
    """
    Equippable passive bonus bought from the market.

    The bonus grows linearly: base_bonus + (level - 1) * per_level_bonus.
    """
    id: str
    name: str
    slot: RelicSlot
    base_bonus: int
    per_level_bonus: int
    cost: int  # gems
    upgrade_cost: int
    level: int = 1

    @property
    def bonus(self) -> int:
        return self.base_bonus + (self.level - 1) * self.per_level_bonus


@dataclass
class Enemy:
    name: str
    hp: int
    max_hp: int
    attack: int
    defense: int
    zone: int


@dataclass
class Inventory:
    """
    Owning collections for gear.

    Equipped pointers are ids into the owning lists.
    """
    weapons: list[Weapon] = field(default_factory=list)
    armor: list[Armor] = field(default_factory=list)
    relics: list[Relic] = field(default_factory=list)
    equipped_weapon_id: str | None = None
    equipped_armor_id: str | None = None
    equipped_relic_ids: list[str] = field(default_factory=list)

    def get_weapon(self, weapon_id: str | None) -> Weapon | None:
        if weapon_id is None:
            return None
        for weapon in self.weapons:
            if weapon.id == weapon_id:
                return weapon
        return None

    def get_armor(self, armor_id: str | None) -> Armor | None:
        if armor_id is None:
            return None
        for armor in self.armor:
            if armor.id == armor_id:
                return armor
        return None

    def get_relic(self, relic_id: str) -> Relic | None:
        for relic in self.relics:
            if relic.id == relic_id:
                return relic
        return None

    @property
    def equipped_weapon(self) -> Weapon | None:
        return self.get_weapon(self.equipped_weapon_id)

    @property
    def equipped_armor(self) -> Armor | None:
        return self.get_armor(self.equipped_armor_id)

    @property
    def equipped_relics(self) -> list[Relic]:
        return [r for r in self.relics if r.id in self.equipped_relic_ids]

    def items_of(self, item_type: ItemType) -> list[Weapon] | list[Armor]:
        return self.weapons if item_type == ItemType.WEAPON else self.armor

    def equipped_id_of(self, item_type: ItemType) -> str | None:
        if item_type == ItemType.WEAPON:
            return self.equipped_weapon_id
        return self.equipped_armor_id


# =============================================================================
# Player progress
# =============================================================================

@dataclass
class PlayerStats:
    hp: int = 100
    max_hp: int = 100
    attack: int = 20
    defense: int = 10
    base_attack: int = 20
    base_defense: int = 10
    base_hp: int = 100


@dataclass
class KnowledgeStreak:
    current: int = 0
    best: int = 0
    multiplier: float = 1.0


@dataclass
class GameModeState:
    current: GameMode = GameMode.NORMAL
    survival_lives: int = 3
    max_survival_lives: int = 3


@dataclass
class Progression:
    level: int = 1
    experience: int = 0
    experience_to_next: int = 100
    skill_points: int = 0
    unlocked_skills: list[str] = field(default_factory=list)
    prestige_level: int = 0
    prestige_points: int = 0


@dataclass
class CategoryAccuracy:
    correct: int = 0
    total: int = 0


@dataclass
class Statistics:
    total_questions_answered: int = 0
    correct_answers: int = 0
    zones_reached: int = 1
    items_collected: int = 0
    coins_earned: int = 0
    gems_earned: int = 0
    shiny_gems_earned: int = 0
    chests_opened: int = 0
    accuracy_by_category: dict[str, CategoryAccuracy] = field(default_factory=dict)
    total_deaths: int = 0
    total_victories: int = 0
    total_damage_dealt: int = 0
    total_damage_taken: int = 0
    items_upgraded: int = 0
    items_sold: int = 0
    revivals: int = 0


@dataclass
class CollectionBook:
    weapons: dict[str, bool] = field(default_factory=dict)
    armor: dict[str, bool] = field(default_factory=dict)
    total_weapons_found: int = 0
    total_armor_found: int = 0
    rarity_stats: dict[str, int] = field(
        default_factory=lambda: {rarity.value: 0 for rarity in RARITY_ORDER}
    )


@dataclass
class MiningStats:
    total_gems_mined: int = 0
    total_shiny_gems_mined: int = 0


@dataclass
class Achievement:
    id: str
    name: str
    description: str = ""
    unlocked: bool = False
    unlocked_at: float | None = None
    reward_coins: int = 0
    reward_gems: int = 0


@dataclass
class PlayerTag:
    id: str
    name: str
    description: str = ""
    unlocked: bool = False
    unlocked_at: float | None = None


# =============================================================================
# Timed systems
# =============================================================================

@dataclass
class Market:
    """Rotating relic shop."""
    items: list[Relic] = field(default_factory=list)
    last_refresh: float = 0.0
    next_refresh: float = 0.0


@dataclass
class Garden:
    """
    Idle-growth resource.

    water_hours_remaining is measured as of last_watered, which the
    reconciler advances each time it settles growth.
    """
    is_planted: bool = False
    planted_at: float | None = None
    last_watered: float | None = None
    water_hours_remaining: float = 0.0
    growth_cm: float = 0.0
    total_growth_bonus: float = 0.0  # percent


@dataclass
class DailyReward:
    day: int
    coins: int
    gems: int
    special: str | None = None
    claimed: bool = False
    claim_date: float | None = None


@dataclass
class DailyRewards:
    last_claim_date: float | None = None
    current_streak: int = 0
    claimed_streak: int = 0  # Streak value at the last claim
    max_streak: int = 0
    available_reward: DailyReward | None = None
    reward_history: list[DailyReward] = field(default_factory=list)


@dataclass
class OfflineProgress:
    last_save_time: float = 0.0
    offline_coins: int = 0
    offline_gems: int = 0
    offline_seconds: float = 0.0  # Staged but unclaimed time


@dataclass
class ActiveBuff:
    id: str
    type: BuffType
    activated_at: float
    expires_at: float


@dataclass
class BuffState:
    active: ActiveBuff | None = None
    last_roll_time: float | None = None

    def is_active(self, now: float) -> bool:
        return self.active is not None and self.active.expires_at > now


@dataclass
class AdventureSkill:
    id: str
    type: AdventureSkillType
    name: str
    description: str = ""


@dataclass
class AdventureState:
    """
    Per-encounter skill state.

    `consumed` counts uses of one-shot effects (keyed by effect name);
    it is cleared at every encounter start and end.
    """
    selected: AdventureSkill | None = None
    offered: list[AdventureSkill] = field(default_factory=list)
    consumed: dict[str, int] = field(default_factory=dict)

    def uses(self, key: str) -> int:
        return self.consumed.get(key, 0)

    def consume(self, key: str) -> None:
        self.consumed[key] = self.consumed.get(key, 0) + 1

    def reset(self) -> None:
        self.selected = None
        self.offered = []
        self.consumed = {}


@dataclass
class CombatState:
    phase: CombatPhase = CombatPhase.IDLE
    enemy: Enemy | None = None
    log: list[str] = field(default_factory=list)

    @property
    def in_combat(self) -> bool:
        return self.phase != CombatPhase.IDLE


# =============================================================================
# Root
# =============================================================================

@dataclass
class GameState:
    """
    Complete player state at a point in time.

    This is the canonical value the engine operates on.
    All changes go through the reducer.
    """
    player_id: str = "player"

    coins: int = 500
    gems: int = 50
    shiny_gems: int = 0
    zone: int = 1

    stats: PlayerStats = field(default_factory=PlayerStats)
    inventory: Inventory = field(default_factory=Inventory)
    combat: CombatState = field(default_factory=CombatState)
    streak: KnowledgeStreak = field(default_factory=KnowledgeStreak)
    game_mode: GameModeState = field(default_factory=GameModeState)
    progression: Progression = field(default_factory=Progression)
    statistics: Statistics = field(default_factory=Statistics)
    collection: CollectionBook = field(default_factory=CollectionBook)
    mining: MiningStats = field(default_factory=MiningStats)

    market: Market = field(default_factory=Market)
    garden: Garden = field(default_factory=Garden)
    daily_rewards: DailyRewards = field(default_factory=DailyRewards)
    offline: OfflineProgress = field(default_factory=OfflineProgress)
    buffs: BuffState = field(default_factory=BuffState)
    adventure: AdventureState = field(default_factory=AdventureState)

    achievements: list[Achievement] = field(default_factory=list)
    player_tags: list[PlayerTag] = field(default_factory=list)

    is_premium: bool = False
    has_used_revival: bool = False

    # Seed for reconciliation draws made without an explicit rng
    random_seed: int = 0

    @classmethod
    def new(
        cls,
        balance: BalanceConfig,
        player_id: str = "player",
        now: float = 0.0,
        random_seed: int = 0,
    ) -> GameState:
        """Factory for a fresh game. Content (market, achievements) is filled in by the engine."""
        return cls(
            player_id=player_id,
            coins=balance.starting_coins,
            gems=balance.starting_gems,
            stats=PlayerStats(
                hp=balance.base_hp,
                max_hp=balance.base_hp,
                attack=balance.base_attack,
                defense=balance.base_defense,
                base_attack=balance.base_attack,
                base_defense=balance.base_defense,
                base_hp=balance.base_hp,
            ),
            game_mode=GameModeState(
                survival_lives=balance.survival_lives,
                max_survival_lives=balance.survival_lives,
            ),
            progression=Progression(experience_to_next=balance.first_level_xp),
            market=Market(
                last_refresh=now,
                next_refresh=now + balance.market_cycle_seconds,
            ),
            offline=OfflineProgress(last_save_time=now),
            random_seed=random_seed,
        )

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
