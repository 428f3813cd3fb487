"""
Configuration - Balance constants and runtime settings.

BalanceConfig holds every tuning number the engine consumes.
Settings holds process-level knobs read from the environment.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class BalanceConfig:
    """
    Game balance constants.

    Frozen so a config can be shared between reducers and sessions.
    """
    # New game
    starting_coins: int = 500
    starting_gems: int = 50
    base_attack: int = 20
    base_defense: int = 10
    base_hp: int = 100

    # Equipment
    weapon_power_per_level: int = 10
    armor_power_per_level: int = 5
    upgrade_cost_growth: float = 1.5
    sell_price_growth: float = 1.2

    # Relics
    relic_sell_ratio: float = 0.5

    # Combat
    streak_step: float = 0.1
    skill_offer_chance: float = 0.25
    skill_offer_count: int = 3
    revival_hp_ratio: float = 0.5
    victory_heal_ratio: float = 0.2
    survival_lives: int = 3

    # Loot
    loot_zone_gate: int = 10
    loot_drop_chance: float = 0.3
    loot_rare_chance: float = 0.1
    chest_item_chance: float = 0.8
    chest_double_chance: float = 0.3
    chest_bonus_gems: tuple[int, int] = (5, 14)

    # Mining
    shiny_chance: float = 0.05
    shiny_exchange_rate: int = 10

    # Buffs
    buff_roll_cost: int = 100
    zone_skip: int = 5

    # Market
    market_size: int = 4
    market_cycle_seconds: float = 5 * 60

    # Garden
    seed_cost: int = 1000
    water_cost_per_day: int = 1000
    initial_water_hours: float = 24.0
    growth_cm_per_hour: float = 0.5
    max_growth_cm: float = 100.0
    bonus_percent_per_cm: float = 5.0

    # Offline progress
    max_offline_hours: float = 8.0
    min_offline_hours: float = 0.1
    offline_coins_per_hour: int = 10
    offline_gems_per_hour: int = 1

    # Progression
    first_level_xp: int = 100
    level_xp_growth: float = 1.2
    prestige_min_level: int = 50
    premium_zone: int = 50


DEFAULT_BALANCE = BalanceConfig()


@dataclass
class Settings:
    """Process settings for the store, API and CLI."""
    env: str = "development"
    save_dir: Path = field(default_factory=lambda: Path.home() / ".hugoland" / "saves")
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        save_dir = os.getenv("HUGOLAND_SAVE_DIR")
        return cls(
            env=os.getenv("HUGOLAND_ENV", "development"),
            save_dir=Path(save_dir).expanduser() if save_dir else Path.home() / ".hugoland" / "saves",
            log_level=os.getenv("HUGOLAND_LOG_LEVEL", "INFO").upper(),
            allowed_origins=[
                origin.strip()
                for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
                if origin.strip()
            ],
        )


__all__ = ["BalanceConfig", "DEFAULT_BALANCE", "Settings"]
