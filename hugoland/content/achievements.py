"""
Achievements and player tags.

Evaluators are side-effect free: they look at the new state and return
fresh copies of the entries that became unlocked. The reducer merges
them by id and pays achievement rewards once.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable

from ..engine_core.state import Achievement, GameMode, GameState, PlayerTag


Predicate = Callable[[GameState], bool]


@dataclass(frozen=True)
class AchievementDef:
    id: str
    name: str
    description: str
    predicate: Predicate
    reward_coins: int = 0
    reward_gems: int = 0


@dataclass(frozen=True)
class TagDef:
    id: str
    name: str
    description: str
    predicate: Predicate


ACHIEVEMENTS: list[AchievementDef] = [
    AchievementDef(
        "first_victory", "First Blood", "Defeat your first enemy",
        lambda s: s.statistics.total_victories >= 1, reward_coins=50,
    ),
    AchievementDef(
        "zone_10", "Explorer", "Reach zone 10",
        lambda s: s.statistics.zones_reached >= 10, reward_coins=200, reward_gems=10,
    ),
    AchievementDef(
        "zone_25", "Adventurer", "Reach zone 25",
        lambda s: s.statistics.zones_reached >= 25, reward_coins=500, reward_gems=25,
    ),
    AchievementDef(
        "zone_50", "Conqueror", "Reach zone 50",
        lambda s: s.statistics.zones_reached >= 50, reward_coins=1000, reward_gems=50,
    ),
    AchievementDef(
        "streak_10", "Scholar", "Reach a knowledge streak of 10",
        lambda s: s.streak.best >= 10, reward_gems=15,
    ),
    AchievementDef(
        "answers_100", "Quiz Master", "Answer 100 questions correctly",
        lambda s: s.statistics.correct_answers >= 100, reward_coins=300,
    ),
    AchievementDef(
        "first_chest", "Treasure Hunter", "Open your first chest",
        lambda s: s.statistics.chests_opened >= 1, reward_gems=5,
    ),
    AchievementDef(
        "collector_10", "Collector", "Collect 10 items",
        lambda s: s.statistics.items_collected >= 10, reward_coins=250,
    ),
    AchievementDef(
        "miner_100", "Deep Miner", "Mine 100 gems",
        lambda s: s.mining.total_gems_mined >= 100, reward_gems=20,
    ),
    AchievementDef(
        "level_10", "Seasoned", "Reach level 10",
        lambda s: s.progression.level >= 10, reward_coins=400,
    ),
    AchievementDef(
        "first_prestige", "Reborn", "Prestige for the first time",
        lambda s: s.progression.prestige_level >= 1, reward_gems=100,
    ),
]


PLAYER_TAGS: list[TagDef] = [
    TagDef(
        "survivor", "Survivor", "Win a fight in survival mode",
        lambda s: s.game_mode.current == GameMode.SURVIVAL and s.statistics.total_victories > 0,
    ),
    TagDef(
        "bloodthirsty", "Bloodthirsty", "Deal 10,000 total damage",
        lambda s: s.statistics.total_damage_dealt >= 10_000,
    ),
    TagDef(
        "unbreakable", "Unbreakable", "Take 5,000 total damage",
        lambda s: s.statistics.total_damage_taken >= 5_000,
    ),
    TagDef(
        "gardener", "Gardener", "Grow the garden to 50 cm",
        lambda s: s.garden.growth_cm >= 50,
    ),
    TagDef(
        "loyal", "Loyal", "Keep a 7 day login streak",
        lambda s: s.daily_rewards.max_streak >= 7,
    ),
    TagDef(
        "premium", "Premium", "Unlock premium status",
        lambda s: s.is_premium,
    ),
]


def initial_achievements() -> list[Achievement]:
    return [
        Achievement(
            id=d.id,
            name=d.name,
            description=d.description,
            reward_coins=d.reward_coins,
            reward_gems=d.reward_gems,
        )
        for d in ACHIEVEMENTS
    ]


def initial_player_tags() -> list[PlayerTag]:
    return [PlayerTag(id=d.id, name=d.name, description=d.description) for d in PLAYER_TAGS]


def evaluate_achievements(state: GameState, now: float) -> list[Achievement]:
    """Return achievements newly unlocked by this state."""
    unlocked = {a.id for a in state.achievements if a.unlocked}
    current = {a.id: a for a in state.achievements}
    result = []
    for definition in ACHIEVEMENTS:
        if definition.id in unlocked or not definition.predicate(state):
            continue
        base = current.get(definition.id)
        if base is None:
            base = Achievement(
                id=definition.id,
                name=definition.name,
                description=definition.description,
                reward_coins=definition.reward_coins,
                reward_gems=definition.reward_gems,
            )
        result.append(replace(base, unlocked=True, unlocked_at=now))
    return result


def evaluate_player_tags(state: GameState, now: float) -> list[PlayerTag]:
    """Return player tags newly unlocked by this state."""
    unlocked = {t.id for t in state.player_tags if t.unlocked}
    current = {t.id: t for t in state.player_tags}
    result = []
    for definition in PLAYER_TAGS:
        if definition.id in unlocked or not definition.predicate(state):
            continue
        base = current.get(definition.id)
        if base is None:
            base = PlayerTag(id=definition.id, name=definition.name, description=definition.description)
        result.append(replace(base, unlocked=True, unlocked_at=now))
    return result
