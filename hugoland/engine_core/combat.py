"""
Combat Engine - Encounters driven by answered questions.

Phases: IDLE -> (SKILL_SELECTION ->) ACTIVE -> IDLE.
Victory and defeat are resolved synchronously inside answer().

All functions here mutate the working clone they are given; the
reducer owns cloning and validation of the phase.

Multiplier precedence: the selected adventure skill applies before
the active buff. On incoming damage full blocks are checked before
percentage reductions.
"""

from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config import BalanceConfig, DEFAULT_BALANCE
from .attributes import apply_derived_stats
from .effects import BuffEffect, SkillEffect, buff_effect, skill_effect
from .loot import Item, grant_items, roll_victory_drop
from .state import (
    CategoryAccuracy,
    CombatPhase,
    GameMode,
    GameState,
)

if TYPE_CHECKING:
    from ..content import ContentProvider


logger = logging.getLogger(__name__)

# Keys into AdventureState.consumed
BLOCK = "block"
REVIVE = "revive"
DEATH_IMMUNITY = "death_immunity"
SKIP = "skip"


@dataclass
class VictoryRewards:
    coins: int
    gems: int
    experience: int
    levels_gained: int = 0
    drop: Item | None = None


@dataclass
class AnswerOutcome:
    """What one answered question did."""
    correct: bool
    damage_dealt: int = 0
    damage_taken: int = 0
    blocked: bool = False
    fallback: str | None = None  # "revive" | "death_immunity" | "free_revival"
    victory: VictoryRewards | None = None
    defeated: bool = False
    changes: list[str] = field(default_factory=list)


def experience_threshold(level: int, balance: BalanceConfig = DEFAULT_BALANCE) -> int:
    """XP needed to leave `level`."""
    return math.floor(balance.first_level_xp * balance.level_xp_growth ** (level - 1))


def award_experience(state: GameState, xp: int, balance: BalanceConfig = DEFAULT_BALANCE) -> int:
    """Add XP and run the level-up loop. Returns levels gained."""
    progression = state.progression
    progression.experience += xp
    gained = 0
    while progression.experience >= progression.experience_to_next:
        progression.experience -= progression.experience_to_next
        progression.level += 1
        progression.skill_points += 1
        progression.experience_to_next = experience_threshold(progression.level, balance)
        gained += 1
    return gained


def cannot_begin_reason(state: GameState) -> str | None:
    if state.combat.in_combat:
        return "Already in an encounter"
    if state.game_mode.current == GameMode.SURVIVAL and state.game_mode.survival_lives <= 0:
        return "No survival lives left"
    return None


@dataclass
class CombatEngine:
    """
    Encounter rules.

    Stateless - all state is in GameState. Content supplies enemies,
    skill offers and drops.
    """
    content: ContentProvider
    balance: BalanceConfig = DEFAULT_BALANCE

    def begin_encounter(self, state: GameState, rng: random.Random) -> list[str]:
        enemy = self.content.generate_enemy(rng, state.zone)
        state.combat.enemy = enemy
        state.combat.log = [f"You encounter a {enemy.name} in Zone {state.zone}!"]
        state.has_used_revival = False
        state.adventure.reset()

        changes = [f"Encounter started against {enemy.name} (zone {state.zone})"]
        if rng.random() < self.balance.skill_offer_chance:
            state.adventure.offered = self.content.offer_adventure_skills(
                rng, self.balance.skill_offer_count
            )
            state.combat.phase = CombatPhase.SKILL_SELECTION
            changes.append(
                "Adventure skills offered: "
                + ", ".join(skill.name for skill in state.adventure.offered)
            )
        else:
            state.combat.phase = CombatPhase.ACTIVE

        logger.debug("Encounter started: %s hp=%d zone=%d", enemy.name, enemy.hp, state.zone)
        return changes

    def select_skill(self, state: GameState, skill_id: str) -> list[str] | None:
        """Select an offered skill. Returns None when the id is not on offer."""
        for skill in state.adventure.offered:
            if skill.id == skill_id:
                state.adventure.selected = skill
                state.adventure.offered = []
                state.combat.phase = CombatPhase.ACTIVE
                state.combat.log.append(f"You channel {skill.name}!")
                return [f"Selected adventure skill {skill.name}"]
        return None

    def skip_skills(self, state: GameState) -> list[str]:
        state.adventure.selected = None
        state.adventure.offered = []
        state.combat.phase = CombatPhase.ACTIVE
        return ["Skipped adventure skills"]

    def has_skip_card(self, state: GameState) -> bool:
        if state.adventure.selected is None:
            return False
        charges = skill_effect(state.adventure.selected.type).skip_charges
        return state.adventure.uses(SKIP) < charges

    def use_skip_card(
        self,
        state: GameState,
        rng: random.Random,
        category: str | None = None,
    ) -> AnswerOutcome:
        state.adventure.consume(SKIP)
        state.combat.log.append("You play your Skip Card!")
        return self.answer(state, True, category, rng)

    def answer(
        self,
        state: GameState,
        correct: bool,
        category: str | None,
        rng: random.Random,
    ) -> AnswerOutcome:
        """Resolve one answered question in an ACTIVE encounter."""
        self._record_question(state, correct, category)

        skill = skill_effect(state.adventure.selected.type if state.adventure.selected else None)
        buff = buff_effect(state.buffs.active.type if state.buffs.active else None)

        outcome = AnswerOutcome(correct=correct)
        if correct:
            self._resolve_hit(state, skill, buff, rng, outcome)
        else:
            self._resolve_miss(state, skill, buff, outcome)

        if not buff.preserves_durability:
            self._wear_equipment(state)
        apply_derived_stats(state, self.balance)
        return outcome

    # ------------------------------------------------------------------
    # Correct answers
    # ------------------------------------------------------------------

    def _resolve_hit(
        self,
        state: GameState,
        skill: SkillEffect,
        buff: BuffEffect,
        rng: random.Random,
        outcome: AnswerOutcome,
    ) -> None:
        streak = state.streak
        step = buff.streak_step if buff.streak_step is not None else self.balance.streak_step
        streak.current += 1
        streak.best = max(streak.best, streak.current)
        streak.multiplier = 1 + streak.current * step

        stats = state.stats
        log = state.combat.log
        enemy = state.combat.enemy

        # Skill table
        damage: float = stats.attack * skill.damage_multiplier
        if skill.crit_chance and rng.random() < skill.crit_chance:
            damage *= skill.crit_multiplier
            log.append("Critical strike!")
        if skill.ramp_per_streak:
            damage = math.floor(damage * (1 + streak.current * skill.ramp_per_streak))
        if skill.scales_with_missing_hp and stats.max_hp > 0:
            damage *= 1 + (stats.max_hp - stats.hp) / stats.max_hp
        if skill.hp_cost_ratio:
            cost = math.floor(stats.hp * skill.hp_cost_ratio)
            stats.hp = max(1, stats.hp - cost)
            log.append(f"Blood pact costs you {cost} HP")

        # Buff table
        damage *= buff.damage_multiplier

        dealt = math.floor(damage)
        enemy.hp -= dealt
        state.statistics.total_damage_dealt += dealt
        outcome.damage_dealt = dealt
        log.append(f"You deal {dealt} damage to the {enemy.name}!")

        if skill.lifesteal_ratio:
            healing = math.floor(dealt * skill.lifesteal_ratio)
            stats.hp = min(stats.max_hp, stats.hp + healing)
            log.append(f"Vampiric healing restores {healing} HP!")

        outcome.changes.append(f"Dealt {dealt} damage")
        if enemy.hp <= 0:
            outcome.victory = self._resolve_victory(state, skill, buff, rng)
            outcome.changes.append(
                f"Victory: +{outcome.victory.coins} coins, +{outcome.victory.gems} gems, "
                f"+{outcome.victory.experience} XP"
            )

    def _resolve_victory(
        self,
        state: GameState,
        skill: SkillEffect,
        buff: BuffEffect,
        rng: random.Random,
    ) -> VictoryRewards:
        zone = state.zone
        multiplier = state.streak.multiplier
        coins = math.floor((10 + 2 * zone) * multiplier)
        gems = math.floor((zone // 5 + 1) * multiplier)
        xp = math.floor((20 + 3 * zone) * multiplier)

        mode = state.game_mode.current
        if mode == GameMode.BLITZ:
            coins = math.floor(coins * 1.25)
            gems = math.floor(gems * 1.1)
        elif mode == GameMode.SURVIVAL:
            coins *= 2
            gems *= 2
            xp *= 2

        coins = math.floor(coins * buff.coin_multiplier)
        gems = math.floor(gems * buff.gem_multiplier)
        xp = math.floor(xp * buff.xp_multiplier)

        state.coins += coins
        state.gems += gems
        state.statistics.coins_earned += coins
        state.statistics.gems_earned += gems
        state.statistics.total_victories += 1

        levels = award_experience(state, xp, self.balance)
        rewards = VictoryRewards(coins=coins, gems=gems, experience=xp, levels_gained=levels)

        log = state.combat.log
        log.append(f"The {state.combat.enemy.name} is defeated! +{coins} coins, +{gems} gems, +{xp} XP")
        if levels:
            log.append(f"Level up! You are now level {state.progression.level}")

        drop = roll_victory_drop(rng, self.content, zone, self.balance)
        if drop is not None:
            grant_items(state, [drop])
            rewards.drop = drop
            log.append(f"The enemy dropped {drop.name}!")

        state.zone += 1
        state.statistics.zones_reached = max(state.statistics.zones_reached, state.zone)

        stats = state.stats
        if mode != GameMode.SURVIVAL:
            stats.hp = min(stats.max_hp, stats.hp + math.floor(stats.max_hp * self.balance.victory_heal_ratio))
        if skill.victory_heal_ratio:
            stats.hp = min(stats.max_hp, stats.hp + math.floor(stats.max_hp * skill.victory_heal_ratio))

        self._end_encounter(state)
        logger.debug("Victory at zone %d: coins=%d gems=%d xp=%d", zone, coins, gems, xp)
        return rewards

    # ------------------------------------------------------------------
    # Incorrect answers
    # ------------------------------------------------------------------

    def _resolve_miss(
        self,
        state: GameState,
        skill: SkillEffect,
        buff: BuffEffect,
        outcome: AnswerOutcome,
    ) -> None:
        if not buff.keeps_streak:
            state.streak.current = 0
            state.streak.multiplier = 1.0

        stats = state.stats
        enemy = state.combat.enemy
        log = state.combat.log
        adventure = state.adventure

        damage = max(1, enemy.attack - stats.defense)

        # Full blocks: skill charges, then buff
        if skill.block_charges and adventure.uses(BLOCK) < skill.block_charges:
            adventure.consume(BLOCK)
            outcome.blocked = True
            log.append(f"Your {adventure.selected.name} blocks the attack!")
        elif buff.blocks_damage:
            outcome.blocked = True
            log.append("Your magic shield absorbs the attack!")

        if outcome.blocked:
            damage = 0
        else:
            # Percentage reductions: skill, then buff
            damage = math.floor(damage * skill.damage_taken_multiplier * buff.damage_taken_multiplier)

        if damage > 0:
            stats.hp -= damage
            state.statistics.total_damage_taken += damage
            outcome.damage_taken = damage
            log.append(f"The {enemy.name} deals {damage} damage to you!")
        outcome.changes.append(f"Took {damage} damage")

        if stats.hp <= 0:
            self._resolve_lethal(state, skill, outcome)

    def _resolve_lethal(self, state: GameState, skill: SkillEffect, outcome: AnswerOutcome) -> None:
        """Exactly one fallback per lethal hit, in strict priority order."""
        stats = state.stats
        adventure = state.adventure
        log = state.combat.log
        half = math.floor(stats.max_hp * self.balance.revival_hp_ratio)

        if skill.revives and adventure.uses(REVIVE) == 0:
            adventure.consume(REVIVE)
            stats.hp = half
            outcome.fallback = REVIVE
            log.append(f"{adventure.selected.name} revives you with 50% HP!")
        elif skill.prevents_death and adventure.uses(DEATH_IMMUNITY) == 0:
            adventure.consume(DEATH_IMMUNITY)
            stats.hp = 1
            outcome.fallback = DEATH_IMMUNITY
            log.append("Divine protection saves you with 1 HP!")
        elif not state.has_used_revival:
            state.has_used_revival = True
            stats.hp = half
            state.statistics.revivals += 1
            outcome.fallback = "free_revival"
            log.append("You are revived with 50% HP!")
        else:
            self._resolve_defeat(state)
            outcome.defeated = True
            outcome.changes.append("Defeated")
            return
        outcome.changes.append(f"Survived a lethal hit ({outcome.fallback})")

    def _resolve_defeat(self, state: GameState) -> None:
        enemy_name = state.combat.enemy.name
        state.combat.log.append(f"You have been defeated by the {enemy_name}...")
        state.statistics.total_deaths += 1
        if state.game_mode.current == GameMode.SURVIVAL:
            state.game_mode.survival_lives = max(0, state.game_mode.survival_lives - 1)
        self._end_encounter(state)
        state.stats.hp = state.stats.max_hp
        logger.debug("Defeat at zone %d by %s", state.zone, enemy_name)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _end_encounter(self, state: GameState) -> None:
        state.combat.enemy = None
        state.combat.phase = CombatPhase.IDLE
        state.adventure.reset()

    def _record_question(self, state: GameState, correct: bool, category: str | None) -> None:
        statistics = state.statistics
        statistics.total_questions_answered += 1
        if correct:
            statistics.correct_answers += 1
        if category:
            accuracy = statistics.accuracy_by_category.setdefault(category, CategoryAccuracy())
            accuracy.total += 1
            if correct:
                accuracy.correct += 1

    def _wear_equipment(self, state: GameState) -> bool:
        changed = False
        for item in (state.inventory.equipped_weapon, state.inventory.equipped_armor):
            if item is not None and item.durability > 0:
                item.durability -= 1
                changed = True
        return changed


__all__ = [
    "CombatEngine",
    "AnswerOutcome",
    "VictoryRewards",
    "award_experience",
    "experience_threshold",
    "cannot_begin_reason",
]
