"""
Pytest fixtures for Hugoland tests.
"""

import random

import pytest

from ..content import DefaultContent
from ..engine_core.combat import CombatEngine
from ..engine_core.effects import SKILL_EFFECTS
from ..engine_core.engine import Engine
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    AdventureSkill,
    Armor,
    CombatPhase,
    Enemy,
    GameState,
    Rarity,
    Weapon,
)


NOW = 1_700_000_000.0


class ScriptedRandom(random.Random):
    """
    Random whose random() returns queued values first.

    Integer draws (randint, choice, sample) are not scripted; they come
    from the seeded generator underneath.
    """

    def __init__(self, values=(), seed=0):
        super().__init__(seed)
        self.queue = list(values)

    def push(self, *values):
        self.queue.extend(values)

    def random(self):
        if self.queue:
            return self.queue.pop(0)
        return super().random()

    # Keeps integer draws on getrandbits instead of random()
    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def content() -> DefaultContent:
    return DefaultContent()


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom(seed=1234)


@pytest.fixture
def reducer(content, rng) -> Reducer:
    return Reducer(content=content, rng=rng, clock=lambda: NOW)


@pytest.fixture
def combat(content) -> CombatEngine:
    return CombatEngine(content=content)


@pytest.fixture
def engine(content, rng) -> Engine:
    return Engine(content=content, rng=rng, clock=lambda: NOW)


@pytest.fixture
def fresh_state(reducer) -> GameState:
    """A new game at NOW with a stocked market."""
    return reducer.new_game(player_id="tester", now=NOW, random_seed=42)


@pytest.fixture
def geared_state(fresh_state) -> GameState:
    """New game with one unequipped common weapon and armor."""
    state = fresh_state
    state.inventory.weapons.append(
        Weapon(id="w1", name="Rusty Sword", rarity=Rarity.COMMON, base_attack=10)
    )
    state.inventory.armor.append(
        Armor(id="a1", name="Leather Vest", rarity=Rarity.COMMON, base_defense=5)
    )
    return state


@pytest.fixture
def make_encounter():
    """Put a state straight into an ACTIVE encounter."""

    def _make(state, enemy_hp=100, enemy_attack=11, skill=None):
        state.combat.phase = CombatPhase.ACTIVE
        state.combat.enemy = Enemy(
            name="Goblin",
            hp=enemy_hp,
            max_hp=enemy_hp,
            attack=enemy_attack,
            defense=4,
            zone=state.zone,
        )
        if skill is not None:
            state.adventure.selected = AdventureSkill(
                id=skill.value,
                type=skill,
                name=SKILL_EFFECTS[skill].name,
            )
        return state

    return _make
