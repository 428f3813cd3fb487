"""
Engine - Named entry points over the reducer and reconciler.

Each method takes the current state and returns an ActionResult;
the caller keeps whichever state it wants and decides when to save.
"""

from __future__ import annotations
import random
import time
from dataclasses import dataclass, field, replace
from typing import Callable

from ..config import BalanceConfig, DEFAULT_BALANCE
from ..content.provider import ContentProvider, DefaultContent
from .action import Action, ActionResult
from .reconciler import Reconciler
from .reducer import Reducer
from .state import GameState


@dataclass
class Engine:
    content: ContentProvider = field(default_factory=DefaultContent)
    balance: BalanceConfig = DEFAULT_BALANCE
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = field(default_factory=lambda: time.time)

    def __post_init__(self):
        self.reducer = Reducer(
            content=self.content,
            balance=self.balance,
            rng=self.rng,
            clock=self.clock,
        )
        self.reconciler = Reconciler(content=self.content, balance=self.balance)

    def new_game(self, player_id: str = "player", now: float | None = None, random_seed: int | None = None) -> GameState:
        if now is None:
            now = self.clock()
        if random_seed is None:
            random_seed = self.rng.getrandbits(32)
        return self.reducer.new_game(player_id=player_id, now=now, random_seed=random_seed)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        if action.timestamp is None:
            action = replace(action, timestamp=self.clock())
        return self.reducer.apply(state, action)

    def reconcile(self, state: GameState, now: float | None = None, rng: random.Random | None = None) -> GameState:
        if now is None:
            now = self.clock()
        return self.reconciler.reconcile(state, now, rng)

    def _now(self, now: float | None) -> float:
        return self.clock() if now is None else now

    # Equipment

    def equip_weapon(self, state: GameState, weapon_id: str) -> ActionResult:
        return self.apply(state, Action.equip_weapon(weapon_id))

    def equip_armor(self, state: GameState, armor_id: str) -> ActionResult:
        return self.apply(state, Action.equip_armor(armor_id))

    def upgrade_weapon(self, state: GameState, weapon_id: str) -> ActionResult:
        return self.apply(state, Action.upgrade_weapon(weapon_id))

    def upgrade_armor(self, state: GameState, armor_id: str) -> ActionResult:
        return self.apply(state, Action.upgrade_armor(armor_id))

    def sell_weapon(self, state: GameState, weapon_id: str) -> ActionResult:
        return self.apply(state, Action.sell_weapon(weapon_id))

    def sell_armor(self, state: GameState, armor_id: str) -> ActionResult:
        return self.apply(state, Action.sell_armor(armor_id))

    def discard_item(self, state: GameState, item_id: str, item_type: str) -> ActionResult:
        return self.apply(state, Action.discard_item(item_id, item_type))

    def bulk_sell(self, state: GameState, item_ids: list[str], item_type: str) -> ActionResult:
        return self.apply(state, Action.bulk_sell(item_ids, item_type))

    def bulk_upgrade(self, state: GameState, item_ids: list[str], item_type: str) -> ActionResult:
        return self.apply(state, Action.bulk_upgrade(item_ids, item_type))

    # Shops

    def open_chest(self, state: GameState, cost: int) -> ActionResult:
        return self.apply(state, Action.open_chest(cost))

    def purchase_mythical(self, state: GameState, cost: int) -> ActionResult:
        return self.apply(state, Action.purchase_mythical(cost))

    def purchase_relic(self, state: GameState, relic_id: str) -> ActionResult:
        return self.apply(state, Action.purchase_relic(relic_id))

    # Relics

    def equip_relic(self, state: GameState, relic_id: str) -> ActionResult:
        return self.apply(state, Action.equip_relic(relic_id))

    def unequip_relic(self, state: GameState, relic_id: str) -> ActionResult:
        return self.apply(state, Action.unequip_relic(relic_id))

    def upgrade_relic(self, state: GameState, relic_id: str) -> ActionResult:
        return self.apply(state, Action.upgrade_relic(relic_id))

    def sell_relic(self, state: GameState, relic_id: str) -> ActionResult:
        return self.apply(state, Action.sell_relic(relic_id))

    # Combat

    def begin_encounter(self, state: GameState) -> ActionResult:
        return self.apply(state, Action.begin_encounter())

    def answer(self, state: GameState, correct: bool, category: str | None = None) -> ActionResult:
        return self.apply(state, Action.answer(correct, category))

    def select_adventure_skill(self, state: GameState, skill_id: str) -> ActionResult:
        return self.apply(state, Action.select_adventure_skill(skill_id))

    def skip_adventure_skills(self, state: GameState) -> ActionResult:
        return self.apply(state, Action.skip_adventure_skills())

    def use_skip_card(self, state: GameState, category: str | None = None) -> ActionResult:
        return self.apply(state, Action.use_skip_card(category))

    # Mining

    def mine_gem(self, state: GameState, x: int, y: int) -> ActionResult:
        return self.apply(state, Action.mine_gem(x, y))

    def exchange_shiny_gems(self, state: GameState, amount: int) -> ActionResult:
        return self.apply(state, Action.exchange_shiny_gems(amount))

    # Timed systems

    def roll_buff(self, state: GameState, now: float | None = None) -> ActionResult:
        return self.apply(state, Action.roll_buff(self._now(now)))

    def claim_daily_reward(self, state: GameState, now: float | None = None) -> ActionResult:
        return self.apply(state, Action.claim_daily_reward(self._now(now)))

    def claim_offline_rewards(self, state: GameState) -> ActionResult:
        return self.apply(state, Action.claim_offline_rewards())

    def plant_seed(self, state: GameState, now: float | None = None) -> ActionResult:
        return self.apply(state, Action.plant_seed(self._now(now)))

    def buy_water(self, state: GameState, hours: float, now: float | None = None) -> ActionResult:
        return self.apply(state, Action.buy_water(hours, self._now(now)))

    # Progression

    def upgrade_skill(self, state: GameState, skill_id: str) -> ActionResult:
        return self.apply(state, Action.upgrade_skill(skill_id))

    def set_game_mode(self, state: GameState, mode: str) -> ActionResult:
        return self.apply(state, Action.set_game_mode(mode))

    def prestige(self, state: GameState) -> ActionResult:
        return self.apply(state, Action.prestige())

    def reset_game(self, state: GameState, now: float | None = None) -> ActionResult:
        return self.apply(state, Action.reset_game(self._now(now)))
