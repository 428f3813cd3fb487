"""
Idle Reconciler - Catch-up for time that passed while nothing ran.

reconcile() runs once per load. Given the same (snapshot, now) it is
deterministic, and a second call with an unchanged `now` is a no-op:
every step advances its own timestamp to `now`.
"""

from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import BalanceConfig, DEFAULT_BALANCE
from .attributes import apply_derived_stats
from .loot import LEGENDARY_CHEST, MYTHICAL_ITEM, roll_market_batch
from .state import DailyReward, GameState

if TYPE_CHECKING:
    from ..content import ContentProvider


logger = logging.getLogger(__name__)

HOUR = 3600.0
DAY = 86400.0

FIRST_TIME_COINS = 75
FIRST_TIME_GEMS = 5

MILESTONE_SPECIALS = {
    7: LEGENDARY_CHEST,
    14: MYTHICAL_ITEM,
}


def daily_reward_for_day(day: int) -> DailyReward:
    """Reward for a given streak day; milestone days add a special."""
    return DailyReward(
        day=day,
        coins=50 + 25 * day,
        gems=5 + day // 2,
        special=MILESTONE_SPECIALS.get(day),
    )


def settle_offline(state: GameState, now: float, balance: BalanceConfig = DEFAULT_BALANCE) -> bool:
    """Stage offline earnings since the last save. Does not credit them."""
    offline = state.offline
    elapsed_hours = (now - offline.last_save_time) / HOUR
    if elapsed_hours <= balance.min_offline_hours:
        return False

    staged_hours = offline.offline_seconds / HOUR
    hours = min(elapsed_hours, max(0.0, balance.max_offline_hours - staged_hours))
    offline.last_save_time = now
    if hours <= 0:
        return False

    prestige = state.progression.prestige_level
    coins_rate = balance.offline_coins_per_hour + 2 * prestige
    gems_rate = balance.offline_gems_per_hour + prestige // 5
    offline.offline_coins += math.floor(hours * coins_rate)
    offline.offline_gems += math.floor(hours * gems_rate)
    offline.offline_seconds += hours * HOUR
    return True


def settle_garden(state: GameState, now: float, balance: BalanceConfig = DEFAULT_BALANCE) -> bool:
    """Grow the garden up to `now` and refresh its bonus."""
    garden = state.garden
    if not garden.is_planted or garden.last_watered is None:
        return False

    changed = False
    if garden.water_hours_remaining > 0:
        delta = max(0.0, (now - garden.last_watered) / HOUR)
        garden.water_hours_remaining = max(0.0, garden.water_hours_remaining - delta)
        if garden.water_hours_remaining > 0:
            garden.growth_cm = min(
                balance.max_growth_cm,
                garden.growth_cm + delta * balance.growth_cm_per_hour,
            )
        changed = delta > 0
    garden.last_watered = now

    bonus = garden.growth_cm * balance.bonus_percent_per_cm
    if bonus != garden.total_growth_bonus:
        garden.total_growth_bonus = bonus
        changed = True
    return changed


def refresh_market(
    state: GameState,
    now: float,
    rng: random.Random,
    content: ContentProvider,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> None:
    state.market.items = roll_market_batch(rng, content, balance)
    state.market.last_refresh = now
    state.market.next_refresh = now + balance.market_cycle_seconds


def settle_market(
    state: GameState,
    now: float,
    rng: random.Random,
    content: ContentProvider,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> bool:
    if now > state.market.next_refresh:
        refresh_market(state, now, rng, content, balance)
        return True
    return False


def expire_buff(state: GameState, now: float) -> bool:
    if state.buffs.active is not None and not state.buffs.is_active(now):
        state.buffs.active = None
        return True
    return False


def settle_daily(state: GameState, now: float) -> bool:
    """Advance the login streak and stage the next daily reward."""
    daily = state.daily_rewards
    if daily.last_claim_date is None:
        if daily.available_reward is not None:
            return False
        daily.current_streak = 1
        daily.max_streak = max(daily.max_streak, 1)
        daily.available_reward = DailyReward(day=1, coins=FIRST_TIME_COINS, gems=FIRST_TIME_GEMS)
        return True

    days = math.floor((now - daily.last_claim_date) / DAY)
    if days < 1:
        return False

    streak = daily.claimed_streak + 1 if days == 1 else 1
    if daily.current_streak == streak and daily.available_reward is not None:
        return False
    daily.current_streak = streak
    daily.max_streak = max(daily.max_streak, streak)
    daily.available_reward = daily_reward_for_day(streak)
    return True


@dataclass
class Reconciler:
    content: ContentProvider
    balance: BalanceConfig = DEFAULT_BALANCE

    def reconcile(self, state: GameState, now: float, rng: random.Random | None = None) -> GameState:
        """Return a new state with every time-gated subsystem advanced to `now`."""
        if rng is None:
            rng = random.Random(f"{state.random_seed}:{now}")
        new_state = state.clone()

        steps = []
        if settle_offline(new_state, now, self.balance):
            steps.append("offline")
        garden_changed = settle_garden(new_state, now, self.balance)
        if garden_changed:
            steps.append("garden")
        if settle_market(new_state, now, rng, self.content, self.balance):
            steps.append("market")
        buff_expired = expire_buff(new_state, now)
        if buff_expired:
            steps.append("buff")
        if settle_daily(new_state, now):
            steps.append("daily")

        if garden_changed or buff_expired:
            apply_derived_stats(new_state, self.balance)

        if steps:
            logger.info("Reconciled %s at %.0f: %s", new_state.player_id, now, ", ".join(steps))
        return new_state


def reconcile(
    state: GameState,
    now: float,
    content: ContentProvider,
    rng: random.Random | None = None,
    balance: BalanceConfig = DEFAULT_BALANCE,
) -> GameState:
    """Convenience function to reconcile with a throwaway Reconciler."""
    return Reconciler(content=content, balance=balance).reconcile(state, now, rng)


__all__ = [
    "Reconciler",
    "reconcile",
    "daily_reward_for_day",
    "settle_offline",
    "settle_garden",
    "settle_market",
    "refresh_market",
    "expire_buff",
    "settle_daily",
]
