"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply().

Design principles:
- Pure function: (state, action) -> new_state
- Copy-on-write: handlers work on a clone; failures return the original
- Returns ActionResult with success/failure, never raises
- Delegates encounters to CombatEngine and rolls to the loot adapter
"""

from __future__ import annotations
import logging
import math
import random
import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable

from ..config import BalanceConfig, DEFAULT_BALANCE
from .action import Action, ActionResult, ActionType, ErrorCode
from .attributes import apply_derived_stats
from .combat import CombatEngine, cannot_begin_reason
from .effects import BUFF_EFFECTS, RollTrigger, buff_effect
from .loot import grant_items, open_reward, roll_daily_special, roll_mythical_item
from .reconciler import expire_buff, refresh_market, settle_garden, settle_market
from .state import (
    ActiveBuff,
    Armor,
    BuffType,
    CombatPhase,
    CombatState,
    GameMode,
    GameState,
    ItemType,
    Weapon,
    new_id,
)

if TYPE_CHECKING:
    from ..content import ContentProvider


logger = logging.getLogger(__name__)


@dataclass
class MiningYield:
    gems: int
    shiny_gems: int


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    Content supplies generated entities; rng drives every random draw.
    """
    content: ContentProvider
    balance: BalanceConfig = DEFAULT_BALANCE
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = field(default_factory=lambda: time.time)

    def __post_init__(self):
        self.combat = CombatEngine(content=self.content, balance=self.balance)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error. On failure
        new_state is the unchanged input state.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
                state=state,
            )

        now = self._now(action)
        try:
            result = handler(self._settle_timers(state, now), action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code=ErrorCode.HANDLER_ERROR, state=state)

        if not result.success:
            logger.debug("%s rejected: %s", action.action_type.value, result.error)
            result.new_state = state
            return result

        self._finalize(result, now)
        logger.debug("%s applied: %s", action.action_type.value, "; ".join(result.state_changes))
        return result

    def new_game(self, player_id: str = "player", now: float = 0.0, random_seed: int = 0) -> GameState:
        """Fresh game with a stocked market and the content's achievement lists."""
        state = GameState.new(self.balance, player_id=player_id, now=now, random_seed=random_seed)
        refresh_market(state, now, self.rng, self.content, self.balance)
        state.achievements = self.content.initial_achievements()
        state.player_tags = self.content.initial_player_tags()
        return apply_derived_stats(state, self.balance)

    def _now(self, action: Action) -> float:
        if action.payload.now is not None:
            return action.payload.now
        if action.timestamp is not None:
            return action.timestamp
        return self.clock()

    def _settle_timers(self, state: GameState, now: float) -> GameState:
        """Drop a lapsed buff and restock a due market before the action runs."""
        buff_lapsed = state.buffs.active is not None and not state.buffs.is_active(now)
        if not buff_lapsed and now <= state.market.next_refresh:
            return state

        state = state.clone()
        if expire_buff(state, now):
            apply_derived_stats(state, self.balance)
        settle_market(state, now, self.rng, self.content, self.balance)
        return state

    def _finalize(self, result: ActionResult, now: float) -> None:
        """Merge evaluator output by id, pay achievement rewards once, flip premium."""
        state = result.new_state

        if state.zone >= self.balance.premium_zone and not state.is_premium:
            state.is_premium = True
            result.state_changes.append("Premium unlocked")

        previously_unlocked = {a.id for a in state.achievements if a.unlocked}
        for achievement in self.content.evaluate_achievements(state, now):
            _merge_by_id(state.achievements, achievement)
            if achievement.unlocked and achievement.id not in previously_unlocked:
                previously_unlocked.add(achievement.id)
                state.coins += achievement.reward_coins
                state.gems += achievement.reward_gems
                state.statistics.coins_earned += achievement.reward_coins
                state.statistics.gems_earned += achievement.reward_gems
                result.state_changes.append(f"Achievement unlocked: {achievement.name}")

        for tag in self.content.evaluate_player_tags(state, now):
            _merge_by_id(state.player_tags, tag)
            if tag.unlocked:
                result.state_changes.append(f"Tag unlocked: {tag.name}")

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.EQUIP_WEAPON: self._handle_equip,
            ActionType.EQUIP_ARMOR: self._handle_equip,
            ActionType.UPGRADE_WEAPON: self._handle_upgrade_item,
            ActionType.UPGRADE_ARMOR: self._handle_upgrade_item,
            ActionType.SELL_WEAPON: self._handle_sell_item,
            ActionType.SELL_ARMOR: self._handle_sell_item,
            ActionType.DISCARD_ITEM: self._handle_discard_item,
            ActionType.BULK_SELL: self._handle_bulk_sell,
            ActionType.BULK_UPGRADE: self._handle_bulk_upgrade,
            ActionType.OPEN_CHEST: self._handle_open_chest,
            ActionType.PURCHASE_MYTHICAL: self._handle_purchase_mythical,
            ActionType.PURCHASE_RELIC: self._handle_purchase_relic,
            ActionType.EQUIP_RELIC: self._handle_equip_relic,
            ActionType.UNEQUIP_RELIC: self._handle_unequip_relic,
            ActionType.UPGRADE_RELIC: self._handle_upgrade_relic,
            ActionType.SELL_RELIC: self._handle_sell_relic,
            ActionType.BEGIN_ENCOUNTER: self._handle_begin_encounter,
            ActionType.ANSWER: self._handle_answer,
            ActionType.SELECT_ADVENTURE_SKILL: self._handle_select_adventure_skill,
            ActionType.SKIP_ADVENTURE_SKILLS: self._handle_skip_adventure_skills,
            ActionType.USE_SKIP_CARD: self._handle_use_skip_card,
            ActionType.MINE_GEM: self._handle_mine_gem,
            ActionType.EXCHANGE_SHINY_GEMS: self._handle_exchange_shiny_gems,
            ActionType.ROLL_BUFF: self._handle_roll_buff,
            ActionType.CLAIM_DAILY_REWARD: self._handle_claim_daily_reward,
            ActionType.CLAIM_OFFLINE_REWARDS: self._handle_claim_offline_rewards,
            ActionType.PLANT_SEED: self._handle_plant_seed,
            ActionType.BUY_WATER: self._handle_buy_water,
            ActionType.UPGRADE_SKILL: self._handle_upgrade_skill,
            ActionType.SET_GAME_MODE: self._handle_set_game_mode,
            ActionType.PRESTIGE: self._handle_prestige,
            ActionType.RESET_GAME: self._handle_reset_game,
        }
        return handlers.get(action_type)

    # ------------------------------------------------------------------
    # Equipment
    # ------------------------------------------------------------------

    def _handle_equip(self, state: GameState, action: Action) -> ActionResult:
        item_type = _item_type_of(action.action_type)
        item_id = action.payload.item_id
        item = _find_item(state, item_type, item_id)
        if item is None:
            return ActionResult.failure(f"{item_type.value.title()} {item_id} not owned", ErrorCode.INVALID_REFERENCE)
        if state.inventory.equipped_id_of(item_type) == item_id:
            return ActionResult.failure(f"{item.name} is already equipped", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        inventory = new_state.inventory
        if item_type == ItemType.WEAPON:
            previous = inventory.equipped_weapon
            inventory.equipped_weapon_id = item_id
        else:
            previous = inventory.equipped_armor
            inventory.equipped_armor_id = item_id
        if previous is not None:
            previous.durability = max(0, previous.durability - 1)

        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(new_state, changes=[f"Equipped {item.name}"])

    def _handle_upgrade_item(self, state: GameState, action: Action) -> ActionResult:
        item_type = _item_type_of(action.action_type)
        item_id = action.payload.item_id
        item = _find_item(state, item_type, item_id)
        if item is None:
            return ActionResult.failure(f"{item_type.value.title()} {item_id} not owned", ErrorCode.INVALID_REFERENCE)
        if state.gems < item.upgrade_cost:
            return ActionResult.failure(
                f"Upgrade costs {item.upgrade_cost} gems, have {state.gems}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        new_state = state.clone()
        upgraded = _find_item(new_state, item_type, item_id)
        self._upgrade(new_state, upgraded)
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Upgraded {upgraded.name} to level {upgraded.level}"],
        )

    def _handle_sell_item(self, state: GameState, action: Action) -> ActionResult:
        item_type = _item_type_of(action.action_type)
        item_id = action.payload.item_id
        item = _find_item(state, item_type, item_id)
        if item is None:
            return ActionResult.failure(f"{item_type.value.title()} {item_id} not owned", ErrorCode.INVALID_REFERENCE)
        if state.inventory.equipped_id_of(item_type) == item_id:
            return ActionResult.failure(f"Cannot sell equipped {item.name}", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        self._sell(new_state, item_type, item_id)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Sold {item.name} for {item.sell_price} coins"],
        )

    def _handle_discard_item(self, state: GameState, action: Action) -> ActionResult:
        item_type = _parse_item_type(action.payload.item_type)
        if item_type is None:
            return ActionResult.failure(f"Unknown item type: {action.payload.item_type}", ErrorCode.INVALID_REFERENCE)
        item_id = action.payload.item_id
        item = _find_item(state, item_type, item_id)
        if item is None:
            return ActionResult.failure(f"{item_type.value.title()} {item_id} not owned", ErrorCode.INVALID_REFERENCE)
        if state.inventory.equipped_id_of(item_type) == item_id:
            return ActionResult.failure(f"Cannot discard equipped {item.name}", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        items = new_state.inventory.items_of(item_type)
        items[:] = [i for i in items if i.id != item_id]
        return ActionResult.success_with_state(new_state, changes=[f"Discarded {item.name}"])

    def _handle_bulk_sell(self, state: GameState, action: Action) -> ActionResult:
        item_type = _parse_item_type(action.payload.item_type)
        if item_type is None:
            return ActionResult.failure(f"Unknown item type: {action.payload.item_type}", ErrorCode.INVALID_REFERENCE)
        wanted = set(action.payload.item_ids or [])
        equipped = state.inventory.equipped_id_of(item_type)
        matches = [
            item for item in state.inventory.items_of(item_type)
            if item.id in wanted and item.id != equipped
        ]
        if not matches:
            return ActionResult.failure("No sellable items matched", ErrorCode.INVALID_REFERENCE)

        new_state = state.clone()
        total = 0
        for item in matches:
            total += self._sell(new_state, item_type, item.id)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Sold {len(matches)} {item_type.value} item(s) for {total} coins"],
            value=total,
        )

    def _handle_bulk_upgrade(self, state: GameState, action: Action) -> ActionResult:
        item_type = _parse_item_type(action.payload.item_type)
        if item_type is None:
            return ActionResult.failure(f"Unknown item type: {action.payload.item_type}", ErrorCode.INVALID_REFERENCE)
        wanted = set(action.payload.item_ids or [])
        matches = [item for item in state.inventory.items_of(item_type) if item.id in wanted]
        if not matches:
            return ActionResult.failure("No owned items matched", ErrorCode.INVALID_REFERENCE)
        total_cost = sum(item.upgrade_cost for item in matches)
        if state.gems < total_cost:
            return ActionResult.failure(
                f"Bulk upgrade costs {total_cost} gems, have {state.gems}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        new_state = state.clone()
        for item in matches:
            self._upgrade(new_state, _find_item(new_state, item_type, item.id))
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Upgraded {len(matches)} {item_type.value} item(s) for {total_cost} gems"],
            value=total_cost,
        )

    def _upgrade(self, state: GameState, item: Weapon | Armor) -> None:
        state.gems -= item.upgrade_cost
        item.level += 1
        item.upgrade_cost = math.floor(item.upgrade_cost * self.balance.upgrade_cost_growth)
        item.sell_price = math.floor(item.sell_price * self.balance.sell_price_growth)
        state.statistics.items_upgraded += 1

    def _sell(self, state: GameState, item_type: ItemType, item_id: str) -> int:
        items = state.inventory.items_of(item_type)
        item = next(i for i in items if i.id == item_id)
        items.remove(item)
        state.coins += item.sell_price
        state.statistics.coins_earned += item.sell_price
        state.statistics.items_sold += 1
        return item.sell_price

    # ------------------------------------------------------------------
    # Shops
    # ------------------------------------------------------------------

    def _handle_open_chest(self, state: GameState, action: Action) -> ActionResult:
        cost = action.payload.cost
        if cost is None or cost < 0:
            return ActionResult.failure(f"Invalid chest cost: {cost}", ErrorCode.INVALID_STATE)
        if state.coins < cost:
            return ActionResult.failure(
                f"Chest costs {cost} coins, have {state.coins}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        active = state.buffs.active
        outcome = open_reward(self.rng, self.content, cost, active.type if active else None, self.balance)

        new_state = state.clone()
        new_state.coins -= cost
        new_state.statistics.chests_opened += 1
        changes = [f"Opened a {outcome.rarity.value} chest for {cost} coins"]
        changes.extend(grant_items(new_state, outcome.items))
        new_state.gems += outcome.total_gems
        new_state.statistics.gems_earned += outcome.total_gems
        changes.append(f"+{outcome.total_gems} gems")
        if outcome.consumed_buff is not None:
            new_state.buffs.active = None
            apply_derived_stats(new_state, self.balance)
            changes.append(f"{BUFF_EFFECTS[outcome.consumed_buff].name} consumed")

        return ActionResult.success_with_state(new_state, changes=changes, value=outcome)

    def _handle_purchase_mythical(self, state: GameState, action: Action) -> ActionResult:
        cost = action.payload.cost
        if cost is None or cost < 0:
            return ActionResult.failure(f"Invalid cost: {cost}", ErrorCode.INVALID_STATE)
        if state.coins < cost:
            return ActionResult.failure(
                f"Mythical item costs {cost} coins, have {state.coins}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        item = roll_mythical_item(self.rng, self.content)
        new_state = state.clone()
        new_state.coins -= cost
        changes = grant_items(new_state, [item])
        return ActionResult.success_with_state(new_state, changes=changes, value=item)

    def _handle_purchase_relic(self, state: GameState, action: Action) -> ActionResult:
        relic_id = action.payload.item_id
        relic = next((r for r in state.market.items if r.id == relic_id), None)
        if relic is None:
            return ActionResult.failure(f"Relic {relic_id} not on the market", ErrorCode.INVALID_REFERENCE)
        if state.gems < relic.cost:
            return ActionResult.failure(
                f"{relic.name} costs {relic.cost} gems, have {state.gems}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        new_state = state.clone()
        new_state.gems -= relic.cost
        bought = next(r for r in new_state.market.items if r.id == relic_id)
        new_state.market.items.remove(bought)
        new_state.inventory.relics.append(bought)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Bought {relic.name} for {relic.cost} gems"],
            value=True,
        )

    # ------------------------------------------------------------------
    # Relics
    # ------------------------------------------------------------------

    def _handle_equip_relic(self, state: GameState, action: Action) -> ActionResult:
        relic_id = action.payload.item_id
        relic = state.inventory.get_relic(relic_id)
        if relic is None:
            return ActionResult.failure(f"Relic {relic_id} not owned", ErrorCode.INVALID_REFERENCE)
        if relic_id in state.inventory.equipped_relic_ids:
            return ActionResult.failure(f"{relic.name} is already equipped", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        new_state.inventory.equipped_relic_ids.append(relic_id)
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(new_state, changes=[f"Equipped relic {relic.name}"])

    def _handle_unequip_relic(self, state: GameState, action: Action) -> ActionResult:
        relic_id = action.payload.item_id
        relic = state.inventory.get_relic(relic_id)
        if relic is None:
            return ActionResult.failure(f"Relic {relic_id} not owned", ErrorCode.INVALID_REFERENCE)
        if relic_id not in state.inventory.equipped_relic_ids:
            return ActionResult.failure(f"{relic.name} is not equipped", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        new_state.inventory.equipped_relic_ids.remove(relic_id)
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(new_state, changes=[f"Unequipped relic {relic.name}"])

    def _handle_upgrade_relic(self, state: GameState, action: Action) -> ActionResult:
        relic_id = action.payload.item_id
        relic = state.inventory.get_relic(relic_id)
        if relic is None:
            return ActionResult.failure(f"Relic {relic_id} not owned", ErrorCode.INVALID_REFERENCE)
        if state.gems < relic.upgrade_cost:
            return ActionResult.failure(
                f"Upgrade costs {relic.upgrade_cost} gems, have {state.gems}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        new_state = state.clone()
        upgraded = new_state.inventory.get_relic(relic_id)
        new_state.gems -= upgraded.upgrade_cost
        upgraded.level += 1
        upgraded.upgrade_cost = math.floor(upgraded.upgrade_cost * self.balance.upgrade_cost_growth)
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Upgraded relic {upgraded.name} to level {upgraded.level}"],
        )

    def _handle_sell_relic(self, state: GameState, action: Action) -> ActionResult:
        relic_id = action.payload.item_id
        relic = state.inventory.get_relic(relic_id)
        if relic is None:
            return ActionResult.failure(f"Relic {relic_id} not owned", ErrorCode.INVALID_REFERENCE)
        if relic_id in state.inventory.equipped_relic_ids:
            return ActionResult.failure(f"Cannot sell equipped {relic.name}", ErrorCode.INVALID_STATE)

        price = math.floor(relic.cost * self.balance.relic_sell_ratio)
        new_state = state.clone()
        new_state.inventory.relics = [r for r in new_state.inventory.relics if r.id != relic_id]
        new_state.gems += price
        new_state.statistics.gems_earned += price
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Sold relic {relic.name} for {price} gems"],
            value=price,
        )

    # ------------------------------------------------------------------
    # Combat
    # ------------------------------------------------------------------

    def _handle_begin_encounter(self, state: GameState, action: Action) -> ActionResult:
        reason = cannot_begin_reason(state)
        if reason:
            return ActionResult.failure(reason, ErrorCode.INVALID_STATE)

        new_state = state.clone()
        changes = self.combat.begin_encounter(new_state, self.rng)
        return ActionResult.success_with_state(new_state, changes=changes, value=new_state.combat.enemy)

    def _handle_select_adventure_skill(self, state: GameState, action: Action) -> ActionResult:
        if state.combat.phase != CombatPhase.SKILL_SELECTION:
            return ActionResult.failure("No adventure skills on offer", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        changes = self.combat.select_skill(new_state, action.payload.item_id)
        if changes is None:
            return ActionResult.failure(
                f"Skill {action.payload.item_id} was not offered",
                ErrorCode.INVALID_REFERENCE,
            )
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_skip_adventure_skills(self, state: GameState, action: Action) -> ActionResult:
        if state.combat.phase != CombatPhase.SKILL_SELECTION:
            return ActionResult.failure("No adventure skills on offer", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        changes = self.combat.skip_skills(new_state)
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_answer(self, state: GameState, action: Action) -> ActionResult:
        if state.combat.phase != CombatPhase.ACTIVE:
            return ActionResult.failure("Not in an active encounter", ErrorCode.INVALID_STATE)
        if action.payload.correct is None:
            return ActionResult.failure("Answer must be correct or incorrect", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        outcome = self.combat.answer(new_state, action.payload.correct, action.payload.category, self.rng)
        return ActionResult.success_with_state(new_state, changes=outcome.changes, value=outcome)

    def _handle_use_skip_card(self, state: GameState, action: Action) -> ActionResult:
        if state.combat.phase != CombatPhase.ACTIVE:
            return ActionResult.failure("Not in an active encounter", ErrorCode.INVALID_STATE)
        if not self.combat.has_skip_card(state):
            return ActionResult.failure("No skip card available", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        outcome = self.combat.use_skip_card(new_state, self.rng, action.payload.category)
        return ActionResult.success_with_state(
            new_state,
            changes=["Used skip card"] + outcome.changes,
            value=outcome,
        )

    # ------------------------------------------------------------------
    # Mining
    # ------------------------------------------------------------------

    def _handle_mine_gem(self, state: GameState, action: Action) -> ActionResult:
        buff = buff_effect(state.buffs.active.type if state.buffs.active else None)
        where = f" at {action.payload.coord}" if action.payload.coord else ""
        shiny = buff.always_shiny or self.rng.random() < self.balance.shiny_chance
        mined = MiningYield(gems=0, shiny_gems=1) if shiny else MiningYield(gems=1, shiny_gems=0)

        new_state = state.clone()
        new_state.gems += mined.gems
        new_state.shiny_gems += mined.shiny_gems
        new_state.mining.total_gems_mined += mined.gems
        new_state.mining.total_shiny_gems_mined += mined.shiny_gems
        new_state.statistics.gems_earned += mined.gems
        new_state.statistics.shiny_gems_earned += mined.shiny_gems
        return ActionResult.success_with_state(
            new_state,
            changes=[("Mined a shiny gem" if shiny else "Mined a gem") + where],
            value=mined,
        )

    def _handle_exchange_shiny_gems(self, state: GameState, action: Action) -> ActionResult:
        amount = action.payload.amount
        if amount is None or amount <= 0:
            return ActionResult.failure(f"Invalid exchange amount: {amount}", ErrorCode.INVALID_STATE)
        if state.shiny_gems < amount:
            return ActionResult.failure(
                f"Have {state.shiny_gems} shiny gems, need {amount}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        gems = amount * self.balance.shiny_exchange_rate
        new_state = state.clone()
        new_state.shiny_gems -= amount
        new_state.gems += gems
        new_state.statistics.gems_earned += gems
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Exchanged {amount} shiny gems for {gems} gems"],
            value=True,
        )

    # ------------------------------------------------------------------
    # Timed systems
    # ------------------------------------------------------------------

    def _handle_roll_buff(self, state: GameState, action: Action) -> ActionResult:
        cost = self.balance.buff_roll_cost
        if state.coins < cost:
            return ActionResult.failure(
                f"Rolling a buff costs {cost} coins, have {state.coins}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        now = self._now(action)
        buff_type = self.rng.choice(list(BuffType))
        effect = BUFF_EFFECTS[buff_type]
        buff = ActiveBuff(
            id=new_id(self.rng),
            type=buff_type,
            activated_at=now,
            expires_at=now + effect.duration_hours * 3600,
        )

        new_state = state.clone()
        new_state.coins -= cost
        new_state.buffs.active = buff
        new_state.buffs.last_roll_time = now
        changes = [f"Rolled {effect.name}"]

        if effect.on_roll == RollTrigger.ZONE_SKIP:
            new_state.zone += self.balance.zone_skip
            new_state.statistics.zones_reached = max(new_state.statistics.zones_reached, new_state.zone)
            changes.append(f"Skipped to zone {new_state.zone}")
        elif effect.on_roll == RollTrigger.MARKET_REFRESH:
            refresh_market(new_state, now, self.rng, self.content, self.balance)
            changes.append("Market refreshed")

        apply_derived_stats(new_state, self.balance)
        if effect.on_roll == RollTrigger.REFILL_HP:
            new_state.stats.hp = new_state.stats.max_hp
            changes.append("HP refilled")

        return ActionResult.success_with_state(new_state, changes=changes, value=buff)

    def _handle_claim_daily_reward(self, state: GameState, action: Action) -> ActionResult:
        reward = state.daily_rewards.available_reward
        if reward is None:
            return ActionResult.failure("No daily reward available", ErrorCode.INVALID_STATE)

        now = self._now(action)
        new_state = state.clone()
        daily = new_state.daily_rewards
        claimed = replace(daily.available_reward, claimed=True, claim_date=now)

        new_state.coins += claimed.coins
        new_state.gems += claimed.gems
        new_state.statistics.coins_earned += claimed.coins
        new_state.statistics.gems_earned += claimed.gems
        changes = [f"Claimed day {claimed.day} reward: +{claimed.coins} coins, +{claimed.gems} gems"]

        special_item = roll_daily_special(self.rng, self.content, claimed.special)
        if special_item is not None:
            changes.extend(grant_items(new_state, [special_item]))

        daily.reward_history.append(claimed)
        daily.last_claim_date = now
        daily.claimed_streak = daily.current_streak
        daily.available_reward = None
        return ActionResult.success_with_state(new_state, changes=changes, value=True)

    def _handle_claim_offline_rewards(self, state: GameState, action: Action) -> ActionResult:
        new_state = state.clone()
        offline = new_state.offline
        coins, gems = offline.offline_coins, offline.offline_gems
        new_state.coins += coins
        new_state.gems += gems
        new_state.statistics.coins_earned += coins
        new_state.statistics.gems_earned += gems
        offline.offline_coins = 0
        offline.offline_gems = 0
        offline.offline_seconds = 0.0
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Claimed offline rewards: +{coins} coins, +{gems} gems"],
            value=(coins, gems),
        )

    def _handle_plant_seed(self, state: GameState, action: Action) -> ActionResult:
        if state.garden.is_planted:
            return ActionResult.failure("Garden is already planted", ErrorCode.INVALID_STATE)
        if state.coins < self.balance.seed_cost:
            return ActionResult.failure(
                f"Seed costs {self.balance.seed_cost} coins, have {state.coins}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        now = self._now(action)
        new_state = state.clone()
        garden = new_state.garden
        new_state.coins -= self.balance.seed_cost
        garden.is_planted = True
        garden.planted_at = now
        garden.last_watered = now
        garden.water_hours_remaining = self.balance.initial_water_hours
        return ActionResult.success_with_state(new_state, changes=["Planted the garden"], value=True)

    def _handle_buy_water(self, state: GameState, action: Action) -> ActionResult:
        hours = action.payload.hours
        if not state.garden.is_planted:
            return ActionResult.failure("Garden is not planted", ErrorCode.INVALID_STATE)
        if hours is None or hours <= 0:
            return ActionResult.failure(f"Invalid water amount: {hours}", ErrorCode.INVALID_STATE)
        cost = math.floor(hours / 24 * self.balance.water_cost_per_day)
        if state.coins < cost:
            return ActionResult.failure(
                f"Water costs {cost} coins, have {state.coins}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        now = self._now(action)
        new_state = state.clone()
        settle_garden(new_state, now, self.balance)
        new_state.coins -= cost
        new_state.garden.water_hours_remaining += hours
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Bought {hours:g} hours of water for {cost} coins"],
            value=True,
        )

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def _handle_upgrade_skill(self, state: GameState, action: Action) -> ActionResult:
        skill_id = action.payload.item_id
        if not skill_id:
            return ActionResult.failure("No skill given", ErrorCode.INVALID_REFERENCE)
        if state.progression.skill_points <= 0:
            return ActionResult.failure("No skill points available", ErrorCode.INSUFFICIENT_RESOURCES)
        if skill_id in state.progression.unlocked_skills:
            return ActionResult.failure(f"Skill {skill_id} already unlocked", ErrorCode.INVALID_STATE)

        new_state = state.clone()
        new_state.progression.skill_points -= 1
        new_state.progression.unlocked_skills.append(skill_id)
        return ActionResult.success_with_state(new_state, changes=[f"Unlocked skill {skill_id}"], value=True)

    def _handle_set_game_mode(self, state: GameState, action: Action) -> ActionResult:
        try:
            mode = GameMode(action.payload.mode)
        except ValueError:
            return ActionResult.failure(f"Unknown game mode: {action.payload.mode}", ErrorCode.INVALID_REFERENCE)

        new_state = state.clone()
        new_state.game_mode.current = mode
        if mode == GameMode.SURVIVAL:
            new_state.game_mode.survival_lives = new_state.game_mode.max_survival_lives
        apply_derived_stats(new_state, self.balance)
        return ActionResult.success_with_state(new_state, changes=[f"Game mode set to {mode.value}"])

    def _handle_prestige(self, state: GameState, action: Action) -> ActionResult:
        level = state.progression.level
        if level < self.balance.prestige_min_level:
            return ActionResult.failure(
                f"Prestige requires level {self.balance.prestige_min_level}, at {level}",
                ErrorCode.INVALID_STATE,
            )

        new_state = state.clone()
        progression = new_state.progression
        points = level // 10
        progression.prestige_level += 1
        progression.prestige_points += points
        progression.level = 1
        progression.experience = 0
        progression.experience_to_next = self.balance.first_level_xp
        progression.skill_points = 0
        progression.unlocked_skills = []

        new_state.zone = 1
        new_state.coins = self.balance.starting_coins
        new_state.gems = self.balance.starting_gems
        new_state.combat = CombatState()
        new_state.adventure.reset()
        apply_derived_stats(new_state, self.balance)
        new_state.stats.hp = new_state.stats.max_hp
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Prestiged to level {progression.prestige_level} (+{points} points)"],
            value=True,
        )

    def _handle_reset_game(self, state: GameState, action: Action) -> ActionResult:
        new_state = self.new_game(
            player_id=state.player_id,
            now=self._now(action),
            random_seed=state.random_seed,
        )
        return ActionResult.success_with_state(new_state, changes=["Game reset"])


def _merge_by_id(entries: list, entry) -> None:
    for index, existing in enumerate(entries):
        if existing.id == entry.id:
            entries[index] = entry
            return
    entries.append(entry)


def _item_type_of(action_type: ActionType) -> ItemType:
    if action_type in {ActionType.EQUIP_WEAPON, ActionType.UPGRADE_WEAPON, ActionType.SELL_WEAPON}:
        return ItemType.WEAPON
    return ItemType.ARMOR


def _parse_item_type(value: str | None) -> ItemType | None:
    try:
        return ItemType(value)
    except ValueError:
        return None


def _find_item(state: GameState, item_type: ItemType, item_id: str | None) -> Weapon | Armor | None:
    if item_type == ItemType.WEAPON:
        return state.inventory.get_weapon(item_id)
    return state.inventory.get_armor(item_id)


def apply_action(
    content: ContentProvider,
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(content=content, rng=rng or random.Random())
    return reducer.apply(state, action)
