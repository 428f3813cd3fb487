"""
Action System - Actions, payloads, and results.

Actions represent:
1. Economy actions (equip, upgrade, sell, chests, relics, garden)
2. Combat actions (begin encounter, answer, skill selection)
3. Timed actions that need the clock (buff roll, daily claim, watering)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Equipment
    EQUIP_WEAPON = "equip_weapon"
    EQUIP_ARMOR = "equip_armor"
    UPGRADE_WEAPON = "upgrade_weapon"
    UPGRADE_ARMOR = "upgrade_armor"
    SELL_WEAPON = "sell_weapon"
    SELL_ARMOR = "sell_armor"
    DISCARD_ITEM = "discard_item"
    BULK_SELL = "bulk_sell"
    BULK_UPGRADE = "bulk_upgrade"

    # Shops
    OPEN_CHEST = "open_chest"
    PURCHASE_MYTHICAL = "purchase_mythical"
    PURCHASE_RELIC = "purchase_relic"

    # Relics
    EQUIP_RELIC = "equip_relic"
    UNEQUIP_RELIC = "unequip_relic"
    UPGRADE_RELIC = "upgrade_relic"
    SELL_RELIC = "sell_relic"

    # Combat
    BEGIN_ENCOUNTER = "begin_encounter"
    ANSWER = "answer"
    SELECT_ADVENTURE_SKILL = "select_adventure_skill"
    SKIP_ADVENTURE_SKILLS = "skip_adventure_skills"
    USE_SKIP_CARD = "use_skip_card"

    # Mining
    MINE_GEM = "mine_gem"
    EXCHANGE_SHINY_GEMS = "exchange_shiny_gems"

    # Timed systems
    ROLL_BUFF = "roll_buff"
    CLAIM_DAILY_REWARD = "claim_daily_reward"
    CLAIM_OFFLINE_REWARDS = "claim_offline_rewards"
    PLANT_SEED = "plant_seed"
    BUY_WATER = "buy_water"

    # Progression
    UPGRADE_SKILL = "upgrade_skill"
    SET_GAME_MODE = "set_game_mode"
    PRESTIGE = "prestige"
    RESET_GAME = "reset_game"


class ErrorCode(str, Enum):
    """Failure categories reported by the reducer."""
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    INVALID_STATE = "INVALID_STATE"
    HANDLER_ERROR = "HANDLER_ERROR"
    NO_HANDLER = "NO_HANDLER"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types have different payload shapes.
    This is a generic container; validation happens in the reducer.
    """
    # Single item references (weapon, armor, relic, skill)
    item_id: str | None = None
    item_type: str | None = None  # "weapon" | "armor"

    # Bulk operations
    item_ids: list[str] | None = None

    # Amounts
    cost: int | None = None
    amount: int | None = None
    hours: float | None = None

    # Combat
    correct: bool | None = None
    category: str | None = None

    # Mining grid coordinate
    coord: tuple[int, int] | None = None

    # Game mode name
    mode: str | None = None

    # Clock reading for timed actions
    now: float | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: float | None = None

    @classmethod
    def equip_weapon(cls, weapon_id: str) -> Action:
        return cls(ActionType.EQUIP_WEAPON, ActionPayload(item_id=weapon_id))

    @classmethod
    def equip_armor(cls, armor_id: str) -> Action:
        return cls(ActionType.EQUIP_ARMOR, ActionPayload(item_id=armor_id))

    @classmethod
    def upgrade_weapon(cls, weapon_id: str) -> Action:
        return cls(ActionType.UPGRADE_WEAPON, ActionPayload(item_id=weapon_id))

    @classmethod
    def upgrade_armor(cls, armor_id: str) -> Action:
        return cls(ActionType.UPGRADE_ARMOR, ActionPayload(item_id=armor_id))

    @classmethod
    def sell_weapon(cls, weapon_id: str) -> Action:
        return cls(ActionType.SELL_WEAPON, ActionPayload(item_id=weapon_id))

    @classmethod
    def sell_armor(cls, armor_id: str) -> Action:
        return cls(ActionType.SELL_ARMOR, ActionPayload(item_id=armor_id))

    @classmethod
    def discard_item(cls, item_id: str, item_type: str) -> Action:
        """Factory for discarding an unequipped item without payment."""
        return cls(
            ActionType.DISCARD_ITEM,
            ActionPayload(item_id=item_id, item_type=item_type),
        )

    @classmethod
    def bulk_sell(cls, item_ids: list[str], item_type: str) -> Action:
        return cls(
            ActionType.BULK_SELL,
            ActionPayload(item_ids=list(item_ids), item_type=item_type),
        )

    @classmethod
    def bulk_upgrade(cls, item_ids: list[str], item_type: str) -> Action:
        return cls(
            ActionType.BULK_UPGRADE,
            ActionPayload(item_ids=list(item_ids), item_type=item_type),
        )

    @classmethod
    def open_chest(cls, cost: int) -> Action:
        """Factory for opening a chest; the result value is a RewardOutcome."""
        return cls(ActionType.OPEN_CHEST, ActionPayload(cost=cost))

    @classmethod
    def purchase_mythical(cls, cost: int) -> Action:
        return cls(ActionType.PURCHASE_MYTHICAL, ActionPayload(cost=cost))

    @classmethod
    def purchase_relic(cls, relic_id: str) -> Action:
        return cls(ActionType.PURCHASE_RELIC, ActionPayload(item_id=relic_id))

    @classmethod
    def equip_relic(cls, relic_id: str) -> Action:
        return cls(ActionType.EQUIP_RELIC, ActionPayload(item_id=relic_id))

    @classmethod
    def unequip_relic(cls, relic_id: str) -> Action:
        return cls(ActionType.UNEQUIP_RELIC, ActionPayload(item_id=relic_id))

    @classmethod
    def upgrade_relic(cls, relic_id: str) -> Action:
        return cls(ActionType.UPGRADE_RELIC, ActionPayload(item_id=relic_id))

    @classmethod
    def sell_relic(cls, relic_id: str) -> Action:
        return cls(ActionType.SELL_RELIC, ActionPayload(item_id=relic_id))

    @classmethod
    def begin_encounter(cls) -> Action:
        return cls(ActionType.BEGIN_ENCOUNTER)

    @classmethod
    def answer(cls, correct: bool, category: str | None = None) -> Action:
        """Factory for answering the current question."""
        return cls(
            ActionType.ANSWER,
            ActionPayload(correct=correct, category=category),
        )

    @classmethod
    def select_adventure_skill(cls, skill_id: str) -> Action:
        return cls(ActionType.SELECT_ADVENTURE_SKILL, ActionPayload(item_id=skill_id))

    @classmethod
    def skip_adventure_skills(cls) -> Action:
        return cls(ActionType.SKIP_ADVENTURE_SKILLS)

    @classmethod
    def use_skip_card(cls, category: str | None = None) -> Action:
        return cls(ActionType.USE_SKIP_CARD, ActionPayload(category=category))

    @classmethod
    def mine_gem(cls, x: int, y: int) -> Action:
        return cls(ActionType.MINE_GEM, ActionPayload(coord=(x, y)))

    @classmethod
    def exchange_shiny_gems(cls, amount: int) -> Action:
        return cls(ActionType.EXCHANGE_SHINY_GEMS, ActionPayload(amount=amount))

    @classmethod
    def roll_buff(cls, now: float) -> Action:
        return cls(ActionType.ROLL_BUFF, ActionPayload(now=now))

    @classmethod
    def claim_daily_reward(cls, now: float) -> Action:
        return cls(ActionType.CLAIM_DAILY_REWARD, ActionPayload(now=now))

    @classmethod
    def claim_offline_rewards(cls) -> Action:
        return cls(ActionType.CLAIM_OFFLINE_REWARDS)

    @classmethod
    def plant_seed(cls, now: float) -> Action:
        return cls(ActionType.PLANT_SEED, ActionPayload(now=now))

    @classmethod
    def buy_water(cls, hours: float, now: float) -> Action:
        return cls(ActionType.BUY_WATER, ActionPayload(hours=hours, now=now))

    @classmethod
    def upgrade_skill(cls, skill_id: str) -> Action:
        return cls(ActionType.UPGRADE_SKILL, ActionPayload(item_id=skill_id))

    @classmethod
    def set_game_mode(cls, mode: str) -> Action:
        return cls(ActionType.SET_GAME_MODE, ActionPayload(mode=mode))

    @classmethod
    def prestige(cls) -> Action:
        return cls(ActionType.PRESTIGE)

    @classmethod
    def reset_game(cls, now: float | None = None) -> Action:
        return cls(ActionType.RESET_GAME, ActionPayload(now=now))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (the original state on failure)
    - Typed value for entry points that return one
    - Errors (if failed)
    - Human-readable changes for the presentation layer
    """
    success: bool
    new_state: Any | None = None  # GameState
    value: Any | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result. The state, if given, is passed through unchanged."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        value: Any | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            value=value,
            state_changes=changes or [],
        )
