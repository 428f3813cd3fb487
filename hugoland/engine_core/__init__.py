"""
Engine Core - Deterministic player state management.

The engine is the runtime that:
1. Holds GameState as an explicitly passed value
2. Resolves derived stats from every modifier source
3. Applies actions via the reducer
4. Runs encounters and loot rolls
5. Reconciles time that passed while offline

The Engine facade lives in hugoland.engine_core.engine.
"""

from .state import (
    GameState,
    Weapon,
    Armor,
    Relic,
    Enemy,
    Rarity,
    RelicSlot,
    GameMode,
    CombatPhase,
    BuffType,
    AdventureSkillType,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .attributes import DerivedStats, resolve, apply_derived_stats
from .loot import RewardOutcome, select_rarity, open_reward
from .combat import CombatEngine, AnswerOutcome, VictoryRewards
from .reconciler import Reconciler, reconcile
from .reducer import Reducer, MiningYield, apply_action

__all__ = [
    "GameState",
    "Weapon",
    "Armor",
    "Relic",
    "Enemy",
    "Rarity",
    "RelicSlot",
    "GameMode",
    "CombatPhase",
    "BuffType",
    "AdventureSkillType",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "DerivedStats",
    "resolve",
    "apply_derived_stats",
    "RewardOutcome",
    "select_rarity",
    "open_reward",
    "CombatEngine",
    "AnswerOutcome",
    "VictoryRewards",
    "Reconciler",
    "reconcile",
    "Reducer",
    "MiningYield",
    "apply_action",
]
