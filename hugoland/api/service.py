"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages sessions through the SessionManager
3. Formats responses

This layer is framework-agnostic; app.py only adds HTTP routing.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import TypeAdapter

from .. import __version__
from ..config import Settings
from ..engine_core.action import Action
from ..engine_core.engine import Engine
from ..engine_core.state import GameState
from ..session import Session, SessionManager
from ..store import StateStore
from ..store.snapshot import GAME_STATE_ADAPTER
from .schemas import (
    ActionName,
    ActionRequest,
    ActionResponse,
    DerivedStatsInfo,
    ErrorCode,
    ErrorResponse,
    SaveResponse,
    SessionResponse,
    SessionStatus,
)


logger = logging.getLogger(__name__)

_ANY = TypeAdapter(Any)


class ActionValidationError(ValueError):
    """An action request is missing a parameter its entry point needs."""


def _require(value, name: str):
    if value is None:
        raise ActionValidationError(f"'{name}' is required")
    return value


ActionBuilder = Callable[[ActionRequest, float], Action]

ACTION_BUILDERS: dict[ActionName, ActionBuilder] = {
    ActionName.EQUIP_WEAPON: lambda r, now: Action.equip_weapon(_require(r.item_id, "item_id")),
    ActionName.EQUIP_ARMOR: lambda r, now: Action.equip_armor(_require(r.item_id, "item_id")),
    ActionName.UPGRADE_WEAPON: lambda r, now: Action.upgrade_weapon(_require(r.item_id, "item_id")),
    ActionName.UPGRADE_ARMOR: lambda r, now: Action.upgrade_armor(_require(r.item_id, "item_id")),
    ActionName.SELL_WEAPON: lambda r, now: Action.sell_weapon(_require(r.item_id, "item_id")),
    ActionName.SELL_ARMOR: lambda r, now: Action.sell_armor(_require(r.item_id, "item_id")),
    ActionName.DISCARD_ITEM: lambda r, now: Action.discard_item(
        _require(r.item_id, "item_id"), _require(r.item_type, "item_type")),
    ActionName.BULK_SELL: lambda r, now: Action.bulk_sell(
        _require(r.item_ids, "item_ids"), _require(r.item_type, "item_type")),
    ActionName.BULK_UPGRADE: lambda r, now: Action.bulk_upgrade(
        _require(r.item_ids, "item_ids"), _require(r.item_type, "item_type")),
    ActionName.OPEN_CHEST: lambda r, now: Action.open_chest(_require(r.cost, "cost")),
    ActionName.PURCHASE_MYTHICAL: lambda r, now: Action.purchase_mythical(_require(r.cost, "cost")),
    ActionName.PURCHASE_RELIC: lambda r, now: Action.purchase_relic(_require(r.item_id, "item_id")),
    ActionName.EQUIP_RELIC: lambda r, now: Action.equip_relic(_require(r.item_id, "item_id")),
    ActionName.UNEQUIP_RELIC: lambda r, now: Action.unequip_relic(_require(r.item_id, "item_id")),
    ActionName.UPGRADE_RELIC: lambda r, now: Action.upgrade_relic(_require(r.item_id, "item_id")),
    ActionName.SELL_RELIC: lambda r, now: Action.sell_relic(_require(r.item_id, "item_id")),
    ActionName.BEGIN_ENCOUNTER: lambda r, now: Action.begin_encounter(),
    ActionName.ANSWER: lambda r, now: Action.answer(_require(r.correct, "correct"), r.category),
    ActionName.SELECT_ADVENTURE_SKILL: lambda r, now: Action.select_adventure_skill(
        _require(r.item_id, "item_id")),
    ActionName.SKIP_ADVENTURE_SKILLS: lambda r, now: Action.skip_adventure_skills(),
    ActionName.USE_SKIP_CARD: lambda r, now: Action.use_skip_card(r.category),
    ActionName.MINE_GEM: lambda r, now: Action.mine_gem(_require(r.x, "x"), _require(r.y, "y")),
    ActionName.EXCHANGE_SHINY_GEMS: lambda r, now: Action.exchange_shiny_gems(_require(r.amount, "amount")),
    ActionName.ROLL_BUFF: lambda r, now: Action.roll_buff(now),
    ActionName.CLAIM_DAILY_REWARD: lambda r, now: Action.claim_daily_reward(now),
    ActionName.CLAIM_OFFLINE_REWARDS: lambda r, now: Action.claim_offline_rewards(),
    ActionName.PLANT_SEED: lambda r, now: Action.plant_seed(now),
    ActionName.BUY_WATER: lambda r, now: Action.buy_water(_require(r.hours, "hours"), now),
    ActionName.UPGRADE_SKILL: lambda r, now: Action.upgrade_skill(_require(r.item_id, "item_id")),
    ActionName.SET_GAME_MODE: lambda r, now: Action.set_game_mode(_require(r.mode, "mode")),
    ActionName.PRESTIGE: lambda r, now: Action.prestige(),
    ActionName.RESET_GAME: lambda r, now: Action.reset_game(now),
}


def build_action(request: ActionRequest, now: float) -> Action:
    """
    Translate a request into an engine Action.

    Raises KeyError for unknown action names and ActionValidationError
    for missing parameters.
    """
    try:
        name = ActionName(request.action)
    except ValueError:
        raise KeyError(request.action) from None
    action = ACTION_BUILDERS[name](request, now)
    action.timestamp = now
    return action


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService.from_settings(Settings.from_env())
        session = service.create_session("alice")
        response = service.apply_action(session.session_id, ActionRequest(action="mine_gem", x=0, y=0))
    """
    session_manager: SessionManager

    @classmethod
    def from_settings(cls, settings: Settings, engine: Engine | None = None) -> APIService:
        engine = engine or Engine()
        store = StateStore(
            settings.save_dir,
            default_factory=lambda player_id: engine.new_game(player_id=player_id),
        )
        return cls(session_manager=SessionManager(engine=engine, store=store))

    @property
    def clock(self) -> Callable[[], float]:
        return self.session_manager.clock

    def create_session(self, player_id: str) -> SessionResponse:
        session = self.session_manager.open_session(player_id)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def apply_action(self, session_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)

        try:
            action = build_action(request, self.clock())
        except KeyError:
            return ErrorResponse(
                error=f"Unknown action: {request.action}",
                error_code=ErrorCode.UNKNOWN_ACTION,
                details={"known_actions": [name.value for name in ActionName]},
            )
        except ActionValidationError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"action": request.action},
            )

        result = self.session_manager.apply(session_id, action)
        state = session.game_state
        return ActionResponse(
            success=result.success,
            action=request.action,
            value=_ANY.dump_python(result.value, mode="json") if result.success else None,
            error=result.error,
            error_code=result.error_code.value if result.error_code else None,
            state_changes=result.state_changes,
            stats=_stats_info(state),
            state=GAME_STATE_ADAPTER.dump_python(state, mode="json"),
        )

    def save_session(self, session_id: str) -> SaveResponse | ErrorResponse:
        if not self.session_manager.save_session(session_id):
            return self._not_found(session_id)
        session = self.session_manager.get_session(session_id)
        return SaveResponse(success=True, session_id=session_id, saved_at=session.last_saved_at)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def health(self) -> dict[str, str]:
        return {"status": "healthy", "service": "hugoland-engine", "version": __version__}

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            player_id=session.player_id,
            status=SessionStatus(session.state.value),
            created_at=session.created_at,
            last_saved_at=session.last_saved_at,
            stats=_stats_info(session.game_state),
            state=GAME_STATE_ADAPTER.dump_python(session.game_state, mode="json"),
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )


def _stats_info(state: GameState) -> DerivedStatsInfo:
    return DerivedStatsInfo(
        attack=state.stats.attack,
        defense=state.stats.defense,
        max_hp=state.stats.max_hp,
        hp=state.stats.hp,
    )
