"""
Session Manager - Opens, drives and closes player sessions.

LIFECYCLE:
1. open_session(player_id) loads the snapshot (or starts a new game)
   and runs idle reconciliation once, at load time
2. apply() runs actions through the engine; successful results replace
   the session's state, failures leave it untouched
3. save_due_sessions() is the periodic save trigger; save_session() is
   the explicit one
4. end_session() saves and forgets the session

The engine never calls the store. Only this layer does.
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable

from ..engine_core.action import Action, ActionResult
from ..engine_core.engine import Engine
from ..engine_core.state import GameState
from ..store import StateStore


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a player session."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Session:
    """
    One player's open game.

    Contains:
    - The canonical GameState for the player
    - Save bookkeeping for the periodic trigger
    """
    session_id: str
    player_id: str
    created_at: float
    game_state: GameState
    state: SessionState = SessionState.ACTIVE
    last_saved_at: float | None = None
    dirty: bool = False
    actions_applied: int = 0
    recent_changes: list[str] = field(default_factory=list)

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE


class SessionManager:
    """
    Manages player sessions.

    Responsibilities:
    - Load and reconcile state on open
    - Route actions to the engine
    - Decide when to persist
    """

    def __init__(
        self,
        engine: Engine,
        store: StateStore,
        clock: Callable[[], float] = time.time,
        autosave_seconds: float = 30.0,
    ):
        self.engine = engine
        self.store = store
        self.clock = clock
        self.autosave_seconds = autosave_seconds
        self._sessions: dict[str, Session] = {}

    def open_session(self, player_id: str = "player") -> Session:
        """Load (or create) the player's state, reconcile it and open a session."""
        now = self.clock()
        state = self.store.load(player_id)
        if state is None:
            logger.info("No save for %s, starting a new game", player_id)
            state = self.engine.new_game(player_id=player_id, now=now)
        else:
            state = self.engine.reconcile(state, now)

        session = Session(
            session_id=str(uuid.uuid4()),
            player_id=player_id,
            created_at=now,
            game_state=state,
            dirty=True,
        )
        self._sessions[session.session_id] = session
        logger.info("Opened session %s for %s", session.session_id, player_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def apply(self, session_id: str, action: Action) -> ActionResult | None:
        """Apply an action to a session's state. None if the session is unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        if action.timestamp is None:
            action = replace(action, timestamp=self.clock())
        result = self.engine.apply(session.game_state, action)
        if result.success:
            session.game_state = result.new_state
            session.dirty = True
            session.actions_applied += 1
            session.recent_changes = list(result.state_changes)
        return result

    def save_session(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        self._save(session)
        return True

    def save_due_sessions(self) -> list[str]:
        """Save every dirty session whose last save is older than the autosave interval."""
        now = self.clock()
        saved = []
        for session in self._sessions.values():
            if not session.dirty:
                continue
            if session.last_saved_at is None or now - session.last_saved_at >= self.autosave_seconds:
                self._save(session)
                saved.append(session.session_id)
        return saved

    def end_session(self, session_id: str) -> bool:
        """Save and close a session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self._save(session)
        session.state = SessionState.ENDED
        logger.info("Ended session %s for %s", session_id, session.player_id)
        return True

    def list_active_sessions(self) -> list[str]:
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def _save(self, session: Session) -> None:
        now = self.clock()
        # Offline accrual counts from the last save
        state = session.game_state.clone()
        state.offline.last_save_time = now
        session.game_state = state
        self.store.save(state)
        session.last_saved_at = now
        session.dirty = False
