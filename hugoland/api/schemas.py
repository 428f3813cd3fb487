"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client and the engine.
Game state is returned as the JSON form of the save snapshot.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- UNKNOWN_ACTION: Action name is not one of the engine's entry points
- VALIDATION_ERROR: Action parameters are missing or malformed
- INTERNAL_ERROR: Unexpected server failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ActionName(str, Enum):
    """Entry points reachable through the generic action endpoint."""
    EQUIP_WEAPON = "equip_weapon"
    EQUIP_ARMOR = "equip_armor"
    UPGRADE_WEAPON = "upgrade_weapon"
    UPGRADE_ARMOR = "upgrade_armor"
    SELL_WEAPON = "sell_weapon"
    SELL_ARMOR = "sell_armor"
    DISCARD_ITEM = "discard_item"
    BULK_SELL = "bulk_sell"
    BULK_UPGRADE = "bulk_upgrade"
    OPEN_CHEST = "open_chest"
    PURCHASE_MYTHICAL = "purchase_mythical"
    PURCHASE_RELIC = "purchase_relic"
    EQUIP_RELIC = "equip_relic"
    UNEQUIP_RELIC = "unequip_relic"
    UPGRADE_RELIC = "upgrade_relic"
    SELL_RELIC = "sell_relic"
    BEGIN_ENCOUNTER = "begin_encounter"
    ANSWER = "answer"
    SELECT_ADVENTURE_SKILL = "select_adventure_skill"
    SKIP_ADVENTURE_SKILLS = "skip_adventure_skills"
    USE_SKIP_CARD = "use_skip_card"
    MINE_GEM = "mine_gem"
    EXCHANGE_SHINY_GEMS = "exchange_shiny_gems"
    ROLL_BUFF = "roll_buff"
    CLAIM_DAILY_REWARD = "claim_daily_reward"
    CLAIM_OFFLINE_REWARDS = "claim_offline_rewards"
    PLANT_SEED = "plant_seed"
    BUY_WATER = "buy_water"
    UPGRADE_SKILL = "upgrade_skill"
    SET_GAME_MODE = "set_game_mode"
    PRESTIGE = "prestige"
    RESET_GAME = "reset_game"


# =============================================================================
# Shared Models
# =============================================================================

class DerivedStatsInfo(BaseModel):
    """Resolved combat stats."""
    attack: int
    defense: int
    max_hp: int
    hp: int


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to open a session for a player."""
    player_id: str = Field(
        "player",
        min_length=1,
        max_length=64,
        description="Player whose save should be loaded or created",
    )


class ActionRequest(BaseModel):
    """
    Generic action request.

    Only the fields the named action needs are read; the rest are ignored.
    """
    action: str = Field(..., description="Entry point name, e.g. 'open_chest'")
    item_id: Optional[str] = Field(None, description="Weapon, armor, relic or skill id")
    item_type: Optional[str] = Field(None, description="'weapon' or 'armor'")
    item_ids: Optional[list[str]] = Field(None, description="Ids for bulk operations")
    cost: Optional[int] = Field(None, ge=0, description="Coin cost for chests and mythical items")
    amount: Optional[int] = Field(None, description="Shiny gems to exchange")
    hours: Optional[float] = Field(None, description="Water hours to buy")
    correct: Optional[bool] = Field(None, description="Whether the question was answered correctly")
    category: Optional[str] = Field(None, description="Question category for accuracy stats")
    x: Optional[int] = Field(None, description="Mining grid column")
    y: Optional[int] = Field(None, description="Mining grid row")
    mode: Optional[str] = Field(None, description="normal, blitz, bloodlust or survival")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Session status with the full player state."""
    session_id: str
    player_id: str
    status: SessionStatus
    created_at: float
    last_saved_at: Optional[float] = None
    stats: DerivedStatsInfo
    state: dict[str, Any] = Field(..., description="Snapshot form of the player state")
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """
    Result of an action.

    Engine-level failures (not enough coins, unknown item id, wrong
    phase) come back here with success=false and HTTP 200.
    """
    success: bool
    action: str
    value: Any = Field(None, description="Typed result of the entry point, when it has one")
    error: Optional[str] = None
    error_code: Optional[str] = None
    state_changes: list[str] = Field(default_factory=list)
    stats: DerivedStatsInfo
    state: dict[str, Any]
    api_version: str = "v1"


class SaveResponse(BaseModel):
    success: bool
    session_id: str
    saved_at: Optional[float] = None


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
