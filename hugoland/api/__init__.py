"""
API Module - HTTP interface for game clients.

A client:
1. Opens a session for a player (the save is loaded and reconciled)
2. Sends actions and receives the new state with each result
3. Saves explicitly or lets the session manager save periodically
4. Ends the session, which saves one last time
"""

from .schemas import (
    ActionName,
    ActionRequest,
    ActionResponse,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    SessionResponse,
)
from .service import APIService, build_action

__all__ = [
    "ActionName",
    "ActionRequest",
    "ActionResponse",
    "CreateSessionRequest",
    "ErrorCode",
    "ErrorResponse",
    "SessionResponse",
    "APIService",
    "build_action",
]
