"""
Session - Player session lifecycle and save triggers.
"""

from .manager import Session, SessionManager, SessionState

__all__ = [
    "Session",
    "SessionManager",
    "SessionState",
]
