"""Session management for notes_client."""

from notes_client.models.sessions import OtpPhase
from notes_client.models.sessions import SessionState
from notes_client.models.sessions import SessionStatus
from notes_client.models.sessions import User

from .store import SessionStore

__all__ = [
    "SessionStore",
    "SessionState",
    "SessionStatus",
    "OtpPhase",
    "User",
]
