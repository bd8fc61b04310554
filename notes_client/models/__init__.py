"""Models for notes_client."""

from .forms import FederatedSignInRequest
from .forms import LoginCodeRequest
from .forms import LoginVerification
from .forms import NoteChanges
from .forms import NoteDraft
from .forms import SignupCodeRequest
from .forms import SignupVerification
from .notes import CollectionState
from .notes import Note
from .sessions import AuthPayload
from .sessions import FederatedCredential
from .sessions import FederatedCredentialMissing
from .sessions import OtpPhase
from .sessions import SessionState
from .sessions import SessionStatus
from .sessions import User
from .sessions import parse_federated_callback

__all__ = [
    "AuthPayload",
    "CollectionState",
    "FederatedCredential",
    "FederatedCredentialMissing",
    "FederatedSignInRequest",
    "LoginCodeRequest",
    "LoginVerification",
    "Note",
    "NoteChanges",
    "NoteDraft",
    "OtpPhase",
    "SessionState",
    "SessionStatus",
    "SignupCodeRequest",
    "SignupVerification",
    "User",
    "parse_federated_callback",
]
