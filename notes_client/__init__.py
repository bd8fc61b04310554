"""Notes client library.

An asyncio client for a passwordless notes service: a session store that
drives one-time-code and federated sign-in, and a collection store that keeps
the user's notes in sync with the remote service.

Public Interface:
    Modules:
    - config: Settings loading (YAML + environment)
    - storage: Paths and the token persistence adapter
    - remote: HTTP client for the service
    - sessions: Session store
    - notes: Collection store
    - app: NotesClient composition root
"""

from .app import NotesClient
from .errors import FormValidationError
from .models import CollectionState
from .models import Note
from .models import SessionState
from .models import SessionStatus
from .models import User
from .notes import CollectionStore
from .operations import OperationResult
from .remote import RemoteServiceError
from .remote import UnauthorizedError
from .sessions import SessionStore

__all__ = [
    "NotesClient",
    "SessionStore",
    "CollectionStore",
    "SessionState",
    "SessionStatus",
    "CollectionState",
    "User",
    "Note",
    "OperationResult",
    "FormValidationError",
    "RemoteServiceError",
    "UnauthorizedError",
]
