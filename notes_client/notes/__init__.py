"""Notes collection for notes_client."""

from notes_client.models.notes import CollectionState
from notes_client.models.notes import Note

from .store import CollectionStore

__all__ = [
    "CollectionStore",
    "CollectionState",
    "Note",
]
