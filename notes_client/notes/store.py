"""Collection store: the signed-in user's notes.

A CRUD cache keyed by note id. Local state changes only after the remote
service confirms a mutation, then the confirmed note is applied by id.
Update and delete track in-flight state per note id so one slow call never
blocks interaction with other notes.
"""

from __future__ import annotations

import logging
from collections.abc import Coroutine
from typing import Any

from ..errors import validate_form
from ..models.forms import NoteChanges
from ..models.forms import NoteDraft
from ..models.notes import CollectionState
from ..models.notes import Note
from ..operations import OperationResult
from ..operations import Store
from ..remote.client import ApiClient
from ..remote.errors import RemoteServiceError

logger = logging.getLogger(__name__)

LIST_OP = "list"
CREATE_OP = "create"


class CollectionStore(Store[CollectionState]):
    """Owns the notes collection and its loading flags."""

    def __init__(self, api: ApiClient) -> None:
        super().__init__(CollectionState())
        self.api = api

    async def list(self) -> OperationResult[list[Note]]:
        """Replace the collection with the server's notes (no merge)."""
        self._pending.begin(LIST_OP)
        self._state.list_loading = True
        self._state.last_error = None
        self._publish()
        try:
            notes = await self.api.list_notes()
        except RemoteServiceError as e:
            return self._record_failure(e, "Failed to fetch notes")
        else:
            self._state.items = notes
            logger.debug(f"Loaded {len(notes)} notes")
            return OperationResult.success(notes)
        finally:
            self._state.list_loading = self._pending.end(LIST_OP)
            self._publish()

    def create(self, title: str, body: str) -> Coroutine[Any, Any, OperationResult[Note]]:
        """Validate a draft and return the coroutine that creates it.

        Awaiting the coroutine creates the note and prepends the server's copy.

        Raises:
            FormValidationError: Title shorter than 3 or body shorter than 10
                characters (after trimming), raised at call time; nothing is
                sent in that case.
        """
        draft = validate_form(NoteDraft, title=title, body=body)
        return self._create(draft)

    async def _create(self, draft: NoteDraft) -> OperationResult[Note]:
        self._pending.begin(CREATE_OP)
        self._state.create_loading = True
        self._state.last_error = None
        self._publish()
        try:
            note = await self.api.create_note(draft)
        except RemoteServiceError as e:
            return self._record_failure(e, "Failed to create note")
        else:
            self._state.items = [note, *self._state.items]
            logger.info(f"Created note {note.id}")
            return OperationResult.success(note)
        finally:
            self._state.create_loading = self._pending.end(CREATE_OP)
            self._publish()

    def update(
        self, note_id: int, title: str | None = None, body: str | None = None
    ) -> Coroutine[Any, Any, OperationResult[Note]]:
        """Return the coroutine that updates a note and replaces it by id.

        If the id is no longer in the collection the confirmed note is dropped.
        """
        changes = validate_form(NoteChanges, title=title, body=body)
        return self._update(note_id, changes)

    async def _update(self, note_id: int, changes: NoteChanges) -> OperationResult[Note]:
        self._mark_busy(note_id)
        try:
            note = await self.api.update_note(note_id, changes)
        except RemoteServiceError as e:
            return self._record_failure(e, "Failed to update note")
        else:
            self._state.items = [note if item.id == note_id else item for item in self._state.items]
            logger.info(f"Updated note {note_id}")
            return OperationResult.success(note)
        finally:
            self._settle(note_id)

    async def delete(self, note_id: int) -> OperationResult[None]:
        """Delete a note and filter it out of the collection by id."""
        self._mark_busy(note_id)
        try:
            await self.api.delete_note(note_id)
        except RemoteServiceError as e:
            return self._record_failure(e, "Failed to delete note")
        else:
            self._state.items = [item for item in self._state.items if item.id != note_id]
            logger.info(f"Deleted note {note_id}")
            return OperationResult.success()
        finally:
            self._settle(note_id, forget=True)

    def is_busy(self, note_id: int) -> bool:
        return self._state.is_busy(note_id)

    def clear_error(self) -> None:
        self._state.last_error = None
        self._publish()

    def reset(self) -> None:
        """Empty the collection, e.g. after sign-out."""
        self._state.items = []
        self._state.last_error = None
        self._publish()

    def _mark_busy(self, note_id: int) -> None:
        self._pending.begin(note_id)
        self._state.op_loading_by_note_id[note_id] = True
        self._state.last_error = None
        self._publish()

    def _settle(self, note_id: int, forget: bool = False) -> None:
        still_busy = self._pending.end(note_id)
        if forget and not still_busy and not any(item.id == note_id for item in self._state.items):
            self._state.op_loading_by_note_id.pop(note_id, None)
        else:
            self._state.op_loading_by_note_id[note_id] = still_busy
        self._publish()
