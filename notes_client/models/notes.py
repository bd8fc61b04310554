"""Note models and collection state."""

from datetime import datetime

from pydantic import Field

from .base import StateModel
from .base import WireModel


class Note(WireModel):
    """A note owned by the signed-in user.

    ``id``, ``created_at`` and ``owner_id`` are assigned by the server and
    never changed client-side.
    """

    id: int = Field(description="Server-assigned note identifier")
    title: str = Field(description="Note title")
    body: str = Field(alias="content", description="Note text")
    created_at: datetime = Field(description="Creation timestamp (server clock)")
    updated_at: datetime = Field(description="Last update timestamp (server clock)")
    owner_id: int = Field(alias="user_id", description="Owning user id")


class CollectionState(StateModel):
    """Collection store state.

    Ids missing from ``op_loading_by_note_id`` are not loading.
    """

    items: list[Note] = Field(default_factory=list, description="Notes, newest first")
    list_loading: bool = Field(default=False, description="List fetch in flight")
    create_loading: bool = Field(default=False, description="Create call in flight")
    op_loading_by_note_id: dict[int, bool] = Field(
        default_factory=dict, description="Update/delete in flight, per note id"
    )
    last_error: str | None = Field(default=None, description="Message from the most recent failed operation")

    def is_busy(self, note_id: int) -> bool:
        return self.op_loading_by_note_id.get(note_id, False)
