"""Composition root for notes_client.

Builds the token store, remote client and both stores from settings and
wires the cross-cutting signals:

- a 401 from any remote call tears the session down;
- a session teardown empties the notes collection.

Example:
    >>> async with NotesClient(load_config()) as client:
    ...     await client.start()
    ...     if client.session.state.is_authenticated:
    ...         await client.notes.list()
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from .config.loader import load_config
from .config.settings import ClientSettings
from .models.sessions import SessionState
from .notes.store import CollectionStore
from .remote.client import ApiClient
from .sessions.store import SessionStore
from .storage.paths import get_state_dir
from .storage.token_store import FileTokenStore
from .storage.token_store import TokenStore

logger = logging.getLogger(__name__)


class NotesClient:
    """Session and notes stores sharing one remote client and token store."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize and wire the components.

        Args:
            settings: Client settings (default: load_config())
            token_store: Token persistence (default: FileTokenStore in the state dir)
            transport: Optional httpx transport for the remote client
        """
        self.settings = settings or load_config()

        if token_store is None:
            state_dir = Path(self.settings.state_path) if self.settings.state_path else get_state_dir()
            token_store = FileTokenStore(state_dir / self.settings.token_file)
        self.token_store = token_store

        self.api = ApiClient(
            self.settings.api_base_url,
            self.token_store,
            timeout=self.settings.timeout_seconds,
            transport=transport,
        )
        self.session = SessionStore(self.api, self.token_store)
        self.notes = CollectionStore(self.api)

        self.api.add_unauthorized_listener(self.session.handle_unauthorized)
        self.session.add_teardown_listener(self.notes.reset)

    async def __aenter__(self) -> "NotesClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def start(self) -> SessionState:
        """Restore a persisted session, if any, by probing the current user."""
        if self.token_store.get() is not None:
            logger.info("Found a persisted session, validating it")
            await self.session.fetch_current_user()
        return self.session.state

    async def aclose(self) -> None:
        """Wait for dispatched operations, then release the HTTP client."""
        try:
            await self.session.drain()
            await self.notes.drain()
        finally:
            self.api.remove_unauthorized_listener(self.session.handle_unauthorized)
            await self.api.aclose()
