"""Persistence adapter for the session token.

The session token is the only durable piece of client state. It is kept
behind a tiny get/set/clear interface so the session store owns the single
write path and the remote client owns the single read path.

Contract:
- Inputs: Opaque token strings
- Outputs: The last persisted token, or None when logged out
- Side Effects: FileTokenStore writes a JSON file atomically (tmp + rename)
"""

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class TokenStore(Protocol):
    """Durable key/value store for the session token."""

    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Token store that lives as long as the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Token store backed by a JSON file.

    The file holds a single object ``{"token": "..."}``. A missing file, a
    missing key or an unreadable file all mean "logged out".
    """

    def __init__(self, path: Path) -> None:
        """Initialize with the file location.

        Args:
            path: Path to the JSON file (parent directory is created on write)
        """
        self.path = Path(path)

    def get(self) -> str | None:
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None

        token = data.get(TOKEN_KEY) if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps({TOKEN_KEY: token}), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug(f"Persisted session token to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Removed persisted session token {self.path}")
