"""Settings models for notes_client.

This module defines the configuration structure for the client: where the
remote service lives, how long to wait for it, and where the session is kept.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ClientSettings(BaseSettings):
    """Configuration for the notes client.

    Attributes:
        api_base_url: Base URL of the remote service (default: http://localhost:5000/api)
        timeout_seconds: Bounded wait per request before it counts as failed (default: 10)
        log_level: Logging level (default: info)
        token_file: File name of the persisted session inside the state dir
        state_path: Optional explicit state directory (default: $NOTES_CLIENT_HOME/state)

    Example:
        >>> settings = ClientSettings()
        >>> assert settings.api_base_url == "http://localhost:5000/api"
        >>> assert settings.timeout_seconds == 10.0
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTES_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = "http://localhost:5000/api"
    timeout_seconds: float = 10.0
    log_level: str = "info"
    token_file: str = "session.json"
    state_path: str | None = None

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def require_positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v

    @field_validator("state_path")
    @classmethod
    def expand_and_resolve_path(cls, v: str | None) -> str | None:
        """Expand ~ and resolve to absolute path.

        Args:
            v: Path string (may contain ~ or be relative)

        Returns:
            Absolute path as string, or None to use the default state dir
        """
        if v is None:
            return None
        return str(Path(v).expanduser().resolve())
