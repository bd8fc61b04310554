"""Path resolution for notes_client storage locations.

This module provides path resolution based on NOTES_CLIENT_HOME environment variable,
following XDG-like directory structure within that root.

Contract:
- Inputs: Environment variables (NOTES_CLIENT_HOME and per-directory overrides)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Get NOTES_CLIENT_HOME from environment.

    Returns:
        Path to root directory (default: .notes_client)
    """
    root = os.environ.get("NOTES_CLIENT_HOME", ".notes_client")
    return Path(root).resolve()


def _resolve_dir(default: Path, env_var: str) -> Path:
    directory = default

    env_override: str | None = os.environ.get(env_var)
    if env_override is not None:
        directory = Path(env_override).resolve()

    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($NOTES_CLIENT_HOME/config)
    """
    return _resolve_dir(get_home_dir() / "config", "NOTES_CLIENT_CONFIG_DIR")


def get_state_dir() -> Path:
    """Get state directory holding the persisted session.

    Returns:
        Path to state directory ($NOTES_CLIENT_HOME/state)

    Environment Variables:
        NOTES_CLIENT_STATE_DIR: Override state directory location
        (falls back to $NOTES_CLIENT_HOME/state if not set)

    Example:
        >>> state_dir = get_state_dir()
        >>> assert state_dir.name == "state" or "NOTES_CLIENT_STATE_DIR" in os.environ
    """
    return _resolve_dir(get_home_dir() / "state", "NOTES_CLIENT_STATE_DIR")
