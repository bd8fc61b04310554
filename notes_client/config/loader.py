"""Configuration loading for notes_client.

This module handles loading client configuration from YAML files
and environment variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: ClientSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import ClientSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "NOTES_CLIENT_"

DEFAULT_CONFIG = """# notes_client configuration

# Remote service
api_base_url: "http://localhost:5000/api"
timeout_seconds: 10

log_level: "info"

# Persisted session file name, relative to the state directory
token_file: "session.json"

# State directory
# Default: $NOTES_CLIENT_HOME/state
# Can be overridden with NOTES_CLIENT_STATE_PATH environment variable
# state_path: "~/.notes_client/state"
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to client.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "client.yaml"
    """
    return get_config_dir() / "client.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> ClientSettings:
    """Load client configuration from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with NOTES_CLIENT_ (e.g., NOTES_CLIENT_API_BASE_URL).

    Args:
        config_path: Optional config file path (default: client.yaml in config dir)

    Returns:
        Validated client settings

    Example:
        >>> settings = load_config()
        >>> assert isinstance(settings, ClientSettings)
    """
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            create_default_config()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")

    if not isinstance(yaml_settings, dict):
        logger.warning(f"Ignoring config {config_path}: expected a mapping at top level")
        yaml_settings = {}

    # defaults < YAML < env vars: drop YAML keys that an env var already sets
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"{ENV_PREFIX}{str(key).upper()}"
        if env_key not in os.environ:
            filtered_yaml[key] = value

    settings = ClientSettings(**filtered_yaml)

    logger.info(
        f"Client configuration loaded: api_base_url={settings.api_base_url}, "
        f"timeout={settings.timeout_seconds}s, log_level={settings.log_level}"
    )

    return settings
