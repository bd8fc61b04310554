"""Configuration module for notes_client.

Provides client configuration loading from YAML and environment variables.

Public Interface:
    - ClientSettings: Settings model
    - load_config: Load configuration
    - create_default_config: Create default config file
    - get_config_path: Get config file path
"""

from .loader import create_default_config
from .loader import get_config_path
from .loader import load_config
from .settings import ClientSettings

__all__ = [
    "ClientSettings",
    "load_config",
    "create_default_config",
    "get_config_path",
]
