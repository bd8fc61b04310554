"""Storage module for notes_client.

Provides path resolution and the token persistence adapter.

Public Interface:
    - TokenStore: Persistence adapter protocol (get/set/clear)
    - MemoryTokenStore: In-process token store
    - FileTokenStore: JSON file token store with atomic writes
    - get_home_dir: Get NOTES_CLIENT_HOME
    - get_config_dir: Get config directory
    - get_state_dir: Get state directory
"""

from .paths import get_config_dir
from .paths import get_home_dir
from .paths import get_state_dir
from .token_store import FileTokenStore
from .token_store import MemoryTokenStore
from .token_store import TokenStore

__all__ = [
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
    "get_home_dir",
    "get_config_dir",
    "get_state_dir",
]
