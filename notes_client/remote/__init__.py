"""Remote service client for notes_client.

Public Interface:
    - ApiClient: Async HTTP client for the auth and notes endpoints
    - RemoteServiceError: Any failed remote call
    - UnauthorizedError: HTTP 401 (session token rejected)
"""

from .client import ApiClient
from .errors import RemoteServiceError
from .errors import UnauthorizedError

__all__ = [
    "ApiClient",
    "RemoteServiceError",
    "UnauthorizedError",
]
