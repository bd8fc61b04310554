"""Errors raised by the remote service client."""


class RemoteServiceError(Exception):
    """Raised when a remote call fails.

    Attributes:
        message: Server-provided message, if the response carried one
        status_code: HTTP status, or None for timeouts and transport failures
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message or f"Remote call failed (status {status_code})")


class UnauthorizedError(RemoteServiceError):
    """Raised when the remote service rejects the session token (HTTP 401)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, status_code=401)
