"""HTTP client for the notes service.

Contract:
- Inputs: Validated form models, note ids
- Outputs: Parsed pydantic models (User, AuthPayload, Note)
- Side Effects: HTTP requests; every request carries the bearer token read
  from the token store at send time
- Errors: UnauthorizedError for HTTP 401 (after notifying unauthorized
  listeners once), RemoteServiceError for everything else
"""

import logging
from collections.abc import Callable
from typing import Any
from typing import TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError

from ..models.forms import FederatedSignInRequest
from ..models.forms import LoginCodeRequest
from ..models.forms import LoginVerification
from ..models.forms import NoteChanges
from ..models.forms import NoteDraft
from ..models.forms import SignupCodeRequest
from ..models.forms import SignupVerification
from ..models.notes import Note
from ..models.sessions import AuthPayload
from ..models.sessions import User
from ..storage.token_store import TokenStore
from .errors import RemoteServiceError
from .errors import UnauthorizedError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ApiClient:
    """Async client for the auth and notes endpoints."""

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Service root, e.g. http://localhost:5000/api
            token_store: Where the session token is read from before each request
            timeout: Seconds to wait before a request counts as failed
            transport: Optional httpx transport (tests mount an ASGI app here)
        """
        self.token_store = token_store
        self._unauthorized_listeners: list[Callable[[], None]] = []
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
            event_hooks={"request": [self._attach_token]},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def add_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback run once for every 401 response."""
        self._unauthorized_listeners.append(listener)

    def remove_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._unauthorized_listeners:
            self._unauthorized_listeners.remove(listener)

    # --- Auth ---

    async def send_signup_code(self, form: SignupCodeRequest) -> None:
        await self._request("POST", "/auth/send-signup-otp", json=form.to_payload())

    async def send_login_code(self, form: LoginCodeRequest) -> None:
        await self._request("POST", "/auth/send-login-otp", json=form.to_payload())

    async def verify_signup(self, form: SignupVerification) -> AuthPayload:
        data = await self._request("POST", "/auth/signup", json=form.to_payload())
        return self._parse(AuthPayload, data)

    async def verify_login(self, form: LoginVerification) -> AuthPayload:
        data = await self._request("POST", "/auth/login", json=form.to_payload())
        return self._parse(AuthPayload, data)

    async def federated_auth(self, form: FederatedSignInRequest) -> AuthPayload:
        data = await self._request("POST", "/auth/google", json=form.to_payload())
        return self._parse(AuthPayload, data)

    async def current_user(self) -> User:
        data = await self._request("GET", "/auth/me")
        return self._parse(User, data.get("user"))

    async def sign_out(self) -> None:
        await self._request("POST", "/auth/logout")

    # --- Notes ---

    async def list_notes(self) -> list[Note]:
        data = await self._request("GET", "/notes")
        raw_notes = data.get("notes")
        if not isinstance(raw_notes, list):
            logger.warning("list-notes response has no notes array")
            raise RemoteServiceError()
        return [self._parse(Note, raw) for raw in raw_notes]

    async def create_note(self, draft: NoteDraft) -> Note:
        data = await self._request("POST", "/notes", json=draft.to_payload())
        return self._parse(Note, data.get("note"))

    async def update_note(self, note_id: int, changes: NoteChanges) -> Note:
        data = await self._request("PUT", f"/notes/{note_id}", json=changes.to_payload())
        return self._parse(Note, data.get("note"))

    async def delete_note(self, note_id: int) -> None:
        await self._request("DELETE", f"/notes/{note_id}")

    # --- Internals ---

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.token_store.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a request and unwrap the ``data`` member of the response.

        Raises:
            UnauthorizedError: On HTTP 401
            RemoteServiceError: On any other failure
        """
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out: {e!r}")
            raise RemoteServiceError() from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise RemoteServiceError() from e

        body = self._decode(response)
        message = body.get("message")
        if not isinstance(message, str) or not message:
            message = None

        if response.status_code == 401:
            logger.info(f"{method} {path} rejected the session token")
            self._notify_unauthorized()
            raise UnauthorizedError(message)

        if response.is_error:
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise RemoteServiceError(message, status_code=response.status_code)

        data = body.get("data")
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            logger.debug(f"Non-JSON response body from {response.request.url}")
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _parse(model: type[ModelT], raw: Any) -> ModelT:
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Malformed {model.__name__} in response: {e}")
            raise RemoteServiceError() from e

    def _notify_unauthorized(self) -> None:
        for listener in list(self._unauthorized_listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Unauthorized listener failed: {e}")
