"""Session store: authentication lifecycle and the OTP state machine.

State transitions:
- ANONYMOUS → OTP_REQUESTED: request_signup_otp / request_login_otp succeed
- OTP_REQUESTED → AUTHENTICATED: verify_signup / verify_login succeed
- ANONYMOUS → AUTHENTICATED: federated_sign_in or fetch_current_user succeed
- AUTHENTICATED → ANONYMOUS: sign_out, or any 401 from the remote service

The store is the only writer of the session token. It writes the token to
the token store when a session is established and clears it on teardown.
"""

import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Coroutine
from datetime import date
from typing import Any

from ..errors import validate_form
from ..models.forms import FederatedSignInRequest
from ..models.forms import LoginCodeRequest
from ..models.forms import LoginVerification
from ..models.forms import SignupCodeRequest
from ..models.forms import SignupVerification
from ..models.sessions import AuthPayload
from ..models.sessions import FederatedCredential
from ..models.sessions import FederatedCredentialMissing
from ..models.sessions import OtpPhase
from ..models.sessions import SessionState
from ..models.sessions import User
from ..operations import OperationResult
from ..operations import Store
from ..remote.client import ApiClient
from ..remote.errors import RemoteServiceError
from ..storage.token_store import TokenStore

logger = logging.getLogger(__name__)

OTP_OP = "otp"
LONG_OP = "long"

MISSING_CREDENTIAL_MESSAGE = "No credential received from the identity provider"
SESSION_CHANGED_MESSAGE = "Session changed while fetching the current user"


class SessionStore(Store[SessionState]):
    """Owns the session state and drives the sign-up/sign-in flows.

    Operations that take user input are plain methods that validate it and
    return the coroutine to await (or to hand to ``dispatch``). Invalid input
    raises FormValidationError at call time, before any task, pending flag or
    remote call exists. The coroutine raises the matching pending flag, awaits
    the remote call, then settles into an OperationResult. Remote failures
    end up in ``last_error``.
    """

    def __init__(self, api: ApiClient, token_store: TokenStore) -> None:
        """Initialize with collaborators.

        Args:
            api: Remote service client
            token_store: Persistence adapter for the session token
        """
        super().__init__(SessionState())
        self.api = api
        self.token_store = token_store
        self._teardown_listeners: list[Callable[[], None]] = []

    def add_teardown_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback run after a teardown that ended a session."""
        self._teardown_listeners.append(listener)

    # --- OTP requests ---

    def request_signup_otp(self, email: str, name: str) -> Coroutine[Any, Any, OperationResult[None]]:
        form = validate_form(SignupCodeRequest, email=email, name=name)
        return self._send_code(lambda: self.api.send_signup_code(form))

    def request_login_otp(self, email: str) -> Coroutine[Any, Any, OperationResult[None]]:
        form = validate_form(LoginCodeRequest, email=email)
        return self._send_code(lambda: self.api.send_login_code(form))

    async def _send_code(self, call: Callable[[], Awaitable[None]]) -> OperationResult[None]:
        self._begin(OTP_OP)
        try:
            await call()
        except RemoteServiceError as e:
            return self._record_failure(e, "Failed to send OTP")
        else:
            # Last response to settle wins, even if the user moved on meanwhile
            self._state.otp_phase = OtpPhase.SENT
            self._state.last_error = None
            logger.info("One-time code sent")
            return OperationResult.success()
        finally:
            self._state.pending_otp_op = self._pending.end(OTP_OP)
            self._publish()

    # --- Verification / sign-in ---

    def verify_signup(
        self, name: str, date_of_birth: date | str, email: str, code: str
    ) -> Coroutine[Any, Any, OperationResult[User]]:
        form = validate_form(SignupVerification, name=name, date_of_birth=date_of_birth, email=email, code=code)
        if self._state.otp_phase != OtpPhase.SENT:
            logger.debug("verify_signup called before a code was sent")
        return self._authenticate(lambda: self.api.verify_signup(form), "Sign up failed")

    def verify_login(
        self, email: str, code: str, remember_me: bool = False
    ) -> Coroutine[Any, Any, OperationResult[User]]:
        form = validate_form(LoginVerification, email=email, code=code, remember_me=remember_me)
        if self._state.otp_phase != OtpPhase.SENT:
            logger.debug("verify_login called before a code was sent")
        return self._authenticate(lambda: self.api.verify_login(form), "Login failed")

    def federated_sign_in(self, identity_token: str) -> Coroutine[Any, Any, OperationResult[User]]:
        form = validate_form(FederatedSignInRequest, identity_token=identity_token)
        return self._authenticate(lambda: self.api.federated_auth(form), "Google authentication failed")

    def handle_federated_response(
        self, response: FederatedCredential | FederatedCredentialMissing
    ) -> Coroutine[Any, Any, OperationResult[User]]:
        """Start federated sign-in for an identity-provider callback.

        Callbacks without a credential are rejected; no remote call is made.
        """
        if isinstance(response, FederatedCredentialMissing):
            return self._reject_missing_credential(response)
        return self.federated_sign_in(response.credential)

    async def _reject_missing_credential(self, response: FederatedCredentialMissing) -> OperationResult[User]:
        logger.warning(f"Identity provider returned no credential (reason: {response.reason})")
        self._state.last_error = MISSING_CREDENTIAL_MESSAGE
        self._publish()
        return OperationResult.failure(MISSING_CREDENTIAL_MESSAGE)

    async def _authenticate(self, call: Callable[[], Awaitable[AuthPayload]], fallback: str) -> OperationResult[User]:
        self._begin(LONG_OP)
        try:
            payload = await call()
        except RemoteServiceError as e:
            return self._record_failure(e, fallback)
        else:
            self._establish(payload.user, payload.token)
            return OperationResult.success(payload.user)
        finally:
            self._state.pending_long_op = self._pending.end(LONG_OP)
            self._publish()

    # --- Current user / sign-out ---

    async def fetch_current_user(self) -> OperationResult[User]:
        """Refresh the user with the persisted token.

        Any failure tears the session down, which makes this the session
        validity check run once on start-up. A success that arrives after the
        persisted token changed (sign-out, or a new sign-in) is dropped so the
        state keeps mirroring the token store; a failure is dropped only when a
        newer session took over.
        """
        token = self.token_store.get()
        if token is None:
            self._teardown()
            self._publish()
            return OperationResult.failure("Not signed in")

        self._begin(LONG_OP)
        try:
            user = await self.api.current_user()
        except RemoteServiceError as e:
            current = self.token_store.get()
            if current is not None and current != token:
                return self._discard_stale_refresh()
            self._teardown()
            return self._record_failure(e, "Failed to get user")
        else:
            if self.token_store.get() != token:
                return self._discard_stale_refresh()
            self._establish(user, token, persist=False)
            return OperationResult.success(user)
        finally:
            self._state.pending_long_op = self._pending.end(LONG_OP)
            self._publish()

    async def sign_out(self) -> OperationResult[None]:
        """Invalidate the token remotely, then always clear the local session."""
        if self.token_store.get() is None and self._state.token is None:
            self._teardown()
            self._publish()
            return OperationResult.success()

        self._begin(LONG_OP, clear_error=False)
        try:
            await self.api.sign_out()
        except RemoteServiceError as e:
            return self._record_failure(e, "Logout failed")
        else:
            self._state.last_error = None
            return OperationResult.success()
        finally:
            self._teardown()
            self._state.pending_long_op = self._pending.end(LONG_OP)
            self._publish()

    def handle_unauthorized(self) -> None:
        """Tear down after the remote service rejected the token. Idempotent."""
        logger.info("Session token rejected by the remote service")
        self._teardown()
        self._publish()

    # --- Synchronous reducers ---

    def clear_error(self) -> None:
        self._state.last_error = None
        self._publish()

    def abandon_otp_flow(self) -> None:
        """Forget the issued code, e.g. when the user edits the email."""
        self._state.otp_phase = OtpPhase.IDLE
        self._publish()

    # --- Internals ---

    def _begin(self, key: str, clear_error: bool = True) -> None:
        self._pending.begin(key)
        if key == OTP_OP:
            self._state.pending_otp_op = True
        else:
            self._state.pending_long_op = True
        if clear_error:
            self._state.last_error = None
        self._publish()

    def _discard_stale_refresh(self) -> OperationResult[User]:
        logger.info("Session changed while fetching the current user; ignoring the response")
        return OperationResult.failure(SESSION_CHANGED_MESSAGE)

    def _establish(self, user: User, token: str, persist: bool = True) -> None:
        if persist:
            self.token_store.set(token)
        self._state.user = user
        self._state.token = token
        self._state.otp_phase = OtpPhase.IDLE
        self._state.last_error = None
        logger.info(f"Session established for user {user.id}")

    def _teardown(self) -> None:
        had_session = self._state.token is not None or self._state.user is not None
        self.token_store.clear()
        self._state.user = None
        self._state.token = None
        self._state.otp_phase = OtpPhase.IDLE
        if not had_session:
            return

        logger.info("Session torn down")
        for listener in list(self._teardown_listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Teardown listener failed: {e}")
