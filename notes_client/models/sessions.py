"""Session state models for the authentication lifecycle."""

from enum import Enum
from typing import Annotated
from typing import Any
from typing import Literal

from pydantic import Field
from pydantic import TypeAdapter
from pydantic import computed_field

from .base import StateModel
from .base import WireModel


class OtpPhase(str, Enum):
    """Whether a one-time code has been issued for the current email."""

    IDLE = "idle"
    SENT = "sent"


class SessionStatus(str, Enum):
    """Session lifecycle status.

    State transitions:
    - ANONYMOUS → OTP_REQUESTED: a signup or login code was sent
    - OTP_REQUESTED → AUTHENTICATED: the code was verified
    - ANONYMOUS → AUTHENTICATED: federated sign-in or a restored session
    - AUTHENTICATED → ANONYMOUS: sign-out, or an unauthorized response
    """

    ANONYMOUS = "anonymous"
    OTP_REQUESTED = "otp_requested"
    AUTHENTICATED = "authenticated"


class User(WireModel):
    """Authenticated user as returned by the remote service."""

    id: int = Field(description="Server-assigned user identifier")
    display_name: str = Field(alias="name", description="Name shown to the user")
    email: str = Field(description="Email address the session is bound to")
    date_of_birth: str | None = Field(default=None, alias="dob", description="Date of birth if provided at signup")
    is_federated: bool = Field(
        default=False, alias="is_google_user", description="True when the account signs in via an identity provider"
    )


class AuthPayload(WireModel):
    """Successful verify/federated response body."""

    user: User
    token: str = Field(min_length=1)


class SessionState(StateModel):
    """Session store state.

    ``user`` and ``token`` are always set and cleared together.
    """

    user: User | None = Field(default=None, description="Present iff authenticated")
    token: str | None = Field(default=None, description="Mirrors the persisted session token")
    otp_phase: OtpPhase = Field(default=OtpPhase.IDLE, description="OTP flow phase")
    pending_long_op: bool = Field(default=False, description="Signup/login/federated/current-user/sign-out in flight")
    pending_otp_op: bool = Field(default=False, description="Send-code request in flight")
    last_error: str | None = Field(default=None, description="Message from the most recent failed operation")

    @computed_field  # type: ignore[misc]
    @property
    def status(self) -> SessionStatus:
        """Lifecycle status derived from the session fields."""
        if self.user is not None and self.token is not None:
            return SessionStatus.AUTHENTICATED
        if self.otp_phase == OtpPhase.SENT:
            return SessionStatus.OTP_REQUESTED
        return SessionStatus.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED


class FederatedCredential(WireModel):
    """Identity-provider callback that carries a signed credential."""

    kind: Literal["credential"] = "credential"
    credential: str = Field(min_length=1)


class FederatedCredentialMissing(WireModel):
    """Identity-provider callback without a credential (closed popup, error)."""

    kind: Literal["missing"] = "missing"
    reason: str | None = None


FederatedResponse = Annotated[
    FederatedCredential | FederatedCredentialMissing,
    Field(discriminator="kind"),
]

_federated_adapter: TypeAdapter[FederatedCredential | FederatedCredentialMissing] = TypeAdapter(FederatedResponse)


def parse_federated_callback(payload: dict[str, Any] | None) -> FederatedCredential | FederatedCredentialMissing:
    """Turn a raw identity-provider callback into a tagged variant.

    The widget hands back an untyped object that may or may not contain a
    ``credential`` string. Anything without a non-empty credential becomes
    ``FederatedCredentialMissing``.

    Example:
        >>> parse_federated_callback({"credential": "eyJ..."}).kind
        'credential'
        >>> parse_federated_callback({}).kind
        'missing'
    """
    payload = payload or {}
    credential = payload.get("credential")
    if isinstance(credential, str) and credential:
        return _federated_adapter.validate_python({"kind": "credential", "credential": credential})

    reason = payload.get("error") or payload.get("select_by")
    return _federated_adapter.validate_python(
        {"kind": "missing", "reason": reason if isinstance(reason, str) else None}
    )
