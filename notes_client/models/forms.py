"""Validated request models for user-entered data.

Each model enforces the client-side rules for one form and knows how to
render itself as the remote service's JSON body. Building a model is the
validation gate: an invalid form never produces a request.
"""

import re
from datetime import date
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTP_LENGTH = 6
MIN_NAME_LENGTH = 2
MIN_TITLE_LENGTH = 3
MIN_BODY_LENGTH = 10


def _check_email(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Email is required")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email")
    return value


def _check_code(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("OTP is required")
    if len(value) != OTP_LENGTH:
        raise ValueError(f"OTP must be {OTP_LENGTH} digits")
    return value


def _check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    if len(value) < MIN_NAME_LENGTH:
        raise ValueError(f"Name must be at least {MIN_NAME_LENGTH} characters")
    return value


class FormModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError


class SignupCodeRequest(FormModel):
    """Ask the service to email a signup code."""

    email: str
    name: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v)

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email, "name": self.name}


class LoginCodeRequest(FormModel):
    """Ask the service to email a login code."""

    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email}


class SignupVerification(FormModel):
    """Complete signup with the emailed code."""

    name: str
    date_of_birth: date
    email: str
    code: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_code(v)

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def require_date_of_birth(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Date of birth is required")
        return v.strip() if isinstance(v, str) else v

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dob": self.date_of_birth.isoformat(),
            "email": self.email,
            "otp": self.code,
        }


class LoginVerification(FormModel):
    """Complete login with the emailed code."""

    email: str
    code: str
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_code(v)

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email, "otp": self.code, "rememberMe": self.remember_me}


class NoteDraft(FormModel):
    """Title and body of a note about to be created."""

    title: str
    body: str

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        if len(v) < MIN_TITLE_LENGTH:
            raise ValueError(f"Title must be at least {MIN_TITLE_LENGTH} characters")
        return v

    @field_validator("body")
    @classmethod
    def check_body(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Content is required")
        if len(v) < MIN_BODY_LENGTH:
            raise ValueError(f"Content must be at least {MIN_BODY_LENGTH} characters")
        return v

    def to_payload(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.body}


class NoteChanges(FormModel):
    """Partial update of a note. Omitted fields are left untouched."""

    title: str | None = Field(default=None)
    body: str | None = Field(default=None)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.body is not None:
            payload["content"] = self.body
        return payload


class FederatedSignInRequest(FormModel):
    """Exchange an identity-provider token for a session."""

    identity_token: str

    @field_validator("identity_token")
    @classmethod
    def check_identity_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Identity token is required")
        return v

    def to_payload(self) -> dict[str, Any]:
        return {"idToken": self.identity_token}
