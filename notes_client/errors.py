"""Client-side validation errors.

Validation happens before a store touches its state or the network. A
failed form is reported as ``FormValidationError`` carrying one message per
field, ready to be shown next to the offending input.
"""

from typing import Any
from typing import TypeVar

from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

FormT = TypeVar("FormT", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


class FieldError(BaseModel):
    """Detail about a validation error.

    Attributes:
        loc: Location of the error (field path)
        msg: Error message
        type: Error type
    """

    loc: list[str] = Field(..., description="Location of the error")
    msg: str = Field(..., description="Error message")
    type: str = Field(..., description="Error type")


class FormValidationError(ValueError):
    """Raised when user input fails client-side validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{'.'.join(e.loc) or 'form'}: {e.msg}" for e in errors))

    @property
    def field_errors(self) -> dict[str, str]:
        """First message per field, keyed by field name."""
        result: dict[str, str] = {}
        for error in self.errors:
            key = error.loc[0] if error.loc else "form"
            result.setdefault(key, error.msg)
        return result

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "FormValidationError":
        errors = []
        for detail in exc.errors():
            msg = detail["msg"]
            if msg.startswith(_VALUE_ERROR_PREFIX):
                msg = msg[len(_VALUE_ERROR_PREFIX) :]
            errors.append(FieldError(loc=[str(part) for part in detail["loc"]], msg=msg, type=detail["type"]))
        return cls(errors)


def validate_form(form_cls: type[FormT], **data: Any) -> FormT:
    """Build a form model, translating pydantic errors into FormValidationError.

    Args:
        form_cls: Form model class to build
        **data: Raw field values as entered by the user

    Returns:
        The validated form

    Raises:
        FormValidationError: If any field fails validation
    """
    try:
        return form_cls(**data)
    except ValidationError as e:
        raise FormValidationError.from_pydantic(e) from None
