"""Base models for wire and state serialization."""

from pydantic import BaseModel
from pydantic import ConfigDict


class WireModel(BaseModel):
    """Base model for remote payloads.

    Fields may carry a wire alias (the remote service speaks snake_case with a
    few legacy names); Python code can populate them by field name as well.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class StateModel(BaseModel):
    """Base model for store-owned state snapshots."""

    model_config = ConfigDict(
        validate_assignment=True,
    )
