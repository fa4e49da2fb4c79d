"""Data models for the fetch layer."""

import uuid
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from netfetch.fetch.constants import UNKNOWN_CONTENT_LENGTH
from netfetch.fetch.errors import FetchErrorClass, FetchFailure


def _new_request_id() -> str:
    return uuid.uuid4().hex[:16]


class FetchRequest(BaseModel):
    """Descriptor of a single fetch.

    The fetcher only reads ``target_uri``; ``context`` is carried along
    untouched for the caller's own bookkeeping.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    target_uri: Annotated[str, Field(min_length=1, description="URI to fetch")]
    context: Any = Field(default=None, description="Opaque caller context")
    request_id: str = Field(
        default_factory=_new_request_id,
        min_length=1,
        description="Identifier used for log correlation",
    )


class SuccessOutcome(BaseModel):
    """Terminal success: a readable body and its declared length."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    stream: Any = Field(description="Readable response body")
    content_length: int = Field(
        default=UNKNOWN_CONTENT_LENGTH,
        ge=UNKNOWN_CONTENT_LENGTH,
        description="Declared body length, -1 if unknown",
    )

    @property
    def is_success(self) -> bool:
        """Always True for a success outcome."""
        return True


class FailureOutcome(BaseModel):
    """Terminal failure carrying the error that ended the fetch."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    error: FetchFailure = Field(description="Failure that ended the fetch")

    @property
    def error_class(self) -> FetchErrorClass:
        """Classification of the failure."""
        return self.error.error_class

    @property
    def is_success(self) -> bool:
        """Always False for a failure outcome."""
        return False


FetchOutcome = SuccessOutcome | FailureOutcome
