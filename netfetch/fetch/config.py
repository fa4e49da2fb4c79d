"""Configuration models for the fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from netfetch.fetch.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
)


# Headers that must come from the environment, never from config
FORBIDDEN_CONFIG_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


class FetchConfig(BaseModel):
    """Configuration for the redirecting fetcher and its default transport.

    Central configuration for the redirect limit, timeouts, request
    headers, and the body size limit used when responses are buffered.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_redirects: Annotated[int, Field(ge=0, le=20)] = DEFAULT_MAX_REDIRECTS
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = 30.0
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "netfetch/1.0"
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )

    @field_validator("headers")
    @classmethod
    def validate_no_auth_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure no credential headers are stored in config."""
        for key in v:
            if key.lower() in FORBIDDEN_CONFIG_HEADERS:
                msg = (
                    f"Header '{key}' must not be stored in config; "
                    "use environment variables"
                )
                raise ValueError(msg)
        return v

    def request_headers(self) -> dict[str, str]:
        """Build the headers sent with every request.

        Returns:
            Dictionary of headers, User-Agent first.
        """
        headers = {"User-Agent": self.user_agent, "Accept": "*/*"}
        headers.update(self.headers)
        return headers
