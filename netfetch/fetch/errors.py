"""Error types for the redirecting fetcher.

Every terminal failure of a fetch is one of these exceptions. They are never
raised out of ``fetch_sync``; the fetcher hands them to the callback's
``on_failure`` instead.
"""

from enum import Enum


class FetchErrorClass(str, Enum):
    """Classification of fetch failures for metrics and logging.

    - TRANSPORT: I/O failure while opening or reading a connection
    - HTTP_STATUS: Response was neither 2xx nor a redirect
    - REDIRECT_LOOP: Redirect target was already visited
    - REDIRECT_LIMIT: Too many redirects followed
    - MALFORMED_REDIRECT: Missing or unusable Location header
    - RESPONSE_SIZE_EXCEEDED: Buffered body exceeded the size limit
    """

    TRANSPORT = "TRANSPORT"
    HTTP_STATUS = "HTTP_STATUS"
    REDIRECT_LOOP = "REDIRECT_LOOP"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"
    MALFORMED_REDIRECT = "MALFORMED_REDIRECT"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"


class FetchFailure(Exception):
    """Base exception for fetch failures.

    Provides structured error information for logging and for consumers
    that branch on the kind of failure.
    """

    error_class: FetchErrorClass

    def __init__(
        self,
        message: str,
        uri: str | None = None,
        details: dict[str, str | int | None] | None = None,
    ) -> None:
        """Initialize the fetch failure.

        Args:
            message: Human-readable error message.
            uri: URI being fetched when the failure happened.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.uri = uri
        self.details = details or {}

    def to_dict(self) -> dict[str, str | None | dict[str, str | int | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "uri": self.uri,
            "details": self.details,
        }


class TransportError(FetchFailure):
    """The underlying transport failed to open or read a connection."""

    error_class = FetchErrorClass.TRANSPORT


class HttpStatusError(FetchFailure):
    """The server answered with a status that is neither 2xx nor a redirect."""

    error_class = FetchErrorClass.HTTP_STATUS

    def __init__(self, status_code: int, uri: str | None = None) -> None:
        """Initialize the status error.

        Args:
            status_code: HTTP status code of the response.
            uri: URI that produced the response.
        """
        super().__init__(
            f"Unexpected HTTP status {status_code}",
            uri=uri,
            details={"status_code": status_code},
        )
        self.status_code = status_code


class RedirectLoopError(FetchFailure):
    """A redirect pointed back to a URI already visited in this fetch."""

    error_class = FetchErrorClass.REDIRECT_LOOP

    def __init__(self, location: str, uri: str | None = None) -> None:
        """Initialize the loop error.

        Args:
            location: Redirect target that was already visited.
            uri: URI that issued the redirect.
        """
        super().__init__(
            f"Redirect loop detected: {location} was already visited",
            uri=uri,
            details={"location": location},
        )
        self.location = location


class RedirectLimitError(FetchFailure):
    """More redirects were requested than the fetcher is allowed to follow."""

    error_class = FetchErrorClass.REDIRECT_LIMIT

    def __init__(self, max_redirects: int, uri: str | None = None) -> None:
        """Initialize the limit error.

        Args:
            max_redirects: Maximum number of redirects allowed.
            uri: URI that issued the redirect over the limit.
        """
        super().__init__(
            f"Too many redirects (maximum is {max_redirects})",
            uri=uri,
            details={"max_redirects": max_redirects},
        )
        self.max_redirects = max_redirects


class MalformedRedirectError(FetchFailure):
    """A redirect response carried a missing or unusable Location header."""

    error_class = FetchErrorClass.MALFORMED_REDIRECT

    def __init__(
        self,
        status_code: int,
        location: str | None,
        uri: str | None = None,
    ) -> None:
        """Initialize the malformed redirect error.

        Args:
            status_code: Redirect status code of the response.
            location: Raw Location header value, if any.
            uri: URI that issued the redirect.
        """
        super().__init__(
            f"HTTP {status_code} without a valid redirect location",
            uri=uri,
            details={"status_code": status_code, "location": location},
        )
        self.status_code = status_code
        self.location = location


class ResponseSizeExceededError(FetchFailure):
    """A buffered response body grew past the configured size limit."""

    error_class = FetchErrorClass.RESPONSE_SIZE_EXCEEDED
