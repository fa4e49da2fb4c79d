"""Result callback interface and a recording implementation."""

from io import BytesIO
from typing import BinaryIO, Protocol, runtime_checkable

from netfetch.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    UNKNOWN_CONTENT_LENGTH,
)
from netfetch.fetch.errors import (
    FetchFailure,
    ResponseSizeExceededError,
    TransportError,
)
from netfetch.fetch.models import FailureOutcome, FetchOutcome, SuccessOutcome


@runtime_checkable
class FetchCallback(Protocol):
    """Sink for the single terminal outcome of a fetch.

    Exactly one of the two methods is called, exactly once, per fetch.
    """

    def on_response(self, stream: BinaryIO, content_length: int) -> None:
        """Receive the response body.

        The connection is released as soon as this method returns, so the
        stream must be consumed (or copied) before returning.

        Args:
            stream: Readable response body.
            content_length: Declared body length, -1 if unknown.
        """
        ...

    def on_failure(self, error: FetchFailure) -> None:
        """Receive the failure that ended the fetch.

        Args:
            error: Classified fetch failure.
        """
        ...


class DuplicateOutcomeError(Exception):
    """Raised when a second outcome is delivered to an OutcomeRecorder."""


class OutcomeRecorder:
    """Callback that stores the outcome for the caller to inspect.

    With ``buffer_body`` the stream is copied into memory during
    ``on_response``, so the recorded outcome stays readable after the
    connection is gone.
    """

    def __init__(
        self,
        buffer_body: bool = False,
        max_body_bytes: int = DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    ) -> None:
        """Initialize the recorder.

        Args:
            buffer_body: Copy the body into memory on response.
            max_body_bytes: Largest body accepted when buffering.
        """
        self._buffer_body = buffer_body
        self._max_body_bytes = max_body_bytes
        self._outcome: FetchOutcome | None = None

    @property
    def outcome(self) -> FetchOutcome | None:
        """The recorded outcome, or None before delivery."""
        return self._outcome

    def on_response(self, stream: BinaryIO, content_length: int) -> None:
        """Record a success, buffering the body if configured."""
        self._ensure_first()
        if not self._buffer_body:
            self._outcome = SuccessOutcome(stream=stream, content_length=content_length)
            return

        try:
            body = self._read_body_with_limit(stream, content_length)
        except (ResponseSizeExceededError, TransportError) as e:
            self._outcome = FailureOutcome(error=e)
            return

        self._outcome = SuccessOutcome(stream=BytesIO(body), content_length=len(body))

    def on_failure(self, error: FetchFailure) -> None:
        """Record a failure."""
        self._ensure_first()
        self._outcome = FailureOutcome(error=error)

    def _ensure_first(self) -> None:
        if self._outcome is not None:
            msg = "Fetch outcome was already delivered"
            raise DuplicateOutcomeError(msg)

    def _read_body_with_limit(self, stream: BinaryIO, content_length: int) -> bytes:
        """Read the body, enforcing the size limit.

        Args:
            stream: Response body stream.
            content_length: Declared length, checked before reading.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the body is larger than the limit.
        """
        max_size = self._max_body_bytes
        if content_length != UNKNOWN_CONTENT_LENGTH and content_length > max_size:
            msg = f"Response size {content_length} exceeds limit {max_size}"
            raise ResponseSizeExceededError(msg)

        buffer = BytesIO()
        total_read = 0
        while chunk := stream.read(DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()
