"""Transport capability used by the fetcher, with an httpx implementation."""

import io
from collections.abc import Iterator
from types import TracebackType
from typing import BinaryIO, Protocol, runtime_checkable

import httpx
import structlog

from netfetch.fetch.config import FetchConfig
from netfetch.fetch.constants import DEFAULT_CHUNK_SIZE
from netfetch.fetch.errors import TransportError
from netfetch.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


@runtime_checkable
class Connection(Protocol):
    """One open HTTP exchange.

    The fetcher reads the status and headers, takes the body on success,
    and always calls ``disconnect`` exactly once when it is done.
    """

    @property
    def status_code(self) -> int:
        """HTTP status code of the response."""
        ...

    def header(self, name: str) -> str | None:
        """Get a response header value, matching the name case-insensitively."""
        ...

    def body(self) -> BinaryIO:
        """Get the readable response body.

        Raises:
            TransportError: If the body cannot be opened.
        """
        ...

    def disconnect(self) -> None:
        """Release the connection. Safe to call more than once."""
        ...


@runtime_checkable
class Transport(Protocol):
    """Capability to open connections to URIs."""

    def open(self, uri: str) -> Connection:
        """Open a connection and read the response head.

        Args:
            uri: Absolute URI to request.

        Returns:
            The open connection.

        Raises:
            TransportError: If the request could not be made.
        """
        ...


class _ResponseStream(io.RawIOBase):
    """Raw readable stream over a streaming httpx response."""

    def __init__(self, response: httpx.Response, chunk_size: int) -> None:
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes(chunk_size=chunk_size)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except (httpx.HTTPError, OSError) as e:
                msg = f"Reading response body failed: {e}"
                raise TransportError(msg, uri=str(self._response.url)) from e

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class HttpxConnection:
    """Connection backed by a streaming ``httpx.Response``.

    ``disconnect`` closes the response, which also ends the body stream:
    the body has to be consumed before the connection is released.
    """

    def __init__(
        self, response: httpx.Response, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        """Initialize the connection.

        Args:
            response: Response opened with ``stream=True``.
            chunk_size: Chunk size for body reads.
        """
        self._response = response
        self._chunk_size = chunk_size
        self._stream: BinaryIO | None = None
        self._disconnected = False

    @property
    def status_code(self) -> int:
        """HTTP status code of the response."""
        return self._response.status_code

    @property
    def disconnected(self) -> bool:
        """Whether ``disconnect`` has been called."""
        return self._disconnected

    def header(self, name: str) -> str | None:
        """Get a response header value (case-insensitive)."""
        return self._response.headers.get(name)

    def body(self) -> BinaryIO:
        """Get the body as a buffered binary stream.

        Repeated calls return the same stream.
        """
        if self._stream is None:
            raw = _ResponseStream(self._response, self._chunk_size)
            self._stream = io.BufferedReader(raw, buffer_size=self._chunk_size)  # type: ignore[assignment]
        return self._stream  # type: ignore[return-value]

    def disconnect(self) -> None:
        """Close the underlying response once."""
        if self._disconnected:
            return
        self._disconnected = True
        self._response.close()


class HttpxTransport:
    """Transport that opens connections through an ``httpx.Client``.

    Redirects are never followed by httpx itself; every 3xx response is
    returned to the fetcher, which owns the redirect policy.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Fetch configuration for timeouts and headers.
            client: Client to use instead of an owned one. An injected
                client is never closed by this transport.
        """
        self._config = config or FetchConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._config.timeout_seconds,
            follow_redirects=False,
        )
        self._log = logger.bind(component="transport")

    def open(self, uri: str) -> HttpxConnection:
        """Send a GET request and return the streaming connection.

        Args:
            uri: Absolute URI to request.

        Returns:
            Connection with the response head read and the body unread.

        Raises:
            TransportError: If the URI is invalid or the request fails.
        """
        headers = self._config.request_headers()
        log = self._log.bind(url=redact_url_credentials(uri))

        try:
            request = self._client.build_request("GET", uri, headers=headers)
            response = self._client.send(request, stream=True, follow_redirects=False)
        except httpx.InvalidURL as e:
            log.debug("connection_failed", error=str(e))
            msg = f"Invalid URL: {e}"
            raise TransportError(msg, uri=uri) from e
        except (httpx.HTTPError, OSError) as e:
            log.debug("connection_failed", error=str(e))
            msg = f"Request failed: {e}"
            raise TransportError(msg, uri=uri) from e

        log.debug(
            "connection_opened",
            status_code=response.status_code,
            headers=redact_headers(headers),
        )
        return HttpxConnection(response, chunk_size=DEFAULT_CHUNK_SIZE)

    def close(self) -> None:
        """Close the owned client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
