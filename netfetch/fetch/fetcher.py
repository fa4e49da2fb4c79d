"""Redirect-following synchronous fetcher."""

import time
from types import TracebackType
from typing import BinaryIO

import structlog

from netfetch.fetch.callbacks import FetchCallback, OutcomeRecorder
from netfetch.fetch.config import FetchConfig
from netfetch.fetch.constants import (
    HEADER_CONTENT_LENGTH,
    HEADER_LOCATION,
    UNKNOWN_CONTENT_LENGTH,
)
from netfetch.fetch.errors import FetchFailure, HttpStatusError, TransportError
from netfetch.fetch.metrics import FetchMetrics
from netfetch.fetch.models import FailureOutcome, FetchOutcome, FetchRequest
from netfetch.fetch.redact import redact_url_credentials
from netfetch.fetch.redirects import (
    RedirectChain,
    is_redirect,
    is_success_status,
    resolve_location,
)
from netfetch.fetch.state_machine import FetchState, FetchStateMachine
from netfetch.fetch.transport import Connection, HttpxTransport, Transport
from netfetch.settings.app import get_settings


logger = structlog.get_logger()


def parse_content_length(value: str | None) -> int:
    """Parse a Content-Length header value.

    Args:
        value: Raw header value, if present.

    Returns:
        The declared length, or -1 if absent, unparseable or negative.
    """
    if value is None:
        return UNKNOWN_CONTENT_LENGTH
    try:
        length = int(value.strip())
    except ValueError:
        return UNKNOWN_CONTENT_LENGTH
    return length if length >= 0 else UNKNOWN_CONTENT_LENGTH


class RedirectingFetcher:
    """Fetches a resource, following redirects on the caller's thread.

    Each call to ``fetch_sync`` opens one connection per hop, follows at
    most ``FetchConfig.max_redirects`` redirects, rejects redirect loops,
    and reports exactly one outcome to the callback before returning.
    Every connection it opens is disconnected exactly once.

    On success the connection is disconnected right after
    ``on_response`` returns. Transports that cannot read after disconnect
    (``HttpxTransport`` among them) require the callback to consume the
    stream before returning; ``fetch`` buffers it for that reason.
    """

    def __init__(
        self,
        transport: Transport,
        config: FetchConfig | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            transport: Transport used to open connections.
            config: Fetch configuration.
        """
        self._transport = transport
        self._config = config or FetchConfig()
        self._owned_transport: HttpxTransport | None = None
        self._log = logger.bind(component="fetch")

    @classmethod
    def from_config(cls, config: FetchConfig | None = None) -> "RedirectingFetcher":
        """Create a fetcher with its own httpx transport.

        Args:
            config: Fetch configuration. Defaults to the one built from
                the NETFETCH_* environment settings.

        Returns:
            Fetcher that closes its transport on ``close``.
        """
        config = config or get_settings().to_fetch_config()
        transport = HttpxTransport(config)
        fetcher = cls(transport, config)
        fetcher._owned_transport = transport
        return fetcher

    @property
    def config(self) -> FetchConfig:
        """Fetch configuration in use."""
        return self._config

    def close(self) -> None:
        """Close the transport if this fetcher created it."""
        if self._owned_transport is not None:
            self._owned_transport.close()

    def __enter__(self) -> "RedirectingFetcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def fetch(self, target: str | FetchRequest) -> FetchOutcome:
        """Fetch a resource and return its outcome with the body in memory.

        Args:
            target: URI or prepared request.

        Returns:
            SuccessOutcome with a buffered stream, or FailureOutcome.
        """
        request = (
            target
            if isinstance(target, FetchRequest)
            else FetchRequest(target_uri=target)
        )
        recorder = OutcomeRecorder(
            buffer_body=True,
            max_body_bytes=self._config.max_response_size_bytes,
        )
        self.fetch_sync(request, recorder)

        outcome = recorder.outcome
        if outcome is None:  # pragma: no cover - fetch_sync always delivers
            msg = f"No outcome delivered for request {request.request_id}"
            raise RuntimeError(msg)
        return outcome

    def fetch_sync(self, request: FetchRequest, callback: FetchCallback) -> None:
        """Fetch ``request.target_uri`` and report the outcome to ``callback``.

        Blocks until exactly one of ``callback.on_response`` or
        ``callback.on_failure`` has been called. Exceptions raised by the
        callback itself propagate after the connection is released.

        Args:
            request: Fetch request.
            callback: Receiver of the outcome.
        """
        start_time_ns = time.perf_counter_ns()
        metrics = FetchMetrics.get_instance()
        machine = FetchStateMachine(request.request_id)
        chain = RedirectChain(self._config.max_redirects)
        log = self._log.bind(
            request_id=request.request_id,
            url=redact_url_credentials(request.target_uri),
        )
        current_uri = request.target_uri

        while True:
            machine.transition(
                FetchState.CONNECTING, target=redact_url_credentials(current_uri)
            )
            log.debug(
                "fetch_attempt",
                target=redact_url_credentials(current_uri),
                redirect_count=chain.redirect_count,
            )

            try:
                connection = self._transport.open(current_uri)
            except TransportError as e:
                self._deliver_failure(e, callback, machine, log, start_time_ns)
                return
            metrics.record_connection_opened()

            failure: FetchFailure | None = None
            try:
                try:
                    status_code = connection.status_code
                    metrics.record_response(status_code)
                    if is_success_status(status_code):
                        stream = connection.body()
                        next_uri = None
                    else:
                        next_uri = self._next_hop(
                            connection, status_code, current_uri, chain
                        )
                except FetchFailure as e:
                    failure = e
                else:
                    if next_uri is None:
                        self._deliver_response(
                            connection,
                            stream,
                            callback,
                            machine,
                            chain,
                            log,
                            start_time_ns,
                        )
                        return
            finally:
                connection.disconnect()

            if failure is not None:
                self._deliver_failure(failure, callback, machine, log, start_time_ns)
                return

            machine.transition(
                FetchState.REDIRECTING, target=redact_url_credentials(next_uri)
            )
            metrics.record_redirect()
            log.info(
                "redirect_followed",
                status_code=status_code,
                from_url=redact_url_credentials(current_uri),
                to_url=redact_url_credentials(next_uri),
                redirect_count=chain.redirect_count,
            )
            current_uri = next_uri

    def _next_hop(
        self,
        connection: Connection,
        status_code: int,
        current_uri: str,
        chain: RedirectChain,
    ) -> str:
        """Decide where a non-2xx response leads.

        Args:
            connection: Connection holding the response.
            status_code: Response status code.
            current_uri: URI that produced the response.
            chain: Redirect bookkeeping for this fetch.

        Returns:
            The URI to connect to next.

        Raises:
            HttpStatusError: If the response is not a redirect.
            MalformedRedirectError: If the redirect target is unusable.
            RedirectLimitError: If the redirect limit is reached.
            RedirectLoopError: If the target was already visited.
        """
        location = connection.header(HEADER_LOCATION)
        if not is_redirect(status_code, location):
            raise HttpStatusError(status_code, uri=current_uri)

        next_uri = resolve_location(current_uri, location, status_code)
        return chain.follow(current_uri, next_uri)

    def _deliver_response(
        self,
        connection: Connection,
        stream: BinaryIO,
        callback: FetchCallback,
        machine: FetchStateMachine,
        chain: RedirectChain,
        log: structlog.stdlib.BoundLogger,
        start_time_ns: int,
    ) -> None:
        content_length = parse_content_length(connection.header(HEADER_CONTENT_LENGTH))
        machine.transition(FetchState.SUCCESS)
        callback.on_response(stream, content_length)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        # A buffering recorder turns an oversized or unreadable body into a failure
        if isinstance(callback, OutcomeRecorder) and isinstance(
            callback.outcome, FailureOutcome
        ):
            error = callback.outcome.error
            FetchMetrics.get_instance().record_failure(error.error_class, duration_ms)
            log.warning(
                "fetch_failed",
                error_class=error.error_class.value,
                error=error.message,
                status_code=connection.status_code,
                content_length=content_length,
                redirect_count=chain.redirect_count,
                duration_ms=round(duration_ms, 2),
            )
            return

        FetchMetrics.get_instance().record_success(duration_ms)
        log.info(
            "fetch_complete",
            status_code=connection.status_code,
            content_length=content_length,
            redirect_count=chain.redirect_count,
            duration_ms=round(duration_ms, 2),
        )

    def _deliver_failure(
        self,
        error: FetchFailure,
        callback: FetchCallback,
        machine: FetchStateMachine,
        log: structlog.stdlib.BoundLogger,
        start_time_ns: int,
    ) -> None:
        machine.transition(FetchState.FAILURE, error_class=error.error_class.value)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        FetchMetrics.get_instance().record_failure(error.error_class, duration_ms)
        log.warning(
            "fetch_failed",
            error_class=error.error_class.value,
            error=error.message,
            failed_url=redact_url_credentials(error.uri) if error.uri else None,
            duration_ms=round(duration_ms, 2),
        )
        callback.on_failure(error)
