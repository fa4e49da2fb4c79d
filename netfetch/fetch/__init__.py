"""Redirecting fetch layer.

This module provides a synchronous fetcher that:
- Follows HTTP redirects up to a configurable limit
- Detects redirect loops
- Reports exactly one outcome per fetch through a callback
- Releases every connection it opens
- Collects metrics and logs with redacted URLs
"""

from netfetch.fetch.callbacks import (
    DuplicateOutcomeError,
    FetchCallback,
    OutcomeRecorder,
)
from netfetch.fetch.config import FetchConfig
from netfetch.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    REDIRECT_STATUS_CODES,
    UNKNOWN_CONTENT_LENGTH,
)
from netfetch.fetch.errors import (
    FetchErrorClass,
    FetchFailure,
    HttpStatusError,
    MalformedRedirectError,
    RedirectLimitError,
    RedirectLoopError,
    ResponseSizeExceededError,
    TransportError,
)
from netfetch.fetch.fetcher import RedirectingFetcher, parse_content_length
from netfetch.fetch.metrics import FetchMetrics
from netfetch.fetch.models import (
    FailureOutcome,
    FetchOutcome,
    FetchRequest,
    SuccessOutcome,
)
from netfetch.fetch.redact import redact_headers, redact_url_credentials
from netfetch.fetch.redirects import RedirectChain
from netfetch.fetch.state_machine import (
    FetchState,
    FetchStateMachine,
    FetchStateTransitionError,
)
from netfetch.fetch.transport import (
    Connection,
    HttpxConnection,
    HttpxTransport,
    Transport,
)


__all__ = [
    # Fetcher
    "RedirectingFetcher",
    "parse_content_length",
    "RedirectChain",
    # Callbacks
    "FetchCallback",
    "OutcomeRecorder",
    "DuplicateOutcomeError",
    # Transport
    "Transport",
    "Connection",
    "HttpxTransport",
    "HttpxConnection",
    # Config
    "FetchConfig",
    # Models
    "FetchRequest",
    "FetchOutcome",
    "SuccessOutcome",
    "FailureOutcome",
    # Errors
    "FetchErrorClass",
    "FetchFailure",
    "TransportError",
    "HttpStatusError",
    "RedirectLoopError",
    "RedirectLimitError",
    "MalformedRedirectError",
    "ResponseSizeExceededError",
    # State machine
    "FetchState",
    "FetchStateMachine",
    "FetchStateTransitionError",
    # Constants
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_CHUNK_SIZE",
    "REDIRECT_STATUS_CODES",
    "UNKNOWN_CONTENT_LENGTH",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
