"""Redirect-following synchronous HTTP fetching."""

from netfetch.fetch import (
    FetchCallback,
    FetchConfig,
    FetchFailure,
    FetchRequest,
    OutcomeRecorder,
    RedirectingFetcher,
)


__all__ = [
    "FetchCallback",
    "FetchConfig",
    "FetchFailure",
    "FetchRequest",
    "OutcomeRecorder",
    "RedirectingFetcher",
]
