"""Redirect classification, Location resolution and loop bookkeeping."""

import httpx

from netfetch.fetch.constants import (
    ALLOWED_REDIRECT_SCHEMES,
    DEFAULT_MAX_REDIRECTS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
    REDIRECT_STATUS_CODES,
)
from netfetch.fetch.errors import (
    MalformedRedirectError,
    RedirectLimitError,
    RedirectLoopError,
)


def is_success_status(status_code: int) -> bool:
    """Check if a status code is a 2xx success."""
    return HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX


def is_redirect(status_code: int, location: str | None) -> bool:
    """Check if a response should be handled as a redirect.

    Args:
        status_code: HTTP status code.
        location: Raw Location header value, if present.

    Returns:
        True for the well-known redirect codes, and for any other 3xx
        response that names a Location.
    """
    if status_code in REDIRECT_STATUS_CODES:
        return True
    return (
        HTTP_STATUS_REDIRECT_MIN <= status_code < HTTP_STATUS_REDIRECT_MAX
        and location is not None
    )


def canonical_uri(uri: str) -> str:
    """Normalize a URI for visited-set comparisons.

    Args:
        uri: URI as supplied by the caller or a server.

    Returns:
        httpx's normalized form, or the input unchanged if it does not parse.
    """
    try:
        return str(httpx.URL(uri))
    except httpx.InvalidURL:
        return uri


def resolve_location(current_uri: str, location: str | None, status_code: int) -> str:
    """Resolve a Location header against the URI that returned it.

    Args:
        current_uri: URI whose response carried the header.
        location: Raw Location header value.
        status_code: Redirect status code, used in the error.

    Returns:
        Absolute http(s) URI of the next hop.

    Raises:
        MalformedRedirectError: If the header is missing, blank, does not
            parse, or points somewhere other than an http(s) host.
    """
    if location is None or not location.strip():
        raise MalformedRedirectError(status_code, location, uri=current_uri)

    try:
        resolved = httpx.URL(current_uri).join(location.strip())
    except httpx.InvalidURL as e:
        raise MalformedRedirectError(status_code, location, uri=current_uri) from e

    if resolved.scheme not in ALLOWED_REDIRECT_SCHEMES or not resolved.host:
        raise MalformedRedirectError(status_code, location, uri=current_uri)

    return str(resolved)


class RedirectChain:
    """Redirect bookkeeping for one fetch invocation.

    Tracks the URIs left behind through a redirect and how many redirects
    have been followed. The first target is recorded only once it
    redirects, so a chain that comes back to it is still caught.
    """

    def __init__(self, max_redirects: int = DEFAULT_MAX_REDIRECTS) -> None:
        """Initialize an empty chain.

        Args:
            max_redirects: Maximum number of redirects to follow.
        """
        self._max_redirects = max_redirects
        self._visited: set[str] = set()
        self._hops: list[str] = []

    @property
    def max_redirects(self) -> int:
        """Maximum number of redirects this chain will follow."""
        return self._max_redirects

    @property
    def redirect_count(self) -> int:
        """Number of redirects followed so far."""
        return len(self._hops)

    @property
    def visited(self) -> frozenset[str]:
        """Canonical URIs left behind through a redirect."""
        return frozenset(self._visited)

    @property
    def hops(self) -> list[str]:
        """Redirect targets in the order they were followed."""
        return list(self._hops)

    def follow(self, current_uri: str, next_uri: str) -> str:
        """Record a redirect from ``current_uri`` to ``next_uri``.

        Args:
            current_uri: URI that answered with a redirect.
            next_uri: Resolved redirect target.

        Returns:
            The URI to connect to next.

        Raises:
            RedirectLimitError: If the redirect limit is already reached.
            RedirectLoopError: If ``next_uri`` was visited before, including
                a redirect from a URI to itself.
        """
        if self.redirect_count >= self._max_redirects:
            raise RedirectLimitError(self._max_redirects, uri=current_uri)

        self._visited.add(canonical_uri(current_uri))
        if canonical_uri(next_uri) in self._visited:
            raise RedirectLoopError(next_uri, uri=current_uri)

        self._hops.append(next_uri)
        return next_uri
