"""Unit tests for redirect classification and bookkeeping."""

import pytest

from netfetch.fetch.errors import (
    MalformedRedirectError,
    RedirectLimitError,
    RedirectLoopError,
)
from netfetch.fetch.redirects import (
    RedirectChain,
    canonical_uri,
    is_redirect,
    is_success_status,
    resolve_location,
)


class TestStatusClassification:
    """Tests for success and redirect predicates."""

    @pytest.mark.parametrize("status_code", [200, 201, 204, 206, 299])
    def test_success_statuses(self, status_code: int) -> None:
        """All 2xx statuses are successes."""
        assert is_success_status(status_code) is True

    @pytest.mark.parametrize("status_code", [199, 300, 301, 404, 500])
    def test_non_success_statuses(self, status_code: int) -> None:
        """Anything outside 2xx is not a success."""
        assert is_success_status(status_code) is False

    @pytest.mark.parametrize("status_code", [300, 301, 302, 303, 307, 308])
    def test_redirect_codes_without_location(self, status_code: int) -> None:
        """Well-known redirect codes count even with no Location."""
        assert is_redirect(status_code, None) is True

    def test_other_3xx_requires_location(self) -> None:
        """304 and friends are redirects only when they name a target."""
        assert is_redirect(304, None) is False
        assert is_redirect(305, "http://proxy/") is True

    @pytest.mark.parametrize("status_code", [200, 404, 500])
    def test_non_3xx_never_redirect(self, status_code: int) -> None:
        """A Location header outside 3xx does not make a redirect."""
        assert is_redirect(status_code, "http://localhost/") is False


class TestResolveLocation:
    """Tests for Location resolution."""

    def test_absolute_location(self) -> None:
        """Absolute targets are returned as-is."""
        assert (
            resolve_location("http://localhost/", "https://localhost/", 301)
            == "https://localhost/"
        )

    def test_relative_location(self) -> None:
        """Relative targets resolve against the current URI."""
        resolved = resolve_location("http://example.com/a/b.png", "c.png", 302)
        assert resolved == "http://example.com/a/c.png"

    def test_scheme_relative_location(self) -> None:
        """Scheme-relative targets keep the current scheme."""
        resolved = resolve_location("https://example.com/a", "//cdn.example.com/x", 302)
        assert resolved == "https://cdn.example.com/x"

    def test_surrounding_whitespace_ignored(self) -> None:
        """Whitespace around the header value is stripped."""
        resolved = resolve_location("http://example.com/", "  /next  ", 301)
        assert resolved == "http://example.com/next"

    @pytest.mark.parametrize("location", [None, "", "  "])
    def test_missing_location(self, location: str | None) -> None:
        """Missing or blank locations are malformed."""
        with pytest.raises(MalformedRedirectError) as exc_info:
            resolve_location("http://localhost/", location, 301)

        assert exc_info.value.status_code == 301
        assert exc_info.value.location == location
        assert exc_info.value.uri == "http://localhost/"

    @pytest.mark.parametrize(
        "location",
        ["ftp://localhost/file", "mailto:someone@example.com", "http://localhost:port/"],
    )
    def test_unusable_location(self, location: str) -> None:
        """Non-http(s) and unparseable locations are malformed."""
        with pytest.raises(MalformedRedirectError):
            resolve_location("http://localhost/", location, 302)


class TestCanonicalUri:
    """Tests for URI normalization."""

    def test_host_case_normalized(self) -> None:
        """Host case does not distinguish URIs."""
        assert canonical_uri("http://LOCALHOST/") == canonical_uri("http://localhost/")

    def test_unparseable_uri_returned_unchanged(self) -> None:
        """URIs httpx cannot parse are compared verbatim."""
        assert canonical_uri("http://localhost:port/") == "http://localhost:port/"


class TestRedirectChain:
    """Tests for RedirectChain bookkeeping."""

    def test_initial_state(self) -> None:
        """A new chain has no visits and no hops."""
        chain = RedirectChain()

        assert chain.max_redirects == 5
        assert chain.redirect_count == 0
        assert chain.visited == frozenset()
        assert chain.hops == []

    def test_follow_records_current_uri(self) -> None:
        """Following a redirect marks the source as visited."""
        chain = RedirectChain()

        next_uri = chain.follow("http://localhost/", "https://localhost/")

        assert next_uri == "https://localhost/"
        assert chain.redirect_count == 1
        assert chain.visited == frozenset({"http://localhost/"})
        assert chain.hops == ["https://localhost/"]

    def test_self_redirect_is_loop(self) -> None:
        """A URI redirecting to itself is a loop."""
        chain = RedirectChain()

        with pytest.raises(RedirectLoopError) as exc_info:
            chain.follow("http://localhost/", "http://localhost/")

        assert exc_info.value.location == "http://localhost/"
        assert chain.redirect_count == 0

    def test_return_to_first_uri_is_loop(self) -> None:
        """Coming back to the first target is a loop."""
        chain = RedirectChain()
        chain.follow("http://localhost/", "https://localhost/")

        with pytest.raises(RedirectLoopError):
            chain.follow("https://localhost/", "http://localhost/")

    def test_limit(self) -> None:
        """The redirect after the maximum raises RedirectLimitError."""
        chain = RedirectChain(max_redirects=5)
        current = "http://localhost/0"
        for hop in range(1, 6):
            current = chain.follow(current, f"http://localhost/{hop}")

        with pytest.raises(RedirectLimitError) as exc_info:
            chain.follow(current, "http://localhost/6")

        assert exc_info.value.max_redirects == 5
        assert chain.redirect_count == 5

    def test_limit_checked_before_loop(self) -> None:
        """At the limit, even a looping target reports the limit."""
        chain = RedirectChain(max_redirects=1)
        chain.follow("http://localhost/a", "http://localhost/b")

        with pytest.raises(RedirectLimitError):
            chain.follow("http://localhost/b", "http://localhost/a")

    def test_zero_limit(self) -> None:
        """max_redirects=0 refuses every redirect."""
        chain = RedirectChain(max_redirects=0)

        with pytest.raises(RedirectLimitError):
            chain.follow("http://localhost/", "https://localhost/")
