"""Error types raised by the scraper.

Every error is fatal for a run: it propagates to the entry point, which
captures a diagnostic screenshot and exits with a non-zero status.
"""
from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper failures."""


class NavigationTimeout(ScraperError):
    """The profile page did not produce an item list response in time."""

    def __init__(self, url: str, timeout_ms: int):
        super().__init__(f"Navigation to {url} timed out after {timeout_ms} ms")
        self.url = url
        self.timeout_ms = timeout_ms


class ApiFetchError(ScraperError):
    """An item list request failed or returned a malformed payload."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url


class InvalidUrlError(ScraperError):
    """A URL could not be parsed for cursor substitution."""

    def __init__(self, url, reason: str = "not a parseable absolute URL"):
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
