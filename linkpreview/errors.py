"""Exception hierarchy for the link preview pipeline."""

from __future__ import annotations


class LinkPreviewError(RuntimeError):
    """Base class for every error raised by linkpreview."""


class FetchError(LinkPreviewError):
    """Raised when a URL cannot be fetched or parsed.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class CacheCorrupt(LinkPreviewError):
    """Raised when a cache entry exists but cannot be decoded.

    A corrupt entry is never treated as a miss; the build has to surface it
    so the file can be inspected or removed by hand.
    """

    def __init__(self, message: str, url: str = "", path: str = "") -> None:
        super().__init__(message)
        self.url = url
        self.path = path
