from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for failures that abort a crawl."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FetchError(CrawlError):
    """Non-200 response or network-level failure."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to retrieve url '{url}' ({reason})", url=url)
        self.reason = reason
        self.status_code = status_code


class MalformedResponseError(CrawlError):
    """Payload was fetched but does not have the expected structure."""

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, url=url)
        self.cause = cause


class NotAWikiPageError(MalformedResponseError):
    def __init__(self, url: str):
        super().__init__(f"{url} is not a wiki page", url=url)


class InvalidPostUrlError(CrawlError):
    def __init__(self, url: Optional[str]):
        super().__init__(f"Not a post url: {url!r}", url=url)
