"""
Observation protocol for sequential crawls.

Handlers are plain callables. Returning Signal.ABORT stops the crawl;
returning None or Signal.CONTINUE lets it go on. The crawl itself reports
how it ended through CrawlResult.status, so a requested stop and a
failure can be told apart.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from seriescrawl.models import Post, PostRef

logger = logging.getLogger(__name__)


class Signal(str, Enum):
    CONTINUE = "continue"
    ABORT = "abort"


class CrawlStatus(str, Enum):
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass(frozen=True)
class CollectFailure:
    """Which post could not be collected and why."""

    url: str
    message: str
    part: Optional[PostRef] = None
    exception: Optional[BaseException] = None


Handler = Callable[[Any], Optional[Signal]]


@dataclass
class CrawlCallbacks:
    found_url: Optional[Callable[[str], Optional[Signal]]] = None
    collected_post: Optional[Callable[[Post], Optional[Signal]]] = None
    error: Optional[Callable[[CollectFailure], Optional[Signal]]] = None
    done: Optional[Callable[[list[Post]], Optional[Signal]]] = None

    def notify(self, event: str, payload: Any) -> Signal:
        handler: Optional[Handler] = getattr(self, event)
        if handler is None:
            return Signal.CONTINUE
        signal = handler(payload)
        if signal is Signal.ABORT:
            logger.info("Crawl abort requested by %s handler", event)
            return Signal.ABORT
        return Signal.CONTINUE


@dataclass
class CrawlResult:
    status: CrawlStatus
    posts: list[Post] = field(default_factory=list)
    failure: Optional[CollectFailure] = None

    @property
    def ok(self) -> bool:
        return self.status is CrawlStatus.DONE

    @property
    def aborted(self) -> bool:
        return self.status is CrawlStatus.ABORTED

    @property
    def failed(self) -> bool:
        return self.status is CrawlStatus.FAILED
