from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from seriescrawl.errors import FetchError, MalformedResponseError

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: float
    min_interval_sec: float
    user_agent: str


class RequestScheduler:
    """
    Admits one request at a time with a minimum spacing between them.

    The spacing is measured from the completion of the previous request,
    successful or not. Share one scheduler between clients to space out
    every request the process makes.
    """

    def __init__(
        self,
        min_interval_sec: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_sec = max(0.0, float(min_interval_sec))
        self.last_completed_at: Optional[float] = None
        self._clock = clock
        self._sleep = sleep

    def wait_turn(self) -> float:
        """Block until the next request may start. Returns the time waited."""
        if self.last_completed_at is None:
            return 0.0
        wait = max(0.0, self.last_completed_at + self.min_interval_sec - self._clock())
        if wait > 0:
            logger.debug("Rate limit: sleeping %.2fs", wait)
            self._sleep(wait)
        return wait

    def mark_completed(self) -> None:
        self.last_completed_at = self._clock()


class HttpClient:
    """
    Thin reddit JSON client:
    - Timeout
    - Rate limiting (minimum interval between requests, see RequestScheduler)
    - Single attempt, no retry
    - Logs meaningful failures
    """

    def __init__(
        self,
        config: HttpConfig,
        session: Optional[requests.Session] = None,
        scheduler: Optional[RequestScheduler] = None,
    ):
        self._cfg = config
        self._scheduler = scheduler or RequestScheduler(config.min_interval_sec)
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self._cfg.user_agent,
                "Accept": "application/json",
            }
        )

    @property
    def min_interval_sec(self) -> float:
        return self._scheduler.min_interval_sec

    @min_interval_sec.setter
    def min_interval_sec(self, value: float) -> None:
        self._scheduler.min_interval_sec = max(0.0, float(value))

    def get_json(self, url: str) -> Any:
        """
        GET the JSON rendition of a reddit URL (url + ".json").

        Raises:
            FetchError: non-200 response or network error
            MalformedResponseError: body is not JSON
        """
        self._scheduler.wait_turn()
        try:
            resp = self._session.get(url + JSON_SUFFIX, timeout=self._cfg.timeout_sec)
        except requests.RequestException as e:
            logger.error("HTTP GET failed: url=%s err=%s", url, e)
            raise FetchError(url, str(e)) from e
        finally:
            self._scheduler.mark_completed()

        if resp.status_code != 200:
            reason = resp.reason or f"status {resp.status_code}"
            logger.error("HTTP GET failed: url=%s status=%s reason=%s", url, resp.status_code, reason)
            raise FetchError(url, reason, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from '{url}' is not JSON", url=url, cause=e) from e

        logger.debug("Retrieved %s", url)
        return data
