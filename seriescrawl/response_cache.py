"""
In-memory cache of reddit JSON responses.

Entries live for the lifetime of the cache object; nothing is evicted.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from seriescrawl.http_client import HttpClient
from seriescrawl.names import url_from_name

logger = logging.getLogger(__name__)


class ResponseCache:
    def __init__(self, http: HttpClient) -> None:
        self.http = http
        self._entries: Dict[str, Any] = {}

    def get_json(self, url: str) -> Any:
        """Return the cached response for `url`, fetching it on a miss. Failures are not cached."""
        if url in self._entries:
            logger.debug("Cache hit: url=%s", url)
            return self._entries[url]

        data = self.http.get_json(url)
        self._entries[url] = data
        return data

    def is_cached(self, url: str) -> bool:
        return url in self._entries

    def is_name_cached(self, name: str) -> bool:
        return self.is_cached(url_from_name(name))

    def __len__(self) -> int:
        return len(self._entries)
