from __future__ import annotations

import re
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class CrawlerSettings(BaseSettings):
    """
    Environment-driven settings for series discovery + export.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Crawling ----
    start_url: str = Field(default="", alias="SERIES_START_URL")

    # reddit asks API clients not to hammer it; 2s between requests
    request_min_interval_ms: float = Field(default=2000.0, ge=0, alias="SERIES_REQUEST_MIN_INTERVAL_MS")
    request_timeout_sec: float = Field(default=15.0, alias="SERIES_REQUEST_TIMEOUT_SEC")

    user_agent: str = Field(
        default="seriescrawl/0.1 (series export for r/HFY)",
        alias="SERIES_USER_AGENT",
    )

    # Matched case-insensitively against link text in each post
    next_post_regex: str = Field(default="next", alias="SERIES_NEXT_POST_REGEX")

    dump_html_on_empty: bool = Field(default=True, alias="SERIES_DUMP_HTML_ON_EMPTY")
    dump_html_path: str = Field(default="debug_index_page.html", alias="SERIES_DUMP_HTML_PATH")

    # ---- Export ----
    # Unset: use what discovery found
    series_title: Optional[str] = Field(default=None, alias="SERIES_TITLE")
    series_author: Optional[str] = Field(default=None, alias="SERIES_AUTHOR")

    # "" prints the export document to stdout
    export_path: str = Field(default="", alias="SERIES_EXPORT_PATH")

    @field_validator("next_post_regex")
    @classmethod
    def check_next_post_regex(cls, v: str) -> str:
        try:
            re.compile(v, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"invalid next post regex {v!r}: {e}") from e
        return v


def load_settings() -> CrawlerSettings:
    return CrawlerSettings()
