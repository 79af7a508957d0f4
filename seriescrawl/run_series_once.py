from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from seriescrawl.callbacks import CollectFailure, CrawlCallbacks
from seriescrawl.errors import CrawlError
from seriescrawl.export import build_export_document
from seriescrawl.http_client import HttpClient, HttpConfig
from seriescrawl.models import Post
from seriescrawl.response_cache import ResponseCache
from seriescrawl.series_crawler import SeriesCrawler
from seriescrawl.settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    try:
        s = load_settings()
    except ValidationError as e:
        logger.error("Invalid settings: %s", e)
        return 1

    args = sys.argv[1:] if argv is None else argv
    start_url = args[0] if args else s.start_url
    if not start_url:
        logger.error("No start url given (argument or SERIES_START_URL)")
        return 1

    http = HttpClient(
        HttpConfig(
            timeout_sec=s.request_timeout_sec,
            min_interval_sec=s.request_min_interval_ms / 1000.0,
            user_agent=s.user_agent,
        )
    )
    crawler = SeriesCrawler(ResponseCache(http), next_post_regex=s.next_post_regex)

    def found_url(url: str) -> None:
        logger.info("Found next part: %s", url)

    def found_post(post: Post) -> None:
        logger.info("Found post in series: '%s'", post.title)

    try:
        series = crawler.discover_series(
            start_url,
            callbacks=CrawlCallbacks(found_url=found_url, collected_post=found_post),
        )
    except CrawlError as e:
        logger.error("Failed to retrieve series info from '%s': %s", start_url, e)
        return 1

    logger.info("Retrieved series '%s' by %s. Referenced %s parts.", series.title, series.author, len(series.parts))

    if not series.parts:
        if s.dump_html_on_empty:
            try:
                Path(s.dump_html_path).write_text(crawler.fetch_index_html(start_url), encoding="utf-8")
                logger.warning("No parts found. Dumped HTML to: %s", s.dump_html_path)
            except CrawlError as e:
                logger.warning("No parts found and index page could not be dumped: %s", e)
        return 1

    def collected(post: Post) -> None:
        logger.info("Collected post in series: '%s'", post.title)

    def failed(failure: CollectFailure) -> None:
        title = failure.part.title if failure.part else failure.url
        logger.error("Aborting collection due to failure to collect '%s': %s", title, failure.message)

    result = crawler.collect_batch(series.parts, CrawlCallbacks(collected_post=collected, error=failed))
    if not result.ok:
        return 1

    doc = build_export_document(
        title=s.series_title or series.title,
        author=s.series_author or series.author,
        posts=result.posts,
    )
    out = json.dumps(doc.to_dict(), ensure_ascii=False, indent=2)

    if s.export_path:
        Path(s.export_path).write_text(out, encoding="utf-8")
        logger.info("All %s series parts available. Wrote %s", len(result.posts), s.export_path)
    else:
        print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
