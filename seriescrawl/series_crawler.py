from __future__ import annotations

import html
import logging
import re
from typing import Any, Callable, Iterable, Optional, Union

from bs4 import BeautifulSoup

from seriescrawl.callbacks import CollectFailure, CrawlCallbacks, CrawlResult, CrawlStatus, Signal
from seriescrawl.errors import CrawlError, InvalidPostUrlError, MalformedResponseError, NotAWikiPageError
from seriescrawl.models import Post, PostRef, Series
from seriescrawl.names import name_from_url, unshorten
from seriescrawl.response_cache import ResponseCache

logger = logging.getLogger(__name__)

WIKI_PAGE_KIND = "wikipage"
TITLE_HEADINGS = ("h1", "h2", "h3")

RegexLike = Union[str, re.Pattern[str]]


class SeriesCrawler:
    """
    Collects the parts of an r/HFY series.

    Two ways to find the parts:
    - Wiki index page: every post link on the page is a part, in page order.
    - Next-link following: starting from one post, follow the first link whose
      text matches `next_post_regex` to a post not seen yet.

    All fetches go through the ResponseCache, so the HttpClient's rate limit
    applies only to posts not retrieved before. Everything runs sequentially.
    """

    def __init__(
        self,
        cache: ResponseCache,
        next_post_regex: RegexLike = "next",
        on_skipped_link: Optional[Callable[[str], None]] = None,
    ):
        self.cache = cache
        self.next_post_regex = self._compile(next_post_regex)
        self.on_skipped_link = on_skipped_link

    # -------------------------
    # Single posts
    # -------------------------

    def collect_post(self, url: str) -> Post:
        """
        Fetch one post (short or long link).

        Raises:
            InvalidPostUrlError: no post name can be derived from `url`
            FetchError: on HTTP failures
            MalformedResponseError: response is not a post listing
        """
        post_url = unshorten(url)
        if post_url is None:
            raise InvalidPostUrlError(url)

        logger.info("Collecting post: url=%s", post_url)
        payload = self.cache.get_json(post_url)
        return self._parse_post_json(payload, post_url)

    def is_post_cached(self, url: str) -> bool:
        name = name_from_url(url)
        return name is not None and self.cache.is_name_cached(name)

    # -------------------------
    # Index page strategy
    # -------------------------

    def fetch_index_html(self, url: str) -> str:
        """Return the decoded markup of a wiki page (useful for debugging DOM changes)."""
        payload = self.cache.get_json(url)
        if not isinstance(payload, dict) or payload.get("kind") != WIKI_PAGE_KIND:
            raise NotAWikiPageError(url)
        try:
            content_html = payload["data"]["content_html"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Wiki page '{url}' has no content", url=url, cause=e) from e
        return html.unescape(content_html or "")

    def discover_from_index(self, url: str) -> Series:
        """
        Build a Series from a wiki index page.

        The first part is collected to find the author (and the title when the
        page has no heading). Errors from that fetch propagate.
        """
        logger.info("Reading series index: url=%s", url)
        title, parts = self._parse_index_html(self.fetch_index_html(url))

        if not parts:
            logger.warning("No parts found on index page: url=%s", url)
            return Series(title=title, author="", parts=[])

        first = self.collect_post(parts[0].url)
        return Series(title=title or first.title, author=first.author, parts=parts)

    # -------------------------
    # Next-link strategy
    # -------------------------

    def follow_series(
        self,
        start_url: str,
        callbacks: Optional[CrawlCallbacks] = None,
        next_post_regex: Optional[RegexLike] = None,
    ) -> CrawlResult:
        """
        Collect posts by following "next" links from `start_url`.

        Notifications per step: collected_post after each fetch, found_url
        before following a link, done when no further link exists, error
        when a post cannot be collected (the crawl stops there).
        """
        callbacks = callbacks or CrawlCallbacks()
        regex = self.next_post_regex if next_post_regex is None else self._compile(next_post_regex)

        posts: list[Post] = []
        previous_names: list[str] = []
        url: Optional[str] = start_url

        while url is not None:
            try:
                post = self.collect_post(url)
            except CrawlError as e:
                logger.error("Failed at post '%s': %s", url, e)
                failure = CollectFailure(url=url, message=str(e), exception=e)
                callbacks.notify("error", failure)
                return CrawlResult(CrawlStatus.FAILED, posts, failure)

            posts.append(post)
            if callbacks.notify("collected_post", post) is Signal.ABORT:
                return CrawlResult(CrawlStatus.ABORTED, posts)

            name = name_from_url(url)
            if name is not None:
                previous_names.append(name)

            url = self._find_next_url(post.content, previous_names, regex)
            if url is None:
                break

            if callbacks.notify("found_url", url) is Signal.ABORT:
                return CrawlResult(CrawlStatus.ABORTED, posts)
            logger.info("Scheduling collection of '%s'", url)

        logger.info("Collection from %s complete. Found %s posts in series", start_url, len(posts))
        callbacks.notify("done", posts)
        return CrawlResult(CrawlStatus.DONE, posts)

    # -------------------------
    # Batch collection
    # -------------------------

    def collect_batch(self, parts: Iterable[PostRef], callbacks: Optional[CrawlCallbacks] = None) -> CrawlResult:
        """
        Collect every part in order. The part title replaces the post title.
        Stops at the first part that cannot be collected.
        """
        callbacks = callbacks or CrawlCallbacks()
        posts: list[Post] = []

        for part in parts:
            try:
                post = self.collect_post(part.url).with_title(part.title)
            except CrawlError as e:
                logger.error("Aborting collection due to failure to collect '%s': %s", part.title, e)
                failure = CollectFailure(url=part.url, message=str(e), part=part, exception=e)
                callbacks.notify("error", failure)
                return CrawlResult(CrawlStatus.FAILED, posts, failure)

            posts.append(post)
            if callbacks.notify("collected_post", post) is Signal.ABORT:
                return CrawlResult(CrawlStatus.ABORTED, posts)

        logger.info("All %s series parts collected", len(posts))
        callbacks.notify("done", posts)
        return CrawlResult(CrawlStatus.DONE, posts)

    # -------------------------
    # Start URL dispatch
    # -------------------------

    def discover_series(
        self,
        start_url: str,
        callbacks: Optional[CrawlCallbacks] = None,
        next_post_regex: Optional[RegexLike] = None,
    ) -> Series:
        """
        Find the series for a start URL: post links are treated as the first
        post and their next links are followed, anything else must be a wiki
        index page.

        Raises:
            CrawlError: when the start page or any followed post cannot be collected
        """
        if name_from_url(start_url) is None:
            return self.discover_from_index(start_url)

        first = self.collect_post(start_url)
        logger.info("Retrieved author and title from first post: title=%s author=%s", first.title, first.author)

        result = self.follow_series(start_url, callbacks=callbacks, next_post_regex=next_post_regex)
        if result.failed:
            assert result.failure is not None
            exc = result.failure.exception
            if isinstance(exc, CrawlError):
                raise exc
            raise CrawlError(result.failure.message, url=result.failure.url)
        if result.aborted:
            logger.warning("Series discovery aborted after %s posts", len(result.posts))

        return Series(
            title=first.title,
            author=first.author,
            parts=[post.to_ref() for post in result.posts],
        )

    # -------------------------
    # Parsing (unit-test target)
    # -------------------------

    def _parse_post_json(self, payload: Any, url: str) -> Post:
        try:
            data = payload[0]["data"]["children"][0]["data"]
            body = data["selftext_html"]
            post = Post(
                author=data["author"],
                title=data["title"],
                name=self._strip_kind_prefix(data["name"]),
                content=html.unescape(body) if body else "",
                url=data["url"],
            )
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise MalformedResponseError(f"Unexpected post data at '{url}': {e!r}", url=url, cause=e) from e
        return post

    def _parse_index_html(self, index_html: str) -> tuple[str, list[PostRef]]:
        soup = BeautifulSoup(index_html, "lxml")

        title = ""
        for tag in TITLE_HEADINGS:
            heading = soup.find(tag)
            if heading is not None:
                title = heading.get_text()
                break

        parts: list[PostRef] = []
        for a in soup.find_all("a", href=True):
            href = a["href"]
            name = name_from_url(href)
            if name is None:
                self._skip_link(href)
                continue
            # Everything we can get a name for is taken as a part
            parts.append(PostRef(name=name, url=href, title=a.get_text()))

        return title, parts

    def _find_next_url(self, content: str, previous_names: list[str], regex: re.Pattern[str]) -> Optional[str]:
        soup = BeautifulSoup(content, "lxml")
        for a in soup.find_all("a", href=True):
            if not regex.search(a.get_text()):
                continue
            href = a["href"]
            name = name_from_url(href)
            if name is None:
                self._skip_link(href)
                continue
            if name not in previous_names:
                return href
        return None

    # -------------------------
    # Helpers
    # -------------------------

    def _skip_link(self, href: str) -> None:
        logger.debug("Ignoring link without post name: %s", href)
        if self.on_skipped_link is not None:
            self.on_skipped_link(href)

    @staticmethod
    def _compile(regex: RegexLike) -> re.Pattern[str]:
        if isinstance(regex, str):
            return re.compile(regex, re.IGNORECASE)
        return regex

    @staticmethod
    def _strip_kind_prefix(fullname: str) -> str:
        # reddit fullnames look like t3_<name>
        return re.sub(r"^t\d_", "", fullname).lower()
