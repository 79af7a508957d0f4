from __future__ import annotations

import pytest

from seriescrawl.models import PostRef
from seriescrawl.names import name_from_url, unshorten, url_from_name


@pytest.mark.parametrize(
    "url",
    [
        "https://redd.it/AbC123",
        "http://redd.it/abc123?utm_source=share",
        "https://www.reddit.com/r/HFY/comments/abc123/",
        "https://old.reddit.com/r/hfy/comments/ABC123/the_story_part_2/",
        "/r/HFY/comments/abc123/the_story_part_2/?context=3",
    ],
)
def test_short_and_long_links_unshorten_to_same_url(url):
    assert name_from_url(url) == "abc123"
    assert unshorten(url) == "https://www.reddit.com/r/HFY/comments/abc123/"


def test_unshorten_is_idempotent():
    once = unshorten("https://redd.it/xyz9")
    assert unshorten(once) == once


@pytest.mark.parametrize(
    "url",
    [
        "https://www.reddit.com/r/HFY/wiki/series/some_series",
        "https://www.reddit.com/r/WritingPrompts/comments/abc123/",
        "https://example.com/",
        "",
        None,
    ],
)
def test_non_post_links_have_no_name(url):
    assert name_from_url(url) is None
    assert unshorten(url) is None


def test_url_from_name():
    assert url_from_name("q1w2e3") == "https://www.reddit.com/r/HFY/comments/q1w2e3/"


def test_post_ref_derives_name_from_url():
    ref = PostRef.from_url("https://redd.it/Q1W2E3", title="Part 1")
    assert ref.name == "q1w2e3"
    assert PostRef(title="?", url="https://example.com/").name is None


def test_post_ref_rejects_mismatching_name():
    with pytest.raises(ValueError):
        PostRef(title="Part 1", url="https://redd.it/aaa", name="bbb")
