"""
Post identity helpers for r/HFY.

A post is named by a lowercase alphanumeric token. Links reach us either
shortened (https://redd.it/<name>) or in long form
(https://www.reddit.com/r/HFY/comments/<name>/<slug>/).
"""
from __future__ import annotations

import re
from typing import Optional

SUBREDDIT = "HFY"

_SHORT_LINK_RE = re.compile(r"redd\.it/([A-Za-z0-9]+)", re.IGNORECASE)
_LONG_LINK_RE = re.compile(rf"r/{SUBREDDIT}/comments/([A-Za-z0-9]+)", re.IGNORECASE)


def name_from_url(url: Optional[str]) -> Optional[str]:
    """Return the post name for a short or long link, or None if it is not a post link."""
    if not url:
        return None
    for pattern in (_SHORT_LINK_RE, _LONG_LINK_RE):
        m = pattern.search(url)
        if m:
            return m.group(1).lower()
    return None


def url_from_name(name: str) -> str:
    return f"https://www.reddit.com/r/{SUBREDDIT}/comments/{name}/"


def unshorten(url: Optional[str]) -> Optional[str]:
    """
    Map any accepted link form to the canonical long URL.

    redd.it links cannot be fetched as JSON directly, but since we know the
    subreddit the long form can be rebuilt from the name. Using one form
    also keeps one cache entry per post.
    """
    name = name_from_url(url)
    if name is None:
        return None
    return url_from_name(name)
