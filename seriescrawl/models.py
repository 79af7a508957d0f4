from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

from seriescrawl.names import name_from_url, url_from_name


@dataclass(frozen=True)
class PostRef:
    """Reference to a series part, not fetched yet."""

    title: str
    url: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        derived = name_from_url(self.url)
        if self.name is None:
            object.__setattr__(self, "name", derived)
        elif self.name != derived:
            raise ValueError(f"PostRef name {self.name!r} does not match url {self.url!r}")

    @classmethod
    def from_url(cls, url: str, title: str = "") -> "PostRef":
        return cls(title=title, url=url)


@dataclass(frozen=True)
class Post:
    """Fully collected post. `content` is the decoded HTML body."""

    author: str
    title: str
    name: str
    content: str
    url: str

    def with_title(self, title: str) -> "Post":
        return dataclasses.replace(self, title=title)

    def to_ref(self) -> PostRef:
        # payload url is not always a comments link (e.g. link posts)
        return PostRef(title=self.title, url=url_from_name(self.name))


@dataclass(frozen=True)
class Series:
    title: str
    author: str
    parts: list[PostRef] = field(default_factory=list)
