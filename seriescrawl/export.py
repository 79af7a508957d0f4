from __future__ import annotations

from dataclasses import asdict, dataclass, field
from html import escape
from typing import Any, Sequence

from seriescrawl.models import Post

TITLE_PAGE_ID = "titlepage"


@dataclass(frozen=True)
class ExportSection:
    id: str
    title: str
    content: str
    include_in_toc: bool = True


@dataclass(frozen=True)
class ExportDocument:
    """
    Input for the archive builder (e.g. an EPUB maker).

    Matches what the builder consumes: a title page plus ordered chapters
    of {title, content}.
    """

    title: str
    author: str
    title_page: ExportSection
    chapters: list[ExportSection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_title_page(title: str, author: str) -> ExportSection:
    content = (
        '<div style="text-align: center;">'
        f"<h1>{escape(title)}</h1>"
        f'<h3>by <a href="https://reddit.com/u/{escape(author)}">{escape(author)}</a></h3>'
        "</div>"
        '<div style="page-break-before:always;"></div>'
    )
    return ExportSection(id=TITLE_PAGE_ID, title=TITLE_PAGE_ID, content=content, include_in_toc=False)


def build_export_document(title: str, author: str, posts: Sequence[Post]) -> ExportDocument:
    """
    Assemble collected posts into an export document.

    - Keeps post order
    - Chapter ids are post names
    """
    chapters = [ExportSection(id=p.name, title=p.title, content=p.content) for p in posts]
    return ExportDocument(
        title=title,
        author=author,
        title_page=build_title_page(title, author),
        chapters=chapters,
    )
