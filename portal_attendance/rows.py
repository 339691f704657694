"""
Table-row helpers shared by the course-content and lab-record parsers.

The portal renders everything as plain <tr>/<td> rows without ids or
classes, so both parsers walk rows in document order and classify each one
by its text alone.
"""
from __future__ import annotations

import re
from typing import Iterator, List

from bs4 import BeautifulSoup, Tag  # type: ignore[import]
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction  # type: ignore[import]

HEADER_MARKER = "S.NO"
NON_DATA_MARKERS = ("TOPICS COVERED",)

_WS_RE = re.compile(r"\s+")
_NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)


def make_soup(html: str | None) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def iter_rows(html: str | BeautifulSoup | None) -> Iterator[Tag]:
    """
    Yield every <tr> in document order.

    html.parser nests a row whose </tr> was left out inside the row before
    it, and a cell may wrap a whole table. Rows therefore overlap in the
    tree; row_text() and row_cells() read only a row's own content.
    """
    soup = html if isinstance(html, BeautifulSoup) else make_soup(html)
    yield from soup.find_all("tr")


def collapse_ws(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def _own_strings(tag: Tag, owner: str) -> Iterator[str]:
    """Text under tag whose nearest enclosing <owner> element is tag itself."""
    for s in tag.find_all(string=True):
        if isinstance(s, _NON_TEXT):
            continue
        if s.parent is not None and s.parent.name in ("script", "style"):
            continue
        if s.find_parent(owner) is not tag:
            continue
        s = s.strip()
        if s:
            yield s


def row_text(tr: Tag) -> str:
    """Row text without markup, single-spaced, trimmed and upper-cased."""
    return collapse_ws(" ".join(_own_strings(tr, "tr"))).upper()


def row_cells(tr: Tag) -> List[str]:
    """Stripped text of each <td> cell of this row, original case."""
    return [
        collapse_ws(" ".join(_own_strings(td, "td")))
        for td in tr.find_all("td")
        if td.find_parent("tr") is tr
    ]


def is_skippable(text: str) -> bool:
    """Empty rows, the S.No column header and topic rows carry no attendance."""
    if not text:
        return True
    if text.startswith(HEADER_MARKER):
        return True
    return any(marker in text for marker in NON_DATA_MARKERS)


def iter_row_texts(html: str | BeautifulSoup | None) -> Iterator[str]:
    """Tokenized text of every row that may hold attendance information."""
    for tr in iter_rows(html):
        text = row_text(tr)
        if is_skippable(text):
            continue
        yield text
