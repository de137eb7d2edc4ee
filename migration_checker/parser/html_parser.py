# === FILE: migration_checker/parser/html_parser.py ===
"""HTML extraction for migration_checker.

The crawler and validator never look at markup themselves; they consume a
:class:`ParsedPage` with exactly three things in it:

* title    : text of the first ``<title>``, or ``None`` if absent/blank.
* links    : absolute http(s) URLs from ``<a href="…">`` (fragment dropped,
  trailing slash stripped, deduplicated, document order kept).
* body_text: visible ``<body>`` text with scripts/styles removed and
  whitespace collapsed; used for soft-404 detection.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

__all__: Sequence[str] = ("ParsedPage", "parse_html", "extract_title", "extract_body_text", "absolute_link")

_SKIP_PREFIXES = ("javascript:", "mailto:", "tel:", "data:", "#")
_WS_RE = re.compile(r"\s+")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    title: Optional[str]
    links: list[str] = field(default_factory=list)
    body_text: str = ""

    @property
    def content_length(self) -> int:
        return len(self.body_text)


def absolute_link(href: str, base_url: str) -> Optional[str]:
    """Resolve *href* against *base_url*; ``None`` for non-navigational links."""
    href = href.strip()
    if not href or href.lower().startswith(_SKIP_PREFIXES):
        return None
    try:
        parsed = urlparse(urljoin(base_url, href))
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    path = parsed.path
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    return urlunparse(parsed._replace(path=path, fragment=""))


def _title(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return tag.get_text().strip() or None


def _body_text(soup: BeautifulSoup) -> str:
    for element in soup(["script", "style", "noscript"]):
        element.decompose()
    root = soup.body or soup
    return _WS_RE.sub(" ", root.get_text(" ")).strip()


def parse_html(html: str, base_url: str) -> ParsedPage:
    """Extract title, links and body text from *html* served at *base_url*."""
    soup = BeautifulSoup(html, "html.parser")
    title = _title(soup)

    seen: set[str] = set()
    links: list[str] = []
    for tag in soup.find_all("a", href=True):
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        link = absolute_link(href, base_url)
        if link and link not in seen:
            seen.add(link)
            links.append(link)

    return ParsedPage(title=title, links=links, body_text=_body_text(soup))


def extract_title(html: str) -> Optional[str]:
    """Only the ``<title>`` text (validation does not need links)."""
    return _title(BeautifulSoup(html, "html.parser"))


def extract_body_text(html: str) -> str:
    return _body_text(BeautifulSoup(html, "html.parser"))
