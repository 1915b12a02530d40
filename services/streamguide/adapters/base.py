from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from ..types import ContentType, ProbeSignal


@dataclass
class Page:
    url: str
    soup: BeautifulSoup

    @classmethod
    def from_html(cls, url: str, html: str) -> "Page":
        return cls(url=url, soup=BeautifulSoup(html, "html.parser"))

    @property
    def path(self) -> str:
        return urlparse(self.url).path or "/"

    @property
    def hostname(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    def query_param(self, name: str) -> str:
        values = parse_qs(urlparse(self.url).query).get(name)
        return values[0] if values else ""

    @property
    def document_title(self) -> str:
        t = self.soup.title
        return t.get_text().strip() if t else ""

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def meta_content(self, prop: str) -> str:
        el = self.soup.find("meta", attrs={"property": prop})
        return (el.get("content") or "") if el else ""


def text_of(el: Optional[Tag]) -> str:
    return el.get_text().strip() if el is not None else ""


def first_text(page: Page, selectors: Iterable[str]) -> str | None:
    """Text of the first selector that matches with non-blank text."""
    for sel in selectors:
        txt = text_of(page.select_one(sel))
        if txt:
            return txt
    return None


def first_match(page: Page, selectors: Iterable[str]) -> Optional[Tag]:
    for sel in selectors:
        el = page.select_one(sel)
        if el is not None:
            return el
    return None


def closest(el: Tag, name: str | None = None, class_: str | None = None) -> Optional[Tag]:
    """Nearest ancestor-or-self matching tag name or class."""
    node: Optional[Tag] = el
    while node is not None and isinstance(node, Tag):
        if (name is None or node.name == name) and (class_ is None or class_ in (node.get("class") or [])):
            return node
        node = node.parent
    return None


def strip_suffix(text: str, pattern: str) -> str:
    return re.sub(pattern, "", text, flags=re.IGNORECASE).strip()


class SiteAdapter(ABC):
    """Reads a probe signal out of one family of third-party pages.

    All methods only read the page; none of them mutate it or touch the network.
    """

    name: str = "?"

    @abstractmethod
    def is_eligible(self, page: Page) -> bool: ...

    @abstractmethod
    def extract_title(self, page: Page) -> str | None: ...

    @abstractmethod
    def infer_content_type(self, page: Page) -> ContentType: ...

    def preferred_anchor(self, page: Page) -> Optional[Tag]:
        return None

    def find_anchor(self, page: Page) -> Tag:
        return self.preferred_anchor(page) or page.body

    def probe(self, page: Page) -> ProbeSignal:
        return ProbeSignal(
            title=self.extract_title(page),
            content_type=self.infer_content_type(page),
            anchor=self.find_anchor(page),
        )
