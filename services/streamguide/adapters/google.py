from __future__ import annotations

import re
from typing import Optional

from bs4 import Tag

from .base import Page, SiteAdapter, closest, first_text
from ..types import ContentType

QUERY_KEYWORDS = ("movie", "film", "watch", "streaming", "netflix", "hulu", "disney+", "hbo", "amazon prime")

KNOWLEDGE_PANEL_SELECTORS = (
    '[data-attrid="kc:/film/film:reviews"]',
    '[data-attrid="kc:/tv/tv_program:reviews"]',
    '[data-attrid="hw:/collection/films:watch providers"]',
    '[data-attrid="kc:/film/film:director"]',
    '[data-attrid="kc:/tv/tv_program:seasons"]',
)

_TRAILING_KEYWORD = re.compile(r"\s+(movie|film|show|tv|watch|streaming|netflix|where to watch)$", re.IGNORECASE)


def clean_query(query: str) -> str:
    """'dune part two movie streaming' -> 'dune part two'"""
    q = query.strip()
    while True:
        stripped = _TRAILING_KEYWORD.sub("", q).strip()
        if stripped == q:
            return q
        q = stripped


class GoogleAdapter(SiteAdapter):
    """Search result pages. Only shown for queries that look like a movie/show lookup."""

    name = "google"

    def has_knowledge_panel(self, page: Page) -> bool:
        return any(page.select_one(sel) is not None for sel in KNOWLEDGE_PANEL_SELECTORS)

    def is_eligible(self, page: Page) -> bool:
        if not page.path.startswith("/search"):
            return False
        query = page.query_param("q").lower()
        if any(kw in query for kw in QUERY_KEYWORDS):
            return True
        return self.has_knowledge_panel(page)

    def extract_title(self, page: Page) -> str | None:
        title = first_text(page, ('[data-attrid="title"]',))
        if title:
            return title
        return clean_query(page.query_param("q")) or None

    def infer_content_type(self, page: Page) -> ContentType:
        # The result page gives no reliable movie/show signal
        return "movie"

    def preferred_anchor(self, page: Page) -> Optional[Tag]:
        for sel in KNOWLEDGE_PANEL_SELECTORS[:2]:
            el = page.select_one(sel)
            if el is not None:
                kp = closest(el, class_="kp-wholepage")
                if kp is not None:
                    return kp
        for sel in (".kp-wholepage", "#rhs", "#search"):
            el = page.select_one(sel)
            if el is not None:
                return el
        return None
