from __future__ import annotations

from typing import Optional

from bs4 import Tag

from .base import Page, SiteAdapter, first_match, first_text, strip_suffix
from ..types import ContentType

TITLE_SELECTORS = (
    '[data-qa="score-panel-title"]',
    '[data-qa="score-panel-series-title"]',
    'h1[slot="title"]',
    'h1[slot="titleIntro"]',
    "h1.title",
    ".scoreboard__title",
    "h1",
)

ANCHOR_SELECTORS = (
    '[data-qa="where-to-watch-section"]',
    '[data-qa="score-panel"]',
    ".scoreboard",
    'section[data-qa="critics-score"]',
    "aside",
    "main",
    "#main-page-content",
    "body",
)


class RottenTomatoesAdapter(SiteAdapter):
    """Reviews-aggregator pages: /m/<slug> for movies, /tv/<slug> for series."""

    name = "rottentomatoes"

    def is_eligible(self, page: Page) -> bool:
        return page.path.startswith("/m/") or page.path.startswith("/tv/")

    def extract_title(self, page: Page) -> str | None:
        title = first_text(page, TITLE_SELECTORS)
        if title:
            return title
        return strip_suffix(page.document_title, r"\s*-\s*Rotten Tomatoes$") or None

    def infer_content_type(self, page: Page) -> ContentType:
        return "show" if page.path.startswith("/tv/") else "movie"

    def preferred_anchor(self, page: Page) -> Optional[Tag]:
        return first_match(page, ANCHOR_SELECTORS)
