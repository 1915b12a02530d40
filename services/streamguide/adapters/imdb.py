from __future__ import annotations

import re
from typing import Optional

from bs4 import Tag

from .base import Page, SiteAdapter, closest, first_text, strip_suffix
from ..types import ContentType

TITLE_SELECTORS = (
    '[data-testid="hero__pageTitle"]',
    'h1[data-testid="hero-title-block__title"]',
    "h1",
)

_TITLE_PATH = re.compile(r"^/title/tt\d+")


class IMDbAdapter(SiteAdapter):
    """Title-detail pages (imdb.com/title/tt...)."""

    name = "imdb"

    def is_eligible(self, page: Page) -> bool:
        return bool(_TITLE_PATH.match(page.path))

    def extract_title(self, page: Page) -> str | None:
        title = first_text(page, TITLE_SELECTORS)
        if title:
            return title
        # "Inception (2010) - IMDb", "Fargo (TV Series 2014–2024) - IMDb"
        doc = strip_suffix(page.document_title, r"\s*-\s*IMDb$")
        doc = strip_suffix(doc, r"\s*\([^()]*\d{4}[^()]*\)$")
        return doc or None

    def infer_content_type(self, page: Page) -> ContentType:
        if "tv" in page.meta_content("og:type"):
            return "show"
        if page.select_one('[data-testid="episodes-header"]') is not None:
            return "show"
        return "movie"

    def preferred_anchor(self, page: Page) -> Optional[Tag]:
        watch = page.select_one('[data-testid="tm-box-watch-options"]')
        if watch is not None and watch.parent is not None:
            return watch.parent

        rating = page.select_one('[data-testid="hero-rating-bar__user-rating"]')
        if rating is not None:
            div = closest(rating, "div")
            if div is not None and div.parent is not None:
                return div.parent

        hero = page.select_one('[data-testid="hero-title-block__title"]')
        if hero is not None:
            return closest(hero, "section") or hero.parent
        return None
