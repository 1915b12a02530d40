from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal

from .adapters.registry import is_supported_url
from .client import AvailabilityClient
from .dismissal import DismissalStore
from .grouping import GroupedOffers, group
from .host import Browser, Tab
from .matcher import select_best_match
from .settings import Settings, settings as default_settings
from .types import Failure, SearchCandidate, ServiceCount, TrendingItem
from .util import Debouncer, path_of

logger = logging.getLogger(__name__)

SEARCHING = "Searching..."
NO_RESULTS = "No results found"
SEARCH_FAILED = "Search failed. Please try again."
LOADING_STREAMING = "Loading streaming options..."
NO_STREAMING = "No streaming options found"
LOADING_TRENDING = "Loading trending titles..."
TRENDING_FAILED = "Could not load trending titles"

PopupTab = Literal["search", "trending"]


def result_meta(item: SearchCandidate | TrendingItem) -> str:
    kind = "Movie" if item.content_type == "movie" else "TV Show"
    return f"{kind} • {item.year}" if item.year else kind


@dataclass
class PopupState:
    tab: PopupTab = "search"
    query: str = ""
    status: str | None = None
    results: List[SearchCandidate] = field(default_factory=list)
    selected_index: int | None = None
    selected_title: str | None = None
    availability: GroupedOffers | None = None
    availability_status: str | None = None
    services: List[ServiceCount] = field(default_factory=list)
    service_filter: str | None = None
    trending: List[TrendingItem] = field(default_factory=list)
    trending_status: str | None = None
    show_widget_visible: bool = False


class PopupController:
    """State and event handlers for one popup session."""

    def __init__(self, client: AvailabilityClient, browser: Browser | None = None, settings: Settings | None = None):
        self.client = client
        self.browser = browser
        self.settings = settings or default_settings
        self.state = PopupState()
        self.debouncer = Debouncer(self.settings.search_debounce_ms / 1000.0)
        self._search_seq = 0
        self._select_seq = 0
        self._trending_seq = 0

    # --- supported site ---

    def check_supported_site(self) -> bool:
        tab = self.browser.active_tab() if self.browser else None
        self.state.show_widget_visible = bool(tab and tab.url and is_supported_url(tab.url))
        return self.state.show_widget_visible

    # --- search ---

    def on_input(self, text: str) -> None:
        """Keystroke handler. Must be called from a running event loop."""
        query = text.strip()
        self.state.query = query
        self.debouncer.cancel()
        self._search_seq += 1
        if len(query) < self.settings.min_query_length:
            self.state.status = None
            self.state.results = []
            self._clear_selection()
            return
        self.state.status = SEARCHING
        self.debouncer.schedule(self._run_search, query, self._search_seq)

    async def _run_search(self, query: str, seq: int) -> None:
        data = await self.client.search(query)
        if seq != self._search_seq:
            logger.debug("discarding stale search response", extra={"query": query, "seq": seq})
            return
        if isinstance(data, Failure):
            self.state.results = []
            self._clear_selection()
            self.state.status = SEARCH_FAILED
            return
        self.show_results(data)

    def show_results(self, results: List[SearchCandidate]) -> None:
        self.state.results = list(results[: self.settings.popup_max_results])
        self._clear_selection()
        self.state.status = None if self.state.results else NO_RESULTS

    def _clear_selection(self) -> None:
        # an availability fetch still in flight for the old selection must not land
        self._select_seq += 1
        self.state.selected_index = None
        self.state.selected_title = None
        self.state.availability = None
        self.state.availability_status = None

    async def wait_idle(self) -> None:
        await self.debouncer.drain()

    async def on_enter(self) -> None:
        if not self.state.results:
            return
        best = select_best_match(self.state.results, None)
        await self.select_result(self.state.results.index(best))

    async def select_result(self, index: int) -> None:
        if not 0 <= index < len(self.state.results):
            return
        self.state.selected_index = index
        await self._show_availability(self.state.results[index])

    # --- trending ---

    async def switch_tab(self, tab: PopupTab) -> None:
        self.state.tab = tab
        if tab == "trending" and not self.state.trending:
            await self.load_services()
            await self.load_trending(self.state.service_filter)

    async def load_services(self, country: str | None = None) -> None:
        data = await self.client.trending_services(country)
        self.state.services = [] if isinstance(data, Failure) else list(data)

    async def load_trending(self, service: str | None = None) -> None:
        self._trending_seq += 1
        seq = self._trending_seq
        self.state.service_filter = service
        self.state.trending_status = LOADING_TRENDING
        data = await self.client.trending(service=service)
        if seq != self._trending_seq:
            return
        if isinstance(data, Failure):
            self.state.trending = []
            self.state.trending_status = TRENDING_FAILED
            return
        self.state.trending = list(data)
        self.state.trending_status = None if data else NO_RESULTS

    async def select_trending(self, index: int) -> None:
        # identity is known, so no matching step
        if 0 <= index < len(self.state.trending):
            await self._show_availability(self.state.trending[index])

    async def _show_availability(self, item: SearchCandidate | TrendingItem) -> None:
        self._select_seq += 1
        seq = self._select_seq
        self.state.selected_title = item.title
        self.state.availability = None
        self.state.availability_status = LOADING_STREAMING
        offers = await self.client.fetch_availability(item.id, item.content_type)
        if seq != self._select_seq:
            logger.debug("discarding stale availability response", extra={"title": item.title})
            return
        if isinstance(offers, Failure) or not offers:
            self.state.availability_status = NO_STREAMING
            return
        self.state.availability = group(offers, drop_unknown=self.settings.drop_unknown_stream_types)
        self.state.availability_status = None

    # --- show widget again ---

    async def show_widget(self) -> bool:
        """Clear the active tab's dismissal flag and reload it."""
        tab = self.browser.active_tab() if self.browser else None
        if tab is None or not tab.url:
            return False
        await self.browser.execute_in_tab(tab, _clear_and_reload, path_of(tab.url), self.settings)
        return True


async def _clear_and_reload(tab: Tab, path: str, settings: Settings) -> None:
    DismissalStore(tab.storage, settings).clear_dismissed(path)
    await tab.reload()
