from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .adapters.base import Page
from .client import AvailabilityClient
from .dismissal import KeyValueStore, open_store
from .orchestrator import InjectionOrchestrator, InjectionResult, orchestrator_for
from .settings import Settings

logger = logging.getLogger(__name__)


class Tab:
    """A browser tab: a URL, the HTML the site serves for it, and the page's own storage.

    Every `load()` parses a fresh document and runs the content script once, like a real page load.
    """

    def __init__(
        self,
        url: str,
        html: str,
        client: AvailabilityClient,
        storage: KeyValueStore | None = None,
        settings: Settings | None = None,
        tab_id: int = 0,
    ):
        self.id = tab_id
        self.url = url
        self.html = html
        self.client = client
        self.storage = storage if storage is not None else open_store(settings)
        self.settings = settings
        self.page: Optional[Page] = None
        self.orchestrator: Optional[InjectionOrchestrator] = None
        self.last_result: Optional[InjectionResult] = None
        self.loads = 0

    async def load(self) -> Optional[InjectionResult]:
        self.loads += 1
        self.page = Page.from_html(self.url, self.html)
        self.orchestrator = orchestrator_for(self.url, self.client, self.storage, self.settings)
        self.last_result = await self.orchestrator.run(self.page) if self.orchestrator else None
        return self.last_result

    async def reload(self) -> Optional[InjectionResult]:
        return await self.load()

    def click_close(self) -> bool:
        if self.orchestrator is None or self.page is None:
            return False
        return self.orchestrator.dismiss(self.page)


class Browser:
    def __init__(self, tabs: List[Tab] | None = None):
        self.tabs: List[Tab] = list(tabs or [])
        self.active_index = 0

    def open(self, tab: Tab) -> Tab:
        tab.id = len(self.tabs)
        self.tabs.append(tab)
        self.active_index = tab.id
        return tab

    def active_tab(self) -> Optional[Tab]:
        if 0 <= self.active_index < len(self.tabs):
            return self.tabs[self.active_index]
        return None

    async def execute_in_tab(self, tab: Tab, func: Callable[..., Any], *args: Any) -> Any:
        """Run `func(tab, *args)` in the tab's context; awaits it when it returns a coroutine."""
        logger.debug("executing script in tab %s", tab.id)
        out = func(tab, *args)
        if hasattr(out, "__await__"):
            out = await out
        return out
