from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .adapters.base import Page, SiteAdapter
from .adapters.registry import adapter_for_url
from .client import AvailabilityClient
from .dismissal import DismissalStore, KeyValueStore
from .grouping import group
from .logging_setup import set_page_url
from .matcher import select_best_match
from .metrics import WIDGET_OUTCOMES
from .settings import Settings, settings as default_settings
from .types import Failure, FailureKind, ProbeSignal, SearchCandidate
from .widget import (
    CLOSE_BUTTON_ID,
    CONTAINER_ID,
    MINIMIZED_CLASS,
    Failed,
    Idle,
    Loading,
    Rendered,
    WidgetView,
    render,
)

logger = logging.getLogger(__name__)


class InjectionState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    SKIPPED = "skipped"
    LOADING = "loading"
    RENDERED = "rendered"
    FAILED = "failed"


class SkipReason(str, Enum):
    ALREADY_INJECTED = "already_injected"
    INELIGIBLE = "ineligible"
    DISMISSED = "dismissed"
    NO_TITLE = "no_title"


@dataclass
class InjectionResult:
    state: InjectionState = InjectionState.IDLE
    view: WidgetView = field(default_factory=Idle)
    skip_reason: SkipReason | None = None
    failure: Failure | None = None
    probe: ProbeSignal | None = None
    match: SearchCandidate | None = None
    transitions: List[InjectionState] = field(default_factory=lambda: [InjectionState.IDLE])

    def _to(self, state: InjectionState) -> None:
        self.state = state
        self.transitions.append(state)


def find_container(page: Page) -> Optional[Tag]:
    return page.soup.find(id=CONTAINER_ID)


def paint(container: Tag, view: WidgetView) -> None:
    container.clear()
    fragment = BeautifulSoup(render(view), "html.parser")
    for node in list(fragment.contents):
        container.append(node.extract())


class InjectionOrchestrator:
    """Runs once per page load: checks, loading placeholder, search, match, availability, render."""

    def __init__(
        self,
        adapter: SiteAdapter,
        client: AvailabilityClient,
        dismissals: DismissalStore,
        settings: Settings | None = None,
    ):
        self.adapter = adapter
        self.client = client
        self.dismissals = dismissals
        self.settings = settings or default_settings

    def _skip(self, result: InjectionResult, reason: SkipReason) -> InjectionResult:
        logger.info("streamguide skipped: %s", reason.value, extra={"site": self.adapter.name})
        result.skip_reason = reason
        result._to(InjectionState.SKIPPED)
        WIDGET_OUTCOMES.labels(site=self.adapter.name, state=InjectionState.SKIPPED.value).inc()
        return result

    def _fail(self, result: InjectionResult, container: Tag, failure: Failure) -> InjectionResult:
        logger.info("streamguide failed: %s %s", failure.kind.value, failure.reason, extra={"site": self.adapter.name})
        result.failure = failure
        result.view = Failed()
        paint(container, result.view)
        result._to(InjectionState.FAILED)
        WIDGET_OUTCOMES.labels(site=self.adapter.name, state=InjectionState.FAILED.value).inc()
        return result

    async def run(self, page: Page) -> InjectionResult:
        set_page_url(page.url)
        result = InjectionResult()
        result._to(InjectionState.CHECKING)

        if find_container(page) is not None:
            return self._skip(result, SkipReason.ALREADY_INJECTED)
        if not self.adapter.is_eligible(page):
            return self._skip(result, SkipReason.INELIGIBLE)
        if self.dismissals.is_dismissed(page.path):
            return self._skip(result, SkipReason.DISMISSED)

        probe = self.adapter.probe(page)
        result.probe = probe
        if not probe.title:
            return self._skip(result, SkipReason.NO_TITLE)

        # Container and placeholder go in before the first await
        anchor = probe.anchor if probe.anchor is not None else page.body
        container = page.soup.new_tag("div", id=CONTAINER_ID)
        anchor.append(container)
        result.view = Loading()
        paint(container, result.view)
        result._to(InjectionState.LOADING)
        logger.info("streamguide searching", extra={"title": probe.title, "content_type": probe.content_type})

        candidates = await self.client.search(probe.title)
        if isinstance(candidates, Failure):
            return self._fail(result, container, candidates)
        match = select_best_match(candidates, probe.content_type)
        if match is None:
            return self._fail(result, container, Failure(FailureKind.EMPTY, "no search results"))
        result.match = match

        offers = await self.client.fetch_availability(match.id, match.content_type)
        if isinstance(offers, Failure):
            return self._fail(result, container, offers)
        if not offers and self.settings.empty_offers_as_failure:
            return self._fail(result, container, Failure(FailureKind.EMPTY, "no offers"))

        result.view = Rendered(
            title=match.title,
            groups=group(offers, drop_unknown=self.settings.drop_unknown_stream_types),
        )
        paint(container, result.view)
        result._to(InjectionState.RENDERED)
        WIDGET_OUTCOMES.labels(site=self.adapter.name, state=InjectionState.RENDERED.value).inc()
        logger.info("streamguide rendered", extra={"title": match.title, "offers": len(offers)})
        return result

    def dismiss(self, page: Page) -> bool:
        """Close-button handler: minimize the widget and remember it for this path.

        Returns False when there is no rendered widget with a close control.
        """
        container = find_container(page)
        if container is None or container.find(id=CLOSE_BUTTON_ID) is None:
            return False
        classes = list(container.get("class") or [])
        if MINIMIZED_CLASS not in classes:
            classes.append(MINIMIZED_CLASS)
        container["class"] = classes
        self.dismissals.set_dismissed(page.path)
        return True


def orchestrator_for(url: str, client: AvailabilityClient, store: KeyValueStore, settings: Settings | None = None) -> Optional[InjectionOrchestrator]:
    adapter = adapter_for_url(url)
    if adapter is None:
        return None
    return InjectionOrchestrator(adapter, client, DismissalStore(store, settings), settings)


async def inject(page: Page, client: AvailabilityClient, store: KeyValueStore, settings: Settings | None = None) -> Optional[InjectionResult]:
    """Content-script entry point for whatever site `page` belongs to."""
    orch = orchestrator_for(page.url, client, store, settings)
    if orch is None:
        return None
    return await orch.run(page)
