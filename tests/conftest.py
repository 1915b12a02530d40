import asyncio
from typing import Any, Callable, Dict, List

import pytest

from services.streamguide.settings import Settings
from services.streamguide.types import AvailabilityOffer, SearchCandidate, ServiceCount, TrendingItem


IMDB_URL = "https://www.imdb.com/title/tt1375666/"
RT_URL = "https://www.rottentomatoes.com/m/dune_part_two"
GOOGLE_URL = "https://www.google.com/search?q=inception+movie"

IMDB_HTML = """
<html><head><title>Inception (2010) - IMDb</title>
<meta property="og:type" content="video.movie"></head>
<body>
  <section class="hero">
    <h1 data-testid="hero__pageTitle"><span>Inception</span></h1>
    <div class="rating-wrap"><div data-testid="hero-rating-bar__user-rating">8.8</div></div>
  </section>
</body></html>
"""

RT_HTML = """
<html><head><title>Dune: Part Two - Rotten Tomatoes</title></head>
<body><main><div data-qa="score-panel">92%</div></main></body></html>
"""


def run(coro):
    return asyncio.run(coro)


def make_settings(**overrides) -> Settings:
    base = {"SEARCH_DEBOUNCE_MS": 10, "DISABLE_REDIS": True}
    base.update(overrides)
    return Settings(**base)


class FakeClient:
    """Canned stand-in for AvailabilityClient that records every call."""

    def __init__(self, results=None, offers=None, trending=None, services=None):
        self.results: Any = results if results is not None else []
        self.offers: Any = offers if offers is not None else []
        self.trending_items: Any = trending if trending is not None else []
        self.services: Any = services if services is not None else []
        self.calls: List[tuple] = []
        self.on_search: Callable[[str], Any] | None = None
        self.search_delays: Dict[str, float] = {}
        self.availability_delays: Dict[Any, float] = {}

    async def search(self, query):
        self.calls.append(("search", query))
        if self.on_search:
            self.on_search(query)
        if query in self.search_delays:
            await asyncio.sleep(self.search_delays[query])
        out = self.results(query) if callable(self.results) else self.results
        return out

    async def fetch_availability(self, content_id, content_type):
        self.calls.append(("availability", content_id, content_type))
        if content_id in self.availability_delays:
            await asyncio.sleep(self.availability_delays[content_id])
        return self.offers(content_id) if callable(self.offers) else self.offers

    async def trending(self, limit=None, service=None):
        self.calls.append(("trending", service))
        return self.trending_items

    async def trending_services(self, country=None):
        self.calls.append(("trending_services", country))
        return self.services


def candidate(id, title, content_type="movie", year=None) -> SearchCandidate:
    return SearchCandidate(id=id, title=title, content_type=content_type, year=year)


def offer(name, stream_type="subscription", link=None) -> AvailabilityOffer:
    return AvailabilityOffer(service_name=name, stream_type=stream_type, link=link)


@pytest.fixture()
def settings():
    return make_settings()


@pytest.fixture()
def inception_client():
    return FakeClient(
        results=[candidate(1, "Inception", "movie", 2010)],
        offers=[offer("MaxFlix", "subscription", "https://maxflix.example/inception")],
    )


@pytest.fixture()
def trending_client():
    return FakeClient(
        trending=[
            TrendingItem(id=7, title="Severance", content_type="show", year=2022, rank=1, services=["Apple TV+"]),
            TrendingItem(id=8, title="Dune: Part Two", content_type="movie", year=2024, rank=2),
        ],
        services=[ServiceCount(service_name="Netflix", title_count=40), ServiceCount(service_name="Apple TV+", title_count=12)],
        offers=[offer("Apple TV+")],
    )
