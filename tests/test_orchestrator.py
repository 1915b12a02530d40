from services.streamguide.adapters.base import Page
from services.streamguide.adapters.google import GoogleAdapter
from services.streamguide.adapters.imdb import IMDbAdapter
from services.streamguide.adapters.rottentomatoes import RottenTomatoesAdapter
from services.streamguide.dismissal import DismissalStore, MemoryStore
from services.streamguide.orchestrator import InjectionOrchestrator, InjectionState, SkipReason, find_container, inject
from services.streamguide.types import Failure, FailureKind
from services.streamguide.widget import Failed, Rendered

from conftest import IMDB_HTML, IMDB_URL, RT_HTML, RT_URL, FakeClient, candidate, make_settings, offer, run


def _orch(client, adapter=None, settings=None, store=None):
    settings = settings or make_settings()
    return InjectionOrchestrator(adapter or IMDbAdapter(), client, DismissalStore(store if store is not None else MemoryStore(), settings), settings)


def _section_titles(container):
    return [el.get_text() for el in container.select(".streamguide-section-title")]


def test_inception_renders_streaming_section(inception_client):
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    result = run(_orch(inception_client).run(page))
    assert result.state == InjectionState.RENDERED
    assert result.transitions == [InjectionState.IDLE, InjectionState.CHECKING, InjectionState.LOADING, InjectionState.RENDERED]
    container = find_container(page)
    assert _section_titles(container) == ["Streaming"]
    assert container.select_one(".streamguide-service-name").get_text() == "MaxFlix"
    assert container.select_one(".streamguide-subtitle").get_text() == "Inception"
    assert inception_client.calls == [("search", "Inception"), ("availability", 1, "movie")]


def test_container_is_mounted_at_anchor(inception_client):
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    run(_orch(inception_client).run(page))
    assert find_container(page).parent["class"] == ["rating-wrap"]


def test_loading_placeholder_exists_before_first_network_call():
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    seen = {}
    client = FakeClient(results=[candidate(1, "Inception")], offers=[offer("MaxFlix")])

    def on_search(query):
        container = find_container(page)
        seen["container"] = container is not None
        seen["loading"] = container is not None and container.select_one(".streamguide-loading") is not None

    client.on_search = on_search
    run(_orch(client).run(page))
    assert seen == {"container": True, "loading": True}


def test_zero_candidates_fails_without_rendering():
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    client = FakeClient(results=[])
    result = run(_orch(client).run(page))
    assert result.state == InjectionState.FAILED
    assert InjectionState.RENDERED not in result.transitions
    assert isinstance(result.view, Failed)
    assert result.failure.kind == FailureKind.EMPTY
    assert find_container(page).select_one(".streamguide-error") is not None
    assert find_container(page).select_one(".streamguide-powered") is not None
    assert client.calls == [("search", "Inception")]


def test_search_failure_and_availability_failure():
    for client in (
        FakeClient(results=Failure(FailureKind.NETWORK, "boom")),
        FakeClient(results=[candidate(1, "Inception")], offers=Failure(FailureKind.NETWORK, "boom")),
    ):
        page = Page.from_html(IMDB_URL, IMDB_HTML)
        result = run(_orch(client).run(page))
        assert result.state == InjectionState.FAILED
        assert result.failure.kind == FailureKind.NETWORK


def test_zero_offers_renders_empty_state_by_default():
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    client = FakeClient(results=[candidate(1, "Inception")], offers=[])
    result = run(_orch(client).run(page))
    assert result.state == InjectionState.RENDERED
    assert isinstance(result.view, Rendered) and result.view.is_empty
    assert find_container(page).select_one(".streamguide-empty") is not None


def test_zero_offers_as_failure_when_configured():
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    client = FakeClient(results=[candidate(1, "Inception")], offers=[])
    result = run(_orch(client, settings=make_settings(EMPTY_OFFERS_AS_FAILURE=True)).run(page))
    assert result.state == InjectionState.FAILED
    assert result.failure.kind == FailureKind.EMPTY


def test_unknown_stream_type_shown_as_streaming_unless_lossy():
    client = FakeClient(results=[candidate(1, "Inception")], offers=[offer("Odd", "svod")])
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    run(_orch(client).run(page))
    assert _section_titles(find_container(page)) == ["Streaming"]

    page = Page.from_html(IMDB_URL, IMDB_HTML)
    run(_orch(client, settings=make_settings(DROP_UNKNOWN_STREAM_TYPES=True)).run(page))
    assert find_container(page).select_one(".streamguide-empty") is not None


def test_matcher_prefers_page_content_type():
    tv_html = IMDB_HTML.replace("video.movie", "video.tv_show")
    page = Page.from_html(IMDB_URL, tv_html)
    client = FakeClient(results=[candidate(1, "Inception", "movie"), candidate(2, "Inception", "show")], offers=[offer("X")])
    result = run(_orch(client).run(page))
    assert result.match.id == 2
    assert client.calls[-1] == ("availability", 2, "show")


def test_second_run_is_skipped_without_network(inception_client):
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    orch = _orch(inception_client)
    run(orch.run(page))
    calls = list(inception_client.calls)
    again = run(orch.run(page))
    assert again.state == InjectionState.SKIPPED
    assert again.skip_reason == SkipReason.ALREADY_INJECTED
    assert len(page.soup.find_all(id="streamguide-container")) == 1
    assert inception_client.calls == calls


def test_skips_ineligible_dismissed_and_titleless(inception_client):
    settings = make_settings()
    store = MemoryStore()

    page = Page.from_html("https://www.imdb.com/chart/top/", IMDB_HTML)
    assert run(_orch(inception_client, store=store).run(page)).skip_reason == SkipReason.INELIGIBLE

    DismissalStore(store, settings).set_dismissed("/title/tt1375666/")
    page = Page.from_html(IMDB_URL + "?ref_=nv", IMDB_HTML)
    assert run(_orch(inception_client, settings=settings, store=store).run(page)).skip_reason == SkipReason.DISMISSED

    page = Page.from_html("https://www.imdb.com/title/tt0000001/", "<html><body></body></html>")
    assert run(_orch(inception_client, store=store).run(page)).skip_reason == SkipReason.NO_TITLE
    assert find_container(page) is None
    assert inception_client.calls == []


def test_reviews_page_title_from_document_title():
    page = Page.from_html(RT_URL, RT_HTML)
    client = FakeClient(results=[candidate(5, "Dune: Part Two", "movie", 2024)], offers=[offer("MaxFlix")])
    result = run(_orch(client, adapter=RottenTomatoesAdapter()).run(page))
    assert result.probe.title == "Dune: Part Two"
    assert client.calls[0] == ("search", "Dune: Part Two")
    assert result.state == InjectionState.RENDERED


def test_dismiss_minimizes_and_records_path(inception_client):
    store = MemoryStore()
    settings = make_settings()
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    orch = _orch(inception_client, settings=settings, store=store)
    run(orch.run(page))
    assert orch.dismiss(page) is True
    container = find_container(page)
    assert "minimized" in container["class"]
    assert DismissalStore(store, settings).is_dismissed("/title/tt1375666/")


def test_dismiss_unavailable_on_failed_widget():
    page = Page.from_html(IMDB_URL, IMDB_HTML)
    store = MemoryStore()
    orch = _orch(FakeClient(results=[]), store=store)
    run(orch.run(page))
    assert orch.dismiss(page) is False
    assert "minimized" not in (find_container(page).get("class") or [])
    assert not DismissalStore(store, make_settings()).is_dismissed("/title/tt1375666/")


def test_inject_dispatches_by_url():
    page = Page.from_html("https://www.google.com/search?q=inception+movie", "<body><div id='search'></div></body>")
    client = FakeClient(results=[candidate(1, "Inception")], offers=[offer("MaxFlix")])
    result = run(inject(page, client, MemoryStore(), make_settings()))
    assert result.state == InjectionState.RENDERED
    assert find_container(page).parent["id"] == "search"

    other = Page.from_html("https://example.com/", "<body></body>")
    assert run(inject(other, client, MemoryStore(), make_settings())) is None


def test_google_adapter_always_wants_movie():
    page = Page.from_html("https://www.google.com/search?q=severance+tv+show+streaming", "<body></body>")
    client = FakeClient(results=[candidate(1, "Severance", "show"), candidate(2, "Severance", "movie")], offers=[offer("X")])
    result = run(_orch(client, adapter=GoogleAdapter()).run(page))
    assert result.probe.title == "severance"
    assert result.match.id == 2
