"""
Tests for services.pagination (PaginationSession / SessionStore).

Loaders are fakes: a dict from token to page (or to an exception), so every
test controls exactly what each continuation returns.
"""

from __future__ import annotations

import asyncio

import pytest

from nodes import browse_document, carousel, continuation_document, two_row

from models.content import PaginatedResult, Song
from services.catalog_client import CatalogClient, CatalogFetchError, section_loader, song_loader
from services.pagination import PaginationSession, SessionStore
from utils.continuation import merge_sections
from utils.response_parser import songs_from_sections


def song(video_id: str) -> Song:
    return Song(id=video_id, title=f"Song {video_id}")


def page(ids: str, token: str | None = None) -> PaginatedResult:
    return PaginatedResult(items=tuple(song(i) for i in ids.split()), continuation_token=token)


class FakeLoader:
    """Returns pages by token and records every call."""

    def __init__(self, pages: dict) -> None:
        self.pages = pages
        self.calls: list[str | None] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, token: str | None) -> PaginatedResult:
        self.calls.append(token)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            result = self.pages[token]
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            self.in_flight -= 1


class EndlessLoader:
    """Every page brings one new song and a new token."""

    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, token: str | None) -> PaginatedResult:
        self.calls += 1
        n = 0 if token is None else int(token[1:]) + 1
        return page(f"p{n}", token=f"t{n}")


# =============================================================================
# Charts scenario
# =============================================================================


class TestChartsScenario:
    """Initial page, one useful continuation, then a repeated page."""

    @pytest.fixture
    def loader(self) -> FakeLoader:
        return FakeLoader({
            None: page("a b", token="t1"),
            "t1": page("b c", token="t2"),
            "t2": page("c", token="t3"),
        })

    async def test_start(self, loader: FakeLoader) -> None:
        session = PaginationSession(loader, label="charts")
        result = await session.start()

        assert [s.id for s in result.items] == ["a", "b"]
        assert result.has_more
        assert session.continuation_token == "t1"
        assert session.pages_loaded == 0

    async def test_full_walk(self, loader: FakeLoader) -> None:
        session = PaginationSession(loader, label="charts")
        await session.start()

        new_items = await session.load_more()
        assert [s.id for s in new_items] == ["c"]
        assert [s.id for s in session.items] == ["a", "b", "c"]
        assert session.has_more
        assert session.continuation_token == "t2"

        # página repetida: no agrega nada y corta aunque traiga token
        assert await session.load_more() == []
        assert not session.has_more
        assert session.continuation_token is None
        assert [s.id for s in session.items] == ["a", "b", "c"]

    async def test_has_more_is_monotonic(self, loader: FakeLoader) -> None:
        session = PaginationSession(loader)
        await session.start()
        await session.load_more()
        await session.load_more()
        calls = len(loader.calls)

        assert await session.load_more() == []
        assert not session.has_more
        assert len(loader.calls) == calls

    async def test_start_is_idempotent(self, loader: FakeLoader) -> None:
        session = PaginationSession(loader)
        await session.start()
        await session.start()
        assert loader.calls == [None]

    async def test_load_more_before_start_loads_first_page(self, loader: FakeLoader) -> None:
        session = PaginationSession(loader)
        items = await session.load_more()
        assert [s.id for s in items] == ["a", "b"]
        assert loader.calls == [None]


class TestEndOfPages:
    """Tests for the natural end of pagination."""

    async def test_last_page_without_token(self) -> None:
        loader = FakeLoader({None: page("a", token="t1"), "t1": page("b")})
        session = PaginationSession(loader)
        await session.start()

        assert [s.id for s in await session.load_more()] == ["b"]
        assert not session.has_more
        assert session.snapshot().continuation_token is None

    async def test_single_page(self) -> None:
        session = PaginationSession(FakeLoader({None: page("a")}))
        result = await session.start()
        assert not result.has_more
        assert await session.load_more() == []

    async def test_duplicates_in_first_page(self) -> None:
        session = PaginationSession(FakeLoader({None: page("a a b")}))
        await session.start()
        assert [s.id for s in session.items] == ["a", "b"]


# =============================================================================
# Errors / cancellation
# =============================================================================


class TestErrors:
    """A failed fetch leaves the session untouched and retryable."""

    async def test_fetch_error_keeps_state(self) -> None:
        loader = FakeLoader({None: page("a b", token="t1"), "t1": CatalogFetchError("timeout")})
        session = PaginationSession(loader)
        await session.start()

        with pytest.raises(CatalogFetchError):
            await session.load_more()

        assert [s.id for s in session.items] == ["a", "b"]
        assert session.has_more
        assert session.continuation_token == "t1"

        # reintento con el mismo token
        loader.pages["t1"] = page("c")
        assert [s.id for s in await session.load_more()] == ["c"]

    async def test_error_on_first_page(self) -> None:
        session = PaginationSession(FakeLoader({None: CatalogFetchError("down")}))
        with pytest.raises(CatalogFetchError):
            await session.start()
        assert session.items == ()


class TestCancellation:
    """Tests for cancel() / resume()."""

    async def test_cancel_stops_fetching(self) -> None:
        loader = FakeLoader({None: page("a", token="t1"), "t1": page("b")})
        session = PaginationSession(loader)
        await session.start()
        session.cancel()

        assert await session.load_more() == []
        assert loader.calls == [None]
        assert session.cancelled
        assert session.has_more

    async def test_resume(self) -> None:
        loader = FakeLoader({None: page("a", token="t1"), "t1": page("b")})
        session = PaginationSession(loader)
        await session.start()
        session.cancel()
        await session.load_more()
        session.resume()

        assert [s.id for s in await session.load_more()] == ["b"]
        assert [s.id for s in session.items] == ["a", "b"]


class TestSingleFlight:
    """Never more than one fetch in flight per session."""

    async def test_concurrent_load_more(self) -> None:
        loader = FakeLoader({
            None: page("a", token="t1"),
            "t1": page("b", token="t2"),
            "t2": page("c"),
        })
        session = PaginationSession(loader)
        await session.start()

        results = await asyncio.gather(session.load_more(), session.load_more(), session.load_more())

        assert loader.max_in_flight == 1
        assert loader.calls == [None, "t1", "t2"]
        assert [[s.id for s in r] for r in results] == [["b"], ["c"], []]
        assert [s.id for s in session.items] == ["a", "b", "c"]


# =============================================================================
# Prefetch
# =============================================================================


class TestPrefetch:
    """Tests for the bounded prefetch."""

    async def test_default_cap(self) -> None:
        loader = EndlessLoader()
        session = PaginationSession(loader, max_prefetch=4)
        await session.start()

        fetched = await session.prefetch()

        assert fetched == 4
        assert loader.calls == 5
        assert len(session.items) == 5
        assert session.has_more

    async def test_request_above_cap_is_capped(self) -> None:
        loader = EndlessLoader()
        session = PaginationSession(loader, max_prefetch=4)
        await session.start()
        assert await session.prefetch(10) == 4

    async def test_request_below_cap(self) -> None:
        session = PaginationSession(EndlessLoader(), max_prefetch=4)
        await session.start()
        assert await session.prefetch(2) == 2
        assert len(session.items) == 3

    async def test_stops_at_end(self) -> None:
        loader = FakeLoader({None: page("a", token="t1"), "t1": page("b")})
        session = PaginationSession(loader, max_prefetch=4)
        await session.start()
        assert await session.prefetch() == 1
        assert not session.has_more

    async def test_stops_on_error(self) -> None:
        loader = FakeLoader({None: page("a", token="t1"), "t1": CatalogFetchError("boom")})
        session = PaginationSession(loader, max_prefetch=4)
        await session.start()
        assert await session.prefetch() == 0
        assert [s.id for s in session.items] == ["a"]
        assert session.has_more


# =============================================================================
# SessionStore
# =============================================================================


class TestSessionStore:
    """Tests for the session registry."""

    def test_open_and_get(self) -> None:
        store = SessionStore()
        session = store.open(PaginationSession(EndlessLoader()))
        assert store.get(session.id) is session
        assert store.get("missing") is None
        assert len(store) == 1

    def test_close_cancels(self) -> None:
        store = SessionStore()
        session = store.open(PaginationSession(EndlessLoader()))
        assert store.close(session.id)
        assert session.cancelled
        assert store.get(session.id) is None
        assert not store.close(session.id)

    def test_evicts_least_recently_used(self) -> None:
        store = SessionStore(max_sessions=2)
        first = store.open(PaginationSession(EndlessLoader()))
        second = store.open(PaginationSession(EndlessLoader()))
        store.get(first.id)
        third = store.open(PaginationSession(EndlessLoader()))

        assert len(store) == 2
        assert store.get(second.id) is None
        assert second.cancelled
        assert store.get(first.id) is first
        assert store.get(third.id) is third


# =============================================================================
# Charts scenario over real documents (fetch -> parse -> merge)
# =============================================================================


class DocumentInnerTube:
    """Fake InnerTube: browse() answers from a dict keyed by browseId or token."""

    def __init__(self, documents: dict) -> None:
        self.documents = documents

    def browse(self, browse_id=None, params=None, continuation=None):
        return self.documents[continuation or browse_id]


def charts_documents(next_token: str | None) -> dict:
    return {
        "FEmusic_charts": browse_document(
            [carousel("Charts", [two_row("A", video_id="a"), two_row("B", video_id="b")])],
            token="t1",
        ),
        "t1": continuation_document(
            [carousel("Charts", [two_row("B", video_id="b"), two_row("C", video_id="c")])],
            token=next_token,
        ),
    }


class TestChartsDocuments:
    """Initial Charts carousel (a, b) + continuation repeating b and adding c."""

    async def test_section_session_keeps_unique_songs(self) -> None:
        client = CatalogClient(innertube=DocumentInnerTube(charts_documents("t2")))
        session = PaginationSession(section_loader(client, "FEmusic_charts"), merge=merge_sections)

        first = await session.start()
        assert len(first.items) == 1
        assert first.items[0].is_chart
        assert [s.id for s in first.items[0].items] == ["a", "b"]

        delta = await session.load_more()
        assert [[s.id for s in section.items] for section in delta] == [["c"]]
        assert delta[0].id == first.items[0].id

        assert len(session.items) == 1
        assert [s.id for s in songs_from_sections(session.items)] == ["a", "b", "c"]
        assert session.has_more
        assert session.continuation_token == "t2"

    async def test_has_more_follows_continuation_token(self) -> None:
        client = CatalogClient(innertube=DocumentInnerTube(charts_documents(None)))
        session = PaginationSession(section_loader(client, "FEmusic_charts"), merge=merge_sections)
        await session.start()

        await session.load_more()

        assert [s.id for s in songs_from_sections(session.items)] == ["a", "b", "c"]
        assert not session.has_more

    async def test_song_session(self) -> None:
        client = CatalogClient(innertube=DocumentInnerTube(charts_documents("t2")))
        session = PaginationSession(song_loader(client, "FEmusic_charts"))

        first = await session.start()
        assert [s.id for s in first.items] == ["a", "b"]
        assert first.continuation_token == "t1"

        assert [s.id for s in await session.load_more()] == ["c"]
        assert [s.id for s in session.items] == ["a", "b", "c"]
        assert session.continuation_token == "t2"
