"""
Tests for utils.continuation (token extraction and page merging).
"""

from __future__ import annotations

from nodes import browse_document, continuation_document, continuation_item

from models.content import Section, Song
from utils.continuation import extract_continuation_token, extract_token, merge_items, merge_page, merge_sections


def _identity(item: str) -> str:
    return item


class TestMergePage:
    """Tests for merge_page()."""

    def test_appends_only_new_items(self) -> None:
        assert merge_page(["A", "B"], ["B", "C"], _identity) == ["A", "B", "C"]

    def test_repeated_page_adds_nothing(self) -> None:
        assert merge_page(["A", "B"], ["A", "B"], _identity) == ["A", "B"]

    def test_duplicates_within_page(self) -> None:
        assert merge_page(["A"], ["C", "C", "D", "C"], _identity) == ["A", "C", "D"]

    def test_empty_inputs(self) -> None:
        assert merge_page([], [], _identity) == []
        assert merge_page([], ["A"], _identity) == ["A"]

    def test_does_not_mutate_accumulated(self) -> None:
        accumulated = ["A"]
        merge_page(accumulated, ["B"], _identity)
        assert accumulated == ["A"]

    def test_custom_identity(self) -> None:
        merged = merge_page([{"id": 1, "v": "x"}], [{"id": 1, "v": "y"}, {"id": 2}], lambda d: d["id"])
        assert merged == [{"id": 1, "v": "x"}, {"id": 2}]


class TestInitialToken:
    """Tests for extract_token() on initial browse documents."""

    def test_section_list_token(self) -> None:
        assert extract_token(browse_document([], token="tok-1")) == "tok-1"

    def test_no_token(self) -> None:
        assert extract_token(browse_document([])) is None
        assert extract_token({}) is None
        assert extract_token(None) is None


class TestContinuationToken:
    """Tests for extract_continuation_token() on continuation documents."""

    def test_section_list_continuation(self) -> None:
        assert extract_continuation_token(continuation_document([], token="tok-2")) == "tok-2"

    def test_music_shelf_continuation(self) -> None:
        document = {
            "continuationContents": {
                "musicShelfContinuation": {
                    "contents": [],
                    "continuations": [{"nextContinuationData": {"continuation": "tok-3"}}],
                }
            }
        }
        assert extract_continuation_token(document) == "tok-3"

    def test_append_continuation_items_action(self) -> None:
        document = {
            "onResponseReceivedActions": [
                {"appendContinuationItemsAction": {"continuationItems": [{"x": 1}, continuation_item("tok-4")]}}
            ]
        }
        assert extract_continuation_token(document) == "tok-4"

    def test_last_page(self) -> None:
        assert extract_continuation_token(continuation_document([])) is None
        assert extract_continuation_token({}) is None

    def test_initial_token_is_not_a_continuation_token(self) -> None:
        """Each document shape has its own extractor."""
        assert extract_continuation_token(browse_document([], token="tok-1")) is None


def _section(title: str, ids: str) -> Section:
    return Section(id=f"id-{title}-{ids}", title=title, items=tuple(Song(id=i, title=i) for i in ids.split()))


class TestMergeItems:
    """Tests for merge_items() (merge + delta)."""

    def test_returns_added(self) -> None:
        merged, added = merge_items(["A", "B"], ["B", "C"], _identity)
        assert merged == ["A", "B", "C"]
        assert added == ["C"]

    def test_nothing_added(self) -> None:
        assert merge_items(["A", "B"], ["A", "B"], _identity) == (["A", "B"], [])


class TestMergeSections:
    """Tests for merge_sections()."""

    def test_same_title_grows_in_place(self) -> None:
        charts = _section("Charts", "a b")
        merged, delta = merge_sections([charts], [_section("Charts", "b c")])

        assert len(merged) == 1
        assert merged[0].id == charts.id
        assert [s.id for s in merged[0].items] == ["a", "b", "c"]
        assert [(d.id, [s.id for s in d.items]) for d in delta] == [(charts.id, ["c"])]

    def test_new_title_is_appended(self) -> None:
        merged, delta = merge_sections([_section("Charts", "a")], [_section("Trending", "x y")])
        assert [s.title for s in merged] == ["Charts", "Trending"]
        assert [s.title for s in delta] == ["Trending"]

    def test_repeated_page_has_empty_delta(self) -> None:
        charts = _section("Charts", "a b")
        merged, delta = merge_sections([charts], [_section("Charts", "a b")])
        assert merged == [charts]
        assert delta == []

    def test_first_page(self) -> None:
        merged, delta = merge_sections([], [_section("Charts", "a a b")])
        assert [s.id for s in merged[0].items] == ["a", "b"]
        assert merged == delta
