"""Tests for the page-by-page fetch loop."""

from unittest.mock import MagicMock

import pytest

from prguard_core.errors import ForgeDataError
from prguard_core.gh.pagination import fetch_all_pages


def _pages(*sizes):
    """fetch_page stub returning pages of the given sizes, then empty pages."""
    calls = []

    def fetch_page(page, per_page):
        calls.append((page, per_page))
        size = sizes[page - 1] if page <= len(sizes) else 0
        return [f"item-{page}-{i}" for i in range(size)]

    return fetch_page, calls


class TestFetchAllPages:
    def test_stops_on_short_page(self):
        fetch_page, calls = _pages(100, 100, 37)
        items = fetch_all_pages(fetch_page)
        assert len(items) == 237
        assert [page for page, _ in calls] == [1, 2, 3]

    def test_exact_multiple_needs_one_empty_page(self):
        fetch_page, calls = _pages(100, 100, 100, 0)
        items = fetch_all_pages(fetch_page)
        assert len(items) == 300
        assert len(calls) == 4

    def test_single_empty_page(self):
        fetch_page, calls = _pages(0)
        assert fetch_all_pages(fetch_page) == []
        assert len(calls) == 1

    def test_per_page_passed_through(self):
        fetch_page, calls = _pages(5, 2)
        items = fetch_all_pages(fetch_page, per_page=5)
        assert len(items) == 7
        assert calls == [(1, 5), (2, 5)]

    def test_order_preserved(self):
        fetch_page, _ = _pages(100, 1)
        items = fetch_all_pages(fetch_page)
        assert items[0] == "item-1-0"
        assert items[-1] == "item-2-0"

    def test_pause_runs_between_pages_only(self):
        fetch_page, _ = _pages(100, 100, 3)
        pause = MagicMock()
        fetch_all_pages(fetch_page, pause=pause)
        assert [c.args[0] for c in pause.call_args_list] == [2, 3]


class TestFailedPages:
    def test_failure_is_fatal_by_default(self):
        with pytest.raises(ForgeDataError):
            fetch_all_pages(lambda page, per_page: None)

    def test_error_object_is_fatal_by_default(self):
        with pytest.raises(ForgeDataError):
            fetch_all_pages(lambda page, per_page: {"message": "Server Error"})

    def test_tolerated_failure_skips_page_and_continues(self):
        responses = {1: ["a"] * 100, 2: None, 3: ["c"] * 4}
        calls = []

        def fetch_page(page, per_page):
            calls.append(page)
            return responses.get(page, [])

        items = fetch_all_pages(fetch_page, tolerate_failures=True)
        assert calls == [1, 2, 3]
        assert items == ["a"] * 100 + ["c"] * 4

    def test_gives_up_after_consecutive_failures(self):
        calls = []

        def fetch_page(page, per_page):
            calls.append(page)
            return None

        assert fetch_all_pages(fetch_page, tolerate_failures=True, max_failed_pages=3) == []
        assert calls == [1, 2, 3]

    def test_successful_page_resets_failure_count(self):
        responses = {1: None, 2: None, 3: ["x"] * 100, 4: None, 5: None, 6: ["y"]}
        calls = []

        def fetch_page(page, per_page):
            calls.append(page)
            return responses.get(page, [])

        items = fetch_all_pages(fetch_page, tolerate_failures=True, max_failed_pages=3)
        assert calls == [1, 2, 3, 4, 5, 6]
        assert items == ["x"] * 100 + ["y"]
