"""Tests for running effects in the background and collecting events."""

import time
import webbrowser
from unittest.mock import MagicMock, patch

import pytest

from hn_tui.client import FetchError
from hn_tui.effects import FetchComments, FetchPage, FetchSearchResults, OpenUrl
from hn_tui.events import CommentsLoaded, SearchResultsLoaded, TabItemsLoaded
from hn_tui.executor import EffectExecutor
from hn_tui.models import SEARCH, TOP, CommentThread, Entry


def _wait_for_events(executor: EffectExecutor, count: int = 1, timeout: float = 2.0) -> list:
    events = []
    deadline = time.monotonic() + timeout
    while len(events) < count and time.monotonic() < deadline:
        events.extend(executor.drain())
        time.sleep(0.01)
    return events


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def executor(client):
    executor = EffectExecutor(client, batch_size=30, max_workers=2)
    yield executor
    executor.shutdown()


class TestFetches:
    """Each fetch produces exactly one event."""

    def test_page_success(self, executor, client):
        client.fetch_page.return_value = [Entry(id="1", title="One")]

        executor.run([FetchPage(tab_index=2, category=TOP, offset=30)])
        events = _wait_for_events(executor)

        assert events == [TabItemsLoaded(2, result=[Entry(id="1", title="One")])]
        client.fetch_page.assert_called_once_with(TOP, 30, 30, query=None)

    def test_page_failure(self, executor, client):
        error = FetchError("nope")
        client.fetch_search.side_effect = error

        executor.run([FetchPage(tab_index=0, category=SEARCH, offset=0, query="q")])
        events = _wait_for_events(executor)

        assert events == [TabItemsLoaded(0, error=error, query="q")]

    def test_search_page_carries_exact_has_more(self, executor, client):
        client.fetch_search.return_value = ([Entry(id="9", title="Nine")], False)

        executor.run([FetchPage(tab_index=3, category=SEARCH, offset=30, query="rust")])
        events = _wait_for_events(executor)

        assert events == [
            TabItemsLoaded(3, result=[Entry(id="9", title="Nine")], query="rust", has_more=False)
        ]
        client.fetch_search.assert_called_once_with("rust", 30, 30)
        client.fetch_page.assert_not_called()

    def test_comments(self, executor, client):
        thread = CommentThread(roots=[], title="T")
        client.fetch_thread.return_value = thread

        executor.run([FetchComments(item_id=42, request_id=7)])
        events = _wait_for_events(executor)

        assert events == [CommentsLoaded(7, result=thread)]
        client.fetch_thread.assert_called_once_with(42)

    def test_search(self, executor, client):
        client.fetch_search.return_value = ([], False)

        executor.run([FetchSearchResults(query="rust", request_id=3)])
        events = _wait_for_events(executor)

        assert events == [SearchResultsLoaded(3, result=([], False))]
        client.fetch_search.assert_called_once_with("rust", 0, 30)

    def test_search_failure(self, executor, client):
        error = FetchError("down")
        client.fetch_search.side_effect = error

        executor.run([FetchSearchResults(query="rust", request_id=3)])
        events = _wait_for_events(executor)

        assert events == [SearchResultsLoaded(3, error=error)]

    def test_several_effects(self, executor, client):
        client.fetch_page.return_value = []

        executor.run([
            FetchPage(tab_index=0, category=TOP, offset=0),
            FetchPage(tab_index=1, category=TOP, offset=0),
        ])
        events = _wait_for_events(executor, count=2)

        assert sorted(e.tab_index for e in events) == [0, 1]

    def test_drain_when_idle(self, executor):
        assert executor.drain() == []


class TestOpenUrl:
    """Tests for opening links in the browser."""

    @patch("hn_tui.executor.webbrowser.open", return_value=True)
    def test_opens_inline(self, mock_open, executor):
        executor.run([OpenUrl(url="https://example.com")])

        mock_open.assert_called_once_with("https://example.com")
        assert executor.drain() == []

    @patch("hn_tui.executor.webbrowser.open", return_value=False)
    def test_failure_reports_through_callback(self, mock_open, client):
        errors = []
        executor = EffectExecutor(client, batch_size=30, on_open_error=errors.append)
        try:
            executor.run([OpenUrl(url="https://example.com")])
        finally:
            executor.shutdown()
        assert errors == ["Could not open browser"]

    @patch("hn_tui.executor.webbrowser.open", side_effect=webbrowser.Error("no browser"))
    def test_browser_error(self, mock_open, client):
        errors = []
        executor = EffectExecutor(client, batch_size=30, on_open_error=errors.append)
        try:
            executor.run([OpenUrl(url="https://example.com")])
        finally:
            executor.shutdown()
        assert errors == ["Could not open browser: no browser"]
