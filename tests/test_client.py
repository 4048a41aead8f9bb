"""Tests for the Hacker News HTTP client against a fake session."""

from unittest.mock import patch

import pytest
import requests

from hn_tui.client import FetchError, HackerNewsClient
from hn_tui.config import ApiConfig
from hn_tui.models import BOOKMARKS, COMMENTS, SEARCH, TOP

ITEMS = "https://hacker-news.firebaseio.com/v0"
SEARCH_API = "https://hn.algolia.com/api/v1"


class FakeResponse:
    def __init__(self, data, status_code: int = 200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._data


class FakeSession:
    """Serves canned payloads keyed by URL and records requests."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls: list[tuple[str, dict | None]] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        value = self.routes[url]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, FakeResponse):
            return value
        return FakeResponse(value)

    def close(self):
        pass


def _item(item_id: int, **fields) -> tuple[str, dict]:
    return f"{ITEMS}/item/{item_id}.json", {"id": item_id, **fields}


@pytest.fixture
def make_client():
    clients = []

    def factory(routes: dict) -> tuple[HackerNewsClient, FakeSession]:
        session = FakeSession(routes)
        client = HackerNewsClient(session=session)
        clients.append(client)
        return client, session

    yield factory
    for client in clients:
        client.close()


class TestStories:
    """Tests for story list pages."""

    def test_page_slices_ids_and_keeps_order(self, make_client):
        routes = {f"{ITEMS}/topstories.json": [1, 2, 3, 4]}
        routes.update(dict(_item(i, title=f"Story {i}", score=10, by="alice") for i in range(1, 5)))
        client, _ = make_client(routes)

        entries = client.fetch_page(TOP, offset=1, count=2)

        assert [e.id for e in entries] == ["2", "3"]
        assert entries[0].title == "Story 2"
        assert entries[0].detail == "10 points by alice"

    def test_missing_item_fails_the_page(self, make_client):
        routes = {f"{ITEMS}/topstories.json": list(range(1, 10))}
        routes.update(dict(_item(i, title=f"Story {i}") for i in range(1, 10)))
        routes[f"{ITEMS}/item/2.json"] = None
        client, _ = make_client(routes)

        with pytest.raises(FetchError, match="item 2 not found"):
            client.fetch_stories("topstories", 0, 3)

        entries = client.fetch_stories("topstories", 3, 3)
        assert [e.id for e in entries] == ["4", "5", "6"]

    def test_offset_past_end_is_empty(self, make_client):
        client, _ = make_client({f"{ITEMS}/topstories.json": [1]})
        assert client.fetch_stories("topstories", 5, 10) == []


class TestAlgolia:
    """Tests for the comments firehose and search."""

    def test_comments_page_number(self, make_client):
        client, session = make_client({
            f"{SEARCH_API}/search_by_date": {"hits": [
                {"objectID": "5", "author": "bob", "comment_text": "hey", "story_title": "S", "story_id": 1},
            ]},
        })

        entries = client.fetch_page(COMMENTS, offset=60, count=30)

        assert [e.id for e in entries] == ["5"]
        assert session.calls[0][1] == {"tags": "comment", "hitsPerPage": 30, "page": 2}

    def test_search_has_more_from_page_count(self, make_client):
        client, session = make_client({
            f"{SEARCH_API}/search": {
                "hits": [{"objectID": "1", "title": "Rust", "points": 2, "author": "a"}],
                "page": 0,
                "nbPages": 3,
            },
        })

        entries, has_more = client.fetch_search("rust", 0, 20)

        assert [e.title for e in entries] == ["Rust"]
        assert has_more is True
        assert session.calls[0][1]["query"] == "rust"
        assert session.calls[0][1]["tags"] == "story"

    def test_search_last_page(self, make_client):
        client, _ = make_client({
            f"{SEARCH_API}/search": {"hits": [], "page": 2, "nbPages": 3},
        })
        _, has_more = client.fetch_search("rust", 40, 20)
        assert has_more is False

    def test_search_tab_page_requires_query(self, make_client):
        client, _ = make_client({})
        with pytest.raises(FetchError):
            client.fetch_page(SEARCH, 0, 20)

    def test_bad_payload_raises(self, make_client):
        client, _ = make_client({f"{SEARCH_API}/search_by_date": {"nope": 1}})
        with pytest.raises(FetchError):
            client.fetch_comments(0, 30)


class TestThreads:
    """Tests for comment tree fetching."""

    def _routes(self) -> dict:
        return dict([
            _item(100, type="story", title="A story", url="https://example.com", kids=[101, 102, 104]),
            _item(101, type="comment", by="alice", text="<p>Hi &amp; bye</p>", kids=[103]),
            _item(102, type="comment", deleted=True),
            _item(103, type="comment", by="bob", text="reply"),
            (f"{ITEMS}/item/104.json", None),
        ])

    def test_story_thread(self, make_client):
        client, _ = make_client(self._routes())

        thread = client.fetch_thread(100)

        assert thread.title == "A story"
        assert thread.url == "https://example.com"
        assert thread.focus is None
        assert [c.id for c in thread.roots] == [101, 102]
        assert thread.roots[0].text == "Hi & bye"
        assert thread.roots[0].children[0].author == "bob"
        assert thread.roots[1].deleted is True
        assert thread.roots[1].text is None

    def test_comment_thread_is_focused(self, make_client):
        client, _ = make_client(self._routes())

        thread = client.fetch_thread(101)

        assert thread.focus == 101
        assert [c.id for c in thread.roots] == [101]
        assert thread.roots[0].children[0].id == 103
        assert thread.url is None

    def test_unknown_item(self, make_client):
        client, _ = make_client({f"{ITEMS}/item/1.json": None})
        with pytest.raises(FetchError, match="not found"):
            client.fetch_thread(1)


class TestErrors:
    """Tests for transport failures."""

    def test_timeout(self, make_client):
        client, _ = make_client({f"{ITEMS}/topstories.json": requests.exceptions.Timeout()})
        with pytest.raises(FetchError, match="timed out"):
            client.fetch_page(TOP, 0, 10)

    def test_connection_error(self, make_client):
        client, _ = make_client({f"{ITEMS}/topstories.json": requests.exceptions.ConnectionError()})
        with pytest.raises(FetchError, match="connection failed"):
            client.fetch_page(TOP, 0, 10)

    def test_http_error(self, make_client):
        client, _ = make_client({f"{ITEMS}/topstories.json": FakeResponse(None, status_code=500)})
        with pytest.raises(FetchError, match="HTTP 500"):
            client.fetch_page(TOP, 0, 10)

    def test_bookmarks_are_not_fetchable(self, make_client):
        client, _ = make_client({})
        with pytest.raises(FetchError):
            client.fetch_page(BOOKMARKS, 0, 10)


class TestDefaultSession:
    """The client builds its own requests session when none is given."""

    @patch("hn_tui.client.requests.Session.get")
    def test_uses_configured_timeout(self, mock_get):
        mock_get.return_value = FakeResponse({"hits": [], "page": 0, "nbPages": 0})
        client = HackerNewsClient(ApiConfig(request_timeout=2.5))
        try:
            entries, has_more = client.fetch_search("python", 0, 10)
        finally:
            client.close()

        assert entries == []
        assert has_more is False
        assert mock_get.call_args.kwargs["timeout"] == 2.5
        assert mock_get.call_args.args[0] == f"{SEARCH_API}/search"
