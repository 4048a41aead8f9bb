"""HTTP client for the Hacker News Firebase and Algolia APIs."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from .config import ApiConfig
from .models import (
    Category,
    CategoryKind,
    Comment,
    CommentThread,
    Entry,
    entry_from_comment_hit,
    entry_from_search_hit,
    entry_from_story,
)
from .utils import sanitize_comment

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a remote fetch fails or returns something unusable."""


class HackerNewsClient:
    """Blocking client; callers run it off the interaction thread.

    Item fan-out (story pages, comment levels) goes through a private
    thread pool, so every public method may be called from a worker thread
    of another pool without deadlocking.
    """

    def __init__(self, config: ApiConfig | None = None, session: requests.Session | None = None):
        self.config = config or ApiConfig()
        self.items_url = self.config.items_url.rstrip("/")
        self.search_url = self.config.search_url.rstrip("/")
        self._session = session or requests.Session()
        self._pool = ThreadPoolExecutor(max_workers=max(self.config.max_workers, 1) * 4)

    def close(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
        self._session.close()

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = self._session.get(url, params=params, timeout=self.config.request_timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            logger.debug(f"Request to {url} timed out")
            raise FetchError("request timed out") from e
        except requests.exceptions.ConnectionError as e:
            logger.debug(f"Could not connect to {url}: {e}")
            raise FetchError("connection failed") from e
        except requests.exceptions.HTTPError as e:
            logger.debug(f"HTTP error from {url}: {e}")
            raise FetchError(f"HTTP {e.response.status_code if e.response is not None else 'error'}") from e
        except requests.exceptions.RequestException as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise FetchError(str(e)) from e
        except ValueError as e:
            logger.debug(f"Invalid JSON from {url}: {e}")
            raise FetchError("invalid response") from e

    def fetch_item(self, item_id: int) -> dict[str, Any] | None:
        """Fetch a raw item. Returns None for ids the API does not know."""
        data = self._get_json(f"{self.items_url}/item/{item_id}.json")
        if data is not None and not isinstance(data, dict):
            raise FetchError(f"unexpected item payload for {item_id}")
        return data

    def _fetch_items(self, ids: list[int]) -> list[dict[str, Any] | None]:
        """Fetch items in parallel, preserving the order of ids."""
        return list(self._pool.map(self.fetch_item, ids))

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def fetch_page(
        self, category: Category, offset: int, count: int, query: str | None = None
    ) -> list[Entry]:
        """Fetch up to count entries of a category, skipping the first offset."""
        if category.kind is CategoryKind.STORIES:
            return self.fetch_stories(category.endpoint or "topstories", offset, count)
        if category.kind is CategoryKind.COMMENTS:
            return self.fetch_comments(offset, count)
        if category.kind is CategoryKind.SEARCH:
            if not query:
                raise FetchError("search page requested without a query")
            entries, _ = self.fetch_search(query, offset, count)
            return entries
        raise FetchError(f"{category.label} entries cannot be fetched")

    def fetch_stories(self, endpoint: str, offset: int, count: int) -> list[Entry]:
        ids = self._get_json(f"{self.items_url}/{endpoint}.json") or []
        if not isinstance(ids, list):
            raise FetchError(f"unexpected id list for {endpoint}")
        page_ids = ids[offset:offset + count]
        logger.debug(f"Fetching {len(page_ids)} {endpoint} items from offset {offset}")
        entries = []
        for story_id, story in zip(page_ids, self._fetch_items(page_ids)):
            # Page length must equal the number of ids consumed
            if story is None:
                raise FetchError(f"item {story_id} not found")
            entries.append(entry_from_story(story))
        return entries

    def fetch_comments(self, offset: int, count: int) -> list[Entry]:
        """Latest comments site-wide, newest first."""
        page = offset // max(count, 1)
        data = self._get_json(
            f"{self.search_url}/search_by_date",
            params={"tags": "comment", "hitsPerPage": count, "page": page},
        )
        return [entry_from_comment_hit(hit) for hit in _hits(data)]

    def fetch_search(self, query: str, offset: int, count: int) -> tuple[list[Entry], bool]:
        """Full-text story search. Returns (entries, has_more)."""
        page = offset // max(count, 1)
        data = self._get_json(
            f"{self.search_url}/search",
            params={"query": query, "tags": "story", "hitsPerPage": count, "page": page},
        )
        entries = [entry_from_search_hit(hit) for hit in _hits(data)]
        has_more = data.get("page", page) + 1 < data.get("nbPages", 0)
        return entries, has_more

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    def fetch_thread(self, item_id: int) -> CommentThread:
        """Fetch a discussion with its whole comment tree.

        If item_id is itself a comment, the thread is rooted at it and the
        comment is marked as the focus.
        """
        item = self.fetch_item(item_id)
        if item is None:
            raise FetchError(f"item {item_id} not found")

        if item.get("type") == "comment":
            comment = _comment_from_item(item)
            self._fill_children([(comment, item.get("kids") or [])])
            return CommentThread(
                roots=[comment],
                title=item.get("title") or f"Comment {item['id']}",
                url=None,
                focus=comment.id,
            )

        root = Comment(id=item["id"])
        self._fill_children([(root, item.get("kids") or [])])
        return CommentThread(
            roots=root.children,
            title=item.get("title") or f"Item {item['id']}",
            url=item.get("url") or None,
        )

    def _fill_children(self, level: list[tuple[Comment, list[int]]]) -> None:
        """Fetch the tree one level at a time, attaching children in kid order."""
        while level:
            kid_ids = [kid for _, kids in level for kid in kids]
            if not kid_ids:
                return
            items = iter(self._fetch_items(kid_ids))

            next_level: list[tuple[Comment, list[int]]] = []
            for parent, kids in level:
                for _ in kids:
                    child = next(items)
                    if child is None or child.get("type") != "comment":
                        continue
                    comment = _comment_from_item(child)
                    parent.children.append(comment)
                    next_level.append((comment, child.get("kids") or []))
            level = next_level


def _hits(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, dict) or not isinstance(data.get("hits"), list):
        raise FetchError("unexpected search payload")
    return data["hits"]


def _comment_from_item(item: dict[str, Any]) -> Comment:
    text = sanitize_comment(item["text"]) if item.get("text") else ""
    return Comment(
        id=item["id"],
        author=item.get("by"),
        text=text or None,
        dead=bool(item.get("dead", False)),
        deleted=bool(item.get("deleted", False)),
    )
