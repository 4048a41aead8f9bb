"""Runs effects in the background and queues their results as events."""

import logging
import queue
import webbrowser
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from .client import HackerNewsClient
from .effects import Effect, FetchComments, FetchPage, FetchSearchResults, OpenUrl
from .events import CommentsLoaded, Event, SearchResultsLoaded, TabItemsLoaded
from .models import CategoryKind

logger = logging.getLogger(__name__)


class EffectExecutor:
    """Performs effects off the interaction thread.

    Fetches run on a thread pool; each one delivers exactly one event to
    the inbox, whether it succeeded or failed. Events are only ever applied
    by whoever calls drain(), so state is never touched from a worker.
    Opening a URL is quick and runs inline.
    """

    def __init__(
        self,
        client: HackerNewsClient,
        batch_size: int,
        max_workers: int = 4,
        on_open_error: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.batch_size = batch_size
        self.on_open_error = on_open_error
        self._inbox: queue.Queue[Event] = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    def run(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, OpenUrl):
                self._open(effect.url)
            elif isinstance(effect, FetchPage):
                self._executor.submit(self._fetch_page, effect)
            elif isinstance(effect, FetchComments):
                self._executor.submit(self._fetch_comments, effect)
            elif isinstance(effect, FetchSearchResults):
                self._executor.submit(self._fetch_search, effect)
            else:
                logger.warning(f"Unknown effect: {effect!r}")

    def drain(self) -> list[Event]:
        """Return every event that has arrived so far, without blocking."""
        events = []
        while True:
            try:
                events.append(self._inbox.get_nowait())
            except queue.Empty:
                return events

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _open(self, url: str) -> None:
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as e:
            logger.debug(f"Opening {url} failed: {e}")
            if self.on_open_error:
                self.on_open_error(f"Could not open browser: {e}")
            return
        if not opened and self.on_open_error:
            self.on_open_error("Could not open browser")

    def _fetch_page(self, effect: FetchPage) -> None:
        has_more = None
        try:
            if effect.category.kind is CategoryKind.SEARCH and effect.query:
                entries, has_more = self.client.fetch_search(
                    effect.query, effect.offset, self.batch_size
                )
            else:
                entries = self.client.fetch_page(
                    effect.category, effect.offset, self.batch_size, query=effect.query
                )
        except Exception as e:
            logger.debug(f"Page fetch for tab {effect.tab_index} failed: {e}")
            self._inbox.put(TabItemsLoaded(effect.tab_index, error=e, query=effect.query))
            return
        self._inbox.put(
            TabItemsLoaded(effect.tab_index, result=entries, query=effect.query, has_more=has_more)
        )

    def _fetch_comments(self, effect: FetchComments) -> None:
        try:
            thread = self.client.fetch_thread(effect.item_id)
        except Exception as e:
            logger.debug(f"Thread fetch for {effect.item_id} failed: {e}")
            self._inbox.put(CommentsLoaded(effect.request_id, error=e))
            return
        self._inbox.put(CommentsLoaded(effect.request_id, result=thread))

    def _fetch_search(self, effect: FetchSearchResults) -> None:
        try:
            result = self.client.fetch_search(effect.query, 0, self.batch_size)
        except Exception as e:
            logger.debug(f"Search for {effect.query!r} failed: {e}")
            self._inbox.put(SearchResultsLoaded(effect.request_id, error=e))
            return
        self._inbox.put(SearchResultsLoaded(effect.request_id, result=result))
