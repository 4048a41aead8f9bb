"""Application state: turns commands into mutations plus effects, and applies events.

Nothing in here performs I/O except the bookmark write-through. Effects are
collected per command and handed back to the caller; results come back as
events through apply_event, always on the interaction loop's thread.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field

from .bookmarks import Bookmarks
from .commands import Command, ViewMode, help_command, mode_command
from .comment_view import CommentView
from .effects import Effect, FetchComments, FetchPage, FetchSearchResults, OpenUrl
from .events import CommentsLoaded, Event, SearchResultsLoaded, TabItemsLoaded
from .list_view import ListView
from .messages import (
    COMMENTS_STATUS,
    LIST_STATUS,
    LOADING_COMMENTS_STATUS,
    LOADING_ENTRIES_STATUS,
    HelpView,
    TransientMessage,
)
from .models import BOOKMARKS, SEARCH, CategoryKind, Entry, Tab
from .utils import item_url, truncate

logger = logging.getLogger(__name__)

_ITEM_ID_PATTERN = re.compile(r"[0-9]+")


@dataclass
class CommandDispatch:
    """What a single command produced."""

    effects: list[Effect] = field(default_factory=list)
    should_exit: bool = False


@dataclass
class PendingComment:
    request_id: int
    comment_link: str
    title: str


@dataclass
class PendingSearch:
    request_id: int
    tab_index: int
    query: str


@dataclass
class SearchInput:
    message_backup: str
    buffer: str = ""

    def prompt(self) -> str:
        return f"Search: {self.buffer}"


def parse_item_id(text: str) -> int:
    """Parse an entry id as a numeric item id."""
    if not _ITEM_ID_PATTERN.fullmatch(text):
        raise ValueError(f"invalid item id {text!r}")
    return int(text)


class State:
    """All per-tab view models, the active mode and request bookkeeping.

    While in list mode the active tab's ListView lives in `_list` and its
    slot in `_tab_views` is empty; every other tab keeps its view in its
    slot. Opening a thread stashes `_list` back into the slot.
    """

    def __init__(
        self,
        tabs: list[Tab],
        bookmarks: Bookmarks,
        batch_size: int = 30,
        transient_seconds: float = 3.0,
    ) -> None:
        self._tabs: list[Tab] = list(tabs)
        self._tab_views: list[ListView[Entry] | None] = [ListView() for _ in self._tabs]
        self._tab_loading: list[bool] = [False] * len(self._tabs)
        self._pending_selections: list[int | None] = [None] * len(self._tabs)
        self._bookmarks = bookmarks
        self._batch_size = batch_size
        self._transient_seconds = transient_seconds

        self._active_tab = 0
        self._mode = ViewMode.LIST
        self._list: ListView[Entry] = ListView()
        if self._tab_views and self._tab_views[0] is not None:
            self._list = self._tab_views[0]
            self._tab_views[0] = None
        self._comments: CommentView | None = None

        self._help = HelpView()
        self._message = LIST_STATUS
        self._transient: TransientMessage | None = None
        self._search_input: SearchInput | None = None
        self._search_query: str | None = None
        self._list_height = 0

        self._next_request_id = 0
        self._pending_comment: PendingComment | None = None
        self._pending_search: PendingSearch | None = None
        self._pending_effects: list[Effect] = []

        self._search_tab_index: int | None = None
        self._bookmarks_tab_index: int | None = None
        if not self._bookmarks.is_empty():
            self._refresh_bookmarks_view(self._ensure_bookmarks_tab())

    # ------------------------------------------------------------------
    # Read access for the renderer and the loop
    # ------------------------------------------------------------------

    @property
    def tabs(self) -> list[Tab]:
        return self._tabs

    @property
    def active_tab(self) -> int | None:
        if not self._tabs:
            return None
        return min(self._active_tab, len(self._tabs) - 1)

    @property
    def tab_loading(self) -> list[bool]:
        return self._tab_loading

    @property
    def mode(self) -> ViewMode:
        return self._mode

    @property
    def active_list(self) -> ListView[Entry]:
        return self._list

    @property
    def comments(self) -> CommentView | None:
        return self._comments

    @property
    def message(self) -> str:
        return self._message

    @property
    def help_visible(self) -> bool:
        return self._help.is_visible()

    @property
    def search_active(self) -> bool:
        return self._search_input is not None

    @property
    def bookmarks(self) -> Bookmarks:
        return self._bookmarks

    @property
    def list_height(self) -> int:
        return self._list_height

    def set_list_height(self, height: int) -> None:
        self._list_height = height

    def list_view(self, index: int) -> ListView[Entry] | None:
        if not 0 <= index < len(self._tabs):
            return None
        if self._mode is ViewMode.LIST and index == self._active_tab:
            return self._list
        return self._tab_views[index]

    def pending_selection(self, index: int) -> int | None:
        return self._pending_selections[index]

    # ------------------------------------------------------------------
    # Input translation
    # ------------------------------------------------------------------

    def translate_key(self, key: str) -> Command:
        """Map a key to a command. Help wins, then the search prompt, then the view."""
        if self._help.is_visible():
            return help_command(key)
        if self._search_input is not None:
            return self._handle_search_key(self._search_input, key)
        return mode_command(self._mode, key)

    def _handle_search_key(self, search: SearchInput, key: str) -> Command:
        if key == "esc":
            return Command.CANCEL_SEARCH
        if key == "enter":
            return Command.SUBMIT_SEARCH
        if key == "backspace":
            search.buffer = search.buffer[:-1]
        elif len(key) == 1 and key.isprintable():
            search.buffer += key
        # Named keys and ctrl/alt chords never reach the buffer
        self._update_search_message()
        return Command.NONE

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def initial_effects(self) -> list[Effect]:
        """Request the first page of every fetchable tab."""
        if self._pending_effects:
            raise RuntimeError("initial load must start without pending effects")
        for index in range(len(self._tabs)):
            self._start_load_for_tab(index)
        return self._take_effects()

    def dispatch(self, command: Command) -> CommandDispatch:
        """Apply a command; return the effects it produced and whether to exit.

        Raises BookmarkError if toggling a bookmark cannot be persisted.
        """
        if self._pending_effects:
            raise RuntimeError("command dispatch should start without pending effects")

        should_exit = False
        if command is Command.QUIT:
            should_exit = True
        elif command is Command.SHOW_HELP:
            self._message = self._help.show(self._message)
        elif command is Command.HIDE_HELP:
            self._message = self._help.hide(self._message)
        elif command is Command.START_SEARCH:
            self._start_search()
        elif command is Command.CANCEL_SEARCH:
            self._cancel_search()
        elif command is Command.SUBMIT_SEARCH:
            self._submit_search()
        elif command is Command.SWITCH_TAB_LEFT:
            self._switch_tab(-1)
        elif command is Command.SWITCH_TAB_RIGHT:
            self._switch_tab(1)
        elif command is Command.TOGGLE_BOOKMARK:
            self._toggle_bookmark()
        elif command is Command.OPEN_COMMENTS:
            self._open_comments()
        elif command is Command.CLOSE_COMMENTS:
            self._close_comments()
        elif command is Command.OPEN_CURRENT_IN_BROWSER:
            self._open_current_in_browser()
        elif command is Command.OPEN_COMMENT_LINK:
            self._open_comment_link()
        elif self._mode is ViewMode.TREE:
            self._dispatch_tree(command)
        else:
            self._dispatch_list(command)

        return CommandDispatch(effects=self._take_effects(), should_exit=should_exit)

    def clear_pending_effects(self) -> None:
        self._pending_effects.clear()

    def _take_effects(self) -> list[Effect]:
        effects, self._pending_effects = self._pending_effects, []
        for effect in effects:
            logger.debug(f"Emitting effect {effect}")
        return effects

    def _dispatch_list(self, command: Command) -> None:
        if command is Command.SELECT_NEXT:
            self._select_index(self._list.selected_raw() + 1)
        elif command is Command.SELECT_PREVIOUS:
            self._select_index(max(self._list.selected_raw() - 1, 0))
        elif command is Command.PAGE_DOWN:
            self._select_index(self._list.selected_raw() + self._page_jump())
        elif command is Command.PAGE_UP:
            self._select_index(max(self._list.selected_raw() - self._page_jump(), 0))
        elif command is Command.SELECT_FIRST:
            self._select_index(0)
        elif command is Command.SELECT_LAST:
            if not self._list.is_empty():
                self._list.set_selected(len(self._list) - 1)

    def _dispatch_tree(self, command: Command) -> None:
        view = self._comments
        if view is None:
            return
        page = max(self._list_height, 1)
        if command is Command.SELECT_NEXT:
            view.select_next()
        elif command is Command.SELECT_PREVIOUS:
            view.select_previous()
        elif command is Command.PAGE_DOWN:
            view.page_down(page)
        elif command is Command.PAGE_UP:
            view.page_up(page)
        elif command is Command.SELECT_FIRST:
            view.select_first()
        elif command is Command.SELECT_LAST:
            view.select_last()
        elif command is Command.EXPAND_SELECTED:
            view.expand_selected()
        elif command is Command.COLLAPSE_SELECTED:
            view.collapse_selected()
        elif command is Command.TOGGLE_SELECTED:
            view.toggle_selected()

    def _page_jump(self) -> int:
        return max(self._list_height - 1, 1)

    # ------------------------------------------------------------------
    # Selection and pagination
    # ------------------------------------------------------------------

    def _select_index(self, target: int) -> None:
        tab_index = self.active_tab
        if tab_index is None:
            return
        self._ensure_item(tab_index, target)
        if target >= len(self._list) and self._pending_selections[tab_index] is not None:
            # Applied when the page lands
            return
        self._list.set_selected(target)

    def _ensure_item(self, tab_index: int, target: int) -> None:
        """Request more entries if target lies past the loaded ones and more exist."""
        view = self.list_view(tab_index)
        if view is None or target < len(view):
            return
        if not self._tabs[tab_index].has_more:
            return
        self._pending_selections[tab_index] = target
        if not self._tab_loading[tab_index]:
            self._start_load_for_tab(tab_index)

    def _start_load_for_tab(self, tab_index: int) -> None:
        tab = self._tabs[tab_index]
        if not tab.has_more or not tab.category.is_fetchable:
            return
        if self._tab_loading[tab_index]:
            return
        query = None
        if tab.category.kind is CategoryKind.SEARCH:
            if self._search_query is None:
                return
            query = self._search_query

        view = self.list_view(tab_index)
        offset = len(view) if view is not None else 0
        self._tab_loading[tab_index] = True
        self._set_status(LOADING_ENTRIES_STATUS)
        self._pending_effects.append(
            FetchPage(tab_index=tab_index, category=tab.category, offset=offset, query=query)
        )

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def _store_active_list_view(self) -> None:
        if self._mode is ViewMode.LIST and 0 <= self._active_tab < len(self._tab_views):
            self._tab_views[self._active_tab] = self._list
            self._list = ListView()

    def _restore_active_list_view(self) -> None:
        view = None
        if 0 <= self._active_tab < len(self._tab_views):
            view = self._tab_views[self._active_tab]
            self._tab_views[self._active_tab] = None
        if view is None:
            view = ListView() if self._mode is not ViewMode.LIST else self._list
        self._list = view
        self._mode = ViewMode.LIST
        self._comments = None

    def _switch_tab(self, step: int) -> None:
        if not self._tabs or self._mode is not ViewMode.LIST:
            return
        self._store_active_list_view()
        self._active_tab = (self._active_tab + step) % len(self._tabs)
        self._restore_active_list_view()
        if self._list.is_empty():
            self._start_load_for_tab(self._active_tab)

    def _add_tab(self, tab: Tab, view: ListView[Entry]) -> int:
        self._tabs.append(tab)
        self._tab_views.append(view)
        self._tab_loading.append(False)
        self._pending_selections.append(None)
        return len(self._tabs) - 1

    def _ensure_search_tab(self) -> int:
        if self._search_tab_index is None:
            self._search_tab_index = self._add_tab(
                Tab(category=SEARCH, label=SEARCH.label, has_more=False), ListView()
            )
        return self._search_tab_index

    def _ensure_bookmarks_tab(self) -> int:
        if self._bookmarks_tab_index is None:
            self._bookmarks_tab_index = self._add_tab(
                Tab(category=BOOKMARKS, label=BOOKMARKS.label, has_more=False),
                ListView(self._bookmarks.entries()),
            )
        return self._bookmarks_tab_index

    def _remove_bookmarks_tab(self) -> None:
        index = self._bookmarks_tab_index
        if index is None:
            return
        self._bookmarks_tab_index = None

        was_active = self._active_tab == index
        if was_active and self._mode is ViewMode.LIST:
            self._list = ListView()

        del self._tabs[index]
        del self._tab_views[index]
        del self._tab_loading[index]
        del self._pending_selections[index]

        if self._active_tab > index:
            self._active_tab -= 1
        if self._search_tab_index is not None and self._search_tab_index > index:
            self._search_tab_index -= 1
        if self._pending_search is not None and self._pending_search.tab_index > index:
            self._pending_search.tab_index -= 1

        if self._tabs:
            self._active_tab = min(self._active_tab, len(self._tabs) - 1)
            if was_active and self._mode is ViewMode.LIST:
                self._restore_active_list_view()

    def _replace_view(self, tab_index: int, view: ListView[Entry]) -> None:
        if self._mode is ViewMode.LIST and tab_index == self._active_tab:
            self._list = view
        else:
            self._tab_views[tab_index] = view

    def _refresh_bookmarks_view(self, tab_index: int) -> None:
        """Rebuild the bookmarks list, keeping selection and offset where possible."""
        current = self.list_view(tab_index)
        view: ListView[Entry] = ListView(self._bookmarks.entries())
        if current is not None and not view.is_empty():
            last = len(view) - 1
            view.set_selected(min(current.selected_index() or 0, last))
            view.set_offset(min(current.offset(), last))
        self._replace_view(tab_index, view)

    def _sync_bookmarks_tab(self) -> None:
        if self._bookmarks.is_empty():
            self._remove_bookmarks_tab()
        else:
            self._refresh_bookmarks_view(self._ensure_bookmarks_tab())

    # ------------------------------------------------------------------
    # Commands with effects
    # ------------------------------------------------------------------

    def _current_entry(self) -> Entry | None:
        if self._mode is not ViewMode.LIST:
            return None
        return self._list.selected_item()

    def _next_request(self) -> int:
        request_id = self._next_request_id
        self._next_request_id += 1
        return request_id

    def _open_comments(self) -> None:
        entry = self._current_entry()
        if entry is None:
            return
        try:
            item_id = parse_item_id(entry.id)
        except ValueError as e:
            self._notify(f"Could not load comments: {e}")
            return

        self._set_status(LOADING_COMMENTS_STATUS)
        request_id = self._next_request()
        self._pending_comment = PendingComment(
            request_id=request_id,
            comment_link=item_url(entry.id),
            title=entry.title,
        )
        self._pending_effects.append(FetchComments(item_id=item_id, request_id=request_id))

    def _close_comments(self) -> None:
        if self._mode is not ViewMode.TREE:
            return
        self._restore_active_list_view()
        self._set_status(LIST_STATUS)

    def _open_current_in_browser(self) -> None:
        entry = self._current_entry()
        if entry is not None:
            self._pending_effects.append(OpenUrl(url=entry.resolved_url()))

    def _open_comment_link(self) -> None:
        if self._comments is None:
            return
        url = self._comments.selected_comment_link() or self._comments.link
        self._pending_effects.append(OpenUrl(url=url))

    def _start_search(self) -> None:
        if self._search_input is not None:
            return
        self._search_input = SearchInput(message_backup=self._message)
        self._update_search_message()

    def _cancel_search(self) -> None:
        if self._search_input is not None:
            self._message = self._search_input.message_backup
            self._search_input = None

    def _update_search_message(self) -> None:
        if self._search_input is not None:
            self._message = truncate(self._search_input.prompt(), 80)

    def _submit_search(self) -> None:
        search, self._search_input = self._search_input, None
        if search is None:
            return
        query = search.buffer.strip()
        if not query:
            self._message = search.message_backup
            return

        if self._mode is ViewMode.TREE:
            self._restore_active_list_view()

        tab_index = self._ensure_search_tab()
        self._store_active_list_view()
        self._active_tab = tab_index
        self._restore_active_list_view()

        self._list = ListView()
        self._tabs[tab_index].has_more = False
        self._pending_selections[tab_index] = None
        self._search_query = query

        request_id = self._next_request()
        self._tab_loading[tab_index] = True
        self._pending_search = PendingSearch(request_id=request_id, tab_index=tab_index, query=query)
        self._message = f'Searching for "{truncate(query, 40)}"...'
        self._pending_effects.append(FetchSearchResults(query=query, request_id=request_id))

    def _toggle_bookmark(self) -> None:
        if self._mode is ViewMode.TREE:
            node = self._comments.selected_node() if self._comments is not None else None
            entry = node.to_bookmark_entry() if node is not None else None
        else:
            entry = self._current_entry()
        if entry is None:
            return

        added = self._bookmarks.toggle(entry)
        self._sync_bookmarks_tab()

        title = truncate(entry.title, 40)
        if added:
            self._notify(f'Bookmarked "{title}"')
        else:
            self._notify(f'Removed bookmark for "{title}"')

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def apply_event(self, event: Event) -> None:
        """Fold a background result into state. Stale results are dropped."""
        if isinstance(event, TabItemsLoaded):
            self._apply_tab_items(event)
        elif isinstance(event, SearchResultsLoaded):
            self._apply_search_results(event)
        elif isinstance(event, CommentsLoaded):
            self._apply_comments(event)

    def _apply_tab_items(self, event: TabItemsLoaded) -> None:
        tab_index = event.tab_index
        if not 0 <= tab_index < len(self._tabs):
            logger.debug(f"Dropping page for unknown tab {tab_index}")
            return
        tab = self._tabs[tab_index]
        if tab.category.kind is CategoryKind.SEARCH and event.query != self._search_query:
            logger.debug(f"Dropping search page for superseded query {event.query!r}")
            return

        self._tab_loading[tab_index] = False
        target = self._pending_selections[tab_index]
        self._pending_selections[tab_index] = None

        if event.error is not None:
            logger.debug(f"Loading tab {tab.label} failed: {event.error}")
            self._notify(f"Could not load more entries: {event.error}")
            return

        entries = event.result or []
        if event.has_more is not None:
            tab.has_more = event.has_more
        else:
            tab.has_more = len(entries) >= self._batch_size

        view = self.list_view(tab_index)
        if view is not None:
            if entries:
                view.extend(entries)
            if target is not None and not view.is_empty():
                view.set_selected(target)

        self._set_status(self._mode_status())

    def _apply_search_results(self, event: SearchResultsLoaded) -> None:
        pending = self._pending_search
        if pending is None or pending.request_id != event.request_id:
            logger.debug(f"Dropping stale search results for request {event.request_id}")
            return
        self._pending_search = None
        if 0 <= pending.tab_index < len(self._tab_loading):
            self._tab_loading[pending.tab_index] = False

        if event.error is not None:
            logger.debug(f"Search for {pending.query!r} failed: {event.error}")
            self._notify(f"Could not search: {event.error}")
            return

        entries, has_more = event.result or ([], False)
        if 0 <= pending.tab_index < len(self._tabs):
            self._tabs[pending.tab_index].has_more = has_more
            view: ListView[Entry] = ListView(entries)
            view.set_selected(0)
            self._replace_view(pending.tab_index, view)

        query = truncate(pending.query, 40)
        count = len(entries)
        if count == 0:
            self._set_status(f'No results for "{query}"')
        elif count == 1:
            self._set_status(f'Found 1 result for "{query}"')
        else:
            self._set_status(f'Found {count} results for "{query}"')

    def _apply_comments(self, event: CommentsLoaded) -> None:
        pending = self._pending_comment
        if pending is None or pending.request_id != event.request_id:
            logger.debug(f"Dropping stale comments for request {event.request_id}")
            return
        self._pending_comment = None

        if event.error is not None:
            logger.debug(f"Loading comments failed: {event.error}")
            self._notify(f"Could not load comments: {event.error}")
            return
        if event.result is None:
            return

        view = CommentView.from_thread(event.result, pending.title, pending.comment_link)
        self._store_active_list_view()
        self._comments = view
        self._mode = ViewMode.TREE
        self._set_status(COMMENTS_STATUS)

    # ------------------------------------------------------------------
    # Status line
    # ------------------------------------------------------------------

    def _mode_status(self) -> str:
        return COMMENTS_STATUS if self._mode is ViewMode.TREE else LIST_STATUS

    def _status_available(self) -> bool:
        return not self._help.is_visible() and self._search_input is None

    def _set_status(self, message: str) -> None:
        if self._status_available():
            self._message = message

    def _notify(self, message: str) -> None:
        if self._status_available():
            self.set_transient_message(message)

    def set_transient_message(self, message: str) -> None:
        """Show message until it expires, then restore whatever it replaced."""
        original = self._transient.original if self._transient is not None else self._message
        self._transient = TransientMessage(
            current=message, original=original, duration=self._transient_seconds
        )
        self._message = message

    def update_transient_message(self, now: float | None = None) -> None:
        transient = self._transient
        if transient is None:
            return
        if self._message != transient.current:
            # Something else took over the status line
            self._transient = None
        elif transient.is_expired(now if now is not None else time.monotonic()):
            self._message = transient.original
            self._transient = None
