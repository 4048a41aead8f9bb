"""Results of background effects, delivered back to the interaction loop.

Exactly one of `result` / `error` is set on each event.
"""

from dataclasses import dataclass
from typing import Union

from .models import CommentThread, Entry


@dataclass
class TabItemsLoaded:
    tab_index: int
    result: list[Entry] | None = None
    error: Exception | None = None
    query: str | None = None  # Echoed from FetchPage for the search tab
    has_more: bool | None = None  # Exact for search pages; otherwise inferred from page size


@dataclass
class SearchResultsLoaded:
    request_id: int
    result: tuple[list[Entry], bool] | None = None  # (entries, has_more)
    error: Exception | None = None


@dataclass
class CommentsLoaded:
    request_id: int
    result: CommentThread | None = None
    error: Exception | None = None


Event = Union[TabItemsLoaded, SearchResultsLoaded, CommentsLoaded]
