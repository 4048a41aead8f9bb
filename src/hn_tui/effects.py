"""Side-effecting work the state asks for but never performs itself."""

from dataclasses import dataclass
from typing import Union

from .models import Category


@dataclass(frozen=True)
class FetchPage:
    """Load the next page of a tab, starting after `offset` loaded entries."""

    tab_index: int
    category: Category
    offset: int
    query: str | None = None  # Only for the search tab


@dataclass(frozen=True)
class FetchComments:
    item_id: int
    request_id: int


@dataclass(frozen=True)
class FetchSearchResults:
    query: str
    request_id: int


@dataclass(frozen=True)
class OpenUrl:
    url: str


Effect = Union[FetchPage, FetchComments, FetchSearchResults, OpenUrl]
