"""Data models for hn-tui."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .utils import format_points, item_url, sanitize_comment, truncate


class CategoryKind(Enum):
    """How entries for a category are fetched."""
    STORIES = "stories"
    COMMENTS = "comments"
    SEARCH = "search"
    BOOKMARKS = "bookmarks"


@dataclass(frozen=True)
class Category:
    """A content partition shown as one tab."""

    label: str
    kind: CategoryKind
    endpoint: str | None = None  # Firebase list name for story categories

    @property
    def is_fetchable(self) -> bool:
        return self.kind is not CategoryKind.BOOKMARKS


TOP = Category("top", CategoryKind.STORIES, "topstories")
NEW = Category("new", CategoryKind.STORIES, "newstories")
ASK = Category("ask", CategoryKind.STORIES, "askstories")
SHOW = Category("show", CategoryKind.STORIES, "showstories")
JOBS = Category("jobs", CategoryKind.STORIES, "jobstories")
COMMENTS = Category("comments", CategoryKind.COMMENTS)
SEARCH = Category("search", CategoryKind.SEARCH)
BOOKMARKS = Category("bookmarks", CategoryKind.BOOKMARKS)

DEFAULT_CATEGORIES: tuple[Category, ...] = (TOP, NEW, ASK, SHOW, JOBS, COMMENTS)


@dataclass
class Tab:
    """A tab in the header. has_more is True while the last page came back full."""

    category: Category
    label: str
    has_more: bool = True


@dataclass(frozen=True)
class Entry:
    """A flat list row. Identity is the id, which is also the bookmark key."""

    id: str
    title: str
    detail: str | None = None
    url: str | None = None

    def resolved_url(self) -> str:
        """The entry's link, or its discussion page when it has none."""
        if self.url:
            return self.url
        return item_url(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "detail": self.detail, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "Untitled",
            detail=data.get("detail"),
            url=data.get("url"),
        )


def _points_detail(points: int | None, author: str | None) -> str | None:
    if points is not None and author:
        return f"{format_points(points)} by {author}"
    if points is not None:
        return format_points(points)
    if author:
        return f"by {author}"
    return None


def entry_from_story(story: dict[str, Any]) -> Entry:
    """Build an Entry from a Firebase story item."""
    return Entry(
        id=str(story["id"]),
        title=story.get("title") or "Untitled",
        detail=_points_detail(story.get("score"), story.get("by")),
        url=story.get("url") or None,
    )


def entry_from_search_hit(hit: dict[str, Any]) -> Entry:
    """Build an Entry from an Algolia story search hit."""
    return Entry(
        id=str(hit["objectID"]),
        title=hit.get("title") or "Untitled",
        detail=_points_detail(hit.get("points"), hit.get("author")),
        url=hit.get("url") or None,
    )


def entry_from_comment_hit(hit: dict[str, Any]) -> Entry:
    """Build an Entry from an Algolia comment hit (the comments firehose)."""
    author = hit.get("author") or "unknown"
    snippet = sanitize_comment(hit.get("comment_text") or "")
    detail = f"{author}: {truncate(snippet, 120)}" if snippet else None

    url = hit.get("story_url")
    story_id = hit.get("story_id")
    if not url and story_id is not None:
        url = item_url(story_id)

    return Entry(
        id=str(hit["objectID"]),
        title=hit.get("story_title") or "Comment thread",
        detail=detail,
        url=url,
    )


@dataclass
class Comment:
    """A raw comment as returned by the fetch layer, children owned inline."""

    id: int
    author: str | None = None
    text: str | None = None
    dead: bool = False
    deleted: bool = False
    children: list["Comment"] = field(default_factory=list)


@dataclass
class CommentThread:
    """A fetched discussion. focus is set when the fetch targeted one comment."""

    roots: list[Comment]
    title: str = ""
    url: str | None = None
    focus: int | None = None


@dataclass
class CommentNode:
    """A row in the comment arena; parent and children are arena indices."""

    id: int
    body: str
    depth: int
    author: str | None = None
    dead: bool = False
    deleted: bool = False
    expanded: bool = True
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def header(self) -> str:
        author = self.author or "unknown"
        if self.deleted:
            return f"{author} (deleted)"
        if self.dead:
            return f"{author} (dead)"
        return author

    def to_bookmark_entry(self) -> Entry:
        """Normalize a comment into the Entry shape stored in bookmarks."""
        return Entry(
            id=str(self.id),
            title=f"Comment by {self.author or 'unknown'}",
            detail=truncate(self.body, 120) if self.body else None,
            url=item_url(self.id),
        )
