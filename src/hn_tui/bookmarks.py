"""Persistent bookmark list for hn-tui."""

import json
import logging
from pathlib import Path

from filelock import FileLock

from .models import Entry

logger = logging.getLogger(__name__)


class BookmarkError(Exception):
    """Raised when the bookmark file cannot be read or written."""


class Bookmarks:
    """Ordered bookmark list keyed by entry id, most recently added first.

    Every change is written through to disk immediately under a file lock.
    A failed write raises BookmarkError and leaves the in-memory list as it
    was before the change.
    """

    def __init__(self, path: Path, entries: list[Entry] | None = None) -> None:
        self._path = path
        self._lock_file = path.with_name(f"{path.name}.lock")
        self._entries: list[Entry] = list(entries or [])
        self._ids = {entry.id for entry in self._entries}

    @classmethod
    def load(cls, path: Path) -> "Bookmarks":
        """Load bookmarks from path; a missing or empty file means no bookmarks."""
        if not path.exists():
            return cls(path)
        try:
            with FileLock(path.with_name(f"{path.name}.lock")):
                raw = path.read_text()
            data = json.loads(raw) if raw.strip() else []
            entries = [Entry.from_dict(item) for item in data]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise BookmarkError(f"Failed to read bookmarks from {path}: {e}") from e
        logger.debug(f"Loaded {len(entries)} bookmarks from {path}")
        return cls(path, entries)

    @property
    def path(self) -> Path:
        return self._path

    def entries(self) -> list[Entry]:
        return list(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._ids

    def toggle(self, entry: Entry) -> bool:
        """Add entry at the front, or remove it if present.

        Returns True if the entry is bookmarked afterwards.
        """
        previous = list(self._entries)
        if entry.id in self._ids:
            self._entries = [e for e in self._entries if e.id != entry.id]
            added = False
        else:
            self._entries.insert(0, entry)
            added = True

        try:
            self._persist()
        except BookmarkError:
            self._entries = previous
            raise

        self._ids = {e.id for e in self._entries}
        return added

    def remove(self, entry_id: str) -> bool:
        """Remove by id. Returns True if something was removed."""
        if entry_id not in self._ids:
            return False
        previous = list(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        try:
            self._persist()
        except BookmarkError:
            self._entries = previous
            raise
        self._ids.discard(entry_id)
        return True

    def _persist(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(self._lock_file):
                with open(self._path, "w") as f:
                    json.dump([e.to_dict() for e in self._entries], f, indent=2)
        except OSError as e:
            raise BookmarkError(f"Failed to write bookmarks to {self._path}: {e}") from e
