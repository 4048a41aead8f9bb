"""Flat, append-only list view model with clamped selection and offset."""

from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


def scroll_offset(offset: int, selected: int | None, height: int) -> int:
    """Return the smallest change to offset that keeps selected on screen."""
    if selected is None:
        return 0
    height = max(height, 1)
    if selected < offset:
        return selected
    if selected >= offset + height:
        return selected - height + 1
    return offset


class ListView(Generic[T]):
    """Ordered items plus a selection index and scroll offset.

    The raw selection is kept as requested; readers get it clamped into
    range, so a view that is empty now and filled later still honors it.
    """

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._items: list[T] = list(items) if items is not None else []
        self._selected = 0
        self._offset = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[T]:
        return self._items

    def is_empty(self) -> bool:
        return not self._items

    def extend(self, items: Iterable[T]) -> None:
        self._items.extend(items)

    def selected_index(self) -> int | None:
        if not self._items:
            return None
        return min(self._selected, len(self._items) - 1)

    def selected_raw(self) -> int:
        return self._selected

    def selected_item(self) -> T | None:
        index = self.selected_index()
        return None if index is None else self._items[index]

    def set_selected(self, index: int) -> None:
        if not self._items:
            self._selected = 0
        else:
            self._selected = max(0, min(index, len(self._items) - 1))

    def offset(self) -> int:
        if not self._items:
            return 0
        return min(self._offset, self.selected_index() or 0)

    def set_offset(self, offset: int) -> None:
        if not self._items:
            self._offset = 0
        else:
            self._offset = max(0, min(offset, len(self._items) - 1))
