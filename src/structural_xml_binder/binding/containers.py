"""Container values assembled from repeated sibling elements."""

from bisect import bisect_left
from collections.abc import MutableSet
from typing import Any, Iterable, Iterator, List


class SortedUniqueSet(MutableSet):
    """Mutable set that iterates in sorted order.

    Two values are the same member when neither orders before the other, so
    duplicates are coalesced by the values' ordering rather than by hashing.
    Members must be mutually orderable; adding one that is not raises
    ``TypeError``.
    """

    def __init__(self, iterable: Iterable[Any] = ()) -> None:
        self._items: List[Any] = []
        for item in iterable:
            self.add(item)

    def _position(self, item: Any) -> int:
        return bisect_left(self._items, item)

    def _matches(self, index: int, item: Any) -> bool:
        return index < len(self._items) and not item < self._items[index]

    def __contains__(self, item: object) -> bool:
        try:
            index = self._position(item)
        except TypeError:
            return False
        return self._matches(index, item)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    def __repr__(self) -> str:
        return f"SortedUniqueSet({self._items!r})"

    def add(self, value: Any) -> None:
        index = self._position(value)
        if not self._matches(index, value):
            self._items.insert(index, value)

    def discard(self, value: Any) -> None:
        try:
            index = self._position(value)
        except TypeError:
            return
        if self._matches(index, value):
            del self._items[index]

    __hash__ = None  # type: ignore[assignment]
