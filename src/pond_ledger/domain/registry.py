"""Enumerable id registry with O(1) add, lookup and removal.

Removal swaps the last element into the removed slot, so iteration order is
insertion order only until the first removal.
"""

from collections.abc import Iterator


class OrderedIdSet:
    def __init__(self) -> None:
        self._items: list[str] = []
        self._index: dict[str, int] = {}

    def add(self, item: str) -> bool:
        if item in self._index:
            return False
        self._index[item] = len(self._items)
        self._items.append(item)
        return True

    def remove(self, item: str) -> bool:
        idx = self._index.pop(item, None)
        if idx is None:
            return False
        last = self._items.pop()
        if idx < len(self._items):
            self._items[idx] = last
            self._index[last] = idx
        return True

    def __contains__(self, item: object) -> bool:
        return item in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> list[str]:
        return list(self._items)
