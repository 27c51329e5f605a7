"""A small list-backed LIFO used for traversal bookkeeping."""

from __future__ import annotations

from typing import Any


class Stack:
    __slots__ = ("_items",)

    def __init__(self, items: list[Any] | None = None) -> None:
        self._items: list[Any] = list(items) if items else []

    def push(self, value: Any) -> None:
        self._items.append(value)

    def pop(self) -> Any:
        return self._items.pop()

    def top(self) -> Any:
        """Return the last pushed value, or None when empty."""
        if self._items:
            return self._items[-1]
        return None

    def replace_top(self, value: Any) -> None:
        self._items[-1] = value

    def size(self) -> int:
        return len(self._items)

    def values(self) -> list[Any]:
        # Snapshot; callers may mutate it freely
        return self._items[:]

    def copy(self) -> Stack:
        return Stack(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        if len(self._items) != len(other._items):
            return False
        # Containers and nodes compare by identity, indexes by value
        for mine, theirs in zip(self._items, other._items):
            if isinstance(mine, (dict, list)) or isinstance(theirs, (dict, list)):
                if mine is not theirs:
                    return False
            elif mine != theirs:
                return False
        return True

    __hash__ = None  # Unhashable since we define __eq__

    def __repr__(self) -> str:
        return f"Stack({self._items!r})"
