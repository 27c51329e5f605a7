"""Mutation-safe post-order walk over document trees."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from .state import TraversalState, is_node

if TYPE_CHECKING:
    from collections.abc import Callable

    Visitor = Callable[[dict[str, Any], TraversalState, str], object]


class TreeTransformer:
    """Walk a tree depth-first, calling a visitor after each node's children.

    The visitor is called as ``visitor(node, state, content)`` where content
    is the concatenated text of every text leaf under the node. The visitor
    may call ``state.replace()`` or ``state.remove_next_sibling()``; the list
    loop re-reads its index from the state after every child, so deletions
    and insertions never cause a node to be skipped or visited twice.
    """

    __slots__ = ("debug_enabled", "root")

    def __init__(self, root: Any, *, debug: bool = False) -> None:
        self.root = root
        self.debug_enabled = bool(debug)

    def debug(self, message: str, indent: int = 0) -> None:
        if self.debug_enabled:
            print(f"{' ' * indent}{message}", file=sys.stderr)

    def traverse(self, visitor: Visitor) -> None:
        self._traverse(self.root, TraversalState(self.root), visitor)

    def _traverse(self, value: Any, state: TraversalState, visitor: Visitor) -> str:
        content = ""
        if is_node(value):
            state._containers.push(value)
            state._ancestors.push(value)

            if value["type"] == "text" and isinstance(value.get("content"), str):
                content = value["content"]

            content += self._traverse_fields(value, state, visitor)

            state._ancestors.pop()
            state._containers.pop()
            state._current_node = value

            if self.debug_enabled:
                self.debug(f"visit {value['type']} ({len(content)} chars)", indent=2 * state.depth())
            visitor(value, state, content)

        elif isinstance(value, list):
            state._containers.push(value)
            index = 0
            # len() is re-read every time: the visitor may splice this list
            while index < len(value):
                state._indexes.push(index)
                content += self._traverse(value[index], state, visitor)
                index = state._indexes.pop() + 1
            state._containers.pop()

        elif isinstance(value, dict):
            # A plain record: walked through, but never an ancestor
            state._containers.push(value)
            content += self._traverse_fields(value, state, visitor)
            state._containers.pop()

        return content

    def _traverse_fields(self, record: dict[str, Any], state: TraversalState, visitor: Visitor) -> str:
        content = ""
        # Snapshot the keys: replace(None) on a child deletes its field
        for key in list(record):
            if key == "type" or key not in record:
                continue
            child = record[key]
            if isinstance(child, (dict, list)):
                state._indexes.push(key)
                content += self._traverse(child, state, visitor)
                state._indexes.pop()
        return content
