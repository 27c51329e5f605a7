"""Traversal cursor for markdown-derived document trees.

An instance of TraversalState is handed to the visitor for every node a
TreeTransformer walks. It records where the visited node sits in the tree
through three stacks:

- containers: the lists, nodes and plain records passed through on the way
  down to the current node. The top is the object that holds it.
- indexes: the position (list index or record key) used at each container.
  ``containers.top()[indexes.top()]`` is always the current node.
- ancestors: only the document nodes among the containers, root first.

The read methods are safe to call at any time. The mutation methods
(`replace`, `remove_next_sibling`) only touch the current position and its
following sibling, and adjust the pending index so the enclosing walk keeps
going from the right place. `go_to_parent` and `go_to_previous_sibling` move
the cursor and are meant for clones used in speculative selector matching.
"""

from __future__ import annotations

from typing import Any

from .stack import Stack


class TraversalError(RuntimeError):
    """Raised when a traversal or mutation precondition is violated."""


def is_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def is_text_node(value: Any) -> bool:
    return is_node(value) and value["type"] == "text" and isinstance(value.get("content"), str)


class TraversalState:
    __slots__ = ("_ancestors", "_containers", "_current_node", "_indexes", "root")

    def __init__(self, root: Any) -> None:
        self.root = root
        self._current_node: dict[str, Any] | None = None
        self._containers = Stack()
        self._indexes = Stack()
        self._ancestors = Stack()

    # -----------------
    # Queries
    # -----------------

    def current_node(self) -> dict[str, Any] | None:
        return self._current_node

    def parent(self) -> dict[str, Any] | None:
        """Return the nearest ancestor node, or None at the root."""
        return self._ancestors.top()

    def ancestors(self) -> list[dict[str, Any]]:
        """Return a root-first snapshot of the ancestor nodes."""
        return self._ancestors.values()

    def depth(self) -> int:
        return self._ancestors.size()

    def is_root(self) -> bool:
        """True when the current node is the tree root, with no container."""
        return self._containers.size() == 0

    def has_parent(self) -> bool:
        return self._ancestors.size() > 0

    def previous_sibling(self) -> Any:
        siblings = self._containers.top()
        # At the root, or inside a record rather than a list: no siblings
        if not isinstance(siblings, list):
            return None
        index = self._indexes.top()
        if 0 < index <= len(siblings):
            return siblings[index - 1]
        return None

    def next_sibling(self) -> Any:
        siblings = self._containers.top()
        if not isinstance(siblings, list):
            return None
        index = self._indexes.top()
        if index + 1 < len(siblings):
            return siblings[index + 1]
        return None

    def has_previous_sibling(self) -> bool:
        siblings = self._containers.top()
        return isinstance(siblings, list) and 0 < self._indexes.top() <= len(siblings)

    # -----------------
    # Tree mutation
    # -----------------

    def replace(self, new_nodes: Any = None) -> None:
        """Replace the current node in the tree.

        - None or an empty list deletes the node.
        - A single node replaces it one-for-one.
        - A non-empty list is spliced in its place. The spliced nodes are
          not visited by the active traversal, so this can be used to wrap
          the current node in a new parent.
        """
        container = self._containers.top()
        if container is None:
            raise TraversalError("Can't replace the root of the tree")
        index = self._indexes.top()

        if isinstance(new_nodes, list) and not new_nodes:
            new_nodes = None

        if new_nodes is None:
            if isinstance(container, list):
                del container[index]
                # Step back so the enclosing loop resumes at the node that
                # slid into this slot.
                self._indexes.replace_top(index - 1)
            else:
                del container[index]
        elif isinstance(new_nodes, list):
            if isinstance(container, list):
                container[index : index + 1] = new_nodes
                self._indexes.replace_top(index + len(new_nodes) - 1)
            else:
                container[index] = new_nodes
        else:
            container[index] = new_nodes

    def remove_next_sibling(self) -> Any:
        """Remove and return the following sibling, or None if there isn't one."""
        siblings = self._containers.top()
        if isinstance(siblings, list):
            index = self._indexes.top()
            if index + 1 < len(siblings):
                return siblings.pop(index + 1)
        return None

    # -----------------
    # Speculative navigation
    # -----------------

    def clone(self) -> TraversalState:
        """Return an independent copy that shares the tree but not the stacks."""
        copy = TraversalState(self.root)
        copy._current_node = self._current_node
        copy._containers = self._containers.copy()
        copy._indexes = self._indexes.copy()
        copy._ancestors = self._ancestors.copy()
        return copy

    def go_to_parent(self) -> None:
        if not self.has_parent():
            raise TraversalError("Can't go to the parent of the root node")
        parent = self._ancestors.pop()
        # Unwind lists and records between us and the parent, then the
        # parent's own frame so the top describes the parent's position.
        while self._containers.top() is not parent:
            self._containers.pop()
            self._indexes.pop()
        self._containers.pop()
        self._indexes.pop()
        self._current_node = parent

    def go_to_previous_sibling(self) -> None:
        if not self.has_previous_sibling():
            raise TraversalError("Node has no previous sibling")
        index = self._indexes.top() - 1
        self._indexes.replace_top(index)
        self._current_node = self._containers.top()[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TraversalState):
            return NotImplemented
        return (
            self._current_node is other._current_node
            and self._containers == other._containers
            and self._indexes == other._indexes
            and self._ancestors == other._ancestors
        )

    __hash__ = None  # Unhashable since we define __eq__

    def equals(self, other: TraversalState) -> bool:
        return self == other

    def __repr__(self) -> str:
        node_type = self._current_node["type"] if self._current_node is not None else None
        return f"TraversalState(node={node_type!r}, depth={self.depth()}, index={self._indexes.top()!r})"
