"""Lint driver: run a rule catalogue over a document tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .diagnostics import _ERROR_SINK, LintDiagnostic, emit_lint_error
from .rule import LintRecord, Rule
from .rules import ALL_RULES
from .state import TraversalState, is_text_node
from .transformer import TreeTransformer

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Protocol

    class ReportCallback(Protocol):
        def __call__(self, msg: str, *, node: Any | None = None) -> None: ...


def run_lint(
    tree: Any,
    rules: Sequence[Rule] | None = None,
    *,
    highlight: bool = False,
    report: ReportCallback | None = None,
    errors: list[LintDiagnostic] | None = None,
    debug: bool = False,
) -> list[LintRecord]:
    """Check every node of `tree` against every rule.

    Records come back in traversal order (post-order, left to right) and,
    for any one node, in rule order.

    With ``highlight=True`` the tree is also edited so each flagged node is
    wrapped in a ``lint`` node carrying the messages. Text leaves flagged on
    part of their content are split so only that span is wrapped. Wrapping
    happens after the walk, so no rule ever sees another rule's wrappers.
    """
    if rules is None:
        rules = ALL_RULES

    records: list[LintRecord] = []
    flagged: list[tuple[TraversalState, dict[str, Any], str, list[LintRecord]]] = []
    transformer = TreeTransformer(tree, debug=debug)

    def visit(node: dict[str, Any], state: TraversalState, content: str) -> None:
        found: list[LintRecord] = []
        for rule in rules:
            record = rule.check(node, state, content)
            if record:
                found.append(record)
                if report is not None:
                    title = record.message.split("\n", 1)[0]
                    report(f"{record.rule}: {title}", node=node)
                if debug:
                    transformer.debug(f"{record.rule} fired at {node['type']}", indent=2 * state.depth() + 2)
        if found:
            records.extend(found)
            if highlight:
                flagged.append((state.clone(), node, content, found))

    token = _ERROR_SINK.set(errors)
    try:
        transformer.traverse(visit)
        # Later positions first, so splicing a text leaf never shifts the
        # index recorded for a node still waiting to be wrapped.
        for state, node, content, found in reversed(flagged):
            _highlight(state, node, content, found)
    finally:
        _ERROR_SINK.reset(token)

    return records


def lint_node(content: list[Any], records: Sequence[LintRecord], *, inside_table: bool = False) -> dict[str, Any]:
    """Build the node that marks `content` as flagged by `records`."""
    return {
        "type": "lint",
        "content": content,
        "message": "\n\n".join(record.message for record in records),
        "rules": [record.rule for record in records],
        "insideTable": inside_table,
    }


def _highlight(state: TraversalState, node: dict[str, Any], content: str, records: list[LintRecord]) -> None:
    if state.is_root():
        emit_lint_error("unhighlighted-root", node=node, message="The root node can't be wrapped in a lint node")
        return

    inside_table = any(ancestor["type"] == "table" for ancestor in state.ancestors())

    if is_text_node(node):
        # Clamp to the content; an inverted span collapses to empty at start
        start = min(max(min(record.start for record in records), 0), len(content))
        end = max(start, min(max(record.end for record in records), len(content)))
        if 0 < start or end < len(content):
            pieces: list[dict[str, Any]] = []
            if start > 0:
                pieces.append({"type": "text", "content": content[:start]})
            pieces.append(lint_node([{"type": "text", "content": content[start:end]}], records, inside_table=inside_table))
            if end < len(content):
                pieces.append({"type": "text", "content": content[end:]})
            state.replace(pieces)
            return

    state.replace(lint_node([node], records, inside_table=inside_table))


def merge_adjacent_text(tree: Any) -> None:
    """Merge runs of adjacent text leaves into the first leaf of each run."""

    def visit(node: dict[str, Any], state: TraversalState, content: str) -> None:
        if not is_text_node(node):
            return
        following = state.next_sibling()
        while is_text_node(following):
            node["content"] += following["content"]
            state.remove_next_sibling()
            following = state.next_sibling()

    TreeTransformer(tree).traverse(visit)


def character_count(tree: Any) -> int:
    """Return the total length of the text leaves in `tree`."""
    total = 0

    def visit(node: dict[str, Any], state: TraversalState, content: str) -> None:
        nonlocal total
        if is_text_node(node):
            total += len(content)

    TreeTransformer(tree).traverse(visit)
    return total
