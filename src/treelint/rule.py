"""Lint rules: a selector, an optional text pattern, and a lint callback.

A rule is checked at every node of a traversal with the same arguments the
TreeTransformer passes to its visitor::

    record = rule.check(node, state, content)

The selector is matched against the traversal state first. If it matches,
the pattern is searched for in the node's text content: a fixed string is
found with a substring search, a compiled regular expression with
``search()``, and a missing pattern matches the whole content. Only the
first occurrence is reported. The callback is then called as
``lint(selector_match, pattern_match)`` where selector_match is the list of
matched nodes (root first, the current node last) and pattern_match is an
``re.Match`` or a `PatternMatch` with the same interface.

The callback returns a falsy value when there is nothing to report, a
message string to flag the whole node, or a mapping with ``message``,
``start`` and ``end`` to flag just a span of the content. Passing a plain
message string instead of a callback uses a default that always reports
that message over the span the pattern matched.

Rules described as data (for example in JSON) are built with
`Rule.make_rule`, which accepts ``name``, ``selector``, ``pattern``,
``message`` and ``lint`` keys. Pattern strings that start with ``/`` are
compiled to regular expressions; anything else is a fixed string.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from .selector import (
    Selector,
    SelectorError,
    SelectorList,
    TypeSelector,
    WithPattern,
    match_selector,
    parse_selector,
)
from .state import TraversalState

Pattern = str | re.Pattern[str]
LintResult = Any
LintCallback = Callable[[list[dict[str, Any]], Any], LintResult]


class RuleError(ValueError):
    """Raised when a lint rule is misconfigured."""


class LintRecord:
    """A single lint warning, with a span into the node's text content."""

    __slots__ = ("end", "message", "rule", "start")

    def __init__(self, rule: str | None, message: str, start: int = 0, end: int = 0) -> None:
        self.rule = rule
        self.message = message
        self.start = start
        self.end = end

    def to_dict(self) -> dict[str, Any]:
        return {"rule": self.rule, "message": self.message, "start": self.start, "end": self.end}

    def __repr__(self) -> str:
        return f"LintRecord({self.rule!r}, start={self.start}, end={self.end})"

    def __str__(self) -> str:
        title = self.message.split("\n", 1)[0]
        return f"{self.rule}: {title} [{self.start}:{self.end}]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LintRecord):
            return NotImplemented
        return (
            self.rule == other.rule
            and self.message == other.message
            and self.start == other.start
            and self.end == other.end
        )

    __hash__ = None  # Unhashable since we define __eq__


class PatternMatch:
    """Stand-in for ``re.Match`` when the pattern is a fixed string or absent."""

    __slots__ = ("_end", "_start", "string")

    def __init__(self, string: str, start: int, end: int) -> None:
        self.string = string
        self._start = start
        self._end = end

    def group(self, index: int = 0) -> str:
        if index != 0:
            raise IndexError("no such group")
        return self.string[self._start : self._end]

    def __getitem__(self, index: int) -> str:
        return self.group(index)

    def start(self) -> int:
        return self._start

    def end(self) -> int:
        return self._end

    def span(self) -> tuple[int, int]:
        return (self._start, self._end)

    def __repr__(self) -> str:
        return f"<PatternMatch span=({self._start}, {self._end}), match={self.group()!r}>"


def make_pattern(pattern: Pattern | None) -> Pattern | None:
    """Normalize a rule pattern.

    Compiled expressions and strings that don't start with a slash are
    returned unchanged. ``"/body/"`` and ``"/body/i"`` are compiled.
    """
    if not pattern or isinstance(pattern, re.Pattern) or not pattern.startswith("/"):
        return pattern or None

    last_slash = pattern.rfind("/")
    if last_slash == 0:
        raise RuleError(f"Unterminated pattern: {pattern!r}")
    body = pattern[1:last_slash]
    flags = pattern[last_slash + 1 :]
    if flags not in ("", "i"):
        raise RuleError(f"Unsupported pattern flags {flags!r} in {pattern!r}")
    try:
        return re.compile(body, re.IGNORECASE if flags else 0)
    except re.error as exc:
        raise RuleError(f"Invalid pattern {pattern!r}: {exc}") from exc


def _search(pattern: Pattern | None, content: str) -> re.Match[str] | PatternMatch | None:
    if pattern is None:
        return PatternMatch(content, 0, len(content))
    if isinstance(pattern, str):
        index = content.find(pattern)
        if index == -1:
            return None
        return PatternMatch(content, index, index + len(pattern))
    return pattern.search(content)


# Rules without a selector apply their pattern to text leaves
DEFAULT_SELECTOR: Selector = TypeSelector("text")


class Rule:
    __slots__ = ("_alternatives", "lint", "message", "name", "pattern", "selector")

    def __init__(
        self,
        name: str,
        selector: Selector | str | None = None,
        pattern: Pattern | None = None,
        lint: LintCallback | str | None = None,
    ) -> None:
        if not selector and not pattern:
            raise RuleError(f"Lint rule {name!r} must have a selector or a pattern")

        if isinstance(selector, str):
            try:
                selector = parse_selector(selector)
            except SelectorError as exc:
                raise RuleError(f"Lint rule {name!r} has a bad selector: {exc}") from exc

        self.name = name
        self.selector: Selector = selector or DEFAULT_SELECTOR
        self.pattern = make_pattern(pattern)

        if callable(lint):
            self.lint: LintCallback = lint
            self.message: str | None = None
        elif isinstance(lint, str):
            self.lint = self._default_lint
            self.message = lint
        else:
            raise RuleError(f"Lint rule {name!r} needs a lint function or a message")

        # Each alternative carries the pattern it is tested with: its own
        # trailing /pattern/ if it has one, otherwise the rule's pattern.
        alternatives = self.selector.alternatives if isinstance(self.selector, SelectorList) else (self.selector,)
        self._alternatives: tuple[tuple[Selector, Pattern | None], ...] = tuple(
            (alt, alt.pattern if isinstance(alt, WithPattern) else self.pattern) for alt in alternatives
        )

    @classmethod
    def make_rule(cls, options: Mapping[str, Any]) -> Rule:
        """Build a rule from a description record."""
        selector = options.get("selector")
        return cls(
            options.get("name") or "unnamed rule",
            parse_selector(selector) if selector else None,
            make_pattern(options.get("pattern")),
            options.get("lint") or options.get("message"),
        )

    def check(self, node: dict[str, Any], state: TraversalState, content: str) -> LintRecord | bool:
        """Check the current node. Returns False, or the LintRecord for it."""
        for selector, pattern in self._alternatives:
            selector_match = match_selector(selector, state)
            if selector_match is None:
                continue
            pattern_match = _search(pattern, content)
            if pattern_match is not None:
                break
        else:
            return False

        error = self.lint(selector_match, pattern_match)

        if not error:
            return False
        if isinstance(error, str):
            return LintRecord(self.name, error, 0, len(content))
        if isinstance(error, LintRecord):
            error.rule = self.name
            return error
        if isinstance(error, Mapping):
            if "message" not in error:
                raise RuleError(f"Lint rule {self.name!r} returned a result without a message")
            return LintRecord(
                self.name,
                str(error["message"]),
                int(error.get("start", 0)),
                int(error.get("end", len(content))),
            )
        raise TypeError(f"Lint rule {self.name!r} returned unsupported result: {type(error).__name__}")

    def _default_lint(self, selector_match: list[dict[str, Any]], pattern_match: Any) -> LintRecord:
        return LintRecord(None, self.message or "", pattern_match.start(), pattern_match.end())

    def __repr__(self) -> str:
        return f"Rule({self.name!r}, {str(self.selector)!r})"
