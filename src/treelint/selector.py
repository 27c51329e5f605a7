# Structural selectors for document trees.
# Supports node types, the wildcard, the four CSS combinators, comma
# alternation, and a trailing /pattern/ text filter.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .state import TraversalState


class SelectorError(ValueError):
    """Raised when a selector string is invalid."""


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class CombinatorKind(_StrEnum):
    ANCESTOR = "ancestor"
    PARENT = "parent"
    PREVIOUS = "previous"
    SIBLING = "sibling"


_COMBINATOR_SYMBOLS: dict[str, CombinatorKind] = {
    " ": CombinatorKind.ANCESTOR,
    ">": CombinatorKind.PARENT,
    "+": CombinatorKind.PREVIOUS,
    "~": CombinatorKind.SIBLING,
}

_COMBINATOR_TEXT: dict[CombinatorKind, str] = {
    CombinatorKind.ANCESTOR: " ",
    CombinatorKind.PARENT: " > ",
    CombinatorKind.PREVIOUS: " + ",
    CombinatorKind.SIBLING: " ~ ",
}


# -----------------
# Tokenizer
# -----------------


class TokenType:
    IDENT: str = "IDENT"  # paragraph, heading, ...
    INTEGER: str = "INTEGER"
    UNIVERSAL: str = "UNIVERSAL"  # *
    COMBINATOR: str = "COMBINATOR"  # >, +, ~, or whitespace (descendant)
    COMMA: str = "COMMA"  # ,
    PATTERN: str = "PATTERN"  # /regex/ or /regex/i
    OTHER: str = "OTHER"  # any other single character
    EOF: str = "EOF"


class Token:
    __slots__ = ("flags", "pos", "type", "value")

    type: str
    value: str | None
    pos: int
    flags: str

    def __init__(self, token_type: str, value: str | None = None, pos: int = 0, flags: str = "") -> None:
        self.type = token_type
        self.value = value
        self.pos = pos
        self.flags = flags

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


class SelectorTokenizer:
    """Tokenizes a selector string.

    Whitespace is only significant as the descendant combinator: it becomes
    a token when it separates two node selectors, and is dropped everywhere
    else (around >, +, ~ and commas, and before a pattern).
    """

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < self.length:
            return self.selector[pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.selector[self.pos].isspace():
            self.pos += 1

    def _read_while(self, predicate: Any) -> str:
        start = self.pos
        while self.pos < self.length and predicate(self.selector[self.pos]):
            self.pos += 1
        return self.selector[start : self.pos]

    def _read_pattern(self) -> Token:
        start = self.pos
        # Skip the opening slash
        self.pos += 1
        body_start = self.pos
        in_class = False
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                break
            self.pos += 1
        else:
            raise SelectorError(f"Unterminated pattern at position {start} in {self.selector!r}")

        body = self.selector[body_start : self.pos]
        # Skip the closing slash
        self.pos += 1
        flags = self._read_while(str.isalnum)
        if flags not in ("", "i"):
            raise SelectorError(f"Unsupported pattern flags {flags!r} at position {start}")
        return Token(TokenType.PATTERN, body, start, flags)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pending_whitespace = False

        while self.pos < self.length:
            ch = self.selector[self.pos]

            if ch.isspace():
                pending_whitespace = True
                self._skip_whitespace()
                continue

            # Whitespace between two node selectors is the descendant combinator
            if (
                pending_whitespace
                and tokens
                and tokens[-1].type in (TokenType.IDENT, TokenType.UNIVERSAL)
                and (ch == "*" or ch.isalpha())
            ):
                tokens.append(Token(TokenType.COMBINATOR, " ", self.pos))
            pending_whitespace = False

            if ch.isalpha():
                start = self.pos
                name = self._read_while(lambda c: c.isalnum() or c == "_")
                tokens.append(Token(TokenType.IDENT, name, start))
                continue

            if ch.isdigit():
                start = self.pos
                tokens.append(Token(TokenType.INTEGER, self._read_while(str.isdigit), start))
                continue

            if ch == "/":
                tokens.append(self._read_pattern())
                continue

            if ch == "*":
                tokens.append(Token(TokenType.UNIVERSAL, ch, self.pos))
            elif ch in ">+~":
                tokens.append(Token(TokenType.COMBINATOR, ch, self.pos))
            elif ch == ",":
                tokens.append(Token(TokenType.COMMA, ch, self.pos))
            else:
                tokens.append(Token(TokenType.OTHER, ch, self.pos))
            self.pos += 1

        tokens.append(Token(TokenType.EOF, None, self.length))
        return tokens


# -----------------
# Selector AST
# -----------------


class SelectorNode:
    """Base for the fixed set of selector variants.

    Matching and formatting are dispatched centrally by `match_selector` and
    `format_selector`; the variants themselves only carry data.
    """

    __slots__ = ()

    def match(self, state: TraversalState) -> list[dict[str, Any]] | None:
        return match_selector(self, state)

    def __str__(self) -> str:
        return format_selector(self)


@dataclass(frozen=True, slots=True)
class AnyNode(SelectorNode):
    pass


@dataclass(frozen=True, slots=True)
class TypeSelector(SelectorNode):
    type: str


@dataclass(frozen=True, slots=True)
class Combinator(SelectorNode):
    kind: CombinatorKind
    left: Selector
    right: Selector


@dataclass(frozen=True, slots=True)
class WithPattern(SelectorNode):
    """A tree selector with a trailing text filter.

    The filter is applied by the rule layer, against the matched node's text.
    The expression is compiled on construction, so a bad one raises
    SelectorError right away.
    """

    selector: Selector
    source: str
    flags: str = ""
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.source, re.IGNORECASE if "i" in self.flags else 0)
        except re.error as exc:
            raise SelectorError(f"Invalid pattern /{self.source}/: {exc}") from exc
        object.__setattr__(self, "pattern", compiled)


@dataclass(frozen=True, slots=True)
class SelectorList(SelectorNode):
    alternatives: tuple[Selector, ...]


Selector = AnyNode | TypeSelector | Combinator | WithPattern | SelectorList


# -----------------
# Parser
# -----------------


class SelectorParser:
    """Parses a list of tokens into a selector AST.

    selector     := treeSelector (',' treeSelector)*
    treeSelector := nodeSelector (combinator nodeSelector)* pattern?
    nodeSelector := '*' | IDENT
    """

    __slots__ = ("pos", "tokens")

    tokens: list[Token]
    pos: int

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token(TokenType.EOF)

    def _advance(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def parse(self) -> Selector:
        alternatives = [self._parse_tree_selector()]
        while self._peek().type == TokenType.COMMA:
            self._advance()
            alternatives.append(self._parse_tree_selector())

        token = self._peek()
        if token.type != TokenType.EOF:
            raise SelectorError(f"Unexpected token {token.value!r} at position {token.pos}")

        if len(alternatives) == 1:
            return alternatives[0]
        return SelectorList(tuple(alternatives))

    def _parse_tree_selector(self) -> Selector:
        selector = self._parse_node_selector()
        while True:
            token = self._peek()
            if token.type == TokenType.COMBINATOR:
                self._advance()
                kind = _COMBINATOR_SYMBOLS[token.value or " "]
                selector = Combinator(kind, selector, self._parse_node_selector())
            elif token.type == TokenType.PATTERN:
                self._advance()
                following = self._peek()
                if following.type not in (TokenType.COMMA, TokenType.EOF):
                    raise SelectorError(
                        f"A pattern must come last in a selector; found {following.value!r} "
                        f"at position {following.pos}"
                    )
                return WithPattern(selector, token.value or "", token.flags)
            else:
                return selector

    def _parse_node_selector(self) -> Selector:
        token = self._peek()
        if token.type == TokenType.UNIVERSAL:
            self._advance()
            return AnyNode()
        if token.type == TokenType.IDENT:
            self._advance()
            return TypeSelector(token.value or "")
        found = "end of selector" if token.type == TokenType.EOF else repr(token.value)
        raise SelectorError(f"Expected node type at position {token.pos}, found {found}")


def parse_selector(selector_string: str) -> Selector:
    """Compile a selector string into a selector AST."""
    if not selector_string or not selector_string.strip():
        raise SelectorError("Empty selector")

    tokens = SelectorTokenizer(selector_string.strip()).tokenize()
    return SelectorParser(tokens).parse()


# -----------------
# Matching
# -----------------


def match_selector(selector: Selector, state: TraversalState) -> list[dict[str, Any]] | None:
    """Match a selector at the state's current node.

    Returns the matched nodes ordered root-to-leaf, ending with the current
    node, or None when the selector does not match. The state passed in is
    never moved; combinators walk on clones.
    """
    if isinstance(selector, AnyNode):
        return [state.current_node()]

    if isinstance(selector, TypeSelector):
        node = state.current_node()
        if node is not None and node["type"] == selector.type:
            return [node]
        return None

    if isinstance(selector, Combinator):
        return _match_combinator(selector, state)

    if isinstance(selector, WithPattern):
        return match_selector(selector.selector, state)

    if isinstance(selector, SelectorList):
        for alternative in selector.alternatives:
            result = match_selector(alternative, state)
            if result is not None:
                return result
        return None

    raise TypeError(f"Unsupported selector: {type(selector).__name__}")


def _match_combinator(selector: Combinator, state: TraversalState) -> list[dict[str, Any]] | None:
    right_result = match_selector(selector.right, state)
    if right_result is None:
        return None

    kind = selector.kind
    if kind == CombinatorKind.PARENT:
        if not state.has_parent():
            return None
        cursor = state.clone()
        cursor.go_to_parent()
        left_result = match_selector(selector.left, cursor)
        return None if left_result is None else left_result + right_result

    if kind == CombinatorKind.PREVIOUS:
        if not state.has_previous_sibling():
            return None
        cursor = state.clone()
        cursor.go_to_previous_sibling()
        left_result = match_selector(selector.left, cursor)
        return None if left_result is None else left_result + right_result

    # Ancestor and sibling walks stop at the nearest candidate that matches.
    cursor = state.clone()
    if kind == CombinatorKind.ANCESTOR:
        while cursor.has_parent():
            cursor.go_to_parent()
            left_result = match_selector(selector.left, cursor)
            if left_result is not None:
                return left_result + right_result
        return None

    if kind == CombinatorKind.SIBLING:
        while cursor.has_previous_sibling():
            cursor.go_to_previous_sibling()
            left_result = match_selector(selector.left, cursor)
            if left_result is not None:
                return left_result + right_result
        return None

    raise TypeError(f"Unsupported combinator: {kind!r}")


def format_selector(selector: Selector) -> str:
    if isinstance(selector, AnyNode):
        return "*"
    if isinstance(selector, TypeSelector):
        return selector.type
    if isinstance(selector, Combinator):
        return format_selector(selector.left) + _COMBINATOR_TEXT[selector.kind] + format_selector(selector.right)
    if isinstance(selector, WithPattern):
        return f"{format_selector(selector.selector)} /{selector.source}/{selector.flags}"
    if isinstance(selector, SelectorList):
        return ", ".join(format_selector(alt) for alt in selector.alternatives)
    raise TypeError(f"Unsupported selector: {type(selector).__name__}")
