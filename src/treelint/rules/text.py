"""Rules about running text."""

from __future__ import annotations

from ..config import LintConfig
from ..rule import Rule


def long_paragraph(config: LintConfig) -> Rule:
    limit = config.max_paragraph_length

    def lint(nodes, match):
        length = len(match.string)
        if length > limit:
            return f"""Paragraph too long:
This paragraph is {length} characters long.
Shorten it to {limit} characters or fewer."""
        return None

    return Rule.make_rule({"name": "long-paragraph", "selector": "paragraph", "lint": lint})


def unescaped_dollar(config: LintConfig) -> Rule:
    return Rule.make_rule(
        {
            "name": "unescaped-dollar",
            "selector": "unescapedDollar",
            "message": """Unescaped '$':
If writing math, pair with another $.
Otherwise escape it by writing \\$.""",
        }
    )


def double_spacing_after_terminal(config: LintConfig) -> Rule:
    # No selector: the pattern is tested against every text leaf
    return Rule.make_rule(
        {
            "name": "double-spacing-after-terminal",
            "pattern": r"/[.!?] {2,}/",
            "message": """Use a single space after a sentence-ending punctuation mark:
don't use two spaces after a period, question mark or exclamation mark.""",
        }
    )
