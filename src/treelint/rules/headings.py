"""Heading level and capitalization rules."""

from __future__ import annotations

from ..config import LintConfig
from ..rule import Rule


def heading_level_1(config: LintConfig) -> Rule:
    minimum = config.min_heading_level

    def lint(nodes, match):
        level = nodes[0].get("level")
        if isinstance(level, int) and level < minimum:
            hashes = "#" * minimum
            return f"""Don't use level-{level} headings:
Begin headings with {hashes} or more # characters."""
        return None

    return Rule.make_rule({"name": "heading-level-1", "selector": "heading", "lint": lint})


def heading_level_skip(config: LintConfig) -> Rule:
    # The sibling combinator stops at the nearest earlier heading, which is
    # exactly the one this heading's level should follow.
    def lint(nodes, match):
        previous, current = nodes[0].get("level"), nodes[1].get("level")
        if isinstance(previous, int) and isinstance(current, int) and current - previous > 1:
            return f"""Skipped heading level:
this heading is level {current} but the previous heading was level {previous}."""
        return None

    return Rule.make_rule({"name": "heading-level-skip", "selector": "heading ~ heading", "lint": lint})


def heading_title_case(config: LintConfig) -> Rule:
    # A capitalized word that isn't the first word and doesn't follow a colon.
    # All-caps words (acronyms) don't count.
    return Rule.make_rule(
        {
            "name": "heading-title-case",
            "selector": "heading",
            "pattern": r"/[^\s:]\s+[A-Z]+[a-z]/",
            "message": """Title-case heading:
This heading appears to be in title-case, but should be sentence-case.
Only capitalize the first letter and proper nouns.""",
        }
    )


def heading_sentence_case(config: LintConfig) -> Rule:
    return Rule.make_rule(
        {
            "name": "heading-sentence-case",
            "selector": "heading",
            "pattern": r"/^\W*[a-z]/",
            "message": """First letter is lowercase:
the first letter of a heading should be capitalized.""",
        }
    )
