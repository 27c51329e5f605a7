"""Rules about block structure: tables, lists, blockquotes and math."""

from __future__ import annotations

from ..config import LintConfig
from ..diagnostics import emit_lint_error
from ..rule import Rule


def table_missing_cells(config: LintConfig) -> Rule:
    def lint(nodes, match):
        table = nodes[0]
        header = table.get("header")
        rows = table.get("cells")
        if not isinstance(header, list) or not isinstance(rows, list):
            emit_lint_error("malformed-table", node=table, message="Table node has no header or cells list")
            return None
        width = len(header)
        if any(not isinstance(row, list) or len(row) != width for row in rows):
            return f"""Table rows are missing cells:
every row of this table should have {width} cells, like its header row."""
        return None

    return Rule.make_rule({"name": "table-missing-cells", "selector": "table", "lint": lint})


def nested_lists(config: LintConfig) -> Rule:
    return Rule.make_rule(
        {
            "name": "nested-lists",
            "selector": "list list",
            "message": """Nested lists:
nested lists are hard to read on mobile devices;
do not use additional indentation.""",
        }
    )


def blockquoted_math(config: LintConfig) -> Rule:
    return Rule.make_rule(
        {
            "name": "blockquoted-math",
            "selector": "blockQuote math",
            "message": """Blockquoted math:
math should not be indented.""",
        }
    )


def blockquoted_widget(config: LintConfig) -> Rule:
    return Rule.make_rule(
        {
            "name": "blockquoted-widget",
            "selector": "blockQuote widget",
            "message": """Blockquoted widget:
widgets should not be indented.""",
        }
    )


def math_empty(config: LintConfig) -> Rule:
    def lint(nodes, match):
        tex = nodes[0].get("content")
        if not isinstance(tex, str) or not tex.strip():
            return """Empty math:
don't use $$ in your markdown."""
        return None

    return Rule.make_rule({"name": "math-empty", "selector": "math", "lint": lint})
