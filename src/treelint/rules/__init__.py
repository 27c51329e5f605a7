"""Built-in lint rules.

`ALL_RULES` is the catalogue built from `DEFAULT_CONFIG`. Use
`build_rules()` to build the same catalogue from another config. Rules run
in the order listed here, which is also the order their warnings appear in
for any one node.
"""

from __future__ import annotations

from ..config import DEFAULT_CONFIG, LintConfig
from ..rule import Rule
from . import headings, media, structure, text

RULE_FACTORIES = (
    text.long_paragraph,
    headings.heading_level_1,
    headings.heading_level_skip,
    headings.heading_title_case,
    headings.heading_sentence_case,
    media.image_alt_text,
    media.link_click_here,
    media.absolute_url,
    structure.table_missing_cells,
    structure.nested_lists,
    structure.blockquoted_math,
    structure.blockquoted_widget,
    text.unescaped_dollar,
    structure.math_empty,
    text.double_spacing_after_terminal,
)


def build_rules(config: LintConfig = DEFAULT_CONFIG) -> list[Rule]:
    return [factory(config) for factory in RULE_FACTORIES]


ALL_RULES: list[Rule] = build_rules()

__all__ = ["ALL_RULES", "RULE_FACTORIES", "build_rules"]
