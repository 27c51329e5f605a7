from __future__ import annotations

import unittest

from builders import (
    block_quote,
    bullet_list,
    heading,
    image,
    link,
    math,
    paragraph,
    table,
    text,
    widget,
)

from treelint.config import DEFAULT_CONFIG, DomainPolicy, LintConfig
from treelint.diagnostics import LintDiagnostic
from treelint.lint import run_lint
from treelint.rules import ALL_RULES, RULE_FACTORIES, build_rules


def _rule(name, rules=ALL_RULES):
    for rule in rules:
        if rule.name == name:
            return rule
    raise KeyError(name)


def _warnings(name, *nodes, rules=ALL_RULES):
    """Return the records one named rule produces for a document."""
    return run_lint(list(nodes), [_rule(name, rules)])


class RuleTestCase(unittest.TestCase):
    rule_name = ""

    def assert_warns(self, *nodes, count=1):
        records = _warnings(self.rule_name, *nodes)
        assert len(records) == count, records
        assert all(record.rule == self.rule_name for record in records)
        return records

    def assert_passes(self, *nodes):
        records = _warnings(self.rule_name, *nodes)
        assert records == [], records


class TestCatalogue(unittest.TestCase):
    def test_rule_names_are_unique(self) -> None:
        names = [rule.name for rule in ALL_RULES]
        assert len(names) == len(set(names)) == len(RULE_FACTORIES)

    def test_every_message_has_a_title_line(self) -> None:
        for rule in ALL_RULES:
            if rule.message is not None:
                with self.subTest(rule=rule.name):
                    title, _, body = rule.message.partition("\n")
                    assert title.rstrip().endswith(":")
                    assert body

    def test_build_rules_uses_config(self) -> None:
        rules = build_rules(LintConfig(max_paragraph_length=10))
        records = _warnings("long-paragraph", paragraph("x" * 11), rules=rules)
        assert len(records) == 1
        assert "10 characters" in records[0].message


class TestLongParagraph(RuleTestCase):
    rule_name = "long-paragraph"

    def test_at_limit_passes(self) -> None:
        self.assert_passes(paragraph("x" * 500))

    def test_over_limit_warns(self) -> None:
        records = self.assert_warns(paragraph("x" * 501))
        assert records[0].start == 0
        assert records[0].end == 501

    def test_counts_text_in_inline_children(self) -> None:
        self.assert_warns(paragraph("x" * 300, link("/a", "y" * 201)))


class TestHeadingLevel1(RuleTestCase):
    rule_name = "heading-level-1"

    def test_level_1_warns(self) -> None:
        records = self.assert_warns(heading(1, "Intro"))
        assert "##" in records[0].message

    def test_level_2_passes(self) -> None:
        self.assert_passes(heading(2, "Intro"), heading(3, "More"))


class TestHeadingLevelSkip(RuleTestCase):
    rule_name = "heading-level-skip"

    def test_skip_warns(self) -> None:
        self.assert_warns(heading(2, "A"), heading(4, "B"))

    def test_skip_across_paragraphs_warns(self) -> None:
        self.assert_warns(heading(2, "A"), paragraph("text"), heading(4, "B"))

    def test_compares_with_nearest_heading(self) -> None:
        self.assert_passes(heading(2, "A"), heading(3, "B"), heading(4, "C"), heading(2, "D"), heading(3, "E"))

    def test_first_heading_passes(self) -> None:
        self.assert_passes(paragraph("p"), heading(4, "Deep"))


class TestHeadingTitleCase(RuleTestCase):
    rule_name = "heading-title-case"

    def test_title_case_warns(self) -> None:
        records = self.assert_warns(heading(2, "Some Title Case"))
        assert records[0].start == 3

    def test_sentence_case_passes(self) -> None:
        self.assert_passes(heading(2, "A sentence case heading"))

    def test_acronyms_pass(self) -> None:
        self.assert_passes(heading(2, "Working with NASA data"))

    def test_capital_after_colon_passes(self) -> None:
        self.assert_passes(heading(2, "Review: Adding fractions"))


class TestHeadingSentenceCase(RuleTestCase):
    rule_name = "heading-sentence-case"

    def test_lowercase_start_warns(self) -> None:
        self.assert_warns(heading(2, "lowercase start"))

    def test_lowercase_after_punctuation_warns(self) -> None:
        self.assert_warns(heading(2, "(optional) extra"))

    def test_capitalized_passes(self) -> None:
        self.assert_passes(heading(2, "Capitalized"), heading(2, "3 apples"))


class TestImageAltText(RuleTestCase):
    rule_name = "image-alt-text"

    def test_missing_alt_warns(self) -> None:
        self.assert_warns(image(None))

    def test_blank_alt_warns(self) -> None:
        self.assert_warns(image("   "))

    def test_short_alt_warns(self) -> None:
        records = self.assert_warns(image("dog"))
        assert "3 characters" in records[0].message

    def test_descriptive_alt_passes(self) -> None:
        self.assert_passes(image("A dog catching a frisbee"))


class TestLinkClickHere(RuleTestCase):
    rule_name = "link-click-here"

    def test_generic_text_warns(self) -> None:
        self.assert_warns(paragraph("For more, ", link("/more", "Click  Here"), "."))

    def test_descriptive_text_passes(self) -> None:
        self.assert_passes(paragraph(link("/more", "the fractions exercise")))

    def test_phrase_inside_longer_text_passes(self) -> None:
        self.assert_passes(paragraph(link("/more", "click here for the worked example")))


class TestAbsoluteUrl(RuleTestCase):
    rule_name = "absolute-url"

    def test_absolute_platform_link_warns(self) -> None:
        self.assert_warns(paragraph(link("https://www.khanacademy.org/math", "math")))

    def test_absolute_platform_image_warns(self) -> None:
        self.assert_warns(image("A long description", target="https://www.khanacademy.org/a.png"))

    def test_relative_link_passes(self) -> None:
        self.assert_passes(paragraph(link("/math/algebra", "algebra")))

    def test_external_link_passes(self) -> None:
        self.assert_passes(paragraph(link("https://en.wikipedia.org/wiki/Fraction", "fractions")))

    def test_allowed_host_passes(self) -> None:
        self.assert_passes(image("A long description"))


class TestTableMissingCells(RuleTestCase):
    rule_name = "table-missing-cells"

    def test_short_row_warns(self) -> None:
        records = self.assert_warns(table(["a", "b"], [["1", "2"], ["3"]]))
        assert "2 cells" in records[0].message

    def test_complete_table_passes(self) -> None:
        self.assert_passes(table(["a", "b"], [["1", "2"], ["3", "4"]]))

    def test_malformed_table_is_a_diagnostic(self) -> None:
        errors: list[LintDiagnostic] = []
        records = run_lint([{"type": "table"}], [_rule(self.rule_name)], errors=errors)
        assert records == []
        assert errors == [LintDiagnostic("malformed-table", node_type="table")]


class TestNestedLists(RuleTestCase):
    rule_name = "nested-lists"

    def test_nested_list_warns_once(self) -> None:
        self.assert_warns(bullet_list("a", ["b", bullet_list("c", "d")]))

    def test_deeply_nested_list_warns_per_inner_list(self) -> None:
        innermost = bullet_list("z")
        self.assert_warns(bullet_list(["a", bullet_list(["b", innermost])]), count=2)

    def test_flat_lists_pass(self) -> None:
        self.assert_passes(bullet_list("a", "b"), bullet_list("c", ordered=True))


class TestBlockquotedMath(RuleTestCase):
    rule_name = "blockquoted-math"

    def test_math_in_blockquote_warns(self) -> None:
        self.assert_warns(block_quote(paragraph("x = ", math("1"))))

    def test_math_outside_blockquote_passes(self) -> None:
        self.assert_passes(paragraph(math("1")), block_quote(paragraph("no math")))


class TestBlockquotedWidget(RuleTestCase):
    rule_name = "blockquoted-widget"

    def test_widget_in_blockquote_warns(self) -> None:
        self.assert_warns(block_quote(paragraph(widget("radio 1"))))

    def test_widget_outside_blockquote_passes(self) -> None:
        self.assert_passes(paragraph(widget("radio 1")))


class TestUnescapedDollar(RuleTestCase):
    rule_name = "unescaped-dollar"

    def test_unescaped_dollar_warns(self) -> None:
        self.assert_warns(paragraph("costs ", {"type": "unescapedDollar"}, "5"))

    def test_plain_text_passes(self) -> None:
        self.assert_passes(paragraph("costs \\$5"))


class TestMathEmpty(RuleTestCase):
    rule_name = "math-empty"

    def test_empty_math_warns(self) -> None:
        self.assert_warns(paragraph(math("  ")))

    def test_math_passes(self) -> None:
        self.assert_passes(paragraph(math("x^2")))


class TestDoubleSpacingAfterTerminal(RuleTestCase):
    rule_name = "double-spacing-after-terminal"

    def test_double_space_warns_on_span(self) -> None:
        records = self.assert_warns(paragraph("End.  Next"))
        assert (records[0].start, records[0].end) == (3, 6)

    def test_single_space_passes(self) -> None:
        self.assert_passes(paragraph("End. Next! And? Done."))

    def test_applies_to_text_leaves_only(self) -> None:
        # The paragraph's aggregated text has the double space, but no
        # single leaf does.
        self.assert_passes(paragraph("End. ", text(" Next")))


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        assert DEFAULT_CONFIG.max_paragraph_length == 500
        assert DEFAULT_CONFIG.min_heading_level == 2
        assert "click here" in DEFAULT_CONFIG.generic_link_phrases

    def test_rejects_negative_thresholds(self) -> None:
        with self.assertRaises(ValueError):
            LintConfig(max_paragraph_length=-1)

    def test_phrases_are_normalized(self) -> None:
        config = LintConfig(generic_link_phrases=["Go  THERE"])
        assert config.generic_link_phrases == frozenset({"go there"})

    def test_domain_policy(self) -> None:
        policy = DomainPolicy()
        assert policy.allows("/relative/path")
        assert policy.allows("https://example.com/")
        assert policy.allows("https://cdn.kastatic.org/img.png")
        assert not policy.allows("https://www.khanacademy.org/")
        assert not policy.allows("http://KhanAcademy.org")

    def test_custom_domain_policy(self) -> None:
        policy = DomainPolicy(platform_domains=["example.com"], allowed_hosts=["static.example.com"])
        assert not policy.allows("https://www.example.com/page")
        assert policy.allows("https://static.example.com/a.png")
        assert policy.allows("https://www.khanacademy.org/")
        rules = build_rules(LintConfig(domain_policy=policy))
        records = _warnings("absolute-url", paragraph(link("https://example.com/x", "page")), rules=rules)
        assert len(records) == 1
