from .config import DEFAULT_CONFIG, DomainPolicy, LintConfig
from .diagnostics import LintDiagnostic, emit_lint_error
from .lint import character_count, lint_node, merge_adjacent_text, run_lint
from .rule import LintRecord, PatternMatch, Rule, RuleError, make_pattern
from .rules import ALL_RULES, build_rules
from .selector import SelectorError, match_selector, parse_selector
from .state import TraversalError, TraversalState
from .transformer import TreeTransformer

__all__ = [
    "ALL_RULES",
    "DEFAULT_CONFIG",
    "DomainPolicy",
    "LintConfig",
    "LintDiagnostic",
    "LintRecord",
    "PatternMatch",
    "Rule",
    "RuleError",
    "SelectorError",
    "TraversalError",
    "TraversalState",
    "TreeTransformer",
    "build_rules",
    "character_count",
    "emit_lint_error",
    "lint_node",
    "make_pattern",
    "match_selector",
    "merge_adjacent_text",
    "parse_selector",
    "run_lint",
]
