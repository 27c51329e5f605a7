"""Command line entry point: ``python -m treelint tree.json``."""

from __future__ import annotations

import argparse
import json
import sys

from .diagnostics import LintDiagnostic
from .lint import run_lint


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="treelint",
        description="Lint a markdown-derived document tree stored as JSON",
    )
    parser.add_argument("file", help="JSON file holding the document tree, or - for stdin")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print lint records as a JSON array",
    )
    parser.add_argument(
        "--highlight",
        action="store_true",
        help="Print the tree with flagged nodes wrapped in lint nodes instead of the records",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace every visited node",
    )
    return parser.parse_args(argv)


def read_tree(path):
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def main(argv=None):
    args = parse_args(argv)
    try:
        tree = read_tree(args.file)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"treelint: can't read {args.file}: {exc}", file=sys.stderr)
        return 2

    errors: list[LintDiagnostic] = []
    records = run_lint(tree, highlight=args.highlight, errors=errors, debug=args.debug)

    if args.highlight:
        print(json.dumps(tree, indent=2, ensure_ascii=False))
    elif args.json:
        print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))
    else:
        for record in records:
            print(record)

    for error in errors:
        print(f"treelint: {error}", file=sys.stderr)

    return 1 if records else 0


if __name__ == "__main__":
    sys.exit(main())
