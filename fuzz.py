#!/usr/bin/env python3
"""
Random fuzzer for treelint.
Generates random document trees and selector strings (valid and malformed)
and checks that linting, matching and highlighting hold up.
"""

import argparse
import copy
import json
import random
import string
import sys
import time
import traceback

from treelint import SelectorError, TreeTransformer, character_count, parse_selector, run_lint

BLOCK_TYPES = ["paragraph", "heading", "list", "blockQuote", "table", "codeBlock"]
INLINE_TYPES = ["text", "em", "strong", "link", "image", "math", "widget", "unescapedDollar"]
NODE_TYPES = BLOCK_TYPES + INLINE_TYPES

SELECTOR_PIECES = [" ", ">", "+", "~", ",", "*", "/", "//", "/a/", "/a/i", "/[/]/", "(", "12", "\t", "/x/g"]

TRICKY_TEXT = [
    "",
    " ",
    "End.  Next",
    "click here",
    "$",
    "\\$",
    "Title Case Words",
    "lowercase start",
    "\u00a0",  # Non-breaking space
    "\u200b",  # Zero-width space
    "x" * 600,
]


def random_string(min_len=0, max_len=20):
    """Generate random printable text."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits + " .!?:$", k=length))


def fuzz_text():
    if random.random() < 0.3:
        return {"type": "text", "content": random.choice(TRICKY_TEXT)}
    return {"type": "text", "content": random_string()}


def fuzz_inline(depth=0, max_depth=4):
    kind = random.choice(INLINE_TYPES)
    if kind == "text" or depth >= max_depth:
        return fuzz_text()
    if kind in ("em", "strong"):
        return {"type": kind, "content": [fuzz_inline(depth + 1) for _ in range(random.randint(0, 3))]}
    if kind == "link":
        target = random.choice(["/relative", "https://www.khanacademy.org/x", "https://example.com", "", "http://["])
        return {"type": "link", "target": target, "content": [fuzz_inline(depth + 1) for _ in range(random.randint(0, 2))]}
    if kind == "image":
        node = {"type": "image", "target": random.choice(["https://cdn.kastatic.org/a.png", "/a.png"])}
        if random.random() < 0.7:
            node["alt"] = random_string(0, 12)
        return node
    if kind == "math":
        return {"type": "math", "content": random.choice(["", "  ", "x^2", random_string()])}
    if kind == "widget":
        return {"type": "widget", "widgetType": "radio", "id": "radio 1"}
    return {"type": kind}


def fuzz_block(depth=0, max_depth=4):
    kind = random.choice(BLOCK_TYPES)
    if depth >= max_depth:
        kind = "paragraph"
    if kind == "paragraph":
        return {"type": "paragraph", "content": [fuzz_inline(depth + 1) for _ in range(random.randint(0, 5))]}
    if kind == "heading":
        return {
            "type": "heading",
            "level": random.randint(1, 6),
            "content": [fuzz_inline(depth + 1) for _ in range(random.randint(0, 3))],
        }
    if kind == "list":
        return {
            "type": "list",
            "ordered": random.random() < 0.5,
            "items": [
                [fuzz_block(depth + 1) for _ in range(random.randint(0, 2))] for _ in range(random.randint(0, 3))
            ],
        }
    if kind == "blockQuote":
        return {"type": "blockQuote", "content": [fuzz_block(depth + 1) for _ in range(random.randint(0, 3))]}
    if kind == "table":
        width = random.randint(1, 3)
        if random.random() < 0.1:
            # Malformed: no cells list
            return {"type": "table", "header": []}
        return {
            "type": "table",
            "header": [[fuzz_text()] for _ in range(width)],
            "align": [None] * width,
            "cells": [
                [[fuzz_text()] for _ in range(width if random.random() < 0.8 else random.randint(0, 4))]
                for _ in range(random.randint(0, 3))
            ],
        }
    return {"type": "codeBlock", "lang": "py", "content": random_string()}


def generate_fuzzed_tree():
    """Generate a complete random document tree."""
    tree = [fuzz_block() for _ in range(random.randint(0, 12))]
    if random.random() < 0.1:
        return {"type": "document", "body": tree}
    return tree


def generate_valid_selector():
    alternatives = []
    for _ in range(random.randint(1, 3)):
        parts = [random.choice(NODE_TYPES + ["*"])]
        for _ in range(random.randint(0, 3)):
            parts.append(random.choice([" ", " > ", " + ", " ~ ", ">", "~"]))
            parts.append(random.choice(NODE_TYPES + ["*"]))
        if random.random() < 0.2:
            parts.append(random.choice([" /a/", " /[A-Z]/i", "/x+/"]))
        alternatives.append("".join(parts))
    return ", ".join(alternatives)


def generate_fuzzed_selector():
    """Generate a selector string, often malformed."""
    if random.random() < 0.6:
        return generate_valid_selector()
    pieces = random.choices(SELECTOR_PIECES + NODE_TYPES, k=random.randint(0, 8))
    return "".join(pieces)


def count_nodes(tree):
    visits = []
    TreeTransformer(tree).traverse(lambda node, state, content: visits.append(node))
    return len(visits)


def check_selector(source, tree):
    """Parse a selector and, if it parses, match it everywhere in the tree."""
    try:
        selector = parse_selector(source)
    except SelectorError:
        return
    reparsed = parse_selector(str(selector))
    assert reparsed == selector, f"{source!r} formats as {str(selector)!r} which parses differently"

    def visit(node, state, content):
        before = state.clone()
        result = selector.match(state)
        assert state == before, "matching moved the traversal state"
        if result is not None:
            assert result[-1] is node, "match does not end at the current node"

    TreeTransformer(tree).traverse(visit)


def check_tree(tree):
    """Lint a tree both ways and check the results agree."""
    wildcard_visits = []

    def visit(node, state, content):
        wildcard_visits.append(parse_selector("*").match(state))

    TreeTransformer(tree).traverse(visit)
    assert len(wildcard_visits) == count_nodes(tree)

    plain = run_lint(copy.deepcopy(tree))
    highlighted_tree = copy.deepcopy(tree)
    highlighted = run_lint(highlighted_tree, highlight=True, errors=[])
    assert plain == highlighted, "highlighting changed the records"
    assert character_count(highlighted_tree) == character_count(tree), "highlighting changed the text"
    json.dumps(highlighted_tree)


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer."""
    if seed is not None:
        random.seed(seed)

    crashes = []
    hangs = []
    successes = 0

    print(f"Fuzzing treelint with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        tree = generate_fuzzed_tree()
        selector = generate_fuzzed_selector()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            check_selector(selector, tree)
            check_tree(tree)
            elapsed = time.perf_counter() - start

            # Check for hangs (>5 seconds)
            if elapsed > 5.0:
                hangs.append({"test_num": i, "tree": tree, "selector": selector, "time": elapsed})
                if verbose:
                    print(f"  HANG: Test {i} took {elapsed:.2f}s")
            else:
                successes += 1

        except Exception as e:
            crashes.append({
                "test_num": i,
                "tree": tree,
                "selector": selector,
                "error": f"{type(e).__name__}: {e}",
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")

    elapsed_total = time.time() - start_time

    # Report results
    print(f"\n{'='*60}")
    print("FUZZING RESULTS: treelint")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    if elapsed_total:
        print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if crashes:
        print(f"\n{'='*60}")
        print("CRASH DETAILS:")
        print(f"{'='*60}")
        for crash in crashes[:10]:  # Show first 10
            print(f"\nTest #{crash['test_num']}:")
            print(f"  Selector: {crash['selector']!r}")
            print(f"  Tree: {json.dumps(crash['tree'])[:200]}...")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    if save_failures and (crashes or hangs):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"Selector: {crash['selector']!r}\n")
                f.write(f"Tree:\n{json.dumps(crash['tree'], indent=2)}\n")
                f.write(f"Error: {crash['error']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"Selector: {hang['selector']!r}\n")
                f.write(f"Tree:\n{json.dumps(hang['tree'], indent=2)}\n\n")
        print(f"\nFailures saved to {filename}")

    return len(crashes) == 0 and len(hangs) == 0


def main():
    parser = argparse.ArgumentParser(description="Fuzz treelint with random trees and selectors")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample trees and selectors (no linting)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_selector())
            print(json.dumps(generate_fuzzed_tree(), indent=2))
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
