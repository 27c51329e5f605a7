"""Rules for images and links."""

from __future__ import annotations

from ..config import LintConfig
from ..rule import Rule


def image_alt_text(config: LintConfig) -> Rule:
    minimum = config.min_alt_text_length

    def lint(nodes, match):
        alt = nodes[0].get("alt")
        if not isinstance(alt, str) or not alt.strip():
            return """Images should have alt text:
for accessibility, all images should have alt text.
Specify alt text inside square brackets after the !."""
        if len(alt) < minimum:
            return f"""Images should have alt text:
for accessibility, all images should have descriptive alt text.
This image's alt text is only {len(alt)} characters long."""
        return None

    return Rule.make_rule({"name": "image-alt-text", "selector": "image", "lint": lint})


def link_click_here(config: LintConfig) -> Rule:
    phrases = config.generic_link_phrases

    def lint(nodes, match):
        text = " ".join(match.string.lower().split())
        if text in phrases:
            return f"""Inappropriate link text:
Do not use the words "{text}" in links.
Link text should describe where the link goes."""
        return None

    return Rule.make_rule({"name": "link-click-here", "selector": "link", "lint": lint})


def absolute_url(config: LintConfig) -> Rule:
    policy = config.domain_policy

    def lint(nodes, match):
        url = nodes[-1].get("target")
        if isinstance(url, str) and not policy.allows(url):
            return """Absolute URL:
Don't use absolute URLs for links to this site.
Use a relative URL beginning with / instead."""
        return None

    return Rule.make_rule({"name": "absolute-url", "selector": "link, image", "lint": lint})
