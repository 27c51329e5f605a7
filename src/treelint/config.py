"""Lint configuration.

Rules read their thresholds and allow-lists from a `LintConfig`. Both
config classes are frozen; build a new one to change settings and pass it
to `treelint.rules.build_rules()`.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from urllib.parse import urlsplit


@dataclass(frozen=True, slots=True)
class DomainPolicy:
    """Which absolute URLs may point at the platform's own sites.

    Content should link to platform pages with relative URLs so that it
    works on every deployment. Absolute URLs are flagged when their host
    belongs to one of `platform_domains`, unless the host is listed in
    `allowed_hosts` (CDNs and sandboxes that are only reachable absolutely).
    URLs on other domains are not this policy's concern.
    """

    platform_domains: Collection[str] = ("khanacademy.org", "kastatic.org")

    allowed_hosts: Collection[str] = (
        "cdn.kastatic.org",
        "fastly.kastatic.org",
        "sandcastle.khanacademy.org",
        "ka-perseus-graphie.s3.amazonaws.com",
        "ka-perseus-images.s3.amazonaws.com",
    )

    def __post_init__(self) -> None:
        # Accept lists/tuples from user code, normalize for internal use.
        object.__setattr__(self, "platform_domains", frozenset(d.lower().lstrip(".") for d in self.platform_domains))
        object.__setattr__(self, "allowed_hosts", frozenset(h.lower() for h in self.allowed_hosts))

    def is_platform_host(self, host: str) -> bool:
        host = host.lower()
        return any(host == domain or host.endswith("." + domain) for domain in self.platform_domains)

    def allows(self, url: str) -> bool:
        """Return False if `url` is an absolute link into the platform."""
        try:
            host = urlsplit(url.strip()).hostname
        except ValueError:
            return True
        # Relative URLs have no host
        if not host:
            return True
        if host in self.allowed_hosts:
            return True
        return not self.is_platform_host(host)


@dataclass(frozen=True, slots=True)
class LintConfig:
    """Thresholds and word lists used by the built-in rules."""

    # Paragraphs longer than this many characters are flagged.
    max_paragraph_length: int = 500

    # Headings shallower than this (e.g. a single #) are flagged.
    min_heading_level: int = 2

    # Image alt text shorter than this is not descriptive enough.
    min_alt_text_length: int = 5

    # Link text that says nothing about the destination.
    generic_link_phrases: Collection[str] = (
        "click here",
        "here",
        "this link",
        "link",
        "read more",
        "learn more",
    )

    domain_policy: DomainPolicy = field(default_factory=DomainPolicy)

    def __post_init__(self) -> None:
        for name in ("max_paragraph_length", "min_heading_level", "min_alt_text_length"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

        object.__setattr__(
            self,
            "generic_link_phrases",
            frozenset(" ".join(phrase.lower().split()) for phrase in self.generic_link_phrases),
        )


DEFAULT_CONFIG: LintConfig = LintConfig()
