#!/usr/bin/env python3
"""Glob pattern compilation for archive entry names.

This module translates the packaging glob dialect into anchored matchers:
- ``**`` matches any characters, including the path separator
- ``*`` matches any characters except the path separator
- every other character is matched literally
- the whole entry name must match

Entry names are archive-internal paths: slash separated, no leading slash.
Because ``**`` is a plain ``.*`` substitution, ``**/*.drl`` requires at least
one separator and does not match a root-level ``rules.drl``.

Example:
    >>> matcher = compile_pattern("org/**/company/*.drl")
    >>> matcher.matches("org/acme/company/pricing.drl")
    True
    >>> matcher.matches("org/acme/company/sub/pricing.drl")
    False
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Pattern

# Wildcard tokens, longest first so "**" is never read as two "*"
WILDCARD_PATTERN = re.compile(r"\*\*|\*")

_TOKEN_REGEX = {
    "**": ".*",
    "*": "[^/]*",
}


@dataclass(frozen=True)
class GlobMatcher:
    """A compiled glob pattern.

    Matching is pure: the same matcher can be shared between archives and
    resolution runs.
    """

    pattern: str
    compiled: Pattern

    def matches(self, entry_name: str) -> bool:
        """Check if an entry name matches the whole pattern.

        Args:
            entry_name: Archive entry name

        Returns:
            True if the entire name matches
        """
        return self.compiled.fullmatch(entry_name) is not None

    def __call__(self, entry_name: str) -> bool:
        return self.matches(entry_name)


def glob_to_regex(pattern: str) -> str:
    """Translate a glob pattern into a regular expression.

    Wildcard tokens are replaced left to right without overlap; the text
    between them is escaped so it matches literally.

    Args:
        pattern: Glob pattern (e.g., "org/**/*.drl")

    Returns:
        Regular expression source (unanchored)
    """
    parts = []
    position = 0
    for token in WILDCARD_PATTERN.finditer(pattern):
        parts.append(re.escape(pattern[position:token.start()]))
        parts.append(_TOKEN_REGEX[token.group()])
        position = token.end()
    parts.append(re.escape(pattern[position:]))
    return "".join(parts)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> GlobMatcher:
    """Compile a glob pattern into a matcher.

    Compilation never fails: a pattern without wildcards matches only the
    identical entry name.

    Args:
        pattern: Glob pattern

    Returns:
        Compiled matcher
    """
    return GlobMatcher(pattern=pattern, compiled=re.compile(glob_to_regex(pattern), re.DOTALL))
