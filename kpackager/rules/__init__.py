"""kpackager Rules System.

This module provides glob pattern compilation for archive entry names:
- compile_pattern: Glob to anchored matcher translation
- GlobMatcher: Compiled, reusable matcher
"""

from .patterns import WILDCARD_PATTERN, GlobMatcher, compile_pattern, glob_to_regex

__all__ = [
    "WILDCARD_PATTERN",
    "GlobMatcher",
    "compile_pattern",
    "glob_to_regex",
]
