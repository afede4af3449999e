"""kpackager Resource Resolution.

This module assembles the resource set handed to the package compiler:
- ResourceResolver: pattern matching across archives
- ResourceClassifier: suffix-based kinds, shadow and exclusion rules
- ConfigLocator: first-match-wins compiler configuration lookup
"""

from .classifier import (
    DEFAULT_SHADOW_RULES,
    DEFAULT_SUFFIX_RULES,
    ClassifiedResource,
    ResourceClassifier,
    ResourceKind,
    ShadowRule,
    SuffixRule,
)
from .config_locator import ConfigLocator, ConfigParseError, LocateResult, parse_properties
from .models import (
    ArchiveSource,
    ErrorKind,
    KnowledgeArchive,
    ResolutionError,
    ResolutionResult,
    ResolvedEntry,
)
from .resolver import ResourceResolver, resolve

__all__ = [
    # Data model
    "ArchiveSource",
    "ResolvedEntry",
    "KnowledgeArchive",
    "ErrorKind",
    "ResolutionError",
    "ResolutionResult",
    # Resolution
    "ResourceResolver",
    "resolve",
    # Classification
    "ResourceKind",
    "SuffixRule",
    "ShadowRule",
    "ClassifiedResource",
    "ResourceClassifier",
    "DEFAULT_SUFFIX_RULES",
    "DEFAULT_SHADOW_RULES",
    # Configuration entry
    "ConfigLocator",
    "ConfigParseError",
    "LocateResult",
    "parse_properties",
]
