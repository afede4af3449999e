#!/usr/bin/env python3
"""Suffix-based classification of resolved entries.

Each resolved entry is checked in fixed priority order:
1. Entries under a reserved marker directory (editor metadata) are dropped
2. Entries ending with an exclusion string are dropped
3. Entries ending with a recognized suffix are tagged with its kind; a
   shadow suffix is dropped when its primary counterpart is kept
4. Everything else is dropped silently

Classification only filters and tags: survivors keep resolver order.

Example:
    >>> classifier = ResourceClassifier()
    >>> resources = classifier.classify(result.archives, exclusions={"legacy.drl"})
    >>> [(r.entry_name, r.kind.value) for r in resources]
    [('rules/pricing.drl', 'rule-script'), ('flows/order.bpmn', 'process-flow')]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from kpackager.core.constants import DEFAULT_MARKER_SEGMENTS, ENTRY_SEPARATOR
from kpackager.infrastructure.logger import Logger, get_logger
from kpackager.resolver.models import KnowledgeArchive, ResolvedEntry


class ResourceKind(Enum):
    """Kind of knowledge resource, as understood by the package compiler."""

    PACKAGE_DESCRIPTOR = "package-descriptor"
    FUNCTION_SCRIPT = "function-script"
    DERIVED_MODEL = "derived-model"
    RULE_SCRIPT = "rule-script"
    PROCESS_FLOW = "process-flow"

    @property
    def compiler_type(self) -> str:
        """Resource type tag handed to the package compiler."""
        if self is ResourceKind.PROCESS_FLOW:
            return "BPMN2"
        return "DRL"


@dataclass(frozen=True)
class SuffixRule:
    """Maps an entry name suffix to a resource kind."""

    suffix: str
    kind: ResourceKind


@dataclass(frozen=True)
class ShadowRule:
    """A derived suffix that never survives alongside its primary suffix."""

    primary_suffix: str
    shadow_suffix: str


DEFAULT_SUFFIX_RULES: Tuple[SuffixRule, ...] = (
    SuffixRule(".package", ResourceKind.PACKAGE_DESCRIPTOR),
    SuffixRule(".function", ResourceKind.FUNCTION_SCRIPT),
    SuffixRule(".model.drl", ResourceKind.DERIVED_MODEL),
    SuffixRule(".drl", ResourceKind.RULE_SCRIPT),
    SuffixRule(".bpmn", ResourceKind.PROCESS_FLOW),
    SuffixRule(".bpmn2", ResourceKind.PROCESS_FLOW),
    SuffixRule(".rf", ResourceKind.PROCESS_FLOW),
)

DEFAULT_SHADOW_RULES: Tuple[ShadowRule, ...] = (
    ShadowRule(primary_suffix=".drl", shadow_suffix=".model.drl"),
)


@dataclass(frozen=True)
class ClassifiedResource:
    """A resolved entry tagged with its resource kind."""

    archive: str
    entry_name: str
    kind: ResourceKind
    suffix: str

    @property
    def resolved_entry(self) -> ResolvedEntry:
        return ResolvedEntry(self.archive, self.entry_name)


class ResourceClassifier:
    """Classifies resolved entries using declarative suffix and shadow tables.

    Adding a resource kind means adding table rows; the algorithm does not
    change.
    """

    def __init__(
        self,
        suffix_rules: Sequence[SuffixRule] = DEFAULT_SUFFIX_RULES,
        shadow_rules: Sequence[ShadowRule] = DEFAULT_SHADOW_RULES,
        marker_segments: Iterable[str] = DEFAULT_MARKER_SEGMENTS,
        logger: Optional[Logger] = None,
    ):
        """Initialize classifier.

        Args:
            suffix_rules: Suffix to kind table
            shadow_rules: (primary, shadow) suffix pairs
            marker_segments: Directory names whose contents are always dropped
            logger: Logger instance (defaults to the global logger)
        """
        # Longest suffix first so ".model.drl" wins over ".drl"
        self._suffix_rules = sorted(suffix_rules, key=lambda r: len(r.suffix), reverse=True)
        self._shadow_rules = tuple(shadow_rules)
        self._marker_segments = frozenset(marker_segments)
        self._logger = logger or get_logger()

    def classify(
        self, archives: Sequence[KnowledgeArchive], exclusions: Iterable[str] = ()
    ) -> List[ClassifiedResource]:
        """Classify resolved entries.

        Args:
            archives: Knowledge archives in resolution order
            exclusions: Entry name suffixes to drop

        Returns:
            Surviving resources in resolution order
        """
        exclusions = tuple(exclusions)
        candidates: List[ClassifiedResource] = []

        for archive in archives:
            for name in archive.entry_names:
                resource = self._classify_entry(archive.archive, name, exclusions)
                if resource is not None:
                    candidates.append(resource)

        kept = {(r.archive, r.entry_name): r.suffix for r in candidates}
        resources = [r for r in candidates if not self._is_shadowed(r, kept)]

        self._logger.info(
            "Classification finished",
            candidates=len(candidates),
            resources=len(resources),
        )
        return resources

    def kind_of(self, entry_name: str) -> Optional[SuffixRule]:
        """Find the suffix rule for an entry name.

        Args:
            entry_name: Entry name

        Returns:
            Longest matching suffix rule, or None if unrecognized
        """
        for rule in self._suffix_rules:
            if entry_name.endswith(rule.suffix):
                return rule
        return None

    def _classify_entry(
        self, archive: str, entry_name: str, exclusions: Tuple[str, ...]
    ) -> Optional[ClassifiedResource]:
        """Apply marker, exclusion and suffix rules to one entry."""
        if self._in_marker_directory(entry_name):
            self._logger.debug("Dropped editor metadata", archive=archive, entry=entry_name)
            return None

        if any(entry_name.endswith(exclusion) for exclusion in exclusions):
            self._logger.debug("Dropped excluded entry", archive=archive, entry=entry_name)
            return None

        rule = self.kind_of(entry_name)
        if rule is None:
            self._logger.debug("Dropped unrecognized entry", archive=archive, entry=entry_name)
            return None

        return ClassifiedResource(
            archive=archive, entry_name=entry_name, kind=rule.kind, suffix=rule.suffix
        )

    def _in_marker_directory(self, entry_name: str) -> bool:
        directories = entry_name.split(ENTRY_SEPARATOR)[:-1]
        return any(segment in self._marker_segments for segment in directories)

    def _is_shadowed(
        self, resource: ClassifiedResource, kept: Dict[Tuple[str, str], str]
    ) -> bool:
        """Check if the counterpart of this resource survives as the primary kind."""
        for rule in self._shadow_rules:
            if resource.suffix != rule.shadow_suffix:
                continue
            stem = resource.entry_name[: -len(rule.shadow_suffix)]
            counterpart = (resource.archive, stem + rule.primary_suffix)
            if kept.get(counterpart) == rule.primary_suffix:
                self._logger.debug(
                    "Dropped shadowed entry",
                    archive=resource.archive,
                    entry=resource.entry_name,
                    primary=stem + rule.primary_suffix,
                )
                return True
        return False
