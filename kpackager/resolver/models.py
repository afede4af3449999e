#!/usr/bin/env python3
"""Data model for resource resolution.

Sources go in, knowledge archives and collected errors come out:
- ArchiveSource: an archive path and the patterns applied to it
- ResolvedEntry: one matched (archive, entry name) pair
- KnowledgeArchive: an archive with its ordered, deduplicated matches
- ResolutionError: a non-fatal failure tied to one archive
- ResolutionResult: archives plus every error collected during a run
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Tuple

from kpackager.core.constants import ErrorCode


class ErrorKind(Enum):
    """Stage at which a resolution error was collected."""

    OPEN = "open"
    CLOSE = "close"
    SCAN = "scan"
    READ = "read"
    CONFIG_PARSE = "config-parse"


@dataclass(frozen=True)
class ArchiveSource:
    """An archive to scan and the ordered patterns to apply to it."""

    path: str
    patterns: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any sequence but store an immutable copy
        object.__setattr__(self, "patterns", tuple(self.patterns))


@dataclass(frozen=True)
class ResolvedEntry:
    """An entry name that matched at least one pattern of its archive."""

    archive: str
    entry_name: str


@dataclass
class KnowledgeArchive:
    """An archive and its resolved entries in pattern-then-discovery order."""

    archive: str
    entry_names: List[str] = field(default_factory=list)

    def entries(self) -> Iterator[ResolvedEntry]:
        """Iterate the resolved entries of this archive."""
        for name in self.entry_names:
            yield ResolvedEntry(self.archive, name)

    def __len__(self) -> int:
        return len(self.entry_names)


@dataclass(frozen=True)
class ResolutionError:
    """A collected, non-fatal failure for one archive."""

    archive: str
    message: str
    kind: ErrorKind
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.archive}: {self.message}"


@dataclass
class ResolutionResult:
    """Result of a resolution run.

    Errors never abort the run; callers decide afterwards whether any of
    them is fatal.
    """

    archives: List[KnowledgeArchive] = field(default_factory=list)
    errors: List[ResolutionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if no error was collected."""
        return not self.errors

    def entries(self) -> Iterator[ResolvedEntry]:
        """Iterate all resolved entries, archive by archive."""
        for archive in self.archives:
            yield from archive.entries()

    def error_messages(self) -> List[str]:
        """Every collected error as a display string."""
        return [str(error) for error in self.errors]


def iter_entries(items: Sequence) -> Iterator[ResolvedEntry]:
    """Flatten knowledge archives or entry-like objects into resolved entries.

    Args:
        items: KnowledgeArchive objects, or objects exposing ``archive`` and
            ``entry_name`` (ResolvedEntry, ClassifiedResource)

    Returns:
        Iterator over resolved entries in input order
    """
    for item in items:
        if isinstance(item, KnowledgeArchive):
            yield from item.entries()
        else:
            yield ResolvedEntry(item.archive, item.entry_name)
