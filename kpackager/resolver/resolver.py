#!/usr/bin/env python3
"""Multi-archive, multi-pattern resource resolution.

This module scans archives for entries matching ordered glob patterns:
- Archives are processed sequentially in input order
- Patterns are applied in order; each enumerates the whole archive
- Entry names are deduplicated per archive (first matching pattern wins)
- Open, scan and close failures are collected, never raised
- Archive handles are released on every exit path

Example:
    >>> resolver = ResourceResolver(ZipArchiveIndex())
    >>> result = resolver.resolve([ArchiveSource("rules.jar", ("*.drl",))])
    >>> [archive.entry_names for archive in result.archives]
    [['a.drl', 'b.drl']]
"""

from typing import List, Optional, Sequence

from kpackager.archives.base import (
    ArchiveCloseError,
    ArchiveError,
    ArchiveHandle,
    ArchiveIndex,
)
from kpackager.archives.zip_archive import ZipArchiveIndex
from kpackager.infrastructure.logger import Logger, get_logger
from kpackager.resolver.models import (
    ArchiveSource,
    ErrorKind,
    KnowledgeArchive,
    ResolutionError,
    ResolutionResult,
)
from kpackager.rules.patterns import compile_pattern


class ResourceResolver:
    """Resolves pattern matches across a list of archives.

    A resolver holds no per-run state; resolve() can be called repeatedly
    and yields identical output for unchanged archives and patterns.
    """

    def __init__(
        self, archive_index: Optional[ArchiveIndex] = None, logger: Optional[Logger] = None
    ):
        """Initialize resolver.

        Args:
            archive_index: Archive opener (defaults to zip archives)
            logger: Logger instance (defaults to the global logger)
        """
        self._index = archive_index or ZipArchiveIndex()
        self._logger = logger or get_logger()

    def resolve(self, sources: Sequence[ArchiveSource]) -> ResolutionResult:
        """Resolve matching entries for every source.

        Args:
            sources: Archives and their patterns, in priority order

        Returns:
            Knowledge archives in source order plus all collected errors
        """
        result = ResolutionResult()

        for source in sources:
            archive = self._resolve_source(source, result.errors)
            if archive is not None:
                result.archives.append(archive)

        self._logger.info(
            "Resolution finished",
            sources=len(sources),
            archives=len(result.archives),
            entries=sum(len(a) for a in result.archives),
            errors=len(result.errors),
        )
        return result

    def _resolve_source(
        self, source: ArchiveSource, errors: List[ResolutionError]
    ) -> Optional[KnowledgeArchive]:
        """Open, scan and release one archive.

        Args:
            source: Archive source
            errors: Error list to append to

        Returns:
            KnowledgeArchive, or None if nothing matched or the scan failed
        """
        try:
            handle = self._index.open(source.path)
        except ArchiveError as e:
            self._record(errors, source.path, e, ErrorKind.OPEN)
            return None

        entry_names: List[str] = []
        try:
            entry_names = self._scan(handle, source.patterns)
        except ArchiveError as e:
            self._record(errors, source.path, e, ErrorKind.SCAN)
        finally:
            try:
                handle.close()
            except ArchiveCloseError as e:
                self._record(errors, source.path, e, ErrorKind.CLOSE)

        if not entry_names:
            self._logger.debug("No entries matched", archive=source.path)
            return None

        self._logger.debug("Archive resolved", archive=source.path, entries=len(entry_names))
        return KnowledgeArchive(archive=source.path, entry_names=entry_names)

    def _scan(self, handle: ArchiveHandle, patterns: Sequence[str]) -> List[str]:
        """Collect entry names matching the patterns, in pattern order.

        Args:
            handle: Open archive
            patterns: Glob patterns in priority order

        Returns:
            Deduplicated entry names
        """
        seen = set()
        matched: List[str] = []

        for pattern in patterns:
            matcher = compile_pattern(pattern)
            for name in handle.entries():
                if name in seen or not matcher.matches(name):
                    continue
                seen.add(name)
                matched.append(name)

        return matched

    def _record(
        self, errors: List[ResolutionError], archive: str, exc: ArchiveError, kind: ErrorKind
    ) -> None:
        error = ResolutionError(
            archive=archive, message=exc.message, kind=kind, error_code=exc.error_code
        )
        errors.append(error)
        self._logger.warning("Archive error", archive=archive, stage=kind.value, error=exc.message)


def resolve(
    sources: Sequence[ArchiveSource], archive_index: Optional[ArchiveIndex] = None
) -> ResolutionResult:
    """Resolve sources with a one-off resolver.

    Args:
        sources: Archives and their patterns
        archive_index: Archive opener (defaults to zip archives)

    Returns:
        Resolution result
    """
    return ResourceResolver(archive_index).resolve(sources)
