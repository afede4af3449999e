#!/usr/bin/env python3
"""Base classes for archive access.

This module provides the narrow archive contract the resolver relies on:
- ArchiveIndex: opens archives by path
- ArchiveHandle: enumerates and reads entries of one open archive
- ArchiveError hierarchy for open, close, lookup and read failures

Example:
    >>> index = ZipArchiveIndex()
    >>> with index.open("rules.jar") as handle:
    ...     names = handle.entries()
    ...     content = handle.read(names[0])
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from kpackager.core.constants import ArchivePath, EntryContent, EntryName, ErrorCode


class ArchiveError(Exception):
    """Error while accessing an archive."""

    def __init__(
        self,
        message: str,
        archive: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.archive = archive
        self.error_code = error_code
        super().__init__(message)


class ArchiveOpenError(ArchiveError):
    """Archive could not be opened (missing, unreadable or corrupt)."""

    def __init__(
        self,
        message: str,
        archive: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.NOT_FOUND,
    ):
        super().__init__(message, archive, error_code)


class ArchiveCloseError(ArchiveError):
    """Archive handle could not be released."""


class EntryNotFoundError(ArchiveError):
    """Requested entry does not exist in the archive."""

    def __init__(
        self, message: str, archive: Optional[str] = None, entry_name: Optional[str] = None
    ):
        self.entry_name = entry_name
        super().__init__(message, archive, ErrorCode.NOT_FOUND)


class EntryReadError(ArchiveError):
    """Entry exists but its content cannot be read (corrupt, encrypted)."""

    def __init__(
        self, message: str, archive: Optional[str] = None, entry_name: Optional[str] = None
    ):
        self.entry_name = entry_name
        super().__init__(message, archive, ErrorCode.INVALID_INPUT)


class ArchiveHandle(ABC):
    """An open archive.

    Handles are scoped resources: callers must call close() on every exit
    path, or use the handle as a context manager.
    """

    def __init__(self, path: ArchivePath):
        self.path = path

    @abstractmethod
    def entries(self) -> List[EntryName]:
        """List entry names in archive-native order.

        Each call enumerates from the start; directory entries are not
        reported.

        Returns:
            Entry names
        """

    @abstractmethod
    def read(self, entry_name: EntryName) -> EntryContent:
        """Read the content of one entry.

        Args:
            entry_name: Entry name as returned by entries()

        Returns:
            Entry content

        Raises:
            EntryNotFoundError: If the entry does not exist
            EntryReadError: If the entry content is corrupt or unreadable
        """

    @abstractmethod
    def close(self) -> None:
        """Release the archive.

        Raises:
            ArchiveCloseError: If the archive cannot be released
        """

    def __enter__(self) -> "ArchiveHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ArchiveIndex(ABC):
    """Factory for archive handles."""

    @abstractmethod
    def open(self, path: ArchivePath) -> ArchiveHandle:
        """Open an archive.

        Args:
            path: Archive path

        Returns:
            Open archive handle

        Raises:
            ArchiveOpenError: If the archive cannot be opened
        """
