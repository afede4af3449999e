"""kpackager Archive Access.

- ArchiveIndex / ArchiveHandle: abstract archive contract
- ZipArchiveIndex: zip-family implementation (.jar, .zip)
"""

from .base import (
    ArchiveCloseError,
    ArchiveError,
    ArchiveHandle,
    ArchiveIndex,
    ArchiveOpenError,
    EntryNotFoundError,
    EntryReadError,
)
from .zip_archive import ZipArchiveHandle, ZipArchiveIndex

__all__ = [
    "ArchiveError",
    "ArchiveOpenError",
    "ArchiveCloseError",
    "EntryNotFoundError",
    "EntryReadError",
    "ArchiveHandle",
    "ArchiveIndex",
    "ZipArchiveHandle",
    "ZipArchiveIndex",
]
