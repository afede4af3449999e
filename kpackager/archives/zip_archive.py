#!/usr/bin/env python3
"""Zip-family archive access (.jar, .zip).

Entries are reported in central-directory order, which is the order the
archive was written in.
"""

import zipfile
import zlib
from pathlib import Path
from typing import List

from kpackager.archives.base import (
    ArchiveCloseError,
    ArchiveHandle,
    ArchiveIndex,
    ArchiveOpenError,
    EntryNotFoundError,
    EntryReadError,
)
from kpackager.core.constants import ArchivePath, EntryContent, EntryName, ErrorCode


class ZipArchiveHandle(ArchiveHandle):
    """Open zip archive."""

    def __init__(self, path: ArchivePath, zip_file: zipfile.ZipFile):
        super().__init__(path)
        self._zip = zip_file

    def entries(self) -> List[EntryName]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def read(self, entry_name: EntryName) -> EntryContent:
        try:
            return self._zip.read(entry_name)
        except KeyError:
            raise EntryNotFoundError(
                f"Entry not found in {self.path}: {entry_name}",
                archive=self.path,
                entry_name=entry_name,
            )
        except (zipfile.BadZipFile, zlib.error, RuntimeError, OSError) as e:
            raise EntryReadError(
                f"Failed to read {entry_name} from {self.path}: {e}",
                archive=self.path,
                entry_name=entry_name,
            )

    def close(self) -> None:
        try:
            self._zip.close()
        except OSError as e:
            raise ArchiveCloseError(f"Failed to close archive {self.path}: {e}", archive=self.path)


class ZipArchiveIndex(ArchiveIndex):
    """Opens zip-family archives from the local filesystem."""

    def open(self, path: ArchivePath) -> ZipArchiveHandle:
        """Open a zip archive.

        Args:
            path: Archive path

        Returns:
            Open handle

        Raises:
            ArchiveOpenError: If the file is missing, unreadable or not a zip
        """
        archive_path = Path(path)

        if not archive_path.exists():
            raise ArchiveOpenError(f"Archive not found: {path}", archive=path)

        if not archive_path.is_file():
            raise ArchiveOpenError(
                f"Archive is not a file: {path}", archive=path, error_code=ErrorCode.INVALID_INPUT
            )

        try:
            return ZipArchiveHandle(path, zipfile.ZipFile(archive_path, "r"))
        except zipfile.BadZipFile as e:
            raise ArchiveOpenError(
                f"Invalid archive {path}: {e}", archive=path, error_code=ErrorCode.INVALID_INPUT
            )
        except PermissionError as e:
            raise ArchiveOpenError(
                f"Permission denied opening {path}: {e}",
                archive=path,
                error_code=ErrorCode.PERMISSION_DENIED,
            )
        except OSError as e:
            raise ArchiveOpenError(f"Failed to open archive {path}: {e}", archive=path)
