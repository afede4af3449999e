#!/usr/bin/env python3
"""Tests for kpackager constants."""

from typing import List, get_type_hints

import kpackager
from kpackager.archives.base import ArchiveHandle, ArchiveIndex
from kpackager.core.constants import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_ENTRY,
    DEFAULT_MARKER_SEGMENTS,
    KPACKAGER_VERSION,
    ArchivePath,
    ConfigKey,
    EntryContent,
    EntryName,
    ErrorCode,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_values(self):
        """Test error code values are stable."""
        assert ErrorCode.SUCCESS == 0
        assert ErrorCode.INVALID_INPUT == 1
        assert ErrorCode.NOT_FOUND == 2
        assert ErrorCode.PERMISSION_DENIED == 3
        assert ErrorCode.CONFLICT == 4
        assert ErrorCode.DEPENDENCY_ERROR == 5
        assert ErrorCode.INTERNAL_ERROR == 6


class TestDefaults:
    """Tests for default values."""

    def test_version_exported(self):
        """Test the package exposes its version."""
        assert kpackager.__version__ == KPACKAGER_VERSION

    def test_default_config_section(self):
        """Test the compiled defaults live under the kpackager key."""
        section = DEFAULT_CONFIG[ConfigKey.ROOT]

        assert section[ConfigKey.ARCHIVES] == []
        assert section[ConfigKey.PATTERNS] == []
        assert section[ConfigKey.CONFIG_ENTRY] == DEFAULT_CONFIG_ENTRY
        assert section[ConfigKey.LOGGING]["level"] == "INFO"

    def test_marker_segments(self):
        """Test editor metadata directories are reserved."""
        assert ".guvnorinfo" in DEFAULT_MARKER_SEGMENTS


class TestTypeAliases:
    """Tests for the archive type aliases."""

    def test_archive_contract_uses_aliases(self):
        """Test the archive contract is typed with the aliases."""
        assert get_type_hints(ArchiveIndex.open)["path"] is ArchivePath
        assert get_type_hints(ArchiveHandle.entries)["return"] == List[EntryName]
        assert get_type_hints(ArchiveHandle.read)["return"] is EntryContent

    def test_underlying_types(self):
        """Test aliases stay plain str and bytes."""
        assert ArchivePath is str
        assert EntryName is str
        assert EntryContent is bytes
