"""
kpackager Foundation: Constants and Type Definitions

This module provides system-wide constants, error codes, and type definitions
shared by the resolver, classifier and configuration layers.
"""
from enum import IntEnum
from typing import TypeAlias

# Version information
KPACKAGER_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for kpackager operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad path, invalid configuration, malformed content
    NOT_FOUND = 2  # Archive or entry doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Resource conflict
    DEPENDENCY_ERROR = 5  # Downstream compiler failure
    INTERNAL_ERROR = 6  # Bug in kpackager


# Type aliases for clarity
ArchivePath: TypeAlias = str
EntryName: TypeAlias = str
EntryContent: TypeAlias = bytes


class Limits:
    """Default values for logging and archive handling."""

    # Log file rotation
    LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT = 5

    # Path limits
    MAX_PATH_LENGTH = 4096


# Entry naming
ENTRY_SEPARATOR = "/"

# Sandboxed editor metadata directories, never part of a resource set
DEFAULT_MARKER_SEGMENTS = (".guvnorinfo",)

# Log line layout; structured context is appended by the formatter
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Designated compiler configuration entry
DEFAULT_CONFIG_ENTRY = "drools.packagebuilder.conf"


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Top-level section
    ROOT = "kpackager"

    # Section keys
    ARCHIVES = "archives"
    PATTERNS = "patterns"
    EXCLUSIONS = "exclusions"
    CONFIG_ENTRY = "config_entry"
    PACKAGE = "package"
    LOGGING = "logging"

    # Archive configuration
    ARCHIVE_PATH = "path"
    ARCHIVE_PATTERNS = "patterns"

    # Package configuration
    PACKAGE_NAME = "name"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.ARCHIVES: [],
        ConfigKey.PATTERNS: [],
        ConfigKey.EXCLUSIONS: [],
        ConfigKey.CONFIG_ENTRY: DEFAULT_CONFIG_ENTRY,
        ConfigKey.PACKAGE: {
            ConfigKey.PACKAGE_NAME: None,
        },
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
            "format": DEFAULT_LOG_FORMAT,
        },
    }
}
