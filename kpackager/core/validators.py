"""
kpackager Foundation: Input Validators.

This module provides validation functions for the packaging configuration:
archive lists, glob patterns, exclusion suffixes and the package section.
"""
from typing import Any, Dict, List

from kpackager.core.constants import ConfigKey, ErrorCode, Limits


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the ``kpackager`` configuration section.

    Args:
        config: Contents of the ``kpackager`` section

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    archives = config.get(ConfigKey.ARCHIVES, [])
    if not isinstance(archives, list):
        raise ValidationError("Archives must be a list")

    for i, archive in enumerate(archives):
        try:
            validate_archive_config(archive)
        except ValidationError as e:
            raise ValidationError(f"Invalid archive configuration at index {i}: {e}")

    validate_pattern_list(config.get(ConfigKey.PATTERNS, []), "Patterns")
    validate_suffix_list(config.get(ConfigKey.EXCLUSIONS, []))

    config_entry = config.get(ConfigKey.CONFIG_ENTRY)
    if config_entry is not None and (not isinstance(config_entry, str) or not config_entry):
        raise ValidationError(f"Config entry must be a non-empty string: {config_entry!r}")

    package = config.get(ConfigKey.PACKAGE)
    if package is not None:
        validate_package_config(package)

    return True


def validate_archive_config(archive: Dict[str, Any]) -> bool:
    """Validate a single archive entry.

    Args:
        archive: Archive configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If archive configuration is invalid
    """
    if not isinstance(archive, dict):
        raise ValidationError("Archive must be a dictionary")

    if ConfigKey.ARCHIVE_PATH not in archive:
        raise ValidationError("Archive must have 'path' field")

    validate_path(archive[ConfigKey.ARCHIVE_PATH])

    if ConfigKey.ARCHIVE_PATTERNS in archive:
        validate_pattern_list(archive[ConfigKey.ARCHIVE_PATTERNS], "Archive patterns")

    return True


def validate_package_config(package: Dict[str, Any]) -> bool:
    """Validate the package section.

    Args:
        package: Package configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If package configuration is invalid
    """
    if not isinstance(package, dict):
        raise ValidationError("Package configuration must be a dictionary")

    name = package.get(ConfigKey.PACKAGE_NAME)
    if name is not None and not isinstance(name, str):
        raise ValidationError(f"Package name must be string: {name!r}")

    return True


def validate_pattern_list(patterns: List[str], label: str) -> bool:
    """Validate a list of glob patterns.

    Args:
        patterns: Patterns to validate
        label: Name used in error messages

    Returns:
        True if valid

    Raises:
        ValidationError: If the list or one of its patterns is invalid
    """
    if not isinstance(patterns, list):
        raise ValidationError(f"{label} must be a list")

    for pattern in patterns:
        validate_pattern(pattern)

    return True


def validate_suffix_list(suffixes: List[str]) -> bool:
    """Validate the exclusion suffix list.

    Raises:
        ValidationError: If the list is not a list of non-empty strings
    """
    if not isinstance(suffixes, list):
        raise ValidationError("Exclusions must be a list")

    for suffix in suffixes:
        if not isinstance(suffix, str) or not suffix:
            raise ValidationError(f"Invalid exclusion: {suffix!r}")

    return True


def validate_path(path: str) -> bool:
    """Validate an archive path.

    Args:
        path: Path to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(path, str):
        raise ValidationError(f"Path must be string, got {type(path)}")

    if not path:
        raise ValidationError("Path cannot be empty")

    if len(path) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Path exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if "\0" in path:
        raise ValidationError("Path contains null bytes")

    return True


def validate_pattern(pattern: str) -> bool:
    """Validate a glob pattern.

    Any string compiles to a matcher, so only structural problems are
    rejected here.

    Args:
        pattern: Pattern to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"Pattern must be string, got {type(pattern)}")

    if not pattern:
        raise ValidationError("Pattern cannot be empty")

    if len(pattern) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Pattern exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if any(ord(c) < 32 for c in pattern):
        raise ValidationError("Invalid pattern: contains control characters")

    return True
