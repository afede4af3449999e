#!/usr/bin/env python3
"""Location and parsing of the package compiler configuration entry.

At most one configuration entry is used per run: the first resolved entry,
in resolution order, whose name ends with the designated entry name. Its
content is parsed as flat properties text.

Missing configuration is a normal outcome; callers apply their own defaults.
Unreadable or malformed configuration is reported through the collected
error list and also treated as missing.

Example:
    >>> locator = ConfigLocator(ZipArchiveIndex())
    >>> found = locator.locate(result.archives, "drools.packagebuilder.conf")
    >>> found.properties
    {'drools.dialect.default': 'java'}
"""

import string
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from kpackager.archives.base import (
    ArchiveCloseError,
    ArchiveError,
    ArchiveIndex,
)
from kpackager.archives.zip_archive import ZipArchiveIndex
from kpackager.core.constants import DEFAULT_CONFIG_ENTRY, ErrorCode
from kpackager.infrastructure.logger import Logger, get_logger
from kpackager.resolver.models import ErrorKind, ResolutionError, iter_entries

_COMMENT_CHARS = "#!"
_WHITESPACE = " \t\f"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class ConfigParseError(Exception):
    """Malformed properties content."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        self.error_code = ErrorCode.INVALID_INPUT
        super().__init__(message)


@dataclass
class LocateResult:
    """Outcome of a configuration lookup."""

    properties: Optional[Dict[str, str]] = None
    archive: Optional[str] = None
    entry_name: Optional[str] = None
    errors: List[ResolutionError] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.properties is not None


def parse_properties(content: bytes) -> Dict[str, str]:
    """Parse properties text into a flat dictionary.

    Supports ``#``/``!`` comments, ``=``, ``:`` or whitespace separators,
    backslash line continuation, and ``\\t \\n \\r \\f \\uXXXX`` escapes.
    Later keys overwrite earlier ones.

    Args:
        content: Raw entry content (UTF-8)

    Returns:
        Key/value mapping

    Raises:
        ConfigParseError: If content is not UTF-8 or contains a bad escape
    """
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"Content is not valid UTF-8: {e}")

    properties: Dict[str, str] = {}
    for line_no, line in _logical_lines(text):
        key, value = _split_key_value(line)
        properties[_unescape(key, line_no)] = _unescape(value, line_no)
    return properties


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line number, logical line), joining continuations."""
    lines = text.splitlines()
    index = 0
    while index < len(lines):
        line_no = index + 1
        line = lines[index].lstrip(_WHITESPACE)
        index += 1

        if not line or line[0] in _COMMENT_CHARS:
            continue

        while _continues(line) and index < len(lines):
            line = line[:-1] + lines[index].lstrip(_WHITESPACE)
            index += 1

        yield line_no, line


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_key_value(line: str) -> Tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(text: str, line_no: int) -> str:
    if "\\" not in text:
        return text

    out = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue

        index += 1
        if index >= len(text):
            # Dangling backslash on the last line
            break

        char = text[index]
        if char == "u":
            digits = text[index + 1 : index + 5]
            if len(digits) != 4 or not all(d in string.hexdigits for d in digits):
                raise ConfigParseError(f"Malformed \\uXXXX escape on line {line_no}", line_no)
            out.append(chr(int(digits, 16)))
            index += 5
            continue

        out.append(_ESCAPES.get(char, char))
        index += 1

    return "".join(out)


class ConfigLocator:
    """Finds and parses the first configuration entry in resolution order."""

    def __init__(
        self, archive_index: Optional[ArchiveIndex] = None, logger: Optional[Logger] = None
    ):
        """Initialize locator.

        Args:
            archive_index: Archive opener (defaults to zip archives)
            logger: Logger instance (defaults to the global logger)
        """
        self._index = archive_index or ZipArchiveIndex()
        self._logger = logger or get_logger()

    def find(
        self, items: Sequence, entry_name: str = DEFAULT_CONFIG_ENTRY
    ) -> Optional[Tuple[str, str]]:
        """Find the first (archive, entry) whose name ends with entry_name.

        Args:
            items: KnowledgeArchives or classified/resolved entries
            entry_name: Designated configuration entry name

        Returns:
            (archive, entry name) pair, or None
        """
        for entry in iter_entries(items):
            if entry.entry_name.endswith(entry_name):
                return entry.archive, entry.entry_name
        return None

    def locate(self, items: Sequence, entry_name: str = DEFAULT_CONFIG_ENTRY) -> LocateResult:
        """Locate and parse the configuration entry.

        Args:
            items: KnowledgeArchives or classified/resolved entries
            entry_name: Designated configuration entry name

        Returns:
            Parsed properties, or an empty result when missing or unusable
        """
        match = self.find(items, entry_name)
        if match is None:
            self._logger.debug("No configuration entry found", entry=entry_name)
            return LocateResult()

        archive, name = match
        result = LocateResult(archive=archive, entry_name=name)

        content = self._read(archive, name, result.errors)
        if content is None:
            return result

        try:
            result.properties = parse_properties(content)
        except ConfigParseError as e:
            result.errors.append(
                ResolutionError(
                    archive=archive,
                    message=f"{name}: {e.message}",
                    kind=ErrorKind.CONFIG_PARSE,
                    error_code=e.error_code,
                )
            )
            self._logger.warning("Malformed configuration entry", archive=archive, entry=name)
            return result

        self._logger.info(
            "Configuration entry loaded", archive=archive, entry=name, keys=len(result.properties)
        )
        return result

    def _read(self, archive: str, name: str, errors: List[ResolutionError]) -> Optional[bytes]:
        """Read one entry, collecting open, read and close failures."""
        try:
            handle = self._index.open(archive)
        except ArchiveError as e:
            errors.append(ResolutionError(archive, e.message, ErrorKind.OPEN, e.error_code))
            return None

        content = None
        try:
            content = handle.read(name)
        except ArchiveError as e:
            errors.append(ResolutionError(archive, e.message, ErrorKind.READ, e.error_code))
        finally:
            try:
                handle.close()
            except ArchiveCloseError as e:
                errors.append(ResolutionError(archive, e.message, ErrorKind.CLOSE, e.error_code))

        return content
