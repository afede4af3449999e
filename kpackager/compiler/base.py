#!/usr/bin/env python3
"""Interface to the downstream package compiler.

The resolver's job ends once it hands over an ordered resource list. This
module defines what it hands over and what it expects back:
- PackageCompiler: abstract compiler accepting (kind, content) pairs
- ResourceLoader: lazily reads resource content from archives
- CompilationResult / Diagnostic: compiler output
- PackageCompilationError: raised when the compiler reports errors

Example:
    >>> class CountingCompiler(PackageCompiler):
    ...     def compile(self, package_name, resources, configuration=None):
    ...         return CompilationResult(artifact=sum(1 for _ in resources))
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from kpackager.archives.base import ArchiveHandle, ArchiveIndex
from kpackager.archives.zip_archive import ZipArchiveIndex
from kpackager.core.constants import ErrorCode
from kpackager.resolver.classifier import ClassifiedResource, ResourceKind


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single compiler message."""

    message: str
    severity: Severity = Severity.ERROR
    resource: Optional[str] = None

    def __str__(self) -> str:
        location = f"{self.resource}: " if self.resource else ""
        return f"{self.severity.value}: {location}{self.message}"


@dataclass
class CompilationResult:
    """Compiler output: an artifact and/or diagnostics."""

    artifact: Any = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def success(self) -> bool:
        return not self.errors


class PackageCompilationError(Exception):
    """The package compiler rejected the resource set."""

    def __init__(self, package_name: str, diagnostics: Sequence[Diagnostic]):
        self.package_name = package_name
        self.diagnostics = list(diagnostics)
        self.error_code = ErrorCode.DEPENDENCY_ERROR
        self.message = (
            f"Compilation of package {package_name} failed "
            f"with {len(self.diagnostics)} error(s)"
        )
        super().__init__(self.message)


class PackageCompiler(ABC):
    """Compiles knowledge resources into a package artifact."""

    @abstractmethod
    def compile(
        self,
        package_name: str,
        resources: Iterable[Tuple[ResourceKind, bytes]],
        configuration: Optional[Dict[str, str]] = None,
    ) -> CompilationResult:
        """Compile resources into a package.

        Args:
            package_name: Target package name
            resources: (kind, content) pairs in resolution order
            configuration: Compiler properties, if a configuration entry was found

        Returns:
            Compilation result
        """


class ResourceLoader:
    """Reads classified resource content on demand.

    Consecutive resources from the same archive share one open handle.
    """

    def __init__(self, archive_index: Optional[ArchiveIndex] = None):
        self._index = archive_index or ZipArchiveIndex()

    def iter_contents(
        self, resources: Sequence[ClassifiedResource]
    ) -> Iterator[Tuple[ResourceKind, bytes]]:
        """Yield (kind, content) for each resource, in order.

        Raises:
            ArchiveError: If an archive cannot be opened or an entry read
        """
        handle: Optional[ArchiveHandle] = None
        try:
            for resource in resources:
                if handle is None or handle.path != resource.archive:
                    if handle is not None:
                        previous, handle = handle, None
                        previous.close()
                    handle = self._index.open(resource.archive)
                yield resource.kind, handle.read(resource.entry_name)
        finally:
            if handle is not None:
                handle.close()
