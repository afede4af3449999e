#!/usr/bin/env python3
"""Packaging run orchestration.

This module wires the resolution stages together for one run:
- Builds archive sources from configuration
- Resolves entries and stops if any archive failed
- Classifies the resolved entries
- Locates the compiler configuration entry
- Hands the resource set to a package compiler, if one is supplied

Example:
    >>> packager = KnowledgePackager()
    >>> report = packager.run(sources, package_name="org.example.rules")
    >>> report.ok
    True
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from kpackager.archives.base import ArchiveIndex
from kpackager.archives.zip_archive import ZipArchiveIndex
from kpackager.compiler.base import (
    CompilationResult,
    PackageCompilationError,
    PackageCompiler,
    ResourceLoader,
)
from kpackager.core.constants import DEFAULT_CONFIG_ENTRY, ConfigKey
from kpackager.infrastructure.logger import Logger, get_logger
from kpackager.resolver.classifier import ClassifiedResource, ResourceClassifier
from kpackager.resolver.config_locator import ConfigLocator, LocateResult
from kpackager.resolver.models import ArchiveSource, ResolutionError, ResolutionResult
from kpackager.resolver.resolver import ResourceResolver


@dataclass
class PackagingReport:
    """Everything a packaging run produced."""

    package_name: Optional[str]
    resolution: ResolutionResult
    resources: List[ClassifiedResource] = field(default_factory=list)
    configuration: LocateResult = field(default_factory=LocateResult)
    compilation: Optional[CompilationResult] = None

    @property
    def ok(self) -> bool:
        """True if every archive was resolved without error."""
        return self.resolution.ok

    @property
    def errors(self) -> List[ResolutionError]:
        """Resolution errors; any of them fails the batch."""
        return list(self.resolution.errors)

    @property
    def warnings(self) -> List[ResolutionError]:
        """Configuration entry problems; the entry is treated as missing."""
        return list(self.configuration.errors)


def build_sources(config: Dict[str, Any]) -> List[ArchiveSource]:
    """Build archive sources from the ``kpackager`` configuration section.

    An archive with its own ``patterns`` uses only those; any other archive
    uses the global ``patterns`` list. Paths are made canonical.

    Args:
        config: ``kpackager`` configuration section

    Returns:
        Archive sources in configuration order
    """
    global_patterns = config.get(ConfigKey.PATTERNS) or []
    sources = []

    for archive in config.get(ConfigKey.ARCHIVES) or []:
        if ConfigKey.ARCHIVE_PATTERNS in archive:
            patterns = archive[ConfigKey.ARCHIVE_PATTERNS] or []
        else:
            patterns = global_patterns
        path = Path(archive[ConfigKey.ARCHIVE_PATH]).expanduser().resolve()
        sources.append(ArchiveSource(path=str(path), patterns=tuple(patterns)))

    return sources


class KnowledgePackager:
    """Runs resolution, classification and configuration lookup.

    The archive index is shared by every stage so tests and alternative
    archive formats plug in at one point.
    """

    def __init__(
        self,
        archive_index: Optional[ArchiveIndex] = None,
        classifier: Optional[ResourceClassifier] = None,
        compiler: Optional[PackageCompiler] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize packager.

        Args:
            archive_index: Archive opener (defaults to zip archives)
            classifier: Resource classifier (defaults to the standard tables)
            compiler: Package compiler; without one, run() stops after lookup
            logger: Logger instance (defaults to the global logger)
        """
        self.logger = logger or get_logger()
        self.archive_index = archive_index or ZipArchiveIndex()
        self.resolver = ResourceResolver(self.archive_index, self.logger)
        self.classifier = classifier or ResourceClassifier(logger=self.logger)
        self.locator = ConfigLocator(self.archive_index, self.logger)
        self.loader = ResourceLoader(self.archive_index)
        self.compiler = compiler

    def run(
        self,
        sources: Sequence[ArchiveSource],
        package_name: Optional[str] = None,
        exclusions: Iterable[str] = (),
        config_entry: str = DEFAULT_CONFIG_ENTRY,
    ) -> PackagingReport:
        """Run one packaging pass.

        Args:
            sources: Archives and their patterns
            package_name: Target package name (required with a compiler)
            exclusions: Entry name suffixes to drop
            config_entry: Designated configuration entry name

        Returns:
            Packaging report; report.ok is False if any archive failed

        Raises:
            ValueError: If a compiler is set but no package name is given
            PackageCompilationError: If the compiler reports errors
        """
        if self.compiler is not None and not package_name:
            raise ValueError("A package name is required to compile")

        with self.logger.add_context(package=package_name or "-"):
            self.logger.info("Resolving resources", sources=len(sources))
            resolution = self.resolver.resolve(sources)
            report = PackagingReport(package_name=package_name, resolution=resolution)

            if not resolution.ok:
                for message in resolution.error_messages():
                    self.logger.error(message)
                return report

            report.resources = self.classifier.classify(resolution.archives, exclusions)
            report.configuration = self.locator.locate(resolution.archives, config_entry)

            if self.compiler is not None:
                report.compilation = self._compile(report)

            return report

    def _compile(self, report: PackagingReport) -> CompilationResult:
        self.logger.info("Compiling package", resources=len(report.resources))
        result = self.compiler.compile(
            report.package_name,
            self.loader.iter_contents(report.resources),
            report.configuration.properties,
        )

        if not result.success:
            for diagnostic in result.errors:
                self.logger.error(str(diagnostic))
            raise PackageCompilationError(report.package_name, result.errors)

        return result
