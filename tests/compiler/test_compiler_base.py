#!/usr/bin/env python3
"""Tests for the package compiler interface."""

import pytest

from kpackager.archives.base import ArchiveOpenError, EntryNotFoundError
from kpackager.compiler.base import (
    CompilationResult,
    Diagnostic,
    PackageCompilationError,
    PackageCompiler,
    ResourceLoader,
    Severity,
)
from kpackager.core.constants import ErrorCode
from kpackager.resolver.classifier import ClassifiedResource, ResourceKind


def _resource(archive, name, kind=ResourceKind.RULE_SCRIPT, suffix=".drl"):
    return ClassifiedResource(archive, name, kind, suffix)


class TestDiagnostic:
    """Tests for Diagnostic."""

    def test_str_with_resource(self):
        """Test display form includes the resource."""
        diagnostic = Diagnostic("Unknown fact type", resource="a.drl")
        assert str(diagnostic) == "error: a.drl: Unknown fact type"

    def test_str_without_resource(self):
        """Test display form without a resource."""
        diagnostic = Diagnostic("Deprecated dialect", Severity.WARNING)
        assert str(diagnostic) == "warning: Deprecated dialect"


class TestCompilationResult:
    """Tests for CompilationResult."""

    def test_success_without_diagnostics(self):
        """Test an empty result is successful."""
        assert CompilationResult(artifact=b"pkg").success

    def test_warnings_do_not_fail(self):
        """Test warnings alone are successful."""
        result = CompilationResult(diagnostics=[Diagnostic("w", Severity.WARNING)])
        assert result.success
        assert result.errors == []

    def test_errors_fail(self):
        """Test any error diagnostic fails the result."""
        error = Diagnostic("e")
        result = CompilationResult(diagnostics=[Diagnostic("w", Severity.WARNING), error])
        assert not result.success
        assert result.errors == [error]


class TestPackageCompilationError:
    """Tests for PackageCompilationError."""

    def test_message(self):
        """Test the error summarizes the failure."""
        error = PackageCompilationError("org.example", [Diagnostic("a"), Diagnostic("b")])
        assert error.message == "Compilation of package org.example failed with 2 error(s)"
        assert error.error_code == ErrorCode.DEPENDENCY_ERROR
        assert len(error.diagnostics) == 2


class TestPackageCompiler:
    """Tests for the PackageCompiler contract."""

    def test_abstract(self):
        """Test the base class cannot be instantiated."""
        with pytest.raises(TypeError):
            PackageCompiler()

    def test_subclass(self):
        """Test a minimal compiler implementation."""

        class CountingCompiler(PackageCompiler):
            def compile(self, package_name, resources, configuration=None):
                return CompilationResult(artifact=(package_name, sum(1 for _ in resources)))

        result = CountingCompiler().compile("pkg", iter([(ResourceKind.RULE_SCRIPT, b"")]))
        assert result.artifact == ("pkg", 1)


class TestResourceLoader:
    """Tests for ResourceLoader."""

    def test_yields_kind_and_content(self, fake_index):
        """Test content is read in resource order."""
        index = fake_index({"a.jar": {"a.drl": "rule a", "f.bpmn": "<flow/>"}})
        resources = [
            _resource("a.jar", "f.bpmn", ResourceKind.PROCESS_FLOW, ".bpmn"),
            _resource("a.jar", "a.drl"),
        ]

        contents = list(ResourceLoader(index).iter_contents(resources))

        assert contents == [
            (ResourceKind.PROCESS_FLOW, b"<flow/>"),
            (ResourceKind.RULE_SCRIPT, b"rule a"),
        ]

    def test_shares_handle_per_archive_run(self, fake_index):
        """Test consecutive resources reuse one open archive."""
        index = fake_index({"a.jar": {"a.drl": "", "b.drl": ""}, "b.jar": {"c.drl": ""}})
        resources = [
            _resource("a.jar", "a.drl"),
            _resource("a.jar", "b.drl"),
            _resource("b.jar", "c.drl"),
        ]

        list(ResourceLoader(index).iter_contents(resources))

        assert index.opened == ["a.jar", "b.jar"]
        assert index.closed == ["a.jar", "b.jar"]

    def test_closes_when_abandoned(self, fake_index):
        """Test the open handle is released if iteration stops early."""
        index = fake_index({"a.jar": {"a.drl": "", "b.drl": ""}})
        contents = ResourceLoader(index).iter_contents(
            [_resource("a.jar", "a.drl"), _resource("a.jar", "b.drl")]
        )

        next(contents)
        contents.close()

        assert index.closed == ["a.jar"]

    def test_missing_entry_raises_and_closes(self, fake_index):
        """Test read failures propagate after releasing the archive."""
        index = fake_index({"a.jar": {}})
        with pytest.raises(EntryNotFoundError):
            list(ResourceLoader(index).iter_contents([_resource("a.jar", "a.drl")]))

        assert index.closed == ["a.jar"]

    def test_open_failure_raises(self, fake_index):
        """Test open failures propagate."""
        with pytest.raises(ArchiveOpenError):
            list(ResourceLoader(fake_index()).iter_contents([_resource("a.jar", "a.drl")]))

    def test_zip_archive(self, rules_jar):
        """Test reading from a real archive."""
        resources = [_resource(rules_jar, "org/example/order.bpmn", ResourceKind.PROCESS_FLOW)]
        contents = list(ResourceLoader().iter_contents(resources))

        assert contents == [(ResourceKind.PROCESS_FLOW, b"<definitions/>\n")]
