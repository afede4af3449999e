"""kpackager Compiler Interface.

- PackageCompiler: abstract downstream compiler
- ResourceLoader: lazy resource content reader
"""

from .base import (
    CompilationResult,
    Diagnostic,
    PackageCompilationError,
    PackageCompiler,
    ResourceLoader,
    Severity,
)

__all__ = [
    "Severity",
    "Diagnostic",
    "CompilationResult",
    "PackageCompilationError",
    "PackageCompiler",
    "ResourceLoader",
]
