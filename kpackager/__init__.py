"""kpackager - knowledge resource resolution for rule package builds.

Locates, filters and classifies resources stored in archives using ordered
glob patterns, and hands the resulting resource set to a package compiler.
"""

from kpackager.core.constants import KPACKAGER_VERSION

__version__ = KPACKAGER_VERSION
