"""Shared pytest fixtures for kpackager tests."""
import os
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import yaml

from kpackager.archives.base import (
    ArchiveCloseError,
    ArchiveError,
    ArchiveHandle,
    ArchiveIndex,
    ArchiveOpenError,
    EntryNotFoundError,
)
from kpackager.infrastructure.config_manager import set_global_config
from kpackager.infrastructure.logger import set_global_logger

Content = Union[str, bytes]


def _as_bytes(content: Content) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


class FakeArchiveHandle(ArchiveHandle):
    """In-memory archive handle with failure injection."""

    def __init__(self, index: "FakeArchiveIndex", path: str, entries: Dict[str, bytes]):
        super().__init__(path)
        self._index = index
        self._entries = entries

    def entries(self) -> List[str]:
        if self.path in self._index.scan_failures:
            raise ArchiveError(f"Corrupt central directory: {self.path}", archive=self.path)
        names = list(self._entries)
        if self.path in self._index.duplicate_listings:
            return names + names
        return names

    def read(self, entry_name: str) -> bytes:
        try:
            return self._entries[entry_name]
        except KeyError:
            raise EntryNotFoundError(f"Entry not found: {entry_name}", self.path, entry_name)

    def close(self) -> None:
        self._index.closed.append(self.path)
        if self.path in self._index.close_failures:
            raise ArchiveCloseError(f"Failed to close archive {self.path}", archive=self.path)


class FakeArchiveIndex(ArchiveIndex):
    """In-memory archive index recording opens and closes."""

    def __init__(self, archives: Optional[Dict[str, Dict[str, Content]]] = None):
        self.archives = {
            path: {name: _as_bytes(content) for name, content in entries.items()}
            for path, entries in (archives or {}).items()
        }
        self.open_failures = set()
        self.scan_failures = set()
        self.close_failures = set()
        # Archives whose central directory lists every entry twice
        self.duplicate_listings = set()
        self.opened: List[str] = []
        self.closed: List[str] = []

    def open(self, path: str) -> FakeArchiveHandle:
        self.opened.append(path)
        if path in self.open_failures or path not in self.archives:
            raise ArchiveOpenError(f"Archive not found: {path}", archive=path)
        return FakeArchiveHandle(self, path, self.archives[path])


@pytest.fixture
def fake_index():
    """Factory for in-memory archive indexes."""
    return FakeArchiveIndex


@pytest.fixture
def make_archive(tmp_path: Path):
    """Factory writing real zip archives, entries in the given order."""

    def _make(name: str, entries: Dict[str, Content]) -> str:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for entry_name, content in entries.items():
                zf.writestr(entry_name, _as_bytes(content))
        return str(path)

    return _make


@pytest.fixture
def make_corrupt_archive(tmp_path: Path):
    """Factory writing an uncompressed zip whose entry ``corrupt`` fails its CRC check."""

    def _make(name: str, entries: Dict[str, Content], corrupt: str) -> str:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_STORED) as zf:
            for entry_name, content in entries.items():
                zf.writestr(entry_name, _as_bytes(content))

        raw = path.read_bytes()
        content = _as_bytes(entries[corrupt])
        offset = raw.index(content)
        flipped = bytes([content[0] ^ 0xFF])
        path.write_bytes(raw[:offset] + flipped + raw[offset + 1 :])
        return str(path)

    return _make


@pytest.fixture
def rules_jar(make_archive) -> str:
    """A typical knowledge archive."""
    return make_archive(
        "rules.jar",
        {
            "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n",
            "META-INF/drools.packagebuilder.conf": "drools.dialect.default = java\n",
            "org/example/pricing.package": "package org.example.pricing\n",
            "org/example/pricing.function": "function int twice(int x) { return 2 * x; }\n",
            "org/example/pricing.drl": 'rule "discount"\nwhen\nthen\nend\n',
            "org/example/pricing.model.drl": "declare Price end\n",
            "org/example/order.bpmn": "<definitions/>\n",
            "org/example/.guvnorinfo/pricing.drl": "metadata\n",
            "org/example/README.txt": "notes\n",
        },
    )


@pytest.fixture
def config_file(tmp_path: Path, rules_jar: str) -> Path:
    """A kpackager configuration file for rules_jar."""
    config = {
        "kpackager": {
            "archives": [{"path": rules_jar}],
            "patterns": ["**"],
            "package": {"name": "org.example.pricing"},
        }
    }
    config_path = tmp_path / "kpackager.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Reset global logger/config and KPACKAGER_* variables between tests."""
    for key in [k for k in os.environ if k.startswith("KPACKAGER_")]:
        monkeypatch.delenv(key)
    set_global_logger(None)
    set_global_config(None)
    yield
    set_global_logger(None)
    set_global_config(None)
