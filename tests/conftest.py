"""Shared pytest fixtures for buildcache tests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

import pytest

from buildcache.archive import CacheArtifact
from buildcache.metadata import CacheInfo
from buildcache.remote import RemoteObject


@dataclass
class MemoryObject:
    data: bytes
    metadata: dict[str, str]
    updated: datetime


class MemoryRemoteStore:
    """RemoteStore keeping objects in memory."""

    def __init__(self) -> None:
        self.objects: dict[str, MemoryObject] = {}
        self.uploads: list[str] = []

    def upload(self, key: str, artifact: CacheArtifact, info: CacheInfo) -> None:
        self.uploads.append(key)
        self.objects[key] = MemoryObject(
            data=artifact.temp_file.handle.read(),
            metadata=info.to_metadata(),
            updated=datetime.now(timezone.utc),
        )

    def lookup(self, key: str) -> RemoteObject | None:
        obj = self.objects.get(key)
        if obj is None:
            return None
        return RemoteObject(
            key=key,
            metadata=dict(obj.metadata),
            size=len(obj.data),
            updated=obj.updated,
        )

    def download(self, key: str, fileobj: BinaryIO) -> None:
        fileobj.write(self.objects[key].data)

    def delete(self, key: str) -> bool:
        return self.objects.pop(key, None) is not None


@pytest.fixture
def memory_store() -> MemoryRemoteStore:
    """Return an empty in-memory remote store."""
    return MemoryRemoteStore()


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """
    Return a small directory tree to cache:

        src/f            "hello"
        src/sub/g.txt    "world"
        src/empty/
    """
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "empty").mkdir()
    (src / "f").write_text("hello")
    (src / "sub" / "g.txt").write_text("world")
    return src.resolve()


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    """Return a directory for staging files, outside of source_tree."""
    staging = tmp_path / "staging"
    staging.mkdir()
    return staging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the logging configuration performed by CLI invocations."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
