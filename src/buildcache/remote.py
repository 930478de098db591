"""Remote storage of cache archives."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Protocol

from google.api_core.exceptions import NotFound
from google.cloud import storage
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from .archive import CacheArtifact
from .metadata import CacheInfo

log = logging.getLogger("buildcache/remote")

_KEY_NAMESPACE = "buildcache"
_KEY_EXTENSION = ".cache"
_DEFAULT_BRANCH = "default"


def object_key(prefix: str | None, branch: str | None, suffix: str | None) -> str:
    """
    Return the object key identifying a cache.

    The key has the form `[<prefix>/]buildcache/<branch>[.<suffix>].cache`,
    using `default` when the branch is unknown.
    """
    name = branch or _DEFAULT_BRANCH
    if suffix:
        name = f"{name}.{suffix}"
    parts = [_KEY_NAMESPACE, name + _KEY_EXTENSION]
    if prefix:
        parts.insert(0, prefix.strip("/"))
    return "/".join(parts)


@dataclass(frozen=True, kw_only=True)
class RemoteObject:
    """
    A stored cache object as seen before downloading it.

    Attributes:
        key: object key
        metadata: string metadata attached to the object
        size: size in bytes of the stored object, when known
        updated: last modification time, when known
    """

    key: str
    metadata: dict[str, str]
    size: int | None
    updated: datetime | None


class RemoteStore(Protocol):
    """
    Represent an object store holding cache archives.

    Methods:
        upload: store the artifact archive with the given metadata.
        lookup: return the RemoteObject for a key, or None if missing.
        download: write the object content into fileobj.
        delete: remove the object, returning whether it existed.
    """

    def upload(self, key: str, artifact: CacheArtifact, info: CacheInfo) -> None: ...

    def lookup(self, key: str) -> RemoteObject | None: ...

    def download(self, key: str, fileobj: BinaryIO) -> None: ...

    def delete(self, key: str) -> bool: ...


def _progress() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
    )


class _ProgressReader:
    """Wraps a file object to update a Rich progress bar on each read."""

    def __init__(self, fp, progress: Progress, task_id) -> None:  # noqa: ANN001
        self._fp = fp
        self._progress = progress
        self._task_id = task_id

    def read(self, size: int = -1) -> bytes:
        data = self._fp.read(size)
        if data:
            self._progress.update(self._task_id, advance=len(data))
        return data

    def tell(self) -> int:
        return self._fp.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        pos = self._fp.seek(offset, whence)
        self._progress.update(self._task_id, completed=pos)
        return pos


class _ProgressWriter:
    """Wraps a file object to update a Rich progress bar on each write."""

    def __init__(self, fp, progress: Progress, task_id) -> None:  # noqa: ANN001
        self._fp = fp
        self._progress = progress
        self._task_id = task_id

    def write(self, data: bytes) -> int:
        written = self._fp.write(data)
        self._progress.update(self._task_id, advance=len(data))
        return written

    def flush(self) -> None:
        self._fp.flush()


class GCSRemoteStore:
    """
    RemoteStore backed by a Google Cloud Storage bucket.

    Credentials are discovered by the storage client from the
    environment. When public is True, uploaded objects are made
    publicly readable.
    """

    def __init__(
        self,
        bucket: str,
        *,
        client: storage.Client | None = None,
        public: bool = False,
    ) -> None:
        self.client = client if client is not None else storage.Client()
        self.bucket = self.client.bucket(bucket)
        self.public = public

    def upload(self, key: str, artifact: CacheArtifact, info: CacheInfo) -> None:
        log.info("uploading %s (%d bytes)... start", key, artifact.size)
        blob = self.bucket.blob(key)
        blob.metadata = info.to_metadata()
        handle = artifact.temp_file.handle
        with _progress() as progress:
            task_id = progress.add_task(key, total=artifact.size)
            blob.upload_from_file(
                _ProgressReader(handle, progress, task_id),
                size=artifact.size,
                content_type="application/octet-stream",
                predefined_acl="publicRead" if self.public else None,
            )
        log.info("uploading %s... ok", key)

    def lookup(self, key: str) -> RemoteObject | None:
        blob = self.bucket.get_blob(key)
        if blob is None:
            return None
        return RemoteObject(
            key=key,
            metadata=dict(blob.metadata or {}),
            size=blob.size,
            updated=blob.updated,
        )

    def download(self, key: str, fileobj: BinaryIO) -> None:
        log.info("downloading %s... start", key)
        blob = self.bucket.blob(key)
        with _progress() as progress:
            task_id = progress.add_task(key, total=None)
            blob.download_to_file(_ProgressWriter(fileobj, progress, task_id))
        fileobj.flush()
        fileobj.seek(0)
        log.info("downloading %s... ok", key)

    def delete(self, key: str) -> bool:
        try:
            self.bucket.blob(key).delete()
        except NotFound:
            return False
        return True
