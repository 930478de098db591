"""Save, restore and clear caches stored in a RemoteStore."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from dacite import DaciteError

from .archive import FileOverwrite, restore_files, write_cache
from .compression import Compression
from .config import Config
from .digest import DEFAULT_HASH_ALGORITHM
from .errors import DigestMismatchError
from .metadata import CacheInfo
from .paths import collect_paths
from .remote import RemoteObject, RemoteStore
from .staging import temp_cache_file

log = logging.getLogger("buildcache/cache")


def _lookup(store: RemoteStore, key: str) -> tuple[RemoteObject, CacheInfo] | None:
    """Return the remote object and its parsed metadata, or None if unusable."""
    remote = store.lookup(key)
    if remote is None:
        return None
    try:
        info = CacheInfo.from_metadata(remote.metadata)
    except (DaciteError, ValueError) as exc:
        log.warning("ignoring cache %s with invalid metadata: %s", key, exc)
        return None
    return remote, info


def save_cache(
    config: Config,
    paths: Iterable[str | Path],
    relative_paths: Iterable[str | Path] = (),
    *,
    store: RemoteStore,
    compression: Compression = Compression.GZIP,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    root: str | Path | None = None,
    temp_dir: str | Path | None = None,
) -> CacheInfo:
    """
    Package the given paths and upload them unless the remote copy matches.

    Returns the CacheInfo describing the archive that was produced.

    Raises:
        NoPathsError: when none of the paths exists.
        UnsupportedHashError: when hash_algorithm is not supported.
    """
    key = config.object_key()
    collected = collect_paths(paths, relative_paths, root=root)
    with temp_cache_file(compression, directory=temp_dir) as temp_file:
        artifact = write_cache(collected, temp_file, hash_algorithm=hash_algorithm)
        info = CacheInfo.from_artifact(artifact)

        found = _lookup(store, key)
        if found is not None:
            _, previous = found
            if (previous.hash_algorithm, previous.digest) == (info.hash_algorithm, info.digest):
                log.info("no change to cache %s was detected, skipping upload", key)
                return info

        store.upload(key, artifact, info)
    return info


def _restore_once(
    config: Config,
    *,
    store: RemoteStore,
    overwrite: FileOverwrite,
    root: str | Path,
    temp_dir: str | Path | None,
    now: datetime | None,
) -> bool:
    key = config.object_key()
    found = _lookup(store, key)
    if found is None:
        log.info("no cache found at %s", key)
        return False
    remote, info = found

    if config.max_age is not None and remote.updated is not None:
        age = (now or datetime.now(timezone.utc)) - remote.updated
        if age > config.max_age:
            log.info("cache %s is too old (%s), skipping", key, age)
            return False

    size = remote.size if remote.size is not None else info.size
    if config.max_bytes is not None and size > config.max_bytes:
        log.warning(
            "cache %s is too large (%d bytes, limit %d), skipping", key, size, config.max_bytes
        )
        return False

    with temp_cache_file(info.compression, directory=temp_dir) as temp_file:
        store.download(key, temp_file.handle)
        temp_file.handle.flush()
        temp_file.handle.seek(0)
        digest = restore_files(
            temp_file.handle,
            info.compression,
            overwrite=overwrite,
            hash_algorithm=info.hash_algorithm,
            root=root,
        )

    if digest != info.digest:
        raise DigestMismatchError(info.digest, digest)
    log.info("restored cache %s (%s %s)", key, info.hash_algorithm, digest)
    return True


def restore_cache(
    config: Config,
    *,
    store: RemoteStore,
    overwrite: FileOverwrite = FileOverwrite.FAIL,
    base_branch: str | None = None,
    root: str | Path = "/",
    temp_dir: str | Path | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Download and restore the cache described by config.

    When no usable cache exists for the configured branch and a different
    base_branch is given, the base branch cache is tried instead. Returns
    whether a cache was restored.

    Raises:
        RestoreConflictError: when a file exists and overwrite is FAIL.
        DigestMismatchError: when the restored archive does not match
            the recorded digest.
    """
    kwargs = dict(store=store, overwrite=overwrite, root=root, temp_dir=temp_dir, now=now)
    if _restore_once(config, **kwargs):
        return True
    if base_branch is not None and base_branch != config.branch:
        log.info("falling back to the cache of base branch %s", base_branch)
        return _restore_once(config.with_branch(base_branch), **kwargs)
    return False


def clear_cache(config: Config, *, store: RemoteStore) -> bool:
    """Delete the cache described by config, returning whether it existed."""
    key = config.object_key()
    deleted = store.delete(key)
    if deleted:
        log.info("deleted cache %s", key)
    else:
        log.info("no cache found at %s", key)
    return deleted
