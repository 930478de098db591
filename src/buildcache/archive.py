"""
Streaming archive pipelines.

Saving runs the following pipeline, chunk by chunk:

    paths -> tar -> tee -+-> hasher
                         +-> compressor -> staging file

Restoring runs the symmetric one:

    stream -> decompressor -> tee -+-> hasher
                                   +-> untar -> filesystem

The digest is always computed over the uncompressed tar bytes, so it
does not change when the compression algorithm does.
"""

from __future__ import annotations

import logging
import os
import tarfile
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from .compression import Compression, compressing_writer, decompressing_reader
from .digest import (
    CHUNK_SIZE,
    DEFAULT_HASH_ALGORITHM,
    HashingReader,
    TeeWriter,
    new_hasher,
)
from .errors import RestoreConflictError
from .staging import TempFile

log = logging.getLogger("buildcache/archive")


def extraction_filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo:
    """
    tarfile extraction filter used when restoring.

    Applies the path checks of the standard "tar" filter (no absolute
    names, nothing outside dest_path) but keeps the recorded mode, which
    that filter would strip of its group/other write and special bits.
    """
    filtered = tarfile.tar_filter(member, dest_path)
    return filtered.replace(mode=member.mode, deep=False)


class FileOverwrite(str, Enum):
    """What to do when a file being restored already exists."""

    SKIP = "skip"
    WARN = "warn"
    FAIL = "fail"
    OVERWRITE = "overwrite"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, kw_only=True)
class CacheArtifact:
    """
    Result of packaging the paths to cache.

    Attributes:
        temp_file: staging file holding the archive, rewound to the start
        size: size in bytes of the compressed archive
        uncompressed_size: size in bytes of the tar stream
        digest: hex digest of the tar stream
        hash_algorithm: name of the algorithm that produced digest
        compression: compression applied to the tar stream
    """

    temp_file: TempFile
    size: int
    uncompressed_size: int
    digest: str
    hash_algorithm: str
    compression: Compression


def write_cache(
    paths: Iterable[Path],
    temp_file: TempFile,
    *,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    level: int | None = None,
    logger: logging.Logger | None = None,
) -> CacheArtifact:
    """
    Archive the given paths into temp_file and return the CacheArtifact.

    Paths are expected to be normalized already (see paths.collect_paths).
    Directories are added recursively in sorted order. Any I/O error
    aborts the pipeline and propagates; cleaning up temp_file is up to
    whoever created it.
    """
    logger = logger or log
    hasher = new_hasher(hash_algorithm)
    handle = temp_file.handle
    staging_name = str(temp_file.path.resolve()).lstrip("/" + os.sep)

    def exclude_staging(info: tarfile.TarInfo) -> tarfile.TarInfo | None:
        # The staging file may live under one of the cached directories.
        if info.name == staging_name:
            return None
        return info

    logger.info("archiving %s... start", temp_file.path)
    with compressing_writer(temp_file.compression, handle, level=level) as compressed:
        tee = TeeWriter(hasher, compressed)
        with tarfile.open(fileobj=tee, mode="w|", bufsize=CHUNK_SIZE) as tar:
            for path in paths:
                logger.debug("adding %s", path)
                tar.add(str(path), filter=exclude_staging)

    handle.flush()
    size = handle.tell()
    handle.seek(0)
    logger.info(
        "archiving %s... ok (%d bytes, %d uncompressed)", temp_file.path, size, tee.count
    )
    return CacheArtifact(
        temp_file=temp_file,
        size=size,
        uncompressed_size=tee.count,
        digest=hasher.hexdigest(),
        hash_algorithm=hasher.name,
        compression=temp_file.compression,
    )


def restore_files(
    source: BinaryIO,
    compression: Compression,
    *,
    overwrite: FileOverwrite = FileOverwrite.FAIL,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    root: str | Path = "/",
    logger: logging.Logger | None = None,
) -> str:
    """
    Extract the archive read from source under root and return its digest.

    The digest covers the decompressed tar stream and is meant to be
    compared with the one recorded when saving.

    Raises:
        RestoreConflictError: if a file exists and overwrite is FAIL.
    """
    logger = logger or log
    root = Path(root)
    hasher = new_hasher(hash_algorithm)
    directories: list[tarfile.TarInfo] = []
    restored = 0

    with decompressing_reader(compression, source) as decompressed:
        reader = HashingReader(decompressed, hasher)
        with tarfile.open(fileobj=reader, mode="r|", bufsize=CHUNK_SIZE) as tar:
            for member in tar:
                if _restore_member(tar, member, root, overwrite, logger):
                    restored += 1
                if member.isdir():
                    directories.append(member)

            # Directory attributes go last, deepest first, so that read-only
            # directories do not prevent restoring their content.
            directories.sort(key=lambda info: info.name, reverse=True)
            for member in directories:
                tar.extract(member, path=root, set_attrs=True, filter=extraction_filter)

        # Tar padding after the end-of-archive marker still counts.
        reader.drain()

    logger.info("restored %d entries (%d bytes uncompressed)", restored, reader.count)
    return hasher.hexdigest()


def _restore_member(
    tar: tarfile.TarFile,
    member: tarfile.TarInfo,
    root: Path,
    overwrite: FileOverwrite,
    logger: logging.Logger,
) -> bool:
    """Restore a single entry, returning whether it was written."""
    target = root / member.name.lstrip("/")

    if member.isdir():
        # Attributes are applied once the whole stream has been read.
        extraction_filter(member, str(root))
        target.mkdir(parents=True, exist_ok=True)
        return True

    if (member.isfile() or member.islnk()) and os.path.lexists(target):
        if overwrite == FileOverwrite.FAIL:
            raise RestoreConflictError(target)
        if overwrite == FileOverwrite.WARN:
            logger.warning("Skipping an existing file: %s", target)
            return False
        if overwrite == FileOverwrite.SKIP:
            logger.debug("Skipping an existing file: %s", target)
            return False
        logger.debug("Restoring an existing file: %s", target)
        if member.islnk() or target.is_symlink():
            # Hard links cannot replace an existing name, and writing
            # through a symlink would modify its target.
            target.unlink()

    tar.extract(member, path=root, set_attrs=True, filter=extraction_filter)
    return True
