"""Scoped temporary files holding an archive before upload or after download."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .compression import Compression

log = logging.getLogger("buildcache/staging")

TEMP_FILE_PREFIX = "buildcache-"


@dataclass(frozen=True, kw_only=True)
class TempFile:
    """
    Staging file for a cache archive.

    Attributes:
        path: location of the file on disk
        handle: binary read/write handle opened on path
        compression: compression of the archive it holds
    """

    path: Path
    handle: BinaryIO
    compression: Compression


def temp_file_suffix(compression: Compression) -> str:
    """Return the filename suffix encoding the given compression."""
    if not compression.extension:
        return ".tar"
    return f".tar.{compression.extension}"


@contextmanager
def temp_cache_file(
    compression: Compression,
    *,
    directory: str | Path | None = None,
    delete: bool = True,
) -> Iterator[TempFile]:
    """
    Create a uniquely named staging file and release it on exit.

    The handle is closed on every exit path. Unless delete is
    False, the file is removed as well, including when the body
    raised and left a partially written archive behind.
    """
    fd, name = tempfile.mkstemp(
        prefix=TEMP_FILE_PREFIX,
        suffix=temp_file_suffix(compression),
        dir=directory,
    )
    path = Path(name)
    try:
        handle = os.fdopen(fd, "w+b")
    except BaseException:
        os.close(fd)
        path.unlink(missing_ok=True)
        raise
    log.debug("staging file %s... open", path)
    try:
        yield TempFile(path=path, handle=handle, compression=compression)
    finally:
        handle.close()
        if delete:
            path.unlink(missing_ok=True)
            log.debug("staging file %s... removed", path)
