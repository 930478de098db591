"""Streaming codecs for the supported compression algorithms."""

from __future__ import annotations

import gzip
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import BinaryIO

import zstandard

from .errors import UnsupportedCompressionError


class Compression(str, Enum):
    """Compression algorithm applied to the tar stream."""

    NONE = "none"
    GZIP = "gzip"
    ZSTD = "zstd"

    @property
    def extension(self) -> str:
        """Filename extension tag, without the leading dot."""
        return _EXTENSIONS[self]

    @classmethod
    def parse(cls, name: str) -> Compression:
        """Parse a compression name, raising UnsupportedCompressionError."""
        try:
            return cls(name.lower())
        except ValueError as exc:
            supported = ", ".join(c.value for c in cls)
            raise UnsupportedCompressionError(
                f"compression '{name}' is not supported, use one of these instead: {supported}"
            ) from exc

    def __str__(self) -> str:
        return self.value


_EXTENSIONS: dict[Compression, str] = {
    Compression.NONE: "",
    Compression.GZIP: "gz",
    Compression.ZSTD: "zst",
}

DEFAULT_GZIP_LEVEL = 6
DEFAULT_ZSTD_LEVEL = 3


@contextmanager
def compressing_writer(
    compression: Compression,
    fileobj: BinaryIO,
    *,
    level: int | None = None,
) -> Iterator[BinaryIO]:
    """
    Yield a writable stream that encodes into fileobj.

    The encoder is finalized on exit. The underlying fileobj is
    never closed, so the caller can measure and rewind it.
    """
    if compression == Compression.NONE:
        yield fileobj
        return

    if compression == Compression.GZIP:
        # Fixed mtime so the same input gives the same bytes.
        with gzip.GzipFile(
            filename="",
            mode="wb",
            fileobj=fileobj,
            compresslevel=DEFAULT_GZIP_LEVEL if level is None else level,
            mtime=0,
        ) as writer:
            yield writer
        return

    compressor = zstandard.ZstdCompressor(level=DEFAULT_ZSTD_LEVEL if level is None else level)
    with compressor.stream_writer(fileobj, closefd=False) as writer:
        yield writer


@contextmanager
def decompressing_reader(compression: Compression, fileobj: BinaryIO) -> Iterator[BinaryIO]:
    """Yield a readable stream of the bytes decoded from fileobj."""
    if compression == Compression.NONE:
        yield fileobj
        return

    if compression == Compression.GZIP:
        with gzip.GzipFile(mode="rb", fileobj=fileobj) as reader:
            yield reader
        return

    decompressor = zstandard.ZstdDecompressor()
    with decompressor.stream_reader(fileobj, read_across_frames=True, closefd=False) as reader:
        yield reader
