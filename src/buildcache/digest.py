"""Hash algorithm selection and the fan-out streams hashing the tar bytes."""

from __future__ import annotations

import hashlib
from typing import BinaryIO, Protocol

from .errors import UnsupportedHashError

DEFAULT_HASH_ALGORITHM = "sha256"

CHUNK_SIZE = 64 * 1024
"""Size of the chunks flowing through the pipelines."""

# Variable-length digests (shake_*) need a length argument on hexdigest().
SUPPORTED_HASH_ALGORITHMS: list[str] = sorted(
    name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_")
)


class Hasher(Protocol):
    """The subset of the hashlib interface we rely on."""

    name: str

    def update(self, data: bytes, /) -> None: ...

    def hexdigest(self) -> str: ...


def new_hasher(name: str = DEFAULT_HASH_ALGORITHM) -> Hasher:
    """
    Return a fresh hasher for the given algorithm name.

    Raises:
        UnsupportedHashError: if the algorithm is not supported.
    """
    normalized = name.lower().replace("-", "_")
    if normalized not in SUPPORTED_HASH_ALGORITHMS:
        raise UnsupportedHashError(name, SUPPORTED_HASH_ALGORITHMS)
    return hashlib.new(normalized)


class TeeWriter:
    """
    Write-only stream forwarding every chunk to a hasher and to a sink.

    Both consumers have accepted a chunk when write() returns, so the
    producer cannot run ahead of the slowest one.
    """

    def __init__(self, hasher: Hasher, sink: BinaryIO) -> None:
        self.hasher = hasher
        self.sink = sink
        self.count = 0

    def write(self, data: bytes) -> int:
        self.hasher.update(data)
        self.sink.write(data)
        self.count += len(data)
        return len(data)

    def flush(self) -> None:
        self.sink.flush()


class HashingReader:
    """Read-only stream hashing every chunk it hands to its consumer."""

    def __init__(self, source: BinaryIO, hasher: Hasher) -> None:
        self.source = source
        self.hasher = hasher
        self.count = 0

    def read(self, size: int = -1) -> bytes:
        data = self.source.read(size)
        if data:
            self.hasher.update(data)
            self.count += len(data)
        return data

    def drain(self) -> int:
        """Hash whatever the consumer left unread and return its size."""
        drained = 0
        while chunk := self.read(CHUNK_SIZE):
            drained += len(chunk)
        return drained
