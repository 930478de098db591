"""Metadata stored alongside each remote cache object."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from dacite import Config, from_dict

from .archive import CacheArtifact
from .compression import Compression

METADATA_VERSION = 0


@dataclass(frozen=True, kw_only=True)
class CacheInfo:
    """
    Description of a stored cache archive.

    Object stores only keep string metadata, so to_metadata() renders
    every field as a string and from_metadata() casts them back.
    """

    v: int
    digest: str
    hash_algorithm: str
    compression: Compression
    size: int
    uncompressed_size: int

    def __post_init__(self):
        if self.v != METADATA_VERSION:
            raise ValueError(
                f"Unsupported metadata version: {self.v} (only v={METADATA_VERSION} supported)"
            )

    @classmethod
    def from_artifact(cls, artifact: CacheArtifact) -> CacheInfo:
        return cls(
            v=METADATA_VERSION,
            digest=artifact.digest,
            hash_algorithm=artifact.hash_algorithm,
            compression=artifact.compression,
            size=artifact.size,
            uncompressed_size=artifact.uncompressed_size,
        )

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> CacheInfo:
        """
        Parse the metadata of a remote object.

        Raises:
            dacite.DaciteError: on missing or malformed fields.
            ValueError: on an unsupported version or compression.
        """
        return from_dict(cls, metadata, config=Config(cast=[int, Compression]))

    def to_metadata(self) -> dict[str, str]:
        return {key: str(value) for key, value in asdict(self).items()}
