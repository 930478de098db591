"""Tests for the buildcache.metadata module."""

import pytest
from dacite.exceptions import DaciteError

from buildcache.archive import write_cache
from buildcache.compression import Compression
from buildcache.metadata import CacheInfo
from buildcache.staging import temp_cache_file


def _info(**overrides) -> CacheInfo:
    values = dict(
        v=0,
        digest="3a421c62179a",
        hash_algorithm="sha256",
        compression=Compression.ZSTD,
        size=10,
        uncompressed_size=10240,
    )
    values.update(overrides)
    return CacheInfo(**values)


class TestCacheInfo:
    """Tests for CacheInfo."""

    def test_to_metadata_is_all_strings(self):
        assert _info().to_metadata() == {
            "v": "0",
            "digest": "3a421c62179a",
            "hash_algorithm": "sha256",
            "compression": "zstd",
            "size": "10",
            "uncompressed_size": "10240",
        }

    def test_from_metadata_casts_values(self):
        info = CacheInfo.from_metadata(_info().to_metadata())
        assert info == _info()
        assert info.compression is Compression.ZSTD
        assert isinstance(info.size, int)

    def test_unsupported_version(self):
        with pytest.raises(ValueError, match="Unsupported metadata version"):
            _info(v=1)

    def test_from_metadata_missing_field(self):
        metadata = _info().to_metadata()
        del metadata["digest"]
        with pytest.raises(DaciteError):
            CacheInfo.from_metadata(metadata)

    def test_from_metadata_invalid_compression(self):
        metadata = _info().to_metadata()
        metadata["compression"] = "lzma"
        with pytest.raises(ValueError):
            CacheInfo.from_metadata(metadata)

    def test_from_metadata_invalid_size(self):
        metadata = _info().to_metadata()
        metadata["size"] = "large"
        with pytest.raises(ValueError):
            CacheInfo.from_metadata(metadata)

    def test_from_artifact(self, source_tree, staging_dir):
        with temp_cache_file(Compression.GZIP, directory=staging_dir) as temp_file:
            artifact = write_cache([source_tree], temp_file)
        info = CacheInfo.from_artifact(artifact)
        assert info.v == 0
        assert info.digest == artifact.digest
        assert info.hash_algorithm == "sha256"
        assert info.compression == Compression.GZIP
        assert info.size == artifact.size
        assert info.uncompressed_size == artifact.uncompressed_size
