"""Cache build artifacts in a remote object store.

Paths are packaged into a compressed tar archive whose digest is
computed over the uncompressed tar stream, uploaded together with
that digest, and later restored while verifying it.
"""

from importlib.metadata import PackageNotFoundError, version

from .archive import CacheArtifact, FileOverwrite, restore_files, write_cache
from .cache import clear_cache, restore_cache, save_cache
from .compression import Compression
from .config import Config
from .errors import (
    BuildCacheError,
    ConfigError,
    DigestMismatchError,
    NoPathsError,
    RestoreConflictError,
)
from .metadata import CacheInfo
from .paths import collect_paths, remove_subpaths
from .remote import GCSRemoteStore, RemoteStore
from .staging import TempFile, temp_cache_file

try:
    __version__ = version("buildcache")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "BuildCacheError",
    "CacheArtifact",
    "CacheInfo",
    "Compression",
    "Config",
    "ConfigError",
    "DigestMismatchError",
    "FileOverwrite",
    "GCSRemoteStore",
    "NoPathsError",
    "RemoteStore",
    "RestoreConflictError",
    "TempFile",
    "clear_cache",
    "collect_paths",
    "remove_subpaths",
    "restore_cache",
    "restore_files",
    "save_cache",
    "temp_cache_file",
    "write_cache",
    "__version__",
]
