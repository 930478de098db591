"""Errors raised by buildcache and helpers to turn them into exit codes."""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger("buildcache")
"""Logger used when reporting intercepted failures."""


class BuildCacheError(RuntimeError):
    """Base class for all the errors emitted by buildcache."""


class ConfigError(BuildCacheError):
    """The operation is misconfigured and retrying would not help."""


class NoPathsError(ConfigError):
    """None of the paths to cache exists."""

    def __init__(self) -> None:
        super().__init__("no paths to cache have been specified")


class UnsupportedHashError(ConfigError):
    """The requested hash algorithm is not available."""

    def __init__(self, name: str, supported: list[str]) -> None:
        super().__init__(
            f"hash algorithm '{name}' is not supported, use one of these instead: "
            + ", ".join(supported)
        )
        self.name = name
        self.supported = supported


class UnsupportedCompressionError(ConfigError):
    """The requested compression algorithm is not available."""


class RestoreConflictError(BuildCacheError):
    """A file being restored already exists and the policy forbids overwriting it."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"file with name already exists: {path}")
        self.path = Path(path)


class DigestMismatchError(BuildCacheError):
    """The digest of the restored archive differs from the recorded one."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"digest mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class Interceptor:
    """
    Context manager to intercept exceptions.

    Use as a context manager:

        interceptor = Interceptor()
        with interceptor:
            func()
        sys.exit(interceptor.exitcode())

    Exceptions are logged and suppressed. The failed field
    tells you whether there were any exceptions.
    """

    def __init__(self):
        self.failed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            return False
        if issubclass(exc_type, KeyboardInterrupt):
            return False
        log.error("operation failed: %s", exc_value)
        log.debug("operation failed", exc_info=(exc_type, exc_value, traceback))
        self.failed = True
        return True  # suppress the exception

    def exitcode(self) -> int:
        """Zero on success, 1 on failure."""
        return int(self.failed)
