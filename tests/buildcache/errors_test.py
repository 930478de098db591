"""Tests for the buildcache.errors module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from buildcache.errors import (
    BuildCacheError,
    DigestMismatchError,
    Interceptor,
    RestoreConflictError,
)


class TestInterceptor:
    """Tests for Interceptor."""

    def test_no_exception(self) -> None:
        interceptor = Interceptor()

        with patch("buildcache.errors.log") as log, interceptor:
            pass

        assert interceptor.failed is False
        assert interceptor.exitcode() == 0
        log.error.assert_not_called()

    def test_exception_sets_failed_and_logs(self) -> None:
        interceptor = Interceptor()

        with patch("buildcache.errors.log") as log, interceptor:
            raise ValueError("boom")

        assert interceptor.failed is True
        assert interceptor.exitcode() == 1
        log.error.assert_called_once()
        assert log.error.call_args[0][0] == "operation failed: %s"
        assert str(log.error.call_args[0][1]) == "boom"

    def test_keyboard_interrupt_is_not_intercepted(self) -> None:
        interceptor = Interceptor()

        with pytest.raises(KeyboardInterrupt):
            with interceptor:
                raise KeyboardInterrupt

        assert interceptor.failed is False


class TestErrors:
    """Tests for the error messages."""

    def test_restore_conflict_names_the_path(self):
        error = RestoreConflictError("/tmp/x/f")
        assert isinstance(error, BuildCacheError)
        assert error.path == Path("/tmp/x/f")
        assert "/tmp/x/f" in str(error)

    def test_digest_mismatch(self):
        error = DigestMismatchError("aaa", "bbb")
        assert error.expected == "aaa"
        assert error.actual == "bbb"
        assert str(error) == "digest mismatch: expected aaa, got bbb"
