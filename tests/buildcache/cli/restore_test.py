"""Tests for the buildcache.cli.restore module."""

import shutil
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from buildcache.cache import save_cache
from buildcache.cli import cli
from buildcache.config import Config


def _save(source_tree: Path, staging_dir: Path, store, branch: str = "main") -> None:
    config = Config(bucket="bucket", branch=branch)
    save_cache(config, [source_tree], store=store, temp_dir=staging_dir)


def _invoke(args: list[str], store, branch: str = "main"):
    runner = CliRunner()
    with patch("buildcache.cli.restore.GCSRemoteStore", return_value=store):
        return runner.invoke(cli, ["--bucket", "bucket", "--branch", branch, *args])


class TestCacheRestore:
    """restore downloads the cache and extracts it."""

    def test_restores(self, source_tree: Path, staging_dir: Path, memory_store):
        _save(source_tree, staging_dir, memory_store)
        shutil.rmtree(source_tree)

        result = _invoke(["restore", "--temp-dir", str(staging_dir)], memory_store)

        assert result.exit_code == 0, result.output
        assert (source_tree / "f").read_text() == "hello"

    def test_relocated_root(self, source_tree: Path, staging_dir: Path, memory_store, tmp_path):
        _save(source_tree, staging_dir, memory_store)
        target = tmp_path / "target"

        result = _invoke(["restore", "--root", str(target)], memory_store)

        assert result.exit_code == 0, result.output
        assert (target / str(source_tree).lstrip("/") / "f").read_text() == "hello"

    def test_nothing_to_restore(self, memory_store):
        result = _invoke(["restore"], memory_store)
        assert result.exit_code == 0
        assert "No cache to restore." in result.output

    def test_conflict_fails(self, source_tree: Path, staging_dir: Path, memory_store):
        _save(source_tree, staging_dir, memory_store)

        result = _invoke(["restore"], memory_store)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_conflict_warn(self, source_tree: Path, staging_dir: Path, memory_store):
        _save(source_tree, staging_dir, memory_store)
        (source_tree / "f").write_text("local")

        result = _invoke(["restore", "--overwrite", "warn"], memory_store)

        assert result.exit_code == 0, result.output
        assert (source_tree / "f").read_text() == "local"
        assert "Skipping an existing file" in result.output

    def test_invalid_overwrite_policy(self, memory_store):
        result = _invoke(["restore", "--overwrite", "sometimes"], memory_store)
        assert result.exit_code == 2

    def test_base_branch(self, source_tree: Path, staging_dir: Path, memory_store):
        _save(source_tree, staging_dir, memory_store, branch="main")
        shutil.rmtree(source_tree)

        result = _invoke(["restore", "--base-branch", "main"], memory_store, branch="feature")

        assert result.exit_code == 0, result.output
        assert (source_tree / "f").read_text() == "hello"

    def test_max_age(self, source_tree: Path, staging_dir: Path, memory_store):
        _save(source_tree, staging_dir, memory_store)
        shutil.rmtree(source_tree)

        result = _invoke(["restore", "--max-age-days", "0"], memory_store)

        assert result.exit_code == 0
        assert "No cache to restore." in result.output
        assert not source_tree.exists()
