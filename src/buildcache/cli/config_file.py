"""Loading of the optional YAML file describing a project cache."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path

import click
import dacite
import yaml

DEFAULT_CONFIG_FILE = ".buildcache.yaml"


@dataclass(frozen=True, kw_only=True)
class CacheSettings:
    """
    Project settings read from a YAML file, e.g.:

        version: 0
        bucket: my-build-caches
        prefix: my-project
        compression: zstd
        paths:
          - ~/.cache/pip
        relative_paths:
          - build
          - node_modules

    Relative paths are resolved against the directory containing the file.
    """

    version: int
    bucket: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    compression: str | None = None
    hash: str | None = None
    paths: list[str] = field(default_factory=list)
    relative_paths: list[str] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class CacheFile(CacheSettings):
    """CacheSettings along with the file they were read from."""

    path: Path | None = None

    @property
    def root(self) -> Path | None:
        """Directory relative paths are resolved against."""
        return None if self.path is None else self.path.resolve().parent


def load_cache_file(config_path: Path) -> CacheFile:
    """Load the cache settings from a YAML file."""
    try:
        content = config_path.read_text()
    except FileNotFoundError as exc:
        raise click.ClickException(f"Cache config not found: {config_path}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise click.ClickException("Cache config must be a mapping.")

    try:
        settings = dacite.from_dict(CacheSettings, data, config=dacite.Config(strict=True))
    except (dacite.DaciteError, TypeError) as exc:
        raise click.ClickException(f"Invalid cache config: {exc}") from exc

    if settings.version != 0:
        raise click.ClickException(f"Unsupported cache config version: {settings.version}")

    return CacheFile(**dataclasses.asdict(settings), path=config_path)


def find_cache_file(config_path: str | None) -> CacheFile | None:
    """Load the given file, or the default one if it exists in the current directory."""
    if config_path is not None:
        return load_cache_file(Path(config_path))
    default = Path(DEFAULT_CONFIG_FILE)
    if default.exists():
        return load_cache_file(default)
    return None
