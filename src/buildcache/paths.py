"""Normalization of the set of paths to cache."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .errors import NoPathsError

log = logging.getLogger("buildcache/paths")


def canonicalize(path: str | Path, root: Path | None = None) -> Path:
    """Return the absolute, symlink-resolved form of path, relative to root if given."""
    path = Path(path).expanduser()
    if root is not None and not path.is_absolute():
        path = root / path
    return path.resolve()


def _is_segment_prefix(prefix: tuple[str, ...], parts: tuple[str, ...]) -> bool:
    if len(prefix) > len(parts):
        return False
    return all(
        os.path.normcase(left) == os.path.normcase(right)
        for left, right in zip(prefix, parts)
    )


def remove_subpaths(paths: Iterable[str | Path]) -> list[Path]:
    """
    Return the minimal sorted list of paths covering the given ones.

    Paths are canonicalized first; duplicates and any path nested
    under another one in the list are removed. Comparison is made
    segment by segment, so `/a/bc` is not considered nested in `/a/b`.
    """
    split = sorted(
        {canonicalize(path).parts for path in paths},
        key=lambda parts: tuple(os.path.normcase(part) for part in parts),
    )
    kept: list[tuple[str, ...]] = []
    for parts in split:
        # Sorted order puts an ancestor before all of its descendants,
        # so checking the last kept entry suffices.
        if kept and _is_segment_prefix(kept[-1], parts):
            continue
        kept.append(parts)
    return [Path(*parts) for parts in kept]


def skip_missing(paths: Iterable[Path], logger: logging.Logger | None = None) -> list[Path]:
    """Return the paths that exist, warning about each missing one."""
    logger = logger or log
    existing: list[Path] = []
    for path in paths:
        if os.path.lexists(path):
            logger.info("Caching: %s", path)
            existing.append(path)
        else:
            logger.warning("File path is skipped since it is missing: %s", path)
    return existing


def collect_paths(
    paths: Iterable[str | Path],
    relative_paths: Iterable[str | Path] = (),
    *,
    root: str | Path | None = None,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """
    Merge and normalize the paths to cache.

    Relative paths are resolved against root, which defaults to the
    current working directory. Missing paths are skipped with a warning.

    Raises:
        NoPathsError: when no path survives normalization.
    """
    logger = logger or log
    logger.debug("Preparing files for saving in the cache.")
    base = Path.cwd() if root is None else canonicalize(root)
    resolved = [canonicalize(path, base) for path in paths]
    resolved.extend(canonicalize(path, base) for path in relative_paths)
    unique = skip_missing(remove_subpaths(resolved), logger)
    if not unique:
        raise NoPathsError()
    return unique
