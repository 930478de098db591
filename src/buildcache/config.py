"""Configuration shared by the cache operations."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta

from .remote import object_key


@dataclass(frozen=True, kw_only=True)
class Config:
    """
    Settings identifying a cache and bounding what we restore.

    Attributes:
        bucket: name of the bucket holding the caches
        prefix: optional key prefix, e.g. the project name
        branch: git branch the cache belongs to
        suffix: optional key suffix distinguishing caches of one branch
        max_age: caches older than this are not restored
        max_bytes: caches larger than this are not restored
        verbose: whether to log debug messages
        concise: whether to omit timestamps and logger names from logs
    """

    bucket: str
    prefix: str | None = None
    branch: str | None = None
    suffix: str | None = None
    max_age: timedelta | None = None
    max_bytes: int | None = None
    verbose: bool = False
    concise: bool = False

    def object_key(self) -> str:
        """Return the key of the cache object described by this config."""
        return object_key(self.prefix, self.branch, self.suffix)

    def with_branch(self, branch: str | None) -> Config:
        return dataclasses.replace(self, branch=branch)
