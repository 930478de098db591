"""Lookup of the git branch used to key caches."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

log = logging.getLogger("buildcache/git")

BRANCH_ENV_VAR = "GIT_BRANCH"


def branch_name(git_dir: str | Path | None = None) -> str | None:
    """
    Return the current branch name, or None if it cannot be determined.

    The GIT_BRANCH environment variable takes precedence. Otherwise we ask
    git about the repository containing git_dir (or the current directory).
    A detached HEAD has no branch name.
    """
    env_branch = os.environ.get(BRANCH_ENV_VAR)
    if env_branch:
        return env_branch

    cwd = Path(git_dir) if git_dir is not None else None
    if cwd is not None and cwd.name == ".git":
        cwd = cwd.parent
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        log.debug("cannot determine the git branch: %s", exc)
        return None

    branch = completed.stdout.strip()
    if not branch or branch == "HEAD":
        return None
    return branch
