"""buildcache command-line interface."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from importlib.metadata import version

import click

from ..config import Config
from ..git import branch_name
from .config_file import CacheFile, find_cache_file
from .logger import configure_logging

_PACKAGE_NAME = "buildcache"


def _get_version() -> str:
    """Return the installed package version string."""
    return version(_PACKAGE_NAME)


@dataclass(kw_only=True)
class CommonArgs:
    """Options shared by all the cache commands."""

    bucket: str | None
    prefix: str | None
    branch: str | None
    git_dir: str | None
    suffix: str | None
    max_bytes: int | None
    verbose: bool
    concise: bool
    file: CacheFile | None

    def config(self, *, max_age: timedelta | None = None) -> Config:
        """
        Build the Config for the current invocation.

        Command line flags win over the cache file. The branch is
        looked up with git when not given explicitly.
        """
        file = self.file or CacheFile(version=0)
        bucket = self.bucket or file.bucket
        if not bucket:
            raise click.UsageError("missing bucket: use --bucket or BUILDCACHE_BUCKET")
        return Config(
            bucket=bucket,
            prefix=self.prefix or file.prefix,
            branch=self.branch or branch_name(self.git_dir),
            suffix=self.suffix or file.suffix,
            max_age=max_age,
            max_bytes=self.max_bytes,
            verbose=self.verbose,
            concise=self.concise,
        )


pass_common = click.make_pass_decorator(CommonArgs)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s", package_name=_PACKAGE_NAME)
@click.option(
    "-f",
    "--file",
    "config_file",
    default=None,
    metavar="FILE",
    help="YAML cache config (default: ./.buildcache.yaml if present)",
)
@click.option("--bucket", envvar="BUILDCACHE_BUCKET", help="Bucket holding the caches")
@click.option("--prefix", envvar="BUILDCACHE_PREFIX", help="Prefix for the cache keys")
@click.option(
    "--branch",
    envvar="GIT_BRANCH",
    help="Git branch the cache belongs to (default: current branch)",
)
@click.option("--git-dir", default=None, help="Git repository used to look up the branch")
@click.option("--suffix", default=None, help="Suffix distinguishing caches of one branch")
@click.option("--max-bytes", type=int, default=None, help="Do not restore larger caches")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode.")
@click.option("--concise", is_flag=True, default=False, help="Omit timestamps from logs.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    bucket: str | None,
    prefix: str | None,
    branch: str | None,
    git_dir: str | None,
    suffix: str | None,
    max_bytes: int | None,
    verbose: bool,
    concise: bool,
) -> None:
    """Cache build artifacts in a Google Cloud Storage bucket."""
    configure_logging(verbose, concise)
    ctx.obj = CommonArgs(
        bucket=bucket,
        prefix=prefix,
        branch=branch,
        git_dir=git_dir,
        suffix=suffix,
        max_bytes=max_bytes,
        verbose=verbose,
        concise=concise,
        file=find_cache_file(config_file),
    )


@cli.command(hidden=True)
def help() -> None:
    """Show usage information."""
    click.echo('Use "buildcache --help" for usage information.')
    click.echo('Use "buildcache <command> --help" for help on a specific command.')


@cli.command("version")
def version_cmd() -> None:
    """Print the version number."""
    click.echo(_get_version())


# Register subcommands (must be after cli is defined)
from . import clear as _clear  # noqa: E402, F401
from . import restore as _restore  # noqa: E402, F401
from . import save as _save  # noqa: E402, F401
