"""Cache restore command."""

from __future__ import annotations

from datetime import timedelta

import click

from ..archive import FileOverwrite
from ..cache import restore_cache
from ..errors import Interceptor
from ..remote import GCSRemoteStore
from . import CommonArgs, cli, pass_common


@cli.command()
@click.option(
    "--overwrite",
    type=click.Choice([policy.value for policy in FileOverwrite]),
    default=FileOverwrite.FAIL.value,
    show_default=True,
    help="What to do with files that already exist",
)
@click.option(
    "--base-branch",
    default=None,
    help="Branch whose cache is restored when the current one has none",
)
@click.option("--max-age-days", type=float, default=None, help="Ignore older caches")
@click.option("--root", default="/", show_default=True, help="Directory to restore files under")
@click.option("--temp-dir", default=None, help="Directory for the staging archive")
@pass_common
def restore(
    common: CommonArgs,
    overwrite: str,
    base_branch: str | None,
    max_age_days: float | None,
    root: str,
    temp_dir: str | None,
) -> None:
    """Download the cache and restore its files."""
    max_age = timedelta(days=max_age_days) if max_age_days is not None else None
    config = common.config(max_age=max_age)

    interceptor = Interceptor()
    with interceptor:
        restored = restore_cache(
            config,
            store=GCSRemoteStore(config.bucket),
            overwrite=FileOverwrite(overwrite),
            base_branch=base_branch,
            root=root,
            temp_dir=temp_dir,
        )
        if not restored:
            click.echo("No cache to restore.")
    raise SystemExit(interceptor.exitcode())
