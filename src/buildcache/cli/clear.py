"""Cache clear command."""

from __future__ import annotations

import click

from ..cache import clear_cache
from ..errors import Interceptor
from ..remote import GCSRemoteStore
from . import CommonArgs, cli, pass_common


@cli.command()
@pass_common
def clear(common: CommonArgs) -> None:
    """Delete the cache from the bucket."""
    config = common.config()
    interceptor = Interceptor()
    with interceptor:
        if not clear_cache(config, store=GCSRemoteStore(config.bucket)):
            click.echo("No cache to clear.")
    raise SystemExit(interceptor.exitcode())
