"""Cache save command."""

from __future__ import annotations

import click

from ..cache import save_cache
from ..compression import Compression
from ..digest import DEFAULT_HASH_ALGORITHM
from ..errors import Interceptor
from ..remote import GCSRemoteStore
from . import CommonArgs, cli, pass_common


@cli.command()
@click.argument("paths", nargs=-1)
@click.option(
    "-r",
    "--relative",
    "relative_paths",
    multiple=True,
    help="Path relative to the project root (repeatable)",
)
@click.option("--root", default=None, help="Project root (default: cache file directory or cwd)")
@click.option(
    "-c",
    "--compression",
    default=None,
    help="Compression: none, gzip or zstd (default: gzip)",
)
@click.option("--hash", "hash_algorithm", default=None, help="Hash algorithm (default: sha256)")
@click.option("--public", is_flag=True, help="Make the uploaded cache publicly readable")
@click.option("--temp-dir", default=None, help="Directory for the staging archive")
@pass_common
def save(
    common: CommonArgs,
    paths: tuple[str, ...],
    relative_paths: tuple[str, ...],
    root: str | None,
    compression: str | None,
    hash_algorithm: str | None,
    public: bool,
    temp_dir: str | None,
) -> None:
    """Archive PATHS and upload them to the bucket.

    Nothing is uploaded when the remote cache already holds an
    archive with the same digest.
    """
    config = common.config()
    file = common.file
    all_paths = list(paths)
    all_relative = list(relative_paths)
    if file is not None:
        all_paths.extend(file.paths)
        all_relative.extend(file.relative_paths)
        root = root or (str(file.root) if file.root else None)
        compression = compression or file.compression
        hash_algorithm = hash_algorithm or file.hash

    interceptor = Interceptor()
    with interceptor:
        info = save_cache(
            config,
            all_paths,
            all_relative,
            store=GCSRemoteStore(config.bucket, public=public),
            compression=Compression.parse(compression or Compression.GZIP.value),
            hash_algorithm=hash_algorithm or DEFAULT_HASH_ALGORITHM,
            root=root,
            temp_dir=temp_dir,
        )
        click.echo(f"{info.hash_algorithm}:{info.digest} {config.object_key()}")
    raise SystemExit(interceptor.exitcode())
