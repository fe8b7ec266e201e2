"""Inspection and maintenance commands for a jumpdb data directory."""

from __future__ import annotations

import functools
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Tuple

import click

from jumpdb.config import StoreConfig
from jumpdb.core import Database, DatabaseError, DatabaseFile
from jumpdb.core.constants import PROGRAM_NAME
from jumpdb.utils.logging import configure_logging, get_logger, log_context


def _reports_database_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn DatabaseError into a one-line message and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            click.echo(f"{PROGRAM_NAME}: {exc}", err=True)
            click.get_current_context().exit(1)

    return wrapper


@contextmanager
def _session(config: StoreConfig) -> Iterator[Database]:
    store = DatabaseFile(config.data_dir)
    with log_context(data_dir=str(config.data_dir)):
        with store.open() as db:
            yield db


def _load_config(data_dir: Optional[Path]) -> StoreConfig:
    if os.getenv("JUMPDB_DATA_DIR"):
        config = StoreConfig.from_env()
        if data_dir is not None:
            config = config.model_copy(update={"data_dir": data_dir})
        return config
    if data_dir is None:
        raise click.UsageError("--data-dir or JUMPDB_DATA_DIR is required")
    return StoreConfig(data_dir=data_dir)


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory holding db.zo (default: $JUMPDB_DATA_DIR).",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path]) -> None:
    """Inspect and maintain a jumpdb database."""
    config = _load_config(data_dir)
    configure_logging(level=config.log_level, json_output=config.json_logs)
    ctx.obj = config


@cli.command()
@click.argument("keywords", nargs=-1)
@click.option("--now", type=int, default=None, help="Epoch seconds to score at (default: current time).")
@click.option("--exists", is_flag=True, help="Skip paths that no longer exist.")
@click.option("--exclude", multiple=True, help="Exact path to leave out (repeatable).")
@click.option("--score/--no-score", "show_score", default=True, help="Print scores next to paths.")
@click.pass_obj
@_reports_database_errors
def show(
    config: StoreConfig,
    keywords: Tuple[str, ...],
    now: Optional[int],
    exists: bool,
    exclude: Tuple[str, ...],
    show_score: bool,
) -> None:
    """List directories matching KEYWORDS, best first."""
    now = int(time.time()) if now is None else now

    with _session(config) as db:
        with db.stream(now).with_keywords(keywords).with_exists(exists) as stream:
            for path in (*config.exclude_dirs, *exclude):
                stream.with_exclude(path)
            for path, score in stream:
                if show_score:
                    click.echo(f"{score:>6.1f} {path}")
                else:
                    click.echo(path)


@cli.command()
@click.pass_obj
@_reports_database_errors
def stats(config: StoreConfig) -> None:
    """Print record count, total rank, and file size."""
    store = DatabaseFile(config.data_dir)
    with _session(config) as db:
        total_rank = sum(record.rank for record in db)
        size = store.path.stat().st_size if store.path.exists() else 0
        click.echo(f"path:       {store.path}")
        click.echo(f"records:    {len(db)}")
        click.echo(f"total rank: {total_rank:.1f}")
        click.echo(f"file size:  {size:,} bytes")


@cli.command()
@click.option(
    "--max-age",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Aging threshold (default: $JUMPDB_MAXAGE or 10000).",
)
@click.pass_obj
@_reports_database_errors
def maintain(config: StoreConfig, max_age: Optional[float]) -> None:
    """Merge duplicate paths, age ranks, and save."""
    logger = get_logger(__name__)
    max_age = config.max_age if max_age is None else max_age

    with _session(config) as db:
        before = len(db)
        db.dedup()
        db.age(max_age)
        db.save()

    logger.info("maintenance_complete", records_before=before, records_after=len(db), max_age=max_age)
    click.echo(f"{before} -> {len(db)} records")


if __name__ == "__main__":
    cli()
