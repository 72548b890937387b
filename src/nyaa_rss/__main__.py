"""
nyaa-rss command line.

Usage:
    python -m nyaa_rss search "one piece" -n 100
    python -m nyaa_rss page "one piece" 2 --category 1_2
    python -m nyaa_rss user SomeUploader --page 1
    python -m nyaa_rss list 1_2 --json
"""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable

import click
from rich.table import Table

from nyaa_rss.client import NyaaClient
from nyaa_rss.exceptions import NyaaRssException
from nyaa_rss.models import SearchOptions, Torrent
from nyaa_rss.utils.logging_config import get_console, setup_logging

logger = logging.getLogger(__name__)


def _print_results(torrents: list[Torrent], as_json: bool) -> None:
    if as_json:
        for torrent in torrents:
            click.echo(json.dumps(torrent.to_dict(), ensure_ascii=False))
        return

    table = Table(title=f"{len(torrents)} torrents")
    table.add_column("Published", style="dim", no_wrap=True)
    table.add_column("Name")
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("S", justify="right", style="green")
    table.add_column("L", justify="right", style="red")
    table.add_column("C", justify="right")

    for torrent in torrents:
        table.add_row(
            torrent.published_at.strftime("%Y-%m-%d %H:%M") if torrent.published_at else "",
            torrent.name or "",
            torrent.file_size or "",
            str(torrent.seeders if torrent.seeders is not None else ""),
            str(torrent.leechers if torrent.leechers is not None else ""),
            str(torrent.completed if torrent.completed is not None else ""),
        )
    get_console().print(table)


def _run(ctx: click.Context, operation: Callable[[NyaaClient], Awaitable[list[Torrent]]]) -> None:
    async def main() -> list[Torrent]:
        async with NyaaClient() as client:
            return await operation(client)

    try:
        torrents = asyncio.run(main())
    except NyaaRssException as e:
        logger.error(f"{e}")
        sys.exit(1)

    _print_results(torrents, ctx.obj["json"])


@click.group()
@click.option("--debug", is_flag=True, help="Verbose logging")
@click.option("--log-dir", type=click.Path(file_okay=False), default=None, help="Also log to a file in this directory")
@click.option("--json", "as_json", is_flag=True, help="Print one JSON object per line")
@click.option("--filter", "filter_", type=click.IntRange(0, 2), default=None, help="0 none, 1 no remakes, 2 trusted")
@click.option("--category", type=str, default=None, help="Category code, e.g. 1_2")
@click.option("--sort", type=str, default=None, help="Sort field (id, size, seeders, leechers, downloads)")
@click.option("--direction", type=click.Choice(["asc", "desc"]), default=None)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    log_dir: str | None,
    as_json: bool,
    filter_: int | None,
    category: str | None,
    sort: str | None,
    direction: str | None,
) -> None:
    """Query the nyaa.si RSS feed."""
    setup_logging(debug=debug, log_dir=log_dir)
    ctx.ensure_object(dict)
    ctx.obj["json"] = as_json
    ctx.obj["options"] = SearchOptions(filter=filter_, category=category, sort=sort, direction=direction)


@cli.command()
@click.argument("term")
@click.option("-n", "--count", type=click.IntRange(min=1), default=None, help="Number of results (default: all)")
@click.pass_context
def search(ctx: click.Context, term: str, count: int | None) -> None:
    """Keyword search."""
    options = ctx.obj["options"]
    _run(ctx, lambda client: client.search(term, count, options))


@cli.command()
@click.argument("term")
@click.argument("page", type=click.IntRange(min=1))
@click.pass_context
def page(ctx: click.Context, term: str, page: int) -> None:
    """One page of a keyword search."""
    options = ctx.obj["options"]
    _run(ctx, lambda client: client.search_page(term, page, options))


@cli.command()
@click.argument("user")
@click.argument("term", required=False, default="")
@click.option("-n", "--count", type=click.IntRange(min=1), default=None, help="Number of results (default: all)")
@click.option("--page", "page_", type=click.IntRange(min=1), default=None, help="Fetch only this page")
@click.pass_context
def user(ctx: click.Context, user: str, term: str, count: int | None, page_: int | None) -> None:
    """Uploads of one user."""
    options = ctx.obj["options"]
    if page_ is not None:
        _run(ctx, lambda client: client.search_by_user_and_page(user, term, page_, count, options))
    else:
        _run(ctx, lambda client: client.search_by_user(user, term, count, options))


@cli.command(name="list")
@click.argument("category", required=False, default=None)
@click.option("--page", "page_", type=click.IntRange(min=1), default=1)
@click.pass_context
def list_(ctx: click.Context, category: str | None, page_: int) -> None:
    """Newest torrents of a category."""
    options = ctx.obj["options"]
    _run(ctx, lambda client: client.list(category, page_, options))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
