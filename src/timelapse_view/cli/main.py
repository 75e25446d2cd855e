"""Command-line interface for timelapse-view."""

import logging
import threading
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table
from rich.text import Text

from timelapse_view import __version__
from timelapse_view.core.config import SHOW_DIFFERENCES_ONLY, Configuration
from timelapse_view.core.errors import UnknownBackend
from timelapse_view.core.navigator import DiffNavigator, next_position, previous_position
from timelapse_view.core.search import Searcher
from timelapse_view.core.session import LoadResult, Session
from timelapse_view.models.revision import Revision
from timelapse_view.scm import create_loader, default_registry

console = Console()
DEFAULT_LIMIT = 100


def revision_label(revision: Revision) -> str:
    """Short display name for a revision."""
    if isinstance(revision.number, int):
        return f"r{revision.number}"
    return str(revision.number)[:8]


def load_session(ctx: click.Context, target: str) -> Session:
    """Load the history of ``target`` or exit with an error message."""
    options = ctx.obj
    try:
        loader = create_loader(options["scm"])
    except UnknownBackend as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e

    session = Session()
    results: List[LoadResult] = []
    finished = threading.Event()

    def on_done(result: LoadResult) -> None:
        results.append(result)
        finished.set()

    session.load(
        loader,
        target,
        options["username"],
        options["password"],
        options["limit"],
        on_done,
    )

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Loading {target}", total=None)
        try:
            while not finished.wait(0.1):
                progress.update(
                    task,
                    completed=loader.get_loaded_count(),
                    total=loader.get_total_count() or None,
                )
        except KeyboardInterrupt:
            console.print("[yellow]Cancelling...[/yellow]")
            loader.cancel()
            finished.wait()

    result = results[0]
    if result.error is not None:
        console.print(f"[red]Error: {result.error}[/red]")
        raise click.Abort()
    return session


def pick_revision(revisions, index: int) -> Revision:
    try:
        return revisions[index]
    except IndexError as e:
        console.print(
            f"[red]Error: revision index {index} out of range "
            f"(0..{len(revisions) - 1})[/red]"
        )
        raise click.Abort() from e


def configured_limit(config: Configuration) -> int:
    limit = config.get_int("limit", DEFAULT_LIMIT)
    return limit if limit >= 1 else DEFAULT_LIMIT


@click.group()
@click.version_option(version=__version__)
@click.option("--scm", help="Repository type (default: git)")
@click.option("--username", default="", help="Repository username")
@click.option("--password", default="", help="Repository password")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    help="Maximum number of revisions to load (default: 100)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Settings file (default: ~/.timelapse-view.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, scm, username, password, limit, config_path, verbose):
    """Browse how a single file changed across its revisions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    config = Configuration(Path(config_path) if config_path else None)
    ctx.obj = {
        "config": config,
        "scm": scm or config.get("scm", "git"),
        "username": username,
        "password": password,
        "limit": limit if limit is not None else configured_limit(config),
    }


@main.command()
def backends():
    """List the available repository types."""
    for key in default_registry.keys():
        console.print(key)


@main.command()
@click.argument("target")
@click.pass_context
def log(ctx, target: str):
    """Show the revisions of TARGET, oldest first."""
    session = load_session(ctx, target)

    table = Table(title=f"History of {target}")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Revision", style="green", no_wrap=True)
    table.add_column("Date", style="magenta")
    table.add_column("Author", style="blue")
    table.add_column("Message")

    for index, revision in enumerate(session.revisions):
        table.add_row(
            str(index),
            revision_label(revision),
            revision.date,
            Text(revision.author),
            Text(revision.summary),
        )

    console.print(table)


@main.command()
@click.argument("target")
@click.option("--from", "-f", "from_index", type=int, help="Index of the older revision")
@click.option("--to", "-t", "to_index", type=int, help="Index of the newer revision")
@click.option(
    "--differences-only/--all",
    "differences_only",
    default=None,
    help="Hide unchanged lines (remembered between runs)",
)
@click.option("--line", "-l", type=int, help="Report the changes around this row")
@click.option("--search", "-s", help="Find text in either revision")
@click.pass_context
def diff(
    ctx,
    target: str,
    from_index: Optional[int],
    to_index: Optional[int],
    differences_only: Optional[bool],
    line: Optional[int],
    search: Optional[str],
):
    """Compare two revisions of TARGET (default: the two newest)."""
    config: Configuration = ctx.obj["config"]
    if differences_only is None:
        differences_only = config.get_bool(SHOW_DIFFERENCES_ONLY)
    else:
        config.set_bool(SHOW_DIFFERENCES_ONLY, differences_only)

    session = load_session(ctx, target)
    revisions = session.revisions
    older, newer = session.default_pair()
    if from_index is not None:
        older = pick_revision(revisions, from_index)
    if to_index is not None:
        newer = pick_revision(revisions, to_index)

    result = session.diff(older, newer, differences_only)
    navigator = DiffNavigator()
    navigator.set_diff(result, line or 0)

    table = Table(title=f"{target}: {revision_label(older)} → {revision_label(newer)}")
    table.add_column("#", style="cyan", justify="right")
    table.add_column(revision_label(older), overflow="fold")
    table.add_column(revision_label(newer), overflow="fold")
    for row, (left, right) in enumerate(zip(result.left_lines, result.right_lines)):
        if result.is_changed(row):
            table.add_row(str(row), Text(left, style="red"), Text(right, style="green"))
        else:
            table.add_row(str(row), Text(left), Text(right))

    console.print(table)
    console.print(f"[bold]{navigator.difference_label}[/bold]")

    if line is not None:
        positions = result.difference_positions
        previous = previous_position(line, positions)
        following = next_position(line, positions)
        console.print(
            f"Previous change: {'none' if previous is None else previous}, "
            f"next change: {'none' if following is None else following}"
        )

    if search:
        searcher = Searcher(result.left_text, result.right_text)
        if searcher.search(search):
            console.print(f"Found {search!r} on the {searcher.side} side, line {searcher.line}")
        else:
            console.print(f"[yellow]{search!r} not found[/yellow]")


if __name__ == "__main__":
    main()
