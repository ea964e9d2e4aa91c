"""CLI interface for postshelf."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from postshelf.config import PostshelfConfig, load_config, merge_cli_overrides
from postshelf.content.loader import scan_directory
from postshelf.content.models import ContentEntry, LoadResult
from postshelf.errors import ContentDirectoryNotFound

app = typer.Typer(
    name="postshelf",
    help="Validate and inspect a directory of blog posts.",
    no_args_is_help=True,
)

console = Console()

DirectoryArg = Annotated[
    Optional[Path],
    typer.Argument(
        help="Content directory. Defaults to content.directory from the config.",
        file_okay=False,
        dir_okay=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from postshelf import __version__

        console.print(f"postshelf {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .postshelf.toml file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log per-file progress."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """postshelf - content collection checker."""
    config = load_config(config_path)
    if verbose:
        config = merge_cli_overrides(config, log_level="DEBUG")
    logging.basicConfig(
        level=config.logging.level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


def _scan(
    ctx: typer.Context,
    directory: Path | None,
    **overrides: object,
) -> tuple[PostshelfConfig, LoadResult]:
    config: PostshelfConfig = ctx.obj or load_config()
    config = merge_cli_overrides(config, content_dir=directory, **overrides)
    try:
        result = scan_directory(
            config.content_dir,
            extensions=config.content.extensions,
            recursive=config.content.recursive,
            max_workers=config.content.max_workers,
        )
    except ContentDirectoryNotFound as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    return config, result


def _report_failures(result: LoadResult) -> None:
    if result.failures:
        console.print(
            f"[yellow]{len(result.failures)} file(s) failed to load; "
            "run 'postshelf check' for details.[/yellow]"
        )


def _entries_table(entries: list[ContentEntry]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("id")
    table.add_column("date")
    table.add_column("title")
    table.add_column("tags")
    for entry in entries:
        title = escape(entry.title)
        if entry.draft:
            title += " [dim](draft)[/dim]"
        table.add_row(entry.id, entry.pub_date.isoformat(), title, ", ".join(entry.tags))
    return table


@app.command(name="check")
def check_cmd(
    ctx: typer.Context,
    directory: DirectoryArg = None,
    strict: Annotated[
        Optional[bool],
        typer.Option(
            "--strict/--permissive",
            help="Fail on any invalid post (default from config: strict).",
        ),
    ] = None,
    recursive: Annotated[
        Optional[bool],
        typer.Option("--recursive/--no-recursive", help="Descend into subdirectories."),
    ] = None,
) -> None:
    """Load every post and report the ones that fail validation."""
    config, result = _scan(ctx, directory, strict=strict, recursive=recursive)

    console.print(
        f"[green]Loaded {len(result.collection)} post(s)[/green] from {config.content_dir}"
    )
    if result.ok:
        raise typer.Exit(0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("file")
    table.add_column("error")
    table.add_column("reason")
    for failure in result.failures:
        table.add_row(escape(failure.path), failure.error.code, escape(str(failure.error)))
    console.print(f"[red]{len(result.failures)} file(s) failed:[/red]")
    console.print(table)

    if result.duplicates:
        console.print(
            f"[bold red]{len(result.duplicates)} file(s) share an id with another post.[/bold red]"
        )

    if config.content.strict:
        raise typer.Exit(1)
    console.print("[yellow]Permissive mode: failed files are excluded.[/yellow]")


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    directory: DirectoryArg = None,
    tag: Annotated[
        Optional[str],
        typer.Option("--tag", "-t", help="Only posts with this tag."),
    ] = None,
    drafts: Annotated[
        bool,
        typer.Option("--drafts/--no-drafts", help="Include draft posts."),
    ] = False,
) -> None:
    """List posts newest first."""
    _config, result = _scan(ctx, directory)
    collection = result.collection
    _report_failures(result)

    if tag:
        entries = collection.list_by_tag(tag, include_drafts=drafts)
    else:
        entries = collection.list_published(include_drafts=drafts)

    if not entries:
        console.print("[yellow]No posts found.[/yellow]")
        raise typer.Exit(0)
    console.print(_entries_table(entries))


@app.command(name="show")
def show_cmd(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Post id (file name without extension).")],
    directory: DirectoryArg = None,
) -> None:
    """Show the metadata of one post."""
    _config, result = _scan(ctx, directory)
    entry = result.collection.get(entry_id)
    if entry is None:
        for failure in result.failures:
            if failure.id == entry_id:
                console.print(
                    f"[red]Error:[/red] {escape(failure.path)} failed to load: "
                    f"{failure.error.code}: {escape(str(failure.error))}"
                )
                raise typer.Exit(1)
        _report_failures(result)
        console.print(f"[red]Error:[/red] No post with id {entry_id!r}")
        raise typer.Exit(1)

    meta = entry.metadata
    console.print(f"[bold]{escape(meta.title)}[/bold]")
    console.print(f"  id: {entry.id}")
    console.print(f"  file: {entry.source_path}")
    console.print(f"  description: {escape(meta.description)}")
    console.print(f"  pubDate: {meta.pub_date.isoformat()}")
    if meta.updated_date:
        console.print(f"  updatedDate: {meta.updated_date.isoformat()}")
    console.print(f"  tags: {', '.join(meta.tags) or '-'}")
    console.print(f"  draft: {str(meta.draft).lower()}")
    console.print(f"  body: {len(entry.body.split())} words")


@app.command(name="tags")
def tags_cmd(
    ctx: typer.Context,
    directory: DirectoryArg = None,
) -> None:
    """Count published posts per tag."""
    _config, result = _scan(ctx, directory)
    counts = result.collection.tags()
    _report_failures(result)
    if not counts:
        console.print("[yellow]No tags found.[/yellow]")
        raise typer.Exit(0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("tag")
    table.add_column("posts", justify="right")
    for tag, count in counts.items():
        table.add_row(tag, str(count))
    console.print(table)
