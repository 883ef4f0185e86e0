"""CLI for claude-memo."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from claude_memo import __version__
from claude_memo.errors import DatabaseError, MemoError, NotFoundError

app = typer.Typer(
    name="claude-memo",
    help="Search and bookmark Claude Code session history.",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Show or reset user configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")
console = Console()
err_console = Console(stderr=True)

# Exit status when the history file is missing
EXIT_NOT_FOUND = 3


def version_callback(value: bool) -> None:
    if value:
        console.print(f"claude-memo {__version__}")
        raise typer.Exit()


def fail(error: MemoError) -> typer.Exit:
    err_console.print(Text(f"Error: {error}", style="red"), soft_wrap=True)
    return typer.Exit(EXIT_NOT_FOUND if isinstance(error, NotFoundError) else 1)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Search and bookmark Claude Code session history."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def parse(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Number of records (newest first)")
    ] = None,
) -> None:
    """Parse and print the history file, newest first."""
    from claude_memo.config import OutputFormat, get_history_path, load_config
    from claude_memo.parser import parse_file
    from claude_memo.searcher import format_json_output, format_record

    try:
        config = load_config()
        records = list(reversed(parse_file(get_history_path())))
    except MemoError as e:
        raise fail(e) from e

    if limit is not None:
        records = records[:limit]

    if json_output or config.output_format is OutputFormat.JSON:
        format_json_output(records)
    elif not records:
        console.print("No records found.")
    else:
        for record in records:
            console.print(format_record(record, config.date_format), markup=False, soft_wrap=True)


@app.command()
def search(
    keyword: Annotated[str, typer.Argument(help="Search keyword")],
    project: Annotated[
        str | None, typer.Option("--project", "-p", help="Filter by project (path substring)")
    ] = None,
    simple: Annotated[
        bool, typer.Option("--simple", help="Plain substring match instead of full-text search")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Number of results")] = None,
) -> None:
    """Full-text search over session history."""
    from claude_memo.config import OutputFormat, get_history_path, get_index_path, load_config
    from claude_memo.searcher import perform_search

    try:
        config = load_config()
        perform_search(
            query=keyword,
            history_path=get_history_path(),
            db_path=get_index_path(),
            project=project,
            limit=limit if limit is not None else config.default_limit,
            simple=simple,
            json_output=json_output or config.output_format is OutputFormat.JSON,
            date_format=config.date_format,
        )
    except MemoError as e:
        exit_error = fail(e)
        if isinstance(e, DatabaseError) and not simple:
            err_console.print("Hint: use --simple for a plain substring search", style="yellow")
        raise exit_error from e


@app.command()
def mark(session_id: Annotated[str, typer.Argument(help="Session ID")]) -> None:
    """Add a session to favorites."""
    from claude_memo.config import get_favorites_path
    from claude_memo.favorites import FavoritesStore

    try:
        FavoritesStore.open(get_favorites_path()).add(session_id)
    except MemoError as e:
        raise fail(e) from e
    console.print(f"✅ Added {session_id} to marks", markup=False, soft_wrap=True)


@app.command()
def unmark(session_id: Annotated[str, typer.Argument(help="Session ID")]) -> None:
    """Remove a session from favorites."""
    from claude_memo.config import get_favorites_path
    from claude_memo.favorites import FavoritesStore

    try:
        FavoritesStore.open(get_favorites_path()).remove(session_id)
    except MemoError as e:
        raise fail(e) from e
    console.print(f"✅ Removed {session_id} from marks", markup=False, soft_wrap=True)


@app.command()
def marks(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List favorites with their latest prompt."""
    from claude_memo.config import OutputFormat, get_favorites_path, get_history_path, load_config
    from claude_memo.favorites import FavoritesStore, print_favorites

    try:
        config = load_config()
        store = FavoritesStore.open(get_favorites_path())
        favorites = store.list_with_details(get_history_path())
    except MemoError as e:
        raise fail(e) from e

    if json_output or config.output_format is OutputFormat.JSON:
        console.print_json(data=[f.to_dict() for f in favorites])
    else:
        print_favorites(favorites, config.date_format)


@app.command()
def status() -> None:
    """Show index and favorites statistics."""
    from claude_memo.config import get_favorites_path, get_history_path, get_index_path
    from claude_memo.favorites import FavoritesStore
    from claude_memo.searcher import Searcher

    try:
        index_path = get_index_path()
        record_count = Searcher(index_path).count()
        favorites_count = len(FavoritesStore.open(get_favorites_path()))
        history_path = get_history_path()
    except MemoError as e:
        raise fail(e) from e

    console.print(f"History file: {history_path}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"Index path: {index_path}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"Records indexed: {record_count}")
    console.print(f"Marks: {favorites_count}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    from claude_memo.config import get_config_path, load_config

    try:
        config_path = get_config_path()
        config = load_config(config_path)
    except MemoError as e:
        raise fail(e) from e

    console.print(f"Config path: {config_path}", markup=False, highlight=False, soft_wrap=True)
    console.print(config.to_toml(), markup=False, highlight=False, soft_wrap=True, end="")


@config_app.command("reset")
def config_reset() -> None:
    """Overwrite the config file with defaults."""
    from claude_memo.config import get_config_path, reset_config

    try:
        config_path = get_config_path()
        reset_config(config_path)
    except MemoError as e:
        raise fail(e) from e

    console.print(f"Config reset: {config_path}", markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
