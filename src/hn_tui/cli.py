"""CLI entry point for hn-tui."""

import logging
import os
from logging.handlers import RotatingFileHandler

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .bookmarks import BookmarkError, Bookmarks
from .client import HackerNewsClient
from .config import CONFIG_FILE, LOG_FILE, Config, bookmarks_path, load_config, save_config
from .executor import EffectExecutor
from .models import DEFAULT_CATEGORIES, Tab
from .state import State
from .tui import App

console = Console()


def setup_logging(debug_logging: bool) -> None:
    if debug_logging:
        # Debug logging enabled - use rotating file handler
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            handlers=[handler],
        )
        logging.info("hn-tui starting (debug logging enabled)")
    else:
        # Default: only warn+ so the screen stays clean
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def load_bookmarks(config: Config) -> Bookmarks:
    path = bookmarks_path(config)
    try:
        return Bookmarks.load(path)
    except BookmarkError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


@click.group(invoke_without_command=True)
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Entries fetched per page")
@click.option("--debug-logging/--no-debug-logging", default=None, help="Enable debug logging to file")
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, batch_size: int | None, debug_logging: bool | None, version: bool) -> None:
    """hn - browse Hacker News in the terminal."""
    if version:
        console.print(f"hn-tui v{__version__}")
        return

    if ctx.invoked_subcommand is None:
        config = load_config()
        # Apply CLI overrides (not saved to config file)
        if batch_size is not None:
            config.batch_size = batch_size
        if debug_logging is not None:
            config.debug_logging = debug_logging
        run_tui(config)


def run_tui(config: Config) -> None:
    """Build state, client and executor, then hand over to the loop."""
    setup_logging(config.debug_logging)
    bookmarks = load_bookmarks(config)

    tabs = [Tab(category=category, label=category.label) for category in DEFAULT_CATEGORIES]
    state = State(
        tabs,
        bookmarks,
        batch_size=config.batch_size,
        transient_seconds=config.transient_seconds,
    )
    client = HackerNewsClient(config.api)
    executor = EffectExecutor(
        client,
        batch_size=config.batch_size,
        max_workers=config.api.max_workers,
        on_open_error=state.set_transient_message,
    )

    try:
        App(state, executor, poll_interval=config.poll_interval, console=console).run()
    except KeyboardInterrupt:
        pass
    finally:
        executor.shutdown()
        client.close()


@main.command()
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Entries fetched per page")
@click.option("--bookmarks-file", default=None, help="Where bookmarks are stored")
@click.option("--debug-logging/--no-debug-logging", default=None, help="Enable debug logging to file")
@click.option("--show", is_flag=True, help="Show current configuration")
def config(batch_size: int | None, bookmarks_file: str | None, debug_logging: bool | None, show: bool) -> None:
    """Configure hn-tui settings.

    Examples:
      hn config --batch-size 50      # Fetch 50 entries per page
      hn config --debug-logging      # Enable debug logging
      hn config --show               # Show current config
    """
    current_config = load_config()

    if show:
        console.print("\n[bold]Current Configuration:[/bold]")
        console.print(f"  Batch Size:     [cyan]{current_config.batch_size}[/cyan]")
        console.print(f"  Poll Interval:  [cyan]{current_config.poll_interval}s[/cyan]")
        console.print(f"  Debug Logging:  [cyan]{current_config.debug_logging}[/cyan]")
        console.print(f"  Bookmarks:      [cyan]{bookmarks_path(current_config)}[/cyan]")

        console.print("\n[bold]API:[/bold]")
        console.print(f"  Items:    [cyan]{current_config.api.items_url}[/cyan]")
        console.print(f"  Search:   [cyan]{current_config.api.search_url}[/cyan]")
        console.print(f"  Timeout:  [cyan]{current_config.api.request_timeout}s[/cyan]")

        console.print(f"\nConfig file: [dim]{CONFIG_FILE}[/dim]")

        for name in ("HN_BATCH_SIZE", "HN_POLL_INTERVAL", "HN_REQUEST_TIMEOUT",
                     "HN_BOOKMARKS_FILE", "HN_DEBUG_LOGGING"):
            if os.getenv(name):
                console.print(f"[yellow]Note:[/yellow] {name} is set: {os.getenv(name)}")
        return

    if batch_size is None and bookmarks_file is None and debug_logging is None:
        console.print("Nothing to change. Use [cyan]hn config --show[/cyan] to see settings.")
        return

    if batch_size is not None:
        current_config.batch_size = batch_size
    if bookmarks_file is not None:
        current_config.bookmarks_file = bookmarks_file
    if debug_logging is not None:
        current_config.debug_logging = debug_logging

    save_config(current_config)
    console.print("[green]Configuration saved![/green]")
    console.print(f"  Batch Size:     [cyan]{current_config.batch_size}[/cyan]")
    console.print(f"  Debug Logging:  [cyan]{current_config.debug_logging}[/cyan]")
    if current_config.bookmarks_file:
        console.print(f"  Bookmarks:      [cyan]{current_config.bookmarks_file}[/cyan]")


@main.command()
@click.option("--remove", "remove_id", default=None, help="Remove the bookmark with this id")
def bookmarks(remove_id: str | None) -> None:
    """List saved bookmarks."""
    saved = load_bookmarks(load_config())

    if remove_id is not None:
        try:
            removed = saved.remove(remove_id)
        except BookmarkError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
        if removed:
            console.print(f"[green]Removed bookmark {remove_id}[/green]")
        else:
            console.print(f"[yellow]No bookmark with id {remove_id}[/yellow]")
        return

    if saved.is_empty():
        console.print("[dim]No bookmarks yet. Press b in the list to add one.[/dim]")
        return

    table = Table(title=f"Bookmarks ({len(saved)})")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("URL", style="cyan")
    for entry in saved.entries():
        table.add_row(entry.id, entry.title, entry.resolved_url())
    console.print(table)
    console.print(f"\n[dim]{saved.path}[/dim]")
