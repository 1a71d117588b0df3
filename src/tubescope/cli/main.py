"""
Main CLI entry point for tubescope.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.panel import Panel

from tubescope import __version__
from tubescope.cli.commands import cache, extract
from tubescope.config.settings import settings

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = typer.Typer(
    name="tubescope",
    help="Local extraction of YouTube videos, channels and playlists",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(cache.app, name="cache", help="Cache management commands")
app.command(name="video")(extract.video)
app.command(name="channel")(extract.channel)
app.command(name="playlist")(extract.playlist)
app.command(name="search")(extract.search)
app.command(name="channel-videos")(extract.channel_videos)
app.command(name="playlist-videos")(extract.playlist_videos)
app.command(name="related")(extract.related)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure the ``tubescope`` logger.

    Parameters
    ----------
    verbose : bool, optional
        If True, log at DEBUG level to stderr. Otherwise only warnings and
        above at ``settings.log_level`` or stricter are shown.
    """
    root_logger = logging.getLogger("tubescope")
    if verbose:
        level = logging.DEBUG
    else:
        level = max(logging.WARNING, logging.getLevelName(settings.log_level))
    root_logger.setLevel(level)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(console_handler)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]tubescope[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    tubescope - Local extraction of YouTube content.

    Reads the data embedded in ordinary watch, channel, playlist and search
    pages and prints normalized, cached records.
    """
    if version:
        console.print(f"tubescope v{__version__}")
        raise typer.Exit(code=0)

    setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'tubescope --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
