"""
CLI commands for managing the local extraction cache.

Provides ``tubescope cache clear`` and ``tubescope cache purge``.
"""

from __future__ import annotations

import typer
from rich.console import Console

from tubescope.config.settings import settings
from tubescope.services.extraction.cache import TTLCache

console = Console()

app = typer.Typer(
    name="cache",
    help="Manage the local extraction cache.",
    no_args_is_help=True,
)


def _build_cache() -> TTLCache:
    """Build a TTLCache over the configured cache directory."""
    return TTLCache(directory=settings.cache_dir, max_entries=settings.cache_max_entries)


@app.command(name="clear")
def clear() -> None:
    """Remove every cached entry."""
    removed = _build_cache().clear()
    console.print(f"[green]Removed {removed} cached entries[/green] from {settings.cache_dir}")


@app.command(name="purge")
def purge() -> None:
    """Remove expired (and unreadable) cached entries only."""
    removed = _build_cache().purge_expired()
    console.print(f"[green]Purged {removed} expired entries[/green] from {settings.cache_dir}")
