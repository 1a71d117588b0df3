"""
CLI commands for fetching entities and collections.

Provides ``tubescope video``, ``channel``, ``playlist``, ``search``,
``channel-videos``, ``playlist-videos`` and ``related``. Output is a rich panel or table,
or JSON with ``--json``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional, Sequence

import typer
from pydantic_core import to_jsonable_python
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tubescope.config.settings import settings
from tubescope.exceptions import TubescopeError
from tubescope.models.entities import Channel, Playlist, Video
from tubescope.models.enums import CollectionKind, EntityKind
from tubescope.services.extraction.engine import ExtractionEngine
from tubescope.services.extraction.models import Locale
from tubescope.services.extraction.normalization import format_count_short, is_short_form

console = Console()

# Valid --type values for search
_SEARCH_TYPES: dict[str, CollectionKind] = {
    "videos": CollectionKind.VIDEO_SEARCH,
    "channels": CollectionKind.CHANNEL_SEARCH,
    "playlists": CollectionKind.PLAYLIST_SEARCH,
}

EXIT_CODE_FAILURE = 1
EXIT_CODE_INVALID_OPTION = 2


def _build_engine() -> ExtractionEngine:
    """Build an ExtractionEngine from application settings."""
    return ExtractionEngine(config=settings)


def _locale(hl: Optional[str], gl: Optional[str]) -> Locale:
    return Locale(hl=hl or settings.pinned_hl, gl=gl or settings.pinned_gl)


def _validate_limit(limit: Optional[int]) -> None:
    if limit is not None and limit <= 0:
        console.print("[red]Error: --limit must be a positive integer[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_OPTION)


def _run(coro: Any) -> Any:
    """Run *coro*, turning library errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except TubescopeError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_FAILURE)


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(to_jsonable_python(value), indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _or_dash(value: Any) -> str:
    return str(value) if value not in (None, "") else "-"


def render_video(video: Video) -> Panel:
    lines = [
        f"[bold]{video.title or video.id}[/bold]",
        f"Channel: {_or_dash(video.channel_title)} ({_or_dash(video.channel_id)})",
        f"Views: {_or_dash(video.view_count_text)}",
        f"Published: {_or_dash(video.published_text)} [dim]{video.published_at or ''}[/dim]",
        f"Duration: {_or_dash(video.duration_text)}",
    ]
    if video.like_count is not None:
        lines.append(f"Likes: {format_count_short(video.like_count)}")
    lines.append(f"[dim]{video.watch_url}[/dim]")
    return Panel("\n".join(lines), title="Video", border_style="blue")


def render_channel(channel: Channel) -> Panel:
    lines = [
        f"[bold]{channel.title or channel.id}[/bold] {channel.handle}",
        f"Videos: {_or_dash(channel.video_count)}",
    ]
    if channel.subscriber_count is not None:
        lines.append(f"Subscribers: {format_count_short(channel.subscriber_count)}")
    lines.append(f"Avatar: {_or_dash(channel.avatar_url)}")
    lines.append(f"Banner: {_or_dash(channel.banner_url)}")
    if channel.description:
        lines.append("")
        lines.append(channel.description[:500])
    lines.append(f"[dim]{channel.channel_url}[/dim]")
    return Panel("\n".join(lines), title="Channel", border_style="green")


def render_playlist(playlist: Playlist) -> Panel:
    lines = [
        f"[bold]{playlist.title or playlist.id}[/bold]",
        f"Owner: {_or_dash(playlist.channel_title)}",
        f"Videos: {_or_dash(playlist.video_count if playlist.video_count is not None else playlist.video_count_text)}",
        f"[dim]{playlist.playlist_url}[/dim]",
    ]
    return Panel("\n".join(lines), title="Playlist", border_style="magenta")


def render_items(items: Sequence[Any], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Owner / Info", style="green")
    table.add_column("Details", justify="right")

    for position, item in enumerate(items, start=1):
        if isinstance(item, Video):
            marker = " [yellow]short[/yellow]" if is_short_form(
                item, settings.short_form_max_seconds
            ) else ""
            details = " · ".join(
                part for part in (item.duration_text, item.view_count_text, item.published_text) if part
            )
            table.add_row(str(position), item.id, item.title + marker, item.channel_title, details)
        elif isinstance(item, Channel):
            table.add_row(str(position), item.id, item.title, item.handle, item.description[:60])
        elif isinstance(item, Playlist):
            table.add_row(
                str(position), item.id, item.title, item.channel_title, item.video_count_text
            )
    return table


_RENDERERS = {
    EntityKind.VIDEO: render_video,
    EntityKind.CHANNEL: render_channel,
    EntityKind.PLAYLIST: render_playlist,
}


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _entity_async(kind: EntityKind, identifier: str, locale: Locale, enrich: bool) -> Any:
    engine = _build_engine()
    entity = await engine.require_entity(kind, identifier, locale)
    if enrich:
        entity = (await engine.enrich([entity]))[0]
    return entity


def _show_entity(
    kind: EntityKind,
    identifier: str,
    as_json: bool,
    hl: Optional[str],
    gl: Optional[str],
    enrich: bool,
) -> None:
    entity = _run(_entity_async(kind, identifier, _locale(hl, gl), enrich))
    if as_json:
        _echo_json(entity)
    else:
        console.print(_RENDERERS[kind](entity))


async def _collection_async(
    kind: CollectionKind, identifier: str, limit: Optional[int], locale: Locale
) -> list[Any]:
    engine = _build_engine()
    return await engine.fetch_collection(kind, identifier, limit=limit, locale=locale)


def _show_collection(
    kind: CollectionKind,
    identifier: str,
    limit: Optional[int],
    as_json: bool,
    hl: Optional[str],
    gl: Optional[str],
    title: str,
) -> None:
    _validate_limit(limit)
    items = _run(_collection_async(kind, identifier, limit, _locale(hl, gl)))
    if as_json:
        _echo_json(items)
        return
    if not items:
        console.print("[yellow]No results found[/yellow]")
        return
    console.print(render_items(items, title))


JSON_OPTION = typer.Option(False, "--json", help="Print JSON instead of a table")
HL_OPTION = typer.Option(None, "--hl", help="Interface language (default: pinned)")
GL_OPTION = typer.Option(None, "--gl", help="Region (default: pinned)")
ENRICH_OPTION = typer.Option(
    False, "--enrich", help="Fill counts from the official API when a key is set"
)
LIMIT_OPTION = typer.Option(None, "--limit", "-l", help="Maximum number of items")


def video(
    video_id: str = typer.Argument(..., help="Video id"),
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
    enrich: bool = ENRICH_OPTION,
) -> None:
    """Show one video."""
    _show_entity(EntityKind.VIDEO, video_id, as_json, hl, gl, enrich)


def channel(
    channel_id: str = typer.Argument(..., help="Channel id (UC...) or @handle"),
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
    enrich: bool = ENRICH_OPTION,
) -> None:
    """Show one channel."""
    _show_entity(EntityKind.CHANNEL, channel_id, as_json, hl, gl, enrich)


def playlist(
    playlist_id: str = typer.Argument(..., help="Playlist id"),
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
    enrich: bool = ENRICH_OPTION,
) -> None:
    """Show one playlist."""
    _show_entity(EntityKind.PLAYLIST, playlist_id, as_json, hl, gl, enrich)


def search(
    query: str = typer.Argument(..., help="Search query"),
    type_: str = typer.Option(
        "videos", "--type", "-t", help='Result type: "videos", "channels" or "playlists"'
    ),
    limit: Optional[int] = LIMIT_OPTION,
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
) -> None:
    """
    Search videos, channels or playlists.

    Examples:
        tubescope search "lofi beats"
        tubescope search python --type channels --limit 5
    """
    if type_ not in _SEARCH_TYPES:
        console.print(
            f'[red]Error: Invalid --type "{type_}". '
            f"Must be one of: {', '.join(sorted(_SEARCH_TYPES))}[/red]"
        )
        raise typer.Exit(code=EXIT_CODE_INVALID_OPTION)
    _show_collection(
        _SEARCH_TYPES[type_], query, limit, as_json, hl, gl, f'Search "{query}" ({type_})'
    )


def channel_videos(
    channel_id: str = typer.Argument(..., help="Channel id (UC...) or @handle"),
    limit: Optional[int] = LIMIT_OPTION,
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
) -> None:
    """List a channel's latest videos."""
    _show_collection(
        CollectionKind.CHANNEL_VIDEOS, channel_id, limit, as_json, hl, gl, f"Videos of {channel_id}"
    )


def playlist_videos(
    playlist_id: str = typer.Argument(..., help="Playlist id"),
    limit: Optional[int] = LIMIT_OPTION,
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
) -> None:
    """List the videos of a playlist."""
    _show_collection(
        CollectionKind.PLAYLIST_VIDEOS,
        playlist_id,
        limit,
        as_json,
        hl,
        gl,
        f"Playlist {playlist_id}",
    )


def related(
    video_id: str = typer.Argument(..., help="Video id"),
    limit: Optional[int] = LIMIT_OPTION,
    as_json: bool = JSON_OPTION,
    hl: Optional[str] = HL_OPTION,
    gl: Optional[str] = GL_OPTION,
) -> None:
    """List the videos suggested next to a video."""
    _show_collection(
        CollectionKind.RELATED_VIDEOS, video_id, limit, as_json, hl, gl, f"Related to {video_id}"
    )
