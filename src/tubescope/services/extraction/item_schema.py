"""
Collection item strategies.

Search result pages, a channel's videos tab and playlist pages list their
items as renderer objects wrapped in layout containers (``richItemRenderer``,
``itemSectionRenderer``, tabs, shelves). The wrappers change often; the item
renderers rarely do. Items are therefore found by a recursive key search for
the known item renderers, in document order, and each renderer is mapped to
the same fields the entity builders already understand.

Items without an id, items failing id validation and duplicates are
dropped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ValidationError

from tubescope.models.enums import EntityKind, ImageRole
from tubescope.services.extraction.channel_schema import build_channel
from tubescope.services.extraction.models import ExtractionContext
from tubescope.services.extraction.playlist_schema import build_playlist
from tubescope.services.extraction.scorer import collect_image_candidates, pick_best
from tubescope.services.extraction.tree import JsonTree
from tubescope.services.extraction.video_schema import build_video
from tubescope.services.extraction.walker import Fields, is_empty, merge_fields

logger = logging.getLogger(__name__)

ItemParser = Callable[[JsonTree], Fields]

_PLAYLIST_LOCKUP_TYPES = ("LOCKUP_CONTENT_TYPE_PLAYLIST", "LOCKUP_CONTENT_TYPE_PODCAST")


def _owner(node: JsonTree, *paths: str) -> Fields:
    for path in paths:
        run = node.first_run(path)
        title = run.get_str("text") or node.text(path)
        if title:
            return {
                "channel_title": title,
                "channel_id": run.get_str("navigationEndpoint.browseEndpoint.browseId"),
            }
    return {}


# ---------------------------------------------------------------------------
# Video renderers
# ---------------------------------------------------------------------------


def video_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("videoId"),
        "title": node.text("title"),
        "description": node.text("descriptionSnippet")
        or node.text("detailedMetadataSnippets.0.snippetText"),
        "channel_thumbnail_url": node.thumbnail(
            "channelThumbnailSupportedRenderers.channelThumbnailWithLinkRenderer.thumbnail"
        )
        or node.thumbnail("channelThumbnail"),
        "thumbnail_url": node.thumbnail("thumbnail"),
        "duration_text": node.text("lengthText"),
        "raw_view_count_text": node.text("viewCountText") or node.text("shortViewCountText"),
        "published_text": node.text("publishedTimeText"),
    }
    fields.update(_owner(node, "ownerText", "longBylineText", "shortBylineText"))
    return fields


def grid_video_renderer(node: JsonTree) -> Fields:
    fields = video_renderer(node)
    fields.update(_owner(node, "shortBylineText"))
    return fields


def compact_video_renderer(node: JsonTree) -> Fields:
    fields = video_renderer(node)
    fields.update(_owner(node, "longBylineText", "shortBylineText"))
    return fields


def playlist_video_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("videoId"),
        "title": node.text("title"),
        "thumbnail_url": node.thumbnail("thumbnail"),
        "duration_text": node.text("lengthText"),
    }
    seconds = node.get_int("lengthSeconds")
    if seconds is not None:
        fields["length_seconds"] = seconds
    # videoInfo runs: ["1.2M views", " • ", "3 years ago"]
    info = [run.get_str("text").strip() for run in node.nodes("videoInfo.runs")]
    info = [text for text in info if text and text != "•"]
    if info:
        fields["raw_view_count_text"] = info[0]
    if len(info) > 1:
        fields["published_text"] = info[1]
    fields.update(_owner(node, "shortBylineText"))
    return fields


def playlist_panel_video_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("videoId"),
        "title": node.text("title"),
        "thumbnail_url": node.thumbnail("thumbnail"),
        "duration_text": node.text("lengthText"),
    }
    fields.update(_owner(node, "longBylineText", "shortBylineText"))
    return fields


# ---------------------------------------------------------------------------
# Channel renderer
# ---------------------------------------------------------------------------


def channel_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("channelId")
        or node.get_str("navigationEndpoint.browseEndpoint.browseId"),
        "title": node.text("title"),
        "description": node.text("descriptionSnippet"),
        "avatar_url": node.thumbnail("thumbnail"),
    }
    # Newer result layouts show the handle where the subscriber count used to be.
    for path in ("subscriberCountText", "videoCountText"):
        label = node.text(path).strip()
        if label.startswith("@"):
            fields["handle"] = label
            break
    if not fields["avatar_url"]:
        candidates = collect_image_candidates(json.dumps(node.value))
        fields["avatar_url"] = pick_best(candidates, ImageRole.AVATAR) or (
            candidates[0] if candidates else ""
        )
    return fields


# ---------------------------------------------------------------------------
# Playlist renderers
# ---------------------------------------------------------------------------


def playlist_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("playlistId"),
        "title": node.text("title"),
        "thumbnail_url": node.thumbnail("thumbnails.0") or node.thumbnail("thumbnail"),
        "video_count_text": node.text("videoCountText") or node.get_str("videoCount"),
    }
    fields.update(_owner(node, "shortBylineText", "longBylineText"))
    return fields


def grid_playlist_renderer(node: JsonTree) -> Fields:
    fields: Fields = {
        "id": node.get_str("playlistId"),
        "title": node.text("title"),
        "thumbnail_url": node.thumbnail("thumbnail"),
        "video_count_text": node.text("videoCountText") or node.text("videoCountShortText"),
    }
    fields.update(_owner(node, "shortBylineText"))
    return fields


def compact_playlist_renderer(node: JsonTree) -> Fields:
    fields = grid_playlist_renderer(node)
    fields.update(_owner(node, "longBylineText", "shortBylineText"))
    return fields


def lockup_view_model(node: JsonTree) -> Fields:
    content_type = node.get_str("contentType")
    if content_type and content_type not in _PLAYLIST_LOCKUP_TYPES:
        return {}
    metadata = node.node("metadata.lockupMetadataViewModel")
    fields: Fields = {
        "id": node.get_str("contentId"),
        "title": metadata.text("title"),
        "thumbnail_url": node.find_first("thumbnailViewModel").thumbnail("image"),
    }
    for badge in node.iter_key("thumbnailBadgeViewModel"):
        label = badge.get_str("text")
        if label:
            fields["video_count_text"] = label
            break
    rows = metadata.nodes("metadata.contentMetadataViewModel.metadataRows")
    if rows:
        part = rows[0].node("metadataParts.0.text")
        fields["channel_title"] = part.text()
        fields["channel_id"] = part.get_str(
            "commandRuns.0.onTap.innertubeCommand.browseEndpoint.browseId"
        )
    return fields


# ---------------------------------------------------------------------------
# Collection extraction
# ---------------------------------------------------------------------------

ITEM_RENDERERS: dict[EntityKind, dict[str, ItemParser]] = {
    EntityKind.VIDEO: {
        "videoRenderer": video_renderer,
        "gridVideoRenderer": grid_video_renderer,
        "compactVideoRenderer": compact_video_renderer,
        "playlistVideoRenderer": playlist_video_renderer,
        "playlistPanelVideoRenderer": playlist_panel_video_renderer,
    },
    EntityKind.CHANNEL: {
        "channelRenderer": channel_renderer,
    },
    EntityKind.PLAYLIST: {
        "playlistRenderer": playlist_renderer,
        "gridPlaylistRenderer": grid_playlist_renderer,
        "compactPlaylistRenderer": compact_playlist_renderer,
        "lockupViewModel": lockup_view_model,
    },
}

_BUILDERS: dict[EntityKind, Callable[[Fields, ExtractionContext], BaseModel]] = {
    EntityKind.VIDEO: build_video,
    EntityKind.CHANNEL: build_channel,
    EntityKind.PLAYLIST: build_playlist,
}


def extract_items(
    tree: Any,
    kind: EntityKind,
    limit: int | None = None,
    context: ExtractionContext | None = None,
    defaults: Fields | None = None,
    renderers: Sequence[str] | None = None,
) -> list[Any]:
    """
    Extract the list items of one entity kind from a page tree.

    Parameters
    ----------
    tree : Any
        Parsed tree (wrapped or not).
    kind : EntityKind
        Kind of the items to collect.
    limit : int | None, optional
        Maximum number of items to return.
    context : ExtractionContext | None, optional
        Normalization inputs.
    defaults : Fields | None, optional
        Fields applied to every item that lacks them, e.g. the owning
        channel of a channel's videos tab.
    renderers : Sequence[str] | None, optional
        Restrict the search to these renderer keys.

    Returns
    -------
    list[Any]
        Entities in page order, without duplicates.
    """
    root = tree if isinstance(tree, JsonTree) else JsonTree(tree)
    parsers = ITEM_RENDERERS[kind]
    if renderers is not None:
        parsers = {key: parser for key, parser in parsers.items() if key in renderers}
    build = _BUILDERS[kind]
    context = context or ExtractionContext()

    items: list[Any] = []
    seen: set[str] = set()
    skipped = 0
    for key, node in root.iter_keys(parsers):
        if limit is not None and len(items) >= limit:
            break
        fields = parsers[key](node)
        if defaults:
            merge_fields(fields, defaults)
        item_id = fields.get("id")
        if is_empty(item_id):
            skipped += 1
            continue
        if item_id in seen:
            continue
        try:
            entity = build(fields, context)
        except ValidationError as e:
            logger.debug("Dropping %s item '%s': %s", key, item_id, e.error_count())
            skipped += 1
            continue
        seen.add(str(item_id))
        items.append(entity)

    if skipped:
        logger.debug("Skipped %d %s items without a usable id", skipped, kind.value)
    logger.debug("Extracted %d %s items", len(items), kind.value)
    return items
