"""
Playlist info strategies.

Order: ``playlistHeaderRenderer``, ``pageHeaderRenderer`` (view-model
layout), ``playlistSidebarPrimaryInfoRenderer``,
``playlistMetadataRenderer``, ``microformatDataRenderer``; meta tags as the
last resort.
"""

from __future__ import annotations

import logging
import re

from tubescope.models.entities import Playlist
from tubescope.services.extraction.meta import read_meta_tags
from tubescope.services.extraction.models import ExtractionContext
from tubescope.services.extraction.normalization import approx_number, normalize_url
from tubescope.services.extraction.tree import JsonTree
from tubescope.services.extraction.walker import (
    EntitySchema,
    Fields,
    RawScan,
    SchemaStrategy,
)

logger = logging.getLogger(__name__)

_LIST_PARAM_RE = re.compile(r"[?&]list=([A-Za-z0-9_-]+)")
_OWNER_PREFIXES = ("by ", "from ")


def _playlist_id_from_url(url: str) -> str:
    match = _LIST_PARAM_RE.search(url)
    return match.group(1) if match else ""


def _owner_fields(owner: JsonTree) -> Fields:
    run = owner.first_run()
    return {
        "channel_title": owner.text(),
        "channel_id": run.get_str("navigationEndpoint.browseEndpoint.browseId"),
    }


def playlist_header(tree: JsonTree) -> Fields | None:
    header = tree.node("header.playlistHeaderRenderer")
    if not header:
        return None
    fields: Fields = {
        "id": header.get_str("playlistId"),
        "title": header.text("title"),
        "description": header.text("descriptionText"),
        "thumbnail_url": header.thumbnail(
            "playlistHeaderBanner.heroPlaylistThumbnailRenderer.thumbnail"
        ),
        "video_count_text": header.text("numVideosText") or header.text("stats.0"),
    }
    fields.update(_owner_fields(header.node("ownerText")))
    return fields


def page_header(tree: JsonTree) -> Fields | None:
    header = tree.node("header.pageHeaderRenderer")
    if not header:
        return None
    view = header.node("content.pageHeaderViewModel")
    fields: Fields = {
        "title": view.text("title.dynamicTextViewModel.text") or header.get_str("pageTitle"),
        "description": view.text("description.descriptionPreviewViewModel.description"),
        "thumbnail_url": view.thumbnail("heroImage.contentPreviewImageViewModel.image"),
    }
    for row in view.nodes("metadata.contentMetadataViewModel.metadataRows"):
        for part in row.nodes("metadataParts"):
            label = part.text("text").strip()
            lowered = label.lower()
            if "video" in lowered:
                fields.setdefault("video_count_text", label)
            elif lowered.startswith(_OWNER_PREFIXES):
                fields.setdefault("channel_title", label.split(" ", 1)[1])
            elif part.has("avatarStack"):
                fields.setdefault("channel_title", part.text("avatarStack.avatarStackViewModel.text"))
    return fields


def sidebar_primary_info(tree: JsonTree) -> Fields | None:
    primary = tree.find_first("playlistSidebarPrimaryInfoRenderer")
    if not primary:
        return None
    fields: Fields = {
        "id": primary.get_str("navigationEndpoint.watchEndpoint.playlistId")
        or primary.get_str("title.runs.0.navigationEndpoint.watchEndpoint.playlistId"),
        "title": primary.text("title"),
        "description": primary.text("description"),
        "thumbnail_url": primary.thumbnail(
            "thumbnailRenderer.playlistVideoThumbnailRenderer.thumbnail"
        )
        or primary.thumbnail("thumbnailRenderer.playlistCustomThumbnailRenderer.thumbnail"),
        "video_count_text": primary.text("stats.0"),
    }
    owner = tree.find_first("playlistSidebarSecondaryInfoRenderer").node(
        "videoOwner.videoOwnerRenderer.title"
    )
    fields.update(_owner_fields(owner))
    return fields


def playlist_metadata(tree: JsonTree) -> Fields | None:
    meta = tree.node("metadata.playlistMetadataRenderer")
    if not meta:
        return None
    return {
        "title": meta.get_str("title"),
        "description": meta.get_str("description"),
    }


def microformat(tree: JsonTree) -> Fields | None:
    micro = tree.node("microformat.microformatDataRenderer")
    if not micro:
        return None
    return {
        "id": _playlist_id_from_url(micro.get_str("urlCanonical")),
        "title": micro.get_str("title"),
        "description": micro.get_str("description"),
        "thumbnail_url": micro.thumbnail("thumbnail"),
    }


def scan_meta_tags(text: str, fields: Fields) -> Fields:
    tags = read_meta_tags(text)
    return {
        "id": _playlist_id_from_url(tags.get("og:url", "")),
        "title": tags.get("og:title", ""),
        "description": tags.get("og:description", ""),
        "thumbnail_url": tags.get("og:image", ""),
    }


def build_playlist(fields: Fields, context: ExtractionContext) -> Playlist:
    video_count_text = str(fields.get("video_count_text") or "").strip()
    return Playlist(
        id=fields["id"],
        title=str(fields.get("title") or "").strip(),
        description=str(fields.get("description") or ""),
        thumbnail_url=normalize_url(str(fields.get("thumbnail_url") or "")),
        channel_id=str(fields.get("channel_id") or ""),
        channel_title=str(fields.get("channel_title") or "").strip(),
        video_count_text=video_count_text,
        video_count=approx_number(video_count_text) if video_count_text else None,
    )


PLAYLIST_SCHEMA: EntitySchema[Playlist] = EntitySchema(
    kind="playlist",
    strategies=(
        SchemaStrategy("playlistHeaderRenderer", playlist_header),
        SchemaStrategy("pageHeaderRenderer", page_header),
        SchemaStrategy("playlistSidebarPrimaryInfoRenderer", sidebar_primary_info),
        SchemaStrategy("playlistMetadataRenderer", playlist_metadata),
        SchemaStrategy("microformatDataRenderer", microformat),
    ),
    raw_scans=(
        RawScan("metaTags", ("id", "title", "description", "thumbnail_url"), scan_meta_tags),
    ),
    build=build_playlist,
)
