"""
Channel info strategies.

The channel home page encodes the channel header in one of several
renderer shapes depending on the layout rollout a request lands in:

1. ``header.c4TabbedHeaderRenderer`` (classic layout)
2. ``header.channelHeaderRenderer``
3. ``header.pageHeaderRenderer`` (view-model layout)
4. ``metadata.channelMetadataRenderer``
5. ``microformat.microformatDataRenderer``
6. a recursive banner lookup anywhere in the tree

Last-resort scans, used only for fields still empty afterwards: the
``imageBannerBackgroundImageUrl`` / CSS ``background-image`` banner
patterns, a ranked sweep of every yt3 image URL on the page (banner, then
avatar), and the Open Graph meta tags.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from tubescope.models.entities import Channel
from tubescope.models.enums import ImageRole
from tubescope.services.extraction.meta import read_meta_tags
from tubescope.services.extraction.models import ExtractionContext
from tubescope.services.extraction.normalization import (
    approx_number,
    normalize_url,
    unescape_fragment,
)
from tubescope.services.extraction.scorer import collect_image_candidates, pick_best
from tubescope.services.extraction.tree import JsonTree
from tubescope.services.extraction.walker import (
    EntitySchema,
    Fields,
    RawScan,
    SchemaStrategy,
)

logger = logging.getLogger(__name__)

BANNER_KEYS = ("banner", "imageBanner", "tvBanner", "mobileBanner", "desktopBanner")

_CHANNEL_PATH_RE = re.compile(r"/channel/(UC[A-Za-z0-9_-]{22})")
_EARLY_BANNER_RE = re.compile(
    r'imageBannerBackgroundImageUrl\\*"\s*:\s*\\*"(https?:[^"]+?)\\*"', re.IGNORECASE
)
_CSS_BANNER_RE = re.compile(
    r"""background(?:-image)?:\s*url\(\s*["']?(https?:[^"')]+)""", re.IGNORECASE
)


def _banner_from(node: JsonTree) -> str:
    for key in BANNER_KEYS:
        url = node.thumbnail(key)
        if url:
            return url
    return ""


def _handle_from_url(url: str) -> str:
    tail = url.rstrip("/").rsplit("/", 1)[-1]
    return tail if tail.startswith("@") else ""


def _channel_id_from_url(url: str) -> str:
    match = _CHANNEL_PATH_RE.search(url)
    return match.group(1) if match else ""


# ---------------------------------------------------------------------------
# Structured strategies
# ---------------------------------------------------------------------------


def c4_tabbed_header(tree: JsonTree) -> Fields | None:
    header = tree.node("header.c4TabbedHeaderRenderer")
    if not header:
        return None
    return {
        "id": header.get_str("channelId"),
        "title": header.text("title"),
        "handle": header.text("channelHandleText"),
        "description": header.text("description"),
        "avatar_url": header.thumbnail("avatar"),
        "banner_url": _banner_from(header),
        "video_count_text": header.text("videosCountText"),
    }


def channel_header(tree: JsonTree) -> Fields | None:
    header = tree.node("header.channelHeaderRenderer")
    if not header:
        return None
    return {
        "id": header.get_str("channelId"),
        "title": header.text("title"),
        "handle": header.text("channelHandleText"),
        "avatar_url": header.thumbnail("avatar"),
        "banner_url": _banner_from(header),
        "video_count_text": header.text("videosCountText"),
    }


def page_header(tree: JsonTree) -> Fields | None:
    """View-model layout: ``pageHeaderRenderer.content.pageHeaderViewModel``."""
    header = tree.node("header.pageHeaderRenderer")
    if not header:
        return None
    view = header.node("content.pageHeaderViewModel")
    fields: Fields = {
        "title": view.text("title.dynamicTextViewModel.text") or header.get_str("pageTitle"),
        "avatar_url": view.find_first("avatarViewModel").thumbnail("image"),
        "banner_url": view.thumbnail("banner.imageBannerViewModel.image"),
        "description": view.text("description.descriptionPreviewViewModel.description"),
    }
    for row in view.nodes("metadata.contentMetadataViewModel.metadataRows"):
        for part in row.nodes("metadataParts"):
            label = part.text("text").strip()
            if label.startswith("@"):
                fields.setdefault("handle", label)
            elif "video" in label.lower():
                fields.setdefault("video_count_text", label)
    return fields


def channel_metadata(tree: JsonTree) -> Fields | None:
    meta = tree.node("metadata.channelMetadataRenderer")
    if not meta:
        return None
    return {
        "id": meta.get_str("externalId"),
        "title": meta.get_str("title"),
        "description": meta.get_str("description"),
        "handle": _handle_from_url(meta.get_str("vanityChannelUrl")),
        "avatar_url": meta.thumbnail("avatar"),
        "banner_url": meta.thumbnail("banner") or meta.thumbnail("imageBanner"),
    }


def microformat(tree: JsonTree) -> Fields | None:
    micro = tree.node("microformat.microformatDataRenderer")
    if not micro:
        return None
    return {
        "id": _channel_id_from_url(micro.get_str("urlCanonical")),
        "title": micro.get_str("title"),
        "description": micro.get_str("description"),
        "avatar_url": micro.thumbnail("thumbnail"),
    }


def deep_banner_search(tree: JsonTree) -> Fields | None:
    """Recursive lookup of any ``{"<banner key>": {"thumbnails": [...]}}`` node."""
    for key in BANNER_KEYS:
        for node in tree.iter_key(key):
            url = node.thumbnail()
            if url:
                return {"banner_url": url}
    return None


# ---------------------------------------------------------------------------
# Last-resort scans
# ---------------------------------------------------------------------------


def _is_yt3(url: str) -> bool:
    return "yt3" in url.lower()


def scan_banner(text: str, fields: Fields) -> Fields:
    match = _EARLY_BANNER_RE.search(text)
    if match and _is_yt3(match.group(1)):
        return {"banner_url": unescape_fragment(match.group(1))}

    match = _CSS_BANNER_RE.search(text)
    if match and _is_yt3(match.group(1)):
        return {"banner_url": unescape_fragment(match.group(1))}

    best = pick_best(collect_image_candidates(text), ImageRole.BANNER)
    return {"banner_url": best} if best else {}


def scan_avatar(text: str, fields: Fields) -> Fields:
    banner = normalize_url(fields.get("banner_url") or "")
    candidates = [url for url in collect_image_candidates(text) if url != banner]
    best = pick_best(candidates, ImageRole.AVATAR)
    return {"avatar_url": best} if best else {}


def scan_meta_tags(text: str, fields: Fields) -> Fields:
    tags = read_meta_tags(text)
    return {
        "id": _channel_id_from_url(tags.get("og:url", "")),
        "title": tags.get("og:title", ""),
        "description": tags.get("og:description", ""),
        "avatar_url": tags.get("og:image", ""),
    }


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_channel(fields: Fields, context: ExtractionContext) -> Channel:
    video_count_text = str(fields.get("video_count_text") or "")
    return Channel(
        id=fields["id"],
        title=str(fields.get("title") or "").strip(),
        description=str(fields.get("description") or ""),
        handle=str(fields.get("handle") or "").strip(),
        avatar_url=normalize_url(str(fields.get("avatar_url") or "")),
        banner_url=normalize_url(str(fields.get("banner_url") or "")),
        video_count=approx_number(video_count_text) if video_count_text else None,
    )


CHANNEL_SCHEMA: EntitySchema[Channel] = EntitySchema(
    kind="channel",
    strategies=(
        SchemaStrategy("c4TabbedHeaderRenderer", c4_tabbed_header),
        SchemaStrategy("channelHeaderRenderer", channel_header),
        SchemaStrategy("pageHeaderRenderer", page_header),
        SchemaStrategy("channelMetadataRenderer", channel_metadata),
        SchemaStrategy("microformatDataRenderer", microformat),
        SchemaStrategy("deepBannerSearch", deep_banner_search),
    ),
    raw_scans=(
        RawScan("bannerPatterns", ("banner_url",), scan_banner),
        RawScan("avatarSweep", ("avatar_url",), scan_avatar),
        RawScan("metaTags", ("id", "title", "description", "avatar_url"), scan_meta_tags),
    ),
    build=build_channel,
)


def about_description(tree: Any) -> str:
    """
    Read the channel description from an ``/about`` page tree.

    Checks ``channelMetadataRenderer``, ``microformatDataRenderer`` and the
    about-panel view model, in that order.
    """
    root = tree if isinstance(tree, JsonTree) else JsonTree(tree)
    for path in (
        "metadata.channelMetadataRenderer.description",
        "microformat.microformatDataRenderer.description",
    ):
        description = root.get_str(path)
        if description.strip():
            return description
    return root.find_first("aboutChannelViewModel").text("description")
