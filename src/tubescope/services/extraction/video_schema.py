"""
Video (watch page) strategies.

A watch page embeds two blobs, so the tree handed to the walker is the
composite ``{"playerResponse": ..., "initialData": ...}``. Strategies, in
order:

1. ``playerResponse.videoDetails``
2. ``playerResponse.microformat.playerMicroformatRenderer``
3. ``videoPrimaryInfoRenderer`` (anywhere in ``initialData``)
4. ``videoSecondaryInfoRenderer``
5. ``videoDescriptionHeaderRenderer`` (structured description panel)

Last-resort scans work on the raw page text: view-count renderers, date
fields, ``lengthSeconds`` / ``approxDurationMs`` and the meta tags.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from tubescope.models.entities import Video
from tubescope.services.extraction.meta import read_meta_tags
from tubescope.services.extraction.models import ExtractionContext
from tubescope.services.extraction.normalization import (
    format_duration,
    normalize_published_at,
    normalize_url,
    normalize_view_count,
    parse_duration,
    thumbnail_url,
    unescape_fragment,
)
from tubescope.services.extraction.tree import JsonTree
from tubescope.services.extraction.walker import (
    EntitySchema,
    Fields,
    RawScan,
    SchemaStrategy,
)

logger = logging.getLogger(__name__)

PLAYER_RESPONSE_KEY = "playerResponse"
INITIAL_DATA_KEY = "initialData"

_VIEW_COUNT_PATTERNS = (
    re.compile(r'"viewCountText"\s*:\s*\{\s*"simpleText"\s*:\s*"(.*?)"', re.DOTALL),
    re.compile(
        r'videoViewCountRenderer"\s*:\s*\{[^{]*?"viewCount"\s*:\s*\{[^{]*?"simpleText"\s*:\s*"(.*?)"',
        re.DOTALL,
    ),
    re.compile(r'"shortViewCount"[^}]*?"simpleText"\s*:\s*"(.*?)"', re.DOTALL),
    re.compile(r'playerMicroformatRenderer"[^{]*?\{[^}]*?"viewCount"\s*:\s*"(\d+)"', re.DOTALL),
)
_ISO_DATE_PATTERNS = (
    re.compile(r'"publishDate"\s*:\s*"(\d{4}-\d{2}-\d{2}[^"]*)"'),
    re.compile(r'"uploadDate"\s*:\s*"(\d{4}-\d{2}-\d{2}[^"]*)"'),
    re.compile(r'"datePublished"\s*:\s*"(\d{4}-\d{2}-\d{2}[^"]*)"'),
)
_DATE_TEXT_RE = re.compile(r'"dateText"\s*:\s*\{\s*"simpleText"\s*:\s*"(.*?)"', re.DOTALL)
_LENGTH_SECONDS_RE = re.compile(r'"lengthSeconds"\s*:\s*"(\d+)"')
_APPROX_DURATION_RE = re.compile(r'"approxDurationMs"\s*:\s*"(\d+)"')


def _seconds(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value if value >= 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return unescape_fragment(match.group(1))
    return ""


# ---------------------------------------------------------------------------
# Structured strategies
# ---------------------------------------------------------------------------


def video_details(tree: JsonTree) -> Fields | None:
    details = tree.node(f"{PLAYER_RESPONSE_KEY}.videoDetails")
    if not details:
        return None
    return {
        "id": details.get_str("videoId"),
        "title": details.get_str("title"),
        "description": details.get_str("shortDescription"),
        "channel_id": details.get_str("channelId"),
        "channel_title": details.get_str("author"),
        "thumbnail_url": details.thumbnail("thumbnail"),
        "raw_view_count_text": details.get_str("viewCount"),
        "length_seconds": _seconds(details.get("lengthSeconds")),
    }


def player_microformat(tree: JsonTree) -> Fields | None:
    micro = tree.node(f"{PLAYER_RESPONSE_KEY}.microformat.playerMicroformatRenderer")
    if not micro:
        return None
    return {
        "id": micro.get_str("externalVideoId"),
        "title": micro.text("title"),
        "description": micro.text("description"),
        "channel_id": micro.get_str("externalChannelId"),
        "channel_title": micro.get_str("ownerChannelName"),
        "thumbnail_url": micro.thumbnail("thumbnail"),
        "raw_view_count_text": micro.get_str("viewCount"),
        "published_iso_hint": micro.get_str("publishDate") or micro.get_str("uploadDate"),
        "length_seconds": _seconds(micro.get("lengthSeconds")),
    }


def primary_info(tree: JsonTree) -> Fields | None:
    primary = tree.node(INITIAL_DATA_KEY).find_first("videoPrimaryInfoRenderer")
    if not primary:
        return None
    counter = primary.node("viewCount.videoViewCountRenderer")
    if not counter:
        counter = primary.node("viewCount.viewCountRenderer")
    return {
        "title": primary.text("title"),
        "raw_view_count_text": counter.text("viewCount") or counter.text("shortViewCount"),
        "published_text": primary.text("dateText"),
    }


def secondary_info(tree: JsonTree) -> Fields | None:
    secondary = tree.node(INITIAL_DATA_KEY).find_first("videoSecondaryInfoRenderer")
    if not secondary:
        return None
    owner = secondary.node("owner.videoOwnerRenderer")
    return {
        "channel_title": owner.text("title"),
        "channel_id": owner.get_str("navigationEndpoint.browseEndpoint.browseId")
        or owner.first_run("title").get_str("navigationEndpoint.browseEndpoint.browseId"),
        "channel_thumbnail_url": owner.thumbnail("thumbnail"),
        "description": secondary.text("attributedDescription") or secondary.text("description"),
    }


def structured_description(tree: JsonTree) -> Fields | None:
    header = tree.node(INITIAL_DATA_KEY).find_first("videoDescriptionHeaderRenderer")
    if not header:
        return None
    return {
        "title": header.text("title"),
        "channel_title": header.text("channel"),
        "channel_id": header.get_str("channelNavigationEndpoint.browseEndpoint.browseId"),
        "channel_thumbnail_url": header.thumbnail("channelThumbnail"),
        "raw_view_count_text": header.text("views"),
        "published_text": header.text("publishDate"),
    }


# ---------------------------------------------------------------------------
# Last-resort scans
# ---------------------------------------------------------------------------


def scan_view_count(text: str, fields: Fields) -> Fields:
    return {"raw_view_count_text": _first_match(_VIEW_COUNT_PATTERNS, text)}


def scan_dates(text: str, fields: Fields) -> Fields:
    return {
        "published_iso_hint": _first_match(_ISO_DATE_PATTERNS, text),
        "published_text": _first_match((_DATE_TEXT_RE,), text),
    }


def scan_length(text: str, fields: Fields) -> Fields:
    match = _LENGTH_SECONDS_RE.search(text)
    if match:
        return {"length_seconds": _seconds(match.group(1))}
    match = _APPROX_DURATION_RE.search(text)
    if match:
        milliseconds = int(match.group(1))
        return {"length_seconds": milliseconds // 1000}
    return {}


def scan_meta_tags(text: str, fields: Fields) -> Fields:
    tags = read_meta_tags(text)
    return {
        "id": tags.get("itemprop:videoId") or tags.get("itemprop:identifier", ""),
        "title": tags.get("og:title") or tags.get("itemprop:name", ""),
        "description": tags.get("og:description", ""),
        "channel_id": tags.get("itemprop:channelId", ""),
        "channel_title": tags.get("itemprop:author", ""),
        "thumbnail_url": tags.get("og:image", ""),
        "raw_view_count_text": tags.get("itemprop:interactionCount", ""),
        "published_iso_hint": tags.get("itemprop:datePublished")
        or tags.get("itemprop:uploadDate", ""),
    }


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_video(fields: Fields, context: ExtractionContext) -> Video:
    video_id = str(fields["id"])
    raw_views = str(fields.get("raw_view_count_text") or "").strip()
    published = normalize_published_at(
        str(fields.get("published_text") or ""),
        fields.get("published_iso_hint") or None,
        now=context.now,
        language=context.language,
    )

    seconds = fields.get("length_seconds")
    duration_text = str(fields.get("duration_text") or "")
    if seconds is None and duration_text:
        seconds = parse_duration(duration_text)
    if seconds is not None and not duration_text:
        duration_text = format_duration(seconds)

    thumbnail = normalize_url(str(fields.get("thumbnail_url") or ""))
    return Video(
        id=video_id,
        title=str(fields.get("title") or "").strip(),
        description=str(fields.get("description") or ""),
        channel_id=str(fields.get("channel_id") or ""),
        channel_title=str(fields.get("channel_title") or "").strip(),
        channel_thumbnail_url=normalize_url(str(fields.get("channel_thumbnail_url") or "")),
        thumbnail_url=thumbnail or thumbnail_url(video_id),
        view_count_text=normalize_view_count(raw_views, context.language) if raw_views else "",
        raw_view_count_text=raw_views,
        published_text=published.display,
        published_at=published.iso,
        duration_text=duration_text,
        duration_seconds=seconds,
    )


VIDEO_SCHEMA: EntitySchema[Video] = EntitySchema(
    kind="video",
    strategies=(
        SchemaStrategy("videoDetails", video_details),
        SchemaStrategy("playerMicroformatRenderer", player_microformat),
        SchemaStrategy("videoPrimaryInfoRenderer", primary_info),
        SchemaStrategy("videoSecondaryInfoRenderer", secondary_info),
        SchemaStrategy("structuredDescription", structured_description),
    ),
    raw_scans=(
        RawScan("viewCountPatterns", ("raw_view_count_text",), scan_view_count),
        RawScan("datePatterns", ("published_iso_hint", "published_text"), scan_dates),
        RawScan("lengthPatterns", ("length_seconds",), scan_length),
        RawScan(
            "metaTags",
            (
                "id",
                "title",
                "description",
                "channel_id",
                "channel_title",
                "thumbnail_url",
                "raw_view_count_text",
                "published_iso_hint",
            ),
            scan_meta_tags,
        ),
    ),
    build=build_video,
)
