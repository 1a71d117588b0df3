"""
Enums for tubescope models.

Defines enumeration types used across the application for consistent
type safety and validation.
"""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Kinds of single entities the engine can resolve."""

    VIDEO = "video"
    CHANNEL = "channel"
    PLAYLIST = "playlist"


class CollectionKind(str, Enum):
    """Kinds of entity lists the engine can resolve."""

    VIDEO_SEARCH = "video_search"
    CHANNEL_SEARCH = "channel_search"
    PLAYLIST_SEARCH = "playlist_search"
    CHANNEL_VIDEOS = "channel_videos"
    PLAYLIST_VIDEOS = "playlist_videos"
    RELATED_VIDEOS = "related_videos"

    @property
    def item_kind(self) -> EntityKind:
        """Entity kind of the items in this collection."""
        if self is CollectionKind.CHANNEL_SEARCH:
            return EntityKind.CHANNEL
        if self is CollectionKind.PLAYLIST_SEARCH:
            return EntityKind.PLAYLIST
        return EntityKind.VIDEO

    @property
    def is_search(self) -> bool:
        """Whether the identifier of this collection is a free-text query."""
        return self in (
            CollectionKind.VIDEO_SEARCH,
            CollectionKind.CHANNEL_SEARCH,
            CollectionKind.PLAYLIST_SEARCH,
        )


class ImageRole(str, Enum):
    """Target role when ranking ambiguous image URLs."""

    BANNER = "banner"
    AVATAR = "avatar"


class ThumbnailQuality(str, Enum):
    """Static i.ytimg.com thumbnail variants."""

    DEFAULT = "default"  # 120x90
    MEDIUM = "mqdefault"  # 320x180
    HIGH = "hqdefault"  # 480x360
    STANDARD = "sddefault"  # 640x480
    MAXRES = "maxresdefault"  # 1280x720
