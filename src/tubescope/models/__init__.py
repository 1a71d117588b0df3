"""
Data models module for tubescope.

Defines Pydantic models for the entities the extraction engine returns,
the validated identifier types they use, and shared enums.
"""

from __future__ import annotations

from .entities import Channel, Entity, Playlist, Video
from .enums import CollectionKind, EntityKind, ImageRole, ThumbnailQuality
from .youtube_types import ChannelId, PlaylistId, VideoId

__all__ = [
    "Channel",
    "Entity",
    "Playlist",
    "Video",
    "CollectionKind",
    "EntityKind",
    "ImageRole",
    "ThumbnailQuality",
    "ChannelId",
    "PlaylistId",
    "VideoId",
]
