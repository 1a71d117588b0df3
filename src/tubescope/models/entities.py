"""
Extracted entity models.

Immutable records produced by the extraction engine. Every field except the
identifier may be empty: an empty string or ``None`` means "unknown", never
an error.

Models
------
Video
    A single video, from a watch page or a collection item renderer.
Channel
    A channel, from a channel page or a channel search result.
Playlist
    A playlist, from a playlist page or a playlist search result.

Type Aliases
------------
Entity
    Discriminated union of the three models, keyed on ``kind``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from tubescope.models.youtube_types import ChannelId, PlaylistId, VideoId


class Video(BaseModel):
    """
    A video resolved from page data.

    Attributes
    ----------
    id : VideoId
        11-character video id. Never empty.
    title : str
        Video title.
    description : str
        Full description when the watch page exposes it, else the snippet.
    channel_id : str
        Owning channel id, empty when unknown.
    channel_title : str
        Owning channel display name.
    channel_thumbnail_url : str
        Owning channel avatar URL.
    thumbnail_url : str
        Largest thumbnail the page offered.
    view_count_text : str
        Normalized display label such as ``"1.2M views"``.
    raw_view_count_text : str
        The view-count text exactly as the page showed it.
    published_text : str
        Display label such as ``"3 days ago"``.
    published_at : str | None
        ISO-8601 timestamp when the date could be resolved.
    duration_text : str
        Display duration such as ``"12:34"``.
    duration_seconds : int | None
        Duration in seconds. ``None`` is unknown, ``0`` is a real value.
    like_count : int | None
        Authoritative like count, only set by official API enrichment.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["video"] = "video"
    id: VideoId
    title: str = ""
    description: str = ""
    channel_id: str = ""
    channel_title: str = ""
    channel_thumbnail_url: str = ""
    thumbnail_url: str = ""
    view_count_text: str = ""
    raw_view_count_text: str = ""
    published_text: str = ""
    published_at: str | None = None
    duration_text: str = ""
    duration_seconds: int | None = None
    like_count: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def watch_url(self) -> str:
        """Canonical watch page URL for this video."""
        return f"https://www.youtube.com/watch?v={self.id}"


class Channel(BaseModel):
    """
    A channel resolved from page data.

    Attributes
    ----------
    id : ChannelId
        24-character channel id. Never empty.
    title : str
        Channel display name.
    description : str
        Channel description.
    handle : str
        ``@handle`` when the page exposes one.
    avatar_url : str
        Avatar image URL, empty when none was found.
    banner_url : str
        Banner image URL, empty when none was found.
    video_count : int | None
        Approximate number of uploads parsed from the header.
    subscriber_count : int | None
        Authoritative subscriber count, only set by official API enrichment.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["channel"] = "channel"
    id: ChannelId
    title: str = ""
    description: str = ""
    handle: str = ""
    avatar_url: str = ""
    banner_url: str = ""
    video_count: int | None = None
    subscriber_count: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def channel_url(self) -> str:
        """Canonical channel page URL."""
        return f"https://www.youtube.com/channel/{self.id}"


class Playlist(BaseModel):
    """
    A playlist resolved from page data.

    Attributes
    ----------
    id : PlaylistId
        Playlist id. Never empty.
    title : str
        Playlist title.
    description : str
        Playlist description.
    thumbnail_url : str
        Cover image URL.
    channel_id : str
        Owning channel id, empty when unknown.
    channel_title : str
        Owning channel display name.
    video_count_text : str
        Item count as displayed, e.g. ``"42 videos"``.
    video_count : int | None
        Item count, parsed from the page or set by enrichment.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["playlist"] = "playlist"
    id: PlaylistId
    title: str = ""
    description: str = ""
    thumbnail_url: str = ""
    channel_id: str = ""
    channel_title: str = ""
    video_count_text: str = ""
    video_count: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def playlist_url(self) -> str:
        """Canonical playlist page URL."""
        return f"https://www.youtube.com/playlist?list={self.id}"


Entity = Annotated[Union[Video, Channel, Playlist], Field(discriminator="kind")]
