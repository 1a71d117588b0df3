"""
Custom validated types for YouTube identifiers.

Provides strongly-typed wrappers for the ids the extractor returns so that an
entity can never be built around an empty or garbled identifier.
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

_ID_CHARS_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_video_id(v: str) -> str:
    """Validate YouTube Video ID format."""
    if not isinstance(v, str):
        raise TypeError("VideoId must be a string")

    cleaned = v.strip()
    if len(cleaned) != 11:
        raise ValueError(
            f"VideoId must be exactly 11 characters long, got {len(cleaned)}: {cleaned}"
        )

    if not _ID_CHARS_RE.match(cleaned):
        raise ValueError(f"VideoId contains invalid characters: {cleaned}")

    return cleaned


def validate_channel_id(v: str) -> str:
    """Validate YouTube Channel ID format."""
    if not isinstance(v, str):
        raise TypeError("ChannelId must be a string")

    cleaned = v.strip()
    if len(cleaned) != 24:
        raise ValueError(
            f"ChannelId must be exactly 24 characters long, got {len(cleaned)}: {cleaned}"
        )

    if not cleaned.startswith("UC"):
        raise ValueError(f'ChannelId must start with "UC", got: {cleaned}')

    if not _ID_CHARS_RE.match(cleaned):
        raise ValueError(f"ChannelId contains invalid characters: {cleaned}")

    return cleaned


def validate_playlist_id(v: str) -> str:
    """Validate YouTube Playlist ID format.

    Accepts every list prefix the site uses (PL, UU, FL, RD, OLAK5uy_, ...).
    """
    if not isinstance(v, str):
        raise TypeError("PlaylistId must be a string")

    cleaned = v.strip()
    if not (2 <= len(cleaned) <= 64):
        raise ValueError(
            f"PlaylistId must be 2-64 characters long, got {len(cleaned)}: {cleaned}"
        )

    if not _ID_CHARS_RE.match(cleaned):
        raise ValueError(f"PlaylistId contains invalid characters: {cleaned}")

    return cleaned


def is_channel_id(value: str) -> bool:
    """Return True when *value* is a well-formed channel id."""
    try:
        validate_channel_id(value)
    except (TypeError, ValueError):
        return False
    return True


# Type aliases for use in Pydantic models
VideoId = Annotated[
    str,
    BeforeValidator(validate_video_id),
    Field(description="YouTube Video ID (11 chars, alphanumeric)"),
]

ChannelId = Annotated[
    str,
    BeforeValidator(validate_channel_id),
    Field(description="YouTube Channel ID (24 chars, starts with UC)"),
]

PlaylistId = Annotated[
    str,
    BeforeValidator(validate_playlist_id),
    Field(description="YouTube Playlist ID (2-64 chars, any list prefix)"),
]
