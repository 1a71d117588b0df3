"""
Tests for the extracted entity models.

Tests cover:
- Identifier validation at construction
- Immutability
- Computed canonical URLs
- The ``kind`` discriminated union
"""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from tests.factories.entity_factory import ChannelFactory, PlaylistFactory, TestIds, VideoFactory
from tubescope.models.entities import Channel, Entity, Playlist, Video

ENTITY_ADAPTER: TypeAdapter[Entity] = TypeAdapter(Entity)


class TestConstruction:
    """Tests for building entities."""

    def test_only_id_is_required(self) -> None:
        channel = Channel(id=TestIds.ACME_CHANNEL)

        assert channel.title == ""
        assert channel.avatar_url == ""
        assert channel.video_count is None

    def test_invalid_ids_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Video(id="short")
        with pytest.raises(ValidationError):
            Channel(id="@acme")
        with pytest.raises(ValidationError):
            Playlist(id="")

    def test_zero_duration_is_kept(self) -> None:
        assert VideoFactory(duration_seconds=0).duration_seconds == 0

    def test_models_are_frozen(self) -> None:
        video = VideoFactory()

        with pytest.raises(ValidationError):
            video.title = "Changed"  # type: ignore[misc]

    def test_model_copy_returns_new_instance(self) -> None:
        channel = ChannelFactory()

        updated = channel.model_copy(update={"subscriber_count": 10})

        assert updated.subscriber_count == 10
        assert channel.subscriber_count is None


class TestComputedUrls:
    """Tests for canonical URLs."""

    def test_urls(self) -> None:
        assert VideoFactory().watch_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert ChannelFactory().channel_url == (
            f"https://www.youtube.com/channel/{TestIds.ACME_CHANNEL}"
        )
        assert PlaylistFactory().playlist_url == (
            f"https://www.youtube.com/playlist?list={TestIds.TEST_PLAYLIST}"
        )

    def test_urls_are_serialized(self) -> None:
        assert "watch_url" in VideoFactory().model_dump()


class TestEntityUnion:
    """Tests for the discriminated union."""

    @pytest.mark.parametrize(
        "entity", [VideoFactory(), ChannelFactory(), PlaylistFactory()], ids=lambda e: e.kind
    )
    def test_round_trip_picks_the_right_model(self, entity: Video | Channel | Playlist) -> None:
        restored = ENTITY_ADAPTER.validate_python(entity.model_dump())

        assert type(restored) is type(entity)
        assert restored == entity

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            ENTITY_ADAPTER.validate_python({"kind": "podcast", "id": "x"})
