"""
Unit tests for the extraction engine.

Tests cover:
- Entity extraction end to end through a routing fetcher
- Cache hits, per-kind TTLs and locale-separated keys
- Graceful absence (None) versus require_entity's NotFoundError
- Malformed embedded data
- The oEmbed and about-page supplementary fetches
- Concurrent fan-out with per-id failures and timeouts
- Collections: search, related videos, limits, channel video defaults,
  empty results
- A channel served from the cache until its TTL expires
- Official-statistics enrichment
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories.entity_factory import (
    ChannelFactory,
    PlaylistFactory,
    TestIds,
    VideoFactory,
    video_id,
)
from tests.unit.services.extraction.conftest import (
    ACME_BANNER_URL,
    StubFetcher,
    make_channel_metadata,
    make_page,
    make_video_details,
    make_video_renderer,
    search_results,
)
from tubescope.config.settings import Settings
from tubescope.exceptions import DecodeError, EnrichmentError, NetworkError, NotFoundError
from tubescope.models.entities import Channel, Playlist, Video
from tubescope.models.enums import CollectionKind, EntityKind
from tubescope.services.extraction.cache import TTLCache
from tubescope.services.extraction.enrichment import OfficialStatsClient
from tubescope.services.extraction.engine import ExtractionEngine
from tubescope.services.extraction.models import Locale

pytestmark = pytest.mark.asyncio

ACME_PATH = f"/channel/{TestIds.ACME_CHANNEL}"
WATCH_PATH = f"/watch?v={TestIds.TEST_VIDEO_1}"


# ============================================================================
# HTML Test Fixtures
# ============================================================================

EMPTY_PAGE = make_page(initial_data={"contents": {}})

MALFORMED_PAGE = '<html><script>var ytInitialData = {"header": ,};</script></html>'

ABOUT_PAGE = make_page(
    initial_data={
        "metadata": {
            "channelMetadataRenderer": make_channel_metadata(description="From the about tab.")
        }
    }
)


def search_page(*ids: str) -> str:
    return make_page(
        initial_data=search_results(
            *[("videoRenderer", make_video_renderer(videoId=vid)) for vid in ids]
        )
    )


def channel_videos_page(*ids: str) -> str:
    return make_page(
        initial_data={
            "metadata": {"channelMetadataRenderer": make_channel_metadata(title="Acme Tab")},
            "contents": {
                "richGridRenderer": {
                    "contents": [
                        {
                            "richItemRenderer": {
                                "content": {
                                    "videoRenderer": make_video_renderer(
                                        videoId=vid, ownerText=None
                                    )
                                }
                            }
                        }
                        for vid in ids
                    ]
                }
            },
        }
    )


def related_page(*ids: str, sidebar: bool = True) -> str:
    compact = [{"compactVideoRenderer": make_video_renderer(videoId=vid)} for vid in ids]
    if not sidebar:
        return make_page(initial_data={"engagementPanels": compact})
    primary = {"contents": [{"videoRenderer": make_video_renderer(videoId=video_id("primary"))}]}
    watch = {
        "results": {"results": primary},
        "secondaryResults": {"secondaryResults": {"results": compact}},
    }
    return make_page(initial_data={"contents": {"twoColumnWatchNextResults": watch}})


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


class SlowFetcher(StubFetcher):
    """Fetcher double that never answers for one URL fragment."""

    def __init__(self, routes: dict[str, Any], stall: str) -> None:
        super().__init__(routes)
        self.stall = stall

    async def fetch(self, url: str, locale: Locale):
        if self.stall in url:
            await asyncio.sleep(10)
        return await super().fetch(url, locale)


# ============================================================================
# Entities
# ============================================================================


class TestFetchEntity:
    """Tests for single-entity extraction."""

    async def test_channel_without_images(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        channel = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert isinstance(channel, Channel)
        assert channel.id == TestIds.ACME_CHANNEL
        assert channel.title == "Acme"
        assert channel.avatar_url == ""
        assert channel.banner_url == ""

    async def test_second_request_is_a_cache_hit(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        first = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)
        second = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert first == second
        assert len(fetcher.calls) == 1

    async def test_cache_survives_a_new_engine(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page})
        await ExtractionEngine(config=test_settings, fetcher=fetcher).fetch_entity(
            EntityKind.CHANNEL, TestIds.ACME_CHANNEL
        )

        channel = await ExtractionEngine(config=test_settings, fetcher=fetcher).fetch_entity(
            EntityKind.CHANNEL, TestIds.ACME_CHANNEL
        )

        assert channel is not None
        assert len(fetcher.calls) == 1

    async def test_locales_are_cached_separately(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)
        await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL, Locale(hl="tr", gl="TR"))

        assert len(fetcher.calls) == 2
        assert "hl=tr" in fetcher.calls[1]

    async def test_disabled_cache_always_fetches(
        self, uncached_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page})
        engine = ExtractionEngine(config=uncached_settings, fetcher=fetcher)

        await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)
        await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert engine.cache is None
        assert len(fetcher.calls) == 2

    async def test_video(self, test_settings: Settings, watch_page: str) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher({WATCH_PATH: watch_page}))

        video = await engine.fetch_entity(EntityKind.VIDEO, TestIds.TEST_VIDEO_1)

        assert isinstance(video, Video)
        assert video.title == "Never Gonna Give You Up"
        assert video.duration_text == "3:33"
        assert video.published_at == "2009-10-24T00:00:00Z"

    async def test_playlist(self, test_settings: Settings) -> None:
        page = make_page(
            initial_data={"metadata": {"playlistMetadataRenderer": {"title": "Acme Classics"}}}
        )
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher({f"list={TestIds.TEST_PLAYLIST}": page})
        )

        playlist = await engine.fetch_entity(EntityKind.PLAYLIST, TestIds.TEST_PLAYLIST)

        assert isinstance(playlist, Playlist)
        assert playlist.id == TestIds.TEST_PLAYLIST
        assert playlist.title == "Acme Classics"

    async def test_unrecognized_page_returns_none_and_is_not_cached(
        self, test_settings: Settings
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: EMPTY_PAGE})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        assert await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL) is None
        assert await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL) is None
        assert len(fetcher.calls) == 2

    async def test_require_entity_raises_not_found(self, test_settings: Settings) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher({ACME_PATH: EMPTY_PAGE}))

        with pytest.raises(NotFoundError) as exc_info:
            await engine.require_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert exc_info.value.kind == "channel"
        assert exc_info.value.identifier == TestIds.ACME_CHANNEL

    async def test_malformed_data_returns_none(self, test_settings: Settings) -> None:
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher({ACME_PATH: MALFORMED_PAGE})
        )

        assert await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL) is None

    async def test_network_error_propagates(self, test_settings: Settings) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher())

        with pytest.raises(NetworkError):
            await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

    async def test_blank_identifier(self, test_settings: Settings) -> None:
        fetcher = StubFetcher()
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        assert await engine.fetch_entity(EntityKind.VIDEO, "   ") is None
        assert fetcher.calls == []


class TestChannelCacheLifetime:
    """A resolved channel is served from the cache until its TTL runs out."""

    async def test_banner_without_avatar_until_expiry(
        self, test_settings: Settings, acme_banner_page: str, tmp_path: Path
    ) -> None:
        clock = FakeClock()
        cache = TTLCache(directory=tmp_path / "lifetime", clock=clock)
        fetcher = StubFetcher({ACME_PATH: acme_banner_page})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher, cache=cache)
        ttl = test_settings.ttl_channel_info

        first = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)
        clock.now += ttl - 1
        second = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert isinstance(first, Channel)
        assert (first.title, first.avatar_url, first.banner_url) == ("Acme", "", ACME_BANNER_URL)
        assert second == first
        assert len(fetcher.calls) == 1

        clock.now += 2
        third = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert third == first
        assert len(fetcher.calls) == 2


class TestSupplementaryFetches:
    """Tests for the oEmbed and about-page fallbacks."""

    async def test_oembed_fills_missing_title(self, test_settings: Settings) -> None:
        page = make_page(
            player_response={"videoDetails": make_video_details(title=None, author=None)}
        )
        fetcher = StubFetcher(
            {WATCH_PATH: page, "/oembed": {"title": "From oEmbed", "author_name": "Acme"}}
        )
        config = test_settings.model_copy(update={"use_oembed_fallback": True})
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        video = await engine.fetch_entity(EntityKind.VIDEO, TestIds.TEST_VIDEO_1)

        assert video is not None
        assert video.title == "From oEmbed"
        assert video.channel_title == "Acme"

    async def test_oembed_failure_keeps_video(self, test_settings: Settings) -> None:
        page = make_page(player_response={"videoDetails": make_video_details(title=None)})
        config = test_settings.model_copy(update={"use_oembed_fallback": True})
        engine = ExtractionEngine(config=config, fetcher=StubFetcher({WATCH_PATH: page}))

        video = await engine.fetch_entity(EntityKind.VIDEO, TestIds.TEST_VIDEO_1)

        assert video is not None
        assert video.title == ""

    async def test_oembed_skipped_when_complete(
        self, test_settings: Settings, watch_page: str
    ) -> None:
        fetcher = StubFetcher({WATCH_PATH: watch_page})
        config = test_settings.model_copy(update={"use_oembed_fallback": True})

        await ExtractionEngine(config=config, fetcher=fetcher).fetch_entity(
            EntityKind.VIDEO, TestIds.TEST_VIDEO_1
        )

        assert len(fetcher.calls) == 1

    async def test_about_page_fills_description(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher({ACME_PATH: acme_channel_page, f"{ACME_PATH}/about": ABOUT_PAGE})
        config = test_settings.model_copy(update={"fetch_about_page": True})
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        channel = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert channel is not None
        assert channel.description == "From the about tab."
        assert "/about" in fetcher.calls[1]

    async def test_about_page_failure_keeps_channel(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher(
            {
                ACME_PATH: acme_channel_page,
                f"{ACME_PATH}/about": NetworkError(message="HTTP 500", status_code=500),
            }
        )
        config = test_settings.model_copy(update={"fetch_about_page": True})
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        channel = await engine.fetch_entity(EntityKind.CHANNEL, TestIds.ACME_CHANNEL)

        assert channel is not None
        assert channel.description == ""


class TestFetchEntities:
    """Tests for the concurrent fan-out."""

    async def test_failures_yield_none_in_place(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = StubFetcher(
            {
                ACME_PATH: acme_channel_page,
                f"/channel/{TestIds.OTHER_CHANNEL}": RuntimeError("boom"),
            }
        )
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        results = await engine.fetch_entities(
            EntityKind.CHANNEL,
            [TestIds.OTHER_CHANNEL, TestIds.ACME_CHANNEL, "UCmissingmissingmissing1"],
        )

        assert results[0] is None
        assert isinstance(results[1], Channel)
        assert results[2] is None

    async def test_timeout_yields_none(
        self, test_settings: Settings, acme_channel_page: str
    ) -> None:
        fetcher = SlowFetcher(
            {ACME_PATH: acme_channel_page, f"/channel/{TestIds.OTHER_CHANNEL}": acme_channel_page},
            stall=TestIds.OTHER_CHANNEL,
        )
        config = test_settings.model_copy(update={"task_timeout": 0.05})
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        results = await engine.fetch_entities(
            EntityKind.CHANNEL, [TestIds.ACME_CHANNEL, TestIds.OTHER_CHANNEL]
        )

        assert results[0] is not None
        assert results[1] is None


# ============================================================================
# Collections
# ============================================================================


class TestFetchCollection:
    """Tests for collection extraction."""

    async def test_search_respects_limit_and_caches_everything(
        self, test_settings: Settings
    ) -> None:
        ids = [video_id(str(i)) for i in range(3)]
        fetcher = StubFetcher({"/results?search_query=acme": search_page(*ids)})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        limited = await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "acme", limit=2)
        everything = await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "ACME")

        assert [v.id for v in limited] == ids[:2]
        assert [v.id for v in everything] == ids
        assert len(fetcher.calls) == 1

    async def test_channel_videos_defaults(self, test_settings: Settings) -> None:
        page = channel_videos_page(TestIds.TEST_VIDEO_1, TestIds.TEST_VIDEO_2)
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher({f"{ACME_PATH}/videos": page})
        )

        videos = await engine.fetch_collection(CollectionKind.CHANNEL_VIDEOS, TestIds.ACME_CHANNEL)

        assert [v.id for v in videos] == [TestIds.TEST_VIDEO_1, TestIds.TEST_VIDEO_2]
        assert all(v.channel_id == TestIds.ACME_CHANNEL for v in videos)
        assert all(v.channel_title == "Acme Tab" for v in videos)

    async def test_channel_videos_by_handle(self, test_settings: Settings) -> None:
        page = channel_videos_page(TestIds.TEST_VIDEO_1)
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher({"/@acme/videos": page}))

        [video] = await engine.fetch_collection(CollectionKind.CHANNEL_VIDEOS, "@acme")

        assert video.channel_id == TestIds.ACME_CHANNEL

    async def test_empty_results_are_not_cached(self, test_settings: Settings) -> None:
        fetcher = StubFetcher({"/results": make_page(initial_data=search_results())})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        assert await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "nothing") == []
        assert await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "nothing") == []
        assert len(fetcher.calls) == 2

    async def test_page_without_data(self, test_settings: Settings) -> None:
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher({"/results": "<html></html>"})
        )

        assert await engine.fetch_collection(CollectionKind.CHANNEL_SEARCH, "acme") == []

    async def test_default_limit(self, test_settings: Settings) -> None:
        ids = [video_id(str(i)) for i in range(5)]
        config = test_settings.model_copy(update={"default_collection_limit": 3})
        engine = ExtractionEngine(
            config=config, fetcher=StubFetcher({"/results": search_page(*ids)})
        )

        videos = await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "acme")

        assert len(videos) == 3

    @pytest.mark.parametrize("limit", [0, -1])
    async def test_non_positive_limit_is_empty(self, test_settings: Settings, limit: int) -> None:
        fetcher = StubFetcher({"/results": search_page(TestIds.TEST_VIDEO_1)})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        videos = await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "acme", limit=limit)

        assert videos == []
        assert fetcher.calls == []

    async def test_related_videos_from_sidebar(self, test_settings: Settings) -> None:
        ids = [TestIds.TEST_VIDEO_2, TestIds.TEST_VIDEO_1, video_id("related")]
        fetcher = StubFetcher({WATCH_PATH: related_page(*ids)})
        engine = ExtractionEngine(config=test_settings, fetcher=fetcher)

        videos = await engine.fetch_collection(
            CollectionKind.RELATED_VIDEOS, TestIds.TEST_VIDEO_1
        )

        assert [v.id for v in videos] == [TestIds.TEST_VIDEO_2, video_id("related")]
        assert WATCH_PATH in fetcher.calls[0]

    async def test_related_videos_default_limit(self, test_settings: Settings) -> None:
        ids = [video_id(str(i)) for i in range(4)]
        config = test_settings.model_copy(update={"related_videos_limit": 2})
        fetcher = StubFetcher({WATCH_PATH: related_page(*ids)})
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        limited = await engine.fetch_collection(CollectionKind.RELATED_VIDEOS, TestIds.TEST_VIDEO_1)
        everything = await engine.fetch_collection(
            CollectionKind.RELATED_VIDEOS, TestIds.TEST_VIDEO_1, limit=10
        )

        assert [v.id for v in limited] == ids[:2]
        assert [v.id for v in everything] == ids
        assert len(fetcher.calls) == 1

    async def test_related_videos_without_sidebar_path(self, test_settings: Settings) -> None:
        page = related_page(TestIds.TEST_VIDEO_2, sidebar=False)
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher({WATCH_PATH: page}))

        videos = await engine.fetch_collection(
            CollectionKind.RELATED_VIDEOS, TestIds.TEST_VIDEO_1
        )

        assert [v.id for v in videos] == [TestIds.TEST_VIDEO_2]


class TestTtls:
    """Tests for the per-kind cache lifetimes."""

    @pytest.mark.parametrize(
        "kind,field",
        [
            (EntityKind.VIDEO, "ttl_video"),
            (EntityKind.CHANNEL, "ttl_channel_info"),
            (EntityKind.PLAYLIST, "ttl_playlist"),
        ],
    )
    async def test_entity_ttl(self, test_settings: Settings, kind: EntityKind, field: str) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher())

        assert engine.entity_ttl(kind) == getattr(test_settings, field)

    @pytest.mark.parametrize(
        "kind,field",
        [
            (CollectionKind.VIDEO_SEARCH, "ttl_video_search"),
            (CollectionKind.CHANNEL_SEARCH, "ttl_channel_search"),
            (CollectionKind.CHANNEL_VIDEOS, "ttl_channel_videos"),
            (CollectionKind.PLAYLIST_VIDEOS, "ttl_playlist"),
            (CollectionKind.RELATED_VIDEOS, "ttl_related_videos"),
        ],
    )
    async def test_collection_ttl(
        self, test_settings: Settings, kind: CollectionKind, field: str
    ) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher())

        assert engine.collection_ttl(kind) == getattr(test_settings, field)


# ============================================================================
# Enrichment
# ============================================================================


@pytest.fixture
def mock_stats_client() -> MagicMock:
    """Official statistics client with canned answers."""
    client = MagicMock(spec=OfficialStatsClient)
    client.subscriber_counts = AsyncMock(return_value={TestIds.ACME_CHANNEL: 1_200_000})
    client.playlist_item_counts = AsyncMock(return_value={TestIds.TEST_PLAYLIST: 140})
    client.like_counts = AsyncMock(return_value={TestIds.TEST_VIDEO_1: 17_000_000})
    return client


class TestEnrich:
    """Tests for enrich."""

    async def test_fills_counts_without_mutating_inputs(
        self, test_settings: Settings, mock_stats_client: MagicMock
    ) -> None:
        channel, playlist, video = ChannelFactory(), PlaylistFactory(), VideoFactory()
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher(), enrichment=mock_stats_client
        )

        enriched = await engine.enrich([channel, playlist, video])

        assert enriched[0].subscriber_count == 1_200_000
        assert enriched[1].video_count == 140
        assert enriched[2].like_count == 17_000_000
        assert channel.subscriber_count is None
        assert playlist.video_count == 12
        mock_stats_client.subscriber_counts.assert_awaited_once_with([TestIds.ACME_CHANNEL])

    async def test_api_failure_returns_inputs(
        self, test_settings: Settings, mock_stats_client: MagicMock
    ) -> None:
        mock_stats_client.subscriber_counts.side_effect = EnrichmentError(
            message="channels.list rejected", status_code=403
        )
        engine = ExtractionEngine(
            config=test_settings, fetcher=StubFetcher(), enrichment=mock_stats_client
        )
        channel = ChannelFactory()

        assert await engine.enrich([channel]) == [channel]

    async def test_unreadable_api_body_returns_inputs(self, test_settings: Settings) -> None:
        config = test_settings.model_copy(update={"youtube_api_key": "key"})
        fetcher = StubFetcher(
            {"/youtube/v3/channels": DecodeError(message="Response body is not valid JSON")}
        )
        engine = ExtractionEngine(config=config, fetcher=fetcher)
        channel = ChannelFactory()

        assert await engine.enrich([channel]) == [channel]

    async def test_without_client(self, test_settings: Settings) -> None:
        engine = ExtractionEngine(config=test_settings, fetcher=StubFetcher())
        video = VideoFactory()

        assert await engine.enrich([video]) == [video]

    async def test_client_built_from_api_key(self, test_settings: Settings) -> None:
        config = test_settings.model_copy(update={"youtube_api_key": "key"})
        fetcher = StubFetcher(
            {
                "/youtube/v3/videos": {
                    "items": [{"id": TestIds.TEST_VIDEO_1, "statistics": {"likeCount": "5"}}]
                }
            }
        )
        engine = ExtractionEngine(config=config, fetcher=fetcher)

        [video] = await engine.enrich([VideoFactory()])

        assert video.like_count == 5
