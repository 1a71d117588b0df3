"""
Extraction engine.

Orchestrates one request end to end: cache lookup, page fetch, JSON-blob
location, schema walk, normalization and cache write. Besides the cache the
engine keeps no state, so one instance can serve any number of concurrent
callers.

Classes
-------
ExtractionEngine
    Entry point for entity and collection requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Sequence

from tubescope.config.settings import Settings, settings as default_settings
from tubescope.exceptions import (
    EnrichmentError,
    MalformedDataError,
    NotFoundError,
    TubescopeError,
)
from tubescope.models.entities import Channel, Entity, Playlist, Video
from tubescope.models.enums import CollectionKind, EntityKind
from tubescope.models.youtube_types import is_channel_id
from tubescope.services.extraction.cache import TTLCache
from tubescope.services.extraction.channel_schema import CHANNEL_SCHEMA, about_description
from tubescope.services.extraction.enrichment import OfficialStatsClient
from tubescope.services.extraction.fetcher import (
    DocumentFetcher,
    channel_about_url,
    channel_url,
    channel_videos_url,
    oembed_url,
    playlist_url,
    search_url,
    watch_url,
)
from tubescope.services.extraction.item_schema import extract_items
from tubescope.services.extraction.locator import (
    INITIAL_DATA_MARKERS,
    PLAYER_RESPONSE_MARKERS,
    locate_tree,
)
from tubescope.services.extraction.models import (
    CacheKey,
    ExtractionContext,
    Locale,
    RawDocument,
)
from tubescope.services.extraction.playlist_schema import PLAYLIST_SCHEMA
from tubescope.services.extraction.tree import JsonTree
from tubescope.services.extraction.video_schema import (
    INITIAL_DATA_KEY,
    PLAYER_RESPONSE_KEY,
    VIDEO_SCHEMA,
)
from tubescope.services.extraction.walker import SchemaWalker

logger = logging.getLogger(__name__)

VIDEO_WALKER = SchemaWalker(VIDEO_SCHEMA)
CHANNEL_WALKER = SchemaWalker(CHANNEL_SCHEMA)
PLAYLIST_WALKER = SchemaWalker(PLAYLIST_SCHEMA)

RELATED_RESULTS_PATH = "contents.twoColumnWatchNextResults.secondaryResults"
RELATED_RENDERERS = ("compactVideoRenderer", "videoRenderer")

ENTITY_TYPES: dict[EntityKind, type[Video] | type[Channel] | type[Playlist]] = {
    EntityKind.VIDEO: Video,
    EntityKind.CHANNEL: Channel,
    EntityKind.PLAYLIST: Playlist,
}


class ExtractionEngine:
    """
    Fetch, extract, normalize and cache entities.

    Parameters
    ----------
    config : Settings | None, optional
        Settings (default: the global settings).
    fetcher : DocumentFetcher | None, optional
        Page fetcher (default: one built from *config*).
    cache : TTLCache | None, optional
        Cache (default: a disk-backed cache in ``config.cache_dir``, or no
        cache when ``config.cache_enabled`` is False).
    enrichment : OfficialStatsClient | None, optional
        Official statistics client (default: one built from
        ``config.youtube_api_key`` when a key is set).

    Examples
    --------
    >>> engine = ExtractionEngine()
    >>> channel = await engine.fetch_entity(EntityKind.CHANNEL, "UC_x5XG1OV2P6uZZ5FSM9Ttw")
    >>> videos = await engine.fetch_collection(CollectionKind.VIDEO_SEARCH, "python", limit=10)
    """

    def __init__(
        self,
        config: Settings | None = None,
        fetcher: DocumentFetcher | None = None,
        cache: TTLCache | None = None,
        enrichment: OfficialStatsClient | None = None,
    ) -> None:
        self._settings = config or default_settings
        self._fetcher = fetcher or DocumentFetcher(self._settings)
        if cache is None and self._settings.cache_enabled:
            cache = TTLCache(
                directory=self._settings.cache_dir,
                max_entries=self._settings.cache_max_entries,
            )
        self._cache = cache
        if enrichment is None and self._settings.has_api_key:
            enrichment = OfficialStatsClient(self._settings.youtube_api_key, self._fetcher)
        self._enrichment = enrichment

    @property
    def cache(self) -> TTLCache | None:
        """The cache in use, or None when caching is disabled."""
        return self._cache

    @property
    def default_locale(self) -> Locale:
        """The pinned request locale from settings."""
        return Locale(hl=self._settings.pinned_hl, gl=self._settings.pinned_gl)

    # ------------------------------------------------------------------
    # TTLs
    # ------------------------------------------------------------------

    def entity_ttl(self, kind: EntityKind) -> int:
        """Cache lifetime in seconds for a single entity of *kind*."""
        return {
            EntityKind.VIDEO: self._settings.ttl_video,
            EntityKind.CHANNEL: self._settings.ttl_channel_info,
            EntityKind.PLAYLIST: self._settings.ttl_playlist,
        }[kind]

    def collection_ttl(self, kind: CollectionKind) -> int:
        """Cache lifetime in seconds for a collection of *kind*."""
        return {
            CollectionKind.VIDEO_SEARCH: self._settings.ttl_video_search,
            CollectionKind.CHANNEL_SEARCH: self._settings.ttl_channel_search,
            CollectionKind.PLAYLIST_SEARCH: self._settings.ttl_video_search,
            CollectionKind.CHANNEL_VIDEOS: self._settings.ttl_channel_videos,
            CollectionKind.PLAYLIST_VIDEOS: self._settings.ttl_playlist,
            CollectionKind.RELATED_VIDEOS: self._settings.ttl_related_videos,
        }[kind]

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    async def fetch_entity(
        self,
        kind: EntityKind,
        identifier: str,
        locale: Locale | None = None,
    ) -> Entity | None:
        """
        Fetch one entity.

        Parameters
        ----------
        kind : EntityKind
            Entity kind.
        identifier : str
            Video id, channel id (or ``@handle``) or playlist id.
        locale : Locale | None, optional
            Request locale (default: the pinned locale).

        Returns
        -------
        Entity | None
            The entity, or None when nothing recognizable was found.

        Raises
        ------
        NetworkError
            If the page could not be fetched. The engine does not retry.
        """
        identifier = identifier.strip()
        if not identifier:
            logger.warning("Empty %s identifier requested", kind.value)
            return None
        locale = locale or self.default_locale
        key = CacheKey.for_entity(kind, identifier, locale)

        if self._cache is not None:
            cached = self._cache.get(key, ENTITY_TYPES[kind])
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached

        context = ExtractionContext(language=locale.language)
        entity: Entity | None
        if kind is EntityKind.VIDEO:
            entity = await self._extract_video(identifier, locale, context)
        elif kind is EntityKind.CHANNEL:
            entity = await self._extract_channel(identifier, locale, context)
        else:
            entity = await self._extract_playlist(identifier, locale, context)

        if entity is None:
            logger.info("No %s could be resolved for '%s'", kind.value, identifier)
            return None
        if self._cache is not None:
            self._cache.set(key, entity, ttl=self.entity_ttl(kind))
        return entity

    async def require_entity(
        self,
        kind: EntityKind,
        identifier: str,
        locale: Locale | None = None,
    ) -> Entity:
        """
        Like ``fetch_entity`` but raise when nothing was found.

        Raises
        ------
        NotFoundError
            If no entity could be resolved.
        NetworkError
            If the page could not be fetched.
        """
        entity = await self.fetch_entity(kind, identifier, locale)
        if entity is None:
            raise NotFoundError(
                message=f"No {kind.value} found for '{identifier}'",
                kind=kind.value,
                identifier=identifier,
            )
        return entity

    async def fetch_entities(
        self,
        kind: EntityKind,
        identifiers: Sequence[str],
        locale: Locale | None = None,
    ) -> list[Entity | None]:
        """
        Fetch many entities concurrently.

        At most ``max_concurrent_fetches`` requests run at once and each is
        bounded by ``task_timeout``. A failure or timeout yields None for
        that id; the batch itself never fails.

        Parameters
        ----------
        kind : EntityKind
            Entity kind.
        identifiers : Sequence[str]
            Ids to fetch.
        locale : Locale | None, optional
            Request locale.

        Returns
        -------
        list[Entity | None]
            Results aligned with *identifiers*.
        """
        semaphore = asyncio.Semaphore(self._settings.max_concurrent_fetches)
        timeout = self._settings.task_timeout

        async def fetch_one(identifier: str) -> Entity | None:
            async with semaphore:
                try:
                    return await asyncio.wait_for(
                        self.fetch_entity(kind, identifier, locale), timeout=timeout
                    )
                except asyncio.TimeoutError:
                    logger.warning(
                        "Timed out after %.1fs resolving %s '%s'", timeout, kind.value, identifier
                    )
                except TubescopeError as e:
                    logger.warning(
                        "Failed to resolve %s '%s': %s", kind.value, identifier, e.message
                    )
                except Exception:
                    logger.exception("Unexpected error resolving %s '%s'", kind.value, identifier)
                return None

        results = await asyncio.gather(*(fetch_one(i) for i in identifiers))
        resolved = sum(1 for r in results if r is not None)
        logger.info("Resolved %d/%d %s entities", resolved, len(identifiers), kind.value)
        return list(results)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def fetch_collection(
        self,
        kind: CollectionKind,
        identifier: str,
        limit: int | None = None,
        locale: Locale | None = None,
    ) -> list[Entity]:
        """
        Fetch a list of entities: search results, a channel's videos, a
        playlist's videos or the videos related to a video.

        Every item found on the page is cached; *limit* only trims what is
        returned.

        Parameters
        ----------
        kind : CollectionKind
            Collection kind.
        identifier : str
            Search query, channel id (or ``@handle``), playlist id, or the
            video id whose related videos are wanted.
        limit : int | None, optional
            Maximum number of items (default ``default_collection_limit``, or
            ``related_videos_limit`` for related videos).
            Zero or a negative value returns an empty list without fetching.
        locale : Locale | None, optional
            Request locale.

        Returns
        -------
        list[Entity]
            Items in page order; empty when nothing was found.

        Raises
        ------
        NetworkError
            If the page could not be fetched.
        """
        identifier = identifier.strip()
        if not identifier:
            return []
        if limit is None:
            limit = (
                self._settings.related_videos_limit
                if kind is CollectionKind.RELATED_VIDEOS
                else self._settings.default_collection_limit
            )
        if limit <= 0:
            logger.debug("Non-positive limit %d for %s '%s'", limit, kind.value, identifier)
            return []
        locale = locale or self.default_locale
        key = CacheKey.for_collection(kind, identifier, locale)
        item_type = list[ENTITY_TYPES[kind.item_kind]]  # type: ignore[misc]

        if self._cache is not None:
            cached = self._cache.get(key, item_type)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return list(cached[:limit])

        if kind.is_search:
            url = search_url(identifier, kind, locale)
        elif kind is CollectionKind.CHANNEL_VIDEOS:
            url = channel_videos_url(identifier, locale)
        elif kind is CollectionKind.RELATED_VIDEOS:
            url = watch_url(identifier, locale)
        else:
            url = playlist_url(identifier, locale)

        document = await self._fetcher.fetch(url, locale)
        tree = self._locate(document, INITIAL_DATA_MARKERS)
        if tree is None:
            logger.warning("No embedded data for %s '%s'", kind.value, identifier)
            return []

        defaults: dict[str, Any] = {}
        if kind is CollectionKind.CHANNEL_VIDEOS:
            root = JsonTree(tree)
            defaults = {
                "channel_id": identifier if is_channel_id(identifier) else "",
                "channel_title": root.get_str("metadata.channelMetadataRenderer.title"),
            }
            if not defaults["channel_id"]:
                defaults["channel_id"] = root.get_str("metadata.channelMetadataRenderer.externalId")

        source: Any = tree
        renderers: Sequence[str] | None = None
        if kind is CollectionKind.RELATED_VIDEOS:
            # Sidebar results; the whole page when that path is missing
            secondary = JsonTree(tree).node(RELATED_RESULTS_PATH)
            if secondary:
                source = secondary
            renderers = RELATED_RENDERERS

        items = extract_items(
            source,
            kind.item_kind,
            context=ExtractionContext(language=locale.language),
            defaults=defaults,
            renderers=renderers,
        )
        if kind is CollectionKind.RELATED_VIDEOS:
            items = [item for item in items if item.id != identifier]
        if items and self._cache is not None:
            self._cache.set(key, items, ttl=self.collection_ttl(kind))
        return items[:limit]

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    async def enrich(self, entities: Iterable[Entity]) -> list[Entity]:
        """
        Fill authoritative counts from the official statistics API.

        Returns new entities; the inputs are never modified. Without a
        configured client, or when the API fails, the inputs come back
        unchanged.

        Parameters
        ----------
        entities : Iterable[Entity]
            Entities to enrich.

        Returns
        -------
        list[Entity]
            Enriched copies, in input order.
        """
        items = list(entities)
        if self._enrichment is None or not items:
            return items

        channel_ids = [e.id for e in items if isinstance(e, Channel)]
        playlist_ids = [e.id for e in items if isinstance(e, Playlist)]
        video_ids = [e.id for e in items if isinstance(e, Video)]
        try:
            subscribers = (
                await self._enrichment.subscriber_counts(channel_ids) if channel_ids else {}
            )
            totals = (
                await self._enrichment.playlist_item_counts(playlist_ids) if playlist_ids else {}
            )
            likes = await self._enrichment.like_counts(video_ids) if video_ids else {}
        except EnrichmentError as e:
            logger.warning("Official statistics unavailable: %s", e.message)
            return items

        enriched: list[Entity] = []
        for entity in items:
            if isinstance(entity, Channel) and entity.id in subscribers:
                entity = entity.model_copy(update={"subscriber_count": subscribers[entity.id]})
            elif isinstance(entity, Playlist) and entity.id in totals:
                entity = entity.model_copy(update={"video_count": totals[entity.id]})
            elif isinstance(entity, Video) and entity.id in likes:
                entity = entity.model_copy(update={"like_count": likes[entity.id]})
            enriched.append(entity)
        return enriched

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _locate(document: RawDocument, markers: Sequence[str]) -> Any | None:
        try:
            return locate_tree(document.text, markers)
        except MalformedDataError as e:
            logger.warning("Embedded data in %s is malformed: %s", document.url, e.message)
            return None

    async def _extract_video(
        self, video_id: str, locale: Locale, context: ExtractionContext
    ) -> Video | None:
        document = await self._fetcher.fetch(watch_url(video_id, locale), locale)
        tree = {
            PLAYER_RESPONSE_KEY: self._locate(document, PLAYER_RESPONSE_MARKERS),
            INITIAL_DATA_KEY: self._locate(document, INITIAL_DATA_MARKERS),
        }
        video = VIDEO_WALKER.resolve(tree, document.text, id_hint=video_id, context=context)
        if video is None or not self._settings.use_oembed_fallback:
            return video
        if video.title and video.channel_title:
            return video

        try:
            data = await self._fetcher.fetch_json(oembed_url(video.id))
        except TubescopeError as e:
            logger.warning("oEmbed fallback failed for %s: %s", video.id, e.message)
            return video
        if not isinstance(data, dict):
            return video
        update = {}
        if not video.title and isinstance(data.get("title"), str):
            update["title"] = data["title"].strip()
        if not video.channel_title and isinstance(data.get("author_name"), str):
            update["channel_title"] = data["author_name"].strip()
        if update:
            logger.info("Filled %s for %s from oEmbed", sorted(update), video.id)
            video = video.model_copy(update=update)
        return video

    async def _extract_channel(
        self, channel: str, locale: Locale, context: ExtractionContext
    ) -> Channel | None:
        document = await self._fetcher.fetch(channel_url(channel, locale), locale)
        tree = self._locate(document, INITIAL_DATA_MARKERS)
        resolved = CHANNEL_WALKER.resolve(
            tree,
            document.text,
            id_hint=channel if is_channel_id(channel) else "",
            context=context,
        )
        if resolved is None or resolved.description.strip() or not self._settings.fetch_about_page:
            return resolved

        try:
            about = await self._fetcher.fetch(channel_about_url(resolved.id, locale), locale)
        except TubescopeError as e:
            logger.warning("About page unavailable for %s: %s", resolved.id, e.message)
            return resolved
        about_tree = self._locate(about, INITIAL_DATA_MARKERS)
        description = about_description(about_tree) if about_tree is not None else ""
        if description.strip():
            resolved = resolved.model_copy(update={"description": description})
        return resolved

    async def _extract_playlist(
        self, playlist_id: str, locale: Locale, context: ExtractionContext
    ) -> Playlist | None:
        document = await self._fetcher.fetch(playlist_url(playlist_id, locale), locale)
        tree = self._locate(document, INITIAL_DATA_MARKERS)
        return PLAYLIST_WALKER.resolve(tree, document.text, id_hint=playlist_id, context=context)
