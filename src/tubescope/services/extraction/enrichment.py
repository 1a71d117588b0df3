"""
Official statistics enrichment.

Some values are intentionally never scraped: subscriber counts differ by
locale and layout, and playlist totals on the page are often truncated.
When an API key is configured, this client reads them from the public
YouTube Data API v3 instead. Nothing in the extraction path depends on it.

Requests are batched (50 ids per call, the API maximum) and read only the
``statistics`` / ``contentDetails`` parts.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence
from urllib.parse import urlencode

from tubescope.exceptions import DecodeError, EnrichmentError, NetworkError
from tubescope.services.extraction.fetcher import DocumentFetcher

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/youtube/v3"

# YouTube API allows max 50 ids per request
BATCH_SIZE = 50


def _batches(ids: Sequence[str], size: int = BATCH_SIZE) -> list[list[str]]:
    unique = list(dict.fromkeys(i for i in ids if i))
    return [unique[start : start + size] for start in range(0, len(unique), size)]


def _as_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class OfficialStatsClient:
    """
    Minimal Data API client for authoritative counts.

    Parameters
    ----------
    api_key : str
        Data API key.
    fetcher : DocumentFetcher | None, optional
        Fetcher used for the HTTP calls (default: a new one).

    Raises
    ------
    ValueError
        If *api_key* is empty.
    """

    def __init__(self, api_key: str, fetcher: DocumentFetcher | None = None) -> None:
        if not api_key:
            raise ValueError("An API key is required for official statistics")
        self._api_key = api_key
        self._fetcher = fetcher or DocumentFetcher()

    def _url(self, resource: str, part: str, ids: list[str]) -> str:
        params = {"part": part, "id": ",".join(ids), "key": self._api_key, "maxResults": BATCH_SIZE}
        return f"{API_BASE_URL}/{resource}?{urlencode(params)}"

    async def _list(self, resource: str, part: str, ids: Sequence[str]) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        for batch in _batches(ids):
            try:
                payload = await self._fetcher.fetch_json(self._url(resource, part, batch))
            except NetworkError as e:
                if e.status_code == 403:
                    raise EnrichmentError(
                        message=f"{resource}.list rejected (quota exceeded or key invalid)",
                        status_code=403,
                    ) from e
                raise EnrichmentError(
                    message=f"{resource}.list failed: {e.message}",
                    status_code=e.status_code,
                ) from e
            except DecodeError as e:
                raise EnrichmentError(
                    message=f"{resource}.list returned an unreadable body: {e.message}"
                ) from e
            if not isinstance(payload, dict):
                raise EnrichmentError(message=f"{resource}.list returned a non-object body")
            batch_items = payload.get("items") or []
            items.extend(item for item in batch_items if isinstance(item, dict))
            logger.debug("%s.list: %d ids -> %d items", resource, len(batch), len(batch_items))
        return items

    async def subscriber_counts(self, channel_ids: Sequence[str]) -> dict[str, int]:
        """
        Fetch subscriber counts.

        Channels that hide their count are omitted.

        Parameters
        ----------
        channel_ids : Sequence[str]
            Channel ids.

        Returns
        -------
        dict[str, int]
            Channel id to subscriber count.

        Raises
        ------
        EnrichmentError
            If the API call fails.
        """
        counts: dict[str, int] = {}
        for item in await self._list("channels", "statistics", channel_ids):
            statistics = item.get("statistics") or {}
            if statistics.get("hiddenSubscriberCount"):
                continue
            count = _as_int(statistics.get("subscriberCount"))
            if count is not None:
                counts[str(item.get("id"))] = count
        return counts

    async def playlist_item_counts(self, playlist_ids: Sequence[str]) -> dict[str, int]:
        """Fetch playlist item totals (``contentDetails.itemCount``)."""
        counts: dict[str, int] = {}
        for item in await self._list("playlists", "contentDetails", playlist_ids):
            count = _as_int((item.get("contentDetails") or {}).get("itemCount"))
            if count is not None:
                counts[str(item.get("id"))] = count
        return counts

    async def like_counts(self, video_ids: Sequence[str]) -> dict[str, int]:
        """Fetch like counts; videos with hidden likes are omitted."""
        counts: dict[str, int] = {}
        for item in await self._list("videos", "statistics", video_ids):
            count = _as_int((item.get("statistics") or {}).get("likeCount"))
            if count is not None:
                counts[str(item.get("id"))] = count
        return counts
