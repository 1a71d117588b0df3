"""
Document fetcher.

Issues a single HTTP GET for a page with fixed, locale-pinned headers and
returns the decoded body. Every request carries the same User-Agent,
``Accept-Language`` and consent/``PREF`` cookie so that responses for the
same locale stay comparable across runs.

No retry logic lives here; callers decide whether and how to retry.

Functions
---------
watch_url, channel_url, channel_about_url, channel_videos_url,
playlist_url, search_url, oembed_url
    URL builders for the pages the engine reads.

Classes
-------
DocumentFetcher
    Async fetcher built on ``httpx.AsyncClient``.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from tubescope.config.settings import Settings, settings as default_settings
from tubescope.exceptions import DecodeError, NetworkError
from tubescope.models.enums import CollectionKind
from tubescope.services.extraction.models import Locale, RawDocument

logger = logging.getLogger(__name__)

BASE_URL = "https://www.youtube.com"

# Result-type filters for the search page ("sp" parameter).
_SEARCH_FILTERS: dict[CollectionKind, str] = {
    CollectionKind.VIDEO_SEARCH: "EgIQAQ==",
    CollectionKind.CHANNEL_SEARCH: "EgIQAg==",
    CollectionKind.PLAYLIST_SEARCH: "EgIQAw==",
}

_ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


# ---------------------------------------------------------------------------
# URL builders
# ---------------------------------------------------------------------------


def _locale_params(locale: Locale) -> dict[str, str]:
    return {"hl": locale.hl, "persist_hl": "1", "gl": locale.gl, "persist_gl": "1"}


def watch_url(video_id: str, locale: Locale) -> str:
    """Watch page URL for a video."""
    params = {"v": video_id, **_locale_params(locale), "bpctr": "9999999999"}
    return f"{BASE_URL}/watch?{urlencode(params)}"


def _channel_path(channel: str) -> str:
    # Handles ("@name") have their own path form.
    if channel.startswith("@"):
        return f"{BASE_URL}/{quote(channel, safe='@')}"
    return f"{BASE_URL}/channel/{quote(channel)}"


def channel_url(channel: str, locale: Locale) -> str:
    """Channel home page URL for a channel id or ``@handle``."""
    return f"{_channel_path(channel)}?{urlencode(_locale_params(locale))}"


def channel_about_url(channel: str, locale: Locale) -> str:
    """Channel "about" tab URL."""
    return f"{_channel_path(channel)}/about?{urlencode(_locale_params(locale))}"


def channel_videos_url(channel: str, locale: Locale) -> str:
    """Channel "videos" tab URL."""
    return f"{_channel_path(channel)}/videos?{urlencode(_locale_params(locale))}"


def playlist_url(playlist_id: str, locale: Locale) -> str:
    """Playlist page URL."""
    params = {"list": playlist_id, **_locale_params(locale)}
    return f"{BASE_URL}/playlist?{urlencode(params)}"


def search_url(query: str, kind: CollectionKind, locale: Locale) -> str:
    """
    Search results page URL filtered to one result type.

    Parameters
    ----------
    query : str
        Free-text query.
    kind : CollectionKind
        One of the ``*_SEARCH`` kinds.
    locale : Locale
        Request locale.

    Returns
    -------
    str
        The URL.

    Raises
    ------
    ValueError
        If *kind* is not a search kind.
    """
    if kind not in _SEARCH_FILTERS:
        raise ValueError(f"Not a search collection: {kind.value}")
    params = {"search_query": query, "sp": _SEARCH_FILTERS[kind], **_locale_params(locale)}
    return f"{BASE_URL}/results?{urlencode(params)}"


def oembed_url(video_id: str) -> str:
    """Public oEmbed endpoint URL for a video."""
    target = f"{BASE_URL}/watch?v={video_id}"
    return f"{BASE_URL}/oembed?{urlencode({'url': target, 'format': 'json'})}"


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class DocumentFetcher:
    """
    Fetch pages with fixed, locale-pinned headers.

    Parameters
    ----------
    config : Settings | None, optional
        Settings supplying the User-Agent, ``Accept-Language`` and timeout
        (default: the global settings).
    client : httpx.AsyncClient | None, optional
        Shared client to reuse. When omitted, each request opens and closes
        its own client.

    Examples
    --------
    >>> fetcher = DocumentFetcher()
    >>> document = await fetcher.fetch(watch_url("dQw4w9WgXcQ", Locale()), Locale())
    """

    def __init__(
        self,
        config: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = config or default_settings
        self._client = client

    def headers_for(self, locale: Locale) -> dict[str, str]:
        """
        Build the request headers for *locale*.

        Parameters
        ----------
        locale : Locale
            Request locale; it sets the ``PREF`` cookie.

        Returns
        -------
        dict[str, str]
            Header mapping.
        """
        return {
            "User-Agent": self._settings.user_agent,
            "Accept": _ACCEPT_HTML,
            "Accept-Language": self._settings.accept_language,
            "Cookie": f"SOCS=CAI; CONSENT=YES+; PREF=hl={locale.hl}&gl={locale.gl}",
        }

    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        timeout = self._settings.request_timeout
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, timeout=timeout, headers=headers, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(url, timeout=timeout, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Timed out after %.1fs fetching %s", timeout, url)
            raise NetworkError(
                message=f"Request timed out after {timeout:.1f}s",
                original_error=e,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Transport error fetching %s: %s", url, type(e).__name__)
            raise NetworkError(
                message=f"Transport error: {type(e).__name__}: {e}",
                original_error=e,
                url=url,
            ) from e

        if not 200 <= response.status_code < 300:
            logger.warning("HTTP %d fetching %s", response.status_code, url)
            raise NetworkError(
                message=f"HTTP {response.status_code}",
                status_code=response.status_code,
                url=url,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> str:
        encoding = response.charset_encoding or "utf-8"
        try:
            return response.content.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise DecodeError(
                message=f"Response body is not valid {encoding} text",
                key=url,
            ) from e

    async def fetch(self, url: str, locale: Locale) -> RawDocument:
        """
        Fetch one page.

        Parameters
        ----------
        url : str
            Page URL (see the URL builders in this module).
        locale : Locale
            Locale the page is requested with.

        Returns
        -------
        RawDocument
            The decoded body and the locale.

        Raises
        ------
        NetworkError
            On a non-2xx status, transport failure or timeout.
        DecodeError
            If the body cannot be decoded as text.
        """
        response = await self._get(url, self.headers_for(locale))
        text = self._decode(response, url)
        logger.debug("Fetched %s (%d chars)", url, len(text))
        return RawDocument(url=url, text=text, locale=locale)

    async def fetch_json(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """
        Fetch a JSON endpoint.

        Parameters
        ----------
        url : str
            Endpoint URL.
        headers : dict[str, str] | None, optional
            Extra headers; the pinned User-Agent is always sent.

        Returns
        -------
        Any
            The decoded JSON body.

        Raises
        ------
        NetworkError
            On a non-2xx status, transport failure or timeout.
        DecodeError
            If the body is not valid JSON.
        """
        merged = {"User-Agent": self._settings.user_agent, "Accept": "application/json"}
        if headers:
            merged.update(headers)
        response = await self._get(url, merged)
        try:
            return json.loads(self._decode(response, url))
        except ValueError as e:
            raise DecodeError(message="Response body is not valid JSON", key=url) from e
