"""
Pytest fixtures for extraction service unit tests.

This module provides shared builders for testing the extraction pipeline,
including:
- Page builders that embed ``ytInitialData`` / ``ytInitialPlayerResponse``
- Factory functions for the renderer shapes the schemas read
- A routing stub fetcher that records every request
- Real ``httpx.Response`` objects for fetcher tests

The renderer factories return dictionaries with realistic defaults; pass
keyword overrides to change or blank out individual fields.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from tests.factories.entity_factory import TestIds
from tubescope.exceptions import NetworkError
from tubescope.services.extraction.models import Locale, RawDocument

ACME_BANNER_URL = (
    "https://yt3.googleusercontent.com/acme-banner=w2120-fcrop64=1,00005a57ffffa5a8-k-c0xffffffff-no-nd-rj"
)

# ============================================================================
# Page builders
# ============================================================================


def make_page(
    initial_data: dict[str, Any] | None = None,
    player_response: dict[str, Any] | None = None,
    head: str = "",
    body: str = "",
) -> str:
    """
    Build a page embedding the given blobs the way the site does.

    Parameters
    ----------
    initial_data : dict[str, Any] | None
        Emitted as ``var ytInitialData = {...};``.
    player_response : dict[str, Any] | None
        Emitted as ``var ytInitialPlayerResponse = {...};``.
    head : str
        Extra markup for the ``<head>`` (meta tags).
    body : str
        Extra markup for the ``<body>``.

    Returns
    -------
    str
        The page HTML.
    """
    scripts = []
    if player_response is not None:
        scripts.append(
            f"<script>var ytInitialPlayerResponse = {json.dumps(player_response)};</script>"
        )
    if initial_data is not None:
        scripts.append(f"<script>var ytInitialData = {json.dumps(initial_data)};</script>")
    return (
        f"<html><head><title>YouTube</title>{head}</head><body>"
        f"{''.join(scripts)}{body}</body></html>"
    )


def text_runs(*parts: str) -> dict[str, Any]:
    """Text object in ``runs`` form."""
    return {"runs": [{"text": part} for part in parts]}


def thumbnails(*urls: str) -> dict[str, Any]:
    """Image object in ``thumbnails`` form, smallest first."""
    return {"thumbnails": [{"url": url} for url in urls]}


# ============================================================================
# Renderer factories
# ============================================================================


def make_channel_header(**overrides: Any) -> dict[str, Any]:
    """
    Create a ``channelHeaderRenderer`` body.

    Examples
    --------
    >>> make_channel_header(title={"simpleText": "Other"}, avatar=None)
    """
    defaults: dict[str, Any] = {
        "channelId": TestIds.ACME_CHANNEL,
        "title": {"simpleText": "Acme"},
        "channelHandleText": text_runs("@acme"),
        "avatar": thumbnails(
            "https://yt3.ggpht.com/acme-avatar=s48-c-k-no",
            "https://yt3.ggpht.com/acme-avatar=s176-c-k-no",
        ),
        "banner": thumbnails(
            "https://yt3.ggpht.com/acme-banner=w1060-fcrop64=1,00005a57ffffa5a8-k-c0xffffffff-no-nd-rj",
        ),
        "videosCountText": text_runs("42", " videos"),
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def make_channel_metadata(**overrides: Any) -> dict[str, Any]:
    """Create a ``channelMetadataRenderer`` body."""
    defaults: dict[str, Any] = {
        "externalId": TestIds.ACME_CHANNEL,
        "title": "Acme",
        "description": "Anvils and rockets.",
        "vanityChannelUrl": "http://www.youtube.com/@acme",
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def make_video_details(**overrides: Any) -> dict[str, Any]:
    """Create a ``videoDetails`` body for a player response."""
    defaults: dict[str, Any] = {
        "videoId": TestIds.TEST_VIDEO_1,
        "title": "Never Gonna Give You Up",
        "shortDescription": "The official video.",
        "channelId": TestIds.ACME_CHANNEL,
        "author": "Acme",
        "lengthSeconds": "213",
        "viewCount": "1234567",
        "thumbnail": thumbnails(
            "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg",
            "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg?sqp=abc",
        ),
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def make_video_renderer(**overrides: Any) -> dict[str, Any]:
    """Create a search-result ``videoRenderer`` body."""
    defaults: dict[str, Any] = {
        "videoId": TestIds.TEST_VIDEO_1,
        "title": text_runs("Never Gonna Give You Up"),
        "ownerText": {
            "runs": [
                {
                    "text": "Acme",
                    "navigationEndpoint": {
                        "browseEndpoint": {"browseId": TestIds.ACME_CHANNEL}
                    },
                }
            ]
        },
        "thumbnail": thumbnails("https://i.ytimg.com/vi/dQw4w9WgXcQ/hq720.jpg"),
        "lengthText": {"simpleText": "3:33"},
        "viewCountText": {"simpleText": "1,234,567 views"},
        "publishedTimeText": {"simpleText": "3 days ago"},
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def make_channel_renderer(**overrides: Any) -> dict[str, Any]:
    """Create a search-result ``channelRenderer`` body."""
    defaults: dict[str, Any] = {
        "channelId": TestIds.ACME_CHANNEL,
        "title": {"simpleText": "Acme"},
        "descriptionSnippet": text_runs("Anvils and rockets."),
        "thumbnail": thumbnails("//yt3.ggpht.com/acme-avatar=s88-c-k-no"),
        "subscriberCountText": {"simpleText": "@acme"},
        "videoCountText": {"simpleText": "1.2M subscribers"},
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def make_playlist_renderer(**overrides: Any) -> dict[str, Any]:
    """Create a search-result ``playlistRenderer`` body."""
    defaults: dict[str, Any] = {
        "playlistId": TestIds.TEST_PLAYLIST,
        "title": {"simpleText": "Acme Classics"},
        "thumbnails": [thumbnails("https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg")],
        "videoCount": "12",
        "shortBylineText": {
            "runs": [
                {
                    "text": "Acme",
                    "navigationEndpoint": {
                        "browseEndpoint": {"browseId": TestIds.ACME_CHANNEL}
                    },
                }
            ]
        },
    }
    defaults.update(overrides)
    return {key: value for key, value in defaults.items() if value is not None}


def search_results(*renderers: tuple[str, dict[str, Any]]) -> dict[str, Any]:
    """Wrap item renderers in the search page's section layout."""
    return {
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [
                            {
                                "itemSectionRenderer": {
                                    "contents": [{key: body} for key, body in renderers]
                                }
                            }
                        ]
                    }
                }
            }
        }
    }


# ============================================================================
# Fetcher doubles
# ============================================================================


class StubFetcher:
    """
    Routing fetcher double.

    ``routes`` maps a URL fragment to a page body (or to a JSON value for
    ``fetch_json``). The longest fragment contained in the requested URL
    wins; an unrouted URL raises ``NetworkError`` with status 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[str] = []

    def _route(self, url: str) -> Any:
        self.calls.append(url)
        matches = [fragment for fragment in self.routes if fragment in url]
        if not matches:
            raise NetworkError(message="HTTP 404", status_code=404, url=url)
        return self.routes[max(matches, key=len)]

    async def fetch(self, url: str, locale: Locale) -> RawDocument:
        body = self._route(url)
        if isinstance(body, Exception):
            raise body
        return RawDocument(url=url, text=body, locale=locale)

    async def fetch_json(self, url: str, headers: dict[str, str] | None = None) -> Any:
        body = self._route(url)
        if isinstance(body, Exception):
            raise body
        return body


def make_response(
    text: str = "",
    status_code: int = 200,
    url: str = "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Create a real ``httpx.Response`` bound to a GET request."""
    return httpx.Response(
        status_code,
        text=text,
        headers=headers,
        request=httpx.Request("GET", url),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def acme_channel_page() -> str:
    """Channel page whose only header is a ``channelHeaderRenderer`` without avatar."""
    return make_page(
        initial_data={
            "header": {
                "channelHeaderRenderer": {
                    "channelId": TestIds.ACME_CHANNEL,
                    "title": {"simpleText": "Acme"},
                }
            }
        }
    )


@pytest.fixture
def acme_banner_page() -> str:
    """Channel page with a ``channelHeaderRenderer`` carrying a banner but no avatar."""
    return make_page(
        initial_data={
            "header": {
                "channelHeaderRenderer": {
                    "channelId": TestIds.ACME_CHANNEL,
                    "title": {"simpleText": "Acme"},
                    "banner": thumbnails(ACME_BANNER_URL),
                }
            }
        }
    )


@pytest.fixture
def watch_page() -> str:
    """Watch page with both blobs populated."""
    return make_page(
        player_response={
            "videoDetails": make_video_details(),
            "microformat": {
                "playerMicroformatRenderer": {
                    "publishDate": "2009-10-24",
                    "ownerChannelName": "Acme",
                }
            },
        },
        initial_data={
            "contents": {
                "twoColumnWatchNextResults": {
                    "results": {
                        "results": {
                            "contents": [
                                {
                                    "videoPrimaryInfoRenderer": {
                                        "title": text_runs("Never Gonna Give You Up"),
                                        "dateText": {"simpleText": "Oct 24, 2009"},
                                    }
                                },
                                {
                                    "videoSecondaryInfoRenderer": {
                                        "owner": {
                                            "videoOwnerRenderer": {
                                                "title": text_runs("Acme"),
                                                "thumbnail": thumbnails(
                                                    "https://yt3.ggpht.com/acme-avatar=s48-c-k-no"
                                                ),
                                            }
                                        }
                                    }
                                },
                            ]
                        }
                    }
                }
            }
        },
    )


@pytest.fixture
def stub_fetcher() -> StubFetcher:
    """An empty routing fetcher; tests add their routes."""
    return StubFetcher()
