"""
Local content extraction and normalization.

Modules, leaves first:

- ``fetcher``: locale-pinned page fetcher and URL builders
- ``locator``: finds the embedded JSON blob in raw HTML
- ``tree``: never-raising accessor over the parsed JSON
- ``walker``: ordered schema strategies with first-found-wins merging
- ``channel_schema``, ``video_schema``, ``playlist_schema``, ``item_schema``:
  the strategies for each entity kind and for list items
- ``scorer``: ranks ambiguous image candidates
- ``normalization``: view counts, dates, durations and URLs
- ``cache``: TTL cache with disk persistence
- ``session``: stale-result guard
- ``enrichment``: optional official statistics client
- ``engine``: ties the pipeline together
"""

from __future__ import annotations

from tubescope.services.extraction.engine import ExtractionEngine
from tubescope.services.extraction.models import CacheKey, Locale
from tubescope.services.extraction.session import SessionTokens

__all__ = [
    "CacheKey",
    "ExtractionEngine",
    "Locale",
    "SessionTokens",
]
