"""
Candidate scorer for ambiguous image fields.

When structured lookups fail, a page usually still contains several
``yt3.googleusercontent.com`` / ``yt3.ggpht.com`` image URLs: avatars in
several sizes, the banner in several crops, avatars of other channels.
These helpers collect such URLs from raw text and rank them for a target
role with deterministic, size-token based heuristics.

Scoring for the banner role
---------------------------
- baseline 100 when no other rule applies
- ``+width`` from ``=w<N>`` / ``-w<N>``, capped at 4096
- ``=s<N>``: ``+N/2`` when ``N >= 512``, otherwise ``-200``
- ``+8000`` when the URL contains ``banner``, ``+4000`` for ``fcrop``,
  ``+500`` for ``-no``
- ``+500`` for a large score without a width parameter
- URLs with avatar-only size tokens (``=s48``, ``=s64``, ``=s88``,
  ``=s176``) are rejected

Scoring for the avatar role
---------------------------
- requires an ``=s<N>`` size token; the score is ``N``
- banner-like URLs (``=w``, ``banner``, ``fcrop``) are rejected

Ties are broken by first-seen order.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from tubescope.models.enums import ImageRole
from tubescope.services.extraction.models import Candidate
from tubescope.services.extraction.normalization import unescape_fragment

logger = logging.getLogger(__name__)

# Matches both plain and JSON-escaped (https:\/\/yt3...) image URLs.
_YT3_URL_RE = re.compile(
    r"https?:(?:\\?/){2}yt3\.(?:googleusercontent|ggpht)\.com(?:\\?/)[^\"'\s)<>]+",
    re.IGNORECASE,
)
_WIDTH_RE = re.compile(r"[=-]w(\d+)")
_SIZE_RE = re.compile(r"=s(\d+)")
_AVATAR_ONLY_TOKENS = ("=s48", "=s64", "=s88", "=s176")
_BANNER_HINTS = ("=w", "banner", "fcrop")

_BASELINE = 100
_MAX_WIDTH_BONUS = 4096
_BANNER_KEYWORD_BONUS = 8000
_FCROP_BONUS = 4000
_NO_SUFFIX_BONUS = 500
_LARGE_WITHOUT_WIDTH_BONUS = 500
_SMALL_SIZE_PENALTY = -200


def _has_avatar_only_token(url: str) -> bool:
    for token in _AVATAR_ONLY_TOKENS:
        position = url.find(token)
        # "=s88" must not be the prefix of a larger size such as "=s880".
        if position >= 0:
            after = url[position + len(token) : position + len(token) + 1]
            if not after.isdigit():
                return True
    return False


def _banner_score(url: str) -> int | None:
    if _has_avatar_only_token(url):
        return None

    score = 0
    width = _WIDTH_RE.search(url)
    if width:
        score += min(int(width.group(1)), _MAX_WIDTH_BONUS)

    size = _SIZE_RE.search(url)
    if size:
        value = int(size.group(1))
        score += value // 2 if value >= 512 else _SMALL_SIZE_PENALTY

    lowered = url.lower()
    if "banner" in lowered:
        score += _BANNER_KEYWORD_BONUS
    if "fcrop" in url:
        score += _FCROP_BONUS
    if "-no" in url:
        score += _NO_SUFFIX_BONUS
    if score >= 2000 and "=w" not in url:
        score += _LARGE_WITHOUT_WIDTH_BONUS
    if score == 0:
        score = _BASELINE
    return score


def _avatar_score(url: str) -> int | None:
    lowered = url.lower()
    if any(hint in lowered for hint in _BANNER_HINTS):
        return None
    size = _SIZE_RE.search(url)
    if not size:
        return None
    return int(size.group(1))


def score_candidate(url: str, role: ImageRole) -> int | None:
    """
    Score one URL for *role*.

    Parameters
    ----------
    url : str
        Candidate image URL.
    role : ImageRole
        Target role.

    Returns
    -------
    int | None
        The score, or None when the candidate is rejected for this role.
    """
    if role is ImageRole.BANNER:
        return _banner_score(url)
    return _avatar_score(url)


def rank_candidates(urls: Iterable[str], role: ImageRole) -> list[Candidate]:
    """
    Score and sort candidates, best first.

    Rejected candidates are dropped. The sort is stable, so equal scores
    keep their first-seen order.
    """
    scored: list[Candidate] = []
    for position, url in enumerate(urls):
        score = score_candidate(url, role)
        if score is not None:
            scored.append(Candidate(value=url, score=score, position=position))
    scored.sort(key=lambda candidate: (-candidate.score, candidate.position))
    return scored


def pick_best(urls: Iterable[str], role: ImageRole) -> str | None:
    """
    Return the best candidate for *role*.

    Parameters
    ----------
    urls : Iterable[str]
        Candidate URLs in first-seen order.
    role : ImageRole
        Target role.

    Returns
    -------
    str | None
        The winning URL, or None when every candidate was rejected.

    Examples
    --------
    >>> pick_best(
    ...     [
    ...         "https://yt3.ggpht.com/a=w120",
    ...         "https://yt3.ggpht.com/banner=w800",
    ...         "https://yt3.ggpht.com/a=s48",
    ...     ],
    ...     ImageRole.BANNER,
    ... )
    'https://yt3.ggpht.com/banner=w800'
    """
    ranked = rank_candidates(urls, role)
    if not ranked:
        return None
    if len(ranked) > 1:
        logger.debug(
            "Candidate scores for %s: %s",
            role.value,
            [(c.score, c.value.rsplit("/", 1)[-1][:40]) for c in ranked[:5]],
        )
    return ranked[0].value


def collect_image_candidates(text: str) -> list[str]:
    """
    Collect yt3 image URLs from raw page text.

    JSON escapes are removed and query strings dropped; duplicates are
    removed while keeping first-seen order.

    Parameters
    ----------
    text : str
        Raw page text or a serialized JSON fragment.

    Returns
    -------
    list[str]
        Unique candidate URLs.
    """
    seen: dict[str, None] = {}
    for match in _YT3_URL_RE.finditer(text):
        url = unescape_fragment(match.group(0)).rstrip("\\")
        query = url.find("?")
        if query >= 0:
            url = url[:query]
        seen.setdefault(url, None)
    return list(seen)
