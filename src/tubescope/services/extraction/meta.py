"""
HTML ``<meta>`` tag reader.

Pages that fail to embed a usable data blob still carry Open Graph and
schema.org ``itemprop`` meta tags in their ``<head>``. This module reads
them with BeautifulSoup as a last-resort source for titles, images,
descriptions and a few video facts.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Only the document head is parsed; bodies can be several megabytes.
_HEAD_END = "</head>"

_ITEMPROPS = (
    "name",
    "channelId",
    "videoId",
    "identifier",
    "datePublished",
    "uploadDate",
    "interactionCount",
    "duration",
)


def _head(html: str) -> str:
    end = html.find(_HEAD_END)
    return html[: end + len(_HEAD_END)] if end >= 0 else html


def read_meta_tags(html: str) -> dict[str, str]:
    """
    Collect Open Graph, ``name`` and ``itemprop`` meta values.

    Keys are the ``property`` (``og:title``), ``name`` (``description``)
    or ``itemprop`` (``itemprop:channelId``) of each tag. The first tag
    with a given key wins; empty values are skipped.

    Parameters
    ----------
    html : str
        Raw page text.

    Returns
    -------
    dict[str, str]
        Tag key to content.
    """
    if not html:
        return {}
    soup = BeautifulSoup(_head(html), "html.parser")
    found: dict[str, str] = {}

    for tag in soup.find_all("meta"):
        content = (tag.get("content") or "").strip()
        if not content:
            continue
        prop = tag.get("property") or tag.get("name")
        if prop:
            found.setdefault(str(prop), content)
        itemprop = tag.get("itemprop")
        if itemprop in _ITEMPROPS:
            found.setdefault(f"itemprop:{itemprop}", content)

    # <link itemprop="name" content="Channel"> inside the author block
    for link in soup.find_all("link", attrs={"itemprop": "name"}):
        content = (link.get("content") or "").strip()
        if content:
            found.setdefault("itemprop:author", content)
            break

    logger.debug("Read %d meta tags", len(found))
    return found
