"""
tubescope - Local content extraction for YouTube pages.

Fetches ordinary watch, channel, playlist and search pages, recovers the
embedded JSON data graph, and turns it into normalized, cached video,
channel and playlist records without using the official API.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "tubescope"
__email__ = "noreply@tubescope.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
