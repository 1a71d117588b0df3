"""
CLI interface module for tubescope.

Provides a Typer-based command-line interface for fetching videos, channels,
playlists and search results, and for managing the local cache.
"""

from __future__ import annotations

__all__: list[str] = []
