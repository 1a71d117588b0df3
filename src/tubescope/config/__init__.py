"""
Configuration management module for tubescope.

Handles application settings, environment variables, cache locations,
per-kind cache lifetimes and fetch limits.
"""

from __future__ import annotations

__all__: list[str] = []
