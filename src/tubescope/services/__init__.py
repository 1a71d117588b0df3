"""
Service layer for tubescope.

The extraction engine and its building blocks live in
``tubescope.services.extraction``.
"""

from __future__ import annotations

__all__: list[str] = []
