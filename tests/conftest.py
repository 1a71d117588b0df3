"""
Pytest configuration and fixtures for tubescope tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tubescope.config.settings import Settings


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings isolated from the environment.

    Caching goes to a per-test directory, the supplementary fallbacks are
    off and no API key is configured, so a test only ever performs the
    requests it mocks.
    """
    return Settings(
        cache_enabled=True,
        cache_dir=tmp_path / "cache",
        fetch_about_page=False,
        use_oembed_fallback=False,
        youtube_api_key="",
        max_concurrent_fetches=4,
        task_timeout=5.0,
    )


@pytest.fixture
def uncached_settings(test_settings: Settings) -> Settings:
    """Like ``test_settings`` but with the cache disabled."""
    return test_settings.model_copy(update={"cache_enabled": False})
