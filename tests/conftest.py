from __future__ import annotations

from dataclasses import replace

import pytest

from stream_resolver.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    return replace(
        Settings(),
        provider_timeout=1.0,
        directory_timeout=1.0,
        directory_ttl_seconds=3600,
        directory_remote_enabled=True,
        max_candidates=5,
        cache_enabled=True,
        cache_ttl_seconds=300,
        oembed_url="https://oembed.example/oembed",
        gemini_api_key=None,
        piped_instances_url="https://wiki.example/Instances.md",
    )
