# tests/conftest.py
from __future__ import annotations

import pytest

from app.config import Settings


def make_settings(**overrides) -> Settings:
    """.env や環境変数の API キーに影響されない Settings を作る。"""
    values = {
        "brave_search_api_key": None,
        "openai_api_key": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def offline_settings() -> Settings:
    return make_settings()


@pytest.fixture
def live_settings() -> Settings:
    return make_settings(
        brave_search_api_key="test-key",
        brave_search_url="https://search.test/web",
        fetch_timeout=0.2,
    )
