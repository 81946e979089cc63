# tests/test_ranking.py
import asyncio

import httpx
import pytest

from agents.ranking_agent import check_ranking, normalize_host
from services.errors import SearchFailedError, SearchNotConfiguredError


def _client(urls):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"web": {"results": [{"title": f"記事{i}", "url": u} for i, u in enumerate(urls, 1)]}},
        )

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_normalize_host_strips_www():
    assert normalize_host("https://www.Example.jp/path?q=1") == "example.jp"
    assert normalize_host("https://blog.example.jp/") == "blog.example.jp"
    assert normalize_host("not a url") == ""


def test_position_is_first_matching_domain(live_settings):
    urls = [f"https://site{i}.test/" for i in range(1, 13)] + ["https://www.mine.test/a", "https://mine.test/b"]

    async def run():
        async with _client(urls) as client:
            return await check_ranking("SEO", "https://mine.test/", settings=live_settings, client=client)

    check = asyncio.run(run())

    assert check.position == 13
    assert check.matched_url == "https://www.mine.test/a"
    assert check.matched_title == "記事13"
    assert [r.rank for r in check.top_results] == list(range(1, 11))


def test_position_is_none_when_not_ranked(live_settings):
    async def run():
        async with _client(["https://other.test/"]) as client:
            return await check_ranking("SEO", "https://mine.test/", settings=live_settings, client=client)

    check = asyncio.run(run())

    assert check.position is None
    assert check.matched_url == ""


def test_invalid_target_url_is_rejected(live_settings):
    with pytest.raises(ValueError):
        asyncio.run(check_ranking("SEO", "mine", settings=live_settings))


def test_requires_search_api_key(offline_settings):
    with pytest.raises(SearchNotConfiguredError):
        asyncio.run(check_ranking("SEO", "https://mine.test/", settings=offline_settings))


def test_provider_failure_is_not_reported_as_ranking(live_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="error"))

    async def run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await check_ranking("SEO", "https://example.com/", settings=live_settings, client=client)

    with pytest.raises(SearchFailedError):
        asyncio.run(run())


def test_empty_results_are_a_valid_check(live_settings):
    async def run():
        async with _client([]) as client:
            return await check_ranking("SEO", "https://mine.test/", settings=live_settings, client=client)

    check = asyncio.run(run())

    assert check.position is None
    assert check.top_results == []
