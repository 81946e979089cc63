# tests/test_serp_client.py
import asyncio

import httpx
import pytest

from services.serp_client import demo_search_results, is_demo_results, search
from tests.conftest import make_settings


def _brave_items(start: int, n: int) -> list[dict]:
    return [
        {
            "title": f"記事{i}",
            "url": f"https://site{i}.test/article",
            "description": f"説明{i}",
        }
        for i in range(start, start + n)
    ]


def test_fallback_without_credentials_is_deterministic(offline_settings):
    first = asyncio.run(search("SEO 対策", 10, settings=offline_settings))
    second = asyncio.run(search("SEO 対策", 10, settings=offline_settings))

    assert [r.model_dump_json() for r in first] == [r.model_dump_json() for r in second]
    assert len(first) == 5
    assert [r.rank for r in first] == [1, 2, 3, 4, 5]
    assert all("SEO 対策" in r.title for r in first)
    assert is_demo_results(first)


def test_fallback_is_truncated_to_count(offline_settings):
    results = asyncio.run(search("SEO", 3, settings=offline_settings))

    assert results == demo_search_results("SEO")[:3]


def test_results_are_parsed_from_brave_response(live_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"web": {"results": _brave_items(1, 3)}})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await search("SEO", 10, settings=live_settings, client=client)

    results = asyncio.run(run())

    assert [(r.rank, r.title, r.url, r.snippet) for r in results] == [
        (1, "記事1", "https://site1.test/article", "説明1"),
        (2, "記事2", "https://site2.test/article", "説明2"),
        (3, "記事3", "https://site3.test/article", "説明3"),
    ]
    assert not is_demo_results(results)
    request = seen[0]
    assert request.headers["X-Subscription-Token"] == "test-key"
    assert request.url.params["q"] == "SEO"
    assert request.url.params["country"] == "jp"


def test_non_2xx_response_falls_back_to_demo(live_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited"))

    async def run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await search("SEO", 10, settings=live_settings, client=client)

    assert asyncio.run(run()) == demo_search_results("SEO")


def test_network_error_falls_back_to_demo(live_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await search("SEO", 10, settings=live_settings, client=client)

    assert asyncio.run(run()) == demo_search_results("SEO")


def test_malformed_json_falls_back_to_demo(live_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))

    async def run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await search("SEO", 10, settings=live_settings, client=client)

    assert asyncio.run(run()) == demo_search_results("SEO")


@pytest.mark.parametrize(
    "body",
    [
        {"web": {"results": [None]}},
        {"web": {"results": [{"title": "ok", "url": "https://a.test/"}, "x"]}},
        {"web": "x"},
        {"web": {"results": "x"}},
        ["not", "an", "object"],
    ],
)
def test_unexpected_response_shape_falls_back_to_demo(live_settings, body):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))

    async def run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await search("SEO", 10, settings=live_settings, client=client)

    assert asyncio.run(run()) == demo_search_results("SEO")


def test_pages_are_requested_sequentially_and_concatenated():
    settings = make_settings(
        brave_search_api_key="test-key",
        brave_search_url="https://search.test/web",
        search_page_size=10,
    )
    in_flight = 0
    max_in_flight = 0
    offsets = []

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, max_in_flight
        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1

        offset = int(request.url.params["offset"])
        count = int(request.url.params["count"])
        offsets.append((offset, count))
        return httpx.Response(
            200, json={"web": {"results": _brave_items(offset * 10 + 1, count)}}
        )

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await search("SEO", 25, settings=settings, client=client)

    results = asyncio.run(run())

    assert offsets == [(0, 10), (1, 10), (2, 5)]
    assert max_in_flight == 1
    assert [r.rank for r in results] == list(range(1, 26))
    assert [r.title for r in results] == [f"記事{i}" for i in range(1, 26)]


def test_short_page_stops_pagination():
    settings = make_settings(
        brave_search_api_key="test-key",
        brave_search_url="https://search.test/web",
        search_page_size=10,
    )
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"web": {"results": _brave_items(1, 4)}})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await search("SEO", 20, settings=settings, client=client)

    results = asyncio.run(run())

    assert len(calls) == 1
    assert len(results) == 4
