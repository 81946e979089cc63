# services/serp_client.py
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from app.config import Settings, get_settings
from models.serp_models import SerpResult

logger = logging.getLogger(__name__)

# デモ用の URL。これで始まる結果はフォールバックとみなす
DEMO_URL_PREFIX = "https://example.com"

SEARCH_TIMEOUT = 10.0


# ------------------------------------------------------------------
# デモデータ（API キー未設定 / API エラー時）
# ------------------------------------------------------------------
def demo_search_results(keyword: str) -> List[SerpResult]:
    """
    API が使えないときの固定 5 件。
    同じ keyword なら毎回まったく同じ内容を返す（乱数は使わない）。
    """
    rows = [
        (
            f"【2026年最新】{keyword}の完全ガイド｜初心者が今すぐやるべきこと",
            f"{keyword}について初心者向けに基本から解説。",
        ),
        (
            f"{keyword}とは？基本から実践まで徹底解説",
            f"{keyword}の基本を網羅的に解説します。",
        ),
        (
            f"初心者でもできる{keyword}15選｜無料ツールも紹介",
            f"{keyword}の具体的な方法を15個紹介。",
        ),
        (
            f"{keyword}で最初にやるべき7つのこと【保存版】",
            f"{keyword}の優先順位を解説。",
        ),
        (
            f"{keyword}の基本と効果が出るまでの期間",
            f"{keyword}の効果と期間について。",
        ),
    ]
    return [
        SerpResult(
            rank=rank,
            title=title,
            url=f"{DEMO_URL_PREFIX}/{rank}",
            snippet=snippet,
        )
        for rank, (title, snippet) in enumerate(rows, start=1)
    ]


def is_demo_results(results: List[SerpResult]) -> bool:
    """search() の結果がデモデータかどうかを URL で判定する。"""
    return any(r.url.startswith(DEMO_URL_PREFIX) for r in results)


# ------------------------------------------------------------------
# Brave Search API
# ------------------------------------------------------------------
async def _fetch_page(
    client: httpx.AsyncClient,
    settings: Settings,
    keyword: str,
    count: int,
    offset: int,
) -> List[dict]:
    """Brave Search を 1 ページ分だけ叩いて web.results を返す。"""
    params = {
        "q": keyword,
        "count": count,
        "country": settings.search_country,
        "offset": offset,
    }
    headers = {
        "Accept": "application/json",
        "X-Subscription-Token": settings.brave_search_api_key or "",
    }

    logger.info("[brave] Request start: keyword=%s count=%s offset=%s", keyword, count, offset)

    resp = await client.get(
        settings.brave_search_url,
        params=params,
        headers=headers,
        timeout=SEARCH_TIMEOUT,
    )
    if resp.status_code >= 400:
        logger.error(
            "[brave] Non-2xx status: %s body=%s",
            resp.status_code,
            resp.text[:2000],
        )
    resp.raise_for_status()

    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError("unexpected response body")
    web = data.get("web") or {}
    if not isinstance(web, dict):
        raise ValueError("web is not an object")
    items = web.get("results") or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValueError("web.results is not a list of objects")
    return items


async def _search_brave(
    client: httpx.AsyncClient,
    settings: Settings,
    keyword: str,
    count: int,
) -> List[SerpResult]:
    """
    必要件数がページサイズを超える場合は、ページを 1 つずつ順番に取得する
    （プロバイダのページサイズ上限を守るため並列にはしない）。
    """
    page_size = max(1, settings.search_page_size)
    raw_items: List[dict] = []
    offset = 0

    while len(raw_items) < count:
        want = min(page_size, count - len(raw_items))
        items = await _fetch_page(client, settings, keyword, want, offset)
        raw_items.extend(items)
        if len(items) < want:
            # これ以上の結果は無い
            break
        offset += 1

    results: List[SerpResult] = []
    for rank, item in enumerate(raw_items[:count], start=1):
        results.append(
            SerpResult(
                rank=rank,
                title=item.get("title", "") or "",
                url=item.get("url", "") or "",
                snippet=item.get("description", "") or "",
            )
        )

    logger.info("[brave] Parsed results count=%s", len(results))
    return results


async def search(
    keyword: str,
    count: int = 10,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SerpResult]:
    """
    keyword の検索上位を rank 順で最大 count 件返す。

    - API キー未設定・非 2xx・通信エラー時はデモデータを返す（例外は投げない）
    - client を渡した場合はそれを使い回す（テストでは MockTransport を差し込む）
    """
    settings = settings or get_settings()

    if not settings.brave_search_api_key:
        logger.warning("[brave] api_key is not set. demo results used keyword=%s", keyword)
        return demo_search_results(keyword)[:count]

    try:
        if client is not None:
            return await _search_brave(client, settings, keyword, count)
        async with httpx.AsyncClient() as own_client:
            return await _search_brave(own_client, settings, keyword, count)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[brave] search failed, demo results used: %s", e)
        return demo_search_results(keyword)[:count]
