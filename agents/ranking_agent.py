# agents/ranking_agent.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import httpx

from app.config import Settings, get_settings
from models.ranking_models import RankingCheck
from services.errors import SearchFailedError, SearchNotConfiguredError
from services.serp_client import demo_search_results, search

logger = logging.getLogger(__name__)

# 上位何件まで順位を調べるか
RANKING_DEPTH = 20
TOP_RESULTS = 10


def normalize_host(url: str) -> str:
    """URL からホスト名を取り出し、先頭の www. を除く。"""
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


async def check_ranking(
    keyword: str,
    target_url: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RankingCheck:
    """
    target_url のドメインが keyword の検索上位 20 件の何位にいるかを調べる。

    Raises:
        ValueError: target_url が URL として不正な場合
        SearchNotConfiguredError: 検索 API キーが未設定の場合
        SearchFailedError: 検索 API が失敗し、デモデータしか得られなかった場合
    """
    settings = settings or get_settings()
    if not settings.brave_search_api_key:
        raise SearchNotConfiguredError("検索API未設定")

    target_host = normalize_host(target_url)
    if not target_host:
        raise ValueError(f"無効なURLです: {target_url}")

    results = await search(keyword, RANKING_DEPTH, settings=settings, client=client)
    if results == demo_search_results(keyword)[:RANKING_DEPTH]:
        logger.warning("[ranking] search failed, demo results are not reported keyword=%s", keyword)
        raise SearchFailedError("検索に失敗しました")

    match = next((r for r in results if normalize_host(r.url) == target_host), None)

    logger.info(
        "[ranking] keyword=%s target_host=%s position=%s",
        keyword,
        target_host,
        match.rank if match else None,
    )

    return RankingCheck(
        keyword=keyword,
        target_url=target_url,
        position=match.rank if match else None,
        matched_url=match.url if match else "",
        matched_title=match.title if match else "",
        checked_at=datetime.now(timezone.utc),
        top_results=results[:TOP_RESULTS],
    )
