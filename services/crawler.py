# services/crawler.py

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def fetch_html(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float,
    user_agent: str,
) -> str:
    """
    単純な GET だけのクロール。
    timeout はリクエスト全体（接続〜本文受信）に対する上限。
    タイムアウト・非 2xx・通信エラーはそのまま例外として呼び出し側に返す。
    """
    headers = {"User-Agent": user_agent}

    async def _get() -> str:
        resp = await client.get(url, headers=headers, timeout=timeout, follow_redirects=True)
        resp.raise_for_status()
        return resp.text

    return await asyncio.wait_for(_get(), timeout=timeout)


async def gather_in_batches(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    batch_size: int,
) -> List[R]:
    """
    items を batch_size 件ずつのバッチに分けて func を並行実行する。

    - バッチ内は asyncio.gather で同時実行
    - 前のバッチが全て終わるまで次のバッチは始めない（同時接続数の上限）
    - 戻り値の i 番目は必ず items の i 番目に対応する（完了順ではない）

    func 側の例外はそのまま伝播するので、1 件の失敗を握りつぶしたい場合は
    func 内でフォールバック値を返すこと。
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    results: List[R] = []
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        logger.debug(
            "[crawler] batch start offset=%d size=%d", start, len(batch)
        )
        results.extend(await asyncio.gather(*(func(item) for item in batch)))
    return results
