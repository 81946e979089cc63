# agents/parser_agent.py

import asyncio
import logging

import httpx

from app.config import Settings
from models.site_models import ParsedPage
from services.crawler import fetch_html
from services.html_parser import parse_html

logger = logging.getLogger(__name__)


async def analyze_page(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
) -> ParsedPage:
    """
    URL の HTML を取得し、見出しと文字数を抽出する。
    取得に失敗した URL は空の結果（文字数 0・見出しなし）を返し、
    他のページの処理は止めない。
    """
    try:
        logger.info("[parser_agent] Fetching HTML: %s", url)
        html = await fetch_html(
            client,
            url,
            timeout=settings.fetch_timeout,
            user_agent=settings.fetch_user_agent,
        )
    except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
        logger.warning("[parser_agent] Error for %s: %r", url, e)
        return ParsedPage()

    page = parse_html(html)
    logger.info(
        "[parser_agent] Parsed successfully: %s (words=%s headings=%s)",
        url,
        page.word_count,
        len(page.headings),
    )
    return page
