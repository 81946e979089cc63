# app/graph/workflow.py
from __future__ import annotations

import logging
from typing import Optional

from app.config import Settings, get_settings
from app.graph import nodes
from app.graph.state import GraphState, create_initial_state

logger = logging.getLogger(__name__)


async def run_pipeline(
    keyword: str,
    *,
    target_word_count: Optional[int] = None,
    tone: str = "default",
    settings: Optional[Settings] = None,
) -> GraphState:
    """
    /api/pipeline 用のシンプルな直列ワークフロー。

    analyzer → outline → article → scorer
    """
    settings = settings or get_settings()
    logger.info(
        "[workflow] run_pipeline start keyword=%s target_word_count=%s tone=%s",
        keyword,
        target_word_count,
        tone,
    )

    state = create_initial_state(keyword, target_word_count=target_word_count, tone=tone)

    # 1) 競合分析（検索 API or デモデータ）
    state = await nodes.analyzer_node(state, settings)

    # 2) 構成案（LLM or デモ構成案）
    state = await nodes.outline_node(state, settings)

    # 3) 本文（LLM or デモ記事）
    state = await nodes.article_node(state, settings)

    # 4) SEO スコア
    state = nodes.scorer_node(state)

    logger.info(
        "[workflow] run_pipeline done keyword=%s current_node=%s",
        keyword,
        state.get("current_node"),
    )
    return state
