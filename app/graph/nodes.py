# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from agents.analyzer_agent import CompetitorAnalyzer
from agents.article_agent import generate_article
from agents.outline_agent import generate_outline
from app.config import Settings
from app.graph.state import GraphState
from models.analysis_models import AnalysisResult
from models.article_models import GeneratedArticle

logger = logging.getLogger(__name__)


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Analyzer ノード ----------


async def analyzer_node(state: GraphState, settings: Settings) -> GraphState:
    """
    Analyzer ノード:
    keyword の検索上位を取得・解析し、AnalysisResult を state に詰める。
    """
    state = _log_progress(state, "analyzer", "start: analyzing competitors")

    analysis = await CompetitorAnalyzer(settings).analyze(state["keyword"])
    state["analysis"] = analysis

    if state.get("target_word_count") is None:
        state["target_word_count"] = analysis.recommended_word_count

    state = _log_progress(
        state,
        "analyzer",
        f"done: {len(analysis.competitors)} competitors, avg_word_count={analysis.avg_word_count}",
    )
    return state


# ---------- Outline ノード ----------


async def outline_node(state: GraphState, settings: Settings) -> GraphState:
    state = _log_progress(state, "outline", "start: generating outline")

    analysis: AnalysisResult = state["analysis"]
    outline = await generate_outline(state["keyword"], analysis, settings=settings)
    state["outline"] = outline

    state = _log_progress(state, "outline", f"done: {len(outline)} items")
    return state


# ---------- Article ノード ----------


async def article_node(state: GraphState, settings: Settings) -> GraphState:
    state = _log_progress(state, "article", "start: generating article")

    analysis: AnalysisResult = state["analysis"]
    article = await generate_article(
        state["keyword"],
        state["outline"],
        analysis.cooccurrence,
        state["target_word_count"],
        tone=state.get("tone") or "default",
        settings=settings,
    )
    state["article"] = article

    state = _log_progress(state, "article", f"done: word_count={article.word_count}")
    return state


# ---------- Scorer ノード ----------


def scorer_node(state: GraphState) -> GraphState:
    """
    Scorer ノード:
    generate_article が記事と同じ共起語表・目標文字数で付けたスコアを
    state に載せ、サブスコアの内訳をログに残す。
    """
    state = _log_progress(state, "scorer", "start: collecting article score")

    article: GeneratedArticle = state["article"]
    score = article.seo_score
    state["seo_score"] = score

    state = _log_progress(
        state,
        "scorer",
        f"done: overall={score.overall} keyword_density={score.keyword_density} "
        f"cooccurrence_coverage={score.cooccurrence_coverage} "
        f"heading_structure={score.heading_structure} word_count_score={score.word_count_score}",
    )
    return state
