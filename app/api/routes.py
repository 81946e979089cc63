# app/api/routes.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agents.analyzer_agent import CompetitorAnalyzer
from agents.article_agent import generate_article
from agents.keyword_agent import suggest_keywords
from agents.outline_agent import generate_outline, valid_outline_items
from agents.ranking_agent import check_ranking
from agents.rewrite_agent import rewrite_article
from agents.scorer_agent import calculate_seo_score
from app.config import Settings, get_settings
from app.graph.workflow import run_pipeline
from models.analysis_models import AnalysisResult, CooccurrenceTerm
from models.article_models import GeneratedArticle, OutlineItem, RewriteResult
from models.keyword_models import KeywordSuggestions
from models.ranking_models import RankingCheck
from models.score_models import SEOScore
from services.errors import LLMNotConfiguredError, SearchFailedError, SearchNotConfiguredError

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_ERROR_MESSAGE = "分析中にエラーが発生しました。再度お試しください。"

# /api/analyze のレスポンスに載せる共起語数
RESPONSE_COOCCURRENCE = 20

# /api/generate の構成案の最低件数と、目標文字数の既定値
MIN_OUTLINE_ITEMS = 3
DEFAULT_TARGET_WORD_COUNT = 6000


# --------- Request / Response モデル ---------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KeywordRequest(_CamelModel):
    keyword: str

    @field_validator("keyword")
    @classmethod
    def _check_keyword(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2 or len(v) > 100:
            raise ValueError("キーワードは2〜100文字で入力してください")
        return v


class CompetitorSummary(_CamelModel):
    rank: int
    title: str
    url: str
    word_count: int
    heading_count: int


class SeoTargets(_CamelModel):
    recommended_word_count: int
    avg_word_count: int


class AnalyzeResponse(_CamelModel):
    keyword: str
    competitors: List[CompetitorSummary]
    cooccurrence: List[CooccurrenceTerm]
    outline: List[OutlineItem]
    seo_targets: SeoTargets


class GenerateRequest(KeywordRequest):
    outline: List[OutlineItem]
    cooccurrence: List[str] = Field(default_factory=list)
    target_word_count: int = Field(default=DEFAULT_TARGET_WORD_COUNT, gt=0)
    tone: str = "default"
    custom_prompt: Optional[str] = None
    reference_url: Optional[str] = None

    @field_validator("outline", mode="before")
    @classmethod
    def _keep_valid_outline(cls, v: Any) -> List[OutlineItem]:
        """不正な行は捨て、残りが 3 件未満ならエラーにする。"""
        if not isinstance(v, list):
            raise ValueError("構成案はリストで指定してください")
        items = valid_outline_items(v)
        if len(items) < MIN_OUTLINE_ITEMS:
            raise ValueError(f"構成案には最低{MIN_OUTLINE_ITEMS}つの見出しが必要です")
        return items

    @field_validator("cooccurrence", mode="before")
    @classmethod
    def _cooccurrence_words(cls, v: Any) -> List[str]:
        """文字列と {"word": ...} のどちらの形でも受け付ける。"""
        if not isinstance(v, list):
            return v
        words = [w.get("word") if isinstance(w, dict) else w for w in v]
        return [w for w in words if w]


class ScoreRequest(KeywordRequest):
    content: str
    cooccurrence: List[str] = Field(default_factory=list)
    target_word_count: int = Field(gt=0)


class RankingRequest(KeywordRequest):
    target_url: str


class PipelineRequest(KeywordRequest):
    target_word_count: Optional[int] = Field(default=None, gt=0)
    tone: str = "default"


class RewriteRequest(_CamelModel):
    content: str
    instruction: Optional[str] = None


class KeywordSuggestRequest(_CamelModel):
    topic: str

    @field_validator("topic")
    @classmethod
    def _check_topic(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("トピックを2文字以上で入力してください")
        return v


class PipelineResponse(_CamelModel):
    keyword: str
    target_word_count: int
    analysis: AnalysisResult
    outline: List[OutlineItem]
    article: GeneratedArticle
    seo_score: SEOScore
    progress_messages: List[str] = Field(default_factory=list)


# --------- エンドポイント ---------


@router.post("/analyze", response_model=AnalyzeResponse)
async def api_analyze(
    payload: KeywordRequest,
    settings: Settings = Depends(get_settings),
) -> AnalyzeResponse:
    """
    競合分析 → 構成案生成 をまとめて行う。
    推奨文字数は競合平均 +10%。
    """
    logger.info("[api.analyze] keyword=%s", payload.keyword)
    try:
        analysis = await CompetitorAnalyzer(settings).analyze(payload.keyword)
        outline = await generate_outline(payload.keyword, analysis, settings=settings)
    except Exception:
        logger.exception("[api.analyze] failed keyword=%s", payload.keyword)
        raise HTTPException(status_code=500, detail=GENERIC_ERROR_MESSAGE)

    return AnalyzeResponse(
        keyword=payload.keyword,
        competitors=[
            CompetitorSummary(
                rank=c.rank,
                title=c.title,
                url=c.url,
                word_count=c.word_count,
                heading_count=c.h2_count,
            )
            for c in analysis.competitors
        ],
        cooccurrence=analysis.cooccurrence[:RESPONSE_COOCCURRENCE],
        outline=outline,
        seo_targets=SeoTargets(
            recommended_word_count=analysis.recommended_word_count,
            avg_word_count=analysis.avg_word_count,
        ),
    )


@router.post("/generate", response_model=GeneratedArticle)
async def api_generate(
    payload: GenerateRequest,
    settings: Settings = Depends(get_settings),
) -> GeneratedArticle:
    logger.info(
        "[api.generate] keyword=%s outline_items=%d target_word_count=%d",
        payload.keyword,
        len(payload.outline),
        payload.target_word_count,
    )
    try:
        return await generate_article(
            payload.keyword,
            payload.outline,
            payload.cooccurrence,
            payload.target_word_count,
            tone=payload.tone,
            custom_prompt=payload.custom_prompt,
            reference_url=payload.reference_url,
            settings=settings,
        )
    except Exception:
        logger.exception("[api.generate] failed keyword=%s", payload.keyword)
        raise HTTPException(status_code=500, detail=GENERIC_ERROR_MESSAGE)


@router.post("/score", response_model=SEOScore)
def api_score(payload: ScoreRequest) -> SEOScore:
    """記事 HTML を採点するだけの API（LLM・ネットワーク不要）。"""
    return calculate_seo_score(
        payload.keyword,
        payload.content,
        payload.cooccurrence,
        payload.target_word_count,
    )


@router.post("/ranking", response_model=RankingCheck)
async def api_ranking(
    payload: RankingRequest,
    settings: Settings = Depends(get_settings),
) -> RankingCheck:
    logger.info("[api.ranking] keyword=%s target_url=%s", payload.keyword, payload.target_url)
    try:
        return await check_ranking(payload.keyword, payload.target_url, settings=settings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SearchNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SearchFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception:
        logger.exception("[api.ranking] failed keyword=%s", payload.keyword)
        raise HTTPException(status_code=500, detail="順位チェックに失敗しました")


@router.post("/pipeline", response_model=PipelineResponse)
async def api_pipeline(
    payload: PipelineRequest,
    settings: Settings = Depends(get_settings),
) -> PipelineResponse:
    """
    競合分析 → 構成案 → 本文 → スコア をまとめて実行するメインAPI。
    """
    logger.info("[api.pipeline] start keyword=%s", payload.keyword)
    try:
        state = await run_pipeline(
            payload.keyword,
            target_word_count=payload.target_word_count,
            tone=payload.tone,
            settings=settings,
        )
    except Exception:
        logger.exception("[api.pipeline] failed keyword=%s", payload.keyword)
        raise HTTPException(status_code=500, detail=GENERIC_ERROR_MESSAGE)

    logger.info(
        "[api.pipeline] done keyword=%s nodes=%s",
        payload.keyword,
        state.get("current_node"),
    )

    return PipelineResponse(
        keyword=state["keyword"],
        target_word_count=state["target_word_count"],
        analysis=state["analysis"],
        outline=state["outline"],
        article=state["article"],
        seo_score=state["seo_score"],
        progress_messages=state.get("progress_messages", []),
    )


@router.post("/rewrite", response_model=RewriteResult)
async def api_rewrite(
    payload: RewriteRequest,
    settings: Settings = Depends(get_settings),
) -> RewriteResult:
    logger.info("[api.rewrite] chars=%d custom_instruction=%s", len(payload.content), bool(payload.instruction))
    try:
        return await rewrite_article(payload.content, payload.instruction, settings=settings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception:
        logger.exception("[api.rewrite] failed")
        raise HTTPException(status_code=500, detail="リライト中にエラーが発生しました")


@router.post("/keywords/suggest", response_model=KeywordSuggestions)
async def api_keyword_suggest(
    payload: KeywordSuggestRequest,
    settings: Settings = Depends(get_settings),
) -> KeywordSuggestions:
    """トピックからターゲットキーワード候補を提案する（LLM 未設定時は固定の候補）。"""
    logger.info("[api.keywords.suggest] topic=%s", payload.topic)
    try:
        return await suggest_keywords(payload.topic, settings=settings)
    except Exception:
        logger.exception("[api.keywords.suggest] failed topic=%s", payload.topic)
        raise HTTPException(status_code=500, detail="キーワード提案中にエラーが発生しました")
