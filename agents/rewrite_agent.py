# agents/rewrite_agent.py

from __future__ import annotations

import logging
from typing import Optional

from agents.article_agent import strip_code_fence
from agents.scorer_agent import count_chars, strip_tags
from app.config import Settings, get_settings
from models.article_models import RewriteResult
from services.errors import LLMNotConfiguredError
from services.llm_client import complete

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTION = (
    "SEOを意識して、より読みやすく、情報量を増やしてリライトしてください。"
    "見出し構成は維持してください。"
)


def build_rewrite_prompt(content: str, instruction: Optional[str] = None) -> str:
    return f"""
あなたはSEOに精通したプロのWebライターです。

以下の記事をリライトしてください。

【リライト指示】
{instruction or DEFAULT_INSTRUCTION}

【元の記事】
{content}

リライトルール：
- 見出し構成（H1, H2, H3）は基本的に維持
- 文章をより具体的で読みやすくする
- 情報の正確性を保つ
- HTML形式で出力（h1, h2, h3, p タグ）

HTML出力のみ（説明不要）:
""".strip()


async def rewrite_article(
    content: str,
    instruction: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
) -> RewriteResult:
    """
    既存記事の HTML を LLM でリライトし、文字数を数え直して返す。
    デモ用のフォールバックは持たない。

    Raises:
        ValueError: content が空の場合
        LLMNotConfiguredError: OPENAI_API_KEY が未設定の場合
    """
    settings = settings or get_settings()

    if not content or not content.strip():
        raise ValueError("記事内容を入力してください")
    if not settings.openai_api_key:
        raise LLMNotConfiguredError("OpenAI APIキーが設定されていません")

    logger.info(
        "[rewrite] LLM call start chars=%d model=%s custom_instruction=%s",
        count_chars(strip_tags(content)),
        settings.openai_model,
        bool(instruction),
    )
    raw = await complete(
        build_rewrite_prompt(content, instruction),
        settings=settings,
        temperature=0.6,
        max_tokens=8000,
    )

    rewritten = strip_code_fence(raw)
    result = RewriteResult(content=rewritten, word_count=count_chars(strip_tags(rewritten)))
    logger.info("[rewrite] done word_count=%d", result.word_count)
    return result
