# agents/article_agent.py

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Union

from agents.scorer_agent import calculate_seo_score, count_chars, strip_tags
from app.config import Settings, get_settings
from models.analysis_models import CooccurrenceTerm
from models.article_models import GeneratedArticle, OutlineItem
from services.llm_client import complete

logger = logging.getLogger(__name__)

# 文体・トーン
TONE_DESCRIPTIONS = {
    "default": "です・ます調。バランスの取れた読みやすい文体",
    "casual": "「〜ですよね」「〜してみましょう」など親しみやすく砕けた口調。読者に語りかけるように",
    "professional": "である調。ビジネス・専門家向けの堅い文体。専門用語を適切に使用",
    "beginner": "です・ます調。専門用語を極力避け、初心者でもわかるように平易な言葉で丁寧に説明",
    "persuasive": "です・ます調。「〜しませんか？」「今すぐ〜」など行動を促す説得力のある文体。ベネフィットを強調",
}

META_PATTERN = re.compile(r"<!--\s*meta:\s*(.*?)\s*-->")
CODE_FENCE_HEAD = re.compile(r"^```html?\n?", re.IGNORECASE)
CODE_FENCE_TAIL = re.compile(r"\n?```$")
H1_TEXT_PATTERN = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)

PROMPT_COOCCURRENCE = 15


def _as_words(cooccurrence: Sequence[Union[str, CooccurrenceTerm]]) -> List[str]:
    return [c.word if isinstance(c, CooccurrenceTerm) else c for c in cooccurrence]


def build_article_prompt(
    keyword: str,
    outline: List[OutlineItem],
    cooccurrence: List[str],
    target_word_count: int,
    *,
    tone: str = "default",
    custom_prompt: Optional[str] = None,
    reference_url: Optional[str] = None,
) -> str:
    outline_text = "\n".join(f"{item.tag.upper()}: {item.text}" for item in outline)
    tone_instruction = TONE_DESCRIPTIONS.get(tone, TONE_DESCRIPTIONS["default"])

    reference_instruction = ""
    if reference_url:
        reference_instruction = (
            "\n【参考記事の文体を真似する】\n"
            "以下のURLの記事の口調・文体・表現スタイルを可能な限り真似してください：\n"
            f"{reference_url}\n"
            "（記事を読み取れない場合は、一般的な良質なWebライティングの文体で執筆してください）"
        )
    custom_instruction = f"\n【追加の指示】\n{custom_prompt}" if custom_prompt else ""

    return f"""
あなたはSEOに精通したプロのWebライターです。

以下の構成案に沿って、SEOに最適化された記事本文を作成してください。

【ターゲットキーワード】{keyword}

【構成案】
{outline_text}

【含めるべき共起語】{"、".join(cooccurrence[:PROMPT_COOCCURRENCE])}

【目標文字数】{target_word_count}字

【文体・トーン】{tone_instruction}
{reference_instruction}{custom_instruction}

執筆ルール：
- 各H2セクションは400〜800字
- ターゲットKWはH1・最初のH2・まとめに含める（密度2〜3%）
- 共起語は自然に文中に散りばめる（カバー率80%以上を目標）
- リード文（H1直後）は読者の悩みに共感 → 記事で得られることを提示
- 各セクションの冒頭で結論を述べ、その後に解説を展開
- HTML形式で出力（h1, h2, h3, p タグ。装飾タグは不要）
- メタディスクリプション（120文字以内）を最初に <!-- meta: ... --> コメントで記載

HTML出力のみ（説明不要）:
""".strip()


def strip_code_fence(content: str) -> str:
    """LLM が付けがちな ```html ... ``` の囲みを外す。"""
    content = CODE_FENCE_HEAD.sub("", content)
    return CODE_FENCE_TAIL.sub("", content)


def _outline_title(keyword: str, outline: List[OutlineItem]) -> str:
    return next((o.text for o in outline if o.tag == "h1"), keyword)


def build_article(
    keyword: str,
    raw_content: str,
    outline: List[OutlineItem],
    cooccurrence: List[str],
    target_word_count: int,
) -> GeneratedArticle:
    """LLM の生出力から meta・タイトルを取り出し、スコアを付けて記事にする。"""
    content = raw_content

    meta_description = ""
    meta_match = META_PATTERN.search(content)
    if meta_match:
        meta_description = meta_match.group(1)
        content = content.replace(meta_match.group(0), "", 1).strip()

    content = strip_code_fence(content)

    title_match = H1_TEXT_PATTERN.search(content)
    title = strip_tags(title_match.group(1)) if title_match else _outline_title(keyword, outline)

    return GeneratedArticle(
        title=title,
        meta_description=meta_description,
        content=content,
        word_count=count_chars(strip_tags(content)),
        seo_score=calculate_seo_score(keyword, content, cooccurrence, target_word_count),
    )


def demo_article(
    keyword: str,
    outline: List[OutlineItem],
    cooccurrence: List[str],
    target_word_count: int,
) -> GeneratedArticle:
    """LLM が使えないときの記事。構成案から本文を組み立て、実際のスコアを付ける。"""
    sections = []
    for item in outline:
        if item.tag == "h1":
            sections.append(f"<h1>{item.text}</h1>")
        elif item.tag == "h2":
            sections.append(
                f"<h2>{item.text}</h2>\n"
                f"<p>この記事では「{keyword}」について、初心者の方にもわかりやすく解説していきます。"
                f"{keyword}は正しい方法で取り組めば、確実に成果を出すことができます。"
                "以下で具体的な方法を見ていきましょう。</p>"
            )
        else:
            sections.append(
                f"<h3>{item.text}</h3>\n"
                f"<p>{item.text}は{keyword}において非常に重要なポイントです。"
                "初心者の方がまず押さえるべき基本として、この施策を最優先で実施することをおすすめします。</p>"
            )
    content = "\n\n".join(sections)

    return GeneratedArticle(
        title=_outline_title(keyword, outline) if outline else f"{keyword}完全ガイド",
        meta_description=(
            f"{keyword}の基本から実践まで初心者向けに徹底解説。"
            "今日からできる具体的な施策と無料ツールも紹介します。"
        ),
        content=content,
        word_count=count_chars(strip_tags(content)),
        seo_score=calculate_seo_score(keyword, content, cooccurrence, target_word_count),
    )


async def generate_article(
    keyword: str,
    outline: List[OutlineItem],
    cooccurrence: Sequence[Union[str, CooccurrenceTerm]],
    target_word_count: int,
    *,
    tone: str = "default",
    custom_prompt: Optional[str] = None,
    reference_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> GeneratedArticle:
    """
    構成案から記事本文（HTML）を生成し、SEO スコアを付けて返す。

    - OPENAI_API_KEY 未設定時・LLM エラー時はデモ記事を返す
    """
    settings = settings or get_settings()
    words = _as_words(cooccurrence)

    if not settings.openai_api_key:
        logger.info("[article] mode=FALLBACK (no OPENAI_API_KEY)")
        return demo_article(keyword, outline, words, target_word_count)

    prompt = build_article_prompt(
        keyword,
        outline,
        words,
        target_word_count,
        tone=tone,
        custom_prompt=custom_prompt,
        reference_url=reference_url,
    )

    try:
        logger.info("[article] LLM call start keyword=%s model=%s tone=%s", keyword, settings.openai_model, tone)
        raw = await complete(prompt, settings=settings, temperature=0.6, max_tokens=8000)
    except Exception as e:  # noqa: BLE001
        logger.warning("[article] LLM error, fallback used: %s", e)
        return demo_article(keyword, outline, words, target_word_count)

    if not raw.strip():
        logger.warning("[article] LLM returned empty content, fallback used")
        return demo_article(keyword, outline, words, target_word_count)

    article = build_article(keyword, raw, outline, words, target_word_count)
    logger.info(
        "[article] LLM article success keyword=%s word_count=%d overall=%d",
        keyword,
        article.word_count,
        article.seo_score.overall,
    )
    return article
