# agents/outline_agent.py

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from app.config import Settings, get_settings
from models.analysis_models import AnalysisResult, CompetitorResult
from models.article_models import OutlineItem
from services.llm_client import complete

logger = logging.getLogger(__name__)

# プロンプトに載せる競合数・見出し数・共起語数
PROMPT_COMPETITORS = 5
PROMPT_HEADINGS_PER_COMPETITOR = 10
PROMPT_COOCCURRENCE = 20


# ============================================================
# プロンプト
# ============================================================

def _competitor_block(c: CompetitorResult) -> str:
    """【1位】タイトル（文字数）+ h2/h3 の見出し一覧。"""
    headings = [h for h in c.headings if h.tag in ("h2", "h3")][:PROMPT_HEADINGS_PER_COMPETITOR]
    lines = [f"【{c.rank}位】{c.title}（{c.word_count}字）"]
    lines += [f"  {h.tag}: {h.text}" for h in headings]
    return "\n".join(lines)


def build_outline_prompt(keyword: str, analysis: AnalysisResult) -> str:
    competitor_summary = "\n\n".join(
        _competitor_block(c) for c in analysis.competitors[:PROMPT_COMPETITORS]
    )
    cooccurrence_text = "、".join(analysis.cooccurrence_words(PROMPT_COOCCURRENCE))

    return f"""
あなたはSEO専門のコンテンツストラテジストです。

以下の競合分析データをもとに、検索1位を獲得するための記事構成案を作成してください。

【ターゲットキーワード】{keyword}

【競合上位記事の見出し構成】
{competitor_summary}

【共起語（重要度順）】
{cooccurrence_text}

【競合の平均文字数】{analysis.avg_word_count}字

以下の条件で構成案を出力してください：
- H1は1つ。ターゲットKWを含み、クリック率が高いタイトル
- H2は5〜7個。検索意図を網羅する
- H3は各H2に1〜3個。具体的で実用的な内容
- 競合にない独自の切り口を最低1つ含める
- 最初と最後のH2に必ずターゲットKWを含める

以下のJSON形式で出力（説明不要）:
{{"outline":[{{"tag":"h1","text":"..."}},{{"tag":"h2","text":"..."}},{{"tag":"h3","text":"..."}}]}}
""".strip()


def valid_outline_items(raw_items: Iterable[Any]) -> List[OutlineItem]:
    """tag が h1/h2/h3 で text が空でない行だけを OutlineItem にする。"""
    items: List[OutlineItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            item = OutlineItem(
                tag=str(raw.get("tag") or "").lower(),
                text=str(raw.get("text") or "").strip(),
            )
        except ValidationError:
            continue
        if item.text:
            items.append(item)
    return items


def parse_outline(content: str) -> List[OutlineItem]:
    """
    LLM の JSON 出力を OutlineItem のリストにする。
    配列そのもの / {"outline": [...]} / {"items": [...]} / {"headings": [...]} に対応。
    形式が不正な行は捨てる。
    """
    data = json.loads(content or "{}")
    if isinstance(data, list):
        raw_items = data
    elif isinstance(data, dict):
        raw_items = data.get("outline") or data.get("items") or data.get("headings") or []
    else:
        raw_items = []
    if not isinstance(raw_items, list):
        return []
    return valid_outline_items(raw_items)


# ============================================================
# フォールバック
# ============================================================

def demo_outline(keyword: str) -> List[OutlineItem]:
    rows = [
        ("h1", f"【2026年版】{keyword}とは？初心者が最初にやるべき基本施策を徹底解説"),
        ("h2", f"{keyword}とは？検索エンジンの仕組みを理解しよう"),
        ("h3", "Googleがページを評価する3つの基準"),
        ("h3", f"{keyword}で成果が出るまでの期間"),
        ("h2", f"初心者が今日からできる{keyword}7選"),
        ("h3", "①キーワード選定の基本"),
        ("h3", "②タイトルタグとメタディスクリプションの最適化"),
        ("h3", "③見出し構成（H2・H3）の設計"),
        ("h3", "④内部リンクの最適化"),
        ("h3", "⑤モバイル対応とページ表示速度の改善"),
        ("h3", "⑥画像のalt属性を設定する"),
        ("h3", "⑦Googleサーチコンソールで効果を測定する"),
        ("h2", f"初心者がやりがちな{keyword}の失敗パターン"),
        ("h2", f"{keyword}に役立つ無料ツール5選"),
        ("h2", f"まとめ：初心者こそ基本を押さえれば{keyword}は成果が出る"),
    ]
    return [OutlineItem(tag=tag, text=text) for tag, text in rows]


# ============================================================
# 公開関数
# ============================================================

async def generate_outline(
    keyword: str,
    analysis: AnalysisResult,
    *,
    settings: Optional[Settings] = None,
) -> List[OutlineItem]:
    """
    競合分析結果から記事構成案を生成する。

    - OPENAI_API_KEY 未設定時はデモ構成案を返す
    - LLM エラー・JSON パース失敗・空の構成案もデモ構成案で代替する
    """
    settings = settings or get_settings()

    if not settings.openai_api_key:
        logger.info("[outline] mode=FALLBACK (no OPENAI_API_KEY)")
        return demo_outline(keyword)

    prompt = build_outline_prompt(keyword, analysis)
    try:
        logger.info("[outline] LLM call start keyword=%s model=%s", keyword, settings.openai_model)
        content = await complete(
            prompt,
            settings=settings,
            temperature=0.7,
            max_tokens=2000,
            json_mode=True,
        )
        outline = parse_outline(content)
    except Exception as e:  # noqa: BLE001
        logger.warning("[outline] LLM error, fallback used: %s", e)
        return demo_outline(keyword)

    if not outline:
        logger.warning("[outline] LLM returned empty outline, fallback used")
        return demo_outline(keyword)

    logger.info("[outline] LLM outline success keyword=%s items=%d", keyword, len(outline))
    return outline
