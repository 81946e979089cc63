# agents/keyword_agent.py

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from app.config import Settings, get_settings
from models.keyword_models import KeywordSuggestion, KeywordSuggestions
from services.llm_client import complete

logger = logging.getLogger(__name__)

# ============================================================
# パラメータ
# ============================================================

# 1 トピックあたりの候補数
MAX_SUGGESTIONS = 15
# 1 候補あたりのロングテール数
MAX_LONG_TAIL = 3


# ============================================================
# フォールバック
# ============================================================

def fallback_suggestions(topic: str) -> KeywordSuggestions:
    """
    API キーや LLM がなくても必ず返せる固定の候補。
    情報系・比較系・HOW TO 系を一通り並べる。
    """
    rows = [
        (topic, "high", "high", "medium", [f"{topic} とは", f"{topic} 基本"], "軸キーワードのため押さえておく"),
        (f"{topic} とは", "high", "medium", "high", [f"{topic} とは 簡単に", f"{topic} 意味"], "定義・概要の記事は検索意図が明確"),
        (f"{topic} やり方", "medium", "medium", "high", [f"{topic} やり方 初心者", f"{topic} 手順"], "HOW TO 記事は構成を作りやすい"),
        (f"{topic} 初心者", "medium", "low", "high", [f"{topic} 初心者 何から", f"{topic} 入門"], "競合が弱く上位表示を狙いやすい"),
        (f"{topic} 比較", "medium", "medium", "medium", [f"{topic} 比較 おすすめ", f"{topic} 違い"], "比較検討層を取り込める"),
        (f"{topic} おすすめ", "medium", "high", "medium", [f"{topic} おすすめ ツール", f"{topic} おすすめ 本"], "購買に近い検索意図"),
        (f"{topic} 費用", "low", "low", "medium", [f"{topic} 費用 相場", f"{topic} 料金"], "費用感を知りたい層に刺さる"),
        (f"{topic} 事例", "low", "low", "low", [f"{topic} 事例 成功", f"{topic} 事例 失敗"], "信頼性の補強に使える"),
        (f"{topic} メリット デメリット", "low", "low", "low", [f"{topic} メリット", f"{topic} デメリット"], "ロングテールで確実にアクセスが取れる"),
    ]
    return KeywordSuggestions(
        topic=topic,
        keywords=[
            KeywordSuggestion(
                keyword=keyword,
                search_volume=volume,
                competition=competition,
                priority=priority,
                long_tail=long_tail,
                reason=reason,
            )
            for keyword, volume, competition, priority, long_tail, reason in rows
        ],
    )


# ============================================================
# 正規化ユーティリティ
# ============================================================

def _normalize_level(value: Any) -> str:
    """high / medium / low 以外（大文字・日本語など）をざっくり寄せる。"""
    v = str(value or "").strip().lower()
    if v in ("high", "medium", "low"):
        return v
    if v in ("高", "大", "多い") or v.startswith("h"):
        return "high"
    if v in ("低", "小", "少ない") or v.startswith("l"):
        return "low"
    return "medium"


def parse_suggestions(topic: str, content: str) -> KeywordSuggestions:
    """
    LLM の JSON 出力を KeywordSuggestions にする。
    keyword が無い行・形式が不正な行は捨てる。
    """
    data = json.loads(content or "{}")
    raw_items = data.get("keywords") if isinstance(data, dict) else None
    if not isinstance(raw_items, list):
        raise ValueError("keywords が配列ではありません")

    items: List[KeywordSuggestion] = []
    for raw in raw_items[:MAX_SUGGESTIONS]:
        if not isinstance(raw, dict) or not raw.get("keyword"):
            continue
        long_tail = raw.get("longTail") or []
        if not isinstance(long_tail, list):
            long_tail = []
        try:
            items.append(
                KeywordSuggestion(
                    keyword=str(raw["keyword"]).strip(),
                    search_volume=_normalize_level(raw.get("searchVolume")),
                    competition=_normalize_level(raw.get("competition")),
                    priority=_normalize_level(raw.get("priority")),
                    long_tail=[str(t) for t in long_tail if t][:MAX_LONG_TAIL],
                    reason=str(raw.get("reason") or ""),
                )
            )
        except ValidationError:
            continue

    return KeywordSuggestions(topic=topic, keywords=items)


def build_suggest_prompt(topic: str) -> str:
    return f"""
あなたはSEOキーワード選定の専門家です。

以下のトピック・ニッチについて、SEO記事のターゲットキーワードとして有望なものを{MAX_SUGGESTIONS}個提案してください。

【トピック】{topic}

各キーワードについて以下を評価してください：
- searchVolume: 推定検索ボリューム（high/medium/low）
- competition: 競合の強さ（high/medium/low）
- priority: おすすめ度（high=今すぐ狙うべき, medium=余裕があれば, low=将来的に）
- longTail: ロングテール派生キーワード（2〜3個）
- reason: このキーワードをおすすめする理由（1文）

選定基準：
- 検索意図が明確で記事が書きやすいもの
- 競合が弱く上位表示しやすいものを優先
- ロングテールで確実にアクセスが取れるものを含める
- トピックの網羅性を意識（情報系・比較系・HOW TO系をバランスよく）

JSON形式で出力（説明不要）:
{{"keywords":[{{"keyword":"...", "searchVolume":"...", "competition":"...", "priority":"...", "longTail":["...","..."], "reason":"..."}}]}}
""".strip()


# ============================================================
# 公開関数
# ============================================================

async def suggest_keywords(
    topic: str,
    *,
    settings: Optional[Settings] = None,
) -> KeywordSuggestions:
    """
    トピックからターゲットキーワード候補を提案する。

    優先順位:
    1. OPENAI_API_KEY が設定されていれば LLM の提案を使う
    2. APIキー未設定・LLM エラー・有効な候補 0 件ならフォールバック候補を返す
    """
    settings = settings or get_settings()
    topic = topic.strip()

    if not settings.openai_api_key:
        logger.info("[keyword_suggest] mode=FALLBACK (no OPENAI_API_KEY) topic=%s", topic)
        return fallback_suggestions(topic)

    try:
        logger.info("[keyword_suggest] LLM call start topic=%s model=%s", topic, settings.openai_model)
        content = await complete(
            build_suggest_prompt(topic),
            settings=settings,
            temperature=0.7,
            max_tokens=2000,
            json_mode=True,
        )
        suggestions = parse_suggestions(topic, content)
    except Exception as e:  # noqa: BLE001
        logger.warning("[keyword_suggest] LLM error, fallback used: %s", e)
        return fallback_suggestions(topic)

    if not suggestions.keywords:
        logger.warning("[keyword_suggest] LLM returned no valid keywords, fallback used")
        return fallback_suggestions(topic)

    logger.info(
        "[keyword_suggest] LLM suggestion success topic=%s count=%d",
        topic,
        len(suggestions.keywords),
    )
    return suggestions
