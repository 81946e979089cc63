# agents/cooccurrence_agent.py

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, List, Pattern

from models.analysis_models import CompetitorResult, CooccurrenceTerm

# ============================================================
# 言語依存のパラメータ（日本語向けのデフォルト）
# ============================================================

# 2〜8文字の漢字・ひらがな・カタカナ・英字の連続を候補語とする
TERM_PATTERN: Pattern[str] = re.compile(r"[一-龥ぁ-んァ-ヴa-zA-Zａ-ｚＡ-Ｚ]{2,8}")

# 助詞などの機能語と、SEO 記事でありがちな汎用語
STOP_WORDS: frozenset[str] = frozenset(
    {
        "の", "は", "が", "を", "に", "で", "と", "も", "や",
        "する", "ある", "いる", "こと", "もの", "ため", "よう", "など",
        "から", "まで", "について", "とは", "できる", "なる", "れる", "られる",
        "おすすめ", "方法", "解説", "紹介", "まとめ", "ランキング", "比較",
        "選び方", "ポイント", "注意点", "メリット", "デメリット",
        "徹底", "完全", "ガイド", "保存版", "最新",
    }
)

MAX_TERMS = 30


def _keyword_tokens(keyword: str) -> List[str]:
    return [t for t in keyword.split() if t]


def extract_cooccurrence(
    competitors: Iterable[CompetitorResult],
    keyword: str,
    *,
    stop_words: Iterable[str] = STOP_WORDS,
    pattern: Pattern[str] = TERM_PATTERN,
    limit: int = MAX_TERMS,
) -> List[CooccurrenceTerm]:
    """
    競合ページの見出しテキストから共起語を抽出する。

    本文は使わず見出しだけを対象にする（話題を最もよく表すため）。
    キーワード自身の各単語とストップワードは除外し、
    出現回数の多い順（同数なら先に出た順）に最大 limit 件返す。
    """
    all_text = " ".join(
        h.text for c in competitors for h in c.headings
    )

    excluded = set(stop_words) | set(_keyword_tokens(keyword))
    excluded_lower = {w.lower() for w in excluded}

    counts: Counter[str] = Counter()
    for m in pattern.finditer(all_text):
        word = m.group(0)
        if word in excluded or word.lower() in excluded_lower:
            continue
        counts[word] += 1

    # Counter は挿入順を保持し、sorted は安定なので同数は初出順
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        CooccurrenceTerm(word=word, score=count)
        for word, count in ranked[:limit]
    ]
