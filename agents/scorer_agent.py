# agents/scorer_agent.py

from __future__ import annotations

import math
import re
from typing import List, Sequence, Union

from models.analysis_models import CooccurrenceTerm
from models.score_models import SEOScore, SEOScoreDetails

# ============================================================
# スコア算出パラメータ
# ============================================================

# overall の重み（合計 1.0）
WEIGHT_KEYWORD_DENSITY = 0.25
WEIGHT_COOCCURRENCE = 0.30
WEIGHT_HEADING = 0.25
WEIGHT_WORD_COUNT = 0.20

# 共起語カバー率は上位何件で見るか
COVERAGE_TOP_N = 15

TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")
H1_PATTERN = re.compile(r"<h1", re.IGNORECASE)
H2_PATTERN = re.compile(r"<h2", re.IGNORECASE)
H3_PATTERN = re.compile(r"<h3", re.IGNORECASE)


def round_half_up(value: float) -> int:
    """0.5 は切り上げる丸め（Python の round は偶数丸めなので使わない）。"""
    return int(math.floor(value + 0.5))


def strip_tags(html: str) -> str:
    return TAG_PATTERN.sub("", html)


def count_chars(text: str) -> int:
    """空白を除いた文字数。"""
    return len(WHITESPACE_PATTERN.sub("", text))


# ============================================================
# サブスコア
# ============================================================

def _keyword_regex(keyword: str) -> re.Pattern[str]:
    """複数語のキーワードは、語間の空白の有無・個数を問わずマッチさせる。"""
    tokens = keyword.split()
    return re.compile(r"\s*".join(re.escape(t) for t in tokens), re.IGNORECASE)


def count_keyword(keyword: str, text: str) -> int:
    if not keyword.strip():
        return 0
    return len(_keyword_regex(keyword).findall(text))


def keyword_density_score(density: float) -> float:
    """
    キーワード密度(%) → スコア。
    1% 未満は ×50、1〜4% は満点、4% 超は詰め込みとして減点。
    """
    if density < 1:
        score = density * 50
    elif density > 4:
        score = max(0.0, 100 - (density - 4) * 20)
    else:
        score = 100.0
    return min(100.0, score)


def heading_structure_score(html: str) -> int:
    score = 0
    if H1_PATTERN.search(html):
        score += 30

    h2_count = len(H2_PATTERN.findall(html))
    if 4 <= h2_count <= 8:
        score += 40
    elif h2_count >= 2:
        score += 25

    h3_count = len(H3_PATTERN.findall(html))
    if h3_count >= 3:
        score += 30
    elif h3_count >= 1:
        score += 15

    return score


def word_count_score(actual: int, target: int) -> int:
    """
    目標文字数との比率。長すぎより短すぎを強く減点する。
    target が 0 のときは本文があれば比率無限大（70）、本文も空なら 20。
    負の target は比率が負になるので 20。
    """
    if target == 0:
        ratio = math.inf if actual > 0 else 0.0
    else:
        ratio = actual / target
    if 0.8 <= ratio <= 1.3:
        return 100
    if ratio >= 0.6:
        return 70
    if ratio >= 0.4:
        return 40
    return 20


def _as_words(cooccurrence: Sequence[Union[str, CooccurrenceTerm]]) -> List[str]:
    return [c.word if isinstance(c, CooccurrenceTerm) else c for c in cooccurrence]


# ============================================================
# メイン
# ============================================================

def calculate_seo_score(
    keyword: str,
    html_content: str,
    cooccurrence: Sequence[Union[str, CooccurrenceTerm]],
    target_word_count: int,
) -> SEOScore:
    """
    生成記事の HTML から SEO スコアを算出する（I/O なしの純粋関数）。

    - keyword_density: キーワード密度
    - cooccurrence_coverage: 共起語上位 15 件のうち本文に含まれる割合
    - heading_structure: h1 / h2 / h3 の構成
    - word_count_score: 目標文字数に対する比率
    """
    text_content = strip_tags(html_content)
    actual_word_count = count_chars(text_content)

    keyword_count = count_keyword(keyword, text_content)
    density = (
        keyword_count * len(keyword) / actual_word_count * 100
        if actual_word_count > 0
        else 0.0
    )
    density_score = round_half_up(keyword_density_score(density))

    top_terms = _as_words(cooccurrence)[:COVERAGE_TOP_N]
    covered = [w for w in top_terms if w in text_content]
    missing = [w for w in top_terms if w not in text_content]
    coverage = (
        round_half_up(len(covered) / len(top_terms) * 100) if top_terms else 100
    )

    heading = heading_structure_score(html_content)
    length_score = word_count_score(actual_word_count, target_word_count)

    overall = round_half_up(
        density_score * WEIGHT_KEYWORD_DENSITY
        + coverage * WEIGHT_COOCCURRENCE
        + heading * WEIGHT_HEADING
        + length_score * WEIGHT_WORD_COUNT
    )

    return SEOScore(
        overall=overall,
        keyword_density=density_score,
        cooccurrence_coverage=coverage,
        heading_structure=heading,
        word_count_score=length_score,
        details=SEOScoreDetails(
            target_word_count=target_word_count,
            actual_word_count=actual_word_count,
            keyword_count=keyword_count,
            covered_cooccurrences=covered,
            missing_cooccurrences=missing,
        ),
    )
