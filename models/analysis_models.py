# models/analysis_models.py

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.site_models import Heading, HeadingTag


_FROZEN_CAMEL = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class CompetitorResult(BaseModel):
    """検索上位 1 ページ分の分析結果。1 回の取得で生成され、以後変更しない。"""

    model_config = _FROZEN_CAMEL

    rank: int
    title: str
    url: str
    snippet: str = ""
    word_count: int = 0
    headings: List[Heading] = Field(default_factory=list)

    @property
    def h2_count(self) -> int:
        return sum(1 for h in self.headings if h.tag == "h2")


class CooccurrenceTerm(BaseModel):
    model_config = _FROZEN_CAMEL

    word: str
    score: int


class HeadingFrequency(BaseModel):
    """競合全体で同じ (tag, text) の見出しが何回出たか。"""

    model_config = _FROZEN_CAMEL

    tag: HeadingTag
    text: str
    frequency: int


class AnalysisResult(BaseModel):
    """
    1 回の競合分析の集計結果。

    - competitors: rank 昇順
    - cooccurrence: 出現回数の降順、最大 30 件
    - avg_word_count: 500 文字超のページだけの平均（該当なしなら 5000）
    - all_headings: 頻出見出しパターン、最大 50 件
    """

    model_config = _FROZEN_CAMEL

    competitors: List[CompetitorResult] = Field(default_factory=list)
    cooccurrence: List[CooccurrenceTerm] = Field(default_factory=list)
    avg_word_count: int
    all_headings: List[HeadingFrequency] = Field(default_factory=list)

    @property
    def recommended_word_count(self) -> int:
        """競合平均 +10% を推奨文字数とする。"""
        return int(self.avg_word_count * 1.1 + 0.5)

    def cooccurrence_words(self, limit: int | None = None) -> List[str]:
        words = [t.word for t in self.cooccurrence]
        return words if limit is None else words[:limit]
