# models/keyword_models.py

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# -----------------------------------------
# 3 段階評価（検索ボリューム・競合の強さ・おすすめ度）
# -----------------------------------------
Level = Literal["high", "medium", "low"]


_FROZEN_CAMEL = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class KeywordSuggestion(BaseModel):
    """ターゲットキーワード候補 1 件。

    Attributes:
        keyword (str): 候補キーワード。
        search_volume (Level): 推定検索ボリューム。
        competition (Level): 競合の強さ。
        priority (Level): おすすめ度（high = 今すぐ狙うべき）。
        long_tail (List[str]): ロングテール派生キーワード。
        reason (str): おすすめする理由（1 文）。
    """

    model_config = _FROZEN_CAMEL

    keyword: str
    search_volume: Level = "medium"
    competition: Level = "medium"
    priority: Level = "medium"
    long_tail: List[str] = Field(default_factory=list)
    reason: str = ""


class KeywordSuggestions(BaseModel):
    model_config = _FROZEN_CAMEL

    topic: str
    keywords: List[KeywordSuggestion] = Field(default_factory=list)

    def by_priority(self, priority: Level) -> List[KeywordSuggestion]:
        return [k for k in self.keywords if k.priority == priority]
