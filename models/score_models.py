# models/score_models.py

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SEOScoreDetails(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    target_word_count: int
    actual_word_count: int
    keyword_count: int
    covered_cooccurrences: List[str] = Field(default_factory=list)
    missing_cooccurrences: List[str] = Field(default_factory=list)


class SEOScore(BaseModel):
    """
    記事 1 本分の SEO スコア。各サブスコアは 0〜100。
    overall は 4 つのサブスコアの加重和（0.25 / 0.30 / 0.25 / 0.20）。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    overall: int = Field(ge=0, le=100)
    keyword_density: int = Field(ge=0, le=100)
    cooccurrence_coverage: int = Field(ge=0, le=100)
    heading_structure: int = Field(ge=0, le=100)
    word_count_score: int = Field(ge=0, le=100)
    details: SEOScoreDetails
