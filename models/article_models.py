# models/article_models.py

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.score_models import SEOScore


class OutlineItem(BaseModel):
    """構成案の 1 行（h1 / h2 / h3）。"""

    model_config = ConfigDict(frozen=True)

    tag: Literal["h1", "h2", "h3"]
    text: str


class GeneratedArticle(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    title: str
    meta_description: str = ""
    content: str  # HTML
    word_count: int
    seo_score: SEOScore


class RewriteResult(BaseModel):
    """リライト後の記事 HTML と、その文字数（空白・タグ除く）。"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    content: str
    word_count: int
