# models/site_models.py

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


HeadingTag = Literal["h1", "h2", "h3", "h4", "h5", "h6"]


class Heading(BaseModel):
    """
    見出し 1 件（h1〜h6）。
    - tag: 小文字のタグ名
    - text: インラインタグを除去したテキスト
    """

    model_config = ConfigDict(frozen=True)

    tag: HeadingTag
    text: str


class ParsedPage(BaseModel):
    """
    1ページ分の HTML 解析結果。
    word_count は空白を除いた文字数（日本語は文字数ベースで数える）。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    word_count: int = 0
    headings: List[Heading] = Field(default_factory=list)
