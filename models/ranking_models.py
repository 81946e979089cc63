# models/ranking_models.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.serp_models import SerpResult


class RankingCheck(BaseModel):
    """
    指定 URL のドメインが検索上位の何位にいるか。
    position が None の場合は調査範囲（上位 20 件）の圏外。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    keyword: str
    target_url: str
    position: Optional[int] = None
    matched_url: str = ""
    matched_title: str = ""
    checked_at: datetime
    top_results: List[SerpResult] = Field(default_factory=list)
