# models/serp_models.py
from pydantic import BaseModel, ConfigDict


class SerpResult(BaseModel):
    """検索 API から返る 1 件分の結果（rank は 1 始まり）。"""

    model_config = ConfigDict(frozen=True)

    rank: int
    title: str
    url: str
    snippet: str = ""
