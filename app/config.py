# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。

    競合分析・検索クライアントにはこのインスタンスを明示的に渡す。
    APIキーを省略するとフォールバック（デモデータ）経路になる。
    """

    # ---------- Brave Search ----------
    # BRAVE_SEARCH_API_KEY=... を .env に書く想定
    brave_search_api_key: str | None = None
    brave_search_url: str = "https://api.search.brave.com/res/v1/web/search"
    search_country: str = "jp"

    # Brave の 1 リクエストあたり最大件数
    search_page_size: int = 20

    # ---------- 競合ページ取得 ----------
    fetch_timeout: float = 8.0
    # 同時取得数（このサイズのバッチを順番に処理する）
    fetch_concurrency: int = 5
    fetch_user_agent: str = "Mozilla/5.0 (compatible; Kiji/1.0; +https://kiji.ai)"

    # ---------- OpenAI ----------
    openai_api_key: str | None = None
    # OPENAI_MODEL=gpt-4.1 などと書けば上書きされる
    openai_model: str = "gpt-4o"

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
