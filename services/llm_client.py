# services/llm_client.py
from __future__ import annotations

from typing import Optional

from openai import AsyncOpenAI

from app.config import Settings, get_settings

_clients: dict[str, AsyncOpenAI] = {}


def get_openai_client(settings: Optional[Settings] = None) -> AsyncOpenAI:
    """API キーごとに AsyncOpenAI を 1 つだけ作って使い回す。"""
    settings = settings or get_settings()
    api_key = settings.openai_api_key
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY が設定されていません")
    if api_key not in _clients:
        _clients[api_key] = AsyncOpenAI(api_key=api_key)
    return _clients[api_key]


async def complete(
    prompt: str,
    *,
    settings: Optional[Settings] = None,
    temperature: float = 0.7,
    max_tokens: int = 2000,
    json_mode: bool = False,
) -> str:
    """
    1 プロンプト → テキスト 1 本の単純な補完。
    エラーはそのまま呼び出し側に返す（フォールバックは各エージェント側で行う）。
    """
    settings = settings or get_settings()
    client = get_openai_client(settings)

    kwargs = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = await client.chat.completions.create(
        model=settings.openai_model,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
        max_tokens=max_tokens,
        **kwargs,
    )
    return response.choices[0].message.content or ""
