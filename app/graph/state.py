# app/graph/state.py
from __future__ import annotations

from typing import Any, Dict, Optional


class GraphState(Dict[str, Any]):
    """
    パイプラインの「状態」コンテナ。
    実体はただの dict だが、型ヒントとして分かりやすくするためのラッパ。
    """
    pass


def create_initial_state(
    keyword: str,
    target_word_count: Optional[int] = None,
    tone: str = "default",
) -> GraphState:
    """
    パイプライン開始時の初期 state を作成。
    target_word_count が None の場合は競合分析の推奨文字数を使う。
    """
    state: GraphState = GraphState()
    state["keyword"] = keyword
    state["target_word_count"] = target_word_count
    state["tone"] = tone
    state["progress_messages"] = []  # 各ノードからのログ的メッセージ
    state["current_node"] = None
    return state
