# services/errors.py


class KijiError(Exception):
    """アプリ固有の例外の基底クラス。"""


class SearchNotConfiguredError(KijiError):
    """検索 API キーが未設定で、フォールバックを使えない処理を呼んだ場合。"""


class SearchFailedError(KijiError):
    """検索 API の呼び出しに失敗し、実データの検索結果が得られなかった場合。"""


class LLMNotConfiguredError(KijiError):
    """OPENAI_API_KEY が未設定で、フォールバックを使えない処理を呼んだ場合。"""
