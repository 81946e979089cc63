# agents/analyzer_agent.py

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional, Tuple

import httpx

from agents.cooccurrence_agent import extract_cooccurrence
from agents.parser_agent import analyze_page
from app.config import Settings, get_settings
from models.analysis_models import AnalysisResult, CompetitorResult, HeadingFrequency
from models.serp_models import SerpResult
from models.site_models import Heading
from services.crawler import gather_in_batches
from services.serp_client import DEMO_URL_PREFIX, is_demo_results, search

logger = logging.getLogger(__name__)

# ============================================================
# パラメータ
# ============================================================

# 何件の検索結果を分析するか
MAX_COMPETITORS: int = 10

# これ以下の文字数のページ（取得失敗・ほぼ空）は平均文字数の計算から外す
MIN_VALID_WORD_COUNT: int = 500

# 有効なページが 1 件もないときの平均文字数
DEFAULT_AVG_WORD_COUNT: int = 5000

MAX_HEADING_PATTERNS: int = 50


# ============================================================
# 集計ユーティリティ
# ============================================================

def average_word_count(competitors: List[CompetitorResult]) -> int:
    """500 文字超のページだけで平均を取る（四捨五入）。"""
    valid = [c.word_count for c in competitors if c.word_count > MIN_VALID_WORD_COUNT]
    if not valid:
        return DEFAULT_AVG_WORD_COUNT
    return int(sum(valid) / len(valid) + 0.5)


def heading_frequencies(
    competitors: List[CompetitorResult],
    limit: int = MAX_HEADING_PATTERNS,
) -> List[HeadingFrequency]:
    """(tag, text) が同じ見出しの出現回数。多い順、同数は初出順。"""
    counts: Counter[Tuple[str, str]] = Counter()
    for c in competitors:
        for h in c.headings:
            counts[(h.tag, h.text)] += 1

    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        HeadingFrequency(tag=tag, text=text, frequency=freq)
        for (tag, text), freq in ranked[:limit]
    ]


def build_analysis(keyword: str, competitors: List[CompetitorResult]) -> AnalysisResult:
    """competitors から共起語・平均文字数・頻出見出しをまとめる。"""
    return AnalysisResult(
        competitors=competitors,
        cooccurrence=extract_cooccurrence(competitors, keyword),
        avg_word_count=average_word_count(competitors),
        all_headings=heading_frequencies(competitors),
    )


# ============================================================
# メインロジック
# ============================================================

class CompetitorAnalyzer:
    """
    キーワードの検索上位ページを取得・解析して AnalysisResult を作る。

    1. 検索 API で上位 10 件を取得
    2. デモ URL ならページ取得をスキップしてデモ競合データを使う
    3. それ以外は各 URL の HTML を 5 件ずつのバッチで取得・解析
    4. 共起語・平均文字数・頻出見出しを集計

    1 ページの取得失敗は文字数 0・見出しなしとして扱い、全体は止めない。
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        # テストでは httpx.MockTransport を差し込む
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport)

    async def _fetch_competitors(
        self,
        client: httpx.AsyncClient,
        results: List[SerpResult],
    ) -> List[CompetitorResult]:
        pages = await gather_in_batches(
            lambda r: analyze_page(client, r.url, settings=self.settings),
            results,
            self.settings.fetch_concurrency,
        )
        return [
            CompetitorResult(
                rank=i,
                title=r.title,
                url=r.url,
                snippet=r.snippet,
                word_count=page.word_count,
                headings=page.headings,
            )
            for i, (r, page) in enumerate(zip(results, pages), start=1)
        ]

    async def analyze(self, keyword: str) -> AnalysisResult:
        logger.info("[analyzer] analyze start keyword=%s", keyword)

        async with self._client() as client:
            results = await search(
                keyword,
                MAX_COMPETITORS,
                settings=self.settings,
                client=client,
            )

            if is_demo_results(results):
                logger.info("[analyzer] demo search results detected, demo competitors used")
                competitors = demo_competitors(keyword)
            else:
                competitors = await self._fetch_competitors(client, results)

        analysis = build_analysis(keyword, competitors)
        logger.info(
            "[analyzer] analyze done keyword=%s competitors=%d cooccurrence=%d avg_word_count=%d",
            keyword,
            len(analysis.competitors),
            len(analysis.cooccurrence),
            analysis.avg_word_count,
        )
        return analysis


async def analyze_competitors(
    keyword: str,
    settings: Optional[Settings] = None,
) -> AnalysisResult:
    """CompetitorAnalyzer を 1 回だけ使うときのショートカット。"""
    return await CompetitorAnalyzer(settings).analyze(keyword)


# ============================================================
# デモ用の競合データ（オフラインでも共起語・構成案に意味のある入力を渡す）
# ============================================================

def _headings(rows: List[Tuple[str, str]]) -> List[Heading]:
    return [Heading(tag=tag, text=text) for tag, text in rows]


def demo_competitors(keyword: str) -> List[CompetitorResult]:
    kw = keyword.split()
    main = kw[0] if kw else keyword
    sub = kw[1] if len(kw) > 1 else ""

    rows: List[Dict] = [
        {
            "title": f"【2026年最新】{keyword}の完全ガイド｜初心者が今すぐやるべきこと",
            "snippet": f"{keyword}について初心者向けに基本から解説。",
            "word_count": 8500,
            "headings": [
                ("h2", f"{keyword}とは？基本概念を理解しよう"),
                ("h3", f"{main}の定義と重要性"),
                ("h3", f"なぜ今{keyword}が注目されているのか"),
                ("h2", f"{keyword}を始める前に知っておくべきこと"),
                ("h3", "必要なツールと準備"),
                ("h3", "初心者がよくやる失敗パターン"),
                ("h2", f"{keyword}の具体的なやり方5ステップ"),
                ("h3", "ステップ1：目標設定とキーワード選定"),
                ("h3", "ステップ2：競合リサーチと分析"),
                ("h3", "ステップ3：コンテンツの作成"),
                ("h3", "ステップ4：内部対策と技術的な最適化"),
                ("h3", "ステップ5：効果測定と改善"),
                ("h2", f"{keyword}に役立つおすすめツール"),
                ("h2", f"{keyword}の成功事例"),
                ("h2", f"まとめ：{keyword}で成果を出すコツ"),
            ],
        },
        {
            "title": f"{keyword}とは？基本から実践まで徹底解説",
            "snippet": f"{keyword}の基本を網羅的に解説します。",
            "word_count": 7200,
            "headings": [
                ("h2", f"{keyword}の基礎知識"),
                ("h3", f"{main}の仕組みと特徴"),
                ("h3", f"{sub or main}との関連性"),
                ("h2", f"{keyword}の実践テクニック"),
                ("h3", "効果的なキーワード選定の方法"),
                ("h3", "コンテンツSEOの基本"),
                ("h3", "被リンク獲得の戦略"),
                ("h2", f"{keyword}でよくある質問"),
                ("h2", f"{keyword}の最新トレンド"),
                ("h2", "まとめ"),
            ],
        },
        {
            "title": f"初心者でもできる{keyword}15選｜無料ツールも紹介",
            "snippet": f"{keyword}の具体的な方法を15個紹介。",
            "word_count": 6800,
            "headings": [
                ("h2", f"{keyword}で重要な要素とは"),
                ("h3", "検索エンジンの評価基準"),
                ("h3", "ユーザー体験の重要性"),
                ("h2", f"{keyword}のおすすめ施策15選"),
                ("h3", "タイトルタグの最適化"),
                ("h3", "メタディスクリプションの書き方"),
                ("h3", "見出し構造の設計"),
                ("h3", "内部リンクの最適化"),
                ("h3", "画像のalt属性設定"),
                ("h2", "無料で使えるおすすめツール5選"),
                ("h3", "Google Search Console"),
                ("h3", "Google Analytics"),
                ("h2", f"まとめ：{keyword}は継続が大事"),
            ],
        },
        {
            "title": f"{keyword}で最初にやるべき7つのこと【保存版】",
            "snippet": f"{keyword}の優先順位を解説。",
            "word_count": 5500,
            "headings": [
                ("h2", f"{keyword}の全体像を把握する"),
                ("h2", "サイト構造を最適化する"),
                ("h3", "サイトマップの作成"),
                ("h3", "URL設計のポイント"),
                ("h2", "質の高いコンテンツを作る"),
                ("h3", "検索意図を理解する"),
                ("h3", "E-E-A-Tを意識した執筆"),
                ("h2", "テクニカルSEOの基本"),
                ("h2", "効果測定の方法"),
                ("h2", "まとめ"),
            ],
        },
        {
            "title": f"{keyword}の基本と効果が出るまでの期間",
            "snippet": f"{keyword}の効果と期間について。",
            "word_count": 4800,
            "headings": [
                ("h2", f"{keyword}とは何か"),
                ("h2", f"{keyword}の効果が出るまでの期間"),
                ("h3", "短期的に効果が出る施策"),
                ("h3", "長期的に取り組む施策"),
                ("h2", f"{keyword}の費用対効果"),
                ("h3", "自社で行う場合のコスト"),
                ("h3", "外注する場合の相場"),
                ("h2", f"{keyword}の今後の展望"),
                ("h2", "まとめ"),
            ],
        },
    ]

    return [
        CompetitorResult(
            rank=rank,
            title=row["title"],
            url=f"{DEMO_URL_PREFIX}/{rank}",
            snippet=row["snippet"],
            word_count=row["word_count"],
            headings=_headings(row["headings"]),
        )
        for rank, row in enumerate(rows, start=1)
    ]
