# tests/test_cooccurrence.py
import re
import string
from itertools import product

from agents.cooccurrence_agent import extract_cooccurrence
from models.analysis_models import CompetitorResult
from models.site_models import Heading


def _competitor(rank: int, texts: list[str], tag: str = "h2") -> CompetitorResult:
    return CompetitorResult(
        rank=rank,
        title=f"title{rank}",
        url=f"https://site{rank}.test/",
        headings=[Heading(tag=tag, text=t) for t in texts],
    )


def test_keyword_tokens_are_excluded():
    competitors = [
        _competitor(1, ["SEO とは", "SEO 入門"]),
        _competitor(2, ["対策 事例", "seo 基本"]),
    ]

    words = [t.word for t in extract_cooccurrence(competitors, "SEO 対策")]

    assert "SEO" not in words
    assert "seo" not in words
    assert "対策" not in words
    assert "入門" in words
    assert "事例" in words


def test_stop_words_are_excluded():
    competitors = [_competitor(1, ["まとめ", "おすすめ", "比較", "料金"])]

    assert [t.word for t in extract_cooccurrence(competitors, "SEO")] == ["料金"]


def test_stop_words_and_pattern_are_configurable():
    competitors = [_competitor(1, ["price guide", "price list"])]

    terms = extract_cooccurrence(
        competitors,
        "seo",
        stop_words={"guide"},
        pattern=re.compile(r"[a-z]{2,8}"),
    )

    assert [(t.word, t.score) for t in terms] == [("price", 2), ("list", 1)]


def test_symbols_and_single_characters_never_qualify():
    competitors = [_competitor(1, ["① ★ 5選 a %% 料金"])]

    assert [t.word for t in extract_cooccurrence(competitors, "x")] == ["料金"]


def test_body_text_is_ignored_only_headings_count():
    competitor = CompetitorResult(
        rank=1,
        title="料金プラン",
        url="https://site1.test/",
        snippet="料金プラン",
        word_count=9999,
        headings=[Heading(tag="h3", text="導入事例")],
    )

    assert [t.word for t in extract_cooccurrence([competitor], "x")] == ["導入事例"]


def test_result_is_capped_at_30_and_sorted_by_frequency():
    # 40 種類の英字 2 文字語を、出現回数 40, 39, ... 1 回で並べる
    terms = ["".join(p) for p in product(string.ascii_lowercase, repeat=2)][:40]
    texts = []
    for i, term in enumerate(terms):
        texts.extend([term] * (40 - i))

    result = extract_cooccurrence([_competitor(1, texts)], "keyword")

    assert len(result) == 30
    scores = [t.score for t in result]
    assert scores == sorted(scores, reverse=True)
    assert result[0].word == "aa"
    assert result[0].score == 40
    assert result[-1].score == 11


def test_ties_keep_first_seen_order():
    competitors = [
        _competitor(1, ["料金 評判"]),
        _competitor(2, ["口コミ 評判 料金 口コミ"]),
    ]

    result = extract_cooccurrence(competitors, "x")

    assert [(t.word, t.score) for t in result] == [
        ("料金", 2),
        ("評判", 2),
        ("口コミ", 2),
    ]
