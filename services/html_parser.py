# services/html_parser.py

from __future__ import annotations

import logging
import re
from typing import List

from bs4 import BeautifulSoup

from models.site_models import Heading, ParsedPage

logger = logging.getLogger(__name__)

# 同じレベルの閉じタグまでを最短一致で取る
HEADING_PATTERN = re.compile(r"<(h[1-6])\b[^>]*>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
WHITESPACE_PATTERN = re.compile(r"\s+")


def _extract_headings(html: str) -> List[Heading]:
    """
    h1〜h6 をドキュメント順のフラットなリストとして取得する。
    - <hN>…</hN> と閉じているものだけ拾い、閉じていない見出しは捨てる
    - 見出し内の <b> などのインラインタグはテキストだけ残す
    - 前後の空白は除去、空になった見出しは捨てる
    """
    headings: List[Heading] = []
    for m in HEADING_PATTERN.finditer(html):
        text = BeautifulSoup(m.group(2), "html.parser").get_text().strip()
        if not text:
            continue
        headings.append(Heading(tag=m.group(1).lower(), text=text))
    return headings


def _count_body_chars(soup: BeautifulSoup) -> int:
    """
    本文の文字数を数える。
    <body> があればその中だけ、なければドキュメント全体を対象にする。
    空白（改行含む）は詰めるのではなく全て削除する。
    """
    root = soup.body if soup.body is not None else soup
    for tag in root(["script", "style"]):
        tag.decompose()
    text = root.get_text()
    return len(WHITESPACE_PATTERN.sub("", text))


def parse_html(html: str) -> ParsedPage:
    """
    HTML 文字列から見出しと文字数を抽出する。
    ※ ネットワークアクセスは行わない（crawler.fetch_html で取得済み前提）

    壊れた入力でも例外は投げず、空の ParsedPage を返す。
    """
    if not html:
        return ParsedPage()

    try:
        headings = _extract_headings(html)
        word_count = _count_body_chars(BeautifulSoup(html, "html.parser"))
    except Exception as e:  # noqa: BLE001
        logger.warning("[html_parser] parse failed, empty result used: %s", e)
        return ParsedPage()

    return ParsedPage(word_count=word_count, headings=headings)
