# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from agents import ranking_agent
from app.config import get_settings
from app.main import app
from services.serp_client import demo_search_results
from tests.conftest import make_settings


@pytest.fixture
def client():
    app.dependency_overrides[get_settings] = lambda: make_settings()
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_analyze_returns_competitors_outline_and_targets(client):
    resp = client.post("/api/analyze", json={"keyword": "  SEO 対策  "})

    assert resp.status_code == 200
    body = resp.json()
    assert body["keyword"] == "SEO 対策"
    assert len(body["competitors"]) == 5
    first = body["competitors"][0]
    assert first["rank"] == 1
    assert first["wordCount"] == 8500
    assert first["headingCount"] == 6
    assert len(body["cooccurrence"]) <= 20
    assert body["outline"][0]["tag"] == "h1"
    assert body["seoTargets"] == {"recommendedWordCount": 7216, "avgWordCount": 6560}


@pytest.mark.parametrize("keyword", ["a", " ", "あ" * 101])
def test_analyze_rejects_bad_keyword(client, keyword):
    resp = client.post("/api/analyze", json={"keyword": keyword})

    assert resp.status_code == 400


def test_score_endpoint(client):
    html = "<h1>SEO 入門</h1>" + "".join(f"<h2>章{i}</h2>" for i in range(4)) + "<p>料金</p>"
    resp = client.post(
        "/api/score",
        json={"keyword": "SEO", "content": html, "cooccurrence": ["料金", "評判"], "targetWordCount": 20},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["headingStructure"] == 70
    assert body["cooccurrenceCoverage"] == 50
    assert body["details"]["coveredCooccurrences"] == ["料金"]
    assert body["details"]["missingCooccurrences"] == ["評判"]
    assert body["details"]["keywordCount"] == 1


def test_generate_endpoint_offline(client):
    resp = client.post(
        "/api/generate",
        json={
            "keyword": "SEO",
            "outline": [
                {"tag": "h1", "text": "SEO 入門"},
                {"tag": "h2", "text": "基本"},
                {"tag": "h3", "text": "仕組み"},
            ],
            "cooccurrence": ["基本", {"word": "仕組み", "score": 3}],
            "targetWordCount": 1000,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "SEO 入門"
    assert body["seoScore"]["details"]["coveredCooccurrences"] == ["基本", "仕組み"]
    assert body["seoScore"]["details"]["targetWordCount"] == 1000


def test_generate_drops_invalid_outline_rows_and_defaults_target(client):
    resp = client.post(
        "/api/generate",
        json={
            "keyword": "SEO",
            "outline": [
                {"tag": "h1", "text": "SEO 入門"},
                {"tag": "h5", "text": "対象外"},
                {"tag": "h2", "text": ""},
                {"tag": "h2", "text": "基本"},
                "bad",
                {"tag": "h3", "text": "仕組み"},
            ],
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert "対象外" not in body["content"]
    assert body["content"].count("<h") == 3
    assert body["seoScore"]["details"]["targetWordCount"] == 6000


def test_generate_requires_three_valid_headings(client):
    resp = client.post(
        "/api/generate",
        json={
            "keyword": "SEO",
            "outline": [
                {"tag": "h1", "text": "SEO 入門"},
                {"tag": "h2", "text": "基本"},
                {"tag": "h6", "text": "対象外"},
            ],
        },
    )

    assert resp.status_code == 400
    assert "最低3つ" in resp.json()["detail"]


def test_ranking_without_search_key_is_unavailable(client):
    resp = client.post("/api/ranking", json={"keyword": "SEO", "targetUrl": "https://mine.test/"})

    assert resp.status_code == 503


def test_pipeline_runs_every_node(client):
    resp = client.post("/api/pipeline", json={"keyword": "SEO 対策"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["targetWordCount"] == 7216
    assert body["analysis"]["avgWordCount"] == 6560
    assert body["seoScore"] == body["article"]["seoScore"]
    nodes = [m.split("]")[0].lstrip("[") for m in body["progressMessages"]]
    assert nodes == ["analyzer", "analyzer", "outline", "outline", "article", "article", "scorer", "scorer"]


def test_ranking_search_failure_is_bad_gateway(client, monkeypatch):
    async def failed_search(keyword, count=10, **kwargs):
        return demo_search_results(keyword)[:count]

    monkeypatch.setattr(ranking_agent, "search", failed_search)
    app.dependency_overrides[get_settings] = lambda: make_settings(brave_search_api_key="test-key")

    resp = client.post("/api/ranking", json={"keyword": "SEO", "targetUrl": "https://example.com/"})

    assert resp.status_code == 502
    assert resp.json()["detail"] == "検索に失敗しました"


def test_rewrite_without_llm_key_is_unavailable(client):
    resp = client.post("/api/rewrite", json={"content": "<p>本文</p>"})

    assert resp.status_code == 503


def test_rewrite_rejects_empty_content(client):
    app.dependency_overrides[get_settings] = lambda: make_settings(openai_api_key="sk-test")

    resp = client.post("/api/rewrite", json={"content": " "})

    assert resp.status_code == 400


def test_keyword_suggest_offline(client):
    resp = client.post("/api/keywords/suggest", json={"topic": " ブログ "})

    assert resp.status_code == 200
    body = resp.json()
    assert body["topic"] == "ブログ"
    assert body["keywords"][0]["keyword"] == "ブログ"
    assert set(body["keywords"][0]) == {"keyword", "searchVolume", "competition", "priority", "longTail", "reason"}


def test_keyword_suggest_rejects_short_topic(client):
    resp = client.post("/api/keywords/suggest", json={"topic": "a"})

    assert resp.status_code == 400
