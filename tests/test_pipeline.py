# tests/test_pipeline.py
import asyncio

from app.graph.workflow import run_pipeline


def test_pipeline_fills_state_offline(offline_settings):
    state = asyncio.run(run_pipeline("SEO 対策", settings=offline_settings))

    assert state["target_word_count"] == state["analysis"].recommended_word_count
    assert state["outline"][0].tag == "h1"
    assert state["current_node"] == "scorer"


def test_scorer_reuses_article_score(offline_settings):
    state = asyncio.run(run_pipeline("SEO 対策", target_word_count=3000, settings=offline_settings))

    score = state["seo_score"]
    assert score is state["article"].seo_score
    assert score.details.target_word_count == 3000
    assert f"overall={score.overall}" in state["progress_messages"][-1]
    assert f"word_count_score={score.word_count_score}" in state["progress_messages"][-1]
