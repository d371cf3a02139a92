import json

import pytest
from unittest.mock import AsyncMock, patch

from analyzer.task_engine import AnalysisError
from analyzer.workflows import analyze_business, analyze_business_reviews
from config import settings

LLM_RESPONSE = {
    "business_type": "bakery",
    "pain_points": [
        {
            "issue": "long_wait_times",
            "frequency": "4",
            "severity": "extreme",
            "example_quotes": ["a", "b", "c", "d"],
        },
        "junk",
    ],
    "strengths": [{"label": "Pastries", "mentions": 6}, "Friendly staff"],
    "unanswered_questions": "Do you have gluten free?",
    "suggested_workflows": [
        {
            "name": "Review Responder",
            "tools_used": ["browser", "llm", "telepathy"],
            "user_facing": 1,
            "eval_metrics": [{"name": "tone", "type": "sentiment_positive", "target": 0.9}],
            "confidence": 3.5,
        },
        {"id": "wf-queue", "tools_used": "camera", "confidence": "high"},
    ],
}


@pytest.mark.asyncio
async def test_analysis_is_sanitized(business):
    with patch(
        "analyzer.workflows.call_anthropic_api_with_retry",
        AsyncMock(return_value=json.dumps(LLM_RESPONSE)),
    ):
        analysis = await analyze_business_reviews(business)

    assert analysis.business_id == business.id
    assert analysis.business_type == "bakery"

    (pain,) = analysis.pain_points
    assert pain.label == "long_wait_times"
    assert pain.frequency == 4
    assert pain.severity == "medium"
    assert pain.example_quotes == ["a", "b", "c"]

    assert [s.label for s in analysis.strengths] == ["Pastries", "Friendly staff"]
    assert analysis.unanswered_questions == []

    first, second = analysis.workflows
    assert first.id == "wf-0"
    assert first.tools_used == ["browser", "llm"]
    assert first.user_facing is True
    assert first.confidence == 1.0
    assert first.status == "suggested"
    assert first.eval_metrics[0].type == "sentiment_positive"
    assert first.eval_metrics[0].target == "0.9"

    assert second.id == "wf-queue"
    assert second.tools_used == ["llm"]
    assert second.confidence == 0.8


@pytest.mark.asyncio
async def test_analysis_failure_raises(business):
    with patch(
        "analyzer.workflows.call_anthropic_api_with_retry",
        AsyncMock(return_value="[1, 2, 3]"),
    ):
        with pytest.raises(AnalysisError):
            await analyze_business_reviews(business)


@pytest.mark.asyncio
async def test_analyze_business_falls_back_to_mock(monkeypatch, business):
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "sk-test")
    with patch(
        "analyzer.workflows.call_anthropic_api_with_retry",
        AsyncMock(side_effect=RuntimeError("boom")),
    ):
        analysis = await analyze_business(business)

    assert analysis.analysis_source == "mock"
    assert analysis.business_id == business.id
    assert analysis.business_type == "Bakery"
    assert len(analysis.workflows) == 4
    assert all(len(p.example_quotes) <= 3 for p in analysis.pain_points)


MALFORMED_ANALYSIS = """{
  "business_type": "bakery",
  "pain_points": [
    {"issue": "wait", "frequency": 1e999, "severity": ["high"], "example_quotes": {"a": 1}},
    {"issue": "mess", "frequency": NaN, "severity": {"level": "low"}}
  ],
  "strengths": [{"label": "Bread", "mentions": -Infinity}],
  "suggested_workflows": [
    {
      "name": "Greeter",
      "tools_used": [["llm"], {"sms": true}, "sms"],
      "confidence": NaN,
      "eval_metrics": [{"name": "tone", "type": ["llm_judge"], "target": ["a"]}]
    }
  ]
}"""


@pytest.mark.asyncio
async def test_wrong_typed_fields_fall_back_to_defaults(business):
    with patch(
        "analyzer.workflows.call_anthropic_api_with_retry",
        AsyncMock(return_value=MALFORMED_ANALYSIS),
    ):
        analysis = await analyze_business_reviews(business)

    wait, mess = analysis.pain_points
    assert wait.frequency == 1
    assert wait.severity == "medium"
    assert wait.example_quotes == []
    assert mess.frequency == 1
    assert mess.severity == "medium"

    assert analysis.strengths[0].mentions == 1

    (workflow,) = analysis.workflows
    assert workflow.tools_used == ["sms"]
    assert workflow.confidence == 0.8
    assert workflow.eval_metrics[0].type == "llm_judge"


@pytest.mark.asyncio
async def test_analyze_business_falls_back_when_reconstruction_breaks(monkeypatch, business):
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "sk-test")
    with patch(
        "analyzer.workflows.call_anthropic_api_with_retry",
        AsyncMock(return_value=json.dumps(LLM_RESPONSE)),
    ), patch("analyzer.workflows.sanitize_analysis_fields", side_effect=OverflowError("inf")):
        analysis = await analyze_business(business)

    assert analysis.analysis_source == "mock"
    assert analysis.business_id == business.id
