"""
Workflow analysis: pain points, strengths and suggested AI workflows
derived from a business's reviews.
"""

import logging
from typing import Any, Dict

from analyzer.mock_analysis import mock_business_analysis
from analyzer.prompts import WORKFLOW_PROMPT, build_workflow_user_prompt
from analyzer.sanitize import sanitize_analysis_fields
from analyzer.task_engine import AnalysisError
from config import settings
from core.tracing import traced
from models import BusinessAnalysis, BusinessRecord, utc_now
from utils.clients.anthropic import call_anthropic_api_with_retry
from utils.parsing.json import repair_and_parse_json

logger = logging.getLogger(__name__)


@traced("analyzeBusinessReviews")
async def analyze_reviews_raw(business: BusinessRecord) -> Dict[str, Any]:
    response_text = await call_anthropic_api_with_retry(
        system_prompt=WORKFLOW_PROMPT,
        user_prompt=build_workflow_user_prompt(business),
    )
    return repair_and_parse_json(response_text)


async def analyze_business_reviews(business: BusinessRecord) -> BusinessAnalysis:
    """
    Analyze reviews into pain points and workflow suggestions.

    Raises:
        AnalysisError: If the LLM call, JSON parsing or reconstruction fails
    """
    logger.info(f"🤖 Analyzing workflows for \"{business.name}\"")
    try:
        raw = await analyze_reviews_raw(business)
        analysis = BusinessAnalysis(
            business_id=business.id,
            business_type=str(raw.get("business_type") or business.category),
            analyzed_at=utc_now(),
            analysis_source="llm",
            **sanitize_analysis_fields(raw),
        )
    except Exception as e:
        logger.error(f"❌ Workflow analysis failed: {str(e)}")
        raise AnalysisError(f"Workflow analysis failed: {str(e)}") from e

    logger.info(
        f"✅ {len(analysis.pain_points)} pain points, {len(analysis.workflows)} workflows"
    )
    return analysis


async def analyze_business(business: BusinessRecord) -> BusinessAnalysis:
    """Analyze with Claude when configured, otherwise (or on failure) return mock analysis."""
    if not settings.llm_configured:
        logger.info("🧪 ANTHROPIC_API_KEY not set, using mock analysis")
        return mock_business_analysis(business)

    try:
        return await analyze_business_reviews(business)
    except AnalysisError as e:
        logger.warning(f"⚠️ Falling back to mock analysis: {str(e)}")
        return mock_business_analysis(business)
