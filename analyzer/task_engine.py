"""
Task generation for discovered businesses.

Sends the business and its reviews to Claude, parses the (possibly malformed)
JSON answer and rebuilds a typed BusinessProfile from it.
"""

import logging
from typing import Any, Dict, Optional

from analyzer.mock_analysis import mock_business_profile
from analyzer.prompts import TASK_PROMPT, build_task_user_prompt
from analyzer.sanitize import sanitize_tasks, sentiment_score
from config import settings
from core.tracing import traced
from models import BusinessProfile, BusinessRecord, utc_now
from utils.clients.anthropic import call_anthropic_api_with_retry
from utils.parsing.json import repair_and_parse_json

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The LLM call failed or its response could not be parsed."""


@traced("generateBusinessTasks")
async def generate_tasks_raw(business: BusinessRecord) -> Dict[str, Any]:
    response_text = await call_anthropic_api_with_retry(
        system_prompt=TASK_PROMPT,
        user_prompt=build_task_user_prompt(business),
    )
    logger.debug(f"Claude response length: {len(response_text)} chars")
    return repair_and_parse_json(response_text)


async def generate_business_profile(
    business: BusinessRecord,
    session_id: Optional[str] = None,
    session_url: Optional[str] = None,
) -> BusinessProfile:
    """
    Generate prioritized, measurable improvement tasks for a business.

    Args:
        business: Discovered business record
        session_id: Remote browser session id to carry onto the profile
        session_url: Remote browser replay URL to carry onto the profile

    Returns:
        BusinessProfile with sanitized tasks, all pending

    Raises:
        AnalysisError: If the LLM call, JSON parsing or reconstruction fails
    """
    logger.info(f"🤖 Generating tasks for \"{business.name}\" ({len(business.reviews)} reviews)")
    try:
        raw = await generate_tasks_raw(business)
        profile = BusinessProfile(
            business=business,
            tasks=sanitize_tasks(raw.get("tasks")),
            summary=str(raw.get("summary") or ""),
            top_issue=str(raw.get("top_issue") or ""),
            sentiment_score=sentiment_score(raw.get("sentiment_score")),
            analyzed_at=utc_now(),
            remote_session_id=session_id,
            remote_session_url=session_url,
            analysis_source="llm",
        )
    except Exception as e:
        logger.error(f"❌ Task generation failed: {str(e)}")
        raise AnalysisError(f"Task generation failed: {str(e)}") from e

    logger.info(f"✅ Generated {len(profile.tasks)} tasks")
    return profile


async def build_profile(
    business: BusinessRecord,
    session_id: Optional[str] = None,
    session_url: Optional[str] = None,
) -> BusinessProfile:
    """Generate a profile, falling back to the mock profile when the LLM is unavailable."""
    if not settings.llm_configured:
        logger.info("🧪 ANTHROPIC_API_KEY not set, using mock profile")
        return mock_business_profile(business, session_id, session_url)

    try:
        return await generate_business_profile(business, session_id, session_url)
    except AnalysisError as e:
        logger.warning(f"⚠️ Falling back to mock profile: {str(e)}")
        return mock_business_profile(business, session_id, session_url)
