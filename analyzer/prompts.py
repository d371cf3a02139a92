"""
Business Analysis Prompts for Claude API

System prompts for task generation and workflow analysis, plus the user
prompt that serializes a business record and its reviews.
"""

from typing import List

from models import BusinessRecord, Review


TASK_PROMPT = """You are a business improvement AI agent. You analyze real Google Maps reviews to identify specific, actionable tasks that will improve this business.

For each task you generate, you MUST include an evaluation harness: specific metrics that can be measured to determine if the task was successful. Every recommendation must be measurable.

Given the business info and reviews, generate 4-6 prioritized tasks.

Each task must have:
- id: unique short id (e.g., "task-review-response")
- title: clear action title (e.g., "Respond to 8 unanswered negative reviews")
- description: 2-3 sentences explaining what to do and why
- priority: "critical" | "high" | "medium" | "low"
- category: "reviews" | "operations" | "marketing" | "competitive" | "customer_experience"
- reasoning: why this matters, backed by data from reviews
- evidence: 2-4 direct quotes from reviews that support this task
- actions: 3-5 specific steps to complete this task
- eval_harness: array of measurable metrics, each with:
  - metric: short name (e.g., "response_rate")
  - description: what it measures
  - type: "boolean" | "number" | "percentage"
  - target: numeric target (e.g., 90 for 90%)
- estimated_impact: one sentence on expected outcome

Also provide:
- summary: 2-3 sentence overview of the business's current state
- top_issue: the single biggest issue (one sentence)
- sentiment_score: 0-100 overall sentiment from reviews

Be specific. Reference actual reviews. Don't be generic. Every task should be something the owner can act on TODAY.

## Output Format (JSON)
{
  "tasks": [ { ...task fields above... } ],
  "summary": "string",
  "top_issue": "string",
  "sentiment_score": number
}

Return ONLY valid JSON. No markdown fences, no explanation."""


WORKFLOW_PROMPT = """You are a business operations analyst specializing in AI workflow automation for small/medium businesses.

Given a business's Google Maps reviews, analyze them and return a structured JSON response with:

1. **pain_points**: Recurring issues from negative/neutral reviews. Each has:
   - issue: short identifier (snake_case, e.g. "long_wait_times")
   - label: human-readable label (e.g. "Long Wait Times")
   - frequency: how many reviews mention this (integer)
   - severity: "low" | "medium" | "high" | "critical"
   - example_quotes: 2-3 direct quotes from reviews

2. **strengths**: What the business does well. Each has:
   - label: strength name (e.g. "Coffee Quality")
   - mentions: how many reviews mention this (integer)

3. **unanswered_questions**: Questions customers have that aren't answered (from reviews). Array of strings.

4. **suggested_workflows**: 4-6 AI-powered workflows that address the pain points. Each has:
   - id: unique id (e.g. "wf-review-responder")
   - name: catchy workflow name
   - description: 1-2 sentence explanation
   - trigger: when it runs (e.g. "Every 4 hours", "Inbound phone call", "Daily at 9AM")
   - tools_used: array from ["browser", "voice", "tts", "image_model", "video", "sms", "email", "calendar", "llm", "camera"]
   - user_facing: boolean (does the customer see this?)
   - actions: array of 3-5 step descriptions
   - eval_metrics: array of automated checks, each with:
     - name: metric identifier
     - description: what it measures
     - type: "exact_match" | "contains_keyword" | "sentiment_positive" | "response_under_seconds" | "llm_judge"
     - target: optional expected value, keyword or threshold (as a string)
   - pain_point_id: which pain_point this addresses (the issue field)
   - confidence: 0-1 how confident this workflow would help

IMPORTANT: Make workflows creative, specific to the business type, and actionable. Use multiple tool types. Think about what an AI agent could actually automate.

Return ONLY valid JSON matching this schema. No markdown, no explanation."""


NO_REVIEWS_INSTRUCTION = (
    "No individual reviews were available. Based on the business type, rating and "
    "industry norms, infer the typical pain points for this category of business."
)


def format_review(review: Review) -> str:
    return f'[{review.rating}★ {review.author}, {review.date}]: "{review.text}"'


def format_reviews(reviews: List[Review]) -> str:
    return "\n".join(format_review(r) for r in reviews)


def _business_header(business: BusinessRecord) -> List[str]:
    lines = [
        f"Business: {business.name}",
        f"Type: {business.category}",
        f"Rating: {business.rating}/5 ({business.review_count} total reviews)",
        f"Address: {business.address}",
    ]
    if business.phone:
        lines.append(f"Phone: {business.phone}")
    if business.website:
        lines.append(f"Website: {business.website}")
    if business.price_level:
        lines.append(f"Price: {business.price_level}")
    if business.hours:
        lines.append(f"Hours: {business.hours}")
    return lines


def build_task_user_prompt(business: BusinessRecord) -> str:
    """
    Serialize a business for task generation.

    Args:
        business: Business record with (possibly empty) reviews

    Returns:
        User prompt text
    """
    lines = _business_header(business)
    lines.append("")

    if business.reviews:
        positive = sum(1 for r in business.reviews if r.rating >= 4)
        negative = sum(1 for r in business.reviews if 1 <= r.rating <= 2)
        lines.append(
            f"Reviews scraped: {len(business.reviews)} ({positive} positive, {negative} negative)"
        )
        lines.append("")
        lines.append(format_reviews(business.reviews))
    else:
        lines.append(NO_REVIEWS_INSTRUCTION)

    lines.append("")
    lines.append("Generate prioritized improvement tasks with evaluation harnesses.")
    return "\n".join(lines)


def build_workflow_user_prompt(business: BusinessRecord) -> str:
    lines = _business_header(business)
    lines.append("")

    if business.reviews:
        lines.append(f"Reviews ({len(business.reviews)} scraped):")
        lines.append(format_reviews(business.reviews))
    else:
        lines.append(NO_REVIEWS_INSTRUCTION)

    lines.append("")
    lines.append(
        "Analyze this business and generate AI workflow recommendations that would help "
        "them improve operations and customer experience."
    )
    return "\n".join(lines)
