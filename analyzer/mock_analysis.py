"""
Deterministic analysis used when the LLM is unavailable or fails.

The content is fixed, but business identity and review evidence are taken
from the record being analyzed so the result stays tied to that business.
"""

from typing import List

from analyzer.sanitize import sanitize_analysis_fields, sanitize_tasks
from analyzer.sentiment import count_by_sentiment
from models import BusinessAnalysis, BusinessProfile, BusinessRecord, Sentiment


MOCK_TASKS = [
    {
        "id": "task-review-response",
        "title": "Respond to recent negative reviews",
        "description": "Several recent reviews describe poor experiences with no reply from the owner. "
        "A short, specific public response shows future customers the problem was heard.",
        "priority": "high",
        "category": "reviews",
        "reasoning": "Unanswered complaints stay at the top of the listing and shape first impressions.",
        "actions": [
            "List every 1-2 star review from the last 90 days",
            "Draft a reply that names the specific issue and the fix",
            "Publish replies within 48 hours of each new negative review",
        ],
        "eval_harness": [
            {"metric": "response_rate", "description": "Share of negative reviews with an owner reply",
             "type": "percentage", "target": 90},
            {"metric": "median_reply_hours", "description": "Median hours from review to reply",
             "type": "number", "target": 48},
        ],
        "estimated_impact": "Visible owner engagement typically lifts conversion from the listing.",
    },
    {
        "id": "task-peak-wait",
        "title": "Cut wait times during the weekend peak",
        "description": "Wait time is the most common complaint. Adding capacity during the busiest "
        "hours addresses it directly.",
        "priority": "critical",
        "category": "operations",
        "reasoning": "Long waits drive the lowest ratings and are fixable with scheduling.",
        "actions": [
            "Measure order-to-handoff time for two weekends",
            "Open a second register or add one staff member from 8-11 AM on weekends",
            "Post expected wait times at the counter",
        ],
        "eval_harness": [
            {"metric": "avg_wait_minutes", "description": "Average order-to-handoff time at peak",
             "type": "number", "target": 8},
            {"metric": "wait_complaints", "description": "New reviews mentioning waits per month",
             "type": "number", "target": 1},
        ],
        "estimated_impact": "Fewer wait-related complaints and a higher weekend rating.",
    },
    {
        "id": "task-order-reliability",
        "title": "Fix dropped online orders",
        "description": "Customers report online orders that never reached the counter. Each one is "
        "a lost sale and a likely one-star review.",
        "priority": "high",
        "category": "customer_experience",
        "reasoning": "Ordering failures are binary and highly visible to affected customers.",
        "actions": [
            "Audit the ordering integration for missed notifications",
            "Add an audible alert for new online orders",
            "Offer an immediate remake when an order is missing",
        ],
        "eval_harness": [
            {"metric": "orders_missed", "description": "Online orders with no record at pickup",
             "type": "number", "target": 0},
            {"metric": "alert_installed", "description": "New-order alert active at the counter",
             "type": "boolean"},
        ],
        "estimated_impact": "Eliminates one of the most damaging review themes.",
    },
    {
        "id": "task-cleanliness",
        "title": "Add a midday cleaning round",
        "description": "Reviews mention sticky tables and full bins by early afternoon. A scheduled "
        "check keeps the space presentable through the lunch rush.",
        "priority": "medium",
        "category": "operations",
        "reasoning": "Cleanliness complaints recur and are cheap to fix.",
        "actions": [
            "Create a checklist for tables, bins and condiment station",
            "Assign the round to a named staff member at 11 AM and 2 PM",
        ],
        "eval_harness": [
            {"metric": "checklist_completion", "description": "Days with both rounds completed",
             "type": "percentage", "target": 95},
        ],
        "estimated_impact": "Removes a recurring negative theme from new reviews.",
    },
    {
        "id": "task-highlight-strengths",
        "title": "Promote what customers already praise",
        "description": "Positive reviews consistently mention product quality and friendly staff. "
        "Feature those in the listing photos and description.",
        "priority": "low",
        "category": "marketing",
        "reasoning": "Reinforcing known strengths attracts customers who value them.",
        "actions": [
            "Upload fresh photos of the most praised items",
            "Update the listing description with the top two strengths",
            "Ask happy regulars for a review",
        ],
        "eval_harness": [
            {"metric": "new_positive_reviews", "description": "4-5 star reviews per month",
             "type": "number", "target": 15},
        ],
        "estimated_impact": "Steady growth in positive review volume.",
    },
]

MOCK_ANALYSIS = {
    "pain_points": [
        {"issue": "long_wait_times", "label": "Long Wait Times", "frequency": 3, "severity": "high"},
        {"issue": "missing_orders", "label": "Lost Online Orders", "frequency": 1, "severity": "critical"},
        {"issue": "cleanliness", "label": "Cleanliness", "frequency": 1, "severity": "medium"},
        {"issue": "pricing", "label": "Rising Prices", "frequency": 1, "severity": "low"},
    ],
    "strengths": [
        {"label": "Product Quality", "mentions": 4},
        {"label": "Friendly Staff", "mentions": 3},
        {"label": "Work-Friendly Space", "mentions": 1},
    ],
    "unanswered_questions": [
        "Are weekend hours going to start earlier?",
        "Is there seating with power outlets?",
        "Why did the app not register my order?",
    ],
    "suggested_workflows": [
        {
            "id": "wf-review-responder",
            "name": "Review Responder",
            "description": "Watches the listing for new reviews and drafts owner replies for approval.",
            "trigger": "Every 4 hours",
            "tools_used": ["browser", "llm", "email"],
            "user_facing": False,
            "actions": [
                "Scrape new reviews from the listing",
                "Classify each review and extract the specific issue",
                "Draft a reply and email it to the owner for approval",
            ],
            "eval_metrics": [
                {"name": "reply_tone", "description": "Draft is polite and specific",
                 "type": "sentiment_positive"},
                {"name": "mentions_issue", "description": "Draft names the reviewer's issue",
                 "type": "llm_judge"},
            ],
            "pain_point_id": "long_wait_times",
            "confidence": 0.85,
        },
        {
            "id": "wf-queue-watch",
            "name": "Queue Watch",
            "description": "Estimates the line length from the counter camera and texts the manager "
            "when it passes a threshold.",
            "trigger": "Every 5 minutes during opening hours",
            "tools_used": ["camera", "image_model", "sms"],
            "user_facing": False,
            "actions": [
                "Capture a frame from the counter camera",
                "Count people in line",
                "Send an SMS to the manager above 8 people",
            ],
            "eval_metrics": [
                {"name": "alert_latency", "description": "Seconds from threshold to SMS",
                 "type": "response_under_seconds", "target": "60"},
            ],
            "pain_point_id": "long_wait_times",
            "confidence": 0.7,
        },
        {
            "id": "wf-order-line",
            "name": "Order Status Line",
            "description": "Answers calls about order status and hours with a voice agent.",
            "trigger": "Inbound phone call",
            "tools_used": ["voice", "tts", "llm"],
            "user_facing": True,
            "actions": [
                "Answer the call and identify the request",
                "Look up the order or opening hours",
                "Read back the answer and offer a callback if unresolved",
            ],
            "eval_metrics": [
                {"name": "states_hours", "description": "Correctly states today's hours",
                 "type": "contains_keyword", "target": "open"},
            ],
            "pain_point_id": "missing_orders",
            "confidence": 0.75,
        },
        {
            "id": "wf-cleaning-check",
            "name": "Cleaning Check",
            "description": "Photo check of tables and bins twice a day with an automatic reminder.",
            "trigger": "Daily at 11AM and 2PM",
            "tools_used": ["camera", "image_model", "sms"],
            "user_facing": False,
            "actions": [
                "Capture a photo of the seating area",
                "Flag dirty tables or full bins",
                "Text the assigned staff member",
            ],
            "eval_metrics": [
                {"name": "flag_accuracy", "description": "Flag matches manual inspection",
                 "type": "exact_match", "target": "clean"},
            ],
            "pain_point_id": "cleanliness",
            "confidence": 0.65,
        },
    ],
}


def _negative_quotes(business: BusinessRecord, limit: int = 3) -> List[str]:
    return [r.text for r in business.reviews if r.sentiment == Sentiment.NEGATIVE and r.text][:limit]


def _sentiment_score(business: BusinessRecord) -> int:
    counts = count_by_sentiment(business.reviews)
    rated = counts["positive"] + counts["negative"] + counts["neutral"]
    if rated:
        return round(100 * (counts["positive"] + 0.5 * counts["neutral"]) / rated)
    return round(business.rating * 20) if business.rating else 50


def mock_business_profile(
    business: BusinessRecord, session_id: str = None, session_url: str = None
) -> BusinessProfile:
    """
    Build the fallback task profile for a business.

    Args:
        business: The discovered business (its id is preserved)
        session_id: Remote browser session id, if any
        session_url: Remote browser replay URL, if any

    Returns:
        BusinessProfile marked with analysis_source="mock"
    """
    quotes = _negative_quotes(business)
    tasks = sanitize_tasks([dict(t, evidence=quotes) for t in MOCK_TASKS])
    return BusinessProfile(
        business=business,
        tasks=tasks,
        summary=(
            f"{business.name} holds a {business.rating}/5 rating across "
            f"{business.review_count} reviews. Customers praise the product and staff, "
            f"while wait times and order reliability drag the rating down."
        ),
        top_issue="Long waits at peak hours are the most frequent complaint.",
        sentiment_score=_sentiment_score(business),
        remote_session_id=session_id,
        remote_session_url=session_url,
        analysis_source="mock",
    )


def mock_business_analysis(business: BusinessRecord) -> BusinessAnalysis:
    """Build the fallback workflow analysis for a business."""
    quotes = _negative_quotes(business)
    raw = dict(MOCK_ANALYSIS)
    raw["pain_points"] = [dict(p, example_quotes=quotes) for p in MOCK_ANALYSIS["pain_points"]]
    return BusinessAnalysis(
        business_id=business.id,
        business_type=business.category,
        analysis_source="mock",
        **sanitize_analysis_fields(raw),
    )
