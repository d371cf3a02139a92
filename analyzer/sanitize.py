"""
Rebuild typed analysis objects from loosely structured LLM output.

Nothing here raises on bad input: unknown enum values fall back to defaults,
non-list fields become empty lists and numbers are coerced and clamped.
"""

import math
import re
import secrets
from typing import Any, Dict, List, Optional, Set

from models import (
    BusinessTask,
    EvalCheck,
    EvalMetric,
    Feedback,
    PainPoint,
    Strength,
    Workflow,
    utc_now,
)

PRIORITIES = {"critical", "high", "medium", "low"}
TASK_CATEGORIES = {"reviews", "operations", "marketing", "competitive", "customer_experience"}
METRIC_TYPES = {"boolean", "number", "percentage"}
SEVERITIES = {"low", "medium", "high", "critical"}
VALID_TOOLS = [
    "browser", "voice", "tts", "image_model", "video",
    "sms", "email", "calendar", "llm", "camera",
]
CHECK_TYPES = {
    "exact_match",
    "contains_keyword",
    "sentiment_positive",
    "response_under_seconds",
    "llm_judge",
}

MAX_QUOTES = 3


def as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def as_str_list(value: Any) -> List[str]:
    return [str(v) for v in as_list(value) if v not in (None, "")]


def as_number(value: Any) -> Optional[float]:
    """Finite numbers pass through and numeric strings like "90%" are parsed. Anything else is None."""
    if isinstance(value, bool):
        return None
    number = None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            match = re.search(r"-?\d+(?:\.\d+)?", value)
            if match:
                number = float(match.group(0))
    except OverflowError:
        return None
    return number if number is not None and math.isfinite(number) else None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def pick(value: Any, allowed: Set[str], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def as_real(value: Any) -> Optional[float]:
    """Like as_number but only accepts actual numbers."""
    return None if isinstance(value, str) else as_number(value)


def sentiment_score(value: Any) -> int:
    number = as_real(value)
    if number is None:
        return 50
    return int(round(clamp(number, 0, 100)))


def _unique_id(candidate: Any, prefix: str, seen: Set[str]) -> str:
    item_id = str(candidate) if candidate else f"{prefix}-{secrets.token_hex(3)}"
    base, n = item_id, 2
    while item_id in seen:
        item_id = f"{base}-{n}"
        n += 1
    seen.add(item_id)
    return item_id


# ======================
# Tasks
# ======================

def sanitize_eval_metric(raw: Any) -> EvalMetric:
    raw = raw if isinstance(raw, dict) else {}
    return EvalMetric(
        metric=str(raw.get("metric") or "metric"),
        description=str(raw.get("description") or ""),
        type=pick(raw.get("type"), METRIC_TYPES, "boolean"),
        target=as_number(raw.get("target")),
        current=as_number(raw.get("current")),
    )


def sanitize_tasks(raw_tasks: Any) -> List[BusinessTask]:
    """
    Build tasks from the LLM "tasks" array.

    Every task starts pending with zeroed feedback; ids are made unique
    within the list.
    """
    now = utc_now()
    seen: Set[str] = set()
    tasks = []
    for raw in as_list(raw_tasks):
        if not isinstance(raw, dict):
            continue
        tasks.append(
            BusinessTask(
                id=_unique_id(raw.get("id"), "task", seen),
                title=str(raw.get("title") or "Untitled Task"),
                description=str(raw.get("description") or ""),
                priority=pick(raw.get("priority"), PRIORITIES, "medium"),
                category=pick(raw.get("category"), TASK_CATEGORIES, "operations"),
                reasoning=str(raw.get("reasoning") or ""),
                evidence=as_str_list(raw.get("evidence")),
                actions=as_str_list(raw.get("actions")),
                eval_harness=[sanitize_eval_metric(e) for e in as_list(raw.get("eval_harness"))],
                estimated_impact=str(raw.get("estimated_impact") or ""),
                status="pending",
                feedback=Feedback(),
                created_at=now,
                updated_at=now,
            )
        )
    return tasks


# ======================
# Workflow analysis
# ======================

def sanitize_pain_point(raw: Dict[str, Any]) -> PainPoint:
    issue = str(raw.get("issue") or "unknown")
    frequency = as_number(raw.get("frequency"))
    return PainPoint(
        issue=issue,
        label=str(raw.get("label") or raw.get("issue") or "Unknown Issue"),
        frequency=max(1, int(frequency)) if frequency else 1,
        severity=pick(raw.get("severity"), SEVERITIES, "medium"),
        example_quotes=as_str_list(raw.get("example_quotes"))[:MAX_QUOTES],
    )


def sanitize_strength(raw: Any) -> Strength:
    if isinstance(raw, str):
        return Strength(label=raw or "Unknown")
    mentions = as_number(raw.get("mentions"))
    return Strength(
        label=str(raw.get("label") or "Unknown"),
        mentions=max(1, int(mentions)) if mentions else 1,
    )


def sanitize_eval_check(raw: Any) -> EvalCheck:
    raw = raw if isinstance(raw, dict) else {}
    target = raw.get("target")
    return EvalCheck(
        name=str(raw.get("name") or "metric"),
        description=str(raw.get("description") or ""),
        type=pick(raw.get("type"), CHECK_TYPES, "llm_judge"),
        target=None if target in (None, "") else str(target),
    )


def sanitize_workflows(raw_workflows: Any) -> List[Workflow]:
    now = utc_now()
    seen: Set[str] = set()
    workflows = []
    for i, raw in enumerate(as_list(raw_workflows)):
        if not isinstance(raw, dict):
            continue
        tools = raw.get("tools_used")
        confidence = as_real(raw.get("confidence"))
        workflows.append(
            Workflow(
                id=_unique_id(raw.get("id") or f"wf-{i}", "wf", seen),
                name=str(raw.get("name") or "Unnamed Workflow"),
                description=str(raw.get("description") or ""),
                trigger=str(raw.get("trigger") or "Manual"),
                tools_used=[t for t in tools if t in VALID_TOOLS] if isinstance(tools, list) else ["llm"],
                user_facing=bool(raw.get("user_facing")),
                actions=as_str_list(raw.get("actions")),
                eval_metrics=[sanitize_eval_check(m) for m in as_list(raw.get("eval_metrics"))],
                pain_point_id=str(raw.get("pain_point_id") or ""),
                confidence=0.8 if confidence is None else clamp(confidence, 0.0, 1.0),
                status="suggested",
                feedback=Feedback(),
                created_at=now,
                updated_at=now,
            )
        )
    return workflows


def sanitize_analysis_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize every list in a workflow analysis response."""
    return {
        "pain_points": [
            sanitize_pain_point(p) for p in as_list(raw.get("pain_points")) if isinstance(p, dict)
        ],
        "strengths": [
            sanitize_strength(s) for s in as_list(raw.get("strengths")) if isinstance(s, (dict, str))
        ],
        "unanswered_questions": as_str_list(raw.get("unanswered_questions")),
        "workflows": sanitize_workflows(raw.get("suggested_workflows", raw.get("workflows"))),
    }
