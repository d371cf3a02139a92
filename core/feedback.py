"""
Feedback and status updates for generated tasks and workflows.

An item id is looked up first among the business's task profile, then among
its stored workflow analysis. The owning document is rewritten whole.
"""

import logging
from typing import Optional, Tuple, Union

from core.cache import ProfileStore
from models import (
    BusinessAnalysis,
    BusinessProfile,
    BusinessTask,
    FeedbackEdit,
    Workflow,
    utc_now,
)

logger = logging.getLogger(__name__)

FEEDBACK_ACTIONS = ("thumbs_up", "thumbs_down", "edit")
TASK_STATUSES = ("pending", "in_progress", "completed", "dismissed")
WORKFLOW_STATUSES = ("suggested", "active", "dismissed")

Item = Union[BusinessTask, Workflow]
Document = Union[BusinessProfile, BusinessAnalysis]


class NotFoundError(LookupError):
    """No profile, analysis or item matches the given ids."""


async def _locate(
    store: ProfileStore, business_id: str, item_id: str
) -> Tuple[Document, int, Item]:
    profile = await store.get_profile(business_id)
    if profile is not None:
        for i, task in enumerate(profile.tasks):
            if task.id == item_id:
                return profile, i, task

    analysis = await store.get_analysis(business_id)
    if analysis is not None:
        for i, workflow in enumerate(analysis.workflows):
            if workflow.id == item_id:
                return analysis, i, workflow

    if profile is None and analysis is None:
        raise NotFoundError(f"No profile found for business {business_id}")
    raise NotFoundError(f"Item {item_id} not found for business {business_id}")


async def _save(store: ProfileStore, document: Document, index: int, item: Item):
    if isinstance(document, BusinessProfile):
        document.tasks[index] = item
        await store.put_profile(document)
    else:
        document.workflows[index] = item
        await store.put_analysis(document)


async def apply_feedback(
    store: ProfileStore,
    business_id: str,
    item_id: str,
    action: str,
    edit_text: Optional[str] = None,
) -> Item:
    """
    Record a thumbs up/down or an edit on a task or workflow.

    Args:
        store: Profile store
        business_id: Owning business
        item_id: Task or workflow id
        action: "thumbs_up", "thumbs_down" or "edit"
        edit_text: Required for "edit"

    Returns:
        The updated task or workflow

    Raises:
        ValueError: Unknown action or edit without text
        NotFoundError: Profile or item missing (store left unchanged)
    """
    if action not in FEEDBACK_ACTIONS:
        raise ValueError(f"Unknown feedback action '{action}'")
    if action == "edit" and not (edit_text or "").strip():
        raise ValueError("edit_text is required for edit feedback")

    document, index, item = await _locate(store, business_id, item_id)

    feedback = item.feedback.model_copy(deep=True)
    if action == "thumbs_up":
        feedback.thumbs_up += 1
    elif action == "thumbs_down":
        feedback.thumbs_down += 1
    else:
        feedback.edits.append(FeedbackEdit(text=edit_text))

    updated = item.model_copy(update={"feedback": feedback, "updated_at": utc_now()})
    await _save(store, document, index, updated)
    logger.info(f"👍 Feedback '{action}' recorded on {item_id} ({business_id})")
    return updated


async def set_status(store: ProfileStore, business_id: str, item_id: str, status: str) -> Item:
    """
    Change the status of a task or workflow.

    Raises:
        ValueError: Status not valid for the item's kind
        NotFoundError: Profile or item missing
    """
    document, index, item = await _locate(store, business_id, item_id)

    allowed = TASK_STATUSES if isinstance(item, BusinessTask) else WORKFLOW_STATUSES
    if status not in allowed:
        raise ValueError(f"Invalid status '{status}', expected one of {', '.join(allowed)}")

    updated = item.model_copy(update={"status": status, "updated_at": utc_now()})
    await _save(store, document, index, updated)
    logger.info(f"🔄 {item_id} status -> {status} ({business_id})")
    return updated
