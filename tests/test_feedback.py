import pytest
import pytest_asyncio

from analyzer.mock_analysis import mock_business_analysis, mock_business_profile
from core.feedback import NotFoundError, apply_feedback, set_status


@pytest_asyncio.fixture
async def seeded_store(memory_store, business):
    await memory_store.put_business(business)
    await memory_store.put_profile(mock_business_profile(business))
    await memory_store.put_analysis(mock_business_analysis(business))
    return memory_store


@pytest.mark.asyncio
async def test_thumbs_up_and_down_on_task(seeded_store, business):
    profile = await seeded_store.get_profile(business.id)
    task_id = profile.tasks[0].id
    before = profile.tasks[0].updated_at

    await apply_feedback(seeded_store, business.id, task_id, "thumbs_up")
    await apply_feedback(seeded_store, business.id, task_id, "thumbs_up")
    updated = await apply_feedback(seeded_store, business.id, task_id, "thumbs_down")

    assert updated.feedback.thumbs_up == 2
    assert updated.feedback.thumbs_down == 1
    assert updated.updated_at >= before

    stored = await seeded_store.get_profile(business.id)
    assert stored.tasks[0].feedback.thumbs_up == 2
    # Other tasks untouched
    assert stored.tasks[1].feedback.thumbs_up == 0


@pytest.mark.asyncio
async def test_edit_appends_text(seeded_store, business):
    profile = await seeded_store.get_profile(business.id)
    task_id = profile.tasks[1].id

    updated = await apply_feedback(seeded_store, business.id, task_id, "edit", "Only weekdays")

    assert [e.text for e in updated.feedback.edits] == ["Only weekdays"]
    stored = await seeded_store.get_profile(business.id)
    assert stored.tasks[1].feedback.edits[0].text == "Only weekdays"


@pytest.mark.asyncio
async def test_feedback_on_workflow(seeded_store, business):
    updated = await apply_feedback(seeded_store, business.id, "wf-review-responder", "thumbs_down")

    assert updated.feedback.thumbs_down == 1
    analysis = await seeded_store.get_analysis(business.id)
    assert analysis.workflows[0].feedback.thumbs_down == 1


@pytest.mark.asyncio
async def test_edit_requires_text(seeded_store, business):
    profile = await seeded_store.get_profile(business.id)
    with pytest.raises(ValueError):
        await apply_feedback(seeded_store, business.id, profile.tasks[0].id, "edit", "  ")


@pytest.mark.asyncio
async def test_unknown_action(seeded_store, business):
    with pytest.raises(ValueError):
        await apply_feedback(seeded_store, business.id, "task-review-response", "love")


@pytest.mark.asyncio
async def test_missing_item_leaves_store_unchanged(seeded_store, business):
    before = await seeded_store.get_profile(business.id)

    with pytest.raises(NotFoundError):
        await apply_feedback(seeded_store, business.id, "task-nope", "thumbs_up")

    assert await seeded_store.get_profile(business.id) == before


@pytest.mark.asyncio
async def test_missing_profile(memory_store):
    with pytest.raises(NotFoundError):
        await apply_feedback(memory_store, "biz_missing", "task-1", "thumbs_up")


@pytest.mark.asyncio
async def test_set_status_validates_per_kind(seeded_store, business):
    task = await set_status(seeded_store, business.id, "task-peak-wait", "in_progress")
    assert task.status == "in_progress"

    workflow = await set_status(seeded_store, business.id, "wf-queue-watch", "active")
    assert workflow.status == "active"

    with pytest.raises(ValueError):
        await set_status(seeded_store, business.id, "wf-queue-watch", "completed")
