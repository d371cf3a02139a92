import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from analyzer.task_engine import build_profile
from analyzer.workflows import analyze_business
from api.models import (
    BusinessRequest,
    DiscoverRequest,
    FeedbackRequest,
    StatusRequest,
    WorkflowsUpdateRequest,
)
from config import settings
from core.cache import ProfileStore, StoreUnavailableError, get_profile_store
from core.feedback import NotFoundError, apply_feedback, set_status
from core.tracing import get_tracer
from models import BusinessAnalysis, Workflow
from scrapers.discovery import discover

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

STORE_UNAVAILABLE = "Profile store not configured"


def _store() -> ProfileStore:
    try:
        return get_profile_store()
    except StoreUnavailableError as e:
        logger.error(f"❌ Profile store unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)


def _require_url(request: DiscoverRequest) -> str:
    maps_url = request.resolved_url
    if not maps_url:
        raise HTTPException(status_code=400, detail="maps_url required")
    return maps_url


def sse_event(event: str, data: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


@router.get("/")
async def root():
    return {
        "service": "Business Discovery Agent",
        "status": "running",
        "endpoints": {
            "discover": "/discover (POST)",
            "discover_stream": "/discover/stream (POST, text/event-stream)",
            "agent": "/agent (POST)",
            "analyze": "/analyze (POST)",
            "feedback": "/feedback (POST)",
        },
    }


@router.post("/discover")
async def discover_business(request: DiscoverRequest):
    """
    Discovers a business from a Google Maps URL and stores it.

    Falls back through the configured providers and always returns a business;
    remote_session_id/url are set whenever a remote browser session was opened.
    """
    maps_url = _require_url(request)
    store = _store()

    result = await discover(maps_url)
    try:
        await store.put_business(result.business)
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)

    logger.info(f"✅ Discovered \"{result.business.name}\" via {result.provider}")
    return {"success": True, **result.model_dump(mode="json")}


@router.post("/discover/stream")
async def discover_stream(request: DiscoverRequest):
    """
    Streaming discover + analyze.

    Emits server-sent events as the pipeline progresses: step, session (as soon
    as a remote browser session exists), business, complete, or error.
    """
    maps_url = _require_url(request)
    store = _store()

    return StreamingResponse(
        _discover_events(maps_url, store),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


async def _discover_events(maps_url: str, store: ProfileStore) -> AsyncIterator[str]:
    queue: asyncio.Queue = asyncio.Queue()
    session_sent = False

    async def emit(event: str, data: Dict[str, Any]):
        nonlocal session_sent
        if event == "session":
            session_sent = True
        await queue.put(sse_event(event, data))

    async def pipeline():
        try:
            await emit("step", {"step": "connecting", "message": "Launching browser agent..."})
            result = await discover(maps_url, on_event=emit)
            business = result.business

            if result.remote_session_id and not session_sent:
                await emit(
                    "session",
                    {
                        "session_id": result.remote_session_id,
                        "session_url": result.remote_session_url,
                        "live_view_url": None,
                    },
                )

            await emit("step", {"step": "extracting_info", "message": "Business info extracted"})
            await emit(
                "business",
                {
                    "name": business.name,
                    "type": business.category,
                    "rating": business.rating,
                    "review_count": business.review_count,
                    "address": business.address,
                    "reviews_scraped": len(business.reviews),
                },
            )
            await store.put_business(business)

            await emit("step", {"step": "analyzing", "message": "AI analyzing reviews..."})
            analysis = await analyze_business(business)
            await store.put_analysis(analysis)

            await emit("step", {"step": "complete", "message": "Discovery complete!"})
            await emit(
                "complete",
                {
                    "business": business.model_dump(mode="json"),
                    "analysis": analysis.model_dump(mode="json"),
                    "remote_session_id": result.remote_session_id,
                    "remote_session_url": result.remote_session_url,
                },
            )
        except Exception as e:
            logger.error(f"❌ Stream pipeline failed: {str(e)}")
            await emit("error", {"message": str(e) or "Pipeline failed"})
        finally:
            await queue.put(None)

    task = asyncio.create_task(pipeline())
    try:
        while True:
            chunk = await queue.get()
            if chunk is None:
                break
            yield chunk
    finally:
        if not task.done():
            task.cancel()


@router.post("/agent")
async def run_agent(request: DiscoverRequest):
    """
    Full pipeline: discover the business, then generate prioritized tasks
    with evaluation harnesses. Both the business and the profile are stored.
    """
    maps_url = _require_url(request)
    store = _store()

    try:
        logger.info(f"🚀 Agent starting discovery: {maps_url}")
        result = await discover(maps_url)
        business = result.business
        await store.put_business(business)
        logger.info(f"🏪 Discovered \"{business.name}\" with {len(business.reviews)} reviews")

        profile = await build_profile(
            business, result.remote_session_id, result.remote_session_url
        )
        await store.put_profile(profile)
        logger.info(f"✅ Generated {len(profile.tasks)} tasks for \"{business.name}\"")

        return {"success": True, "profile": profile.model_dump(mode="json")}
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    except Exception as e:
        logger.error(f"❌ Agent failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Agent failed")


@router.post("/analyze")
async def analyze_stored_business(request: BusinessRequest):
    """Runs workflow analysis on a previously discovered business."""
    if not request.business_id:
        raise HTTPException(status_code=400, detail="business_id required")
    store = _store()

    try:
        business = await store.get_business(request.business_id)
        if business is None:
            raise HTTPException(status_code=404, detail="Business not found")

        analysis = await analyze_business(business)
        await store.put_analysis(analysis)
        return {"success": True, "analysis": analysis.model_dump(mode="json")}
    except HTTPException:
        raise
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    except Exception as e:
        logger.error(f"❌ Analysis failed for {request.business_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")


@router.get("/business/{business_id}")
async def get_business(business_id: str):
    store = _store()
    try:
        business = await store.get_business(business_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return {"success": True, "business": business.model_dump(mode="json")}


@router.get("/profile/{business_id}")
async def get_profile(business_id: str):
    store = _store()
    try:
        profile = await store.get_profile(business_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True, "profile": profile.model_dump(mode="json")}


@router.get("/workflows")
async def list_workflows(business_id: Optional[str] = None, businessId: Optional[str] = None):
    business_id = business_id or businessId
    if not business_id:
        raise HTTPException(status_code=400, detail="business_id required")
    store = _store()

    try:
        analysis = await store.get_analysis(business_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)

    workflows = [w.model_dump(mode="json") for w in analysis.workflows] if analysis else None
    return {"success": True, "workflows": workflows}


@router.post("/workflows")
async def replace_workflows(request: WorkflowsUpdateRequest):
    """Replaces the stored workflow list for a business."""
    if not request.business_id:
        raise HTTPException(status_code=400, detail="business_id required")
    try:
        workflows = [Workflow.model_validate(w) for w in request.workflows]
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid workflow: {str(e)}")
    store = _store()

    try:
        analysis = await store.get_analysis(request.business_id)
        if analysis is None:
            business = await store.get_business(request.business_id)
            analysis = BusinessAnalysis(
                business_id=request.business_id,
                business_type=business.category if business else "Business",
            )
        analysis = analysis.model_copy(update={"workflows": workflows})
        await store.put_analysis(analysis)
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)

    return {"success": True}


@router.post("/feedback")
async def record_feedback(request: FeedbackRequest):
    """
    Records thumbs up, thumbs down or an edit on a task or workflow.
    Returns the updated item.
    """
    store = _store()
    try:
        item = await apply_feedback(
            store, request.business_id, request.item_id, request.action, request.edit_text
        )
        return {"success": True, "item": item.model_dump(mode="json")}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)


@router.post("/status")
async def update_status(request: StatusRequest):
    """Changes the status of a task or workflow. Returns the updated item."""
    store = _store()
    try:
        item = await set_status(store, request.business_id, request.item_id, request.status)
        return {"success": True, "item": item.model_dump(mode="json")}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/status/detailed")
async def detailed_status_check():
    """
    Enhanced status check with store, provider and tracing health.

    Returns comprehensive system health information for monitoring.
    """
    status_info = {
        "api": "healthy",
        "store": "unknown",
        "providers": {
            "browserbase": "configured" if settings.browserbase_configured else "missing",
            "apify": "configured" if settings.apify_configured else "missing",
            "mock": "available",
        },
        "anthropic_api": "configured" if settings.llm_configured else "missing",
        "tracing": get_tracer().status(),
    }

    # Check store connection
    try:
        store = get_profile_store()
        status_info["store_backend"] = store.backend
        status_info["store"] = "connected" if await store.ping() else "disconnected"
        status_info["store_stats"] = await store.get_stats()
    except Exception as e:
        status_info["store"] = f"error: {str(e)}"

    if "error" in status_info["store"] or status_info["store"] == "disconnected":
        status_info["overall_status"] = "degraded"
    else:
        status_info["overall_status"] = "healthy"

    return status_info
