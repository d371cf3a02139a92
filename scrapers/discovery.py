"""
Discovery orchestrator.

Chooses a provider for a listing URL and always returns a DiscoveryResult:
remote browser first, hosted crawler second, static mock data last.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from config import settings
from models import DiscoveryResult
from scrapers.apify import scrape_with_apify
from scrapers.browserbase import scrape_with_browserbase
from scrapers.errors import ProviderFailure
from scrapers.mock import canned_reviews, mock_business

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, Dict[str, Any]], Awaitable[None]]


async def discover(source_url: str, on_event: Optional[EventCallback] = None) -> DiscoveryResult:
    """
    Discover a business from a Maps URL. Never raises.

    Args:
        source_url: Listing URL as given by the caller
        on_event: Optional coroutine called with ("session", {...}) as soon as
            a remote browser session is open

    Returns:
        DiscoveryResult from the first provider that succeeded
    """
    result = await _run_providers(source_url, on_event)
    return _supplement_reviews(result)


async def _run_providers(source_url: str, on_event: Optional[EventCallback]) -> DiscoveryResult:
    if settings.browserbase_configured:
        async def on_session(session_id, session_url, live_view_url):
            if on_event is not None:
                await on_event(
                    "session",
                    {
                        "session_id": session_id,
                        "session_url": session_url,
                        "live_view_url": live_view_url,
                    },
                )

        try:
            return await scrape_with_browserbase(source_url, on_session=on_session)
        except ProviderFailure as e:
            if e.has_session:
                # Keep the recording reachable even though extraction failed
                logger.warning(f"⚠️ Browserbase failed after session {e.session_id}, using mock data")
                return DiscoveryResult(
                    business=mock_business(source_url),
                    provider="mock",
                    remote_session_id=e.session_id,
                    remote_session_url=e.session_url,
                )
            logger.warning(f"⚠️ Browserbase unavailable: {e}")
        except Exception as e:
            logger.warning(f"⚠️ Browserbase raised unexpectedly: {str(e)}")

    if settings.apify_configured:
        try:
            return await scrape_with_apify(source_url)
        except Exception as e:
            logger.warning(f"⚠️ Apify unavailable: {str(e)}")

    logger.info("🧪 No live provider succeeded, using mock business")
    return DiscoveryResult(business=mock_business(source_url), provider="mock")


def _supplement_reviews(result: DiscoveryResult) -> DiscoveryResult:
    business = result.business
    if business.reviews or business.review_count <= 0:
        return result

    logger.info(
        f"📝 {business.name} reports {business.review_count} reviews but none were scraped, "
        f"adding canned sample"
    )
    business = business.model_copy(
        update={"reviews": canned_reviews(), "reviews_are_synthetic": True}
    )
    return result.model_copy(update={"business": business})
