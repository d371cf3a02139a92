"""
Hosted-scraper discovery provider.

Runs the Google Places crawler actor on Apify for a single listing URL and maps
the first dataset item onto a BusinessRecord. Field names differ across actor
versions, so each field is read from its first present alias.
"""

import logging
from typing import Any, Dict, List, Optional

from analyzer.sentiment import make_review
from config import settings
from models import BusinessRecord, DiscoveryResult, Review, utc_now
from scrapers.errors import ProviderFailure
from scrapers.selectors import truncate_hours
from utils.clients.apify import get_apify_client

logger = logging.getLogger(__name__)


def build_run_input(source_url: str) -> Dict[str, Any]:
    return {
        "startUrls": [{"url": source_url}],
        "maxCrawledPlacesPerSearch": 1,
        "language": "en",
        "maxReviews": settings.APIFY_MAX_REVIEWS,
        "reviewsSort": "newest",
        "reviewsTranslation": "originalAndTranslated",
        "scrapeReviewerName": True,
        "scrapeReviewerId": False,
        "scrapeReviewerUrl": False,
        "scrapeReviewId": False,
        "scrapeReviewUrl": False,
        "scrapeResponseFromOwnerText": True,
    }


def _first(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(item: Dict[str, Any], *keys: str) -> Optional[str]:
    value = _first(item, *keys)
    return None if value is None else str(value)


def format_opening_hours(hours: Any) -> Optional[str]:
    """
    Flatten the actor's openingHours list into "day: hours, day: hours".
    Strings are passed through unchanged.
    """
    if not hours:
        return None
    if isinstance(hours, str):
        return truncate_hours(hours)
    parts = []
    for entry in hours:
        if isinstance(entry, dict):
            parts.append(f"{entry.get('day', '')}: {entry.get('hours', '')}")
        else:
            parts.append(str(entry))
    return truncate_hours(", ".join(parts))


def map_review(raw: Dict[str, Any]) -> Review:
    # A missing star count is recorded as 0 (unknown) rather than guessed
    return make_review(
        author=_text(raw, "name", "reviewerName") or "Anonymous",
        rating=_first(raw, "stars", "rating") or 0,
        date=str(_first(raw, "publishedAtDate", "date") or ""),
        text=_text(raw, "text", "reviewText") or "",
    )


def map_place(item: Dict[str, Any], source_url: str) -> BusinessRecord:
    """Map one crawler dataset item onto the canonical record."""
    reviews = [map_review(r) for r in item.get("reviews") or [] if isinstance(r, dict)]
    return BusinessRecord(
        name=_text(item, "title", "name") or "Unknown Business",
        category=_text(item, "categoryName", "category") or "Business",
        rating=_first(item, "totalScore", "rating") or 0,
        review_count=_first(item, "reviewsCount", "totalReviews") or 0,
        address=_text(item, "address", "street") or "",
        phone=_text(item, "phone", "phoneUnformatted"),
        website=_text(item, "website", "url"),
        hours=format_opening_hours(item.get("openingHours")),
        price_level=_text(item, "price", "priceLevel"),
        source_url=source_url,
        scraped_at=utc_now(),
        reviews=reviews,
    )


async def scrape_with_apify(source_url: str) -> DiscoveryResult:
    """
    Discover a business through the hosted crawler.

    Raises:
        ProviderFailure: If the run fails, times out or returns no items
    """
    client = get_apify_client()
    logger.info(f"🕷️ Apify crawl for {source_url}")
    try:
        items: List[Dict[str, Any]] = await client.call_actor(
            settings.APIFY_ACTOR_ID,
            build_run_input(source_url),
            wait_secs=settings.APIFY_WAIT_SECS,
        )
    except Exception as e:
        logger.error(f"❌ Apify crawl failed: {str(e)}")
        raise ProviderFailure("apify", str(e), cause=e) from e

    if not items:
        raise ProviderFailure("apify", "crawler returned no places")

    business = map_place(items[0], source_url)
    logger.info(f"✅ Apify done: \"{business.name}\" with {len(business.reviews)} reviews")
    return DiscoveryResult(business=business, provider="apify")
