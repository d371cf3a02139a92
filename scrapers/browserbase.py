"""
Remote-browser discovery provider.

Drives a Browserbase session through a Maps listing and extracts the business
fields and as many reviews as the page will show. Steps run strictly in order
on the single remote page; the session is released on every exit path.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional
from playwright.async_api import Page

from analyzer.sentiment import make_review
from config import settings
from core.browser import RemoteBrowserSession
from models import BusinessRecord, DiscoveryResult, Review, utc_now
from scrapers import selectors as sel
from scrapers.errors import ProviderFailure
from utils.consent_dismisser import dismiss_consent

logger = logging.getLogger(__name__)

# Called with (session_id, session_url, live_view_url) once the session exists
SessionCallback = Callable[[Optional[str], Optional[str], Optional[str]], Awaitable[None]]


async def scrape_with_browserbase(
    source_url: str, on_session: Optional[SessionCallback] = None
) -> DiscoveryResult:
    """
    Scrape a Maps listing in a remote browser.

    Args:
        source_url: Listing (or search) URL
        on_session: Optional coroutine notified as soon as the session is open

    Returns:
        DiscoveryResult with session id and replay URL

    Raises:
        ProviderFailure: On any unrecoverable error, carrying the session
            id/URL when a session had been opened
    """
    session = RemoteBrowserSession()
    try:
        page = await session.open()

        if on_session is not None:
            await on_session(session.session_id, session.session_url, await session.live_view_url())

        business = await _scrape_page(page, source_url)
        logger.info(f"✅ Browserbase done: \"{business.name}\" with {len(business.reviews)} reviews")
        return DiscoveryResult(
            business=business,
            provider="browserbase",
            remote_session_id=session.session_id,
            remote_session_url=session.session_url,
        )
    except Exception as e:
        logger.error(f"❌ Browserbase scrape failed: {str(e)}")
        raise ProviderFailure(
            "browserbase",
            str(e),
            session_id=session.session_id,
            session_url=session.session_url,
            cause=e,
        ) from e
    finally:
        await session.close()


async def _scrape_page(page: Page, source_url: str) -> BusinessRecord:
    logger.info(f"📡 Navigating to {source_url}")
    await page.goto(
        source_url, wait_until="domcontentloaded", timeout=settings.NAVIGATION_TIMEOUT_MS
    )
    # Structural readiness is not observable on Maps; wait a fixed time instead
    await page.wait_for_timeout(settings.SETTLE_DELAY_MS)

    await dismiss_consent(page)
    await _open_place_if_search_page(page)

    raw = await sel.extract_fields(page, sel.BUSINESS_FIELDS)
    logger.info(
        f"🏪 Business: \"{raw.get('name') or ''}\" "
        f"{raw.get('rating') or '?'}★ ({raw.get('review_count') or '?'} reviews)"
    )

    reviews = await _collect_reviews(page)

    return BusinessRecord(
        name=raw.get("name") or "Unknown Business",
        category=raw.get("category") or "Business",
        rating=sel.parse_float(raw.get("rating")),
        review_count=sel.parse_int(raw.get("review_count")) or len(reviews),
        address=raw.get("address") or "",
        phone=raw.get("phone") or None,
        website=raw.get("website") or None,
        hours=sel.truncate_hours(raw.get("hours")),
        price_level=raw.get("price_level") or None,
        source_url=source_url,
        scraped_at=utc_now(),
        reviews=reviews,
    )


async def _open_place_if_search_page(page: Page) -> bool:
    title = await page.title()
    logger.debug(f"Page title: \"{title}\"")
    if title != sel.SEARCH_PAGE_TITLE and sel.PLACE_TITLE_SUFFIX in title:
        return False

    try:
        clicked = await page.evaluate(sel.CLICK_FIRST_RESULT)
    except Exception as e:
        logger.debug(f"First result click failed: {e}")
        return False
    if clicked:
        logger.info("🔎 Search results page, opened first result")
        await page.wait_for_timeout(settings.RESULT_SETTLE_DELAY_MS)
    return bool(clicked)


async def _collect_reviews(page: Page) -> List[Review]:
    opened_via = await _open_reviews_panel(page)
    logger.info(f"📝 Reviews panel: {opened_via or 'not opened'}")

    await _wait_for_reviews(page)
    await _scroll_reviews(page, settings.REVIEW_SCROLL_ITERATIONS)
    await _expand_reviews(page)

    collected: Dict[str, Review] = {}
    _merge(collected, await _extract_reviews(page))
    logger.info(f"📝 Reviews scraped: {len(collected)}")

    if settings.SORT_LOWEST_FIRST and collected:
        try:
            await _sort_lowest_first(page)
            await _scroll_reviews(page, settings.LOWEST_SORT_SCROLL_ITERATIONS)
            await _expand_reviews(page)
            added = _merge(collected, await _extract_reviews(page))
            logger.info(f"📝 Lowest-rating pass added {added} reviews ({len(collected)} total)")
        except Exception as e:
            logger.info(f"Lowest-rating pass skipped: {e}")

    return list(collected.values())


async def _open_reviews_panel(page: Page) -> Optional[str]:
    """Try each click strategy in order; return the name of the one that worked."""
    for name, script in sel.OPEN_REVIEWS_STRATEGIES:
        try:
            if await page.evaluate(script):
                await page.wait_for_timeout(settings.REVIEW_POLL_INTERVAL_MS)
                return name
        except Exception as e:
            logger.debug(f"Reviews opener '{name}' failed: {e}")
    return None


async def _wait_for_reviews(page: Page) -> bool:
    """Bounded poll until a review node exists or the panel is tall enough."""
    for attempt in range(settings.REVIEW_POLL_ATTEMPTS):
        try:
            state = await page.evaluate(
                sel.PANEL_STATE, [sel.REVIEW_ITEM_SELECTOR, sel.REVIEW_CONTAINER_SELECTORS]
            )
        except Exception as e:
            logger.debug(f"Panel poll {attempt + 1} failed: {e}")
            state = {}
        if state.get("reviews", 0) > 0 or state.get("height", 0) >= settings.MIN_REVIEW_PANEL_HEIGHT:
            return True
        await page.wait_for_timeout(settings.REVIEW_POLL_INTERVAL_MS)
    logger.info("⏱️ Review panel did not populate within the poll limit")
    return False


async def _scroll_reviews(page: Page, iterations: int):
    for _ in range(iterations):
        try:
            await page.evaluate(sel.SCROLL_REVIEWS, sel.REVIEW_CONTAINER_SELECTORS)
        except Exception as e:
            logger.debug(f"Scroll failed: {e}")
        await page.wait_for_timeout(settings.SCROLL_DELAY_MS)


async def _expand_reviews(page: Page):
    try:
        await page.evaluate(sel.EXPAND_REVIEWS)
    except Exception as e:
        logger.debug(f"Expand failed: {e}")
    await page.wait_for_timeout(1000)


async def _sort_lowest_first(page: Page):
    if not await page.evaluate(sel.OPEN_SORT_MENU):
        raise RuntimeError("sort control not found")
    await page.wait_for_timeout(2000)
    if not await page.evaluate(sel.PICK_LOWEST_RATING):
        raise RuntimeError("lowest rating option not found")
    await page.wait_for_timeout(3000)


async def _extract_reviews(page: Page) -> List[Review]:
    reviews = []
    for item in await page.query_selector_all(sel.REVIEW_ITEM_SELECTOR):
        raw = await sel.extract_fields(item, sel.REVIEW_FIELDS)
        author = raw.get("author") or ""
        text = raw.get("text") or ""
        if not author and not text:
            continue
        reviews.append(
            make_review(
                author=author,
                rating=sel.parse_int(raw.get("rating")),
                date=raw.get("date") or "",
                text=text,
            )
        )
    return reviews


def _merge(collected: Dict[str, Review], reviews: List[Review]) -> int:
    """Add reviews not already collected; return how many were new."""
    added = 0
    for review in reviews:
        key = sel.review_key(review.author, review.text)
        if key not in collected:
            collected[key] = review
            added += 1
    return added
