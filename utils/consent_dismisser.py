"""
Consent Dismisser Module

Detects and dismisses cookie/consent interstitials that block a Maps listing
before extraction starts. Best-effort: a page without a consent wall is the
normal case and is not an error.
"""

import logging
from typing import Any, Dict, List
from playwright.async_api import Page

logger = logging.getLogger(__name__)


class ConsentDismisser:
    """
    Clicks through consent dialogs using an ordered list of candidate selectors.
    """

    def __init__(self, page: Page):
        """
        Initialize consent dismisser.

        Args:
            page: Playwright Page object
        """
        self.page = page
        self.results = {
            "detected": False,
            "dismissed_via": None,
        }

    # Detection selectors for consent walls
    DETECTION_SELECTORS = [
        'form[action*="consent"]',
        '[aria-modal="true"][aria-label*="cookie" i]',
        '[aria-label*="Before you continue" i]',
        '[class*="consent"]',
        '[id*="consent"]',
        '[class*="cookie"]',
    ]

    # Accept selectors, tried in order; first visible match is clicked
    ACCEPT_SELECTORS = [
        'button:has-text("Accept all")',
        'button:has-text("Reject all")',
        'form[action*="consent"] button',
        'button[aria-label*="Accept" i]',
        'button:has-text("I agree")',
        'button:has-text("Agree")',
        'button:has-text("Accept")',
        '[class*="consent"] button[class*="accept"]',
    ]

    async def dismiss(self, settle_ms: int = 3000) -> Dict[str, Any]:
        """
        Detect and dismiss a consent interstitial.

        Args:
            settle_ms: Delay after a successful click so the page can re-render

        Returns:
            Dictionary describing what was found and how it was dismissed
        """
        if not await self._detect(self.DETECTION_SELECTORS):
            return self.results

        self.results["detected"] = True

        for selector in self.ACCEPT_SELECTORS:
            if await self._try_click(selector):
                self.results["dismissed_via"] = selector
                logger.info(f"🍪 Consent dismissed via {selector}")
                await self.page.wait_for_timeout(settle_ms)
                return self.results

        # Escape as a final attempt
        try:
            await self.page.keyboard.press("Escape")
            self.results["dismissed_via"] = "escape"
        except Exception as e:
            logger.debug(f"Escape key failed on consent dialog: {e}")

        return self.results

    async def _detect(self, selectors: List[str]) -> bool:
        for selector in selectors:
            try:
                locator = self.page.locator(selector).first
                if await locator.count() > 0 and await locator.is_visible():
                    logger.debug(f"🔍 Consent wall detected: {selector}")
                    return True
            except Exception:
                continue
        return False

    async def _try_click(self, selector: str) -> bool:
        """
        Try to click an element.

        Returns:
            True if click succeeded
        """
        try:
            locator = self.page.locator(selector).first
            if await locator.count() > 0 and await locator.is_visible():
                await locator.click(timeout=2000)
                return True
        except Exception:
            pass
        return False


async def dismiss_consent(page: Page, settle_ms: int = 3000) -> Dict[str, Any]:
    """
    Convenience function to dismiss consent dialogs before extraction.

    Args:
        page: Playwright Page object

    Returns:
        Dismissal results
    """
    dismisser = ConsentDismisser(page)
    return await dismisser.dismiss(settle_ms=settle_ms)
