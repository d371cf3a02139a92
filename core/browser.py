"""
Remote browser session manager
Opens a Browserbase session and drives it through Playwright over CDP
"""

import logging
from typing import Optional
from playwright.async_api import async_playwright, Browser, Page, Playwright

from config import settings
from utils.clients.browserbase import (
    BrowserbaseClient,
    get_browserbase_client,
    session_replay_url,
)

logger = logging.getLogger(__name__)


class RemoteBrowserSession:
    """
    One remote browser session, exclusively owned by one discovery call.

    session_id and session_url are set as soon as the session exists, before
    the CDP connection is attempted, so they are available on later failures.
    close() must always be called, including after a failed open().
    """

    def __init__(self, client: Optional[BrowserbaseClient] = None):
        self.client = client or get_browserbase_client()
        self.session_id: Optional[str] = None
        self.session_url: Optional[str] = None
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.page: Optional[Page] = None

    async def open(self) -> Page:
        """
        Create the remote session and return a page attached to it.

        Returns:
            Playwright Page in the remote browser
        """
        session = await self.client.create_session()
        self.session_id = session.get("id")
        if self.session_id:
            self.session_url = session_replay_url(self.session_id)
        logger.info(f"🎥 Session replay: {self.session_url or 'unknown'}")

        connect_url = session.get("connectUrl")
        if not connect_url:
            raise RuntimeError("Browserbase session has no connectUrl")

        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.connect_over_cdp(
            connect_url, timeout=settings.NAVIGATION_TIMEOUT_MS
        )

        # Browserbase sessions start with a default context and page
        context = (
            self.browser.contexts[0]
            if self.browser.contexts
            else await self.browser.new_context()
        )
        self.page = context.pages[0] if context.pages else await context.new_page()
        return self.page

    async def live_view_url(self) -> Optional[str]:
        """Embeddable live-view URL for the running session, if available."""
        if not self.session_id:
            return None
        try:
            debug = await self.client.get_debug_urls(self.session_id)
        except Exception as e:
            logger.warning(f"⚠️ Could not fetch live view for {self.session_id}: {e}")
            return None
        return debug.get("debuggerFullscreenUrl") or debug.get("debuggerUrl")

    async def close(self):
        """Close the CDP connection and release the remote session."""
        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"⚠️  Error closing remote browser: {str(e)}")
            self.browser = None

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"⚠️  Error stopping Playwright: {str(e)}")
            self.playwright = None

        if self.session_id:
            try:
                await self.client.release_session(self.session_id)
            except Exception as e:
                logger.warning(f"⚠️  Error releasing session {self.session_id}: {str(e)}")

        self.page = None
