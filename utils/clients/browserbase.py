"""
Browserbase REST client.

Creates, inspects and releases remote browser sessions. The browser itself is
driven through Playwright over the session's CDP connect URL (see core.browser).
"""

import logging
from typing import Any, Dict, Optional
from aiohttp import ClientSession, ClientTimeout

from config import settings

logger = logging.getLogger(__name__)

SESSION_REPLAY_URL = "https://www.browserbase.com/sessions/{session_id}"


def session_replay_url(session_id: str) -> str:
    """Human-viewable replay URL for a session id."""
    return SESSION_REPLAY_URL.format(session_id=session_id)


class BrowserbaseError(RuntimeError):
    """Raised when the Browserbase API returns an error status."""


class BrowserbaseClient:
    """
    Thin async wrapper over the Browserbase sessions API.
    Holds one aiohttp session, created lazily and reused across calls.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        project_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key or settings.BROWSERBASE_API_KEY
        self.project_id = project_id or settings.BROWSERBASE_PROJECT_ID
        self.base_url = (base_url or settings.BROWSERBASE_API_URL).rstrip("/")
        self._session: Optional[ClientSession] = None

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=60))
        return self._session

    @property
    def _headers(self) -> Dict[str, str]:
        return {"X-BB-API-Key": self.api_key, "Content-Type": "application/json"}

    async def _request(
        self, method: str, path: str, payload: Optional[dict] = None
    ) -> Dict[str, Any]:
        session = await self._get_session()
        async with session.request(
            method, f"{self.base_url}{path}", json=payload, headers=self._headers
        ) as resp:
            if resp.status >= 400:
                detail = await resp.text()
                raise BrowserbaseError(
                    f"Browserbase {method} {path} failed ({resp.status}): {detail[:200]}"
                )
            return await resp.json()

    async def create_session(self) -> Dict[str, Any]:
        """
        Open a new remote browser session.

        Returns:
            Session payload including "id" and "connectUrl"
        """
        data = await self._request("POST", "/sessions", {"projectId": self.project_id})
        logger.info(f"🌐 Browserbase session created: {data.get('id')}")
        return data

    async def get_debug_urls(self, session_id: str) -> Dict[str, Any]:
        """Fetch live-view (debugger) URLs for a running session."""
        return await self._request("GET", f"/sessions/{session_id}/debug")

    async def release_session(self, session_id: str) -> None:
        """Ask Browserbase to end the session so it stops accruing time."""
        await self._request(
            "POST",
            f"/sessions/{session_id}",
            {"projectId": self.project_id, "status": "REQUEST_RELEASE"},
        )
        logger.info(f"🧹 Browserbase session released: {session_id}")

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


# Lazy initialization of the Browserbase client
_browserbase_client: Optional[BrowserbaseClient] = None


def get_browserbase_client() -> BrowserbaseClient:
    """Get or create the Browserbase client instance."""
    global _browserbase_client
    if _browserbase_client is None:
        _browserbase_client = BrowserbaseClient()
    return _browserbase_client


async def close_browserbase_client():
    global _browserbase_client
    if _browserbase_client is not None:
        await _browserbase_client.close()
        _browserbase_client = None
