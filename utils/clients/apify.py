"""
Apify REST client.

Starts actor runs, waits for them with the API's waitForFinish long-poll and
reads the resulting dataset items.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional
from aiohttp import ClientSession, ClientTimeout

from config import settings

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {"SUCCEEDED", "FAILED", "ABORTED", "TIMED-OUT"}

# The API caps a single waitForFinish long-poll at 60 seconds
MAX_WAIT_PER_POLL = 60


class ApifyError(RuntimeError):
    """Raised for API errors and runs that do not succeed in time."""


class ApifyClient:
    """Minimal async client for the Apify v2 API."""

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None):
        self.token = token or settings.APIFY_API_TOKEN
        self.base_url = (base_url or settings.APIFY_API_URL).rstrip("/")
        self._session: Optional[ClientSession] = None

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=ClientTimeout(total=MAX_WAIT_PER_POLL + 30)
            )
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Optional[Any] = None,
    ) -> Any:
        session = await self._get_session()
        headers = {"Authorization": f"Bearer {self.token}"}
        async with session.request(
            method, f"{self.base_url}{path}", params=params, json=payload, headers=headers
        ) as resp:
            if resp.status >= 400:
                detail = await resp.text()
                raise ApifyError(f"Apify {method} {path} failed ({resp.status}): {detail[:200]}")
            return await resp.json()

    async def start_run(self, actor_id: str, run_input: dict) -> Dict[str, Any]:
        body = await self._request("POST", f"/acts/{actor_id}/runs", payload=run_input)
        run = body.get("data", {})
        logger.info(f"🕷️ Apify run started: {run.get('id')} ({actor_id})")
        return run

    async def wait_for_run(self, run_id: str, wait_secs: int) -> Dict[str, Any]:
        """
        Poll a run until it reaches a terminal status or wait_secs elapses.

        Returns:
            The last run payload seen
        """
        deadline = time.monotonic() + wait_secs
        run: Dict[str, Any] = {}
        while True:
            remaining = int(deadline - time.monotonic())
            if remaining <= 0:
                return run
            body = await self._request(
                "GET",
                f"/actor-runs/{run_id}",
                params={"waitForFinish": min(remaining, MAX_WAIT_PER_POLL)},
            )
            run = body.get("data", {})
            if run.get("status") in TERMINAL_STATUSES:
                return run
            await asyncio.sleep(1)

    async def list_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        items = await self._request(
            "GET", f"/datasets/{dataset_id}/items", params={"clean": "true", "format": "json"}
        )
        return items if isinstance(items, list) else []

    async def call_actor(
        self, actor_id: str, run_input: dict, wait_secs: int
    ) -> List[Dict[str, Any]]:
        """
        Start an actor, wait for it to finish and return its dataset items.

        Raises:
            ApifyError: If the run does not succeed within wait_secs
        """
        run = await self.start_run(actor_id, run_input)
        run_id = run.get("id")
        if not run_id:
            raise ApifyError("Apify did not return a run id")

        if run.get("status") not in TERMINAL_STATUSES:
            run = await self.wait_for_run(run_id, wait_secs)

        status = run.get("status")
        if status != "SUCCEEDED":
            raise ApifyError(f"Apify run {run_id} ended with status {status or 'RUNNING'}")

        return await self.list_items(run["defaultDatasetId"])

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


_apify_client: Optional[ApifyClient] = None


def get_apify_client() -> ApifyClient:
    """Get or create the Apify client instance."""
    global _apify_client
    if _apify_client is None:
        _apify_client = ApifyClient()
    return _apify_client


async def close_apify_client():
    global _apify_client
    if _apify_client is not None:
        await _apify_client.close()
        _apify_client = None
