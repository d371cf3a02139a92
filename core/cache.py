"""
Profile store for discovered businesses, task profiles and workflow analyses.
Documents are stored whole as JSON under business:{id}, profile:{id} and
analysis:{id}. Two backends: in-process memory and Redis.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import settings
from models import BusinessAnalysis, BusinessProfile, BusinessRecord

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """The configured store backend cannot be reached."""


class ProfileStore:
    """
    Key/value document store. Subclasses implement the raw JSON operations;
    the typed helpers are shared.
    """

    backend = "base"

    async def get_json(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set_json(self, key: str, value: Any) -> bool:
        raise NotImplementedError

    async def ping(self) -> bool:
        raise NotImplementedError

    async def get_stats(self) -> dict:
        return {}

    async def close(self):
        pass

    # Businesses
    async def put_business(self, business: BusinessRecord) -> bool:
        return await self.set_json(f"business:{business.id}", business.model_dump(mode="json"))

    async def get_business(self, business_id: str) -> Optional[BusinessRecord]:
        data = await self.get_json(f"business:{business_id}")
        return BusinessRecord.model_validate(data) if data else None

    # Task profiles
    async def put_profile(self, profile: BusinessProfile) -> bool:
        return await self.set_json(
            f"profile:{profile.business.id}", profile.model_dump(mode="json")
        )

    async def get_profile(self, business_id: str) -> Optional[BusinessProfile]:
        data = await self.get_json(f"profile:{business_id}")
        return BusinessProfile.model_validate(data) if data else None

    # Workflow analyses
    async def put_analysis(self, analysis: BusinessAnalysis) -> bool:
        return await self.set_json(
            f"analysis:{analysis.business_id}", analysis.model_dump(mode="json")
        )

    async def get_analysis(self, business_id: str) -> Optional[BusinessAnalysis]:
        data = await self.get_json(f"analysis:{business_id}")
        return BusinessAnalysis.model_validate(data) if data else None


class MemoryProfileStore(ProfileStore):
    """
    Process-local store. Values are kept as JSON strings so reads never
    share mutable state with earlier writes.
    """

    backend = "memory"

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get_json(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return json.loads(value) if value is not None else None

    async def set_json(self, key: str, value: Any) -> bool:
        self._data[key] = json.dumps(value)
        return True

    async def ping(self) -> bool:
        return True

    async def get_stats(self) -> dict:
        return {"keys": len(self._data)}


class RedisProfileStore(ProfileStore):
    """
    Redis-backed store with a shared connection pool.
    Any Redis error surfaces as StoreUnavailableError.
    """

    backend = "redis"

    def __init__(self, redis_url: Optional[str] = None, ttl: Optional[int] = None):
        self.redis_url = redis_url or settings.REDIS_URL
        self.ttl = ttl if ttl is not None else settings.PROFILE_TTL
        # Create connection pool for efficiency
        self.pool = redis.ConnectionPool.from_url(
            self.redis_url,
            max_connections=20,
            decode_responses=True,  # Auto-decode bytes to strings
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        self.client = redis.Redis(connection_pool=self.pool)

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            value = await self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis GET failed for key '{key}': {str(e)}")
            raise StoreUnavailableError(f"Redis unavailable: {str(e)}") from e

        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"⚠️ Discarding non-JSON value at '{key}'")
            return None

    async def set_json(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value)
            if self.ttl:
                return bool(await self.client.setex(key, self.ttl, payload))
            return bool(await self.client.set(key, payload))
        except RedisError as e:
            logger.error(f"Redis SET failed for key '{key}': {str(e)}")
            raise StoreUnavailableError(f"Redis unavailable: {str(e)}") from e

    async def ping(self) -> bool:
        """Check if Redis is available"""
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def get_stats(self) -> dict:
        try:
            info = await self.client.info()
            return {
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "unknown"),
            }
        except RedisError as e:
            logger.error(f"Failed to get Redis stats: {str(e)}")
            return {"error": str(e)}

    async def close(self):
        """Close Redis connection pool"""
        try:
            await self.client.aclose()
            await self.pool.disconnect()
            logger.info("Redis connection closed")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {str(e)}")


# Global store instance
_profile_store: Optional[ProfileStore] = None


def create_profile_store(backend: Optional[str] = None) -> ProfileStore:
    """
    Build a store for the given backend name (defaults to STORE_BACKEND).

    Raises:
        StoreUnavailableError: For redis without REDIS_URL or an unknown backend
    """
    backend = (backend or settings.STORE_BACKEND).lower()
    if backend == "memory":
        return MemoryProfileStore()
    if backend == "redis":
        if not settings.REDIS_URL:
            raise StoreUnavailableError("REDIS_URL is not set")
        logger.info(f"✅ Using Redis profile store: {settings.REDIS_URL}")
        return RedisProfileStore()
    raise StoreUnavailableError(f"Unknown store backend '{backend}'")


def get_profile_store() -> ProfileStore:
    """Get or create the global profile store."""
    global _profile_store
    if _profile_store is None:
        _profile_store = create_profile_store()
    return _profile_store


async def close_profile_store():
    """Close the global profile store"""
    global _profile_store
    if _profile_store is not None:
        await _profile_store.close()
        _profile_store = None
