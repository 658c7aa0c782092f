"""
Redis snapshot store.
A single SET replaces the whole value, so writes never land half-way.
"""
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from catalog.errors import StorageError
from catalog.logger import logger
from catalog.models.product import Snapshot
from catalog.store.base import BaseLocalStore, decode_snapshot, encode_snapshot


class RedisLocalStore(BaseLocalStore):
    """Redis-based durable store."""

    def __init__(self, url: str, key: str = "products"):
        super().__init__(key)
        self.url = url
        self.redis = None

    async def initialize(self):
        try:
            self.redis = redis.from_url(self.url, decode_responses=True)
            await self.redis.ping()
            self.is_available = True
            logger.info("Redis store initialized")
        except RedisError as e:
            logger.warning(f"Redis store init failed: {e}")
            self.is_available = False

    async def close(self):
        if self.redis:
            await self.redis.aclose()

    def _client(self):
        if self.redis is None:
            raise StorageError("Redis store is not initialized")
        return self.redis

    async def load(self) -> Optional[Snapshot]:
        try:
            payload = await self._client().get(self.key)
        except RedisError as e:
            raise StorageError(f"Failed to read snapshot from Redis: {e}") from e
        if payload is None:
            return None
        return decode_snapshot(payload)

    async def save(self, snapshot: Snapshot):
        payload = encode_snapshot(snapshot)
        try:
            await self._client().set(self.key, payload)
        except RedisError as e:
            raise StorageError(f"Failed to write snapshot to Redis: {e}") from e
        logger.debug(f"Saved {len(snapshot)} products to Redis key {self.key}")

    async def clear(self):
        try:
            await self._client().delete(self.key)
        except RedisError as e:
            raise StorageError(f"Failed to clear snapshot in Redis: {e}") from e
        logger.info(f"Cleared Redis key {self.key}")
