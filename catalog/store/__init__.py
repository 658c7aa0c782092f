"""
Store package initialization.
Picks the durable backend from configuration.
"""

from catalog.store.base import BaseLocalStore, decode_snapshot, encode_snapshot
from catalog.store.file_store import FileLocalStore
from catalog.store.redis_store import RedisLocalStore


def create_store(config) -> BaseLocalStore:
    if config.STORE_BACKEND == "redis":
        return RedisLocalStore(config.REDIS_URL, config.SNAPSHOT_KEY)
    return FileLocalStore(config.STORE_DIR, config.SNAPSHOT_KEY)


__all__ = [
    'BaseLocalStore',
    'FileLocalStore',
    'RedisLocalStore',
    'create_store',
    'decode_snapshot',
    'encode_snapshot'
]
