import json
import os
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.errors import FormatError, StorageError
from catalog.store import FileLocalStore, RedisLocalStore, create_store, encode_snapshot


@pytest.mark.asyncio
async def test_file_store_round_trip(store, sample_snapshot):
    await store.initialize()
    await store.save(sample_snapshot)

    assert await store.load() == sample_snapshot


@pytest.mark.asyncio
async def test_file_store_round_trip_empty_snapshot(store):
    await store.save(())
    assert await store.load() == ()


@pytest.mark.asyncio
async def test_file_store_load_absent(store):
    assert await store.load() is None


@pytest.mark.asyncio
async def test_file_store_writes_single_json_array(store, sample_snapshot):
    await store.save(sample_snapshot)

    with open(store.file_path, encoding="utf-8") as f:
        data = json.load(f)
    assert isinstance(data, list)
    assert [record["id"] for record in data] == [1, 2, 3]
    assert os.path.basename(store.file_path) == "products.json"


@pytest.mark.asyncio
async def test_file_store_corrupt_payload(store):
    os.makedirs(store.storage_path, exist_ok=True)
    with open(store.file_path, "w", encoding="utf-8") as f:
        f.write('{"not": "a list"}')

    with pytest.raises(FormatError):
        await store.load()


@pytest.mark.asyncio
async def test_file_store_rejects_non_finite_numbers(store):
    os.makedirs(store.storage_path, exist_ok=True)
    with open(store.file_path, "w", encoding="utf-8") as f:
        f.write('[{"id": 1, "title": "a", "price": NaN}]')

    with pytest.raises(FormatError):
        await store.load()


@pytest.mark.asyncio
async def test_file_store_failed_save_keeps_previous_value(store, sample_snapshot):
    await store.save(sample_snapshot)

    with patch("catalog.store.file_store.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(StorageError):
            await store.save(sample_snapshot[:1])

    assert await store.load() == sample_snapshot
    leftovers = [name for name in os.listdir(store.storage_path) if name.endswith(".tmp")]
    assert leftovers == []


@pytest.mark.asyncio
async def test_file_store_clear(store, sample_snapshot):
    await store.save(sample_snapshot)
    await store.clear()

    assert await store.load() is None
    # Clearing twice is harmless
    await store.clear()


@pytest.mark.asyncio
async def test_redis_store_round_trip(sample_snapshot):
    with patch("catalog.store.redis_store.redis.from_url") as mock_from_url:
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value=encode_snapshot(sample_snapshot))
        mock_from_url.return_value = mock_redis

        store = RedisLocalStore("redis://localhost:6379/0", "products")
        await store.initialize()
        assert store.is_available

        await store.save(sample_snapshot)
        mock_redis.set.assert_awaited_once_with("products", encode_snapshot(sample_snapshot))

        assert await store.load() == sample_snapshot
        mock_redis.get.assert_awaited_with("products")


@pytest.mark.asyncio
async def test_redis_store_absent_key():
    with patch("catalog.store.redis_store.redis.from_url") as mock_from_url:
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value=None)
        mock_from_url.return_value = mock_redis

        store = RedisLocalStore("redis://localhost:6379/0")
        await store.initialize()

        assert await store.load() is None


@pytest.mark.asyncio
async def test_redis_store_write_failure_raises_storage_error(sample_snapshot):
    with patch("catalog.store.redis_store.redis.from_url") as mock_from_url:
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))
        mock_from_url.return_value = mock_redis

        store = RedisLocalStore("redis://localhost:6379/0")
        await store.initialize()

        with pytest.raises(StorageError):
            await store.save(sample_snapshot)


@pytest.mark.asyncio
async def test_redis_store_unavailable_at_startup():
    with patch("catalog.store.redis_store.redis.from_url") as mock_from_url:
        mock_redis = AsyncMock()
        mock_redis.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        mock_from_url.return_value = mock_redis

        store = RedisLocalStore("redis://localhost:6379/0")
        await store.initialize()

        assert store.is_available is False


@pytest.mark.asyncio
async def test_redis_store_not_initialized():
    store = RedisLocalStore("redis://localhost:6379/0")
    with pytest.raises(StorageError):
        await store.load()


def test_create_store_picks_backend(tmp_path):
    class FileConfig:
        STORE_BACKEND = "file"
        STORE_DIR = str(tmp_path)
        SNAPSHOT_KEY = "products"
        REDIS_URL = "redis://localhost:6379/0"

    class RedisConfig(FileConfig):
        STORE_BACKEND = "redis"

    assert isinstance(create_store(FileConfig), FileLocalStore)
    assert isinstance(create_store(RedisConfig), RedisLocalStore)
