from unittest.mock import AsyncMock, patch

import pytest

from catalog.errors import LoadError, RetryExhaustedError
from catalog.utils.retry import async_retry


@pytest.mark.asyncio
async def test_retry_until_success():
    calls = AsyncMock(side_effect=[LoadError("down"), LoadError("down"), "ok"])

    @async_retry(max_retries=3, backoff_factor=2, exceptions=(LoadError,))
    async def load():
        return await calls()

    with patch("catalog.utils.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        assert await load() == "ok"

    assert calls.await_count == 3
    assert [c.args[0] for c in mock_sleep.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_retry_exhausted():
    calls = AsyncMock(side_effect=LoadError("down"))

    @async_retry(max_retries=2, backoff_factor=1, exceptions=(LoadError,))
    async def load():
        return await calls()

    with patch("catalog.utils.retry.asyncio.sleep", new=AsyncMock()):
        with pytest.raises(RetryExhaustedError) as exc_info:
            await load()

    assert calls.await_count == 3
    assert isinstance(exc_info.value.__cause__, LoadError)


@pytest.mark.asyncio
async def test_other_exceptions_are_not_retried():
    calls = AsyncMock(side_effect=KeyError("boom"))

    @async_retry(max_retries=5, exceptions=(LoadError,))
    async def load():
        return await calls()

    with pytest.raises(KeyError):
        await load()

    assert calls.await_count == 1


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt():
    calls = AsyncMock(side_effect=LoadError("down"))

    @async_retry(max_retries=0, exceptions=(LoadError,))
    async def load():
        return await calls()

    with pytest.raises(RetryExhaustedError):
        await load()

    assert calls.await_count == 1
