"""
RemoteSource tests with a mocked aiohttp session.
"""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from catalog.errors import FormatError, NetworkError
from catalog.services.remote_source import RemoteSource


def create_mock_response(status=200, text_data=""):
    """Helper to create a mocked aiohttp response."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=text_data)
    return mock_response


def make_source(response=None, error=None):
    source = RemoteSource(base_url="https://catalog.test", limit=1000, timeout=5)
    mock_session = AsyncMock()
    if error is not None:
        mock_session.get.side_effect = error
    else:
        mock_session.get.return_value = response
    source.session = mock_session
    return source, mock_session


@pytest.mark.asyncio
async def test_fetch_all_success(sample_records):
    body = json.dumps({"products": sample_records, "total": 3, "skip": 0, "limit": 3})
    source, session = make_source(create_mock_response(200, body))

    snapshot = await source.fetch_all()

    assert [p.id for p in snapshot] == [1, 2, 3]
    session.get.assert_called_once_with(
        "https://catalog.test/products", params={"limit": "1000"}
    )


@pytest.mark.asyncio
async def test_fetch_all_empty_catalog():
    source, _ = make_source(create_mock_response(200, json.dumps({"products": []})))
    assert await source.fetch_all() == ()


@pytest.mark.asyncio
async def test_fetch_all_non_success_status():
    source, _ = make_source(create_mock_response(500, "Internal Server Error"))

    with pytest.raises(NetworkError) as exc_info:
        await source.fetch_all()

    assert "500" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_all_connection_error():
    source, _ = make_source(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(NetworkError):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_fetch_all_timeout():
    source, _ = make_source(error=asyncio.TimeoutError())

    with pytest.raises(NetworkError) as exc_info:
        await source.fetch_all()

    assert "Timeout" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_all_invalid_json():
    source, _ = make_source(create_mock_response(200, "<html>oops</html>"))

    with pytest.raises(FormatError):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_fetch_all_missing_products_field():
    source, _ = make_source(create_mock_response(200, json.dumps({"items": []})))

    with pytest.raises(FormatError):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_fetch_all_products_not_a_list():
    source, _ = make_source(create_mock_response(200, json.dumps({"products": {"id": 1}})))

    with pytest.raises(FormatError):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_fetch_all_malformed_record(sample_records):
    del sample_records[1]["title"]
    source, _ = make_source(create_mock_response(200, json.dumps({"products": sample_records})))

    with pytest.raises(FormatError) as exc_info:
        await source.fetch_all()

    assert "title" in str(exc_info.value)


@pytest.mark.asyncio
async def test_initialize_session():
    source = RemoteSource(base_url="https://catalog.test")

    with patch("aiohttp.ClientSession") as mock_session_class:
        mock_session = AsyncMock()
        mock_session_class.return_value = mock_session

        await source.initialize()
        await source.initialize()

        assert source.session is mock_session
        mock_session_class.assert_called_once()

        await source.close()
        mock_session.close.assert_awaited_once()
        assert source.session is None
