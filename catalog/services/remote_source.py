"""
Wrapper for the upstream catalog.
Includes timeout, response validation, error translation.
All network logic is isolated here; nothing in this module retries.
"""
import asyncio
import json
from typing import Optional

import aiohttp

from catalog.config import config
from catalog.errors import FormatError, NetworkError
from catalog.logger import logger
from catalog.models.product import Snapshot, snapshot_from_records


class RemoteSource:
    """
    One-shot bulk loader for the read-only upstream catalog.
    Business logic never calls the upstream API directly.
    """

    def __init__(self, base_url: str = None, limit: int = None, timeout: int = None):
        self.base_url = (base_url or config.CATALOG_API_URL).rstrip("/")
        self.limit = limit or config.CATALOG_FETCH_LIMIT
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self):
        """Initialize HTTP session (called after startup)."""
        if self.session is not None:
            return
        self.session = aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        logger.info(f"Remote source initialized for {self.base_url}")

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch_all(self) -> Snapshot:
        """
        Fetch the entire upstream catalog in a single request.

        Returns:
            Snapshot of validated products, in upstream order

        Raises:
            NetworkError: If the upstream is unreachable, times out or
                answers with a non-success status
            FormatError: If the body is not a well-formed product list
        """
        if self.session is None:
            await self.initialize()

        url = f"{self.base_url}/products"
        logger.info(f"Fetching catalog from {url} (limit: {self.limit})")

        try:
            response = await self.session.get(url, params={"limit": str(self.limit)})

            if response.status != 200:
                error_text = await response.text()
                logger.error(f"Catalog API error {response.status}: {error_text[:200]}")
                raise NetworkError(f"Catalog API error {response.status}: {error_text[:200]}")

            body = await response.text()

        except aiohttp.ClientError as e:
            logger.error(f"Network error calling catalog API: {str(e)}")
            raise NetworkError(f"Network error calling catalog API: {str(e)}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout calling catalog API: {str(e)}")
            raise NetworkError(f"Timeout calling catalog API: {str(e)}") from e

        snapshot = self._parse(body)
        logger.info(f"Fetched {len(snapshot)} products from catalog API")
        return snapshot

    @staticmethod
    def _parse(body: str) -> Snapshot:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON response from catalog API: {str(e)}")
            raise FormatError(f"Invalid JSON response from catalog API: {str(e)}") from e

        if not isinstance(data, dict) or "products" not in data:
            raise FormatError("Catalog API response has no 'products' field")

        try:
            return snapshot_from_records(data["products"])
        except ValueError as e:
            logger.error(f"Malformed product data from catalog API: {e}")
            raise FormatError(f"Malformed product data from catalog API: {e}") from e
