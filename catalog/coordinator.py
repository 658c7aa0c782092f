"""
Cache coordinator.
Owns the snapshot and the state machine that decides between the local
store and the upstream catalog.
"""
import asyncio
from enum import Enum
from typing import Optional

from catalog.errors import CatalogError, FormatError, LoadError, NotFoundError
from catalog.logger import logger
from catalog.models.product import Product, Snapshot
from catalog.sentry import capture_corrupt_snapshot
from catalog.services.remote_source import RemoteSource
from catalog.store.base import BaseLocalStore


class CacheState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class CacheCoordinator:
    """
    Single owner of the catalog snapshot.

    Concurrent get_snapshot() calls made while a load is running share that
    load's task instead of starting their own.
    """

    def __init__(self, store: BaseLocalStore, remote: RemoteSource, discard_corrupt: bool = True):
        self.store = store
        self.remote = remote
        self.discard_corrupt = discard_corrupt
        self.state = CacheState.EMPTY
        self.failure: Optional[Exception] = None
        self._snapshot: Optional[Snapshot] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def is_ready(self) -> bool:
        return self.state is CacheState.READY

    @property
    def snapshot(self) -> Optional[Snapshot]:
        """The held snapshot, or None when not Ready. Never triggers I/O."""
        return self._snapshot if self.is_ready else None

    async def get_snapshot(self) -> Snapshot:
        """
        Return the catalog snapshot, loading it on first use.

        Raises:
            LoadError: If neither the store nor the upstream could supply it
        """
        if self.state is CacheState.READY:
            return self._snapshot

        if self._inflight is None:
            self.state = CacheState.LOADING
            self.failure = None
            self._inflight = asyncio.create_task(self._load())
            self._inflight.add_done_callback(self._clear_inflight)

        # Shield so a cancelled caller does not cancel the shared load
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Task):
        if self._inflight is task:
            self._inflight = None

    async def _load(self) -> Snapshot:
        try:
            snapshot = await self._load_from_store()
            if snapshot is None:
                snapshot = await self.remote.fetch_all()
                await self.store.save(snapshot)
                logger.info(f"Catalog fetched and persisted ({len(snapshot)} products)")
        except CatalogError as e:
            self.state = CacheState.FAILED
            self.failure = e
            logger.error(f"Catalog load failed: {e}")
            raise LoadError(f"Failed to load catalog: {e}", reason=e) from e
        except Exception as e:
            self.state = CacheState.FAILED
            self.failure = e
            logger.error(f"Unexpected error loading catalog: {e}", exc_info=True)
            raise

        self._snapshot = snapshot
        self.state = CacheState.READY
        return snapshot

    async def _load_from_store(self) -> Optional[Snapshot]:
        try:
            snapshot = await self.store.load()
        except FormatError as e:
            if not self.discard_corrupt:
                raise
            logger.warning(f"Discarding corrupt snapshot under key '{self.store.key}': {e}")
            capture_corrupt_snapshot(self.store.key, str(e))
            return None

        if snapshot is not None:
            logger.info(f"Catalog loaded from local store ({len(snapshot)} products)")
        return snapshot

    def replace(self, snapshot: Snapshot):
        """Swap in a committed snapshot. Only valid while Ready."""
        if self.state is not CacheState.READY:
            raise RuntimeError(f"Cannot replace snapshot in state {self.state.value}")
        self._snapshot = snapshot

    async def commit(self, snapshot: Snapshot):
        """
        Persist a snapshot, then adopt it. Only valid while Ready.

        Raises:
            StorageError: If the store rejects the write; the held snapshot is unchanged
        """
        if self.state is not CacheState.READY:
            raise RuntimeError(f"Cannot commit snapshot in state {self.state.value}")
        await self.store.save(snapshot)
        self.replace(snapshot)

    async def find(self, product_id: int) -> Product:
        """Look up one product in the snapshot."""
        snapshot = await self.get_snapshot()
        for product in snapshot:
            if product.id == product_id:
                return product
        raise NotFoundError(product_id)

    async def reset(self):
        """Clear the durable store and forget the snapshot."""
        if self._inflight is not None:
            # Let a running load settle so it cannot resurrect the snapshot afterwards
            await asyncio.gather(self._inflight, return_exceptions=True)
        await self.store.clear()
        self._snapshot = None
        self.failure = None
        self.state = CacheState.EMPTY
        logger.info("Catalog cache reset")
