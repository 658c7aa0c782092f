"""
Catalog facade.
Wires store, upstream, coordinator, bus and mutations into the one object an
application root owns and hands to its consumers.
"""
from typing import Any, Callable, Dict, Optional

from catalog.coordinator import CacheCoordinator
from catalog.invalidation import PRODUCTS_KEY, InvalidationBus, Subscription
from catalog.logger import logger
from catalog.models.product import Product, Snapshot
from catalog.mutations import MutationService
from catalog.query import Page, QuerySpec, derive
from catalog.services.remote_source import RemoteSource
from catalog.store import BaseLocalStore, create_store
from catalog.views import LiveQuery, ProductDetailView


class Catalog:
    """Unified catalog interface."""

    def __init__(
        self,
        store: BaseLocalStore,
        remote: RemoteSource,
        bus: Optional[InvalidationBus] = None,
        discard_corrupt: bool = True,
        debounce_seconds: float = 0.3,
        default_page_size: int = 10
    ):
        self.store = store
        self.remote = remote
        self.bus = bus or InvalidationBus()
        self.coordinator = CacheCoordinator(store, remote, discard_corrupt=discard_corrupt)
        self.mutations = MutationService(self.coordinator, self.bus)
        self.debounce_seconds = debounce_seconds
        self.default_page_size = default_page_size
        self.initialized = False

    @classmethod
    def from_config(cls, config) -> "Catalog":
        config.validate()
        return cls(
            store=create_store(config),
            remote=RemoteSource(
                base_url=config.CATALOG_API_URL,
                limit=config.CATALOG_FETCH_LIMIT,
                timeout=config.REQUEST_TIMEOUT
            ),
            discard_corrupt=config.DISCARD_CORRUPT_SNAPSHOT,
            debounce_seconds=config.search_debounce_seconds,
            default_page_size=config.DEFAULT_PAGE_SIZE
        )

    async def initialize(self):
        if self.initialized:
            return
        await self.store.initialize()
        await self.remote.initialize()
        self.initialized = True

    async def close(self):
        await self.remote.close()
        await self.store.close()
        self.initialized = False

    # Reads

    async def get_snapshot(self) -> Snapshot:
        return await self.coordinator.get_snapshot()

    async def query(self, spec: Optional[QuerySpec] = None) -> Page:
        spec = spec or QuerySpec(page_size=self.default_page_size)
        return derive(await self.coordinator.get_snapshot(), spec)

    async def get_product(self, product_id: int) -> Product:
        return await self.coordinator.find(product_id)

    # Writes

    async def create(self, draft: Dict[str, Any]) -> Product:
        return await self.mutations.create(draft)

    async def update(self, product_id: int, patch: Dict[str, Any]) -> Product:
        return await self.mutations.update(product_id, patch)

    async def delete(self, product_id: int):
        await self.mutations.delete(product_id)

    async def reset(self):
        logger.info("Resetting catalog cache")
        await self.mutations.reset()

    # Subscriptions

    def subscribe(self, handler: Callable[[Snapshot], Any], key: str = PRODUCTS_KEY) -> Subscription:
        return self.bus.subscribe(key, handler)

    async def watch(
        self,
        spec: Optional[QuerySpec] = None,
        on_change: Optional[Callable[[Page], None]] = None
    ) -> LiveQuery:
        view = LiveQuery(
            self.coordinator,
            self.bus,
            spec=spec or QuerySpec(page_size=self.default_page_size),
            debounce_seconds=self.debounce_seconds,
            on_change=on_change
        )
        await view.start()
        return view

    async def watch_product(
        self,
        product_id: int,
        on_change: Optional[Callable[[Optional[Product]], None]] = None
    ) -> ProductDetailView:
        view = ProductDetailView(self.coordinator, self.bus, product_id, on_change=on_change)
        await view.start()
        return view
