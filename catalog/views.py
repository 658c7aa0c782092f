"""
Live views over the catalog.

A view subscribes to the invalidation bus and re-derives from every
published snapshot. Views must be closed on teardown; a closed view never
derives again.
"""
from dataclasses import replace
from typing import Callable, Optional

from catalog.coordinator import CacheCoordinator
from catalog.invalidation import PRODUCTS_KEY, InvalidationBus, Subscription
from catalog.logger import logger
from catalog.models.product import Product, Snapshot
from catalog.query import Page, QuerySpec, derive, validate
from catalog.utils.debounce import Debouncer


class LiveQuery:
    """The list page: a QuerySpec plus the page currently derived from it."""

    def __init__(
        self,
        coordinator: CacheCoordinator,
        bus: InvalidationBus,
        spec: Optional[QuerySpec] = None,
        debounce_seconds: float = 0.3,
        key: str = PRODUCTS_KEY,
        on_change: Optional[Callable[[Page], None]] = None
    ):
        self.coordinator = coordinator
        self.bus = bus
        self.key = key
        self.on_change = on_change
        self.spec = spec or QuerySpec()
        self.page: Optional[Page] = None
        self.closed = False
        self._snapshot: Optional[Snapshot] = None
        self._subscription: Optional[Subscription] = None
        self._search = Debouncer(debounce_seconds, self._apply_search)
        validate(self.spec)

    async def start(self) -> Page:
        """Load the snapshot, derive the first page and start listening."""
        snapshot = await self.coordinator.get_snapshot()
        if self._subscription is None:
            self._subscription = self.bus.subscribe(self.key, self._on_invalidate)
        self._derive(snapshot)
        return self.page

    @property
    def page_count(self) -> int:
        return self.page.page_count if self.page else 0

    def _on_invalidate(self, snapshot: Snapshot):
        self._derive(snapshot)

    def _derive(self, snapshot: Snapshot):
        if self.closed:
            return
        self._snapshot = snapshot
        self.page = derive(snapshot, self.spec)
        if self.on_change:
            self.on_change(self.page)

    async def _update(self, **changes) -> Page:
        spec = replace(self.spec, **changes)
        validate(spec)
        self.spec = spec
        if self._snapshot is None:
            return await self.start()
        self._derive(self._snapshot)
        return self.page

    def set_search(self, term: str):
        """Schedule a search; only the last term typed within the quiet period is applied."""
        if self.closed:
            return
        self._search.call(term)

    async def flush_search(self):
        await self._search.flush()

    async def _apply_search(self, term: str):
        if self.closed or term == self.spec.search_term:
            return
        logger.debug(f"Applying search term {term!r}")
        await self._update(search_term=term, page_index=0)

    async def sort_by(self, key: Optional[str], descending: bool = False) -> Page:
        return await self._update(sort_key=key, sort_descending=descending)

    async def set_page_size(self, page_size: int) -> Page:
        return await self._update(page_size=page_size, page_index=0)

    async def go_to_page(self, page_index: int) -> bool:
        """Jump to a page; indexes outside the current page range are ignored."""
        if not 0 <= page_index < self.page_count:
            return False
        await self._update(page_index=page_index)
        return True

    async def next_page(self) -> bool:
        return await self.go_to_page(self.spec.page_index + 1)

    async def previous_page(self) -> bool:
        return await self.go_to_page(self.spec.page_index - 1)

    async def refresh(self) -> Page:
        """Re-derive from the coordinator, loading again after a reset."""
        self._snapshot = None
        return await self.start()

    def close(self):
        self.closed = True
        self._search.cancel()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


class ProductDetailView:
    """The detail page: one product, re-resolved on every invalidation."""

    def __init__(
        self,
        coordinator: CacheCoordinator,
        bus: InvalidationBus,
        product_id: int,
        key: str = PRODUCTS_KEY,
        on_change: Optional[Callable[[Optional[Product]], None]] = None
    ):
        self.coordinator = coordinator
        self.bus = bus
        self.product_id = product_id
        self.key = key
        self.on_change = on_change
        self.product: Optional[Product] = None
        self.deleted = False
        self.closed = False
        self._subscription: Optional[Subscription] = None

    async def start(self) -> Product:
        self.product = await self.coordinator.find(self.product_id)
        if self._subscription is None:
            self._subscription = self.bus.subscribe(self.key, self._on_invalidate)
        return self.product

    def _on_invalidate(self, snapshot: Snapshot):
        if self.closed:
            return
        self.product = next((p for p in snapshot if p.id == self.product_id), None)
        self.deleted = self.product is None
        if self.on_change:
            self.on_change(self.product)

    def close(self):
        self.closed = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

