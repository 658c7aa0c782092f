"""
Mutation service.
Create, update and delete run one at a time as read-modify-persist-replace
cycles; memory only changes after the durable write succeeds.
"""
import asyncio
from typing import Any, Dict

from catalog.coordinator import CacheCoordinator
from catalog.errors import InvalidProductError, NotFoundError
from catalog.invalidation import PRODUCTS_KEY, InvalidationBus
from catalog.logger import logger
from catalog.models.product import Product, Snapshot, attribute_name


def _to_attributes(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Map wire or attribute keys to attribute names, rejecting unknown ones."""
    if not isinstance(fields, dict):
        raise InvalidProductError("Product fields must be an object")

    attributes = {}
    for name, value in fields.items():
        attr = attribute_name(name)
        if attr is None:
            raise InvalidProductError(f"Unknown product field: {name!r}")
        if attr == "images" and isinstance(value, list):
            value = tuple(value)
        attributes[attr] = value
    return attributes


def _checked(product: Product) -> Product:
    problems = product.problems()
    if problems:
        raise InvalidProductError("; ".join(problems))
    return product


def _index_of(snapshot: Snapshot, product_id: int) -> int:
    for index, product in enumerate(snapshot):
        if product.id == product_id:
            return index
    raise NotFoundError(product_id)


class MutationService:
    """Serialized writes against the coordinator's snapshot."""

    def __init__(self, coordinator: CacheCoordinator, bus: InvalidationBus, key: str = PRODUCTS_KEY):
        self.coordinator = coordinator
        self.bus = bus
        self.key = key
        self._lock = asyncio.Lock()

    async def create(self, draft: Dict[str, Any]) -> Product:
        """Add a product with the next free id at the front of the catalog."""
        attributes = _to_attributes(draft)
        if "id" in attributes:
            raise InvalidProductError("id is assigned by the catalog")
        for required in ("title", "price"):
            if required not in attributes:
                raise InvalidProductError(f"{required} is required")

        async with self._lock:
            snapshot = await self.coordinator.get_snapshot()
            new_id = max((p.id for p in snapshot), default=0) + 1
            try:
                product = _checked(Product(id=new_id, **attributes))
            except TypeError as e:
                raise InvalidProductError(str(e)) from e

            updated = (product,) + snapshot
            # Persisted before memory changes; a StorageError leaves the snapshot untouched
            await self.coordinator.commit(updated)
            # Published under the lock so subscribers see commits in order
            await self.bus.publish(self.key, updated)

        logger.info(
            f"Created product {product.id}: {product.title!r}",
            extra={"extra": {"operation": "create", "product_id": product.id}}
        )
        return product

    async def update(self, product_id: int, patch: Dict[str, Any]) -> Product:
        """Merge patch into an existing product, keeping its position."""
        attributes = _to_attributes(patch)
        if "id" in attributes and attributes.pop("id") != product_id:
            raise InvalidProductError("id cannot be changed")

        async with self._lock:
            snapshot = await self.coordinator.get_snapshot()
            index = _index_of(snapshot, product_id)
            product = _checked(snapshot[index].merged(**attributes))

            updated = snapshot[:index] + (product,) + snapshot[index + 1:]
            await self.coordinator.commit(updated)
            await self.bus.publish(self.key, updated)

        logger.info(
            f"Updated product {product_id} ({', '.join(sorted(attributes)) or 'no fields'})",
            extra={"extra": {"operation": "update", "product_id": product_id, "fields": sorted(attributes)}}
        )
        return product

    async def delete(self, product_id: int):
        """Remove a product from the catalog."""
        async with self._lock:
            snapshot = await self.coordinator.get_snapshot()
            index = _index_of(snapshot, product_id)

            updated = snapshot[:index] + snapshot[index + 1:]
            await self.coordinator.commit(updated)
            await self.bus.publish(self.key, updated)

        logger.info(
            f"Deleted product {product_id}",
            extra={"extra": {"operation": "delete", "product_id": product_id}}
        )

    async def reset(self):
        """Reset the coordinator without racing an in-flight mutation."""
        async with self._lock:
            await self.coordinator.reset()

