"""
Invalidation bus.
Publishing a snapshot under a key tells every subscriber of that key to
re-derive whatever it holds from the fresh snapshot.
"""
import inspect
from typing import Any, Callable, Dict, List

from catalog.logger import logger
from catalog.models.product import Snapshot

PRODUCTS_KEY = "products"


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() on teardown."""

    def __init__(self, bus: "InvalidationBus", key: str, handler: Callable[[Snapshot], Any]):
        self.bus = bus
        self.key = key
        self.handler = handler
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.bus._remove(self)
            self.active = False


class InvalidationBus:
    """Keyed publish/subscribe for snapshot changes."""

    def __init__(self):
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, key: str, handler: Callable[[Snapshot], Any]) -> Subscription:
        subscription = Subscription(self, key, handler)
        self._subscribers.setdefault(key, []).append(subscription)
        logger.debug(f"Subscribed handler to '{key}' ({len(self._subscribers[key])} total)")
        return subscription

    def _remove(self, subscription: Subscription):
        subscribers = self._subscribers.get(subscription.key, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscribers.pop(subscription.key, None)

    def subscriber_count(self, key: str) -> int:
        return len(self._subscribers.get(key, []))

    async def publish(self, key: str, snapshot: Snapshot):
        """
        Deliver the snapshot to every subscriber of the key, in subscription order.

        A failing handler is logged and does not stop delivery to the rest;
        the change being announced has already been committed.
        """
        # Copy so handlers may unsubscribe while we iterate
        subscribers = list(self._subscribers.get(key, []))
        logger.debug(f"Publishing '{key}' to {len(subscribers)} subscribers")

        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                result = subscription.handler(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Invalidation handler for '{key}' failed: {e}", exc_info=True)
