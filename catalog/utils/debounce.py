"""
Cancellable quiescence timer for asyncio.
"""
import asyncio
import inspect
from typing import Any, Callable, Optional

from catalog.logger import logger


class Debouncer:
    """
    Runs a callback once calls have stopped arriving for `delay` seconds.

    Each call() restarts the timer with the newest arguments; cancel() drops
    whatever is pending and must be called when the owner goes away.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, *args, **kwargs):
        self.cancel()
        self._task = asyncio.create_task(self._fire(args, kwargs))

    async def _fire(self, args, kwargs):
        await asyncio.sleep(self.delay)
        try:
            result = self.callback(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}", exc_info=True)

    async def flush(self):
        """Wait for a pending call to fire."""
        if self.pending:
            await asyncio.gather(self._task, return_exceptions=True)

    def cancel(self):
        if self.pending:
            self._task.cancel()
        self._task = None
