"""
Cancellable, debounced scheduling of a recomputation callback on asyncio.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[Any, Awaitable[Any]]]


class Debouncer:
    """
    Coalesce rapid triggers into one callback run.

    Each trigger() cancels the pending run (if it has not started) and
    schedules a new one after `delay` seconds of quiet.
    """

    def __init__(self, callback: Callback, delay: float = 0.3):
        self.callback = callback
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> Any:
        result = self.callback()
        if inspect.isawaitable(result):
            result = await result
        self.runs += 1
        return result

    async def _delayed(self) -> Any:
        await asyncio.sleep(self.delay)
        return await self._run()

    def trigger(self) -> asyncio.Task:
        """Schedule the callback, superseding any pending run. Needs a running loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._delayed())
        return self._task

    def cancel(self) -> bool:
        if self.pending:
            self._task.cancel()
            logger.debug("Cancelled pending recomputation")
            self._task = None
            return True
        return False

    async def flush(self) -> Any:
        """Run the callback now, dropping any pending run."""
        self.cancel()
        return await self._run()

    async def wait(self) -> Any:
        """Wait for the pending run, if any, to finish."""
        task = self._task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            # superseded by a newer trigger
            if self._task is not None and self._task is not task:
                return await self.wait()
            return None
