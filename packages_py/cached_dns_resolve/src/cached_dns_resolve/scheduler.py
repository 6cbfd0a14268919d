"""
Cancelable periodic tasks for the background refresher and idle pruner.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

PeriodicCallback = Callable[[], Union[Awaitable[Any], Any]]
ErrorCallback = Callable[[BaseException], None]


class PeriodicTask:
    """
    Run a callback every interval_seconds on the running event loop.

    start() is idempotent and stop() cancels the loop; the task can be
    started again after stopping.

    Example:
        task = PeriodicTask("prune", 60.0, store.purge_stale)
        task.start()
        ...
        await task.stop()
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        callback: PeriodicCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._name = name
        self._interval = interval_seconds
        self._callback = callback
        self._on_error = on_error
        self._task: Optional[asyncio.Task] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start the loop. Returns False if it was already running."""
        if self.running:
            return False
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"cached-dns-{self._name}")
        logger.debug(f"PeriodicTask.start: name={self._name!r}, interval_seconds={self._interval}")
        return True

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.sleep(self._interval)
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                break
            except Exception as err:
                if self._on_error is not None:
                    self._on_error(err)
                else:
                    logger.exception(f"PeriodicTask._run: name={self._name!r} callback failed")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug(f"PeriodicTask.stop: name={self._name!r}")
