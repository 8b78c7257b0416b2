"""Periodic background task with an explicit start/stop lifetime."""

import asyncio
from collections.abc import Callable

from synthmetrics.core.logs import get_logger, log_exception

logger = get_logger(__name__)


class PeriodicTask:
    """Run a synchronous callback every ``interval`` seconds on the event loop.

    The first call happens one interval after ``start()``. ``stop()`` sets a
    cancellation event and waits for the loop to finish, so no tick is left
    running after shutdown.

    Example:
        ```python
        task = PeriodicTask("cpu-simulator", 5.0, simulator.tick)
        task.start()
        ...
        await task.stop()
        ```
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop.

        Raises:
            RuntimeError: If the task was already started.
        """
        if self._task is not None:
            raise RuntimeError(f"Periodic task '{self.name}' already started")
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        self._task = asyncio.create_task(self._run(stop_event), name=self.name)
        logger.info(
            "Periodic task started",
            extra={"task": self.name, "interval_seconds": self.interval},
        )

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it."""
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        logger.info("Periodic task stopped", extra={"task": self.name})

    async def _run(self, stop_event: asyncio.Event) -> None:
        while True:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                return
            except TimeoutError:
                pass
            try:
                self._callback()
            except Exception:
                log_exception(
                    "Periodic task callback failed", logger=logger, task=self.name
                )
