from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)

TickCallback = Callable[[], Awaitable[object]]


class PeriodicTask:
    """Repeating asyncio timer whose ticks run as independent tasks.

    A tick that is still outstanding when the next one fires keeps running,
    so callbacks must tolerate overlap. ``stop`` cancels the timer together
    with every in-flight tick.
    """

    def __init__(self, *, name: str, interval_seconds: float, callback: TickCallback) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._name = name
        self._interval_seconds = interval_seconds
        self._callback = callback
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def start(self) -> None:
        if self.is_running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run(), name=f"{self._name}:timer")
        logger.debug("periodic_task_started", task=self._name, interval_seconds=self._interval_seconds)

    def stop(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()
        # A tick that stops its own timer runs to completion.
        current = _current_task()
        for task in list(self._in_flight):
            if task is not current:
                task.cancel()
        if timer is not None:
            logger.debug("periodic_task_stopped", task=self._name)

    async def aclose(self) -> None:
        pending = [task for task in (self._timer, *self._in_flight) if task is not None]
        self.stop()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def trigger(self) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._tick(), name=f"{self._name}:tick")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.trigger()

    async def _tick(self) -> None:
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("periodic_task_tick_failed", task=self._name)


def _current_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
