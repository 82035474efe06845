"""Fixed-frequency runner for the full sync."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)


class ScheduledTaskRunner[T]:
    """Runs ``task`` every ``frequency_seconds``, one tick at a time.

    Each tick is bounded by ``timeout_seconds``. A tick that times out or raises is
    logged and the schedule carries on. :meth:`trigger` runs a tick out of band;
    it waits for any tick already in progress.
    """

    def __init__(
        self,
        task: Callable[[], Awaitable[T]],
        *,
        frequency_seconds: float,
        timeout_seconds: float,
        name: str = "sync",
    ) -> None:
        if frequency_seconds <= 0 or timeout_seconds <= 0:
            raise ValueError("Schedule frequency and timeout must be positive")
        self._task = task
        self._frequency = frequency_seconds
        self._timeout = timeout_seconds
        self._name = name
        self._lock = asyncio.Lock()
        self._stopped = asyncio.Event()

    @property
    def is_running_tick(self) -> bool:
        return self._lock.locked()

    async def trigger(self) -> T | None:
        """Run one tick now. Returns ``None`` when it times out or fails."""

        async with self._lock:
            try:
                return await asyncio.wait_for(self._task(), timeout=self._timeout)
            except TimeoutError:
                log.error("Task %s timed out after %ss", self._name, self._timeout)  # noqa: TRY400
            except Exception:
                log.exception("Task %s failed", self._name)
            return None

    async def run_forever(self, *, max_ticks: int | None = None) -> None:
        """Tick until :meth:`stop` is called, or ``max_ticks`` ticks have run."""

        if max_ticks is not None and max_ticks < 1:
            raise ValueError(f"max_ticks must be at least 1, got {max_ticks}")
        ticks = 0
        log.info("Scheduling %s every %ss (timeout %ss)", self._name, self._frequency, self._timeout)
        while not self._stopped.is_set():
            await self.trigger()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._frequency)
            except TimeoutError:
                continue
        log.info("Stopped scheduling %s after %s ticks", self._name, ticks)

    def stop(self) -> None:
        self._stopped.set()
