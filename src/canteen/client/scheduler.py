from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Runs an async callback on a fixed interval until stopped or cancelled.

    Runs are sequential: the next sleep starts only after the previous run
    returns, so a slow run delays the schedule instead of overlapping it.
    A failing run is logged and the schedule carries on.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], Awaitable[None]],
        run_immediately: bool = True,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._name = name
        self._interval_seconds = interval_seconds
        self._callback = callback
        self._run_immediately = run_immediately
        self._task: asyncio.Task[None] | None = None
        self._stop_requested = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            raise RuntimeError(f"repeating task {self._name} is already running")
        self._stop_requested = False
        self._task = asyncio.create_task(self._run(), name=self._name)

    def stop(self) -> None:
        """Ask the loop to exit after the current run; safe to call from the callback."""
        self._stop_requested = True

    async def cancel(self) -> None:
        task = self._task
        self._task = None
        self._stop_requested = True
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        if not self._run_immediately:
            await asyncio.sleep(self._interval_seconds)

        while not self._stop_requested:
            try:
                await self._callback()
            except asyncio.CancelledError:
                logger.info("repeating_task_cancelled", extra={"task": self._name})
                raise
            except Exception:
                logger.exception("repeating_task_run_failed", extra={"task": self._name})

            if self._stop_requested:
                break
            await asyncio.sleep(self._interval_seconds)

        logger.debug("repeating_task_stopped", extra={"task": self._name})
