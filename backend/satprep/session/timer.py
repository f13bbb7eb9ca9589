"""Countdown timer for timed practice sessions."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CountdownTimer:
    """Per-second countdown with tick and expiry observers.

    Each tick decrements the remaining time by one (never below zero) and
    notifies ``on_tick``. The tick that reaches zero stops the timer and
    fires ``on_expire`` exactly once.

    When ``start()`` is called inside a running event loop the timer drives
    itself with an asyncio task. Outside a loop, ticks are applied by
    calling ``tick()``, which is also how tests drive it.
    """

    def __init__(
        self,
        initial_seconds: int,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expire: Optional[Callable[[], None]] = None,
        interval: float = 1.0,
    ):
        if initial_seconds < 0:
            raise ValueError(f"initial_seconds must be >= 0, got {initial_seconds}")
        self.initial_seconds = initial_seconds
        self.interval = interval
        self._remaining = initial_seconds
        self._running = False
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def elapsed(self) -> int:
        return max(0, self.initial_seconds - self._remaining)

    def start(self) -> None:
        """Start or resume the countdown. No-op if running or at zero."""
        if self._running or self._remaining <= 0:
            return
        self._running = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._task = loop.create_task(self._run(self._generation))

    def pause(self) -> None:
        """Stop ticking and keep the remaining time."""
        self._running = False
        self._cancel_task()

    def reset(self, new_seconds: Optional[int] = None) -> None:
        """Stop and set remaining time to ``new_seconds`` or the initial value."""
        if new_seconds is not None and new_seconds < 0:
            raise ValueError(f"new_seconds must be >= 0, got {new_seconds}")
        self.pause()
        self._remaining = self.initial_seconds if new_seconds is None else new_seconds

    def stop(self) -> None:
        """Stop and zero the remaining time without firing expiry."""
        self.pause()
        self._remaining = 0

    def close(self) -> None:
        """Release the background task; the timer keeps its remaining time."""
        self.pause()

    def tick(self) -> None:
        """Apply one elapsed second. Ignored while paused or stopped."""
        if not self._running:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        if self._remaining == 0 and self._running:
            self._running = False
            self._cancel_task()
            if self._on_expire is not None:
                self._on_expire()

    async def _run(self, generation: int) -> None:
        try:
            while self._running and generation == self._generation:
                await asyncio.sleep(self.interval)
                if not self._running or generation != self._generation:
                    break
                self.tick()
        except Exception:
            self._running = False
            logger.exception("Timer callback raised; countdown stopped")

    def _cancel_task(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # The task exits on its own when a callback it invoked pauses the timer
        if task is not current:
            task.cancel()
