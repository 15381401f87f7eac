"""Time sources and schedulers the engine runs on.

The engine never reads the wall clock or touches the event loop directly;
it goes through a ``Clock`` and a ``Scheduler`` so tests can drive virtual
time without real one-second waits.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import date, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current local time as an aware datetime."""
        ...

    def today(self) -> date:
        """Return the current local calendar date."""
        ...


@runtime_checkable
class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None:
        """Stop the callback; it must not run after this returns."""
        ...

    @property
    def cancelled(self) -> bool:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Installs one-shot and periodic callbacks."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` every ``interval`` seconds until cancelled."""
        ...


class SystemClock:
    """Local wall clock."""

    def now(self) -> datetime:
        return datetime.now().astimezone()

    def today(self) -> date:
        return self.now().date()


class _AsyncioHandle:
    """Handle over a chain of ``loop.call_later`` timers."""

    def __init__(self) -> None:
        self._timer: asyncio.TimerHandle | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop.

    Periodic callbacks re-arm from the loop's monotonic time, so a slow
    callback does not push later ticks back.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> _AsyncioHandle:
        handle = _AsyncioHandle()

        def fire() -> None:
            if handle.cancelled:
                return
            handle._timer = None
            handle._cancelled = True
            callback()

        handle._timer = self.loop.call_later(delay, fire)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> _AsyncioHandle:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")

        handle = _AsyncioHandle()
        loop = self.loop
        next_due = loop.time() + interval

        def fire() -> None:
            nonlocal next_due
            if handle.cancelled:
                return
            next_due += interval
            handle._timer = loop.call_at(next_due, fire)
            callback()

        handle._timer = loop.call_at(next_due, fire)
        return handle
