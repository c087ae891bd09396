"""
Host timer primitives consumed by the coalescing scheduler.

The scheduler never sleeps or spawns threads itself. It relies on a host that
can run a function once after a delay, cancel such a pending run, and report
the current time on the same clock. Anything that provides those three calls
(the TimerHost protocol) can drive a CoalescingScheduler.
"""

import asyncio
from typing import Any, Callable, Optional, Protocol


class Error(Exception):
    """Base class for exceptions raised by the coalesce hosts."""

class ClockError(Error):
    """A simulated clock was asked to move backwards."""

class ReentrantRun(Error):
    """A blocking host's run loop was entered from inside one of its timers."""


class TimerHost(Protocol):
    """
    One-shot timer primitive plus the clock it measures delays against.

    Delays and timestamps are in milliseconds. A zero delay must never run the
    callback from within set_one_shot(); it runs on the host's next tick.
    """

    def set_one_shot(self, callback: Callable[[], None],
                     delay_ms: float) -> Any:
        """Run callback once, delay_ms from now. Returns a cancel handle."""

    def cancel(self, handle: Any) -> None:
        """Cancel a pending one-shot. Cancelling a spent handle is a no-op."""

    def now_ms(self) -> float:
        """Return the current time in milliseconds."""


class AsyncioHost:
    """
    TimerHost backed by an asyncio event loop.

    Timers are loop.call_later() handles and the clock is loop.time(), so
    delays are measured on the same monotonic clock the loop uses to decide
    when a handle is due. A zero delay is run on the next loop iteration.
    """

    def __init__(self,
                 loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Bind the host to an event loop.

        Parameters:
            loop: The loop to schedule on. Defaults to the running loop.

        """
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """Get the event loop timers are scheduled on."""
        return self._loop

    def set_one_shot(self, callback: Callable[[], None],
                     delay_ms: float) -> asyncio.TimerHandle:
        """Schedule callback on the loop after delay_ms."""
        return self._loop.call_later(max(0.0, delay_ms) / 1000, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        """Cancel a loop handle."""
        handle.cancel()

    def now_ms(self) -> float:
        """Return the loop's clock in milliseconds."""
        return self._loop.time() * 1000
