"""Defines the Dispatcher class."""

import logging
import queue
import time
from typing import Callable

from .event import Timer
from .host import ReentrantRun

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """
    Dispatcher is a blocking, single-threaded TimerHost.

    Timers will be executed at or after their scheduled time. In the normal
    case, they will be executed very close to the scheduled time. However, the
    dispatcher is single-threaded and runs each Timer to completion. Therefore,
    if there are many timers scheduled for around the same time, some may get
    delayed due to processing overhead. Timers will be executed in order,
    however, and timers with the same timestamp run in the order they were set.

    The standard way to use this class is to:
    - Create the Dispatcher
    - Hand it to a CoalescingScheduler and schedule one or more callbacks
    - Call Dispatcher.run()

    Callbacks may schedule further work while they run. As long as there are
    more live timers queued, run() will continue to execute. Once the queue is
    empty, run() returns since all work has been processed. An exception raised
    by a timer propagates out of run(); the remaining timers stay queued and a
    later call to run() picks them up.
    """

    # All scheduled Timers are tracked in this PriorityQueue, ordered by
    # increasing Timer timestamp (Timer.when).
    _timer_queue: 'queue.PriorityQueue[Timer]'

    def __init__(self,
                 clock: 'Callable[[], float]' = time.monotonic,
                 sleep: 'Callable[[float], None]' = time.sleep) -> None:
        """
        Create a new Dispatcher.

        Parameters:
            clock: Time source in seconds
            sleep: Function used to wait, given a duration in seconds

        """
        self._timer_queue = queue.PriorityQueue()
        self._clock = clock
        self._sleep = sleep
        self._running = False

    def now_ms(self) -> float:
        """Return the dispatcher's clock in milliseconds."""
        return self._clock() * 1000

    def set_one_shot(self, callback: 'Callable[[], None]',
                     delay_ms: float) -> Timer:
        """
        Queue a callback to run once after a delay.

        Parameters:
            callback: The function to run
            delay_ms: Milliseconds from now

        Returns:
            The queued Timer, which doubles as the cancel handle.

        """
        timer = Timer(self.now_ms() + max(0.0, delay_ms), callback)
        LOGGER.debug("enqueue: %s", timer)
        self._timer_queue.put(timer)
        return timer

    def cancel(self, handle: Timer) -> None:
        """Cancel a queued Timer. It is discarded when it reaches the head."""
        handle.cancel()

    @property
    def pending(self) -> int:
        """Get the number of queued timers, including cancelled ones."""
        return self._timer_queue.qsize()

    def run(self) -> None:
        """Process Timers until the queue is empty."""
        if self._running:
            raise ReentrantRun("Dispatcher.run() called from a running timer")
        self._running = True
        try:
            while True:
                timer = self._timer_queue.get_nowait()
                if not timer.live:
                    continue
                delta = timer.when - self.now_ms()
                if delta > 0:
                    self._sleep(delta / 1000)
                LOGGER.debug("execute: %s", timer)
                timer.execute()
        except queue.Empty:
            pass
        finally:
            self._running = False
