"""Defines the CoalescingScheduler class."""

import logging
from typing import List, Optional, Tuple  # pylint: disable=unused-import

from .host import TimerHost
from .multiplexer import SingleTimer
from .registry import Callback, DeadlineRegistry

LOGGER = logging.getLogger(__name__)


class CoalescingScheduler:
    """
    Runs delayed callbacks using a single host timer.

    Every scheduled callback is filed in a DeadlineRegistry under its absolute
    deadline. After each insertion and after each batch of firings the
    scheduler looks up the earliest pending deadline and makes sure the one
    host timer it owns is armed for it, so a newly scheduled, nearer callback
    pre-empts a farther wake that was already armed.

    When the timer fires, every deadline that is due by then is drained in a
    single sweep and its callbacks are run: deadlines in increasing order,
    callbacks sharing a deadline in the order they were scheduled. The timer is
    then re-armed for whatever is left, including anything the callbacks
    scheduled themselves. Nothing ever runs inside schedule(); a zero delay
    waits for the host's next tick.

    If a callback raises, the rest of its batch still runs and the timer is
    re-armed before the first exception is re-raised to the host. Further
    exceptions from the same batch are logged. This includes BaseExceptions
    such as asyncio.CancelledError. Only SystemExit and KeyboardInterrupt
    stop a batch early; the callbacks of that batch that had not run yet go
    back to the front of their deadlines and fire on the next wake.

    Callbacks cannot be cancelled once scheduled.
    """

    def __init__(self, host: TimerHost) -> None:
        """
        Create a scheduler bound to a host.

        Parameters:
            host: Provides the one-shot timer and the clock

        """
        self._host = host
        self._registry = DeadlineRegistry()
        self._timer = SingleTimer(host, self._on_wake)
        self._fired = 0
        self._batches = 0

    @property
    def pending(self) -> int:
        """Get the number of callbacks waiting to run."""
        return len(self._registry)

    @property
    def next_deadline(self) -> Optional[float]:
        """Get the earliest pending deadline, or None."""
        return self._registry.earliest_deadline()

    @property
    def fired(self) -> int:
        """Get the total number of callbacks that have been run."""
        return self._fired

    @property
    def batches(self) -> int:
        """Get the number of wakes that found at least one due deadline."""
        return self._batches

    def schedule(self, callback: Callback, delay_ms: float) -> float:
        """
        Run callback no earlier than delay_ms milliseconds from now.

        Parameters:
            callback: A function taking no arguments
            delay_ms: The delay in milliseconds. Negative values are treated
                as 0.

        Returns:
            The absolute deadline the callback was filed under.

        """
        if delay_ms < 0:
            LOGGER.debug("negative delay %s clamped to 0", delay_ms)
            delay_ms = 0
        deadline = self._host.now_ms() + delay_ms
        LOGGER.debug("enqueue: %s", deadline)
        self._registry.insert(deadline, callback)
        self._rearm()
        return deadline

    def _rearm(self) -> None:
        earliest = self._registry.earliest_deadline()
        if earliest is None:
            self._timer.disarm()
            return
        now = self._host.now_ms()
        self._timer.arm(max(earliest, now))

    def _on_wake(self) -> None:
        due = self._registry.drain_due(self._host.now_ms())
        if due:
            self._batches += 1
        errors = []  # type: List[BaseException]
        unrun = []  # type: List[Tuple[float, List[Callback]]]
        try:
            for pos, (deadline, group) in enumerate(due):
                LOGGER.debug("execute: %s (%d callbacks)", deadline, len(group))
                for idx, callback in enumerate(group):
                    self._fired += 1
                    try:
                        callback()
                    except (SystemExit, KeyboardInterrupt):
                        unrun = [(deadline, group[idx + 1:])] + due[pos + 1:]
                        raise
                    except BaseException as ex:  # pylint: disable=broad-except
                        errors.append(ex)
        finally:
            self._registry.restore(unrun)
            self._rearm()
        if errors:
            for extra in errors[1:]:
                LOGGER.error("additional callback failure in batch",
                             exc_info=extra)
            raise errors[0]
