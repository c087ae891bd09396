"""
Simulated-time host for exercising schedulers deterministically.

SimHost is a TimerHost whose clock only moves when tick() is called, so tests
can state exactly what must have happened by a given millisecond. at_times()
drives a SimHost through a plan of actions keyed by absolute time.
"""

import heapq
import logging
from typing import Callable, Dict, List, Sequence, Union

from .event import Timer
from .host import ClockError

LOGGER = logging.getLogger(__name__)

Action = Callable[[], None]


class SimHost:
    """A TimerHost driven by a manually advanced clock."""

    def __init__(self, start_ms: float = 0) -> None:
        """
        Create a host with its clock at start_ms.

        Parameters:
            start_ms: Initial clock reading (milliseconds)

        """
        self._now = start_ms
        self._timers: List[Timer] = []

    def now_ms(self) -> float:
        """Return the simulated time."""
        return self._now

    def set_one_shot(self, callback: Action, delay_ms: float) -> Timer:
        """Queue callback to run once the clock reaches now + delay_ms."""
        timer = Timer(self._now + max(0, delay_ms), callback)
        heapq.heappush(self._timers, timer)
        return timer

    def cancel(self, handle: Timer) -> None:
        """Cancel a queued timer."""
        handle.cancel()

    @property
    def pending_timers(self) -> int:
        """Get the number of timers that are still live."""
        return sum(1 for timer in self._timers if timer.live)

    def tick(self, ms: float) -> None:
        """
        Advance the clock by ms, running every timer that comes due.

        Timers run in due order, ties in the order they were set. The clock
        reads each timer's due time while it runs, and timers set by a running
        timer are honoured if they fall inside the window. tick(0) runs the
        timers that are due right now.

        A timer that raises does not stop the tick: the rest of the window is
        still run and the clock still ends at now + ms. The first exception is
        re-raised afterwards; later ones are logged.

        Parameters:
            ms: Milliseconds to advance (non-negative)

        Raises:
            ClockError: If ms is negative

        """
        if ms < 0:
            raise ClockError(f"cannot tick backwards ({ms}ms)")
        target = self._now + ms
        errors = []  # type: List[BaseException]
        while self._timers:
            head = self._timers[0]
            if not head.live:
                heapq.heappop(self._timers)
                continue
            if head.when > target:
                break
            heapq.heappop(self._timers)
            self._now = max(self._now, head.when)
            try:
                head.execute()
            except (SystemExit, KeyboardInterrupt):
                raise
            except BaseException as ex:  # pylint: disable=broad-except
                errors.append(ex)
        self._now = target
        if errors:
            for extra in errors[1:]:
                LOGGER.error("additional timer failure in tick", exc_info=extra)
            raise errors[0]


def at_times(host: SimHost,
             plan: 'Dict[float, Union[Action, Sequence[Action]]]') -> None:
    """
    Run actions at given absolute times on a simulated host.

    Times are visited in ascending order, ticking the host forward to each one.
    A single action is just called. For a sequence, each action is called and
    followed by tick(0), so zero-delay work it sets up runs before the next
    action in the sequence.

    Parameters:
        host: The simulated host to advance
        plan: Maps absolute times (milliseconds) to an action or actions

    """
    for when in sorted(plan):
        host.tick(when - host.now_ms())
        ops = plan[when]
        if callable(ops):
            ops()
            continue
        for op in ops:
            op()
            host.tick(0)
    LOGGER.debug("plan complete at %s", host.now_ms())
