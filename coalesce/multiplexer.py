"""Defines the SingleTimer class."""

import logging
from typing import Any, Callable, Optional

from .host import TimerHost

LOGGER = logging.getLogger(__name__)


class SingleTimer:
    """
    Holds at most one outstanding host timer.

    Arming for a new deadline cancels whatever timer was outstanding and
    installs a fresh one, so the owner is woken exactly once, at the last
    deadline it asked for. SingleTimer never runs user callbacks; when its
    timer fires it calls the on_wake function it was built with.
    """

    _handle: Optional[Any]
    _deadline: Optional[float]
    _generation: int

    def __init__(self, host: TimerHost, on_wake: 'Callable[[], None]') -> None:
        """
        Create an unarmed timer.

        Parameters:
            host: Provides the one-shot timer and the clock
            on_wake: Called each time an armed deadline is reached

        """
        self._host = host
        self._on_wake = on_wake
        self._handle = None
        self._deadline = None
        # Bumped on every arm/disarm. A wake carrying an older generation
        # belongs to a replaced timer and is dropped.
        self._generation = 0

    @property
    def armed(self) -> bool:
        """Whether a wake is outstanding."""
        return self._handle is not None

    @property
    def deadline(self) -> Optional[float]:
        """Get the deadline of the outstanding wake, if any."""
        return self._deadline

    def arm(self, deadline: float) -> None:
        """
        Ensure a single wake is outstanding for deadline.

        Parameters:
            deadline: Absolute time (milliseconds) to be woken at or after

        """
        if self._handle is not None and self._deadline == deadline:
            return
        self.disarm()
        generation = self._generation
        delay = max(0.0, deadline - self._host.now_ms())
        LOGGER.debug("arm: %s (in %.3fms)", deadline, delay)
        self._handle = self._host.set_one_shot(
            lambda: self._wake(generation), delay)
        self._deadline = deadline

    def disarm(self) -> None:
        """Cancel the outstanding wake, if there is one."""
        self._generation += 1
        if self._handle is None:
            return
        LOGGER.debug("disarm: %s", self._deadline)
        self._host.cancel(self._handle)
        self._handle = None
        self._deadline = None

    def _wake(self, generation: int) -> None:
        if generation != self._generation:
            LOGGER.debug("stale wake dropped")
            return
        self._generation += 1
        self._handle = None
        self._deadline = None
        self._on_wake()
