"""Defines the Event and Timer classes."""

import abc
import itertools
from typing import Callable, List  # pylint: disable=unused-import

# Tie-breaker so that Events with the same timestamp keep their creation order
_SEQUENCE = itertools.count()


class Event(abc.ABC):
    """Event is some action that should be executed at a specific time."""

    # Time at which this event should be triggered (milliseconds)
    _when: float
    # Creation order, used to order Events that share a timestamp
    _seq: int

    def __init__(self, when: float) -> None:
        """
        Initialize an Event with its time.

        Parameters:
          when: The time of this event (milliseconds on the host's clock)

        """
        self._when = when
        self._seq = next(_SEQUENCE)

    @abc.abstractmethod
    def execute(self) -> None:
        """Execute the event's action."""

    @property
    def when(self) -> float:
        """Get the time for this Event."""
        return self._when

    def _key(self) -> 'tuple':
        return (self._when, self._seq)

    def __str__(self) -> str:
        """Return string representation of an Event."""
        return f"{self.when}#{self._seq}"

    def __eq__(self, other: object) -> bool:
        """Equal."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other: object) -> bool:
        """Not equal."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() != other._key()

    def __lt__(self, other: object) -> bool:
        """Less."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: object) -> bool:
        """Less or equal."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: object) -> bool:
        """Greater."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: object) -> bool:
        """Greater or equal."""
        if not isinstance(other, Event):
            return NotImplemented
        return self._key() >= other._key()

    def __hash__(self) -> int:
        """Hash on the ordering key."""
        return hash(self._key())


class Timer(Event):
    """A one-shot event that calls a function at a specific time, once."""

    # Held in a one-element list so mypy does not treat it as a method
    _action: List[Callable[[], None]]
    _live: bool

    def __init__(self, when: float, action: 'Callable[[], None]') -> None:
        """
        Define a timer that executes at a specific time.

        Parameters:
            when: The time when the action should execute
            action: A function to call that performs the action

        """
        self._action = [action]
        self._live = True
        super().__init__(when=when)

    @property
    def live(self) -> bool:
        """True until the timer has either run or been cancelled."""
        return self._live

    def cancel(self) -> None:
        """Prevent the action from running. Safe to call more than once."""
        self._live = False

    def execute(self) -> None:
        """Run the action unless the timer is no longer live."""
        if not self._live:
            return
        self._live = False
        self._action[0]()
