"""
Coalesce many delayed callbacks onto a single host timer.

Callbacks are actions that are to be executed after a delay (in the future).
An instance of CoalescingScheduler keeps every pending callback in a registry
keyed by its absolute deadline and holds exactly one timer with the host,
armed for the earliest of those deadlines. When that timer fires, every
deadline that has come due is drained and its callbacks are run in order.
"""

from .dispatcher import Dispatcher
from .event import Timer
from .host import AsyncioHost, ClockError, Error, ReentrantRun, TimerHost
from .multiplexer import SingleTimer
from .registry import DeadlineRegistry
from .scheduler import CoalescingScheduler
