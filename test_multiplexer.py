"""Tests for the single-timer multiplexer."""

import asyncio

import pytest

from coalesce import AsyncioHost, SingleTimer
from coalesce.testing import SimHost


class LeakyHost(SimHost):
    """A host whose cancel() does nothing, so replaced timers still fire."""

    def cancel(self, handle):
        pass


def test_last_arm_wins(sim_host):
    """Only the most recently armed deadline produces a wake."""
    wakes = []
    timer = SingleTimer(sim_host, lambda: wakes.append(sim_host.now_ms()))
    timer.arm(3)
    timer.arm(1)
    timer.arm(1)
    timer.arm(2)
    assert sim_host.pending_timers == 1
    sim_host.tick(10)
    assert wakes == [2]
    assert not timer.armed

def test_rearm_same_deadline_keeps_timer(sim_host):
    """Arming for the outstanding deadline does not replace the host timer."""
    timer = SingleTimer(sim_host, lambda: None)
    timer.arm(5)
    handle = timer._handle  # pylint: disable=protected-access
    timer.arm(5)
    assert timer._handle is handle  # pylint: disable=protected-access
    assert timer.deadline == 5

def test_disarm_is_idempotent(sim_host):
    """Disarming cancels the wake and can be repeated."""
    wakes = []
    timer = SingleTimer(sim_host, lambda: wakes.append(1))
    timer.disarm()
    timer.arm(5)
    timer.disarm()
    timer.disarm()
    sim_host.tick(10)
    assert wakes == []
    assert timer.deadline is None

def test_stale_wake_is_dropped():
    """A replaced timer that fires anyway does not wake the owner."""
    host = LeakyHost()
    wakes = []
    timer = SingleTimer(host, lambda: wakes.append(host.now_ms()))
    timer.arm(3)
    timer.arm(7)
    timer.disarm()
    timer.arm(9)
    host.tick(20)
    assert wakes == [9]

def test_wake_can_rearm(sim_host):
    """The wake handler may arm the timer again."""
    wakes = []
    timer = None

    def on_wake():
        wakes.append(sim_host.now_ms())
        if len(wakes) < 3:
            timer.arm(sim_host.now_ms() + 4)

    timer = SingleTimer(sim_host, on_wake)
    timer.arm(4)
    sim_host.tick(100)
    assert wakes == [4, 8, 12]

def test_past_deadline_wakes_next_tick(sim_host):
    """A deadline already in the past is not woken synchronously."""
    sim_host.tick(50)
    wakes = []
    timer = SingleTimer(sim_host, lambda: wakes.append(1))
    timer.arm(10)
    assert wakes == []
    sim_host.tick(0)
    assert wakes == [1]

@pytest.mark.realtime
def test_last_arm_wins_on_asyncio():
    """The same holds on a real event loop."""
    wakes = []

    async def scenario():
        host = AsyncioHost()
        timer = SingleTimer(host, lambda: wakes.append("wake"))
        start = host.now_ms()
        timer.arm(start + 3)
        timer.arm(start + 1)
        timer.arm(start + 1)
        timer.arm(start + 1)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert wakes == ["wake"]

def test_fields_are_declared():
    """Every field SingleTimer keeps is declared on the class."""
    assert set(SingleTimer.__annotations__) >= {"_handle", "_deadline",
                                                "_generation"}
