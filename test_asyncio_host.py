"""Tests for running the scheduler on an asyncio event loop."""

import asyncio

import pytest

from coalesce import AsyncioHost, CoalescingScheduler


def test_zero_delay_runs_on_next_iteration():
    """A zero delay is deferred to the loop, not run inside schedule()."""
    seen = []

    async def scenario():
        sched = CoalescingScheduler(AsyncioHost())
        sched.schedule(lambda: seen.append("fired"), 0)
        seen.append("scheduled")
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert seen == ["scheduled", "fired"]

def test_host_uses_loop_clock():
    """now_ms() is the loop clock in milliseconds."""
    async def scenario():
        loop = asyncio.get_running_loop()
        host = AsyncioHost(loop)
        assert host.loop is loop
        before = loop.time() * 1000
        now = host.now_ms()
        assert before <= now <= loop.time() * 1000

    asyncio.run(scenario())

def test_cancelled_handle_does_not_run():
    """cancel() stops a pending call_later handle."""
    seen = []

    async def scenario():
        host = AsyncioHost()
        handle = host.set_one_shot(lambda: seen.append("fired"), 1)
        host.cancel(handle)
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert seen == []

def test_cancelled_error_keeps_loop_and_siblings():
    """A callback raising CancelledError does not drop its batch mates."""
    seen = []
    state = {}

    def cancelled():
        raise asyncio.CancelledError()

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda loop, context: seen.append("reported"))
        sched = CoalescingScheduler(AsyncioHost())
        sched.schedule(cancelled, 1)
        sched.schedule(lambda: seen.append("second"), 1)
        await asyncio.sleep(0.05)
        state["pending"] = sched.pending
        state["fired"] = sched.fired

    asyncio.run(scenario())
    assert "second" in seen
    assert state == {"pending": 0, "fired": 2}

@pytest.mark.realtime
def test_callbacks_never_early():
    """On wall-clock time no callback runs before its deadline."""
    lateness = []

    async def scenario():
        host = AsyncioHost()
        sched = CoalescingScheduler(host)
        done = host.loop.create_future()
        for delay in [40, 5, 25, 5, 0, 15, 30]:
            deadline = host.now_ms() + delay
            sched.schedule(
                lambda deadline=deadline: lateness.append(
                    host.now_ms() - deadline), delay)
        sched.schedule(lambda: done.set_result(None), 50)
        await done
        assert sched.pending == 0

    asyncio.run(scenario())
    assert len(lateness) == 7
    assert min(lateness) >= 0
