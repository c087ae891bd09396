#!/usr/bin/env python3
"""Floods a coalescing scheduler with randomly delayed callbacks."""

import argparse
import asyncio
import logging
import os
import random
from typing import List, Optional, Sequence  # pylint: disable=unused-import

import coalesce
import util

RUN_ID = random.randrange(999999999)
LOGGER = logging.getLogger(__name__)


class Tally:
    """Records when each scheduled callback ran relative to its deadline."""

    def __init__(self, host: coalesce.TimerHost) -> None:
        """Create an empty tally that reads time from host."""
        self._host = host
        self.expected = 0
        self.lateness: List[float] = []

    @property
    def fired(self) -> int:
        """Get the number of callbacks that have run."""
        return len(self.lateness)

    @property
    def early(self) -> int:
        """Get the number of callbacks that ran before their deadline."""
        return sum(1 for late in self.lateness if late < 0)

    def track(self, scheduler: coalesce.CoalescingScheduler,
              delay_ms: float) -> None:
        """Schedule a callback that records its lateness once it runs."""
        # Filled in from schedule(), so lateness is measured against the
        # scheduler's own deadline
        deadline = [0.0]
        self.expected += 1

        def record() -> None:
            self.lateness.append(self._host.now_ms() - deadline[0])
        deadline[0] = scheduler.schedule(record, delay_ms)


def load(scheduler: coalesce.CoalescingScheduler, tally: Tally,
         count: int, max_delay: int, rng: random.Random) -> None:
    """
    Schedule count callbacks with delays drawn uniformly from [0, max_delay].

    Parameters:
        scheduler: The scheduler to load
        tally: Records the lateness of each callback
        count: Number of callbacks
        max_delay: Largest delay (milliseconds)
        rng: Source of randomness

    """
    for _ in range(count):
        tally.track(scheduler, rng.randint(0, max_delay))


def run_dispatcher(count: int, max_delay: int, rng: random.Random) -> Tally:
    """Run the workload on a blocking Dispatcher."""
    dispatch = coalesce.Dispatcher()
    scheduler = coalesce.CoalescingScheduler(dispatch)
    tally = Tally(dispatch)
    load(scheduler, tally, count, max_delay, rng)
    dispatch.run()
    _summarize(scheduler, tally)
    return tally


def run_asyncio(count: int, max_delay: int, rng: random.Random) -> Tally:
    """Run the workload on an asyncio event loop."""
    async def workload() -> Tally:
        host = coalesce.AsyncioHost()
        scheduler = coalesce.CoalescingScheduler(host)
        tally = Tally(host)
        done = host.loop.create_future()
        load(scheduler, tally, count, max_delay, rng)
        # Scheduled last with the longest delay, so it runs after the rest
        scheduler.schedule(lambda: done.set_result(None), max_delay)
        await done
        _summarize(scheduler, tally)
        return tally
    return asyncio.run(workload())


def _summarize(scheduler: coalesce.CoalescingScheduler, tally: Tally) -> None:
    LOGGER.info("fired %d/%d callbacks in %d batches",
                tally.fired, tally.expected, scheduler.batches)
    if tally.lateness:
        LOGGER.info("lateness ms: mean %.3f max %.3f",
                    sum(tally.lateness) / len(tally.lateness),
                    max(tally.lateness))
    if tally.early:
        LOGGER.error("%d callbacks ran before their deadline", tally.early)


def main(argv: 'Optional[Sequence[str]]' = None) -> int:
    """Run the workload."""
    parser = argparse.ArgumentParser()
    parser.add_argument("-c", "--count",
                        default=1000,
                        type=int,
                        help="Number of callbacks to schedule")
    parser.add_argument("-d", "--max-delay",
                        default=2000,
                        type=int,
                        help="Largest callback delay (ms)")
    parser.add_argument("--host",
                        default="asyncio",
                        type=str, choices=["asyncio", "dispatcher"],
                        help="Timer host that drives the scheduler")
    parser.add_argument("-l", "--log-dir",
                        default=None,
                        type=str,
                        help="Path to use for log files (stdout only if unset)")
    parser.add_argument("--seed",
                        default=None,
                        type=int,
                        help="Random seed for the callback delays")
    parser.add_argument("-v", "--verbose",
                        action="store_true",
                        help="Log every enqueue/arm/execute")
    cli_args = parser.parse_args(argv)

    assert cli_args.count >= 0, "count must be non-negative"
    assert cli_args.max_delay >= 0, "max delay must be non-negative"

    log_dir = None
    if cli_args.log_dir is not None:
        log_dir = os.path.join(cli_args.log_dir, f'coalesce-{RUN_ID}')
    util.setup_logging(log_dir,
                       logging.DEBUG if cli_args.verbose else logging.INFO)

    logging.info("starting execution-- run id: %d", RUN_ID)
    logging.info("program arguments: %s", cli_args)

    rng = random.Random(cli_args.seed)
    if cli_args.host == "dispatcher":
        tally = run_dispatcher(cli_args.count, cli_args.max_delay, rng)
    else:
        tally = run_asyncio(cli_args.count, cli_args.max_delay, rng)
    if tally.early or tally.fired != tally.expected:
        return 1
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
