"""Test fixtures for pytest."""

import pytest

from coalesce import CoalescingScheduler
from coalesce.testing import SimHost

def pytest_addoption(parser):
    """Add command-line options to pytest."""
    parser.addoption(
        "--run-realtime", action="store_true", default=False,
        help="run tests that sleep on a real asyncio event loop"
    )
    parser.addoption(
        "--run-benchmarks", action="store_true", default=False,
        help="run benchmark tests"
    )

def pytest_configure(config):
    """Define realtime and benchmark pytest marks."""
    config.addinivalue_line("markers", "realtime: mark test as using wall-clock time")
    config.addinivalue_line("markers", "benchmark: mark test as a benchmark")

def pytest_collection_modifyitems(config, items):
    """Only run realtime/benchmark tests when asked for."""
    if not config.getoption("--run-realtime"):
        skip_realtime = pytest.mark.skip(reason="need --run-realtime option to run")
        for item in items:
            if "realtime" in item.keywords:
                item.add_marker(skip_realtime)
    if not config.getoption("--run-benchmarks"):
        skip_bench = pytest.mark.skip(reason="need --run-benchmarks option to run")
        for item in items:
            if "benchmark" in item.keywords:
                item.add_marker(skip_bench)


@pytest.fixture
def sim_host():
    """A simulated host with its clock at 0."""
    return SimHost()


@pytest.fixture
# pylint: disable=redefined-outer-name
def scheduler(sim_host):
    """A scheduler driven by the simulated host."""
    return CoalescingScheduler(sim_host)
