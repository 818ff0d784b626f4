"""
Shared fixtures for the pride test suite.

Every test is checked for leftover worker threads: a scheduler that is not
drained leaves its slot occupants running, which is exactly the bug the
join-before-reuse and drain logic is meant to prevent.
"""

import threading

import pytest

from pride import harness as harness_module
from pride.harness import Harness
from pride.settings import COLOR_ENV, FORCE_COLOR_ENV, NO_COLOR_ENV, STDOUT_ENV, WORKERS_ENV

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def _clean_pride_env(monkeypatch):
    """Keep the caller's environment from changing defaults under test."""
    for name in (WORKERS_ENV, COLOR_ENV, FORCE_COLOR_ENV, NO_COLOR_ENV, STDOUT_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _check_thread_cleanup(request):
    """Fail any test that leaves threads running after it finishes."""
    initial_threads = set(threading.enumerate())

    yield

    main_thread = threading.main_thread()
    alive_threads = [
        t for t in set(threading.enumerate()) - initial_threads if t is not main_thread and t.is_alive()
    ]
    if alive_threads:
        thread_info = ", ".join(f"{t.name} ({'daemon' if t.daemon else 'NON-DAEMON'})" for t in alive_threads)
        pytest.fail(
            f"Test {request.node.nodeid} left {len(alive_threads)} thread(s) running: {thread_info}. "
            f"Drain every harness before the test completes."
        )


@pytest.fixture
def make_harness():
    """Factory for harnesses that are drained when the test ends.

    Example:
        def test_two_slots(make_harness):
            harness = make_harness(workers=2)
            harness.submit("A", unit)
    """
    created: list[Harness] = []

    def factory(workers: int = 0, **kwargs) -> Harness:
        harness = Harness(**kwargs)
        assert harness.configure(workers) == workers
        created.append(harness)
        return harness

    yield factory
    for harness in created:
        harness.drain()


@pytest.fixture
def default_harness():
    """Install a fresh process-wide default harness for the test."""
    installed = harness_module.reset_harness(Harness())
    yield installed
    harness_module.reset_harness(Harness())
