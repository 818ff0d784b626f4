"""Pytest plugin exposing a pride harness as a fixture.

Registered through the ``pytest11`` entry point, so installing pride is
enough::

    def test_arithmetic(pride_harness):
        def unit(label):
            pride_harness.assert_that("1 + 1 == 2", 1 + 1 == 2)

        pride_harness.submit("arithmetic", unit)

    pytest --pride-workers=4        # dispatch units across 4 worker slots

    @pytest.mark.pride(workers=2)   # per-test override
    def test_pair(pride_harness): ...

On teardown the fixture drains the harness and fails the test if a unit
raised or an assertion failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pride.harness import Harness

if TYPE_CHECKING:
    from collections.abc import Iterator


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("pride", "Pride unit harness")
    group.addoption(
        "--pride-workers",
        type=int,
        default=None,
        help="Worker slots for the pride_harness fixture. 0 runs units inline. "
        "Defaults to PRIDE_WORKERS, or 0 when that is unset.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "pride(workers=N): run the pride_harness fixture with N worker slots")


def _requested_workers(config: pytest.Config, marker: pytest.Mark | None) -> int | None:
    """Worker count from the marker, then the command line; ``None`` if neither."""
    if marker is not None and "workers" in marker.kwargs:
        return marker.kwargs["workers"]
    return config.getoption("--pride-workers", default=None)


def _build_harness(workers: int | None) -> Harness:
    harness = Harness.from_env()
    if workers is not None and harness.configure(workers) is None:
        raise pytest.UsageError(f"pride: invalid worker slot count {workers}")
    return harness


def _failure_report(harness: Harness) -> str | None:
    """Describe crashed units and failed assertions, or ``None`` if clean."""
    problems = []
    for label, error in harness.unit_errors:
        problems.append(f"unit {label!r} raised {error!r}")
    failed = harness.counters.assertion_failed_count
    if failed:
        problems.append(f"{failed} assertion(s) failed")
    if not problems:
        return None
    return "pride: " + "; ".join(problems)


@pytest.fixture
def pride_harness(request: pytest.FixtureRequest) -> Iterator[Harness]:
    """A fresh harness, drained and checked when the test finishes."""
    workers = _requested_workers(request.config, request.node.get_closest_marker("pride"))
    harness = _build_harness(workers)
    yield harness
    harness.drain()
    report = _failure_report(harness)
    if report is not None:
        pytest.fail(report)
