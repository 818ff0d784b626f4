"""
The unit harness: scheduler, assertion recorder and log sink in one object.

Typical use builds a ``Harness`` and drives it explicitly::

    harness = Harness.from_env()
    harness.configure(4)

    def addition(label):
        harness.assert_that("1 + 1 == 2", 1 + 1 == 2)

    harness.submit("addition", addition)
    harness.drain()

For scripts there is also a process-wide default harness behind the
module-level ``configure`` / ``test`` / ``assert_that`` / ``finish`` calls.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from pride.common import Unit
from pride.counters import CounterSnapshot
from pride.log import Logger
from pride.scheduler import SchedulerState, UnitScheduler
from pride.settings import HarnessSettings, LogSettings


class Harness:
    """Owns one scheduler and the log sink it writes through.

    Usable as a context manager; leaving the block drains every slot.
    """

    def __init__(
        self,
        settings: HarnessSettings | None = None,
        log_settings: LogSettings | None = None,
        *,
        join_timeout: float | None = None,
    ):
        self.settings = settings if settings is not None else HarnessSettings()
        self.log_settings = log_settings if log_settings is not None else LogSettings()
        self.log = Logger(self.log_settings)
        self.scheduler = UnitScheduler(self.settings, self.log, join_timeout=join_timeout)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, join_timeout: float | None = None) -> Harness:
        return cls(
            HarnessSettings.from_env(environ),
            LogSettings.from_env(environ),
            join_timeout=join_timeout,
        )

    def configure(self, worker_slots: int) -> int | None:
        return self.scheduler.configure(worker_slots)

    def submit(self, label: str, unit: Unit) -> int | None:
        return self.scheduler.submit(label, unit)

    def drain(self) -> None:
        self.scheduler.drain()

    def assert_that(self, message: str, condition: object) -> None:
        self.scheduler.assert_that(message, condition)

    @property
    def counters(self) -> CounterSnapshot:
        return self.scheduler.snapshot()

    @property
    def unit_errors(self) -> list[tuple[str, Exception]]:
        return self.scheduler.unit_errors

    @property
    def state(self) -> SchedulerState:
        return self.scheduler.state

    def __enter__(self) -> Harness:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.drain()


# ---------------------------------------------------------------------------
# Process-wide default harness
# ---------------------------------------------------------------------------

_default: Harness | None = None
_default_lock = threading.Lock()


def get_harness() -> Harness:
    """Return the default harness, creating it from the environment if needed."""
    global _default  # noqa: PLW0603
    with _default_lock:
        if _default is None:
            _default = Harness.from_env()
        return _default


def reset_harness(harness: Harness | None = None) -> Harness:
    """Drain the current default harness and replace it.

    Args:
        harness: The new default.  A fresh one is built from the environment
            when omitted.
    """
    global _default  # noqa: PLW0603
    # Drain outside the lock: running units may still call the module-level
    # assert_that(), which needs it.
    previous = _default
    if previous is not None:
        previous.drain()
    with _default_lock:
        _default = harness if harness is not None else Harness.from_env()
        return _default


def configure(worker_slots: int) -> int | None:
    return get_harness().configure(worker_slots)


def test(label: str, unit: Unit) -> int | None:
    """Submit *unit* to the default harness."""
    return get_harness().submit(label, unit)


# Keep pytest from collecting the module-level ``test`` when it is imported
# into a test module.
test.__test__ = False  # type: ignore[attr-defined]


def assert_that(message: str, condition: object) -> None:
    get_harness().assert_that(message, condition)


def finish() -> None:
    """Wait for every unit submitted to the default harness."""
    get_harness().drain()
