"""Run counters shared between the scheduler and concurrently running units."""

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CounterSnapshot:
    """A consistent read of the run counters.

    Attributes:
        unit_count: Units run inline.  Units dispatched to worker slots are
            not counted.
        assertion_count: Assertions since the last inline unit started.  On
            the threaded path this is never reset and accumulates across all
            dispatched units.
        assertion_passed_count: Passed assertions over the scheduler's lifetime.
        assertion_failed_count: Failed assertions over the scheduler's lifetime.
    """

    unit_count: int = 0
    assertion_count: int = 0
    assertion_passed_count: int = 0
    assertion_failed_count: int = 0


class RunCounters:
    """Lock-guarded counter block.

    Every mutation happens under one lock so concurrent units never lose an
    increment, and ``snapshot()`` never observes a half-applied update.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._unit_count = 0
        self._assertion_count = 0
        self._passed = 0
        self._failed = 0

    def begin_inline_unit(self) -> None:
        """Count an inline unit and reset the per-unit assertion count."""
        with self._lock:
            self._unit_count += 1
            self._assertion_count = 0

    def record_assertion(self, passed: bool) -> None:
        with self._lock:
            self._assertion_count += 1
            if passed:
                self._passed += 1
            else:
                self._failed += 1

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                unit_count=self._unit_count,
                assertion_count=self._assertion_count,
                assertion_passed_count=self._passed,
                assertion_failed_count=self._failed,
            )

    def __repr__(self):
        s = self.snapshot()
        return (
            f"RunCounters(units={s.unit_count}, assertions={s.assertion_count}, "
            f"passed={s.assertion_passed_count}, failed={s.assertion_failed_count})"
        )
