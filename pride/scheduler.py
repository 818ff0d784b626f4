"""
Unit scheduler: inline execution or a rotating table of worker slots.

With zero worker slots every unit runs synchronously on the caller's thread.
With ``N`` slots each submission takes the slot under a cursor that rotates
modulo ``N``.  If that slot still holds an earlier unit, the submitter blocks
until it has been joined, so two units that map to the same slot never
overlap.  Units in different slots run concurrently with no ordering between
them.

Example usage:
    ```python
    scheduler = UnitScheduler()
    scheduler.configure(2)

    def unit(label):
        scheduler.assert_that(f"{label}: 1 + 1 == 2", 1 + 1 == 2)

    scheduler.submit("A", unit)  # slot 0
    scheduler.submit("B", unit)  # slot 1
    scheduler.submit("C", unit)  # slot 0: joins "A" first
    scheduler.drain()
    ```

``submit`` and ``drain`` are meant to be driven from one thread.  A unit must
not submit further units, since the submitter may be blocked joining it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from pride.common import Severity, Unit
from pride.counters import CounterSnapshot, RunCounters
from pride.log import Logger
from pride.recorder import AssertionRecorder
from pride.settings import HarnessSettings

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"


class UnitTimeoutError(TimeoutError):
    """A slot occupant did not finish within the scheduler's ``join_timeout``."""


@dataclass
class Slot:
    """One position in the worker table.

    Attributes:
        index: Position in the table.
        occupant: The worker thread, or ``None`` if the slot is empty (never
            used, or its last occupant has been joined).
        label: Label of the unit the occupant is running.
    """

    index: int
    occupant: threading.Thread | None = None
    label: str | None = None

    @property
    def occupied(self) -> bool:
        return self.occupant is not None

    def fill(self, occupant: threading.Thread, label: str) -> None:
        self.occupant = occupant
        self.label = label

    def clear(self) -> None:
        self.occupant = None
        self.label = None


class SlotTable:
    """Fixed-size sequence of slots with a rotating "next slot" cursor."""

    def __init__(self, size: int):
        self.slots = [Slot(i) for i in range(size)]
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def current(self) -> Slot:
        return self.slots[self.cursor]

    def advance(self) -> None:
        self.cursor = (self.cursor + 1) % len(self.slots)

    def occupied(self) -> list[Slot]:
        return [slot for slot in self.slots if slot.occupied]


class UnitScheduler:
    """Runs units inline or across a rotating table of worker threads.

    The scheduler owns the slot table and the run counters.  Units record
    assertions through ``assert_that`` (or ``recorder.record``), which is safe
    to call from any worker.

    Counting differs between the two paths and this is kept on purpose:
    inline units increment ``unit_count`` and reset ``assertion_count`` before
    they run, while dispatched units do neither, so on the threaded path
    ``assertion_count`` accumulates across every unit.

    An exception raised by a unit ends only that unit.  It is stored in
    ``unit_errors`` as a ``(label, exception)`` pair and written as a FATAL
    line.
    """

    def __init__(
        self,
        settings: HarnessSettings | None = None,
        log: Logger | None = None,
        *,
        join_timeout: float | None = None,
    ):
        """Initialize an idle scheduler.

        Args:
            settings: Pool size and message templates (defaults to inline
                execution with the standard templates).
            log: Sink for unit-start, assertion and crash lines.
            join_timeout: Seconds to wait when joining a slot occupant before
                raising ``UnitTimeoutError``.  ``None`` (the default) waits
                forever, so a unit that never returns blocks ``submit`` on
                slot reuse and ``drain``.
        """
        self.settings = settings if settings is not None else HarnessSettings()
        self.log = log if log is not None else Logger()
        self.join_timeout = join_timeout
        self.counters = RunCounters()
        self.recorder = AssertionRecorder(self.counters, self.log, self.settings)
        if self.settings.set_worker_slots(self.settings.worker_slots) is None:
            logger.warning("Falling back to inline execution")
            self.settings.worker_slots = 0
        self.slots = SlotTable(self.settings.worker_slots)
        self.unit_errors: list[tuple[str, Exception]] = []
        self.joins = 0
        self._state = SchedulerState.IDLE
        # Guards the slot table and state; held while joining a reused slot
        # so occupancy only ever changes under it.
        self._lock = threading.RLock()
        self._errors_lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def worker_slots(self) -> int:
        return len(self.slots)

    def configure(self, worker_slots: int) -> int | None:
        """Set the number of worker slots (``0`` runs units inline).

        The table is rebuilt empty and the cursor returns to slot 0.

        Returns:
            *worker_slots* on success, or ``None`` if the value is not an
            ``int`` in ``0..MAX_THREAD_NUM`` or some slot still holds an unjoined unit
            (call ``drain()`` first).
        """
        with self._lock:
            busy = self.slots.occupied()
            if busy:
                logger.warning(
                    "Cannot resize worker table while %d slot(s) are occupied; drain first", len(busy)
                )
                return None
            if self.settings.set_worker_slots(worker_slots) is None:
                return None
            self.slots = SlotTable(worker_slots)
            return worker_slots

    def submit(self, label: str, unit: Unit) -> int | None:
        """Start a unit.

        Writes the unit-start line, then either runs ``unit(label)`` to
        completion on this thread (no worker slots) or starts it on a worker
        thread in the next slot, first joining whatever occupied that slot.

        Returns:
            The slot index the unit was dispatched to, or ``None`` if it ran
            inline.

        Raises:
            UnitTimeoutError: if ``join_timeout`` is set and the previous
                occupant of the slot did not finish in time.
        """
        with self._lock:
            self._state = SchedulerState.DISPATCHING
        self._emit(Severity.PLAIN, self.settings.unit_fmt, label)

        if not self.slots:
            self.counters.begin_inline_unit()
            self._run_unit(label, unit)
            return None

        with self._lock:
            slot = self.slots.current()
            if slot.occupied:
                self._join(slot)
            worker = threading.Thread(
                target=self._run_unit,
                args=(label, unit),
                name=f"pride-slot-{slot.index}:{label}",
                daemon=True,
            )
            # A thread that failed to start must not occupy the slot.
            worker.start()
            slot.fill(worker, label)
            logger.debug("Dispatched unit %r to slot %d", label, slot.index)
            self.slots.advance()
            return slot.index

    def drain(self) -> None:
        """Join every occupied slot.

        After this returns, every unit submitted so far has finished and all
        of its assertions have been recorded.  Draining with nothing
        outstanding does nothing.

        Raises:
            UnitTimeoutError: if ``join_timeout`` is set and some occupant did
                not finish in time.  Slots joined before it stay cleared.
        """
        with self._lock:
            self._state = SchedulerState.DRAINING
            try:
                for slot in self.slots:
                    if slot.occupied:
                        self._join(slot)
            except UnitTimeoutError:
                self._state = SchedulerState.DISPATCHING
                raise
            self._state = SchedulerState.IDLE

    def assert_that(self, message: str, condition: object) -> None:
        """Record an assertion; *condition* is evaluated for truthiness."""
        self.recorder.record(message, bool(condition))

    def snapshot(self) -> CounterSnapshot:
        return self.counters.snapshot()

    def _join(self, slot: Slot) -> None:
        occupant = slot.occupant
        if occupant is None:
            return
        logger.debug("Joining unit %r in slot %d", slot.label, slot.index)
        occupant.join(timeout=self.join_timeout)
        if occupant.is_alive():
            raise UnitTimeoutError(
                f"Unit {slot.label!r} in slot {slot.index} did not finish within {self.join_timeout}s"
            )
        slot.clear()
        self.joins += 1

    def _run_unit(self, label: str, unit: Unit) -> None:
        try:
            unit(label)
        except Exception as e:
            with self._errors_lock:
                self.unit_errors.append((label, e))
            logger.debug("Unit %r raised", label, exc_info=True)
            self._emit(Severity.FATAL, self.settings.unit_error_fmt, label, e)

    def _emit(self, severity: Severity, fmt: str, *args: object) -> None:
        try:
            self.log.emit(severity, fmt, *args)
        except (TypeError, ValueError) as e:
            logger.warning("Could not render %s line: %s", severity.value, e)
