"""Assertion recording."""

import logging

from pride.common import Severity
from pride.counters import RunCounters
from pride.log import Logger
from pride.settings import HarnessSettings

logger = logging.getLogger(__name__)


class AssertionRecorder:
    """Counts an assertion and writes its pass/fail line.

    Passed assertions are written at INFO, failed ones at ERROR, both using
    ``HarnessSettings.assertion_fmt`` with the matching glyph.  The counters
    are authoritative: a lost or unrenderable line never fails the caller.
    """

    def __init__(self, counters: RunCounters, log: Logger, settings: HarnessSettings):
        self.counters = counters
        self.log = log
        self.settings = settings

    def record(self, message: str, passed: bool) -> None:
        passed = bool(passed)
        self.counters.record_assertion(passed)
        if passed:
            severity, glyph = Severity.INFO, self.settings.assertion_passed_str
        else:
            severity, glyph = Severity.ERROR, self.settings.assertion_failed_str
        try:
            self.log.emit(severity, self.settings.assertion_fmt, glyph, message)
        except (TypeError, ValueError) as e:
            logger.warning("Could not render assertion line for %r: %s", message, e)
