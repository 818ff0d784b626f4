"""Shared data structures for pride."""

from collections.abc import Callable
from enum import Enum

Unit = Callable[[str], object]
"""A test unit: called with its label, return value ignored."""


class Severity(Enum):
    """Classification of a log line.

    The value is the name used in environment overrides and diagnostics.
    ``FATAL`` is the "What a Terrible Failure" level; its value is ``wtf``.
    """

    PLAIN = "plain"
    VERBOSE = "verbose"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "wtf"

    @classmethod
    def parse(cls, name: str) -> "Severity":
        """Look up a severity by value or member name, case-insensitively.

        Raises:
            ValueError: if *name* matches no severity
        """
        key = name.strip().lower()
        for severity in cls:
            if key in (severity.value, severity.name.lower()):
                return severity
        raise ValueError(f"Unknown severity: {name!r}")

    def __repr__(self):
        return f"Severity.{self.name}"
