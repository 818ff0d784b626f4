"""Settings for the log sink and the unit harness.

Both settings objects are plain mutable dataclasses.  Fields may be assigned
directly, but the ``set_*`` methods validate their input and report a bad
value by returning ``None`` instead of raising::

    settings = LogSettings()
    settings.set_prefix(Severity.INFO, sgr.CYAN)   # -> "\\x1b[36m"
    settings.set_prefix(Severity.INFO, "x" * 65)  # -> None, unchanged

Environment overrides are applied by ``from_env()``:

``PRIDE_WORKERS``
    Number of worker slots (``0`` runs every unit inline).
``PRIDE_COLOR``
    ``0`` / ``1``: colorize prefixes on terminals.
``PRIDE_FORCE_COLOR``
    ``0`` / ``1``: colorize prefixes on non-terminals too.
``NO_COLOR``
    Any non-empty value disables color, overriding ``PRIDE_COLOR``.
``PRIDE_STDOUT``
    Comma-separated severities routed to stdout instead of stderr, or ``all``.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TextIO

from pride import sgr
from pride.common import Severity

logger = logging.getLogger(__name__)

MAX_PREFIX_STRLEN = 64
MAX_LOGFMT_STRLEN = 256
MAX_THREAD_NUM = 256

WORKERS_ENV = "PRIDE_WORKERS"
COLOR_ENV = "PRIDE_COLOR"
FORCE_COLOR_ENV = "PRIDE_FORCE_COLOR"
NO_COLOR_ENV = "NO_COLOR"
STDOUT_ENV = "PRIDE_STDOUT"

DEFAULT_PREFIXES: dict[Severity, str] = {
    Severity.PLAIN: sgr.RESET,
    Severity.VERBOSE: sgr.RESET,
    Severity.DEBUG: sgr.BLUE,
    Severity.INFO: sgr.GREEN + sgr.BOLD,
    Severity.WARN: sgr.YELLOW + sgr.BOLD,
    Severity.ERROR: sgr.RED + sgr.BOLD,
    Severity.FATAL: sgr.RED + sgr.BOLD,
}

TEMPLATE_FIELDS = (
    "unit_fmt",
    "assertion_fmt",
    "assertion_passed_str",
    "assertion_failed_str",
    "unit_error_fmt",
)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_flag(name: str, value: str) -> bool | None:
    key = value.strip().lower()
    if key in _TRUE:
        return True
    if key in _FALSE:
        return False
    logger.warning("Ignoring %s=%r: expected 0 or 1", name, value)
    return None


@dataclass
class LogSettings:
    """Where each severity is written and how its prefix looks.

    Attributes:
        color: Emit prefix escape sequences when writing to a terminal.
        force_color: Emit prefix escape sequences when writing to a
            non-terminal (a pipe or a file).
        stdout: Per-severity flag; ``True`` writes to stdout, ``False`` to stderr.
        prefixes: Per-severity prefix, usually one or more SGR sequences.
    """

    color: bool = True
    force_color: bool = False
    stdout: dict[Severity, bool] = field(default_factory=lambda: dict.fromkeys(Severity, False))
    prefixes: dict[Severity, str] = field(default_factory=lambda: dict(DEFAULT_PREFIXES))

    def set_color(self, enabled: bool) -> bool:
        self.color = enabled
        return enabled

    def set_force_color(self, enabled: bool) -> bool:
        self.force_color = enabled
        return enabled

    def set_stdout(self, severity: Severity, enabled: bool) -> bool:
        self.stdout[severity] = enabled
        return enabled

    def set_prefix(self, severity: Severity, prefix: str) -> str | None:
        """Replace the prefix for *severity*.

        Returns:
            The new prefix, or ``None`` if it is longer than
            ``MAX_PREFIX_STRLEN`` characters (the old prefix is kept).
        """
        if len(prefix) > MAX_PREFIX_STRLEN:
            logger.warning(
                "Rejected %s prefix of %d characters (limit %d)", severity.value, len(prefix), MAX_PREFIX_STRLEN
            )
            return None
        self.prefixes[severity] = prefix
        return prefix

    def stream_for(self, severity: Severity) -> TextIO:
        """The destination stream for *severity*, resolved at call time."""
        return sys.stdout if self.stdout[severity] else sys.stderr

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LogSettings:
        """Build settings from defaults plus environment overrides."""
        if environ is None:
            environ = os.environ
        settings = cls()

        if COLOR_ENV in environ:
            flag = _parse_flag(COLOR_ENV, environ[COLOR_ENV])
            if flag is not None:
                settings.set_color(flag)
        if FORCE_COLOR_ENV in environ:
            flag = _parse_flag(FORCE_COLOR_ENV, environ[FORCE_COLOR_ENV])
            if flag is not None:
                settings.set_force_color(flag)
        if environ.get(NO_COLOR_ENV):
            settings.set_color(False)
            settings.set_force_color(False)

        routed = environ.get(STDOUT_ENV, "").strip()
        if routed.lower() == "all":
            for severity in Severity:
                settings.set_stdout(severity, True)
        elif routed:
            for name in routed.split(","):
                if not name.strip():
                    continue
                try:
                    settings.set_stdout(Severity.parse(name), True)
                except ValueError:
                    logger.warning("Ignoring unknown severity %r in %s", name, STDOUT_ENV)
        return settings


@dataclass
class HarnessSettings:
    """Pool size and message templates for the unit harness.

    Templates are printf-style.  ``unit_fmt`` receives the unit label,
    ``assertion_fmt`` receives the pass/fail glyph and the assertion message,
    and ``unit_error_fmt`` receives the label and the exception.
    """

    worker_slots: int = 0
    unit_fmt: str = "---\tStart testing: %s\n"
    assertion_fmt: str = "[%s]\t%s\n"
    assertion_passed_str: str = "✔"
    assertion_failed_str: str = "✘"
    unit_error_fmt: str = "Unit crashed: %s (%r)\n"

    def set_worker_slots(self, worker_slots: int) -> int | None:
        """Set the pool size; ``None`` unless an ``int`` in ``0..MAX_THREAD_NUM``."""
        valid = isinstance(worker_slots, int) and not isinstance(worker_slots, bool)
        if not valid or not 0 <= worker_slots <= MAX_THREAD_NUM:
            logger.warning("Rejected worker slot count %r (allowed 0..%d)", worker_slots, MAX_THREAD_NUM)
            return None
        self.worker_slots = worker_slots
        return worker_slots

    def set_template(self, name: str, value: str) -> str | None:
        """Replace one of the ``TEMPLATE_FIELDS``.

        Returns:
            The new template, or ``None`` if *name* is not a template field or
            *value* is longer than ``MAX_LOGFMT_STRLEN`` characters.
        """
        if name not in TEMPLATE_FIELDS:
            logger.warning("Rejected unknown template field %r", name)
            return None
        if len(value) > MAX_LOGFMT_STRLEN:
            logger.warning("Rejected %s of %d characters (limit %d)", name, len(value), MAX_LOGFMT_STRLEN)
            return None
        setattr(self, name, value)
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HarnessSettings:
        if environ is None:
            environ = os.environ
        settings = cls()
        raw = environ.get(WORKERS_ENV, "").strip()
        if raw:
            try:
                workers = int(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: not an integer", WORKERS_ENV, raw)
            else:
                settings.set_worker_slots(workers)
        return settings
