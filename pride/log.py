"""Severity-prefixed, optionally colorized log lines.

Every line is built from the template ``prefix + format + RESET`` and then
formatted printf-style with the caller's arguments.  Only the prefix is
subject to color handling: when color is off for the destination, escape
sequences are stripped from the prefix, while the message body is written
as-is and the trailing reset is always appended.

Example::

    log = Logger()
    log.info("%d units passed\\n", 3)            # to the INFO stream
    log.error_to(sys.stdout, "failed: %s\\n", e)  # to an explicit stream

A failing write never raises: the emit calls return ``-1`` instead.
"""

from __future__ import annotations

import logging
from functools import partialmethod
from typing import Any, TextIO

from pride import sgr
from pride.common import Severity
from pride.settings import LogSettings

logger = logging.getLogger(__name__)


def render(prefix: str, fmt: str, args: tuple[Any, ...] = (), color: bool = True) -> str:
    """Render one prefixed message to a string.

    Raises:
        TypeError: if *args* do not match the conversions in the template
    """
    if not color:
        prefix = sgr.strip_sgr(prefix)
    return (prefix + fmt + sgr.RESET) % args


def is_terminal(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        # closed or detached stream
        return False


def use_color(stream: Any, settings: LogSettings) -> bool:
    """Whether prefixes written to *stream* keep their escape sequences."""
    if is_terminal(stream):
        return settings.color
    return settings.force_color


def write_prefixed(stream: TextIO, prefix: str, fmt: str, args: tuple[Any, ...], settings: LogSettings) -> int:
    """Render a prefixed message and write it to *stream* in a single write.

    Returns:
        The count reported by ``stream.write`` (the rendered length if the
        stream reports nothing), or ``-1`` if the write failed.
    """
    text = render(prefix, fmt, args, use_color(stream, settings))
    try:
        written = stream.write(text)
    except (OSError, ValueError) as e:
        logger.debug("Dropped log line, write to %r failed: %s", stream, e)
        return -1
    return len(text) if written is None else written


class Logger:
    """Log sink that picks a stream per severity and writes prefixed lines.

    Every severity has two calls: ``info(fmt, *args)`` writes to the stream
    configured for INFO in the settings, ``info_to(stream, fmt, *args)``
    writes to *stream*.  The same pair exists for ``plain``, ``verbose``,
    ``debug``, ``warn``, ``error`` and ``fatal``.
    """

    def __init__(self, settings: LogSettings | None = None):
        self.settings = settings if settings is not None else LogSettings()

    def emit(self, severity: Severity, fmt: str, *args: Any) -> int:
        return self.emit_to(self.settings.stream_for(severity), severity, fmt, *args)

    def emit_to(self, stream: TextIO, severity: Severity, fmt: str, *args: Any) -> int:
        return write_prefixed(stream, self.settings.prefixes[severity], fmt, args, self.settings)

    def sprintf(self, severity: Severity, fmt: str, *args: Any) -> str:
        """Render a line without writing it; color follows the global flag only."""
        return render(self.settings.prefixes[severity], fmt, args, self.settings.color)

    def _emit_to(self, severity: Severity, stream: TextIO, fmt: str, *args: Any) -> int:
        return self.emit_to(stream, severity, fmt, *args)

    plain = partialmethod(emit, Severity.PLAIN)
    verbose = partialmethod(emit, Severity.VERBOSE)
    debug = partialmethod(emit, Severity.DEBUG)
    info = partialmethod(emit, Severity.INFO)
    warn = partialmethod(emit, Severity.WARN)
    error = partialmethod(emit, Severity.ERROR)
    fatal = partialmethod(emit, Severity.FATAL)

    plain_to = partialmethod(_emit_to, Severity.PLAIN)
    verbose_to = partialmethod(_emit_to, Severity.VERBOSE)
    debug_to = partialmethod(_emit_to, Severity.DEBUG)
    info_to = partialmethod(_emit_to, Severity.INFO)
    warn_to = partialmethod(_emit_to, Severity.WARN)
    error_to = partialmethod(_emit_to, Severity.ERROR)
    fatal_to = partialmethod(_emit_to, Severity.FATAL)
