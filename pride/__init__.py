"""
Pride: a minimal threaded unit-testing harness with colored log lines.

Harness (scheduler, assertions and log sink together)::

    from pride.harness import Harness

Scheduler only::

    from pride.scheduler import UnitScheduler

Log sink and SGR palette::

    from pride.log import Logger
    from pride import sgr
"""

__version__ = "0.1.0"
