"""Issuing user notifications on STDERR"""

from __future__ import annotations

import sys

from .ctlseqs import SGR_FG_RED, SGR_FG_YELLOW, SGR_NORMAL

DEBUG = INFO = 0
WARNING = 1
ERROR = 2
CRITICAL = 3


def notify(msg: str, *, verbose: bool = False, level: int = INFO) -> None:
    """Displays a message on STDERR.

    Warnings are displayed in yellow, errors in red, but only if STDERR is a
    terminal. Nothing is displayed if quiet mode is enabled, unless the message is
    critical.
    """
    if verbose and not VERBOSE or QUIET and level < CRITICAL:
        return

    stream = sys.stderr
    if level >= WARNING and stream.isatty():
        msg = (SGR_FG_YELLOW if level == WARNING else SGR_FG_RED) + msg + SGR_NORMAL
    print(msg, file=stream, flush=True)


# Set from within `.logging.init_log()`
QUIET = False
VERBOSE = False
