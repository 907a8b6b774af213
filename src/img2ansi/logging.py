"""Event logging"""

from __future__ import annotations

import logging
import sys
import warnings
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from threading import Thread
from typing import Optional, Set

from . import notify


def init_log(
    logfile: Optional[str],
    level: int,
    debug: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Initialize application event logging

    Events are logged to *logfile* if given, otherwise to STDERR. Since STDOUT
    carries the rendered images, nothing is ever logged there.
    """
    global DEBUG, QUIET, VERBOSE

    if logfile:
        handler = RotatingFileHandler(
            logfile,
            maxBytes=2**20,  # 1 MiB
            backupCount=1,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(filter_)

    QUIET, VERBOSE = quiet, verbose or debug
    DEBUG = debug = debug or level == logging.DEBUG
    if debug:
        level = logging.DEBUG
    elif VERBOSE:
        level = logging.INFO

    notify.QUIET, notify.VERBOSE = QUIET, VERBOSE

    FORMAT = (
        "({process}) ({asctime}) "
        + "{threadName}: " * debug
        + "[{levelname}] {name}: "
        + "{funcName}: " * debug
        + "{message}"
    )
    logging.basicConfig(
        handlers=(handler,),
        format=FORMAT,
        datefmt="%d-%m-%Y %H:%M:%S",
        style="{",
        level=level,
        force=True,
    )

    _logger.info("Starting a new session")
    _logger.info(f"Logging level set to {logging.getLevelName(level)}")


def log(
    msg: str,
    logger: logging.Logger,
    level: int = logging.INFO,
    *,
    direct: bool = True,
    file: bool = True,
    verbose: bool = False,
) -> None:
    """Report events to various destinations

    Args:
        direct: If ``True``, the message is also displayed to the user.
        file: If ``True``, the message is logged.
        verbose: If ``True``, the message is displayed only in verbose mode.
    """
    if file:
        logger.log(level, msg, stacklevel=2)
    if direct and not _logs_to_stderr():
        notify.notify(
            msg, verbose=verbose, level=getattr(notify, logging.getLevelName(level))
        )


def log_exception(
    msg: str, logger: logging.Logger, *, direct: bool = False, fatal: bool = False
) -> None:
    """Report an error with the exception responsible

    NOTE: Should be called from within an exception handler
    i.e from (also possibly in a nested context) within an except or finally clause.
    """
    if DEBUG:
        logger.exception(f"{msg} due to:", stacklevel=3)
    elif VERBOSE:
        exc_type, exc, _ = sys.exc_info()
        logger.error(
            f"{msg} due to: ({exc_type.__module__}.{exc_type.__qualname__}) {exc}",
            stacklevel=2,
        )
    else:
        logger.error(msg, stacklevel=2)

    if direct and not _logs_to_stderr():
        notify.notify(msg, level=notify.CRITICAL if fatal else notify.ERROR)


def _logs_to_stderr() -> bool:
    """Checks if log records already end up on STDERR."""
    return any(
        type(handler) is logging.StreamHandler and handler.stream is sys.stderr
        for handler in logging.getLogger().handlers
    )


def _log_warning(msg, catg, fname, lineno, f=None, line=None):
    """Redirects warnings to the logging system.

    Intended to replace `warnings.showwarning()`.
    """
    _logger.warning(warnings.formatwarning(msg, catg, fname, lineno, line))


# See "Filters" section in `logging` standard library documentation.
@dataclass
class Filter:
    disallowed: Set[str]

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.partition(".")[0] not in self.disallowed


class Thread(Thread):
    """A thread with integration into the logging system

    Any exception raised by the target is logged and kept as :py:attr:`exception`
    for the thread joining this one to act upon.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.exception: Optional[BaseException] = None

    def run(self):
        _logger.debug("Starting")
        try:
            super().run()
        except BaseException as e:
            self.exception = e
            log_exception(f"{self.name} was aborted", _logger)
        else:
            _logger.debug("Exiting")


filter_ = Filter({"PIL", "urllib3"})

# Writing warnings to STDERR unformatted messes up rendered output
warnings.showwarning = _log_warning

# Can't use "img2ansi", since the logger's level may be changed.
# Otherwise, it would affect children of "img2ansi".
_logger = logging.getLogger("img2ansi-main")

# Set from within `init_log()`
DEBUG = False
QUIET = False
VERBOSE = None  #: Optional[bool]; `None` until logging is initialized
