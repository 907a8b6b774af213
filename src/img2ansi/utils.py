"""
.. Utilities
"""

from __future__ import annotations

import os
from shutil import get_terminal_size as _get_terminal_size
from typing import Any


def arg_value_error_range(arg: str, value: Any, got_extra: str = "") -> ValueError:
    return ValueError(
        f"{arg!r} is out of range (got: {value!r}; {got_extra})"
        if got_extra
        else f"{arg!r} is out of range (got: {value!r})"
    )


def get_terminal_size() -> os.terminal_size:
    """Returns the current size of the terminal attached to standard output.

    Returns:
        The terminal size in columns and lines.

    Falls back to the controlling terminal when output is redirected and finally to
    the ``COLUMNS``/``LINES`` environment variables or ``80x24``.
    """
    size = None
    for fd in (1, 2, 0):
        try:
            size = os.get_terminal_size(fd)
        except (OSError, ValueError):
            continue
        else:
            break

    return size or _get_terminal_size()
