"""img2ansi's Configuration"""

from __future__ import annotations

import json
import logging as _logging
import os
from dataclasses import dataclass, field
from os import path
from typing import Any, Callable, Optional

from . import logging, notify
from .color import PaletteKind, palette_names
from .geometry import DEFAULT_FONT_ASPECT


class ConfigOptions(dict):
    """Config options store

    * Subscription with an option name returns the corresponding :py:class:`Option`
      instance.
    * Attribute reference with a variable name ('s/ /_/g') returns the option's current
      value.
    * Attribute reference with a "private" name ('s/ /_/g' and preceded by '_') returns
      the option's default value.
    """

    def _attr_to_option(self, attr: str):
        default = attr.startswith("_")
        name = attr.replace("_", " ")
        if default:
            name = name[1:]
        try:
            return self[name], "default" if default else "value"
        except KeyError:
            raise AttributeError(f"Ain't no such config option as {name!r}") from None

    def __getattr__(self, attr: str):
        return getattr(*self._attr_to_option(attr))

    def __setattr__(self, attr: str, value: Any):
        setattr(*self._attr_to_option(attr), value)

    def reset(self) -> None:
        """Sets every option back to its default value."""
        for option in self.values():
            option.value = option.default


@dataclass
class Option:
    """A config option."""

    value: Any = field(init=False)
    default: Any
    is_valid: Callable[[Any], bool]
    error_msg: str

    def __post_init__(self):
        self.value = self.default


@dataclass(frozen=True)
class Options:
    """Render options, fixed for the whole session.

    Constructed once (by the CLI or a library user) and passed on to every
    component that needs it.
    """

    #: Maximum width, in columns; non-positive means unconstrained
    width: int = 0
    #: Maximum height, in lines; non-positive means unconstrained
    height: int = 0
    #: If ``True``, the terminal size overrides *width* and *height*
    fit_terminal: bool = False
    palette: PaletteKind = PaletteKind.CUBE256
    #: Width of a terminal cell divided by its height
    font_aspect: float = DEFAULT_FONT_ASPECT
    #: Alpha values below this are rendered transparent (0 to 255)
    alpha_threshold: int = 255
    #: If ``True``, frames are drawn over one another at the proper cadence
    animate: bool = False
    #: Extra passes over the frames; negative means indefinitely and ``None`` means
    #: as specified by the source (when animating) or none
    repeat: Optional[int] = None
    #: Forced per-frame delay, in seconds; overrides the frames' own delays
    delay: Optional[float] = None
    #: Written at the start and end of every line
    pad: str = " "
    #: If ``True``, image data is read from STDIN
    stdin: bool = False
    user_agent: Optional[str] = None
    #: Timeout for HTTP(S) requests, in seconds
    http_timeout: float = 30.0


def get_log_function(level: str) -> Callable[[str], None]:
    def log(msg: str) -> None:
        if logging.VERBOSE is None:  # logging not yet initialized
            notify.notify(msg, verbose=verbose, level=notify_level)
        else:
            logging.log(msg, _logger, log_level, verbose=verbose)

    notify_level = getattr(notify, level)
    log_level = getattr(_logging, level)
    verbose = level == "INFO"

    return log


def init_config() -> None:
    """Initializes user configuration."""
    if path.isfile(user_config_file):
        load_config(user_config_file)


def load_config(config_file: str) -> None:
    """Loads a user config file."""
    try:
        with open(config_file) as f:
            config = json.load(f)
    except Exception as e:
        error(f"Failed to load {config_file!r} ({type(e).__name__}: {e}).")
        return

    if not isinstance(config, dict):
        error(f"Invalid config file {config_file!r}; must contain a JSON object.")
        return

    for name, value in config.items():
        try:
            option = config_options[name]
        except KeyError:
            warn(f"Unknown option {name!r} (in {config_file!r}).")
        else:
            if option.is_valid(value):
                option.value = value
            else:
                value_repr = "null" if value is None else repr(value)
                value_type_name = "null" if value is None else type(value).__name__
                error(
                    f"Invalid type/value for {name!r}; {option.error_msg} "
                    f"(got: {value_repr} of type {value_type_name!r})."
                )
                option_repr = "null" if option.value is None else repr(option.value)
                info(f"Using former value: {option_repr}.")


def _is_palette_name(x: Any) -> bool:
    return isinstance(x, str) and x.lower() in palette_names()


user_config_file = path.join(
    os.environ.get("XDG_CONFIG_HOME", path.join(path.expanduser("~"), ".config")),
    "img2ansi",
    "config.json",
)

config_options = {
    "alpha min": Option(
        1.0,
        lambda x: isinstance(x, float) and 0.0 <= x <= 1.0,
        "must be a float between 0.0 and 1.0 (both inclusive)",
    ),
    "color": Option(
        PaletteKind.CUBE256.value,
        _is_palette_name,
        "must be one of " + ", ".join(map(repr, palette_names())),
    ),
    "font aspect": Option(
        DEFAULT_FONT_ASPECT,
        lambda x: isinstance(x, float) and x > 0.0,
        "must be a float greater than zero",
    ),
    "http timeout": Option(
        30.0,
        lambda x: isinstance(x, float) and x > 0.0,
        "must be a float greater than zero",
    ),
    "log file": Option(
        None,
        lambda x: x is None or isinstance(x, str) and bool(x),
        "must be `null` or a non-empty string",
    ),
    "pad": Option(
        " ",
        lambda x: isinstance(x, str) and x.isprintable(),
        "must be a string of printable characters",
    ),
    "user agent": Option(
        None,
        lambda x: x is None or isinstance(x, str) and bool(x),
        "must be `null` or a non-empty string",
    ),
}
config_options = ConfigOptions(config_options)

error = get_log_function("ERROR")
info = get_log_function("INFO")
warn = get_log_function("WARNING")

_logger = _logging.getLogger(__name__)

__all__ = ("Option", "Options", "config_options", "init_config", "load_config")
