"""img2ansi's CLI implementation"""

from __future__ import annotations

import cProfile
import logging as _logging
import sys
from typing import Any, Callable, List, Optional

from . import logging, notify
from .color import PaletteKind, alpha_threshold_from_ratio, get_quantizer
from .config import Options, config_options, init_config, load_config
from .exceptions import ConfigError, InputError, NetworkError, WriteError
from .exit_codes import INPUT_ERROR, INVALID_ARG, NETWORK_ERROR, SUCCESS, WRITE_ERROR
from .logging import init_log, log
from .pipeline import render
from .source import STDIN, load_frames


def check_arg(name: str, check: Callable[[Any], Any], msg: str) -> bool:
    """Performs generic argument value checks and outputs the given message if the
    argument value is invalid.

    Returns:
        ``True`` if valid, otherwise ``False``.
    """
    value = getattr(args, name)
    valid = check(value)
    if not valid:
        notify.notify(
            f"--{name.replace('_', '-')}: {msg} (got: {value!r})",
            level=notify.CRITICAL,
        )

    return bool(valid)


def main() -> int:
    """CLI execution sub-entry-point"""
    from .parsers import parser

    global args

    args = parser.parse_args()

    if args.config:
        load_config(args.config)
    elif not args.no_config:
        init_config()

    init_log(
        args.log_file or config_options.log_file,
        getattr(_logging, args.log_level),
        args.debug,
        args.quiet,
        args.verbose,
    )

    for details in (
        ("width", lambda x: x >= 0, "must not be negative"),
        ("height", lambda x: x >= 0, "must not be negative"),
        ("font_aspect", lambda x: x is None or x > 0.0, "must be greater than zero"),
        (
            "alpha_min",
            lambda x: x is None or 0.0 <= x <= 1.0,
            "must be between 0.0 and 1.0 (both inclusive)",
        ),
        ("delay", lambda x: x is None or x > 0.0, "must be greater than zero"),
        ("http_timeout", lambda x: x is None or x > 0.0, "must be greater than zero"),
        (
            "pad",
            lambda x: x is None or x.isprintable(),
            "must contain only printable characters",
        ),
    ):
        if not check_arg(*details):
            return INVALID_ARG

    if args.stdin and args.sources:
        notify.notify(
            "--stdin: No source may be given along with this flag",
            level=notify.CRITICAL,
        )
        return INVALID_ARG

    sources = args.sources or [STDIN]
    if STDIN in sources and sys.stdin.isatty():
        parser.print_usage(sys.stderr)
        notify.notify(
            "No source given and STDIN is a terminal", level=notify.CRITICAL
        )
        return INVALID_ARG

    # Validated before any input is read
    try:
        palette = PaletteKind.from_name(args.color or config_options.color)
    except ConfigError as e:
        notify.notify(f"--color: {e}", level=notify.CRITICAL)
        return INVALID_ARG

    alpha_min = config_options.alpha_min if args.alpha_min is None else args.alpha_min
    options = Options(
        width=args.width,
        height=args.height,
        fit_terminal=args.scale_terminal,
        palette=palette,
        font_aspect=args.font_aspect or config_options.font_aspect,
        alpha_threshold=alpha_threshold_from_ratio(alpha_min),
        animate=args.animate,
        repeat=args.repeat,
        delay=args.delay,
        pad=config_options.pad if args.pad is None else args.pad,
        stdin=args.stdin,
        user_agent=args.user_agent or config_options.user_agent,
        http_timeout=args.http_timeout or config_options.http_timeout,
    )
    _logger.debug(f"Session options: {options}")

    profiler: Optional[cProfile.Profile] = None
    if args.cpuprofile:
        profiler = cProfile.Profile()
        profiler.enable()
    try:
        return render_sources(sources, options)
    finally:
        if profiler:
            profiler.disable()
            profiler.dump_stats(args.cpuprofile)
            _logger.info(f"CPU profile written to {args.cpuprofile!r}")


def render_sources(sources: List[str], options: Options) -> int:
    """Renders image sources one after the other, stopping at the first failure.

    Returns:
        An exit code.
    """
    quantizer = get_quantizer(options.palette, options.alpha_threshold)

    for source in sources:
        try:
            frames = load_frames(source, options)
        except InputError as e:
            return _fail(e, INPUT_ERROR)
        except NetworkError as e:
            return _fail(e, NETWORK_ERROR)

        _logger.info(f"Rendering {source!r} ({len(frames)} frame(s))")
        try:
            render(frames, options, quantizer, sys.stdout.buffer)
        except WriteError as e:
            return _fail(e, WRITE_ERROR)

    return SUCCESS


def _fail(error: Exception, exit_code: int) -> int:
    if logging.DEBUG:
        _logger.debug("Failure details:", exc_info=error)
    log(str(error), _logger, _logging.CRITICAL)

    return exit_code


_logger = _logging.getLogger(__name__)

# Set from within `main()`
args = None  #: Optional[argparse.Namespace]
