"""CLI argument parser"""

import argparse

from . import __version__
from .config import config_options

parser = argparse.ArgumentParser(
    prog="img2ansi",
    formatter_class=argparse.RawDescriptionHelpFormatter,
    description="Render images and GIF animations in a terminal using ANSI colors",
    epilog=""" \

'--' should be used to separate positional arguments that begin with an '-' \
from options/flags, to avoid ambiguity.
For example, `$ img2ansi [options] -- -image.png`

Examples:
  img2ansi -w 78 image.png
  img2ansi -a -r 100 -w 78 https://example.com/animation.gif
  curl -s https://example.com/image.jpg | img2ansi -c grayscale

Color Palettes:
  8-color (8): The 8 basic colors.
  256-color (256): The 256-color palette i.e the 6x6x6 color cube and the
      24-step grayscale ramp, matched the way terminal emulators do.
  256-fast: The 6x6x6 color cube only, with evenly spaced steps.
  grayscale (gray, grey, greyscale): The 24-step grayscale ramp.

FOOTNOTES:
  1. Width and height are in units of columns and lines respectively.
     If both are given, the image is scaled to fit within both while preserving
     its aspect ratio.
  2. The width-to-height ratio of a character cell in the terminal.
  3. 0 -> one pass only, N -> N extra passes, negative -> indefinitely.
     By default, animations loop as specified by the image itself and still
     renders are done once.
  4. Any event with a level lower than the specified one is not reported.
  5. Supports GIF and all image formats supported by `PIL.Image.open()`.
     See https://pillow.readthedocs.io/en/latest/handbook/image-file-formats.html for
     details.
""",
    add_help=False,  # '-h' is used for HEIGHT
)

# General
general = parser.add_argument_group("General Options")
general.add_argument(
    "--help",
    action="help",
    help="Show this help message and exit",
)
general.add_argument(
    "--version",
    action="version",
    version=__version__,
    help="Show the program version and exit",
)
general.add_argument(
    "-c",
    "--color",
    metavar="PALETTE",
    help=(
        f"The color palette to render with (default: {config_options.color}). "
        'See "Color Palettes" below'
    ),
)
general.add_argument(
    "--alpha-min",
    type=float,
    metavar="N",
    help=(
        "Pixels with an opacity below this ratio are rendered transparent; "
        f"0.0 <= N <= 1.0 (default: {config_options.alpha_min})"
    ),
)
general.add_argument(
    "--pad",
    help=(
        "String written at the start and the end of every line "
        f"(default: {config_options.pad!r})"
    ),
)
general.add_argument(
    "--stdin",
    action="store_true",
    help="Read image data from STDIN; no source may be given",
)

# Sizing
size_options = parser.add_argument_group("Sizing Options [1]")
size_options.add_argument(
    "-w",
    "--width",
    type=int,
    default=0,
    metavar="N",
    help="Maximum width of the output (default: unconstrained)",
)
size_options.add_argument(
    "-h",
    "--height",
    type=int,
    default=0,
    metavar="N",
    help="Maximum height of the output (default: unconstrained)",
)
size_options.add_argument(
    "-s",
    "--scale-terminal",
    action="store_true",
    help="Fit the output within the terminal; overrides '-w' and '-h'",
)
size_options.add_argument(
    "--font-aspect",
    type=float,
    metavar="N",
    help=(
        "Width-to-height ratio of a character cell "
        f"(default: {config_options.font_aspect}) [2]"
    ),
)

# Animation
anim_options = parser.add_argument_group("Animation Options")
anim_options.add_argument(
    "-a",
    "--animate",
    action="store_true",
    help=(
        "Draw the frames of an animated image over one another, at the proper "
        "cadence. Otherwise, all frames are written one after the other"
    ),
)
anim_options.add_argument(
    "-r",
    "--repeat",
    type=int,
    metavar="N",
    help="Number of extra passes over the frames of an image [3]",
)
anim_options.add_argument(
    "-d",
    "--delay",
    type=float,
    metavar="N",
    help=(
        "The time (in seconds) for which every frame is displayed "
        "(default: determined per frame from the image OR 0.1)"
    ),
)

# Network
net_options = parser.add_argument_group("Network Options")
net_options.add_argument(
    "--user-agent",
    metavar="STRING",
    help="User-Agent header for HTTP(S) requests (default: that of `requests`)",
)
net_options.add_argument(
    "--http-timeout",
    type=float,
    metavar="N",
    help=(
        "Timeout (in seconds) for HTTP(S) requests "
        f"(default: {config_options.http_timeout})"
    ),
)

# Performance
perf_options = parser.add_argument_group("Performance Options")
perf_options.add_argument(
    "--cpuprofile",
    metavar="FILE",
    help="Write a CPU profile of the session to a file, readable with `pstats`",
)

# Config
config_options__ = parser.add_argument_group(
    "Config Options",
    "NOTE: These are mutually exclusive",
)
config_options_ = config_options__.add_mutually_exclusive_group()

config_options_.add_argument(
    "--config",
    metavar="FILE",
    help="The config file to use for this session (default: Searches XDG Base Dirs)",
)
config_options_.add_argument(
    "--no-config",
    action="store_true",
    help="Use the default configuration",
)

# Logging
log_options_ = parser.add_argument_group(
    "Logging Options",
    "NOTE: All these, except '-l/--log-file', are mutually exclusive",
)
log_options = log_options_.add_mutually_exclusive_group()

log_options_.add_argument(
    "-l",
    "--log-file",
    metavar="FILE",
    help="The file to write logs to (default: STDERR)",
)
log_options.add_argument(
    "--log-level",
    choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    default="WARNING",
    help="Logging level for the session (default: WARNING) [4]",
)
log_options.add_argument(
    "-q",
    "--quiet",
    action="store_true",
    help="No notifications, except fatal errors",
)
log_options.add_argument(
    "-v",
    "--verbose",
    action="store_true",
    help="More detailed event reporting. Also sets logging level to INFO",
)
log_options.add_argument(
    "--debug",
    action="store_true",
    help="Implies --log-level=DEBUG with verbosity",
)

# Positional
parser.add_argument(
    "sources",
    nargs="*",
    metavar="source",
    help=(
        "Path(s) to local image(s), file:// URL(s), HTTP(S) URL(s) or '-' for "
        "STDIN [5]. If no source is given, image data is read from STDIN."
    ),
)
