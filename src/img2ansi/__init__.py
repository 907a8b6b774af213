"""
img2ansi

Render images and GIF animations in the terminal using ANSI color codes
"""

from __future__ import annotations

__all__ = (
    "DEFAULT_FONT_ASPECT",
    "Img2AnsiError",
    "get_quantizer",
    "render",
)
__author__ = "img2ansi contributors"

from .color import get_quantizer
from .exceptions import Img2AnsiError
from .geometry import DEFAULT_FONT_ASPECT
from .pipeline import render

version_info = (0, 3, 0)

# Follows https://semver.org/spec/v2.0.0.html
__version__ = ".".join(map(str, version_info[:3]))
if version_info[3:]:
    __version__ += "-" + ".".join(map(str, version_info[3:]))
