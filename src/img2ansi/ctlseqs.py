"""
..
   Control Sequences

   See https://invisible-island.net/xterm/ctlseqs/ctlseqs.html
"""

from __future__ import annotations

__all__ = []  # Updated later on

# Parameters
Ps = "%d"

_START = None  # Marks the beginning control sequence definitions

# C0
ESC = "\x1b"

# C1
CSI = f"{ESC}["

# Cursor Movement
CURSOR_UP = f"{CSI}{Ps}A"

# Select Graphic Rendition
SGR_NORMAL = f"{CSI}0m"
SGR_BG_8 = f"{CSI}4{Ps}m"
SGR_BG_INDEXED = f"{CSI}48;5;{Ps}m"
SGR_FG_RED = f"{CSI}31m"
SGR_FG_YELLOW = f"{CSI}33m"

# DEC Modes
DECSET = f"{CSI}?{Ps}h"
DECRST = f"{CSI}?{Ps}l"

SHOW_CURSOR = DECSET % 25
HIDE_CURSOR = DECRST % 25


module_items = tuple(globals().items())
for name, value in module_items[module_items.index(("_START", None)) + 1 :]:
    globals()[f"{name}_b"] = value.encode()
    __all__.extend((name, f"{name}_b"))


del _START, module_items
