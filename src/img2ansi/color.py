"""
.. The Color API

Colors and the quantizers mapping them onto terminal palettes.

Every quantizer returns a background SGR sequence for a given color, or
:py:data:`~img2ansi.ctlseqs.SGR_NORMAL` (the *clear* marker) for a color whose
alpha channel is below the quantizer's threshold, so that the terminal's own
background shows through.

The reference tables are built once at import time and never mutated; quantizer
instances hold nothing but their alpha threshold. Hence, both can be shared
freely between threads.
"""

from __future__ import annotations

__all__ = (
    "CLEAR",
    "Color",
    "Color8Quantizer",
    "Cube256PreciseQuantizer",
    "Cube256Quantizer",
    "GrayQuantizer",
    "PaletteKind",
    "Quantizer",
    "alpha_threshold_from_ratio",
    "get_quantizer",
    "palette_names",
)

from abc import ABCMeta, abstractmethod
from enum import Enum
from typing import Dict, List, Tuple, Union

from typing_extensions import NamedTuple, Self

from .ctlseqs import SGR_BG_8, SGR_BG_INDEXED, SGR_NORMAL
from .exceptions import ConfigError
from .geometry import round_half_up
from .utils import arg_value_error_range

#: Returned for colors considered transparent
CLEAR = SGR_NORMAL


# To bypass `NamedTuple`'s `__new__()` override limitation
class _DummyColor(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


class Color(_DummyColor):
    """A color.

    Args:
        r: The red channel.
        g: The green channel.
        b: The blue channel.
        a: The alpha channel (opacity).

    Raises:
        ValueError: The value of a channel is not within the valid range.

    NOTE:
        The valid value range for all channels is 0 to 255, both inclusive.
    """

    __slots__ = ()

    def __new__(cls, r: int, g: int, b: int, a: int = 255) -> Self:
        # Any bit above the lowest 8 being set implies the value is out of range
        if (r | g | b | a) & ~255:
            for name, value in zip("rgba", (r, g, b, a)):
                if value & ~255:
                    raise arg_value_error_range(name, value)

        return tuple.__new__(cls, (r, g, b, a))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        """Extracts the R, G and B channels of the color."""
        return self[:3]


class Quantizer(metaclass=ABCMeta):
    """Base of all palette quantizers.

    Args:
        alpha_threshold: Alpha values **below** this are taken as transparent.
          Must be within the range [0, 255]. The default requires full opacity.

    Raises:
        ValueError: *alpha_threshold* is out of range.
    """

    __slots__ = ("_alpha_threshold",)

    #: The palette this quantizer maps colors onto
    kind: PaletteKind

    def __init__(self, alpha_threshold: int = 255) -> None:
        if not 0 <= alpha_threshold <= 255:
            raise arg_value_error_range("alpha_threshold", alpha_threshold)
        self._alpha_threshold = alpha_threshold

    def __repr__(self) -> str:
        return f"{type(self).__name__}(alpha_threshold={self._alpha_threshold})"

    alpha_threshold = property(
        lambda self: self._alpha_threshold,
        doc="Alpha values below this are taken as transparent",
    )

    def quantize(self, color: Tuple[int, ...]) -> str:
        """Maps a color onto the palette.

        Args:
            color: An ``(r, g, b)`` or ``(r, g, b, a)`` tuple of 8-bit channel
              values. An absent alpha channel implies full opacity.

        Returns:
            The background SGR sequence selecting the nearest palette entry, or
            :py:data:`CLEAR` if the color is transparent.
        """
        if len(color) > 3 and color[3] < self._alpha_threshold:
            return CLEAR
        return self._quantize(*color[:3])

    @abstractmethod
    def _quantize(self, r: int, g: int, b: int) -> str:
        raise NotImplementedError


class GrayQuantizer(Quantizer):
    """Maps colors onto the 24-step grayscale ramp (indices 232 to 255)."""

    __slots__ = ()

    BEGIN = 232
    _RATIO = 23 / 255

    def _quantize(self, r: int, g: int, b: int) -> str:
        # ITU-R 601-2 luma, with the same fixed-point weights as most decoders
        y = (19595 * r + 38470 * g + 7471 * b + (1 << 15)) >> 16
        return SGR_BG_INDEXED % (self.BEGIN + round_half_up(self._RATIO * y))


class Color8Quantizer(Quantizer):
    """Maps colors onto the 8 basic terminal colors by minimizing the euclidean RGB
    distance.
    """

    __slots__ = ()

    # In SGR order i.e the index is the color number
    PALETTE: Tuple[Color, ...] = (
        Color(0, 0, 0),  # black
        Color(191, 25, 25),  # red
        Color(25, 184, 25),  # green
        Color(188, 110, 25),  # orange/brown/yellow
        Color(25, 25, 184),  # blue
        Color(186, 25, 186),  # magenta
        Color(25, 187, 187),  # cyan
        Color(178, 178, 178),  # gray
    )

    @classmethod
    def index(cls, r: int, g: int, b: int) -> int:
        """Returns the index of the nearest palette entry.

        Ties are resolved in favour of the entry appearing first.
        """
        best = best_distance = None
        for i, (pr, pg, pb, _) in enumerate(cls.PALETTE):
            distance = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
            if best_distance is None or distance < best_distance:
                best, best_distance = i, distance
        return best

    def _quantize(self, r: int, g: int, b: int) -> str:
        return SGR_BG_8 % self.index(r, g, b)


class Cube256Quantizer(Quantizer):
    """Maps colors onto the 6x6x6 color cube of the 256-color palette, scaling each
    channel linearly.
    """

    __slots__ = ()

    BEGIN = 16
    _RATIO = 5 / 255

    def _quantize(self, r: int, g: int, b: int) -> str:
        ratio = self._RATIO
        return SGR_BG_INDEXED % (
            round_half_up(ratio * r) * 36
            + round_half_up(ratio * g) * 6
            + round_half_up(ratio * b)
            + self.BEGIN
        )


class Cube256PreciseQuantizer(Quantizer):
    """Maps colors onto the 256-color palette the way terminal multiplexers do.

    Each channel is binned onto the non-uniform steps of the color cube. Unless the
    binned color reproduces the original exactly, it competes with the nearest step
    of the grayscale ramp and the closer of both wins, the cube winning ties.
    """

    __slots__ = ()

    CUBE_STEPS = (0x00, 0x5F, 0x87, 0xAF, 0xD7, 0xFF)

    @staticmethod
    def _cube_step(v: int) -> int:
        if v < 48:
            return 0
        if v < 115:
            return 1
        return (v - 35) // 40

    @classmethod
    def index(cls, r: int, g: int, b: int) -> int:
        """Returns the 256-color palette index of the given RGB color."""
        steps = cls.CUBE_STEPS
        cube_step = cls._cube_step

        ir, ig, ib = cube_step(r), cube_step(g), cube_step(b)
        cube_index = 16 + 36 * ir + 6 * ig + ib
        cr, cg, cb = steps[ir], steps[ig], steps[ib]
        if (cr, cg, cb) == (r, g, b):
            return cube_index

        grey_avg = (r + g + b) // 3
        grey_index = 23 if grey_avg > 238 else max(grey_avg - 3, 0) // 10
        grey = 8 + 10 * grey_index

        cube_distance = (cr - r) ** 2 + (cg - g) ** 2 + (cb - b) ** 2
        grey_distance = (grey - r) ** 2 + (grey - g) ** 2 + (grey - b) ** 2
        if grey_distance < cube_distance:
            return 232 + grey_index
        return cube_index

    def _quantize(self, r: int, g: int, b: int) -> str:
        return SGR_BG_INDEXED % self.index(r, g, b)


class PaletteKind(Enum):
    """Terminal color palettes."""

    #: The 8 basic colors
    COLOR8 = "8-color"

    #: The 256-color palette, with the cube steps taken as evenly spaced
    CUBE256_FAST = "256-fast"

    #: The 256-color palette, grayscale ramp included
    CUBE256 = "256-color"

    #: The 24-step grayscale ramp
    GRAY = "grayscale"

    @property
    def quantizer_class(self) -> type:
        """The :py:class:`Quantizer` subclass for this palette"""
        return _QUANTIZERS[self]

    @classmethod
    def from_name(cls, name: str) -> PaletteKind:
        """Looks up a palette by any of its names.

        Raises:
            img2ansi.exceptions.ConfigError: Unknown palette name.
        """
        try:
            return _PALETTE_NAMES[name.lower()]
        except KeyError:
            raise ConfigError(
                f"Unknown color palette {name!r}; must be one of "
                + ", ".join(map(repr, palette_names()))
            ) from None


_QUANTIZERS: Dict[PaletteKind, type] = {
    PaletteKind.COLOR8: Color8Quantizer,
    PaletteKind.CUBE256_FAST: Cube256Quantizer,
    PaletteKind.CUBE256: Cube256PreciseQuantizer,
    PaletteKind.GRAY: GrayQuantizer,
}
for _kind, _cls in _QUANTIZERS.items():
    _cls.kind = _kind
del _kind, _cls

_PALETTE_NAMES: Dict[str, PaletteKind] = {
    "8": PaletteKind.COLOR8,
    "8-color": PaletteKind.COLOR8,
    "256": PaletteKind.CUBE256,
    "256-color": PaletteKind.CUBE256,
    "256-fast": PaletteKind.CUBE256_FAST,
    "gray": PaletteKind.GRAY,
    "grayscale": PaletteKind.GRAY,
    "grey": PaletteKind.GRAY,
    "greyscale": PaletteKind.GRAY,
}


def palette_names() -> List[str]:
    """Returns all recognized palette names, sorted."""
    return sorted(_PALETTE_NAMES)


def alpha_threshold_from_ratio(ratio: float) -> int:
    """Converts an opacity ratio within [0.0, 1.0] into an 8-bit alpha threshold.

    Raises:
        ValueError: *ratio* is out of range.
    """
    if not 0.0 <= ratio <= 1.0:
        raise arg_value_error_range("ratio", ratio)
    return round_half_up(ratio * 255)


def get_quantizer(
    palette: Union[str, PaletteKind] = PaletteKind.CUBE256, alpha_threshold: int = 255
) -> Quantizer:
    """Creates a quantizer for a palette.

    Args:
        palette: A palette or any of its names (see :py:func:`palette_names`).
        alpha_threshold: See :py:class:`Quantizer`.

    Raises:
        img2ansi.exceptions.ConfigError: Unknown palette name.
    """
    if not isinstance(palette, PaletteKind):
        palette = PaletteKind.from_name(palette)
    return palette.quantizer_class(alpha_threshold)
