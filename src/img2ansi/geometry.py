"""
.. The Geometry API

Target pixel dimensions for a terminal rendering.

Terminal cells are taller than they are wide, so an image drawn with one cell per
pixel has to be stretched horizontally by the inverse of the font aspect ratio
(cell width / cell height) to keep its proportions. :py:func:`size_normal`
performs that correction; :py:func:`size_rect` then fits the corrected size into
an optional bounding box.
"""

from __future__ import annotations

__all__ = (
    "DEFAULT_FONT_ASPECT",
    "RawSize",
    "Size",
    "size_height",
    "size_normal",
    "size_rect",
    "size_width",
)

from math import floor
from typing import Tuple

from typing_extensions import NamedTuple, Self

from .utils import arg_value_error_range

#: Ratio of a character cell's width to its height
DEFAULT_FONT_ASPECT = 0.5


class RawSize(NamedTuple):
    """The dimensions of a rectangular region.

    Args:
        width: The horizontal dimension
        height: The vertical dimension

    NOTE:
        A dimension may be non-positive but the validity and meaning would be
        determined by the receiving interface.
    """

    width: int
    height: int

    @property
    def aspect(self) -> float:
        """Ratio of the width to the height"""
        return self.width / self.height

    @classmethod
    def _new(cls, width: int, height: int) -> Self:
        """Alternate constructor for internal use only."""
        return tuple.__new__(cls, (width, height))


RawSize.width.__doc__ = "The horizontal dimension"
RawSize.height.__doc__ = "The vertical dimension"


class Size(RawSize):
    """The dimensions of a rectangular region.

    Raises:
        ValueError: Either dimension is non-positive.

    Same as :py:class:`RawSize`, except that both dimensions must be **positive**.
    """

    __slots__ = ()

    def __new__(cls, width: int, height: int) -> Self:
        if width < 1:
            raise arg_value_error_range("width", width)
        if height < 1:
            raise arg_value_error_range("height", height)

        # Using `tuple` directly instead of `super()` for performance
        return tuple.__new__(cls, (width, height))


def round_half_up(x: float) -> int:
    """Rounds *x* to the nearest integer, biased toward positive infinity."""
    return int(floor(x + 0.5))


def size_normal(
    size: Tuple[int, int], font_aspect: float = DEFAULT_FONT_ASPECT
) -> Size:
    """Scales *size* according to the font aspect ratio.

    Args:
        size: Source dimensions, in pixels.
        font_aspect: Width of a terminal cell divided by its height.

    Returns:
        The size, in cells, at which the image keeps its proportions. The height is
        unchanged.
    """
    if font_aspect <= 0.0:
        raise arg_value_error_range("font_aspect", font_aspect)

    width, height = Size(*size)
    return Size._new(max(round_half_up(width / font_aspect), 1), height)


def size_width(size_norm: Tuple[int, int], width: int) -> Size:
    """Returns a size with the given *width* and the same aspect ratio as
    *size_norm*.
    """
    aspect = RawSize._new(*size_norm).aspect
    return Size._new(width, max(round_half_up(width / aspect), 1))


def size_height(size_norm: Tuple[int, int], height: int) -> Size:
    """Returns a size with the given *height* and the same aspect ratio as
    *size_norm*.
    """
    aspect = RawSize._new(*size_norm).aspect
    return Size._new(max(round_half_up(height * aspect), 1), height)


def size_rect(
    size: Tuple[int, int],
    width: int = 0,
    height: int = 0,
    font_aspect: float = DEFAULT_FONT_ASPECT,
) -> Size:
    """Computes the largest size fitting within *width* x *height* which preserves
    the normalized aspect ratio of *size*.

    Args:
        size: Source dimensions, in pixels.
        width: Maximum width, in columns. Non-positive means unconstrained.
        height: Maximum height, in lines. Non-positive means unconstrained.
        font_aspect: Width of a terminal cell divided by its height.

    Returns:
        The target size, in cells.

    With neither dimension constrained, this is exactly
    ``size_normal(size, font_aspect)``.
    """
    size = size_normal(size, font_aspect)
    if width <= 0 and height <= 0:
        return size
    if width <= 0:
        return size_height(size, height)
    if height <= 0:
        return size_width(size, width)

    if size.aspect > width / height:
        # The image is relatively wider than the box; it can't fill it vertically
        return size_width(size, width)
    return size_height(size, height)
