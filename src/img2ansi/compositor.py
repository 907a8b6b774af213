"""
.. GIF Compositing

Reconstructs full-canvas bitmaps from the layers of a decoded GIF.
"""

from __future__ import annotations

__all__ = ("GIFCompositor", "composite")

import logging as _logging
from typing import Iterator, List, Optional, Tuple

from PIL import Image

from .gif import DecodedGIF, Disposal, Layer

TRANSPARENT = (0, 0, 0, 0)


class GIFCompositor:
    """Composites the layers of a GIF onto a virtual canvas.

    Args:
        gif: A decoded GIF.

    The canvas spans the union of the logical screen and all layer rectangles. It's
    created when compositing the first layer and persists across all subsequent
    layers. A copy of it is saved just before drawing any layer whose disposal method
    is :py:attr:`~img2ansi.gif.Disposal.PREVIOUS`, to be restored before drawing the
    layer after.

    Transparency is binary: a pixel having the layer's transparent index leaves the
    canvas as-is, any other pixel overwrites it. Nothing is ever alpha-blended.

    Every frame yielded is a copy of the canvas, never a view of it.
    """

    def __init__(self, gif: DecodedGIF) -> None:
        self._gif = gif
        self._size = self._canvas_size(gif)
        background = gif.background
        self._background = TRANSPARENT if background is None else (*background, 255)
        self._canvas: Optional[Image.Image] = None
        self._saved: Optional[Image.Image] = None

    def __iter__(self) -> Iterator[Image.Image]:
        for i in range(len(self._gif.layers)):
            yield self.render(i)

    def __len__(self) -> int:
        return len(self._gif.layers)

    size = property(
        lambda self: self._size,
        doc="The canvas size, as a ``(width, height)`` tuple",
    )

    def composite(self) -> List[Image.Image]:
        """Composites all layers, in order.

        Returns:
            One RGBA bitmap per layer. Empty if the GIF has no layers.
        """
        frames = list(self)
        _logger.debug(f"Composited {len(frames)} frame(s) of size {self._size}")
        return frames

    def render(self, i: int) -> Image.Image:
        """Composites a single layer.

        Args:
            i: The layer index.

        Returns:
            A copy of the canvas after drawing the layer.

        Layers must be rendered in order, starting from ``0``, since each builds on
        the canvas state left by the previous one.
        """
        layers = self._gif.layers
        layer = layers[i]

        if i == 0:
            # Layer 0 either starts the animation or follows the last layer on
            # looping, hence the last layer's disposal method applies
            fill = (
                self._background
                if layers[-1].disposal is Disposal.BACKGROUND
                else TRANSPARENT
            )
            self._canvas = Image.new("RGBA", self._size, fill)
            self._saved = None
        else:
            self._dispose(layers[i - 1])

        if layer.disposal is Disposal.PREVIOUS:
            self._saved = self._canvas.copy()

        self._draw(layer)

        return self._canvas.copy()

    @staticmethod
    def _canvas_size(gif: DecodedGIF) -> Tuple[int, int]:
        width, height = gif.width, gif.height
        for layer in gif.layers:
            _, _, right, bottom = layer.box
            width = max(width, right)
            height = max(height, bottom)
        return (width, height)

    def _dispose(self, layer: Layer) -> None:
        """Applies the disposal method of the given (previous) layer."""
        disposal = layer.disposal
        if disposal is Disposal.BACKGROUND:
            self._canvas.paste(self._background, (0, 0, *self._size))
        elif disposal is Disposal.PREVIOUS:
            # `None` only if the layer was not rendered via this instance
            if self._saved is not None:
                self._canvas = self._saved
                self._saved = None
        # UNSPECIFIED and NONE leave the canvas as it is

    def _draw(self, layer: Layer) -> None:
        """Draws a layer onto the canvas, within its own rectangle."""
        if not (layer.width and layer.height):
            return

        size = (layer.width, layer.height)
        image = Image.frombytes("P", size, layer.indices)
        image.putpalette([channel for rgb in layer.palette for channel in rgb])
        image = image.convert("RGBA")

        if layer.transparent_index is None:
            self._canvas.paste(image, (layer.left, layer.top))
        else:
            table = bytearray(b"\xff" * 256)
            table[layer.transparent_index] = 0
            mask = Image.frombytes("L", size, layer.indices.translate(table))
            self._canvas.paste(image, (layer.left, layer.top), mask)


def composite(gif: DecodedGIF) -> List[Image.Image]:
    """Convenience function; same as ``GIFCompositor(gif).composite()``."""
    return GIFCompositor(gif).composite()


_logger = _logging.getLogger(__name__)
