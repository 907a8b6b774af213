"""Conversion of bitmaps into ANSI-colored text"""

from __future__ import annotations

__all__ = ("Encoder",)

from typing import Dict, Tuple

from PIL import Image

from .color import Quantizer
from .ctlseqs import SGR_NORMAL_b
from .framebuffer import FrameBuffer

MAX_CACHED_CODES = 1 << 16


class Encoder:
    """Encodes bitmaps as lines of colored spaces, one space per pixel.

    Args:
        quantizer: Maps pixel colors to escape sequences.
        pad: Written at both the start and the end of every line.

    Each line is of the form::

        <pad> (<color-code>? " ")* <pad> <reset> "\\n"

    where a color code is written only when it differs from the last one written,
    even across lines.

    The quantized codes are memoized per instance, which is safe since quantizers
    are immutable. An instance should be used from one thread at a time.
    """

    def __init__(self, quantizer: Quantizer, pad: str = "") -> None:
        self._quantizer = quantizer
        self._pad = pad.encode()
        self._codes: Dict[Tuple[int, int, int, int], bytes] = {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(quantizer={self._quantizer!r}, pad={self._pad!r})"
        )

    def encode(self, image: Image.Image, buffer: FrameBuffer) -> int:
        """Writes an encoded bitmap into a buffer.

        Args:
            image: The bitmap. Converted to RGBA, if not already.
            buffer: The buffer to write into. Expected to be empty.

        Returns:
            The number of lines written.
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")

        # NOTE:
        # It's more efficient to write separate strings to the buffer separately
        # than concatenate and write together.
        buf_write = buffer.write  # Eliminate attribute resolution cost
        codes = self._codes
        quantize = self._quantizer.quantize
        pad = self._pad
        reset = SGR_NORMAL_b

        width, height = image.size
        data = image.tobytes()
        row_size = width * 4
        last_code = None

        for y in range(height):
            row = data[y * row_size : (y + 1) * row_size]
            buf_write(pad)
            for x in range(0, row_size, 4):
                pixel = tuple(row[x : x + 4])
                code = codes.get(pixel)
                if code is None:
                    if len(codes) >= MAX_CACHED_CODES:
                        codes.clear()
                    code = codes[pixel] = quantize(pixel).encode()
                if code != last_code:
                    buf_write(code)
                    last_code = code
                buf_write(b" ")
            buf_write(pad)
            buf_write(reset)
            buf_write(b"\n")
            last_code = reset

        return height
